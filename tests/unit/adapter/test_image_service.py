"""Unit tests for the image services"""

import json
import httpx
import pytest

from src.adapter.services.image_service import FluxImageService, PlaceholderImageService
from src.app.services.image_service import ImageGenerationError


def flux_with(handler) -> FluxImageService:
    return FluxImageService("flux-key", base_url="https://flux.test/v1/images", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestFluxImageService:
    async def test_posts_generation_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"images": [{"url": "https://img/1.jpg"}, "https://img/2.jpg"]})

        urls = await flux_with(handler).generate_images("Coffee", 2)

        assert urls == ["https://img/1.jpg", "https://img/2.jpg"]
        assert seen["auth"] == "Bearer flux-key"
        assert seen["body"] == {
            "prompt": "Coffee",
            "style": "photographic",
            "width": 1024,
            "height": 768,
            "num_images": 2,
        }

    async def test_http_error(self):
        service = flux_with(lambda request: httpx.Response(500, json={"error": "boom"}))

        with pytest.raises(ImageGenerationError):
            await service.generate_images("Coffee", 1)

    async def test_no_images(self):
        service = flux_with(lambda request: httpx.Response(200, json={"images": []}))

        with pytest.raises(ImageGenerationError, match="No images"):
            await service.generate_images("Coffee", 1)

    @pytest.mark.parametrize("images", [[{"href": "https://img/1.jpg"}], [None], [{"url": None}]])
    async def test_malformed_image_entry(self, images):
        service = flux_with(lambda request: httpx.Response(200, json={"images": images}))

        with pytest.raises(ImageGenerationError, match="malformed"):
            await service.generate_images("Coffee", 1)


@pytest.mark.asyncio
class TestPlaceholderImageService:
    async def test_returns_requested_count(self):
        urls = await PlaceholderImageService().generate_images("Coffee", 3)

        assert len(urls) == 3
        assert len(set(urls)) == 3
        assert all(url.startswith("https://example.com/placeholder-image-") for url in urls)
