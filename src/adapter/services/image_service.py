"""Image Service Implementations"""

import logging
from typing import Optional
import httpx
from src.app.services.image_service import ImageService, ImageGenerationError
from src.domain.base import generate_uuid

logger = logging.getLogger(__name__)


class FluxImageService(ImageService):
    """
    Image generation through the FLUX HTTP API

    POSTs one request for all images of an article.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.flux.ai/v1/images/generations",
        timeout: float = 60.0,
        width: int = 1024,
        height: int = 768,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.width = width
        self.height = height
        self.transport = transport

    async def generate_images(self, prompt: str, count: int, style: Optional[str] = None) -> list[str]:
        payload = {
            "prompt": prompt,
            "style": style or "photographic",
            "width": self.width,
            "height": self.height,
            "num_images": count,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.base_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise ImageGenerationError(f"FLUX request failed: {e}") from e
        except ValueError as e:
            raise ImageGenerationError(f"FLUX returned invalid JSON: {e}") from e

        images = data.get("images") if isinstance(data, dict) else None
        if not images:
            raise ImageGenerationError("No images returned from FLUX API")

        try:
            urls = [img["url"] if isinstance(img, dict) else img for img in images][:count]
        except (KeyError, TypeError) as e:
            raise ImageGenerationError(f"FLUX returned a malformed image entry: {e!r}") from e
        if not all(isinstance(url, str) and url for url in urls):
            raise ImageGenerationError(f"FLUX returned a malformed image entry: {urls!r}")

        logger.info(f"Generated {len(urls)} image(s) with FLUX for prompt: {prompt}")
        return urls


class PlaceholderImageService(ImageService):
    """Deterministic placeholder URLs, for development without an image backend"""

    def __init__(self, base_url: str = "https://example.com/placeholder-image"):
        self.base_url = base_url.rstrip("/")

    async def generate_images(self, prompt: str, count: int, style: Optional[str] = None) -> list[str]:
        batch = generate_uuid()
        return [f"{self.base_url}-{batch}-{i}.jpg" for i in range(count)]
