"""Article Assembler

Composes one article from provider calls:
takeaways block, one section per outline entry, FAQ block, images.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from src.app.services.content_provider import ContentProvider, ProviderError
from src.app.services.image_service import ImageService, ImageGenerationError
from src.domain.generation_config import GenerationConfig

logger = logging.getLogger(__name__)

IMAGE_POSITIONS = ["beginning", "middle", "end"]


@dataclass
class AssembledArticle:
    title: str
    content: str
    word_count: int
    images: list[dict[str, Any]] = field(default_factory=list)


def count_words(text: str) -> int:
    return len(text.split())


class ArticleAssembler:
    """
    Builds article content with a given provider

    Provider failures propagate as ProviderError (the caller records the
    title as failed). Image failures are logged and the article keeps
    no images.
    """

    def __init__(self, image_service: Optional[ImageService] = None):
        self.image_service = image_service

    async def assemble(self, provider: ContentProvider, title: str, config: GenerationConfig) -> AssembledArticle:
        outline = await provider.generate_outline(title, config)
        if not outline:
            raise ProviderError(provider.name, "generate_outline", "empty outline")

        parts: list[str] = []

        if config.takeaways > 0:
            parts.append("## Key Takeaways\n\n" + "\n".join(f"- {point}" for point in self._takeaways(title, outline, config.takeaways)))

        for section in outline:
            body = await provider.expand_section(title, section, config)
            parts.append(f"## {section}\n\n{body.strip()}")

        if config.faq_items > 0:
            faqs = await provider.generate_faqs(title, "\n\n".join(parts), config.faq_items)
            if faqs:
                block = "\n\n".join(f"### {faq.question}\n\n{faq.answer}" for faq in faqs)
                parts.append(f"## Frequently Asked Questions\n\n{block}")

        content = "\n\n".join(parts)
        images = await self._attach_images(title, config)

        return AssembledArticle(
            title=title,
            content=content,
            word_count=count_words(content),
            images=images,
        )

    def _takeaways(self, title: str, outline: list[str], count: int) -> list[str]:
        # Intentional placeholders: outline headings, then generic key points up to count
        points = list(outline[:count])
        for i in range(len(points), count):
            points.append(f"Key point {i + 1} about {title}")
        return points

    async def _attach_images(self, title: str, config: GenerationConfig) -> list[dict[str, Any]]:
        count = config.requested_images
        if count == 0 or self.image_service is None:
            return []

        try:
            urls = await self.image_service.generate_images(title, count, style=config.photo_style)
        except ImageGenerationError as e:
            logger.warning(f"Image generation failed for '{title}', continuing without images: {e}")
            return []

        images = []
        for i, url in enumerate(urls[:count]):
            if i == 0:
                images.append({
                    "url": url,
                    "alt": f"Featured image for {title}",
                    "position": "featured",
                    "caption": f"Image related to {title}",
                })
            else:
                images.append({
                    "url": url,
                    "alt": f"Additional image {i} for {title}",
                    "position": IMAGE_POSITIONS[i % len(IMAGE_POSITIONS)],
                    "caption": f"Additional image related to {title}",
                })
        return images
