"""Image Service Interface

Image generation for articles. Attachment is best effort: callers treat
ImageGenerationError as non-fatal for the article.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ImageGenerationError(Exception):
    pass


class ImageService(ABC):
    @abstractmethod
    async def generate_images(self, prompt: str, count: int, style: Optional[str] = None) -> list[str]:
        """
        Generate images for a prompt

        Returns:
            List of image URLs (may be shorter than count)

        Raises:
            ImageGenerationError: If the backend call fails
        """
        pass
