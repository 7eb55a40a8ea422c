from .unit_of_work import UnitOfWork
from .message_queue import MessageQueue, QueueMessage, QueueUnavailableError
from .content_provider import ContentProvider, FAQItem, ProviderError
from .image_service import ImageService, ImageGenerationError
from .provider_registry import ProviderRegistry

__all__ = [
    "UnitOfWork",
    "MessageQueue",
    "QueueMessage",
    "QueueUnavailableError",
    "ContentProvider",
    "FAQItem",
    "ProviderError",
    "ImageService",
    "ImageGenerationError",
    "ProviderRegistry",
]
