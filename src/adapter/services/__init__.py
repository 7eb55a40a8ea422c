from .unit_of_work import SqlAlchemyUnitOfWork
from .message_queue import RedisMessageQueue, InMemoryMessageQueue
from .image_service import FluxImageService, PlaceholderImageService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "RedisMessageQueue",
    "InMemoryMessageQueue",
    "FluxImageService",
    "PlaceholderImageService",
]
