from functools import lru_cache
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.providers import build_provider_registry
from src.adapter.repositories import (
    SqlAlchemyCreditAccountRepository,
    SqlAlchemyLedgerEntryRepository,
)
from src.adapter.services.image_service import FluxImageService, PlaceholderImageService
from src.adapter.services.message_queue import RedisMessageQueue, InMemoryMessageQueue
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.image_service import ImageService
from src.app.services.message_queue import MessageQueue
from src.app.services.provider_registry import ProviderRegistry
from src.app.use_cases.credits.credit_ledger import CreditLedger, OveragePolicy

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def build_credit_ledger(session: AsyncSession) -> CreditLedger:
    return CreditLedger(
        SqlAlchemyCreditAccountRepository(session),
        SqlAlchemyLedgerEntryRepository(session),
        overage_policy=OveragePolicy(ApplicationConfig.SETTLEMENT_OVERAGE_POLICY),
    )


def build_message_queue(config=ApplicationConfig) -> MessageQueue:
    if config.QUEUE_BACKEND == "memory":
        return InMemoryMessageQueue()
    return RedisMessageQueue(config.REDIS_URL, queue_name=config.QUEUE_NAME)


def build_image_service(config=ApplicationConfig) -> Optional[ImageService]:
    if config.IMAGE_BACKEND == "flux":
        return FluxImageService(config.FLUX_API_KEY, base_url=config.FLUX_API_URL)
    if config.IMAGE_BACKEND == "placeholder":
        return PlaceholderImageService()
    return None


@lru_cache
def get_message_queue() -> MessageQueue:
    return build_message_queue()


@lru_cache
def get_provider_registry() -> ProviderRegistry:
    return build_provider_registry(ApplicationConfig)
