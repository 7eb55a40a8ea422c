import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.adapter.services.message_queue import InMemoryMessageQueue
from src.app.services.content_provider import ContentProvider, FAQItem, ProviderError
from src.app.services.provider_registry import ProviderRegistry
from src.depends import get_message_queue, get_provider_registry, get_session


class StubContentProvider(ContentProvider):
    """Deterministic provider; titles containing "fail" raise ProviderError"""

    name = "stub"

    async def generate_title_ideas(self, topic, count):
        return [f"{topic} idea {i + 1}" for i in range(count)]

    async def generate_outline(self, title, config):
        if "fail" in title.lower():
            raise ProviderError(self.name, "generate_outline", "upstream error")
        return ["Introduction", "Details", "Conclusion"]

    async def expand_section(self, title, section, config):
        return " ".join(["word"] * 100)

    async def generate_faqs(self, title, content, count):
        return [FAQItem(question=f"Question {i + 1}?", answer="Answer.") for i in range(count)]


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database so concurrent sessions use separate connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def queue():
    return InMemoryMessageQueue()


@pytest_asyncio.fixture
async def registry():
    registry = ProviderRegistry(default="gpt4")
    registry.register("gpt4", StubContentProvider())
    return registry


@pytest_asyncio.fixture
async def client(session_factory, queue, registry):
    """Test client with session, queue and provider overrides"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_message_queue] = lambda: queue
    app.dependency_overrides[get_provider_registry] = lambda: registry

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
