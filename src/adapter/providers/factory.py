"""Provider registry wiring

Maps the model identifiers accepted in a generation configuration to
LangChain chat models and content provider adapters.
"""

from dataclasses import dataclass
from typing import Callable, Optional
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI
from src.app.services.content_provider import ContentProvider
from src.app.services.provider_registry import ProviderRegistry
from .anthropic_provider import AnthropicContentProvider
from .openai_provider import OpenAIContentProvider


@dataclass
class ChatModelConfig:
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    timeout: float = 120.0
    max_retries: int = 2


_CHAT_FACTORIES: dict[str, Callable[[ChatModelConfig], BaseChatModel]] = {
    "openai": lambda cfg: ChatOpenAI(
        model=cfg.model,
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        temperature=cfg.temperature,
        timeout=cfg.timeout,
        max_retries=cfg.max_retries,
    ),
    "anthropic": lambda cfg: ChatAnthropic(
        model=cfg.model,
        api_key=cfg.api_key,
        temperature=cfg.temperature,
        timeout=cfg.timeout,
        max_retries=cfg.max_retries,
    ),
}

_ADAPTERS: dict[str, Callable[[BaseChatModel, str], ContentProvider]] = {
    "openai": OpenAIContentProvider,
    "anthropic": AnthropicContentProvider,
}


def create_chat_model(backend: str, config: ChatModelConfig) -> BaseChatModel:
    try:
        factory = _CHAT_FACTORIES[backend]
    except KeyError as exc:
        raise ValueError(f"unsupported chat backend: {backend}") from exc
    return factory(config)


def create_provider(name: str, backend: str, config: ChatModelConfig) -> ContentProvider:
    return _ADAPTERS[backend](create_chat_model(backend, config), name)


def build_provider_registry(app_config) -> ProviderRegistry:
    """
    Registry with one lazy factory per configured model identifier

    Args:
        app_config: ApplicationConfig (API keys, model names, default identifier)
    """
    registry = ProviderRegistry(default=app_config.DEFAULT_AI_MODEL)

    for name, (backend, model) in app_config.AI_MODELS.items():
        config = ChatModelConfig(
            model=model,
            api_key=app_config.OPENAI_API_KEY if backend == "openai" else app_config.ANTHROPIC_API_KEY,
            base_url=app_config.OPENAI_BASE_URL if backend == "openai" else None,
            timeout=app_config.PROVIDER_TIMEOUT_SECONDS,
            max_retries=app_config.PROVIDER_MAX_RETRIES,
        )
        registry.register(name, lambda n=name, b=backend, c=config: create_provider(n, b, c))

    return registry
