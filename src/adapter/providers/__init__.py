from .base import LangChainContentProvider
from .openai_provider import OpenAIContentProvider
from .anthropic_provider import AnthropicContentProvider
from .factory import build_provider_registry

__all__ = [
    "LangChainContentProvider",
    "OpenAIContentProvider",
    "AnthropicContentProvider",
    "build_provider_registry",
]
