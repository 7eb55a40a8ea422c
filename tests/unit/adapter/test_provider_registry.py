"""Unit tests for ProviderRegistry and the registry wiring"""

import pytest
from unittest.mock import MagicMock

from src.adapter.providers import AnthropicContentProvider, OpenAIContentProvider, build_provider_registry
from src.app.services.content_provider import ContentProvider
from src.app.services.provider_registry import ProviderRegistry


def make_provider(name: str) -> ContentProvider:
    provider = MagicMock(spec=ContentProvider)
    provider.name = name
    return provider


class TestProviderRegistry:
    def test_resolves_registered_instance(self):
        registry = ProviderRegistry(default="gpt4")
        gpt4 = make_provider("gpt4")
        registry.register("gpt4", gpt4)

        assert registry.get("GPT4") is gpt4

    def test_unknown_model_falls_back_to_default(self):
        registry = ProviderRegistry(default="gpt4")
        gpt4 = make_provider("gpt4")
        registry.register("gpt4", gpt4)

        assert registry.get("llama") is gpt4

    def test_missing_default_raises(self):
        registry = ProviderRegistry(default="gpt4")

        with pytest.raises(KeyError):
            registry.get("claude")

    def test_factory_is_called_once_on_first_use(self):
        registry = ProviderRegistry(default="claude")
        calls = []

        def factory():
            calls.append(1)
            return make_provider("claude")

        registry.register("claude", factory)

        assert calls == []
        first = registry.get("claude")
        second = registry.get("claude")
        assert first is second
        assert calls == [1]

    def test_failed_factory_stays_registered(self):
        """
        Given: A default backend whose first construction fails
        When: The provider is requested again
        Then: The factory is retried and the provider resolves
        """
        registry = ProviderRegistry(default="gpt4")
        gpt4 = make_provider("gpt4")
        attempts = []

        def factory():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("OPENAI_API_KEY is not set")
            return gpt4

        registry.register("gpt4", factory)

        with pytest.raises(RuntimeError):
            registry.get("gpt4")
        assert registry.is_registered("gpt4")

        assert registry.get("claude") is gpt4
        assert registry.get("gpt4") is gpt4
        assert len(attempts) == 2


class TestBuildProviderRegistry:
    def test_registers_configured_models(self):
        app_config = MagicMock()
        app_config.DEFAULT_AI_MODEL = "gpt4"
        app_config.AI_MODELS = {
            "gpt4": ["openai", "gpt-4-turbo"],
            "claude": ["anthropic", "claude-3-sonnet-20240229"],
        }
        app_config.OPENAI_API_KEY = "sk-test"
        app_config.OPENAI_BASE_URL = None
        app_config.ANTHROPIC_API_KEY = "sk-ant-test"
        app_config.PROVIDER_TIMEOUT_SECONDS = 30
        app_config.PROVIDER_MAX_RETRIES = 1

        registry = build_provider_registry(app_config)

        assert registry.names() == ["claude", "gpt4"]
        assert isinstance(registry.get("gpt4"), OpenAIContentProvider)
        claude = registry.get("claude")
        assert isinstance(claude, AnthropicContentProvider)
        assert claude.name == "claude"
