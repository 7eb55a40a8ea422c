"""Provider Registry

Explicit registry of content provider adapters, built once at process
startup and passed to the orchestrator and the worker pool.
"""

import logging
from typing import Callable, Union
from .content_provider import ContentProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], ContentProvider]


class ProviderRegistry:
    """
    Maps model identifiers (e.g. "gpt4", "claude") to content providers

    Providers are registered as instances or zero-argument factories;
    factories are called on first use so that a backend without
    credentials only fails when it is actually selected.
    """

    def __init__(self, default: str):
        self.default = default
        self._factories: dict[str, ProviderFactory] = {}
        self._instances: dict[str, ContentProvider] = {}

    def register(self, name: str, provider: Union[ContentProvider, ProviderFactory]) -> None:
        key = name.lower()
        if isinstance(provider, ContentProvider):
            self._instances[key] = provider
            self._factories.pop(key, None)
        else:
            self._factories[key] = provider
            self._instances.pop(key, None)

    def names(self) -> list[str]:
        return sorted(set(self._factories) | set(self._instances))

    def is_registered(self, name: str) -> bool:
        key = name.lower()
        return key in self._instances or key in self._factories

    def get(self, name: str) -> ContentProvider:
        """
        Resolve a provider, falling back to the default backend

        Raises:
            KeyError: If neither name nor the default backend is registered
        """
        key = (name or "").lower()
        if not self.is_registered(key):
            logger.warning(f"Content provider '{name}' not registered, falling back to '{self.default}'")
            key = self.default.lower()
            if not self.is_registered(key):
                raise KeyError(f"Default content provider '{self.default}' is not registered")

        if key not in self._instances:
            # A failed build leaves the factory registered for the next call
            self._instances[key] = self._factories[key]()
            del self._factories[key]
        return self._instances[key]
