"""Content Provider Interface

Uniform generation capability contract. One adapter per backend
implements it against its own API and prompt conventions.
"""

from abc import ABC, abstractmethod
from pydantic import BaseModel
from src.domain.generation_config import GenerationConfig


class ProviderError(Exception):
    """Raised by adapters when a backend call fails or returns unusable output"""

    def __init__(self, provider: str, operation: str, reason: str):
        self.provider = provider
        self.operation = operation
        self.reason = reason
        super().__init__(f"{provider}.{operation} failed: {reason}")


class FAQItem(BaseModel):
    question: str
    answer: str


class ContentProvider(ABC):
    """
    Generation backend contract

    Implementations:
    - OpenAIContentProvider (gpt4, gpt3)
    - AnthropicContentProvider (claude)
    """

    name: str = "provider"

    @abstractmethod
    async def generate_title_ideas(self, topic: str, count: int) -> list[str]:
        pass

    @abstractmethod
    async def generate_outline(self, title: str, config: GenerationConfig) -> list[str]:
        """Ordered section headings for the article"""
        pass

    @abstractmethod
    async def expand_section(self, title: str, section: str, config: GenerationConfig) -> str:
        pass

    @abstractmethod
    async def generate_faqs(self, title: str, content: str, count: int) -> list[FAQItem]:
        pass
