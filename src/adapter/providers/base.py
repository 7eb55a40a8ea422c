"""LangChain-backed content provider

Shared plumbing for the chat-model adapters: one prompt per call,
backend failures translated to ProviderError.
"""

import logging
import re
from typing import Any
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage
from src.app.services.content_provider import ContentProvider, ProviderError
from src.domain.generation_config import GenerationConfig
from . import prompts

logger = logging.getLogger(__name__)

_LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)]|#+)\s*")


def message_text(message: BaseMessage) -> str:
    """Plain text of a chat response (string content or a list of content blocks)"""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def parse_lines(text: str) -> list[str]:
    """Non-empty lines with bullets, numbering, headings marks and wrapping quotes removed"""
    items = []
    for line in text.splitlines():
        item = _LIST_MARKER.sub("", line).strip().strip('"').strip("*").strip()
        if item:
            items.append(item)
    return items


class LangChainContentProvider(ContentProvider):
    """
    ContentProvider over a LangChain chat model

    Subclasses implement generate_faqs, where the backends differ in how
    structured output is requested and parsed.
    """

    def __init__(self, llm: BaseChatModel, name: str):
        self.llm = llm
        self.name = name

    async def _complete(self, operation: str, prompt: str, **params: Any) -> str:
        try:
            model = self.llm.bind(**params) if params else self.llm
            response = await model.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            logger.error(f"{self.name}.{operation} call failed: {e}")
            raise ProviderError(self.name, operation, str(e)) from e

        text = message_text(response).strip()
        if not text:
            raise ProviderError(self.name, operation, "empty response")
        return text

    async def generate_title_ideas(self, topic: str, count: int) -> list[str]:
        text = await self._complete(
            "generate_title_ideas",
            prompts.title_ideas_prompt(topic, count),
            temperature=prompts.TITLE_IDEAS_TEMPERATURE,
            max_tokens=prompts.TITLE_IDEAS_MAX_TOKENS,
        )
        return parse_lines(text)[:count]

    async def generate_outline(self, title: str, config: GenerationConfig) -> list[str]:
        text = await self._complete(
            "generate_outline",
            prompts.outline_prompt(title, config),
            temperature=prompts.DEFAULT_TEMPERATURE,
            max_tokens=prompts.OUTLINE_MAX_TOKENS,
        )
        return parse_lines(text)

    async def expand_section(self, title: str, section: str, config: GenerationConfig) -> str:
        return await self._complete(
            "expand_section",
            prompts.section_prompt(title, section, config),
            temperature=prompts.DEFAULT_TEMPERATURE,
            max_tokens=prompts.SECTION_MAX_TOKENS[config.length],
        )
