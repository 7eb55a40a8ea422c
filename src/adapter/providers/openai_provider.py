"""OpenAI-convention content provider (gpt4, gpt3)"""

import json
import logging
from src.app.services.content_provider import FAQItem
from . import prompts
from .base import LangChainContentProvider

logger = logging.getLogger(__name__)


class OpenAIContentProvider(LangChainContentProvider):
    """FAQs are requested in JSON-object mode as {"faqs": [...]}"""

    async def generate_faqs(self, title: str, content: str, count: int) -> list[FAQItem]:
        text = await self._complete(
            "generate_faqs",
            prompts.faq_prompt(title, content, count, json_key="faqs"),
            temperature=prompts.DEFAULT_TEMPERATURE,
            max_tokens=prompts.FAQ_MAX_TOKENS,
            response_format={"type": "json_object"},
        )
        try:
            items = json.loads(text).get("faqs") or []
            return [FAQItem(**item) for item in items[:count]]
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Could not parse FAQ JSON from {self.name}: {e}")
            return []
