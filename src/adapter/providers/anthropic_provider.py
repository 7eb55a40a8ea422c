"""Anthropic-convention content provider (claude)"""

import json
import logging
import re
from src.app.services.content_provider import FAQItem
from . import prompts
from .base import LangChainContentProvider

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL)
_QUESTION = re.compile(r"question[\s\S]*?:\s*[\"'](.+?)[\"']", re.IGNORECASE)
_ANSWER = re.compile(r"answer[\s\S]*?:\s*[\"'](.+?)[\"']", re.IGNORECASE)


def extract_faqs(text: str, count: int) -> list[FAQItem]:
    """JSON array embedded in free text, else question/answer pairs matched field by field"""
    match = _JSON_ARRAY.search(text)
    if match:
        try:
            return [FAQItem(**item) for item in json.loads(match.group(0))[:count]]
        except (ValueError, TypeError) as e:
            logger.warning(f"Embedded FAQ array is not valid JSON, falling back to field matching: {e}")

    questions = _QUESTION.findall(text)
    answers = _ANSWER.findall(text)
    return [
        FAQItem(question=q, answer=a)
        for q, a in list(zip(questions, answers))[:count]
    ]


class AnthropicContentProvider(LangChainContentProvider):
    """No JSON mode: the FAQ array is extracted from the text response"""

    async def generate_faqs(self, title: str, content: str, count: int) -> list[FAQItem]:
        text = await self._complete(
            "generate_faqs",
            prompts.faq_prompt(title, content, count),
            temperature=prompts.DEFAULT_TEMPERATURE,
            max_tokens=prompts.FAQ_MAX_TOKENS,
        )
        return extract_faqs(text, count)
