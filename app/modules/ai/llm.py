"""Thin wrapper over the OpenAI chat-completions SDK."""

import json
import logging
import re
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from app.config import settings

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LLMError(Exception):
    pass


def parse_json_content(content: str) -> Any:
    """Decode a JSON answer, tolerating a surrounding markdown code fence"""
    text = (content or "").strip()
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    return json.loads(text)


class LLMClient:
    def __init__(self, api_key: str, model: Optional[str] = None, timeout: Optional[float] = None):
        if not api_key:
            raise ValueError("OPENAI_API_KEY not set in environment variables")
        self.client = OpenAI(api_key=api_key, timeout=timeout or settings.openai_timeout)
        self.model = model or settings.openai_model

    def complete(self, system_prompt: str, user_prompt: str,
                 temperature: float = None, max_tokens: int = None) -> str:
        """Single chat completion; returns the assistant message text"""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=settings.openai_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.openai_max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {str(e)}")
            raise LLMError(str(e))

        content = response.choices[0].message.content or ""
        logger.debug(f"OpenAI raw response: {content}")
        return content.strip()


def get_llm_client() -> Optional[LLMClient]:
    """LLM client when an API key is configured, otherwise None (rule-based fallbacks apply)"""
    if not settings.openai_api_key:
        return None
    return LLMClient(settings.openai_api_key)
