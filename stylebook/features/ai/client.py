"""LLM provider clients.

The stylist takes any object with a `complete(system, user) -> str` method,
so tests and alternative providers can be injected in place of Groq.
"""

import logging
from typing import Optional, Protocol

import groq

from stylebook.core.config import settings

logger = logging.getLogger("stylebook")


class CompletionClient(Protocol):
    def complete(self, system: str, user: str) -> str:
        ...


class GroqCompletionClient:
    """Blocking Groq chat completion with a bounded timeout and no retries."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        temperature: float = 0.4,
    ):
        self.model = model or settings.GROQ_MODEL
        self.max_tokens = max_tokens or settings.AI_MAX_TOKENS
        self.temperature = temperature
        self._client = groq.Groq(
            api_key=api_key or settings.GROQ_API_KEY,
            timeout=timeout or settings.AI_TIMEOUT_SECONDS,
            max_retries=0,
        )

    def complete(self, system: str, user: str) -> str:
        completion = self._client.chat.completions.create(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return completion.choices[0].message.content or ""


def build_completion_client() -> Optional[CompletionClient]:
    """Groq client for the app's lifetime, or None when no API key is configured."""
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY not set; AI features will return ai_unavailable")
        return None
    return GroqCompletionClient()
