"""
Clarifier LLM: OpenAI chat completions (async).

Only ever asked to write a clarifying question; never given document content.
"""

import logging

from openai import AsyncOpenAI

from app.core.config import (
    CLARIFIER_MAX_TOKENS,
    CLARIFIER_TEMPERATURE,
    CLARIFIER_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)

logger = logging.getLogger(__name__)


class OpenAIChat:
    """One-shot system + user completion against OpenAI. Raises on any API error."""

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        model: str = OPENAI_LLM_MODEL,
        temperature: float = CLARIFIER_TEMPERATURE,
        max_tokens: int = CLARIFIER_MAX_TOKENS,
        timeout: float = CLARIFIER_TIMEOUT,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0) if api_key else None

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(self, system: str, user: str) -> str:
        """Return the stripped completion text ('' when the model sent no content)."""
        if self._client is None:
            raise RuntimeError("OPENAI_API_KEY is not set")
        logger.info("[llm:openai] IN  model=%s system_len=%d user_len=%d", self.model, len(system), len(user))
        response = await self._client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        msg = response.choices[0].message if response.choices else None
        if not msg or not getattr(msg, "content", None):
            return ""
        out = (msg.content or "").strip()
        logger.info("[llm:openai] OUT response_len=%d", len(out))
        logger.debug("[llm:openai] OUT response_full=%r", out)
        return out
