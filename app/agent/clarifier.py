"""
Clarifier: ask the user to be more specific, never answer.

The model writes the question from a fixed option list; if it is unavailable,
fails, returns nothing, or misses its budget, the catalog's static text is used.
"""

import logging
from typing import Protocol

from app.core.catalog import ClarifyCatalog
from app.core.deadline import call_with_budget

logger = logging.getLogger(__name__)


class ChatModel(Protocol):
    @property
    def configured(self) -> bool: ...

    async def complete(self, system: str, user: str) -> str: ...


def build_system_prompt(catalog: ClarifyCatalog) -> str:
    """Instruction that limits the model to asking for clarification from the catalog's options."""
    return f"""
You are a Slack assistant for {catalog.domain}. Your ONLY job is to ask for clarification.
Do NOT provide answers, instructions, policies, or facts. Do NOT reference external knowledge or the web.
Write one brief line plus 4–7 bullet options drawn ONLY from the provided list.
If the user's query already matches one option, propose the next most useful disambiguator (e.g., buyer vs seller, first-contact vs follow-up).
Keep it under 80 words total. Tone: friendly, direct. Slack-friendly formatting. Output plain text only.
Options list to use: {"; ".join(catalog.options)}.
"""


class Clarifier:
    def __init__(self, model: ChatModel, catalog: ClarifyCatalog) -> None:
        self._model = model
        self._catalog = catalog
        self._system_prompt = build_system_prompt(catalog)

    @property
    def fallback_text(self) -> str:
        return self._catalog.fallback_text()

    async def clarify(self, query: str, budget_s: float) -> str:
        """Return a clarifying message for query within budget_s seconds."""
        logger.info("[clarifier:clarify] IN  query=%r budget_ms=%.0f", query, budget_s * 1000)
        if not self._model.configured:
            logger.info("[clarifier:clarify] OUT no model credential; static fallback")
            return self.fallback_text
        outcome = await call_with_budget(
            self._model.complete(self._system_prompt, f'User query: "{query}"'),
            budget_s,
            label="clarifier",
        )
        text = outcome.value.strip() if outcome.ok and isinstance(outcome.value, str) else ""
        if not text:
            logger.info(
                "[clarifier:clarify] OUT static fallback timed_out=%s error=%s",
                outcome.timed_out,
                outcome.error,
            )
            return self.fallback_text
        logger.info("[clarifier:clarify] OUT model text_len=%d", len(text))
        return text
