"""
Clarification catalog: which queries count as too generic to search, and which
options the clarifier may offer. Content is tenant-specific, so it can be
replaced with a JSON file (CLARIFY_CATALOG_PATH) without code changes.
"""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.errors import CatalogError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def _compile_generic(phrases: tuple[str, ...]) -> re.Pattern[str] | None:
    """Compile the generic-intent matcher once per distinct phrase tuple."""
    alternatives = "|".join(re.escape(p.strip()) for p in phrases if p.strip())
    if not alternatives:
        return None
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


class ClarifyCatalog(BaseModel):
    """Generic-intent phrases plus the option lists used by the clarifier and answer hint."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field("a real estate team", description="Who the assistant serves; used in the model instruction.")
    generic_phrases: tuple[str, ...] = Field(
        ..., min_length=1, description="Phrases that mark a query as too generic to search."
    )
    options: tuple[str, ...] = Field(
        ..., min_length=4, description="Options the model may offer (prompt list)."
    )
    fallback_intro: str = Field(..., min_length=1, description="First line of the static clarification text.")
    fallback_options: tuple[str, ...] = Field(..., min_length=1, description="Bullets of the static clarification text.")
    answer_hint_examples: tuple[str, ...] = Field(
        default=(), description="Examples named in the 'If this isn't it' line of an answer."
    )

    def generic_pattern(self) -> re.Pattern[str] | None:
        return _compile_generic(self.generic_phrases)

    def is_generic(self, query: str) -> bool:
        pattern = self.generic_pattern()
        return bool(pattern and pattern.search(query or ""))

    def fallback_text(self) -> str:
        bullets = "\n".join(f"• {o}" for o in self.fallback_options)
        return f"{self.fallback_intro}\n{bullets}"

    def answer_hint(self) -> str:
        if not self.answer_hint_examples:
            return "If this isn’t it, tell me more specifically what you need."
        examples = ", ".join(f"*{e}*" for e in self.answer_hint_examples)
        return f"If this isn’t it, tell me the specific lead source (e.g., {examples})."


DEFAULT_CATALOG = ClarifyCatalog(
    domain="a real estate team",
    generic_phrases=(
        "how to work a lead",
        "lead process",
        "work a lead",
        "buyer lead",
        "seller lead",
    ),
    options=(
        "Google LSA – Call",
        "Google LSA – Message",
        "Google PPC – Website",
        "Meta Lead Form",
        "RealScout",
        "Open House",
        "Sign Call",
        "Referral",
        "Zillow/Flex",
        "Other",
    ),
    fallback_intro=(
        "There isn’t a document with that information directly. "
        "Can you be more specific so I can find what you need?"
    ),
    fallback_options=(
        "Google LSA – Message",
        "Google LSA – Call",
        "Google PPC – Website",
        "Meta Lead Form",
        "RealScout",
        "Open House / Sign Call",
        "Referral or Zillow/Flex",
    ),
    answer_hint_examples=("Google LSA – Message", "Google PPC – Website", "Zillow/Flex"),
)


def load_catalog(path: str | None) -> ClarifyCatalog:
    """Load a catalog from a JSON file, or return DEFAULT_CATALOG when path is empty."""
    if not path:
        return DEFAULT_CATALOG
    file_path = Path(path)
    logger.info("[catalog:load_catalog] IN  path=%s", file_path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"Cannot read clarify catalog {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Clarify catalog {file_path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Clarify catalog {file_path} must be a JSON object")
    try:
        catalog = ClarifyCatalog(**data)
    except ValidationError as e:
        raise CatalogError(f"Invalid clarify catalog {file_path}: {e}") from e
    logger.info(
        "[catalog:load_catalog] OUT generic_phrases=%d options=%d",
        len(catalog.generic_phrases),
        len(catalog.options),
    )
    return catalog
