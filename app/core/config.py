"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Slite (document search backend)
SLITE_API_KEY: str = os.getenv("SLITE_API_KEY", "").strip()
SLITE_BASE_URL: str = (
    os.getenv("SLITE_BASE_URL", "https://api.slite.com").strip().rstrip("/")
    or "https://api.slite.com"
)

# OpenAI (clarifier LLM). When unset, the clarifier always uses its static text.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
CLARIFIER_MAX_TOKENS: int = _env_int("CLARIFIER_MAX_TOKENS", 180)
CLARIFIER_TEMPERATURE: float = _env_float("CLARIFIER_TEMPERATURE", 0.2)

# Deployment name reported by /api/debug-env (Vercel sets VERCEL_ENV)
ENVIRONMENT_NAME: str | None = (
    os.getenv("ENVIRONMENT_NAME", "").strip() or os.getenv("VERCEL_ENV", "").strip() or None
)

# "sync": reply in the HTTP response. "detached": ack now, POST the reply to response_url.
ASK_DELIVERY_MODE: str = (os.getenv("ASK_DELIVERY_MODE", "sync").strip().lower() or "sync")

# Time budgets (seconds). Slack drops slash-command responses after ~3s.
PLATFORM_DEADLINE: float = _env_float("PLATFORM_DEADLINE", 3.0)
DETACHED_DEADLINE: float = _env_float("DETACHED_DEADLINE", 10.0)
DEADLINE_HEADROOM: float = _env_float("DEADLINE_HEADROOM", 0.2)
SEARCH_TIMEOUT: float = _env_float("SEARCH_TIMEOUT", 1.2)
DOCUMENT_TIMEOUT: float = _env_float("DOCUMENT_TIMEOUT", 1.2)
CLARIFIER_TIMEOUT: float = _env_float("CLARIFIER_TIMEOUT", 1.4)
DELIVERY_TIMEOUT: float = _env_float("DELIVERY_TIMEOUT", 5.0)

# Answer formatting
SEARCH_HIT_LIMIT: int = _env_int("SEARCH_HIT_LIMIT", 3)
EXCERPT_MAX_CHARS: int = _env_int("EXCERPT_MAX_CHARS", 280)

# Optional JSON file with tenant-specific generic phrases and clarification options
CLARIFY_CATALOG_PATH: str = os.getenv("CLARIFY_CATALOG_PATH", "").strip()
