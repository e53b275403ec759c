"""
Text processing for replies: rich-text extraction, whitespace collapsing, excerpts.

Slite returns note bodies as markdown, plain text, or a block tree; only the
textual parts end up in a Slack reply.
"""

import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")

# Keys that hold text in Slite note payloads, most specific first
_TEXT_KEYS = ("markdown", "text", "plainText")
_CHILD_KEYS = ("children", "content", "blocks", "nodes")


def collapse_whitespace(text: str) -> str:
    """Replace every run of whitespace (newlines, tabs, repeated spaces) with one space and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def make_excerpt(text: str, max_chars: int = 280) -> str:
    """Collapse whitespace and cut to at most max_chars characters. Empty input gives ''."""
    collapsed = collapse_whitespace(text)
    if max_chars <= 0:
        return ""
    return collapsed[:max_chars].rstrip()


def extract_text(content: Any) -> str:
    """
    Return the textual representation of a note body.

    Accepts a plain string, a dict carrying markdown/text, or a nested rich-text
    tree (dicts with children/content/blocks lists). Non-text fields are ignored.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [extract_text(item) for item in content]
        return "\n".join(p for p in parts if p)
    if isinstance(content, dict):
        for key in _TEXT_KEYS:
            value = content.get(key)
            if isinstance(value, str) and value.strip():
                return value
        for key in _CHILD_KEYS:
            value = content.get(key)
            if isinstance(value, (list, dict)):
                text = extract_text(value)
                if text:
                    return text
    return ""
