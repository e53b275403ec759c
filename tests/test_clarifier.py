"""
Unit tests for the Clarifier: model text when it answers in time, static text otherwise.
"""

import time

import pytest

from app.agent.clarifier import Clarifier, build_system_prompt
from app.core.catalog import DEFAULT_CATALOG
from conftest import FakeModel


def test_system_prompt_forbids_answering_and_lists_options() -> None:
    prompt = build_system_prompt(DEFAULT_CATALOG)
    assert "ONLY job is to ask for clarification" in prompt
    assert "Do NOT provide answers" in prompt
    assert "Do NOT reference external knowledge" in prompt
    assert "4–7 bullet options" in prompt
    assert "Google LSA – Call; Google LSA – Message" in prompt


@pytest.mark.asyncio
async def test_uses_model_text_when_available() -> None:
    model = FakeModel(text="  Which source?\n• Google LSA – Call\n• Referral  ")
    clarifier = Clarifier(model, DEFAULT_CATALOG)
    text = await clarifier.clarify("lsa", 1.0)
    assert text == "Which source?\n• Google LSA – Call\n• Referral"
    system, user = model.calls[0]
    assert system == build_system_prompt(DEFAULT_CATALOG)
    assert user == 'User query: "lsa"'


@pytest.mark.asyncio
async def test_missing_credential_returns_fallback_without_calling() -> None:
    model = FakeModel(text="unused", configured=False)
    clarifier = Clarifier(model, DEFAULT_CATALOG)
    text = await clarifier.clarify("lsa", 1.0)
    assert text == DEFAULT_CATALOG.fallback_text()
    assert model.calls == []


@pytest.mark.asyncio
async def test_model_error_returns_exact_fallback() -> None:
    clarifier = Clarifier(FakeModel(error=RuntimeError("401 invalid key")), DEFAULT_CATALOG)
    assert await clarifier.clarify("lsa", 1.0) == DEFAULT_CATALOG.fallback_text()


@pytest.mark.asyncio
async def test_empty_model_text_returns_fallback() -> None:
    clarifier = Clarifier(FakeModel(text="   "), DEFAULT_CATALOG)
    assert await clarifier.clarify("lsa", 1.0) == DEFAULT_CATALOG.fallback_text()


@pytest.mark.asyncio
async def test_slow_model_loses_race_to_fallback() -> None:
    clarifier = Clarifier(FakeModel(text="too late", delay=2.0), DEFAULT_CATALOG)
    start = time.perf_counter()
    text = await clarifier.clarify("lsa", 0.05)
    assert text == DEFAULT_CATALOG.fallback_text()
    assert time.perf_counter() - start < 0.5


@pytest.mark.asyncio
async def test_no_budget_returns_fallback() -> None:
    model = FakeModel(text="never")
    clarifier = Clarifier(model, DEFAULT_CATALOG)
    assert await clarifier.clarify("lsa", 0.0) == DEFAULT_CATALOG.fallback_text()
