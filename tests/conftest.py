"""Pytest configuration and shared fixtures."""
import asyncio
import os

import pytest

from neurolink.chat import ChatOrchestrator, Message, ResiliencePolicy
from neurolink.config import Settings, get_settings
from neurolink.llm import CompletionBackend, CompletionClient, CompletionRequest

PRIMARY = "primary-model"
FALLBACK = "fallback-model"


class FakeBackend(CompletionBackend):
    """Backend that replays scripted outcomes and records every call.

    Each outcome is either a string (returned), an exception (raised) or
    ``None`` (hang until cancelled).
    """

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls: list[tuple[CompletionRequest, str]] = []
        self.closed = False

    @property
    def backend_type(self) -> str:
        return "fake"

    async def generate(self, request: CompletionRequest, model: str) -> str:
        self.calls.append((request, model))
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if outcome is None:
            await asyncio.Event().wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


async def no_sleep(seconds: float) -> None:
    """Backoff replacement that returns immediately."""


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {"google": os.getenv("GOOGLE_API_KEY")}


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(
        google_api_key="AIza-test-key",
        primary_model=PRIMARY,
        fallback_model=FALLBACK,
        backoff_seconds=0.0,
        request_timeout=0.2,
        retry_timeout=0.3,
    )


@pytest.fixture
def make_orchestrator():
    """Build an orchestrator around a FakeBackend with instant backoff."""

    def _make(backend: FakeBackend, history_limit: int = 20, timeout: float = 0.2) -> ChatOrchestrator:
        client = CompletionClient(backend, system_instruction="Be kind.", timeout=timeout)
        return ChatOrchestrator(
            client=client,
            policy=ResiliencePolicy.interactive(PRIMARY, FALLBACK, sleep=no_sleep),
            history_limit=history_limit,
            retry_policy=ResiliencePolicy.patient(PRIMARY, FALLBACK, sleep=no_sleep),
        )

    return _make


def conversation(*pairs: tuple[str, str]) -> list[Message]:
    """Build a message list from (sender, text) pairs."""
    return [
        Message.user(text) if sender == "user" else Message.bot(text)
        for sender, text in pairs
    ]
