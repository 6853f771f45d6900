"""Retry, fallback and canned-reply policy around completion attempts.

State machine:
    Attempt(primary) --overload--> backoff --> Attempt(primary retry)
    --overload--> backoff --> Attempt(fallback) --overload--> canned overloaded reply

    Any attempt --timeout--> canned timeout reply
    Any attempt --other error--> re-raised, no further attempts

Callers only ever observe a returned string or a raised CompletionError.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..llm.errors import CompletionError, CompletionTimeoutError, ConfigurationError, is_overloaded

logger = logging.getLogger(__name__)

OVERLOADED_REPLY = (
    "I'm here with you. The service is a bit busy right now. "
    "Shall I give you a quick coping tip while we try again?"
)
TIMEOUT_REPLY = (
    "I'm here with you. Let's take this one step at a time. "
    "Want a quick, actionable tip?"
)

Attempt = Callable[[str], Awaitable[str]]


class ResiliencePolicy:
    """Runs completion attempts along a primary-then-fallback model plan."""

    def __init__(
        self,
        primary_model: str,
        fallback_model: str,
        primary_retries: int = 1,
        backoff_seconds: float = 0.25,
        attempt_timeout: float | None = None,
        overloaded_reply: str = OVERLOADED_REPLY,
        timeout_reply: str = TIMEOUT_REPLY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the policy.

        Args:
            primary_model: Model tried first
            fallback_model: Lighter model tried once the primary stays overloaded
            primary_retries: Extra primary attempts after the first overload
            backoff_seconds: Pause before every follow-up attempt
            attempt_timeout: Optional deadline applied to each attempt
            overloaded_reply: Canned reply when every attempt was overloaded
            timeout_reply: Canned reply when an attempt timed out
            sleep: Awaitable used for the backoff pause
        """
        if primary_retries < 0:
            raise ValueError("primary_retries must be >= 0")
        self._plan = [primary_model] * (primary_retries + 1) + [fallback_model]
        self._backoff_seconds = backoff_seconds
        self._attempt_timeout = attempt_timeout
        self._overloaded_reply = overloaded_reply
        self._timeout_reply = timeout_reply
        self._sleep = sleep

    @classmethod
    def interactive(cls, primary_model: str, fallback_model: str, **kwargs) -> "ResiliencePolicy":
        """Primary, one primary retry after a short pause, then the fallback."""
        kwargs.setdefault("primary_retries", 1)
        kwargs.setdefault("backoff_seconds", 0.25)
        return cls(primary_model, fallback_model, **kwargs)

    @classmethod
    def patient(cls, primary_model: str, fallback_model: str, **kwargs) -> "ResiliencePolicy":
        """One primary attempt, then the fallback after a longer pause.

        Used for user-requested retries, which run with a longer per-attempt
        timeout than interactive turns.
        """
        kwargs.setdefault("primary_retries", 0)
        kwargs.setdefault("backoff_seconds", 0.4)
        return cls(primary_model, fallback_model, **kwargs)

    @property
    def plan(self) -> list[str]:
        """Model used by each attempt, in order."""
        return list(self._plan)

    @property
    def overloaded_reply(self) -> str:
        return self._overloaded_reply

    @property
    def timeout_reply(self) -> str:
        return self._timeout_reply

    async def run(self, attempt: Attempt) -> str:
        """Run attempts until one succeeds or the plan is exhausted.

        Args:
            attempt: Coroutine function performing one completion with a model name

        Returns:
            The backend's text, or a canned reply on overload exhaustion or timeout

        Raises:
            CompletionError: For configuration and non-overload failures
        """
        total = len(self._plan)
        for index, model in enumerate(self._plan, start=1):
            if index > 1:
                await self._sleep(self._backoff_seconds)

            try:
                return await self._attempt_once(attempt, model)
            except (CompletionTimeoutError, asyncio.TimeoutError) as e:
                logger.warning("Attempt %d/%d on %s timed out: %s", index, total, model, e)
                return self._timeout_reply
            except ConfigurationError:
                raise
            except Exception as e:
                if not is_overloaded(e):
                    logger.error("Attempt %d/%d on %s failed: %s", index, total, model, e)
                    if isinstance(e, CompletionError):
                        raise
                    raise CompletionError(str(e) or type(e).__name__) from e
                logger.warning("Attempt %d/%d on %s overloaded: %s", index, total, model, e)

        logger.warning("All %d attempts overloaded; substituting canned reply", total)
        return self._overloaded_reply

    async def _attempt_once(self, attempt: Attempt, model: str) -> str:
        if self._attempt_timeout is None:
            return await attempt(model)
        try:
            return await asyncio.wait_for(attempt(model), self._attempt_timeout)
        except asyncio.TimeoutError as e:
            raise CompletionTimeoutError(
                f"Timeout: {model} did not respond within {self._attempt_timeout:g}s"
            ) from e
