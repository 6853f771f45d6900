"""Single-attempt completion client.

Binds a backend to the persona instruction and sampling parameters and
enforces the per-call deadline.
"""

import asyncio
import logging
from collections.abc import Sequence

from .base import CompletionBackend
from .errors import CompletionTimeoutError, EmptyResponseError
from .models import CompletionRequest, GenerationConfig, HistoryItem

logger = logging.getLogger(__name__)


class CompletionClient:
    """Issues exactly one completion request per call.

    Hidden design decisions:
    - Which transport carries the request (direct SDK or HTTP proxy)
    - How the deadline is enforced (the pending call is cancelled, so a late
      answer can never leak into a later turn)
    """

    def __init__(
        self,
        backend: CompletionBackend,
        system_instruction: str,
        generation: GenerationConfig | None = None,
        timeout: float = 5.0,
    ):
        """Initialize the client.

        Args:
            backend: Transport used to reach the model
            system_instruction: Persona instruction sent with every request
            generation: Sampling parameters (defaults to GenerationConfig())
            timeout: Seconds to wait for a response before giving up
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._backend = backend
        self._system_instruction = system_instruction
        self._generation = generation or GenerationConfig()
        self._timeout = timeout

    @property
    def backend(self) -> CompletionBackend:
        return self._backend

    @property
    def timeout(self) -> float:
        return self._timeout

    def build_request(self, history: Sequence[HistoryItem], user_text: str) -> CompletionRequest:
        """Bundle the fixed instruction, history and new turn into a request."""
        return CompletionRequest(
            system_instruction=self._system_instruction,
            history=list(history),
            user_text=user_text,
            generation=self._generation,
        )

    async def complete(
        self,
        history: Sequence[HistoryItem],
        user_text: str,
        model: str,
        timeout: float | None = None,
    ) -> str:
        """Run one completion attempt.

        Args:
            history: Prior turns, oldest first, excluding ``user_text``
            user_text: The new user turn (must not be blank)
            model: Backend model identifier
            timeout: Override for the client's default deadline

        Returns:
            The first candidate's text, unmodified

        Raises:
            ValueError: If user_text is blank
            CompletionTimeoutError: If no response arrived in time
            EmptyResponseError: If the backend produced no text
            CompletionError: Backend-specific failures
        """
        if not user_text or not user_text.strip():
            raise ValueError("user_text must not be empty")

        request = self.build_request(history, user_text)
        deadline = timeout if timeout is not None else self._timeout

        logger.debug("Requesting completion from %s (%d history items)", model, len(request.history))
        try:
            text = await asyncio.wait_for(self._backend.generate(request, model), deadline)
        except asyncio.TimeoutError as e:
            raise CompletionTimeoutError(
                f"Timeout: {model} did not respond within {deadline:g}s"
            ) from e

        if not text or not text.strip():
            raise EmptyResponseError(f"Empty response from {model}")
        return text
