from abc import ABC, abstractmethod
from typing import Any

from .models import CompletionRequest


class CompletionBackend(ABC):
    """Abstract transport for a single completion request.

    This module hides how a request reaches the generative model.
    Implementations must handle:
    - Authentication and client setup
    - Request/response format conversion
    - Translating transport errors into ``neurolink.llm.errors`` types

    Retries and fallbacks are NOT a backend concern; they live in
    ``neurolink.chat.resilience``.

    Supports async context manager protocol for proper resource cleanup:
        async with backend:
            text = await backend.generate(request, "gemini-2.5-flash")
    """

    @abstractmethod
    async def generate(self, request: CompletionRequest, model: str) -> str:
        """Send one completion request.

        Args:
            request: System instruction, history, new user text and sampling parameters
            model: Backend model identifier

        Returns:
            The generated text (possibly empty; callers decide what empty means)

        Raises:
            BackendHTTPError: The backend answered with a non-2xx status
            CompletionTimeoutError: The transport gave up waiting
            CompletionError: Any other transport failure
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the transport identifier."""

    async def __aenter__(self) -> "CompletionBackend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
