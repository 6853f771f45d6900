"""HTTP proxy completion backend.

Forwards requests to the Neurolink service's ``/api/completions`` endpoint,
which holds the Gemini credential server-side. The service relays backend
status codes unchanged, so overload remains recognisable here.
"""

from typing import Any

import httpx

from ..base import CompletionBackend
from ..errors import BackendHTTPError, CompletionError, CompletionTimeoutError
from ..models import CompletionRequest

COMPLETIONS_PATH = "/api/completions"


class ProxyBackend(CompletionBackend):
    """Transport that reaches the model through an intermediary server.

    Hidden design decisions:
    - Wire format of the relay endpoint (model, history and new turn only)
    - HTTP client lifecycle (one pooled ``httpx.AsyncClient``)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        **client_kwargs: Any
    ):
        """Initialize proxy backend.

        Args:
            base_url: Root URL of the Neurolink service
            timeout: Transport-level timeout in seconds
            **client_kwargs: Additional kwargs for httpx.AsyncClient (e.g. transport)
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout, **client_kwargs)

    @property
    def backend_type(self) -> str:
        return "proxy"

    @property
    def base_url(self) -> str:
        return self._base_url

    async def generate(self, request: CompletionRequest, model: str) -> str:
        # The service applies its own persona and sampling parameters
        payload = {
            "model": model,
            "history": [item.model_dump(mode="json") for item in request.history],
            "user_text": request.user_text,
        }
        try:
            response = await self._client.post(COMPLETIONS_PATH, json=payload)
        except httpx.TimeoutException as e:
            raise CompletionTimeoutError(f"Timeout: proxy at {self._base_url} did not respond") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Could not reach completion proxy at {self._base_url}: {e}") from e

        if response.is_error:
            raise BackendHTTPError(response.status_code, self._error_detail(response))

        data = response.json()
        return data.get("text") or ""

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            detail = None
        return str(detail) if detail else (response.text or response.reason_phrase)

    async def close(self) -> None:
        await self._client.aclose()
