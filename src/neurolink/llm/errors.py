"""Typed failures raised by completion backends.

The resilience policy branches on these types, so every backend must
translate its transport-specific exceptions into one of them.
"""

import re

_OVERLOAD_STATUS = 503
_OVERLOAD_MARKER = re.compile(r"\b503\b|overloaded", re.IGNORECASE)


class CompletionError(Exception):
    """Base class for completion failures."""


class ConfigurationError(CompletionError):
    """The deployment is misconfigured (e.g. missing credential). Never retried."""


class BackendHTTPError(CompletionError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"HTTP {status}: {detail}")


class EmptyResponseError(CompletionError):
    """The backend answered successfully but produced no text."""


class CompletionTimeoutError(CompletionError):
    """No response arrived within the allotted window."""


def is_overloaded(error: BaseException) -> bool:
    """Return True when an error signals transient backend overload.

    A 503 status or an "overloaded" marker in the message counts; timeouts and
    configuration errors never do.
    """
    if isinstance(error, (ConfigurationError, CompletionTimeoutError)):
        return False
    if isinstance(error, BackendHTTPError) and error.status == _OVERLOAD_STATUS:
        return True
    return bool(_OVERLOAD_MARKER.search(str(error)))
