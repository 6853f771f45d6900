from .base import CompletionBackend
from .client import CompletionClient
from .errors import (
    BackendHTTPError,
    CompletionError,
    CompletionTimeoutError,
    ConfigurationError,
    EmptyResponseError,
    is_overloaded,
)
from .factory import create_completion_backend
from .models import CompletionRequest, GenerationConfig, HistoryItem
from .providers import GeminiBackend, ProxyBackend

__all__ = [
    "BackendHTTPError",
    "CompletionBackend",
    "CompletionClient",
    "CompletionError",
    "CompletionRequest",
    "CompletionTimeoutError",
    "ConfigurationError",
    "EmptyResponseError",
    "GeminiBackend",
    "GenerationConfig",
    "HistoryItem",
    "ProxyBackend",
    "create_completion_backend",
    "is_overloaded",
]
