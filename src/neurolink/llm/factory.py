from typing import Any

from .base import CompletionBackend
from .providers import GeminiBackend, ProxyBackend


def create_completion_backend(transport: str, **config: Any) -> CompletionBackend:
    """Create a completion backend instance.

    This factory function hides the instantiation logic for different transports.

    Args:
        transport: Transport type ('direct'/'gemini' or 'proxy')
        **config: Transport-specific configuration
            For direct (Gemini):
                - api_key: str (required)
                - api_version: str | None
            For proxy:
                - base_url: str (required)
                - timeout: float (default: 10.0)

    Returns:
        Initialized completion backend

    Raises:
        ValueError: If transport type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> backend = create_completion_backend(
        ...     "direct",
        ...     api_key="AIza..."
        ... )

        >>> backend = create_completion_backend(
        ...     "proxy",
        ...     base_url="http://localhost:8000"
        ... )
    """
    transport_lower = transport.lower()

    if transport_lower in ("direct", "gemini"):
        if "api_key" not in config:
            raise TypeError("Direct transport requires 'api_key' in config")
        return GeminiBackend(**config)

    if transport_lower == "proxy":
        if "base_url" not in config:
            raise TypeError("Proxy transport requires 'base_url' in config")
        return ProxyBackend(**config)

    raise ValueError(
        f"Unsupported transport: {transport}. "
        f"Supported transports: 'direct', 'proxy'"
    )
