from ..config import Settings
from ..llm.base import CompletionBackend
from ..llm.client import CompletionClient
from ..llm.factory import create_completion_backend
from ..prompts import get_persona_prompt
from .orchestrator import ChatOrchestrator
from .resilience import ResiliencePolicy


def create_backend_from_settings(settings: Settings) -> CompletionBackend:
    """Create the completion backend selected by ``settings.transport``.

    Raises:
        ConfigurationError: If the direct transport has no API key
    """
    if settings.transport == "proxy":
        return create_completion_backend(
            "proxy",
            base_url=settings.proxy_url,
            timeout=max(settings.request_timeout, settings.retry_timeout) + 1.0,
        )
    return create_completion_backend(
        "direct",
        api_key=settings.require_api_key(),
        api_version=settings.gemini_api_version,
    )


def create_chat_orchestrator(
    settings: Settings,
    backend: CompletionBackend | None = None,
) -> ChatOrchestrator:
    """Wire a ChatOrchestrator from settings.

    Args:
        settings: Resolved application settings
        backend: Pre-built backend (a new one is created from settings when None)

    Raises:
        ConfigurationError: If no backend is given and settings lack a usable one
    """
    client = CompletionClient(
        backend=backend or create_backend_from_settings(settings),
        system_instruction=get_persona_prompt(),
        generation=settings.generation_config(),
        timeout=settings.request_timeout,
    )
    return ChatOrchestrator(
        client=client,
        policy=ResiliencePolicy.interactive(
            settings.primary_model,
            settings.fallback_model,
            backoff_seconds=settings.backoff_seconds,
        ),
        history_limit=settings.history_limit,
        retry_policy=ResiliencePolicy.patient(settings.primary_model, settings.fallback_model),
        retry_timeout=settings.retry_timeout,
    )
