"""HTTP surface for the chat orchestrator.

Two entry points share one Gemini backend that holds the credential
server-side:
- ``/api/chat`` runs a whole turn (history, retries, fallback, styling)
- ``/api/completions`` relays a single completion attempt (with the service's
  own persona and sampling parameters) for clients that
  run the orchestration themselves through ``ProxyBackend``
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..chat.factory import create_backend_from_settings, create_chat_orchestrator
from ..chat.orchestrator import ChatOrchestrator
from ..config import Settings, get_settings
from ..llm.base import CompletionBackend
from ..llm.errors import BackendHTTPError, CompletionError, ConfigurationError
from .schemas import (
    ChatTurnRequest,
    ChatTurnResponse,
    CompletionRelayRequest,
    CompletionRelayResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)

CONFIG_ERROR_DETAIL = "Server configuration error. Please contact support."


def create_app(
    settings: Settings | None = None,
    backend: CompletionBackend | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    A missing credential does not stop the service from starting: the
    configuration error is logged verbatim and chat endpoints answer 500
    until the deployment is fixed.

    Args:
        settings: Application settings (read from the environment when None)
        backend: Completion backend (a Gemini backend is created when None)
    """
    settings = settings or get_settings()
    if settings.transport == "proxy" and backend is None:
        # The service is the end of the proxy chain; it must talk to Gemini itself
        settings = settings.model_copy(update={"transport": "direct"})

    orchestrator: ChatOrchestrator | None = None
    try:
        backend = backend or create_backend_from_settings(settings)
        orchestrator = create_chat_orchestrator(settings, backend=backend)
    except ConfigurationError as e:
        logger.error("Completion backend unavailable: %s", e)
        backend = None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if app.state.backend is not None:
            await app.state.backend.close()

    app = FastAPI(
        title="Neurolink",
        description="Student-first mental-health chat companion backed by Gemini.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backend = backend
    app.state.orchestrator = orchestrator
    allowed_models = {settings.primary_model, settings.fallback_model}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected error occurred. Please try again later."},
        )

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        """Simple health-check endpoint."""
        return HealthResponse(
            status="ok" if app.state.backend is not None else "degraded",
            model=settings.primary_model,
            fallback_model=settings.fallback_model,
            configured=app.state.backend is not None,
        )

    @app.post("/api/chat", response_model=ChatTurnResponse, tags=["Conversation"])
    async def chat(
        body: ChatTurnRequest,
        orchestrator: ChatOrchestrator = Depends(_require_orchestrator),
    ) -> ChatTurnResponse:
        """Accept the conversation plus a new user message and return the bot reply."""
        if not body.user_text.strip():
            raise HTTPException(status_code=400, detail="user_text is required and must not be empty")
        message = await orchestrator.send_turn(body.messages, body.user_text)
        return ChatTurnResponse(message=message)

    @app.post("/api/completions", response_model=CompletionRelayResponse, tags=["Conversation"])
    async def relay_completion(
        body: CompletionRelayRequest,
        orchestrator: ChatOrchestrator = Depends(_require_orchestrator),
    ) -> CompletionRelayResponse:
        """Relay one completion attempt, preserving the backend's status codes.

        The persona instruction and sampling parameters are the service's own;
        only the configured primary and fallback models may be requested.
        """
        if body.model not in allowed_models:
            raise HTTPException(status_code=400, detail=f"Unsupported model: {body.model}")

        client = orchestrator.client
        request = client.build_request(body.history, body.user_text)
        try:
            text = await asyncio.wait_for(
                client.backend.generate(request, body.model), settings.retry_timeout
            )
        except asyncio.TimeoutError as e:
            raise HTTPException(status_code=504, detail="Timeout: response took too long") from e
        except BackendHTTPError as e:
            code = e.status if 400 <= e.status < 600 else 502
            raise HTTPException(status_code=code, detail=e.detail) from e
        except CompletionError as e:
            logger.error("Relayed completion failed: %s", e)
            raise HTTPException(status_code=502, detail=str(e)) from e

        if not text or not text.strip():
            raise HTTPException(status_code=502, detail=f"Empty response from {body.model}")
        return CompletionRelayResponse(text=text)

    return app


def _require_orchestrator(request: Request) -> ChatOrchestrator:
    orchestrator = request.app.state.orchestrator
    if orchestrator is None:
        raise HTTPException(status_code=500, detail=CONFIG_ERROR_DETAIL)
    return orchestrator
