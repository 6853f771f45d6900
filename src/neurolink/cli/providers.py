"""Provider factory functions for CLI.

Centralizes creation of settings and the orchestrator from environment
variables. Hides configuration details from command implementations.
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..chat import ChatOrchestrator, create_chat_orchestrator
from ..config import Settings, get_settings
from ..llm.errors import ConfigurationError

# Default console for output
_console = Console()


def setup_logging(level: str, console: Console | None = None) -> None:
    """Route library logging through Rich on the CLI console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or _console, show_path=False)],
        force=True,
    )


def load_settings(console: Console | None = None) -> Settings:
    """Read settings from the environment, exiting on invalid values.

    Raises:
        SystemExit: If the configuration is invalid
    """
    con = console or _console
    try:
        return get_settings()
    except ConfigurationError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def require_orchestrator(settings: Settings, console: Console | None = None) -> ChatOrchestrator:
    """Build the chat orchestrator, exiting if the transport is not configured.

    Environment variables:
        GOOGLE_API_KEY: Gemini API key (required for the direct transport)
        NEUROLINK_TRANSPORT: 'direct' (default) or 'proxy'
        NEUROLINK_PROXY_URL: Neurolink service URL for the proxy transport

    Raises:
        SystemExit: If the orchestrator cannot be created
    """
    con = console or _console
    try:
        return create_chat_orchestrator(settings)
    except ConfigurationError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
