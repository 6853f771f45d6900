"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..chat import ChatSession, DisplayType, Message
from ..config import LOG_LEVELS
from .providers import load_settings, require_orchestrator, setup_logging

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="neurolink",
    help="Student-first mental-health chat companion backed by Gemini",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

_REPLY_STYLES = {
    DisplayType.NORMAL: "cyan",
    DisplayType.RESOURCE: "green",
    DisplayType.ESCALATION: "red",
    DisplayType.ERROR: "yellow",
}


def print_bot_message(message: Message) -> None:
    """Render a bot reply with its display treatment."""
    display_type = message.display_type or DisplayType.NORMAL
    style = _REPLY_STYLES[display_type]
    title = "Neurolink"
    if display_type == DisplayType.ESCALATION:
        title = "Neurolink - Crisis support: call or text 988"
    console.print(Panel(message.text, title=title, title_align="left", border_style=style))


def _validate_log_level(value: str | None) -> str | None:
    if value is not None and value.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"must be one of: {', '.join(level.lower() for level in LOG_LEVELS)}")
    return value


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        callback=_validate_log_level,
        help="Logging level: debug, info, warning or error (default: NEUROLINK_LOG_LEVEL)"
    ),
):
    """Configure logging for every command."""
    settings = load_settings(console)
    setup_logging(log_level or settings.log_level, console)


@app.command()
def chat():
    """Interactive chat in the terminal."""
    async def _chat():
        settings = load_settings(console)
        orchestrator = require_orchestrator(settings, console)
        session = ChatSession(orchestrator)

        console.print("[bold cyan]Neurolink[/bold cyan] [dim]Available 24/7 - Confidential[/dim]")
        console.print("[dim]Type '/retry' to ask again, '/clear' to start over, 'exit' to leave[/dim]\n")
        print_bot_message(session.messages[0])

        try:
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Take care. Goodbye![/dim]")
                    break

                command = user_input.strip().lower()
                if not command:
                    continue
                if command in ("exit", "quit", "q"):
                    console.print("[dim]Take care. Goodbye![/dim]")
                    break
                if command == "/clear":
                    session.clear()
                    print_bot_message(session.messages[0])
                    continue

                with console.status("[dim]Neurolink is thinking...[/dim]"):
                    if command == "/retry":
                        reply = await session.retry()
                    else:
                        reply = await session.submit(user_input)

                if reply is None:
                    console.print("[dim]Nothing to retry yet.[/dim]")
                else:
                    print_bot_message(reply)
        finally:
            await orchestrator.client.backend.close()

    asyncio.run(_chat())


@app.command()
def ask(
    text: str = typer.Argument(..., help="Message to send"),
):
    """Send a single message and print the reply."""
    async def _ask() -> Message:
        settings = load_settings(console)
        orchestrator = require_orchestrator(settings, console)
        async with orchestrator.client.backend:
            return await orchestrator.send_turn([], text)

    if not text.strip():
        console.print("[red]Error: message must not be empty[/red]")
        raise typer.Exit(code=1)

    reply = asyncio.run(_ask())
    print_bot_message(reply)
    if reply.display_type == DisplayType.ERROR:
        raise typer.Exit(code=1)


@app.command(name="tui")
def tui_command():
    """Launch the interactive TUI chat screen."""
    async def _tui():
        from ..ui import run_textual_tui

        settings = load_settings(console)
        orchestrator = require_orchestrator(settings, console)
        async with orchestrator.client.backend:
            await run_textual_tui(orchestrator, model_name=settings.primary_model)

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass
    console.print("\n[dim]Take care. Goodbye![/dim]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes (development only)"),
):
    """Run the HTTP service (/api/chat and /api/completions)."""
    import uvicorn

    console.print(f"[dim]Starting Neurolink service on {host}:{port} (reload={reload})[/dim]")
    uvicorn.run(
        "neurolink.server.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def health():
    """Show the effective configuration without revealing secrets."""
    settings = load_settings(console)

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=18)
    table.add_column("Value")

    if settings.has_api_key:
        table.add_row("Google API key", "[green]SET[/green]")
    else:
        table.add_row("Google API key", "[yellow]NOT SET[/yellow]")
    table.add_row("Transport", settings.transport)
    if settings.transport == "proxy":
        table.add_row("Proxy URL", settings.proxy_url)
    table.add_row("Primary model", settings.primary_model)
    table.add_row("Fallback model", settings.fallback_model)
    table.add_row("History window", str(settings.history_limit))
    table.add_row("Timeouts", f"{settings.request_timeout:g}s / retry {settings.retry_timeout:g}s")

    console.print(table)

    if settings.transport == "direct" and not settings.has_api_key:
        raise typer.Exit(code=1)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
