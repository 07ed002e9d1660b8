"""Provider factory functions for CLI.

Centralizes creation of the messaging gateway from resolved settings.
Hides configuration details from command implementations.
"""

import typer
from rich.console import Console

from ..config import ChatSettings
from ..gateway import ChatGateway, SessionStore, create_gateway

# Default console for output
_console = Console()


def get_gateway(settings: ChatSettings, console: Console | None = None) -> ChatGateway:
    """Create the messaging gateway selected by ``settings.backend``.

    Args:
        settings: Resolved client settings
        console: Optional Rich console for output

    Returns:
        Gateway instance (not yet connected)

    Raises:
        typer.Exit: If the backend is unknown or misconfigured
    """
    con = console or _console

    if settings.backend == "memory":
        return create_gateway("memory")

    elif settings.backend == "http":
        if not settings.base_url:
            con.print("[red]Error: THREADCHAT_BASE_URL (or --base-url) is required for the http backend[/red]")
            raise typer.Exit(code=1)
        return create_gateway(
            "http",
            base_url=settings.base_url,
            session_store=SessionStore(settings.session_dir),
            timeout=settings.request_timeout,
        )

    con.print(f"[red]Error: Unknown backend: {settings.backend}[/red]")
    raise typer.Exit(code=1)
