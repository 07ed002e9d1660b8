"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from .. import __version__
from ..config import LOG_FILE_NAME, ChatSettings, PollConfig, configure_logging
from ..gateway import ChatGateway
from ..session import InterruptRequested, ParticipantCache, SessionLoop
from ..terminal import LiveFrame, RawKeyboard
from .inbox import choose_thread, login
from .providers import get_gateway

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="threadchat",
    help=(
        "Browse your conversation threads and chat in them from the terminal.\n\n"
        "In a chat, exit by entering '/end'. Manually refresh the thread by entering '/refresh'."
    ),
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Console for rich output
console = Console()


async def chat(
    gateway: ChatGateway,
    thread_id: str,
    participants: ParticipantCache,
    poll: PollConfig,
) -> None:
    """Run one chat session in the plain terminal until /end."""
    frame = LiveFrame(console)
    with RawKeyboard() as keyboard, frame:
        session = SessionLoop(
            gateway,
            thread_id,
            frame=frame,
            keys=keyboard.queue,
            participants=participants,
            poll=poll,
        )
        await session.run()


async def run_plain(settings: ChatSettings, username: str | None, password: str | None) -> None:
    """Login, then alternate between the inbox and chat sessions."""
    gateway = get_gateway(settings, console)
    async with gateway:
        await login(gateway, console, username, password)
        participants = ParticipantCache()
        while True:
            thread_id = await choose_thread(gateway, console, participants)
            if thread_id is None:
                return
            await chat(gateway, thread_id, participants, settings.poll)


async def run_tui(
    settings: ChatSettings,
    username: str | None,
    password: str | None,
    log_level: str | None,
) -> None:
    """Login in the plain terminal, then hand over to the Textual app."""
    from ..ui import run_textual_tui

    gateway = get_gateway(settings, console)
    async with gateway:
        await login(gateway, console, username, password)
        await run_textual_tui(
            gateway=gateway,
            participants=ParticipantCache(),
            poll=settings.poll,
            log_level=log_level,
        )


@app.command()
def main(
    username: str | None = typer.Option(
        None,
        "--username",
        "-u",
        help="Account username [default: will prompt]"
    ),
    password: str | None = typer.Option(
        None,
        "--password",
        "-p",
        help="Account password [default: will prompt]"
    ),
    interval: str | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Polling interval in seconds while in a chat [default: 5]"
    ),
    backend: str | None = typer.Option(
        None,
        "--backend",
        "-b",
        help="Messaging backend: 'memory' (demo) or 'http'"
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        help="Server root for the http backend"
    ),
    tui: bool = typer.Option(
        False,
        "--tui",
        "-t",
        help="Use the full-screen Textual interface"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Enable logging with level: debug, info, warning, or error"
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Log file path [default: <session dir>/threadchat.log]"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit"
    ),
):
    """Browse conversation threads and chat in them."""
    console.print(f"[dim]threadchat v{__version__}[/dim]")
    if version:
        raise typer.Exit()

    settings = ChatSettings.from_env(backend=backend, base_url=base_url, poll_interval=interval)
    configure_logging(log_level, log_file or settings.session_dir / LOG_FILE_NAME)

    try:
        if tui:
            asyncio.run(run_tui(settings, username, password, log_level))
        else:
            asyncio.run(run_plain(settings, username, password))
    except (InterruptRequested, KeyboardInterrupt):
        raise typer.Exit(code=0)
    except (typer.Exit, typer.Abort):
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
