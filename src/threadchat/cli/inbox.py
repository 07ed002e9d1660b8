"""Login and thread-selection steps that surround a chat session."""

import typer
from rich.console import Console
from rich.prompt import Prompt

from ..gateway import Account, ChatGateway, Thread
from ..session import ParticipantCache
from ..session.renderer import inbox_choice_label

QUIT_CHOICE = "q"


async def login(
    gateway: ChatGateway,
    console: Console,
    username: str | None = None,
    password: str | None = None,
) -> Account:
    """Resume a stored session or log in, prompting for what is missing.

    Raises:
        AuthenticationError: If the credentials are rejected
    """
    if not username:
        username = typer.prompt("Username")

    with console.status(f"Restoring session for {username}"):
        account = await gateway.resume(username)

    if account is None:
        if not password:
            password = typer.prompt("Password", hide_input=True)
        with console.status(f"Logging in as {username}"):
            account = await gateway.login(username, password)

    console.print(f"[green]✔[/green] You are logged in as {account.username}")
    return account


def selectable_threads(inbox: list[Thread]) -> list[Thread]:
    """Threads worth opening: those with at least one other participant."""
    return [t for t in inbox if t.participants]


async def choose_thread(
    gateway: ChatGateway,
    console: Console,
    participants: ParticipantCache,
) -> str | None:
    """Fetch the inbox and let the user pick a thread.

    Every participant seen in the inbox is added to ``participants`` so
    senders resolve by name before their thread is opened.

    Returns:
        The chosen thread id, or None if the user quit or the inbox is empty
    """
    with console.status("Fetching all threads"):
        inbox = await gateway.fetch_inbox()
    console.print("[green]✔[/green] All threads have been fetched")

    for thread in inbox:
        participants.absorb(thread)

    threads = selectable_threads(inbox)
    if not threads:
        console.print("[dim]No threads yet.[/dim]")
        return None

    viewer_id = gateway.account.id if gateway.account else None
    for index, thread in enumerate(threads, 1):
        console.print(f"[bold]{index:>2}.[/bold] ", inbox_choice_label(thread, participants, viewer_id), sep="")

    choices = [str(i) for i in range(1, len(threads) + 1)] + [QUIT_CHOICE]
    answer = Prompt.ask(
        f"Inbox threads [dim](1-{len(threads)}, {QUIT_CHOICE} to quit)[/dim]",
        console=console,
        choices=choices,
        show_choices=False,
    )
    if answer == QUIT_CHOICE:
        return None
    return threads[int(answer) - 1].id
