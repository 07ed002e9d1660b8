"""Frame rendering.

Hides how a thread and the in-progress reply look on screen. Every function
here is pure: the same thread, buffer and clock always produce the same
frame, and a frame is always a complete replacement for the previous one.
"""

from datetime import datetime
from typing import Protocol

from rich.text import Text

from ..gateway.models import Message, MessageKind, Thread
from .buffer import InputBuffer
from .formatting import format_relative_age
from .participants import ParticipantCache

YOU_LABEL = "You"
UNKNOWN_SENDER_LABEL = "A User"
EMPTY_THREAD_LINE = "There are no messages yet."
PROMPT_MARKER = "›"


def thread_label(thread: Thread) -> str:
    return f"[{thread.title}]"


def sender_label(sender_id: str, participants: ParticipantCache, viewer_id: str | None) -> Text:
    """"You" for the viewer, the cached name if known, a placeholder otherwise."""
    if viewer_id is not None and sender_id == viewer_id:
        return Text(YOU_LABEL, style="cyan")
    participant = participants.lookup(sender_id)
    if participant is not None:
        return Text(participant.display_name, style="magenta")
    return Text(UNKNOWN_SENDER_LABEL, style="red")


def render_message(
    message: Message,
    participants: ParticipantCache,
    viewer_id: str | None,
    now: datetime | None = None,
) -> Text:
    """One line: sender, payload, relative age."""
    payload = f'"{message.payload}"' if message.kind == MessageKind.TEXT else message.payload
    line = Text()
    line.append_text(sender_label(message.sender_id, participants, viewer_id))
    line.append(": ")
    line.append(payload, style="white")
    line.append(" ")
    line.append(f"[{format_relative_age(message.created_at, now)}]", style="dim")
    return line


def render_frame(
    thread: Thread,
    buffer: InputBuffer,
    *,
    participants: ParticipantCache,
    viewer_id: str | None,
    active: bool = True,
    notice: str | None = None,
    now: datetime | None = None,
) -> Text:
    """Render the whole chat view.

    Args:
        thread: Snapshot to show
        buffer: The in-progress reply
        participants: Name cache used for sender labels
        viewer_id: Account id of the local user
        active: Whether the reply prompt is shown
        notice: Optional status line under the prompt (e.g. a failed send)
        now: Reference time for message ages

    Returns:
        A multi-line Text: messages in creation order (or the empty-thread
        line), a blank line, then the reply prompt.
    """
    messages = thread.ordered_messages()
    if messages:
        history = Text("\n").join(
            render_message(m, participants, viewer_id, now) for m in messages
        )
    else:
        history = Text(EMPTY_THREAD_LINE)

    frame = Text()
    frame.append_text(history)
    if active:
        frame.append("\n\n")
        frame.append(f"Reply to {thread_label(thread)} ")
        frame.append(PROMPT_MARKER, style="green")
        frame.append(" ")
        frame.append(buffer.to_text())
    if notice:
        frame.append("\n")
        frame.append(notice, style="yellow")
    return frame


def render_notice(message: str) -> Text:
    """A one-line status frame such as "[*] Refreshing"."""
    return Text(f"[*] {message}")


def ended_notice(thread: Thread) -> Text:
    return render_notice(f"Ended chat with {thread_label(thread)}.")


def refreshing_notice() -> Text:
    return render_notice("Refreshing")


def inbox_choice_label(
    thread: Thread,
    participants: ParticipantCache,
    viewer_id: str | None,
    now: datetime | None = None,
) -> Text:
    """Inbox row: underlined thread label, then its latest message line."""
    label = Text(thread_label(thread), style="underline")
    latest = thread.latest_message()
    label.append(" - ")
    if latest is None:
        label.append(EMPTY_THREAD_LINE, style="dim")
    else:
        label.append_text(render_message(latest, participants, viewer_id, now))
    return label


class FrameSink(Protocol):
    """Where frames go. Each update replaces the previous frame entirely."""

    def update(self, frame: Text) -> None:
        """Draw ``frame`` in place of whatever was drawn before."""

    def clear(self) -> None:
        """Erase the current frame."""
