"""Main Textual TUI application.

Hosts the same session loop as the plain terminal frontend: Textual delivers
key presses and owns the screen, the session loop decides what they mean.
"""

import asyncio
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.widgets import Footer, Header

from ..config import LogLevel, PollConfig
from ..gateway import ChatGateway, FetchError
from ..session import InterruptRequested, KeyEvent, ParticipantCache, SessionLoop
from ..session.renderer import thread_label
from .screens import ThreadPickerScreen
from .styles import APP_CSS
from .themes import NIGHT_OWL
from .widgets import ChatFrame, LogPanel, PanelLogHandler

logger = logging.getLogger(__name__)

_NAMED_KEYS = {
    "enter": KeyEvent(sequence="\r", name="return"),
    "backspace": KeyEvent(sequence="\x7f", name="backspace"),
    "ctrl+u": KeyEvent(sequence="\x15", name="u", ctrl=True),
    "ctrl+c": KeyEvent(sequence="\x03", name="c", ctrl=True),
}


def key_event_from_textual(key: str, character: str | None) -> KeyEvent:
    """Translate a Textual key press into the session's KeyEvent.

    Keys without a printable character (arrows, function keys, ...) come out
    as escape sequences, so the session discards them as noise.
    """
    if key in _NAMED_KEYS:
        return _NAMED_KEYS[key]
    if character and character.isprintable() and not key.startswith("ctrl+"):
        return KeyEvent.char(character)
    return KeyEvent(sequence=f"\x1b[{key}]", name=key)


class ThreadChatApp(App):
    """Textual TUI for threadchat."""

    CSS = APP_CSS
    TITLE = "threadchat"

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", priority=True),
        Binding("ctrl+d", "toggle_log", "Log"),
    ]

    def __init__(
        self,
        gateway: ChatGateway,
        participants: ParticipantCache,
        poll: PollConfig | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._gateway = gateway
        self._participants = participants
        self._poll = poll or PollConfig()
        self._log_level = log_level
        self._log_handler: PanelLogHandler | None = None
        self._keys: asyncio.Queue[KeyEvent] | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatFrame(id="chat-frame")
        yield LogPanel(id="log-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(NIGHT_OWL)
        self.theme = NIGHT_OWL.name

        account = self._gateway.account
        self.sub_title = f"{account.username if account else 'anonymous'} | {self._gateway.backend_type}"

        if self._log_level is not None:
            panel = self.query_one("#log-panel", LogPanel)
            panel.display = True
            self._log_handler = PanelLogHandler(panel, LogLevel.from_string(self._log_level))
            logging.getLogger("threadchat").addHandler(self._log_handler)

        self._session_flow()

    def on_unmount(self) -> None:
        if self._log_handler is not None:
            logging.getLogger("threadchat").removeHandler(self._log_handler)
            self._log_handler = None

    @work(exclusive=True)
    async def _session_flow(self) -> None:
        """Alternate between the inbox picker and chat sessions until quit."""
        frame = self.query_one("#chat-frame", ChatFrame)
        viewer_id = self._gateway.account.id if self._gateway.account else None

        while True:
            try:
                inbox = await self._gateway.fetch_inbox()
            except FetchError as e:
                logger.error("Inbox fetch failed: %s", e)
                self.notify(f"Could not fetch threads: {e}", severity="error", timeout=5)
                self.exit(return_code=1)
                return

            for thread in inbox:
                self._participants.absorb(thread)
            threads = [t for t in inbox if t.participants]

            thread_id = await self.push_screen_wait(
                ThreadPickerScreen(threads, self._participants, viewer_id)
            )
            if thread_id is None:
                self.exit()
                return

            self._keys = asyncio.Queue()
            session = SessionLoop(
                self._gateway,
                thread_id,
                frame=frame,
                keys=self._keys,
                participants=self._participants,
                poll=self._poll,
            )
            try:
                last = await session.run()
                self.notify(f"Ended chat with {thread_label(last)}", timeout=2)
            except FetchError as e:
                self.notify(f"Could not open thread: {e}", severity="error", timeout=5)
            except InterruptRequested:
                self.exit()
                return
            finally:
                self._keys = None

    def on_key(self, event: Key) -> None:
        """Forward key presses to the running session."""
        if self._keys is None or self.screen is not self.screen_stack[0]:
            return
        self._keys.put_nowait(key_event_from_textual(event.key, event.character))
        event.prevent_default()
        event.stop()

    def action_interrupt(self) -> None:
        """Ctrl+C: let the session clear its frame and stop, or quit directly."""
        if self._keys is not None:
            self._keys.put_nowait(_NAMED_KEYS["ctrl+c"])
        else:
            self.exit()

    def action_toggle_log(self) -> None:
        """Toggle the log panel visibility."""
        panel = self.query_one("#log-panel", LogPanel)
        is_visible = panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)


async def run_textual_tui(
    gateway: ChatGateway,
    participants: ParticipantCache,
    poll: PollConfig | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        gateway: Connected, logged-in gateway
        participants: Process-wide participant cache
        poll: Poll interval configuration
        log_level: Log level for the panel (debug/info/warning/error), None to hide
    """
    app = ThreadChatApp(
        gateway=gateway,
        participants=participants,
        poll=poll,
        log_level=log_level,
    )
    await app.run_async()
