"""Modal screens for the TUI.

This module hides the design decisions about:
- How the inbox is presented for picking a thread
- Keyboard shortcuts for the picker
"""

from datetime import datetime

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from ..gateway.models import Thread
from ..session.participants import ParticipantCache
from ..session.renderer import inbox_choice_label
from .styles import PICKER_CSS


class ThreadPickerScreen(ModalScreen[str | None]):
    """Inbox picker; dismisses with the chosen thread id, or None to quit."""

    CSS = PICKER_CSS

    BINDINGS = [
        Binding("escape", "quit_picker", "Quit", show=False),
        Binding("q", "quit_picker", "Quit", show=False),
    ]

    def __init__(
        self,
        threads: list[Thread],
        participants: ParticipantCache,
        viewer_id: str | None,
        now: datetime | None = None,
    ) -> None:
        super().__init__()
        self._threads = threads
        self._participants = participants
        self._viewer_id = viewer_id
        self._now = now

    def compose(self) -> ComposeResult:
        with Vertical(id="picker-dialog"):
            yield Static("Inbox threads", id="picker-title")
            yield OptionList(
                *(
                    Option(
                        inbox_choice_label(thread, self._participants, self._viewer_id, self._now),
                        id=thread.id,
                    )
                    for thread in self._threads
                ),
                id="picker-options",
            )
            yield Static("Enter to open, Esc or q to quit", id="picker-hint")

    def on_mount(self) -> None:
        self.query_one("#picker-options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Open the selected thread."""
        self.dismiss(event.option.id)

    def action_quit_picker(self) -> None:
        self.dismiss(None)
