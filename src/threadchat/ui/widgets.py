"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- How a session frame is drawn inside the app
- Log rendering and level coloring
"""

import logging
from datetime import datetime

from rich.text import Text
from textual.widgets import RichLog, Static


class ChatFrame(Static):
    """Frame sink for the session loop.

    Static.update already replaces the whole content, which is exactly the
    frame contract; clear() just draws an empty frame.
    """

    BORDER_TITLE = "Chat"

    def clear(self) -> None:
        self.update(Text(""))


class LogPanel(RichLog):
    """Log panel fed by PanelLogHandler.

    Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"

    LEVEL_COLORS = {
        logging.DEBUG: "dim white",
        logging.INFO: "cyan",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(
            *args,
            markup=False,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def add_record(self, record: logging.LogRecord, message: str) -> None:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = Text()
        line.append(f"{timestamp} ", style="dim")
        line.append(f"{record.levelname:<7}", style=self.LEVEL_COLORS.get(record.levelno, "white"))
        line.append(f"[{record.name.rsplit('.', 1)[-1]}] ", style="magenta")
        line.append(message)
        self.write(line)

    def toggle(self) -> bool:
        """Toggle visibility. Returns new visibility state."""
        self.display = not self.display
        return self.display


class PanelLogHandler(logging.Handler):
    """logging handler that writes into a LogPanel.

    Records are emitted from the app's own event loop, so writing to the
    widget directly is safe.
    """

    def __init__(self, panel: LogPanel, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self._panel = panel

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._panel.add_record(record, self.format(record))
        except Exception:
            self.handleError(record)
