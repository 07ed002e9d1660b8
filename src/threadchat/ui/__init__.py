"""Terminal UI module for threadchat.

Provides a full-screen Textual frontend around the same session loop the
plain terminal frontend uses.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (chat frame sink, log rendering)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (inbox thread picker)
- app.py: Application orchestration (picker/chat flow, key forwarding)
"""

from .app import ThreadChatApp, key_event_from_textual, run_textual_tui
from .screens import ThreadPickerScreen
from .widgets import ChatFrame, LogPanel, PanelLogHandler

__all__ = [
    "ChatFrame",
    "LogPanel",
    "PanelLogHandler",
    "ThreadChatApp",
    "ThreadPickerScreen",
    "key_event_from_textual",
    "run_textual_tui",
]
