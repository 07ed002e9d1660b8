"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* The chat frame: history, blank line, reply prompt */
#chat-frame {
    height: 1fr;
    padding: 0 1;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    content-align: left bottom;
}

#log-panel {
    height: 10;
    border: round $secondary 60%;
    border-title-color: $secondary;
    background: $surface;
}
"""

PICKER_CSS = """
ThreadPickerScreen {
    align: center middle;
    background: $background 70%;
}

#picker-dialog {
    width: 90%;
    max-width: 110;
    height: auto;
    max-height: 80%;
    border: tall $accent;
    background: $surface;
    padding: 1 2;
}

#picker-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    color: $accent;
    padding: 0 0 1 0;
    border-bottom: solid $border;
    margin-bottom: 1;
}

#picker-options {
    height: auto;
    max-height: 20;
    background: $panel;
}

#picker-hint {
    width: 100%;
    text-align: center;
    color: $text-muted;
    margin-top: 1;
}
"""
