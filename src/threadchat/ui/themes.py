"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Dark/light mode configuration

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Low-glare dark palette; message senders keep the rich styles from the renderer
NIGHT_OWL = Theme(
    name="threadchat-night",
    primary="#82aaff",      # Blue - borders, focus
    secondary="#c792ea",    # Purple - secondary accent
    accent="#ffcb8b",       # Amber - highlights in the picker
    foreground="#d6deeb",   # Light text
    background="#011627",   # Deep navy
    success="#addb67",      # Green - prompt marker
    warning="#ecc48d",      # Sand - notices
    error="#ef5350",        # Red - failures
    surface="#0b2942",
    panel="#01111d",
    dark=True,
    variables={
        "block-cursor-foreground": "#011627",
        "block-cursor-background": "#82aaff",
        "block-cursor-text-style": "bold",
        "footer-key-foreground": "#82aaff",
        "scrollbar": "#1d3b53",
        "scrollbar-hover": "#5f7e97",
    },
)
