"""Keystroke classification.

Frontends (raw terminal, Textual) translate whatever their input layer
delivers into KeyEvent; classify_key decides what the event means for the
session. Nothing that fails classification ever reaches the input buffer.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum

# ESC or 8-bit CSI starts every terminal control sequence we care about.
_ANSI_PATTERN = re.compile(r"[\u001b\u009b]")


def has_ansi(sequence: str | None) -> bool:
    """True when ``sequence`` carries terminal escape content."""
    return bool(sequence) and _ANSI_PATTERN.search(sequence) is not None


class KeyKind(str, Enum):
    """What a keystroke means to the session."""

    CHAR = "char"            # Printable character, appended to the buffer
    BACKSPACE = "backspace"  # Delete the last character
    SUBMIT = "submit"        # Return, or Ctrl+U
    INTERRUPT = "interrupt"  # Ctrl+C, ends the process
    NOISE = "noise"          # Arrows, function keys, other control input


@dataclass(frozen=True)
class KeyEvent:
    """A raw key press.

    Attributes:
        sequence: Raw characters the terminal delivered ("a", "\\r", "\\x1b[A")
        name: Key name when known ("return", "backspace", "up", "c", ...)
        ctrl: Whether Ctrl was held
    """

    sequence: str
    name: str | None = None
    ctrl: bool = False

    @classmethod
    def char(cls, ch: str) -> "KeyEvent":
        return cls(sequence=ch, name=ch.lower() if ch.isalpha() else None)


def _is_printable(sequence: str) -> bool:
    return len(sequence) == 1 and unicodedata.category(sequence)[0] != "C"


def classify_key(event: KeyEvent) -> KeyKind:
    """Classify a key event.

    Order matters: escape content is discarded before anything else, so an
    arrow key can never be mistaken for a character.
    """
    if has_ansi(event.sequence):
        return KeyKind.NOISE
    if event.ctrl and event.name == "c":
        return KeyKind.INTERRUPT
    if event.name == "return" or (event.ctrl and event.name == "u"):
        return KeyKind.SUBMIT
    if event.name == "backspace":
        return KeyKind.BACKSPACE
    if not event.ctrl and _is_printable(event.sequence):
        return KeyKind.CHAR
    return KeyKind.NOISE
