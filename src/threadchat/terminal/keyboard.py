"""Raw keystroke input for POSIX terminals.

Puts stdin into a non-canonical, no-echo, no-signal mode (Ctrl+C arrives as
a key, not as SIGINT) and feeds decoded key events into an asyncio queue
from the event loop's reader callback.
"""

import asyncio
import codecs
import logging
import os
import sys
from typing import TextIO

from ..session.keys import KeyEvent

logger = logging.getLogger(__name__)

# Seconds to wait for the rest of a split escape sequence before giving up on it
ESCAPE_TIMEOUT = 0.05

_CSI_NAMES = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}


def _read_escape(text: str, start: int) -> tuple[KeyEvent, int]:
    """Parse the escape sequence starting at ``text[start]`` (an ESC)."""
    end = start + 1
    if end >= len(text):
        return KeyEvent(sequence="\x1b", name="escape"), end

    introducer = text[end]
    if introducer == "[":
        end += 1
        # Parameter and intermediate bytes, then one final byte in @..~
        while end < len(text) and not ("@" <= text[end] <= "~"):
            end += 1
        end = min(end + 1, len(text))
        sequence = text[start:end]
        return KeyEvent(sequence=sequence, name=_CSI_NAMES.get(sequence[-1])), end
    if introducer == "O":
        end = min(end + 2, len(text))
        sequence = text[start:end]
        return KeyEvent(sequence=sequence, name=_CSI_NAMES.get(sequence[-1])), end

    # Alt+<key>
    return KeyEvent(sequence=text[start:end + 1], name=None), end + 1


def parse_keys(text: str) -> list[KeyEvent]:
    """Split raw terminal input into key events.

    Example:
        >>> [e.name for e in parse_keys("hi\\x1b[A\\r")]
        ['h', 'i', 'up', 'return']
    """
    events: list[KeyEvent] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\x1b":
            event, i = _read_escape(text, i)
            events.append(event)
            continue

        if ch in ("\r", "\n"):
            events.append(KeyEvent(sequence=ch, name="return"))
        elif ch in ("\x7f", "\x08"):
            events.append(KeyEvent(sequence=ch, name="backspace"))
        elif ch == "\t":
            events.append(KeyEvent(sequence=ch, name="tab"))
        elif ord(ch) < 0x20:
            events.append(KeyEvent(sequence=ch, name=chr(ord(ch) + 0x60), ctrl=True))
        else:
            events.append(KeyEvent.char(ch))
        i += 1
    return events


def split_incomplete_escape(text: str) -> tuple[str, str]:
    """Split off a trailing escape sequence that has not fully arrived yet.

    Example:
        >>> split_incomplete_escape("hi\\x1b[")
        ('hi', '\\x1b[')
    """
    start = text.rfind("\x1b")
    if start == -1:
        return text, ""
    tail = text[start:]
    if tail == "\x1b":
        incomplete = True
    elif tail.startswith("\x1b["):
        incomplete = not any("@" <= ch <= "~" for ch in tail[2:])
    elif tail.startswith("\x1bO"):
        incomplete = len(tail) < 3
    else:
        incomplete = False
    if incomplete:
        return text[:start], tail
    return text, ""


class RawKeyboard:
    """Reads keystrokes from a terminal into ``queue``.

    Use as a context manager inside a running event loop; the terminal mode
    is restored on exit.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin
        self._fd: int | None = None
        self._saved_attrs: list | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._flush_handle: asyncio.TimerHandle | None = None
        self.queue: asyncio.Queue[KeyEvent] = asyncio.Queue()

    @property
    def running(self) -> bool:
        return self._fd is not None

    def start(self) -> None:
        if self._fd is not None:
            return
        try:
            import termios
        except ImportError as e:
            raise RuntimeError("Raw keyboard input requires a POSIX terminal") from e

        fd = self._stream.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        attrs = termios.tcgetattr(fd)
        attrs[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG | termios.IEXTEN)
        attrs[0] &= ~termios.IXON
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attrs)

        asyncio.get_running_loop().add_reader(fd, self._on_readable)
        self._fd = fd
        logger.debug("Keyboard reader attached to fd %d", fd)

    def stop(self) -> None:
        if self._fd is None:
            return
        import termios

        asyncio.get_running_loop().remove_reader(self._fd)
        self._cancel_flush()
        self._pending = ""
        if self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        logger.debug("Keyboard reader detached from fd %d", self._fd)
        self._fd = None
        self._saved_attrs = None

    def _on_readable(self) -> None:
        assert self._fd is not None
        data = os.read(self._fd, 1024)
        if not data:
            return
        self._cancel_flush()
        text, self._pending = split_incomplete_escape(self._pending + self._decoder.decode(data))
        self._emit(text)
        if self._pending:
            self._flush_handle = asyncio.get_running_loop().call_later(ESCAPE_TIMEOUT, self._flush_pending)

    def _flush_pending(self) -> None:
        """Deliver a held escape prefix as-is (a lone Esc press, usually)."""
        self._flush_handle = None
        pending, self._pending = self._pending, ""
        self._emit(pending)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _emit(self, text: str) -> None:
        for event in parse_keys(text):
            self.queue.put_nowait(event)

    def __enter__(self) -> "RawKeyboard":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
