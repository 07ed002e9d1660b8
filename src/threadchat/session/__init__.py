"""Interactive chat session core.

Module structure (each module hides one design decision):
- buffer.py: How the in-progress reply is stored
- keys.py: What a keystroke means (char, backspace, submit, interrupt, noise)
- timer.py: How periodic polling is scheduled and cancelled
- participants.py: How sender names are cached across threads
- formatting.py: How message ages are phrased
- renderer.py: What a frame looks like
- loop.py: The session state machine tying it all together
"""

from .buffer import InputBuffer
from .keys import KeyEvent, KeyKind, classify_key, has_ansi
from .loop import END_COMMAND, REFRESH_COMMAND, InterruptRequested, SessionLoop, SessionState
from .participants import ParticipantCache
from .renderer import FrameSink, render_frame
from .timer import PollTimer

__all__ = [
    "END_COMMAND",
    "FrameSink",
    "InputBuffer",
    "InterruptRequested",
    "KeyEvent",
    "KeyKind",
    "ParticipantCache",
    "PollTimer",
    "REFRESH_COMMAND",
    "SessionLoop",
    "SessionState",
    "classify_key",
    "has_ansi",
    "render_frame",
]
