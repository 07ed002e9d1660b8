"""threadchat: browse conversation threads and chat in them from the terminal.

Each subpackage hides one design decision:
- gateway: how the messaging service is reached
- session: how one live chat view behaves
- terminal / ui: how frames and keystrokes meet a real terminal
- cli: how a process is started and configured
"""

__version__ = "0.1.0"

from .gateway import ChatGateway, Thread, create_gateway
from .session import ParticipantCache, SessionLoop

__all__ = [
    "ChatGateway",
    "ParticipantCache",
    "SessionLoop",
    "Thread",
    "create_gateway",
]
