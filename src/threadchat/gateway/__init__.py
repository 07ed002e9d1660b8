"""Messaging gateway abstraction for threadchat."""

from .base import ChatGateway
from .errors import AuthenticationError, FetchError, GatewayError, SendError
from .factory import create_gateway
from .in_memory import InMemoryGateway
from .models import Account, Message, MessageKind, Participant, Thread
from .session_store import SessionStore, StoredSession

__all__ = [
    "Account",
    "AuthenticationError",
    "ChatGateway",
    "FetchError",
    "GatewayError",
    "InMemoryGateway",
    "Message",
    "MessageKind",
    "Participant",
    "SendError",
    "SessionStore",
    "StoredSession",
    "Thread",
    "create_gateway",
]
