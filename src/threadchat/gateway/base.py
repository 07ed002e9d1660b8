"""Abstract base class for messaging backends.

This module defines the only view of the messaging service the rest of the
client gets. The abstraction hides:
- Transport (HTTP, in-process, ...)
- Authentication and session persistence
- Payload formats and their mapping to Thread/Message

Supports the async context manager protocol:
    async with create_gateway("memory") as gateway:
        thread = await gateway.fetch_thread("t1")
"""

from abc import ABC, abstractmethod

from .models import Account, Thread


class ChatGateway(ABC):
    """Abstract messaging backend.

    Implementations raise AuthenticationError, FetchError and SendError
    (see errors.py) instead of transport-specific exceptions.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open transport resources."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release transport resources."""

    @abstractmethod
    async def resume(self, username: str) -> Account | None:
        """Restore a persisted session for ``username``.

        Returns:
            The account when a stored session is still valid, otherwise None
        """

    @abstractmethod
    async def login(self, username: str, password: str) -> Account:
        """Authenticate and remember the session.

        Raises:
            AuthenticationError: If the credentials are rejected
        """

    @property
    @abstractmethod
    def account(self) -> Account | None:
        """The logged-in account, None before login."""

    @abstractmethod
    async def fetch_inbox(self) -> list[Thread]:
        """Fetch every thread visible to the account, newest activity first.

        Raises:
            FetchError: If the inbox cannot be retrieved
        """

    @abstractmethod
    async def fetch_thread(self, thread_id: str) -> Thread:
        """Fetch a full snapshot of one thread.

        Raises:
            FetchError: If the thread cannot be retrieved
        """

    @abstractmethod
    async def send_text(self, thread_id: str, text: str) -> None:
        """Deliver a text message to a thread.

        Raises:
            SendError: If the message was not delivered
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ChatGateway":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()
