"""In-memory messaging backend.

Dict-based storage for demos and tests. Threads live only as long as the
gateway object; nothing is persisted.
"""

from datetime import datetime, timedelta, timezone

from .base import ChatGateway
from .errors import AuthenticationError, FetchError, SendError
from .models import Account, Message, MessageKind, Participant, Thread


def demo_threads(now: datetime | None = None) -> list[Thread]:
    """Build a small seeded inbox used when no threads are supplied."""
    now = now or datetime.now(timezone.utc)
    ana = Participant(id="ana", display_name="ana")
    ben = Participant(id="ben", display_name="ben")
    return [
        Thread(
            id="t-ana",
            title="ana",
            participants={ana.id: ana},
            messages=(
                Message(sender_id="ana", text="hey, are you around?", created_at=now - timedelta(minutes=12)),
                Message(
                    sender_id="ana",
                    kind=MessageKind.OTHER,
                    item_type="media",
                    created_at=now - timedelta(minutes=11),
                ),
            ),
        ),
        Thread(
            id="t-team",
            title="weekend plans",
            participants={ana.id: ana, ben.id: ben},
            messages=(
                Message(sender_id="ben", text="hiking on saturday?", created_at=now - timedelta(days=1)),
                Message(sender_id="ana", text="count me in", created_at=now - timedelta(hours=20)),
            ),
        ),
        Thread(id="t-empty", title="ben", participants={ben.id: ben}),
    ]


class InMemoryGateway(ChatGateway):
    """In-memory messaging backend (process-local).

    Args:
        threads: Initial threads; a seeded demo inbox when None
        users: Accepted credentials (username -> password); any credentials
            are accepted when None
    """

    def __init__(
        self,
        threads: list[Thread] | None = None,
        users: dict[str, str] | None = None,
    ):
        seed = threads if threads is not None else demo_threads()
        self._threads: dict[str, Thread] = {t.id: t for t in seed}
        self._users = users
        self._account: Account | None = None
        self.sent: list[tuple[str, str]] = []

    async def connect(self) -> None:
        """Open backend (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close backend (no-op for in-memory)."""
        pass

    async def resume(self, username: str) -> Account | None:
        """Nothing survives the process, so there is never a session to resume."""
        return None

    async def login(self, username: str, password: str) -> Account:
        if self._users is not None and self._users.get(username) != password:
            raise AuthenticationError(f"Invalid credentials for {username}")
        self._account = Account(id=username, username=username)
        return self._account

    @property
    def account(self) -> Account | None:
        return self._account

    async def fetch_inbox(self) -> list[Thread]:
        def last_activity(thread: Thread) -> datetime:
            latest = thread.latest_message()
            return latest.created_at if latest else datetime.min.replace(tzinfo=timezone.utc)

        return sorted(self._threads.values(), key=last_activity, reverse=True)

    async def fetch_thread(self, thread_id: str) -> Thread:
        try:
            return self._threads[thread_id]
        except KeyError:
            raise FetchError(f"Unknown thread: {thread_id}", thread_id=thread_id) from None

    async def send_text(self, thread_id: str, text: str) -> None:
        if self._account is None:
            raise SendError("Not logged in", thread_id=thread_id)
        if thread_id not in self._threads:
            raise SendError(f"Unknown thread: {thread_id}", thread_id=thread_id)
        self.sent.append((thread_id, text))
        self.post(thread_id, self._account.id, text)

    def post(self, thread_id: str, sender_id: str, text: str, created_at: datetime | None = None) -> Message:
        """Append a text message as ``sender_id`` (simulates remote activity)."""
        thread = self._threads[thread_id]
        message = Message(
            sender_id=sender_id,
            text=text,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._threads[thread_id] = thread.model_copy(
            update={"messages": (*thread.messages, message)}
        )
        return message

    @property
    def backend_type(self) -> str:
        return "memory"
