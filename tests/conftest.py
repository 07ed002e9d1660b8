"""Pytest configuration and shared fixtures."""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from rich.text import Text

from threadchat.gateway import InMemoryGateway, Message, Participant, Thread
from threadchat.session import ParticipantCache

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class RecordingFrame:
    """FrameSink that keeps every frame it was asked to draw."""

    def __init__(self):
        self.frames: list[Text] = []
        self.clears = 0

    def update(self, frame: Text) -> None:
        self.frames.append(frame)

    def clear(self) -> None:
        self.clears += 1

    @property
    def last(self) -> str:
        """Plain text of the most recent frame."""
        return self.frames[-1].plain if self.frames else ""


async def settle(rounds: int = 5) -> None:
    """Let queued callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def now():
    """Return a fixed reference time."""
    return NOW


@pytest.fixture
def clock():
    """Return a clock pinned to NOW."""
    return lambda: NOW


@pytest.fixture
def ana():
    return Participant(id="ana", display_name="Ana")


@pytest.fixture
def sample_thread(ana):
    """Return a two-message thread between 'me' and ana."""
    return Thread(
        id="t1",
        title="ana",
        participants={ana.id: ana},
        messages=(
            Message(sender_id="ana", text="hello", created_at=NOW - timedelta(minutes=3)),
            Message(sender_id="me", text="hi ana", created_at=NOW - timedelta(minutes=2)),
        ),
    )


@pytest.fixture
async def gateway(sample_thread):
    """Return a logged-in in-memory gateway holding sample_thread."""
    gw = InMemoryGateway(threads=[sample_thread])
    await gw.login("me", "secret")
    return gw


@pytest.fixture
def frame():
    return RecordingFrame()


@pytest.fixture
def participants():
    return ParticipantCache()
