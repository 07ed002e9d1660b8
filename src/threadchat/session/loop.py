"""The interactive chat session.

Orchestrates one chat view: loads the thread, then multiplexes poll ticks
and keystrokes into re-rendered frames until the user submits /end.

State machine:
    LOADING -> VIEWING -> ENDING
                  ^   \
                  |    v
                 REFRESHING

Everything runs on one asyncio event loop. Keystrokes are read from a queue
one at a time and each is fully handled (including any gateway call it
triggers) before the next is read. Poll ticks run concurrently with key
handling, so every fetch carries a generation number and only a result
newer than the last applied one replaces the thread.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from ..config import PollConfig
from ..gateway.base import ChatGateway
from ..gateway.errors import FetchError, SendError
from ..gateway.models import Thread
from .buffer import InputBuffer
from .keys import KeyEvent, KeyKind, classify_key
from .participants import ParticipantCache
from .renderer import FrameSink, ended_notice, refreshing_notice, render_frame
from .timer import PollTimer

logger = logging.getLogger(__name__)

END_COMMAND = "/end"
REFRESH_COMMAND = "/refresh"


class SessionState(str, Enum):
    """Where the session loop currently is."""

    LOADING = "loading"
    VIEWING = "viewing"
    REFRESHING = "refreshing"
    ENDING = "ending"


class _Command(Enum):
    END = "end"
    REFRESH = "refresh"


class InterruptRequested(Exception):
    """The user pressed Ctrl+C; the process should exit now."""


class SessionLoop:
    """One chat session against one thread.

    Args:
        gateway: Connected, logged-in messaging gateway
        thread_id: Thread to chat in
        frame: Where frames are drawn
        keys: Queue the frontend pushes KeyEvents into
        participants: Process-wide name cache; this loop is its only writer
            while it runs
        poll: Poll interval configuration
        clock: Returns "now" for message ages (defaults to the wall clock)

    Example:
        loop = SessionLoop(gateway, "t1", frame=LiveFrame(console), keys=keyboard.queue,
                           participants=cache)
        await loop.run()  # returns after /end
    """

    def __init__(
        self,
        gateway: ChatGateway,
        thread_id: str,
        *,
        frame: FrameSink,
        keys: "asyncio.Queue[KeyEvent]",
        participants: ParticipantCache,
        poll: PollConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._gateway = gateway
        self._thread_id = thread_id
        self._frame = frame
        self._keys = keys
        self._participants = participants
        self._poll_config = poll or PollConfig()
        self._clock = clock
        self._timer = PollTimer()

        self.state = SessionState.LOADING
        self.thread: Thread | None = None
        self.buffer = InputBuffer()
        self._listening = False
        self._fetch_error: str | None = None
        self._send_error: str | None = None

        self._started_generation = 0
        self._applied_generation = 0

    @property
    def thread_id(self) -> str:
        return self._thread_id

    @property
    def timer(self) -> PollTimer:
        return self._timer

    @property
    def listening(self) -> bool:
        """Whether keystrokes are currently being dispatched."""
        return self._listening

    @property
    def notice(self) -> str | None:
        """Status line shown under the prompt, if any."""
        notices = [n for n in (self._send_error, self._fetch_error) if n]
        return " | ".join(notices) if notices else None

    @property
    def viewer_id(self) -> str | None:
        account = self._gateway.account
        return account.id if account else None

    async def run(self) -> Thread:
        """Run the session until /end.

        Returns:
            The last applied thread snapshot

        Raises:
            FetchError: If the initial load fails
            InterruptRequested: If the user pressed Ctrl+C
        """
        self._set_state(SessionState.LOADING)
        await self.fetch()
        try:
            while True:
                command = await self._view()
                if command is _Command.END:
                    assert self.thread is not None
                    return self.thread
                await self._refresh()
        finally:
            self._teardown()

    async def fetch(self) -> bool:
        """Fetch the thread and apply it unless a newer fetch already landed.

        Returns:
            True if the result was applied, False if it was stale
        """
        self._started_generation += 1
        generation = self._started_generation
        thread = await self._gateway.fetch_thread(self._thread_id)

        if generation <= self._applied_generation:
            logger.debug(
                "Discarding stale fetch of %s (generation %d, applied %d)",
                self._thread_id, generation, self._applied_generation,
            )
            return False

        self._applied_generation = generation
        self.thread = thread
        self._participants.absorb(thread)
        logger.debug("Applied fetch of %s (generation %d)", self._thread_id, generation)
        return True

    async def _view(self) -> _Command:
        self._set_state(SessionState.VIEWING)
        self.buffer = InputBuffer()
        self._timer.start(self._poll_config.interval_seconds, self._poll)
        ticker = self._timer.task
        assert ticker is not None
        self._listening = True
        self.render()

        consumer = asyncio.create_task(self._consume_keys(), name="threadchat-keys")
        try:
            done, _ = await asyncio.wait({consumer, ticker}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            consumer.cancel()
            raise
        finally:
            self._teardown()

        # The ticker only finishes on its own when a tick raised.
        if ticker in done and not ticker.cancelled() and ticker.exception() is not None:
            consumer.cancel()
            raise ticker.exception()
        if consumer in done:
            return consumer.result()
        consumer.cancel()
        raise RuntimeError("Poll timer stopped unexpectedly")

    async def _refresh(self) -> None:
        self._set_state(SessionState.REFRESHING)
        try:
            await self.fetch()
            self._fetch_error = None
        except FetchError as e:
            logger.warning("Refresh of %s failed: %s", self._thread_id, e)
            self._fetch_error = f"Could not refresh: {e}"

    async def _poll(self) -> None:
        """Refresh and re-render; fetch failures degrade to a notice."""
        try:
            applied = await self.fetch()
        except FetchError as e:
            logger.warning("Poll of %s failed: %s", self._thread_id, e)
            self._fetch_error = f"Could not refresh: {e}"
            self.render()
            return
        if applied:
            self._fetch_error = None
        self.render()

    async def _consume_keys(self) -> _Command:
        while True:
            event = await self._keys.get()
            command = await self.dispatch(event)
            if command is not None:
                return command

    async def dispatch(self, event: KeyEvent) -> _Command | None:
        """Handle one key event.

        Returns:
            The command that ends this viewing phase, or None to keep going
        """
        kind = classify_key(event)

        if kind is KeyKind.NOISE:
            return None

        if kind is KeyKind.INTERRUPT:
            self._teardown()
            if len(self.buffer) <= 1:
                self._frame.clear()
            raise InterruptRequested()

        if kind is KeyKind.SUBMIT:
            if not self.buffer:
                return None
            text = self.buffer.to_text()
            if text == END_COMMAND:
                self._set_state(SessionState.ENDING)
                self._teardown()
                assert self.thread is not None
                self._frame.update(ended_notice(self.thread))
                return _Command.END
            if text == REFRESH_COMMAND:
                self._set_state(SessionState.REFRESHING)
                self._teardown()
                self._frame.update(refreshing_notice())
                return _Command.REFRESH
            await self._send(text)
            return None

        if kind is KeyKind.BACKSPACE:
            self.buffer.delete_last()
        else:
            self.buffer.append(event.sequence)
        self.render()
        return None

    async def _send(self, text: str) -> None:
        try:
            await self._gateway.send_text(self._thread_id, text)
        except SendError as e:
            # Keep the buffer so the user can retry.
            logger.warning("Send to %s failed: %s", self._thread_id, e)
            self._send_error = f"Message not sent: {e}"
            self.render()
            return

        self._send_error = None
        self.buffer.clear()
        await self._poll()

    def render(self) -> None:
        """Draw the current thread and buffer."""
        if self.thread is None:
            return
        self._frame.update(
            render_frame(
                self.thread,
                self.buffer,
                participants=self._participants,
                viewer_id=self.viewer_id,
                active=self._listening,
                notice=self.notice,
                now=self._clock() if self._clock else None,
            )
        )

    def _teardown(self) -> None:
        """Stop the timer and the dispatcher; safe to call repeatedly."""
        self._timer.stop()
        self._listening = False
        # Anything still in flight is older than whatever comes next.
        self._applied_generation = max(self._applied_generation, self._started_generation)

    def _set_state(self, state: SessionState) -> None:
        if state is not self.state:
            logger.info("Session %s: %s -> %s", self._thread_id, self.state.value, state.value)
        self.state = state
