"""Unit tests for the gateway module."""
import asyncio
import json
from datetime import timedelta

import httpx
import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import NOW
from threadchat.config import PollConfig
from threadchat.gateway import (
    AuthenticationError,
    ChatGateway,
    FetchError,
    InMemoryGateway,
    Message,
    MessageKind,
    SendError,
    SessionStore,
    StoredSession,
    Thread,
    create_gateway,
)
from threadchat.gateway.http import HttpChatGateway, parse_thread
from threadchat.session import KeyEvent, SessionLoop, SessionState

BASE_URL = "https://chat.example.com/api"

THREAD_PAYLOAD = {
    "id": "t1",
    "title": "ana",
    "participants": [{"id": "ana", "display_name": "Ana"}],
    "messages": [
        {"sender_id": "ana", "type": "text", "text": "hello", "created_at": "2024-05-01T11:57:00Z"},
        {"sender_id": "ana", "type": "media_share", "created_at": "2024-05-01T11:58:00Z"},
    ],
}


class TestChatGateway:
    """Tests for the ChatGateway interface."""

    def test_gateway_is_abstract(self):
        """Test that ChatGateway cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ChatGateway()  # type: ignore


class TestModels:
    """Tests for gateway models."""

    def test_naive_timestamp_becomes_utc(self):
        message = Message(sender_id="a", text="x", created_at=NOW.replace(tzinfo=None))
        assert message.created_at == NOW

    def test_payload_placeholder(self):
        message = Message(sender_id="a", kind=MessageKind.OTHER, item_type="like", created_at=NOW)
        assert message.payload == "[a non-text message of type like]"

    def test_thread_is_frozen(self, sample_thread):
        with pytest.raises(ValueError):
            sample_thread.title = "changed"

    def test_latest_message_empty(self):
        assert Thread(id="t", title="t").latest_message() is None

    @given(st.lists(st.integers(min_value=0, max_value=10_000), min_size=1, max_size=20))
    def test_ordered_messages_sorted(self, offsets: list[int]):
        """Property test: messages always come back in creation order."""
        thread = Thread(
            id="t",
            title="t",
            messages=tuple(
                Message(sender_id="a", text=str(i), created_at=NOW + timedelta(seconds=s))
                for i, s in enumerate(offsets)
            ),
        )
        stamps = [m.created_at for m in thread.ordered_messages()]
        assert stamps == sorted(stamps)
        assert thread.latest_message().created_at == max(stamps)


class TestInMemoryGateway:
    """Tests for InMemoryGateway."""

    @pytest.mark.asyncio
    async def test_demo_inbox(self):
        async with InMemoryGateway() as gateway:
            await gateway.login("me", "anything")
            inbox = await gateway.fetch_inbox()

        assert [t.id for t in inbox] == ["t-ana", "t-team", "t-empty"]
        assert gateway.backend_type == "memory"

    @pytest.mark.asyncio
    async def test_login_checks_users(self):
        gateway = InMemoryGateway(threads=[], users={"me": "secret"})

        with pytest.raises(AuthenticationError):
            await gateway.login("me", "wrong")

        account = await gateway.login("me", "secret")
        assert account.id == "me"
        assert gateway.account == account

    @pytest.mark.asyncio
    async def test_resume_never_restores(self, gateway):
        assert await gateway.resume("me") is None

    @pytest.mark.asyncio
    async def test_fetch_unknown_thread(self, gateway):
        with pytest.raises(FetchError) as exc_info:
            await gateway.fetch_thread("nope")
        assert exc_info.value.thread_id == "nope"

    @pytest.mark.asyncio
    async def test_send_appends_message(self, gateway):
        await gateway.send_text("t1", "new")
        thread = await gateway.fetch_thread("t1")

        assert gateway.sent == [("t1", "new")]
        assert thread.latest_message().text == "new"
        assert thread.latest_message().sender_id == "me"

    @pytest.mark.asyncio
    async def test_send_requires_login(self, sample_thread):
        gateway = InMemoryGateway(threads=[sample_thread])
        with pytest.raises(SendError):
            await gateway.send_text("t1", "hi")

    @pytest.mark.asyncio
    async def test_send_unknown_thread(self, gateway):
        with pytest.raises(SendError):
            await gateway.send_text("nope", "hi")

    @pytest.mark.asyncio
    async def test_fetch_returns_new_snapshot(self, gateway):
        """Test that posting replaces the thread instead of mutating it."""
        before = await gateway.fetch_thread("t1")
        gateway.post("t1", "ana", "again")
        after = await gateway.fetch_thread("t1")

        assert len(before.messages) == 2
        assert len(after.messages) == 3


class TestGatewayFactory:
    """Tests for create_gateway."""

    def test_create_memory(self):
        assert isinstance(create_gateway("memory"), InMemoryGateway)

    def test_create_http(self):
        gateway = create_gateway("http", base_url=BASE_URL)
        assert isinstance(gateway, HttpChatGateway)
        assert gateway.backend_type == "http"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported gateway backend"):
            create_gateway("carrier-pigeon")


class TestParseThread:
    """Tests for REST payload mapping."""

    def test_parse_thread(self):
        thread = parse_thread(THREAD_PAYLOAD)

        assert thread.title == "ana"
        assert thread.participants["ana"].display_name == "Ana"
        text, media = thread.ordered_messages()
        assert text.kind == MessageKind.TEXT
        assert text.text == "hello"
        assert media.kind == MessageKind.OTHER
        assert media.payload == "[a non-text message of type media_share]"

    def test_numeric_ids(self):
        """Test that integer ids from the server become string keys."""
        thread = parse_thread({
            "id": 1,
            "title": "ana",
            "participants": [{"id": 42, "display_name": "Ana"}],
            "messages": [{"sender_id": 42, "type": "text", "text": "hi", "created_at": "2024-05-01T11:57:00Z"}],
        })

        assert thread.id == "1"
        assert thread.participants["42"].display_name == "Ana"
        assert thread.messages[0].sender_id == "42"

    def test_missing_title_falls_back_to_id(self):
        assert parse_thread({"id": "t9"}).title == "t9"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"id": "t1", "messages": [{"text": "no sender"}]},
            {"id": "t1", "messages": [{"sender_id": "a", "created_at": "yesterday"}]},
            {"id": "t1", "participants": "ana"},
        ],
    )
    def test_malformed_payload(self, payload):
        with pytest.raises(ValueError):
            parse_thread(payload)


class FakeServer:
    """Minimal in-process implementation of the REST contract."""

    def __init__(self, token: str = "tok-1"):
        self.token = token
        self.requests: list[httpx.Request] = []
        self.posted: list[dict] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with)

        path = request.url.path.removeprefix("/api")
        if path == "/auth/login":
            body = json.loads(request.content)
            if body["password"] != "secret":
                return httpx.Response(401)
            return httpx.Response(200, json={"token": self.token, "account": {"id": "42", "username": body["username"]}})

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401)
        if path == "/me":
            return httpx.Response(200, json={"id": "42", "username": "me"})
        if path == "/threads":
            return httpx.Response(200, json={"threads": [THREAD_PAYLOAD]})
        if path == "/threads/t1":
            return httpx.Response(200, json=THREAD_PAYLOAD)
        if path == "/threads/t1/messages" and request.method == "POST":
            self.posted.append(json.loads(request.content))
            return httpx.Response(201, json={})
        return httpx.Response(404)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "sessions")


def http_gateway(server, store=None) -> HttpChatGateway:
    return HttpChatGateway(BASE_URL, session_store=store, transport=httpx.MockTransport(server))


async def wait_for_frame(frame, text: str, attempts: int = 200) -> None:
    for _ in range(attempts):
        if text in frame.last:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"{text!r} never drawn")


class TestHttpChatGateway:
    """Tests for HttpChatGateway against a mock transport."""

    @pytest.mark.asyncio
    async def test_login_fetch_and_send(self, server, store):
        async with http_gateway(server, store) as gateway:
            account = await gateway.login("me", "secret")
            inbox = await gateway.fetch_inbox()
            thread = await gateway.fetch_thread("t1")
            await gateway.send_text("t1", "hi there")

        assert account.id == "42"
        assert [t.id for t in inbox] == ["t1"]
        assert thread.participants["ana"].display_name == "Ana"
        assert server.posted == [{"text": "hi there"}]
        assert server.requests[-1].headers["Authorization"] == "Bearer tok-1"
        assert store.load("me").token == "tok-1"

    @pytest.mark.asyncio
    async def test_bad_credentials(self, server, store):
        async with http_gateway(server, store) as gateway:
            with pytest.raises(AuthenticationError):
                await gateway.login("me", "wrong")
        assert store.load("me") is None

    @pytest.mark.asyncio
    async def test_resume_with_stored_token(self, server, store):
        store.save(StoredSession(username="me", account_id="42", token="tok-1"))

        async with http_gateway(server, store) as gateway:
            account = await gateway.resume("me")

        assert account is not None
        assert account.id == "42"
        assert [r.url.path for r in server.requests] == ["/api/me"]

    @pytest.mark.asyncio
    async def test_resume_with_stale_token_clears_store(self, server, store):
        store.save(StoredSession(username="me", account_id="42", token="expired"))

        async with http_gateway(server, store) as gateway:
            assert await gateway.resume("me") is None

        assert store.load("me") is None

    @pytest.mark.asyncio
    async def test_resume_without_store(self, server):
        async with http_gateway(server) as gateway:
            assert await gateway.resume("me") is None
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_server_error_maps_to_fetch_error(self, server):
        async with http_gateway(server) as gateway:
            await gateway.login("me", "secret")
            server.fail_with = 503
            with pytest.raises(FetchError, match="HTTP 503"):
                await gateway.fetch_thread("t1")

    @pytest.mark.asyncio
    async def test_server_error_maps_to_send_error(self, server):
        async with http_gateway(server) as gateway:
            await gateway.login("me", "secret")
            server.fail_with = 500
            with pytest.raises(SendError):
                await gateway.send_text("t1", "hi")

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_fetch_error(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway = HttpChatGateway(BASE_URL, transport=httpx.MockTransport(unreachable))
        async with gateway:
            with pytest.raises(FetchError, match="connection refused"):
                await gateway.fetch_inbox()

    @pytest.mark.asyncio
    async def test_malformed_thread_payload(self):
        def broken(request):
            return httpx.Response(200, json={"title": "no id"})

        async with HttpChatGateway(BASE_URL, transport=httpx.MockTransport(broken)) as gateway:
            with pytest.raises(FetchError) as exc_info:
                await gateway.fetch_thread("t1")
        assert exc_info.value.thread_id == "t1"

    @pytest.mark.asyncio
    async def test_request_before_connect(self, server):
        with pytest.raises(RuntimeError):
            await http_gateway(server).fetch_inbox()

    @pytest.mark.asyncio
    async def test_expired_token_maps_to_call_error(self, server):
        """Test that a 401 on fetch or send surfaces as FetchError/SendError."""
        async with http_gateway(server) as gateway:
            await gateway.login("me", "secret")
            server.token = "rotated"

            with pytest.raises(FetchError, match="not authorized"):
                await gateway.fetch_thread("t1")
            with pytest.raises(SendError, match="not authorized"):
                await gateway.send_text("t1", "hi")

    @pytest.mark.asyncio
    async def test_session_survives_expired_token(self, server, frame, participants):
        """Test that a session on the REST backend degrades when the token expires."""
        keys = asyncio.Queue()
        async with http_gateway(server) as gateway:
            await gateway.login("me", "secret")
            session = SessionLoop(
                gateway,
                "t1",
                frame=frame,
                keys=keys,
                participants=participants,
                poll=PollConfig(interval_seconds=0.01),
            )
            task = asyncio.create_task(session.run())
            await wait_for_frame(frame, "Reply to [ana]")
            server.token = "rotated"

            await wait_for_frame(frame, "Could not refresh")
            assert not task.done()

            for ch in "hi":
                keys.put_nowait(KeyEvent.char(ch))
            keys.put_nowait(KeyEvent(sequence="\r", name="return"))
            await wait_for_frame(frame, "Message not sent")
            assert session.buffer.to_text() == "hi"
            assert server.posted == []

            for _ in range(2):
                keys.put_nowait(KeyEvent(sequence="\x7f", name="backspace"))
            for ch in "/end":
                keys.put_nowait(KeyEvent.char(ch))
            keys.put_nowait(KeyEvent(sequence="\r", name="return"))
            await asyncio.wait_for(task, timeout=2)

        assert session.state == SessionState.ENDING


class TestSessionStore:
    """Tests for SessionStore."""

    def test_save_and_load(self, store):
        path = store.save(StoredSession(username="me", account_id="42", token="t"))

        assert path.name == "session.me.json"
        loaded = store.load("me")
        assert loaded.token == "t"
        assert loaded.account_id == "42"

    def test_unsafe_username_is_sanitized(self, store):
        assert store.path_for("evil/user name").name == "session.evil_user_name.json"

    def test_load_missing(self, store):
        assert store.load("ghost") is None

    def test_load_corrupt_file(self, store):
        path = store.path_for("me")
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        assert store.load("me") is None

    def test_clear(self, store):
        store.save(StoredSession(username="me", account_id="42", token="t"))
        store.clear("me")
        store.clear("me")
        assert store.load("me") is None
