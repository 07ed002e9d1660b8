"""REST messaging backend over httpx.

Expected server contract (JSON everywhere, bearer token after login):

    POST /auth/login                 {"username", "password"} -> {"token", "account": {...}}
    GET  /me                         -> {"id", "username"}
    GET  /threads                    -> {"threads": [<thread>, ...]}
    GET  /threads/{id}               -> <thread>
    POST /threads/{id}/messages      {"text"} -> any 2xx

    <thread>  = {"id", "title", "participants": [{"id", "display_name"}], "messages": [<message>]}
    <message> = {"sender_id", "type", "text"?, "created_at" (ISO 8601)}
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .base import ChatGateway
from .errors import AuthenticationError, FetchError, GatewayError, SendError
from .models import Account, Message, MessageKind, Participant, Thread
from .session_store import SessionStore, StoredSession

logger = logging.getLogger(__name__)


def parse_thread(data: dict[str, Any]) -> Thread:
    """Map a thread payload onto the Thread model.

    Raises:
        ValueError: If the payload is malformed
    """
    try:
        participants = {
            str(p["id"]): Participant(id=str(p["id"]), display_name=p.get("display_name") or str(p["id"]))
            for p in data.get("participants", [])
        }
        messages = []
        for item in data.get("messages", []):
            item_type = item.get("type", "text")
            messages.append(
                Message(
                    sender_id=str(item["sender_id"]),
                    kind=MessageKind.TEXT if item_type == "text" else MessageKind.OTHER,
                    item_type=item_type,
                    text=item.get("text") or "",
                    created_at=item["created_at"],
                )
            )
        return Thread(
            id=str(data["id"]),
            title=data.get("title") or str(data["id"]),
            participants=participants,
            messages=tuple(messages),
        )
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise ValueError(f"Malformed thread payload: {e}") from e


class HttpChatGateway(ChatGateway):
    """Messaging backend speaking the REST contract above.

    Args:
        base_url: Server root, e.g. https://chat.example.com/api
        session_store: Where tokens are persisted between runs (optional)
        timeout: Per-request timeout in seconds
        transport: Custom httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._session_store = session_store
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._token: str | None = None
        self._account: Account | None = None

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def account(self) -> Account | None:
        return self._account

    @property
    def backend_type(self) -> str:
        return "http"

    async def _request(
        self,
        method: str,
        url: str,
        error_cls: type[GatewayError],
        **kwargs: Any,
    ) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("Gateway is not connected; call connect() first")

        headers = kwargs.pop("headers", {})
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise error_cls(f"{method} {url} failed: {e}") from e

        if response.status_code == 401:
            # An expired token mid-session is a fetch or send failure like any other.
            raise error_cls(f"{method} {url}: not authorized")
        if response.is_error:
            raise error_cls(f"{method} {url}: HTTP {response.status_code}")
        return response

    async def resume(self, username: str) -> Account | None:
        if self._session_store is None:
            return None
        stored = self._session_store.load(username)
        if stored is None:
            return None

        self._token = stored.token
        try:
            response = await self._request("GET", "/me", AuthenticationError)
            data = response.json()
            self._account = Account(id=str(data["id"]), username=data.get("username", username))
        except (AuthenticationError, KeyError, TypeError, ValueError):
            logger.info("Stored session for %s rejected, falling back to login", username)
            self._token = None
            self._session_store.clear(username)
            return None
        return self._account

    async def login(self, username: str, password: str) -> Account:
        response = await self._request(
            "POST",
            "/auth/login",
            AuthenticationError,
            json={"username": username, "password": password},
        )
        try:
            data = response.json()
            self._token = data["token"]
            account = data["account"]
            self._account = Account(id=str(account["id"]), username=account.get("username", username))
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError(f"Malformed login response: {e}") from e

        if self._session_store is not None:
            self._session_store.save(
                StoredSession(username=username, account_id=self._account.id, token=self._token)
            )
        return self._account

    async def fetch_inbox(self) -> list[Thread]:
        response = await self._request("GET", "/threads", FetchError)
        try:
            return [parse_thread(t) for t in response.json()["threads"]]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed inbox payload: {e}") from e

    async def fetch_thread(self, thread_id: str) -> Thread:
        response = await self._request("GET", f"/threads/{thread_id}", FetchError)
        try:
            return parse_thread(response.json())
        except ValueError as e:
            raise FetchError(str(e), thread_id=thread_id) from e

    async def send_text(self, thread_id: str, text: str) -> None:
        await self._request(
            "POST",
            f"/threads/{thread_id}/messages",
            SendError,
            json={"text": text},
        )
