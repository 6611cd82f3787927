"""Pytest fixtures and shared test configuration.

Provides an in-memory fake of the remote chat API, served to the real
ChatApiClient through ``httpx.MockTransport``, plus a view that records
every render command.

Fixtures:
    - server: FakeChatServer with scriptable replies and failures
    - api_client: ChatApiClient wired to the fake server
    - view: RecordingView capturing render commands
    - controller: SessionController using both
"""

import asyncio
import json
from collections.abc import AsyncGenerator, AsyncIterator
from dataclasses import dataclass, field

import httpx
import pytest

from chat_client.api.client import ChatApiClient
from chat_client.api.config import ClientConfig
from chat_client.models.schemas import ConversationSummary, Message, Role
from chat_client.session.controller import SessionController

BASE_URL = "http://chat.test"


@dataclass
class Reply:
    """Script for one streamed reply.

    Attributes:
        fragments: Text fragments sent in order.
        hold_at: Index before which the stream pauses until ``release`` is set.
        fail_after: Number of fragments after which the connection breaks.
        status_code: Non-200 rejects the send with no stream body.
    """

    fragments: list[str]
    hold_at: int | None = None
    fail_after: int | None = None
    status_code: int = 200
    held: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)


class FakeChatServer:
    """In-memory stand-in for the ``/api`` endpoints of the chat server."""

    def __init__(self) -> None:
        # user_id -> session_id -> stored messages
        self.sessions: dict[str, dict[str, list[dict[str, str]]]] = {}
        self.replies: list[Reply] = []
        self.failures: dict[str, tuple[int, object]] = {}
        self.unreachable: set[str] = set()
        self.conversation_scripts: list[tuple[asyncio.Event | None, list[dict]]] = []
        # session_id -> (held, release) for history requests paused mid-flight
        self.history_holds: dict[str, tuple[asyncio.Event, asyncio.Event]] = {}
        self.requests: list[tuple[str, str]] = []
        self._next_id = 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def queue_reply(self, *fragments: str, **options: object) -> Reply:
        reply = Reply(fragments=list(fragments), **options)
        self.replies.append(reply)
        return reply

    def add_session(self, user_id: str, session_id: str, *messages: tuple[str, str]) -> None:
        history = self.sessions.setdefault(user_id, {}).setdefault(session_id, [])
        history.extend({"type": t, "content": c} for t, c in messages)

    def hold_history(self, session_id: str) -> tuple[asyncio.Event, asyncio.Event]:
        """Pause the next history request for a session.

        Returns:
            ``held`` (set once the request arrives) and ``release`` (set it to answer).
        """
        hold = (asyncio.Event(), asyncio.Event())
        self.history_holds[session_id] = hold
        return hold

    def paths(self) -> list[str]:
        return [path for _, path in self.requests]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if path in self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)
        if path in self.failures:
            status, body = self.failures[path]
            return httpx.Response(status, json=body)

        routes = {
            ("POST", "/api/chat/start"): self._start,
            ("POST", "/api/chat/stream"): self._stream,
            ("GET", "/api/chat/history"): self._history,
            ("GET", "/api/user/conversations"): self._conversations,
            ("POST", "/api/chat/delete"): self._delete,
        }
        route = routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, text="404 page not found")
        return await route(request)

    async def _start(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if not body.get("userID"):
            return httpx.Response(400, json={"error": "User ID is required"})
        session_id = body.get("sessionID") or f"s{self._next_id}"
        if not body.get("sessionID"):
            self._next_id += 1
        self.sessions.setdefault(body["userID"], {}).setdefault(session_id, [])
        return httpx.Response(200, json={"sessionID": session_id, "success": True})

    async def _stream(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        user_id, session_id, message = body.get("userID"), body.get("sessionID"), body.get("message")
        if not (user_id and session_id and message):
            return httpx.Response(
                400, json={"error": "UserID, SessionID, and Message are required"}
            )
        reply = self.replies.pop(0) if self.replies else Reply(fragments=["OK"])
        if reply.status_code != 200:
            return httpx.Response(reply.status_code, json={"error": "Stream rejected"})

        async def body_stream() -> AsyncIterator[bytes]:
            for index, fragment in enumerate(reply.fragments):
                if reply.fail_after is not None and index >= reply.fail_after:
                    raise httpx.ReadError("Connection reset by peer", request=request)
                if reply.hold_at == index:
                    reply.held.set()
                    await reply.release.wait()
                yield fragment.encode()
            if reply.fail_after is not None and reply.fail_after >= len(reply.fragments):
                raise httpx.ReadError("Connection reset by peer", request=request)
            self.add_session(user_id, session_id, ("human", message), ("ai", "".join(reply.fragments)))

        return httpx.Response(200, headers={"Content-Type": "text/plain"}, content=body_stream())

    async def _history(self, request: httpx.Request) -> httpx.Response:
        user_id = request.url.params.get("userID")
        session_id = request.url.params.get("sessionID")
        if not user_id or not session_id:
            return httpx.Response(400, json={"error": "UserID and SessionID are required"})
        hold = self.history_holds.pop(session_id, None)
        if hold is not None:
            held, release = hold
            held.set()
            await release.wait()
        messages = self.sessions.get(user_id, {}).get(session_id)
        return httpx.Response(200, json={"messages": messages or None})

    async def _conversations(self, request: httpx.Request) -> httpx.Response:
        user_id = request.url.params.get("userID")
        if not user_id:
            return httpx.Response(400, json={"error": "UserID is required"})
        if self.conversation_scripts:
            gate, payload = self.conversation_scripts.pop(0)
            if gate is not None:
                await gate.wait()
            return httpx.Response(200, json={"conversations": payload})
        conversations = [
            {"sessionID": sid, "messageCount": len(messages)}
            for sid, messages in self.sessions.get(user_id, {}).items()
        ]
        return httpx.Response(200, json={"conversations": conversations or None})

    async def _delete(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if not body.get("userID") or not body.get("sessionID"):
            return httpx.Response(400, json={"error": "UserID and SessionID are required"})
        self.sessions.get(body["userID"], {}).pop(body["sessionID"], None)
        return httpx.Response(200, json={"success": True})


class RecordingView:
    """SessionView that records commands and keeps a plain model of the screen."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []
        self.rendered: list[tuple[Role, str]] = []
        self.stream: str | None = None
        self.conversations: list[ConversationSummary] = []
        self.active_session = ""
        self.screen = "login"
        self.input_enabled = False
        self.send_enabled = True
        self.remembered: str | None = None

    def event_names(self) -> list[str]:
        return [name for name, _ in self.events]

    def show_chat(self, user_id: str) -> None:
        self.events.append(("show_chat", user_id))
        self.screen = "chat"

    def show_login(self) -> None:
        self.events.append(("show_login", None))
        self.screen = "login"

    def render_messages(self, messages: list[Message]) -> None:
        self.events.append(("render_messages", len(messages)))
        self.rendered = [(m.role, m.content) for m in messages]
        self.stream = None

    def append_message(self, message: Message) -> None:
        self.events.append(("append_message", message.content))
        self.rendered.append((message.role, message.content))

    def render_conversations(
        self, conversations: list[ConversationSummary], current_session_id: str
    ) -> None:
        self.events.append(("render_conversations", current_session_id))
        self.conversations = list(conversations)
        self.active_session = current_session_id

    def begin_stream(self) -> None:
        self.events.append(("begin_stream", None))
        self.stream = ""

    def update_stream(self, text: str) -> None:
        self.events.append(("update_stream", text))
        self.stream = text

    def finish_stream(self, text: str) -> None:
        self.events.append(("finish_stream", text))
        self.rendered.append((Role.ASSISTANT, text))
        self.stream = None

    def discard_stream(self) -> None:
        self.events.append(("discard_stream", None))
        self.stream = None

    def set_input_enabled(self, enabled: bool) -> None:
        self.events.append(("set_input_enabled", enabled))
        self.input_enabled = enabled

    def set_send_enabled(self, enabled: bool) -> None:
        self.events.append(("set_send_enabled", enabled))
        self.send_enabled = enabled

    def remember_user(self, user_id: str) -> None:
        self.events.append(("remember_user", user_id))
        self.remembered = user_id


@pytest.fixture
def server() -> FakeChatServer:
    """Fresh fake chat server per test."""
    return FakeChatServer()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(api_base_url=BASE_URL, request_timeout=5.0)


@pytest.fixture
async def api_client(
    server: FakeChatServer, client_config: ClientConfig
) -> AsyncGenerator[ChatApiClient]:
    """ChatApiClient talking to the fake server.

    Yields:
        Client closed after the test.
    """
    async with ChatApiClient(client_config, transport=server.transport()) as client:
        yield client


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def controller(api_client: ChatApiClient, view: RecordingView) -> SessionController:
    return SessionController(api_client, view, fallback_reply="Something went wrong.")
