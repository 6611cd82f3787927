"""Session controller: who is signed in, which conversation is current.

Owns the only shared client state (the ClientSessionState and the
ConversationStore) and orchestrates every transition on it:

1. **Single writer** - Operations run as interleaved coroutines on one event
   loop, so no locks are taken. Ordering is enforced with explicit slots
   instead: one login at a time, one send per session.

2. **Orphaning** - Switching, deleting the current conversation or signing out
   abandons the in-flight StreamIngestor. Its transport may keep draining,
   but nothing it produces reaches the view again.

3. **Epochs** - Every sign-in and sign-out bumps an epoch. Results of requests
   issued under an older epoch are dropped instead of applied.

4. **Typed failures** - Each operation raises a ChatClientError subclass and
   leaves prior state intact; the action boundary turns it into a notice.
"""

import logging
from typing import TYPE_CHECKING

from chat_client.api.config import DEFAULT_FALLBACK_REPLY
from chat_client.models.schemas import ConversationSummary, Message, Role
from chat_client.session.confirmation import DeleteConfirmationFlow
from chat_client.session.errors import BusyError, ChatClientError, ValidationError
from chat_client.session.ingestor import StreamIngestor
from chat_client.session.state import ClientSessionState, StreamingBuffer
from chat_client.session.store import ConversationStore
from chat_client.session.view import NullView, SessionView

if TYPE_CHECKING:
    from chat_client.api.client import ChatApiClient

logger = logging.getLogger(__name__)


class SessionController:
    """Drive session transitions against the remote chat API.

    Args:
        api: Client for the remote chat service.
        view: Receiver of render commands. Defaults to a no-op view.
        fallback_reply: Assistant text shown when a streamed reply fails.
    """

    def __init__(
        self,
        api: "ChatApiClient",
        view: SessionView | None = None,
        fallback_reply: str = DEFAULT_FALLBACK_REPLY,
    ) -> None:
        self._api = api
        self._view: SessionView = view or NullView()
        self._fallback_reply = fallback_reply
        self.state = ClientSessionState()
        self.conversations = ConversationStore(api.list_conversations)
        self.deletion = DeleteConfirmationFlow(self.delete_conversation)
        self._login_pending = False
        self._sending: set[str] = set()
        self._ingestor: StreamIngestor | None = None
        self._epoch = 0

    @property
    def user_id(self) -> str:
        return self.state.user_id

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def messages(self) -> list[Message]:
        return list(self.state.messages)

    def is_sending(self, session_id: str | None = None) -> bool:
        """Whether a send is in flight for a session (default: the current one)."""
        return (session_id if session_id is not None else self.state.session_id) in self._sending

    def _require_user(self) -> str:
        if not self.state.signed_in:
            raise ValidationError("Please sign in first", field="user_id")
        return self.state.user_id

    async def login(self, user_id: str) -> None:
        """Sign in, load the user's conversations and start a new session.

        A user who is already signed in is signed out first. If the session
        cannot be started, the client is left signed out and the error is
        raised. A failure to load the conversation list or the new session's
        history does not undo the sign-in; it is raised once the session is
        current. A sign-out while the login is pending ends it quietly.

        Raises:
            ValidationError: Empty user ID.
            BusyError: Another login is still pending.
            RemoteError: The server rejected a request.
            TransportError: The server could not be reached.
        """
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValidationError("Please enter a user ID", field="user_id")
        if self._login_pending:
            raise BusyError("Sign-in is already in progress")

        self._login_pending = True
        try:
            if self.state.signed_in:
                self.sign_out()
            self._epoch += 1
            epoch = self._epoch
            self.state.user_id = user_id
            logger.info(f"Signing in as {user_id}")

            refresh_error: ChatClientError | None = None
            try:
                await self.refresh_conversations()
            except ChatClientError as e:
                logger.warning(f"Could not load conversations for {user_id}: {e.message}")
                refresh_error = e
            if epoch != self._epoch:
                return

            self._view.show_chat(user_id)
            history_error: ChatClientError | None = None
            try:
                await self.start_or_join("")
            except ChatClientError as e:
                if epoch != self._epoch:
                    return
                if not self.state.session_id:
                    self.sign_out()
                    raise
                # Session is current; only its history failed to load
                history_error = e
            if epoch != self._epoch:
                return

            self._view.remember_user(user_id)
            failure = refresh_error or history_error
            if failure is not None:
                raise failure
        finally:
            self._login_pending = False

    async def start_or_join(self, session_id: str = "") -> str:
        """Start a new session (``""``) or join an existing one.

        On success the returned session becomes current, its history is loaded
        and input is enabled. On failure the previous session stays current.

        Returns:
            The session ID issued by the server.
        """
        user_id = self._require_user()
        epoch = self._epoch

        new_session_id = await self._api.start_chat(user_id, session_id)

        if epoch != self._epoch:
            logger.info(f"Ignoring session {new_session_id}: signed-in user changed")
            return new_session_id
        logger.info(f"Session {new_session_id} is now current for {user_id}")
        await self._activate(new_session_id)
        return new_session_id

    async def new_conversation(self) -> str:
        return await self.start_or_join("")

    async def switch_conversation(self, session_id: str) -> None:
        """Make another existing conversation current.

        Any in-flight reply of the previous conversation is orphaned.
        """
        if session_id == self.state.session_id:
            return
        self._require_user()
        if not session_id:
            raise ValidationError("Choose a conversation to open")
        await self._activate(session_id)

    async def send_message(self, text: str) -> None:
        """Send a message to the current session and stream the reply.

        The user message is shown immediately. The reply is rendered as it
        streams; when it completes the conversation list is refreshed. If the
        stream fails, the partial reply is replaced by a single fallback
        assistant message and the error is raised.

        Raises:
            ValidationError: Empty message or no current session.
            BusyError: A reply for this session is still streaming.
            RemoteError: The server rejected the send.
            TransportError: The connection failed before or during the stream.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please enter a message", field="message")
        user_id = self._require_user()
        session_id = self.state.session_id
        if not session_id:
            raise ValidationError("Start a conversation first", field="message")
        if session_id in self._sending:
            raise BusyError("Please wait for the current reply to finish")

        self._sending.add(session_id)
        self._view.set_send_enabled(False)
        failure: ChatClientError | None = None
        ingestor: StreamIngestor | None = None
        buffer = StreamingBuffer(session_id=session_id)

        def on_update(accumulated: str) -> None:
            buffer.text = accumulated
            self._view.update_stream(accumulated)

        def on_complete(accumulated: str) -> None:
            buffer.text = accumulated
            buffer.complete = True
            self.state.streaming = None
            self.state.add_message(Role.ASSISTANT, accumulated)
            self._view.finish_stream(accumulated)

        def on_error(error: ChatClientError) -> None:
            nonlocal failure
            failure = error
            self.state.streaming = None
            self._view.discard_stream()
            self._view.append_message(
                self.state.add_message(Role.ASSISTANT, self._fallback_reply)
            )

        try:
            self._view.append_message(self.state.add_message(Role.USER, text))
            self.state.streaming = buffer
            self._view.begin_stream()

            ingestor = StreamIngestor(
                self._api.stream_message(user_id, session_id, text),
                on_update=on_update,
                on_complete=on_complete,
                on_error=on_error,
            )
            self._ingestor = ingestor
            await ingestor.run()
        finally:
            self._sending.discard(session_id)
            if self._ingestor is ingestor:
                self._ingestor = None
            if self.state.session_id == session_id:
                self._view.set_send_enabled(True)

        if failure is not None:
            logger.warning(f"Reply for session {session_id} failed: {failure.message}")
            raise failure
        if ingestor.abandoned:
            return
        await self.refresh_conversations()

    async def delete_conversation(self, session_id: str) -> None:
        """Delete a conversation; call through ``deletion.confirm()``.

        Deleting the current conversation starts a new session before the
        list is refreshed, so a current session always exists afterwards.
        """
        user_id = self._require_user()
        if not session_id:
            raise ValidationError("No conversation selected")
        epoch = self._epoch

        await self._api.delete_conversation(user_id, session_id)
        logger.info(f"Deleted conversation {session_id} for {user_id}")

        if epoch != self._epoch:
            return

        restart_error: ChatClientError | None = None
        if session_id == self.state.session_id:
            self._orphan_stream()
            self.state.messages = []
            self._view.render_messages([])
            try:
                await self.start_or_join("")
            except ChatClientError as e:
                restart_error = e

        await self.refresh_conversations()
        if restart_error is not None:
            raise restart_error

    async def refresh_conversations(self) -> list[ConversationSummary]:
        """Re-synchronize the conversation list from the server."""
        user_id = self._require_user()
        conversations = await self.conversations.refresh(user_id)
        if self.state.user_id == user_id:
            self._render_conversations()
        return conversations

    def sign_out(self) -> None:
        """Forget the user, the session, the messages and the cached list."""
        self._orphan_stream()
        self.deletion.cancel()
        self._epoch += 1
        if self.state.signed_in:
            logger.info(f"Signing out {self.state.user_id}")
        self.state.reset()
        self.conversations.clear()
        self._view.render_messages([])
        self._view.render_conversations([], "")
        self._view.set_input_enabled(False)
        self._view.show_login()

    async def _activate(self, session_id: str) -> None:
        if session_id != self.state.session_id:
            self._orphan_stream()
            self.state.session_id = session_id
            self.state.messages = []
            self._view.render_messages([])
        self._render_conversations()
        try:
            await self._load_history(session_id)
        finally:
            if self.state.session_id == session_id:
                self.state.input_enabled = True
                self._view.set_input_enabled(True)
                self._view.set_send_enabled(session_id not in self._sending)

    async def _load_history(self, session_id: str) -> None:
        epoch = self._epoch
        messages = await self._api.get_history(self.state.user_id, session_id)
        if epoch != self._epoch or self.state.session_id != session_id:
            logger.debug(f"Dropping stale history for session {session_id}")
            return
        self.state.messages = messages
        self._view.render_messages(list(messages))
        logger.info(f"Loaded {len(messages)} messages for session {session_id}")

    def _orphan_stream(self) -> None:
        if self._ingestor is not None:
            self._ingestor.abandon()
            self._ingestor = None
        buffer = self.state.streaming
        if buffer is not None:
            buffer.orphaned = True
            self.state.streaming = None
            self._view.discard_stream()
            logger.info(f"Orphaned reply stream of session {buffer.session_id}")

    def _render_conversations(self) -> None:
        self._view.render_conversations(self.conversations.list(), self.state.session_id)
