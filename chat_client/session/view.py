"""Render commands the controller sends to whatever displays the session."""

from typing import Protocol

from chat_client.models.schemas import ConversationSummary, Message


class SessionView(Protocol):
    """Receives render commands; never calls back into the controller."""

    def show_chat(self, user_id: str) -> None: ...

    def show_login(self) -> None: ...

    def render_messages(self, messages: list[Message]) -> None: ...

    def append_message(self, message: Message) -> None: ...

    def render_conversations(
        self, conversations: list[ConversationSummary], current_session_id: str
    ) -> None: ...

    def begin_stream(self) -> None: ...

    def update_stream(self, text: str) -> None: ...

    def finish_stream(self, text: str) -> None: ...

    def discard_stream(self) -> None: ...

    def set_input_enabled(self, enabled: bool) -> None: ...

    def set_send_enabled(self, enabled: bool) -> None: ...

    def remember_user(self, user_id: str) -> None: ...


class NullView:
    """View that ignores every command. Used when running headless."""

    def show_chat(self, user_id: str) -> None:
        pass

    def show_login(self) -> None:
        pass

    def render_messages(self, messages: list[Message]) -> None:
        pass

    def append_message(self, message: Message) -> None:
        pass

    def render_conversations(
        self, conversations: list[ConversationSummary], current_session_id: str
    ) -> None:
        pass

    def begin_stream(self) -> None:
        pass

    def update_stream(self, text: str) -> None:
        pass

    def finish_stream(self, text: str) -> None:
        pass

    def discard_stream(self) -> None:
        pass

    def set_input_enabled(self, enabled: bool) -> None:
        pass

    def set_send_enabled(self, enabled: bool) -> None:
        pass

    def remember_user(self, user_id: str) -> None:
        pass
