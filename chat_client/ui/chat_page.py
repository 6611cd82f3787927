"""NiceGUI chat page: a thin adapter over the SessionController.

Gestures become controller operations wrapped in ``run_action``; controller
render commands become widget updates in :class:`NiceGuiView`.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from nicegui import app, ui

from chat_client.api.client import ChatApiClient
from chat_client.api.config import ClientConfig, get_client_config
from chat_client.models.schemas import ConversationSummary, Message, Role
from chat_client.session.actions import Notification, run_action
from chat_client.session.controller import SessionController

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }

    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .conversation-item { border-radius: 8px; cursor: pointer; }
    .conversation-item:hover { background: #eef2ff; }
    .conversation-item.active { background: #e0e7ff; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #667eea;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-error { color: #dc2626; font-size: 0.75rem; min-height: 1rem; }
</style>
"""

TITLE_LENGTH = 20


def truncate(text: str, max_length: int = TITLE_LENGTH) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class DraftInput(Protocol):
    value: str


async def submit_message(
    controller: SessionController,
    draft: DraftInput,
    notify: Callable[[Notification], None],
) -> None:
    """Send the composed message from the Enter key or the send button.

    Ignored while a reply streams, so the draft survives a mid-stream Enter.
    The input is cleared only when there is text to send.
    """
    if controller.is_sending():
        return
    text = draft.value or ""
    if text.strip():
        draft.value = ""
    await run_action(controller.send_message(text), notify)


class NiceGuiView:
    """SessionView backed by NiceGUI widgets.

    Args:
        config: Client configuration (timeouts, storage key).
        on_select: Called with a session ID when a sidebar entry is clicked.
        on_request_delete: Called with a session ID when its delete icon is clicked.
    """

    def __init__(
        self,
        config: ClientConfig,
        on_select: Callable[[str], Awaitable[None]],
        on_request_delete: Callable[[str], None],
    ) -> None:
        self._config = config
        self._on_select = on_select
        self._on_request_delete = on_request_delete

        self.login_card: ui.card
        self.chat_layout: ui.row
        self.user_input: ui.input
        self.login_button: ui.button
        self.user_label: ui.label
        self.conversations_column: ui.column
        self.messages_container: ui.column
        self.scroll: ui.scroll_area
        self.message_input: ui.textarea
        self.send_button: ui.button
        self.new_button: ui.button
        self.error_labels: dict[str, ui.label] = {}
        self._error_timers: dict[str, ui.timer] = {}

        self._placeholder: ui.column | None = None
        self._typing_row: ui.row | None = None
        self._stream_row: ui.row | None = None
        self._stream_markdown: ui.markdown | None = None

    # === Render commands ===

    def show_chat(self, user_id: str) -> None:
        self.user_label.set_text(user_id)
        self.login_card.set_visibility(False)
        self.chat_layout.set_visibility(True)

    def show_login(self) -> None:
        self.chat_layout.set_visibility(False)
        self.login_card.set_visibility(True)
        self.user_input.value = ""
        self.user_input.run_method("focus")

    def render_messages(self, messages: list[Message]) -> None:
        self._reset_stream()
        self.messages_container.clear()
        self._placeholder = None
        with self.messages_container:
            if not messages:
                self._render_placeholder()
            for message in messages:
                self._render_message(message)
        self._scroll_to_bottom()

    def append_message(self, message: Message) -> None:
        self._remove_placeholder()
        with self.messages_container:
            self._render_message(message)
        self._scroll_to_bottom()

    def render_conversations(
        self, conversations: list[ConversationSummary], current_session_id: str
    ) -> None:
        self.conversations_column.clear()
        with self.conversations_column:
            if not conversations:
                ui.label("No conversations yet").classes("text-sm text-gray-400 p-2")
                return
            for conversation in conversations:
                self._render_conversation(conversation, conversation.session_id == current_session_id)

    def begin_stream(self) -> None:
        self._reset_stream()
        self._remove_placeholder()
        with self.messages_container, ui.row().classes("w-full justify-start gap-3 items-end") as row:
            self._render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"), ui.row().classes("gap-1"):
                for _ in range(3):
                    ui.element("div").classes("typing-dot")
        self._typing_row = row
        self._scroll_to_bottom()

    def update_stream(self, text: str) -> None:
        if self._stream_markdown is None:
            if self._typing_row is not None:
                self._typing_row.delete()
                self._typing_row = None
            with self.messages_container:
                self._stream_row, self._stream_markdown = self._render_bubble(Role.ASSISTANT, text)
        else:
            self._stream_markdown.set_content(text)
        self._scroll_to_bottom()

    def finish_stream(self, text: str) -> None:
        self.update_stream(text)
        self._typing_row = None
        self._stream_row = None
        self._stream_markdown = None

    def discard_stream(self) -> None:
        self._reset_stream()

    def set_input_enabled(self, enabled: bool) -> None:
        self.message_input.set_enabled(enabled)
        if enabled:
            self.message_input.run_method("focus")

    def set_send_enabled(self, enabled: bool) -> None:
        self.send_button.set_enabled(enabled)

    def remember_user(self, user_id: str) -> None:
        app.storage.user[self._config.user_id_storage_key] = user_id

    # === Notifications ===

    def notify(self, notification: Notification) -> None:
        """Show a notice inline under its field, or as a toast."""
        field = notification.field or ""
        label = self.error_labels.get(field)
        if label is not None:
            # A newer message restarts the countdown
            previous = self._error_timers.pop(field, None)
            if previous is not None:
                previous.cancel()
            label.set_text(notification.message)
            with label:
                self._error_timers[field] = ui.timer(
                    self._config.notification_timeout, lambda: label.set_text(""), once=True
                )
            return
        ui.notify(
            notification.message,
            type=notification.kind,
            timeout=int(self._config.notification_timeout * 1000),
        )

    # === Widgets ===

    def _render_avatar(self, is_user: bool) -> None:
        css = "bg-indigo-500" if is_user else "bg-gray-500"
        icon = "person" if is_user else "smart_toy"
        with ui.element("div").classes(f"w-9 h-9 rounded-full flex items-center justify-center {css}"):
            ui.icon(icon).classes("text-white text-lg")

    def _render_bubble(self, role: Role, content: str) -> tuple[ui.row, ui.markdown | ui.label]:
        is_user = role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"
        with ui.row().classes(f"w-full {align} gap-3 items-end") as row:
            if not is_user:
                self._render_avatar(False)
            with ui.element("div").classes(f"max-w-[70%] px-4 py-3 {bubble}"):
                # Markdown for assistant replies, plain text for user input
                if is_user:
                    body = ui.label(content).classes("text-sm whitespace-pre-wrap")
                else:
                    body = ui.markdown(content).classes("text-sm leading-relaxed")
            if is_user:
                self._render_avatar(True)
        return row, body

    def _render_message(self, message: Message) -> None:
        self._render_bubble(message.role, message.content)

    def _render_placeholder(self) -> None:
        with ui.column().classes("w-full h-64 items-center justify-center gap-3") as placeholder:
            ui.icon("forum").classes("text-5xl text-gray-300")
            ui.label("What can I help with?").classes("text-lg text-gray-400")
        self._placeholder = placeholder

    def _remove_placeholder(self) -> None:
        if self._placeholder is not None:
            self._placeholder.delete()
            self._placeholder = None

    def _render_conversation(self, conversation: ConversationSummary, active: bool) -> None:
        session_id = conversation.session_id
        classes = "conversation-item w-full items-center justify-between px-3 py-2"
        if active:
            classes += " active"
        with ui.row().classes(classes).on("click", lambda: self._on_select(session_id)):
            with ui.column().classes("gap-0"):
                ui.label(truncate(session_id)).classes("text-sm font-medium")
                ui.label(f"{conversation.message_count} messages").classes("text-xs text-gray-500")
            # click.stop keeps the row from also switching to this conversation
            ui.button(icon="delete").props(
                "flat round dense size=sm color=grey aria-label='Delete conversation'"
            ).on("click.stop", lambda: self._on_request_delete(session_id))

    def _reset_stream(self) -> None:
        for element in (self._typing_row, self._stream_row):
            if element is not None:
                element.delete()
        self._typing_row = None
        self._stream_row = None
        self._stream_markdown = None

    def _scroll_to_bottom(self) -> None:
        self.scroll.scroll_to(percent=1.0)


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_client_config()
    api = ChatApiClient(config)
    ui.context.client.on_disconnect(api.aclose)

    controller: SessionController

    async def select_conversation(session_id: str) -> None:
        await run_action(controller.switch_conversation(session_id), view.notify)

    def request_delete(session_id: str) -> None:
        controller.deletion.request_delete(session_id)
        delete_dialog.open()

    view = NiceGuiView(config, on_select=select_conversation, on_request_delete=request_delete)
    controller = SessionController(api, view, fallback_reply=config.fallback_reply)

    async def login() -> None:
        view.login_button.disable()
        try:
            await run_action(controller.login(view.user_input.value), view.notify)
        finally:
            view.login_button.enable()

    async def send_message() -> None:
        await submit_message(controller, view.message_input, view.notify)

    async def new_conversation() -> None:
        view.new_button.disable()
        try:
            await run_action(controller.new_conversation(), view.notify)
        finally:
            view.new_button.enable()

    def cancel_delete() -> None:
        controller.deletion.cancel()
        delete_dialog.close()

    async def confirm_delete() -> None:
        delete_dialog.close()
        await run_action(
            controller.deletion.confirm(),
            view.notify,
            success_message="Conversation deleted successfully",
        )

    # === Delete confirmation ===
    with ui.dialog().props("persistent") as delete_dialog, ui.card():
        ui.label("Delete Conversation").classes("text-lg font-semibold")
        ui.label(
            "Are you sure you want to delete this conversation? This action cannot be undone."
        ).classes("text-sm text-gray-600")
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=cancel_delete).props("flat")
            ui.button("Delete", on_click=confirm_delete).props("color=negative")

    # === Login ===
    with ui.card().classes("mx-auto mt-24 w-96 p-6 gap-3") as view.login_card:
        ui.label(config.ui_title).classes("text-xl font-semibold")
        view.user_input = (
            ui.input("User ID", placeholder="Enter your user ID")
            .classes("w-full")
            .on("keydown.enter", login)
        )
        view.error_labels["user_id"] = ui.label("").classes("input-error")
        view.login_button = ui.button("Start Chatting", on_click=login).classes("w-full")

    # === Chat ===
    with ui.row().classes("w-full max-w-6xl mx-auto app-container no-wrap").style(
        "height: calc(100vh - 4rem)"
    ) as view.chat_layout:
        with ui.column().classes("w-64 h-full p-3 gap-2 border-r"):
            view.new_button = ui.button(
                "New conversation", icon="add", on_click=new_conversation
            ).classes("w-full")
            with ui.scroll_area().classes("flex-grow w-full"):
                view.conversations_column = ui.column().classes("w-full gap-1")

        with ui.column().classes("flex-grow h-full gap-0"):
            with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
                with ui.row().classes("items-center gap-3"):
                    ui.icon("smart_toy").classes("text-white text-3xl")
                    ui.label(config.ui_title).classes("text-lg font-semibold text-white")
                with ui.row().classes("items-center gap-3"):
                    view.user_label = ui.label("").classes("text-sm text-white/80")
                    ui.button(icon="logout", on_click=controller.sign_out).props(
                        "flat round color=white"
                    )

            with ui.scroll_area().classes("flex-grow w-full bg-gray-50") as view.scroll:
                view.messages_container = ui.column().classes("w-full p-5 gap-4")

            with ui.column().classes("w-full p-4 gap-1 bg-white border-t"):
                with ui.row().classes("w-full gap-3 items-end"):
                    view.message_input = (
                        ui.textarea(placeholder="Type a message...")
                        .props("autogrow borderless dense rows=1")
                        .classes("flex-grow")
                        .on("keydown.enter.prevent", send_message)
                    )
                    view.send_button = ui.button(icon="send", on_click=send_message).props(
                        "round unelevated"
                    )
                view.error_labels["message"] = ui.label("").classes("input-error")

    view.chat_layout.set_visibility(False)
    view.set_input_enabled(False)

    # Prefill only; the user still has to submit
    stored_user_id = app.storage.user.get(config.user_id_storage_key)
    if stored_user_id:
        view.user_input.value = stored_user_id
