"""Conversation session logic, independent of any UI toolkit.

Responsibilities:
    - Current user and current session identity
    - Conversation list caching with whole-mapping refreshes
    - Incremental rendering of streamed replies, with orphaning on switch
    - Confirmation-gated deletion
    - Conversion of failures into user notifications

Drives a SessionView through render commands and never touches widgets.
"""

from chat_client.session.actions import Notification, describe_error, run_action
from chat_client.session.confirmation import ConfirmationState, DeleteConfirmationFlow
from chat_client.session.controller import SessionController
from chat_client.session.errors import (
    BusyError,
    ChatClientError,
    RemoteError,
    TransportError,
    ValidationError,
)
from chat_client.session.ingestor import StreamIngestor
from chat_client.session.state import ClientSessionState, StreamingBuffer
from chat_client.session.store import ConversationStore
from chat_client.session.view import NullView, SessionView

__all__ = [
    "BusyError",
    "ChatClientError",
    "ClientSessionState",
    "ConfirmationState",
    "ConversationStore",
    "DeleteConfirmationFlow",
    "Notification",
    "NullView",
    "RemoteError",
    "SessionController",
    "SessionView",
    "StreamIngestor",
    "StreamingBuffer",
    "TransportError",
    "ValidationError",
    "describe_error",
    "run_action",
]
