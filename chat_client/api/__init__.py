"""HTTP access to the remote chat service.

Responsibilities:
    - Session start/join, history and conversation list requests
    - Streaming sends consumed as raw text fragments
    - Conversation deletion
    - Environment-driven client configuration

Maps transport and application failures onto the session error types.
"""

from chat_client.api.client import ChatApiClient
from chat_client.api.config import ClientConfig, get_client_config

__all__ = ["ChatApiClient", "ClientConfig", "get_client_config"]
