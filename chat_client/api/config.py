"""Client configuration with environment variable loading.

Pydantic-based configuration for the chat client and its web page.
Points at any server exposing the ``/api/chat/*`` endpoints.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_FALLBACK_REPLY = (
    "I'm sorry, I encountered an error processing your request. Please try again."
)


def _env_timeout() -> float | None:
    raw = os.getenv("REQUEST_TIMEOUT", "120")
    if raw.strip().lower() in ("", "none", "0"):
        return None
    return float(raw)


class ClientConfig(BaseModel):
    """Configuration for the chat client.

    Attributes:
        api_base_url: Base URL of the chat server (no trailing slash).
        request_timeout: Per-request timeout in seconds (None disables it).
        notification_timeout: Seconds before inline errors and toasts clear.
        user_id_storage_key: Browser storage key for the last-used user ID.
        fallback_reply: Assistant message shown when a streamed reply fails.
        ui_title: Page title.
        ui_port: Port the web page is served on.
        storage_secret: Secret NiceGUI uses to sign browser storage.
    """

    # Environment-sourced defaults go through the same validators as arguments
    model_config = ConfigDict(validate_default=True)

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8080"),
        description="Chat server base URL",
    )
    request_timeout: float | None = Field(
        default_factory=_env_timeout,
        gt=0.0,
        description="Request timeout in seconds, None for no timeout",
    )
    notification_timeout: float = Field(
        default=3.0,
        gt=0.0,
        le=60.0,
        description="Seconds before transient notifications clear",
    )
    user_id_storage_key: str = Field(
        default="chatUserID",
        min_length=1,
        description="Browser storage key for the last-used user ID",
    )
    fallback_reply: str = Field(
        default=DEFAULT_FALLBACK_REPLY,
        min_length=1,
        description="Assistant text shown when streaming fails",
    )
    ui_title: str = Field(
        default_factory=lambda: os.getenv("UI_TITLE", "Chat"),
        description="Page title",
    )
    ui_port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "8000")),
        ge=1,
        le=65535,
        description="Port for the web page",
    )
    storage_secret: str = Field(
        default_factory=lambda: os.getenv("NICEGUI_STORAGE_SECRET", "chat-client-secret"),
        min_length=1,
        description="Secret for NiceGUI browser storage",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Validate the server URL scheme and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If API_BASE_URL is not an http(s) URL.
    """
    return ClientConfig()
