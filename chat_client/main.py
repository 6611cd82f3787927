"""Main application entry point.

Serves the NiceGUI chat page. The chat server itself runs elsewhere and is
reached at API_BASE_URL. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Application entry point."""
    from nicegui import ui

    from chat_client.api.config import get_client_config
    from chat_client.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    config = get_client_config()

    logger.info(f"Chat UI available at http://localhost:{config.ui_port}/")
    logger.info(f"Using chat server at {config.api_base_url}")

    ui.run(
        title=config.ui_title,
        port=config.ui_port,
        host=os.getenv("HOST", "0.0.0.0"),
        storage_secret=config.storage_secret,
        reload=False,
        show=False,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
