"""Chat Client - conversation sessions and streamed replies over HTTP.

Talks to a remote chat service that owns persistence and generation, and
keeps the client side consistent while replies stream in.

Components:
    - api: HTTP client and configuration
    - session: controller, stream ingestion, conversation cache, delete flow
    - ui: NiceGUI page rendering the session
    - models: Wire and view schemas
"""

__version__ = "0.1.0"
