"""Unit tests for individual components in isolation.

Coverage:
    - StreamIngestor: accumulation, failure and abandonment
    - ConversationStore: replacement, ordering and clear()
    - DeleteConfirmationFlow: the Idle/Awaiting state machine
    - ClientConfig and the action boundary

Uses scripted async generators and AsyncMock instead of HTTP.
"""
