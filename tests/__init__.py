"""Test package for the chat client.

Structure:
    - unit/: Session components tested in isolation
    - integration/: HTTP client and controller flows against a fake server

The fake server lives in conftest.py and is plugged into the real
ChatApiClient through httpx.MockTransport. Leverages pytest with
pytest-check for soft assertions.
"""
