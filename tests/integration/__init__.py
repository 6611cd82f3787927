"""Integration tests for components working together.

Coverage:
    - ChatApiClient request/response mapping and streaming
    - SessionController flows: sign-in, send, switch, delete, sign-out

Runs against the in-memory fake chat server, so no network is needed.
"""
