"""Tests for ModelBoard components.

Unit tests cover parsing, provider selection, views, the upstream client,
the poller and the admin registry. ``test_api`` drives the full FastAPI
application against a mocked upstream.
"""
