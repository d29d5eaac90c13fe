"""
Tests package for the side-tracker bot

This package contains all unit tests.

Test organization:
- test_locator.py: Tests for post address parsing and rendering
- test_post.py: Tests for the Post model
- test_thread.py: Tests for thread flattening
- test_sidetrack.py: Tests for prompt rendering and answer parsing
- test_reply.py: Tests for reply composition (text, facets, threading)
- test_session_store.py: Tests for session persistence
- test_config.py: Tests for configuration loading
- test_bluesky_client.py: Tests for the Bluesky client (mocked atproto Client)
- test_cli.py: Tests for the command-line entry point
- conftest.py: Shared fixtures and test utilities
"""

__version__ = "1.0.0"
