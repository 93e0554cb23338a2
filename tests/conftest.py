"""Pytest configuration and shared fixtures."""

import os

import pytest
from dotenv import load_dotenv

from sheetview.registry import InMemoryQueryStore, QueryRegistry
from sheetview.rows import InMemoryRowStore

load_dotenv()

# -- Redis availability check (cached for the session) --

_redis_available: bool | None = None


def _check_redis() -> bool:
    """Check if Redis is reachable. Result is cached for the session."""
    global _redis_available  # noqa: PLW0603
    if _redis_available is not None:
        return _redis_available
    import socket
    url = os.environ.get("REDIS_URL", "redis://localhost:6379")
    host_port = url.split("://", 1)[-1].split("/", 1)[0].rsplit("@", 1)[-1]
    host, _, port = host_port.partition(":")
    try:
        with socket.create_connection((host or "localhost", int(port or 6379)), timeout=2):
            _redis_available = True
    except OSError:
        _redis_available = False
    return _redis_available


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "redis: tests that need a running Redis server")


def pytest_collection_modifyitems(config, items):
    """Auto-skip Redis tests when no server is reachable."""
    skip_redis = pytest.mark.skip(reason="Redis not reachable")
    if any("redis" in item.keywords for item in items) and not _check_redis():
        for item in items:
            if "redis" in item.keywords:
                item.add_marker(skip_redis)


@pytest.fixture
def query_store():
    return InMemoryQueryStore()


@pytest.fixture
def registry(query_store):
    return QueryRegistry(query_store)


@pytest.fixture
def row_store():
    return InMemoryRowStore()
