"""Shared test fixtures and marker registration."""

from __future__ import annotations

import pytest

from bucket_client._pipeline import Pipeline
from tests.fakes import HOST, SESSION_PATH, FakeClock, FakeTransport, envelope, session_data


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires a live storage service")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    """Fake transport whose session endpoint always grants a one-hour token."""
    t = FakeTransport()
    t.add("POST", SESSION_PATH, envelope(session_data()))
    return t


@pytest.fixture
def pipeline(transport: FakeTransport, clock: FakeClock) -> Pipeline:
    return Pipeline(HOST, "alice", "secret", transport, clock=clock)
