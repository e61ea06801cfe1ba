"""Tests for the registry."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bucket_client._client import BucketClient
from bucket_client._config import ClientProfile, RegistryConfig, TransportConfig
from bucket_client._registry import _TRANSPORT_FACTORIES, Registry, register_transport
from bucket_client.transports._requests import RequestsTransport
from tests.fakes import FakeTransport


def _make_config() -> RegistryConfig:
    return RegistryConfig(
        transports={"http": TransportConfig(type="requests", options={"timeout": 5})},
        clients={
            "main": ClientProfile(transport="http", host="https://a.example", username="alice", password="pw"),
            "other": ClientProfile(
                transport="http",
                host="https://b.example",
                username="bob",
                password="pw",
                options={"expiry_leeway": 120, "session_endpoint": "/api/v2/session"},
            ),
        },
    )


def test_registry_validates_on_construction() -> None:
    bad_config = RegistryConfig(
        transports={},
        clients={"main": ClientProfile(transport="nonexistent", host="https://h", username="alice")},
    )
    with pytest.raises(ValueError, match="nonexistent"):
        Registry(bad_config)


def test_get_client_returns_client() -> None:
    reg = Registry(_make_config())
    client = reg.get_client("main")
    assert isinstance(client, BucketClient)
    assert client.username == "alice"
    assert client.pipeline.host == "https://a.example"
    assert isinstance(client.pipeline.transport, RequestsTransport)


def test_get_client_applies_options() -> None:
    reg = Registry(_make_config())
    pipeline = reg.get_client("other").pipeline
    assert pipeline._session_endpoint == "/api/v2/session"
    assert pipeline._expiry_leeway == timedelta(seconds=120)


def test_get_client_unknown_raises() -> None:
    reg = Registry(_make_config())
    with pytest.raises(KeyError, match="unknown_client"):
        reg.get_client("unknown_client")


def test_unknown_client_option_rejected() -> None:
    config = RegistryConfig(
        transports={"http": TransportConfig(type="requests")},
        clients={
            "main": ClientProfile(transport="http", host="https://h", username="alice", options={"retries": 3})
        },
    )
    with pytest.raises(ValueError, match="retries"):
        Registry(config).get_client("main")


def test_lazy_instantiation() -> None:
    reg = Registry(_make_config())
    assert len(reg._transports) == 0
    reg.get_client("main")
    assert len(reg._transports) == 1


def test_transport_shared_across_clients() -> None:
    reg = Registry(_make_config())
    a = reg.get_client("main")
    b = reg.get_client("other")
    assert a.pipeline.transport is b.pipeline.transport
    assert a.pipeline is not b.pipeline


def test_unknown_transport_type() -> None:
    config = RegistryConfig(
        transports={"x": TransportConfig(type="carrier-pigeon")},
        clients={"main": ClientProfile(transport="x", host="https://h", username="alice")},
    )
    with pytest.raises(ValueError, match="carrier-pigeon"):
        Registry(config).get_client("main")


def test_invalid_transport_options() -> None:
    config = RegistryConfig(
        transports={"http": TransportConfig(type="requests", options={"bogus": True})},
        clients={"main": ClientProfile(transport="http", host="https://h", username="alice")},
    )
    with pytest.raises(ValueError, match="bogus"):
        Registry(config).get_client("main")


def test_close_clears_transports() -> None:
    reg = Registry(_make_config())
    reg.get_client("main")
    assert len(reg._transports) == 1
    reg.close()
    assert len(reg._transports) == 0


def test_context_manager() -> None:
    with Registry(_make_config()) as reg:
        assert isinstance(reg.get_client("main"), BucketClient)
    assert len(reg._transports) == 0


def test_register_transport() -> None:
    Registry()
    assert _TRANSPORT_FACTORIES["requests"] is RequestsTransport
    register_transport("fake", FakeTransport)
    try:
        config = RegistryConfig(
            transports={"f": TransportConfig(type="fake")},
            clients={"main": ClientProfile(transport="f", host="https://h", username="alice")},
        )
        client = Registry(config).get_client("main")
        assert isinstance(client.pipeline.transport, FakeTransport)
    finally:
        del _TRANSPORT_FACTORIES["fake"]


def test_repr() -> None:
    assert repr(Registry(_make_config())) == "Registry(clients=['main', 'other'])"


def test_identity_equality() -> None:
    a = Registry(_make_config())
    b = Registry(_make_config())
    assert a == a
    assert a != b
    assert len({a, b}) == 2
