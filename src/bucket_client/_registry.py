"""Registry: transport lifecycle management and client access."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from bucket_client._client import BucketClient
from bucket_client._config import RegistryConfig
from bucket_client._pipeline import DEFAULT_SESSION_ENDPOINT, Pipeline

if TYPE_CHECKING:
    from types import TracebackType

    from bucket_client._transport import Transport

# Global transport factory registry: maps type strings to transport classes.
_TRANSPORT_FACTORIES: dict[str, type[Transport]] = {}


def register_transport(type_name: str, cls: type[Transport]) -> None:
    """Register a transport class for a given type string.

    :param type_name: The type identifier (e.g. ``"requests"``).
    :param cls: The transport class to instantiate.
    """
    _TRANSPORT_FACTORIES[type_name] = cls


def _register_builtin_transports() -> None:
    """Register the built-in transports."""
    from bucket_client.transports._requests import RequestsTransport

    if "requests" not in _TRANSPORT_FACTORIES:
        register_transport("requests", RequestsTransport)


class Registry:
    """Manages transport lifecycle and provides access to named clients.

    Clients sharing a transport config share one transport instance. Each
    :meth:`get_client` call builds a new pipeline, so each client holds its
    own session.

    :param config: Optional configuration. Validates immediately.
    :raises ValueError: If config is invalid.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        _register_builtin_transports()
        self._config = config or RegistryConfig()
        self._config.validate()
        self._transports: dict[str, Transport] = {}

    def __repr__(self) -> str:
        clients = sorted(self._config.clients.keys())
        return f"Registry(clients={clients!r})"

    def get_client(self, name: str) -> BucketClient:
        """Build a client from its profile name.

        :param name: The client profile name.
        :raises KeyError: If no client profile with this name exists.
        :raises ValueError: If the profile's options or password source are invalid.
        """
        if name not in self._config.clients:
            available = sorted(self._config.clients.keys())
            raise KeyError(f"Unknown client '{name}'. Available clients: {available}")

        profile = self._config.clients[name]
        transport = self._get_transport(profile.transport)
        options = dict(profile.options)
        session_endpoint = str(options.pop("session_endpoint", DEFAULT_SESSION_ENDPOINT))
        leeway = options.pop("expiry_leeway", 0)
        if options:
            raise ValueError(f"Unknown options for client '{name}': {sorted(options.keys())}")
        if not isinstance(leeway, (int, float)):
            raise ValueError(f"expiry_leeway for client '{name}' must be a number of seconds")
        pipeline = Pipeline(
            profile.host,
            profile.username,
            profile.resolve_password(),
            transport,
            session_endpoint=session_endpoint,
            expiry_leeway=timedelta(seconds=leeway),
        )
        return BucketClient(pipeline)

    def _get_transport(self, name: str) -> Transport:
        """Lazily instantiate and cache a transport."""
        if name not in self._transports:
            cfg = self._config.transports[name]
            if cfg.type not in _TRANSPORT_FACTORIES:
                raise ValueError(
                    f"Unknown transport type '{cfg.type}'. Registered types: {sorted(_TRANSPORT_FACTORIES.keys())}"
                )
            factory = _TRANSPORT_FACTORIES[cfg.type]
            try:
                self._transports[name] = factory(**cfg.options)
            except TypeError as exc:
                raise ValueError(
                    f"Invalid options for transport '{name}' (type={cfg.type!r}): {exc}. "
                    f"Provided options: {sorted(cfg.options.keys())}"
                ) from exc
        return self._transports[name]

    def close(self) -> None:
        """Close all instantiated transports."""
        for transport in self._transports.values():
            transport.close()
        self._transports.clear()

    def __enter__(self) -> Registry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
