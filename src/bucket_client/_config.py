"""Configuration model: immutable data containers describing transports and clients."""

from __future__ import annotations

import dataclasses
import os
from typing import Optional


@dataclasses.dataclass(frozen=True)
class TransportConfig:
    """Describes a transport instance.

    :param type: Transport type identifier (e.g. ``"requests"``).
    :param options: Transport-specific constructor options (e.g. ``timeout``).
    """

    type: str
    options: dict[str, object] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class ClientProfile:
    """Describes a named client: one host and one set of credentials.

    :param transport: Name of the transport config to use.
    :param host: Base URL of the service.
    :param username: Account name.
    :param password: Account password. Ignored when ``password_env`` is set.
    :param password_env: Name of an environment variable holding the password.
    :param options: Pipeline options: ``session_endpoint`` (str) and
        ``expiry_leeway`` (seconds).
    """

    transport: str
    host: str
    username: str
    password: str = dataclasses.field(default="", repr=False)
    password_env: Optional[str] = None
    options: dict[str, object] = dataclasses.field(default_factory=dict)

    def resolve_password(self) -> str:
        """Return the password, reading ``password_env`` if configured.

        :raises ValueError: If ``password_env`` names an unset variable.
        """
        if self.password_env is None:
            return self.password
        value = os.environ.get(self.password_env)
        if value is None:
            raise ValueError(f"Environment variable '{self.password_env}' is not set")
        return value


@dataclasses.dataclass(frozen=True)
class RegistryConfig:
    """Top-level configuration container.

    :param transports: Mapping of transport names to their configs.
    :param clients: Mapping of client names to their profiles.
    """

    transports: dict[str, TransportConfig] = dataclasses.field(default_factory=dict)
    clients: dict[str, ClientProfile] = dataclasses.field(default_factory=dict)

    def validate(self) -> None:
        """Validate that all client profiles reference existing transports.

        :raises ValueError: If a client references a non-existent transport.
        """
        for client_name, profile in self.clients.items():
            if profile.transport not in self.transports:
                raise ValueError(
                    f"Client '{client_name}' references unknown transport '{profile.transport}'. "
                    f"Available transports: {sorted(self.transports.keys())}"
                )

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RegistryConfig:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with ``transports`` and ``clients`` keys.
        """
        raw_transports = data.get("transports", {})
        raw_clients = data.get("clients", {})
        if not isinstance(raw_transports, dict) or not isinstance(raw_clients, dict):
            msg = "Expected 'transports' and 'clients' to be dicts"
            raise TypeError(msg)

        transports: dict[str, TransportConfig] = {}
        for name, cfg in raw_transports.items():
            if not isinstance(cfg, dict):
                msg = f"Transport config for '{name}' must be a dict"
                raise TypeError(msg)
            transports[str(name)] = TransportConfig(
                type=str(cfg["type"]),
                options=dict(cfg.get("options", {})),
            )

        clients: dict[str, ClientProfile] = {}
        for name, prof in raw_clients.items():
            if not isinstance(prof, dict):
                msg = f"Client profile for '{name}' must be a dict"
                raise TypeError(msg)
            password_env = prof.get("password_env")
            clients[str(name)] = ClientProfile(
                transport=str(prof["transport"]),
                host=str(prof["host"]),
                username=str(prof["username"]),
                password=str(prof.get("password", "")),
                password_env=str(password_env) if password_env is not None else None,
                options=dict(prof.get("options", {})),
            )

        return cls(transports=transports, clients=clients)
