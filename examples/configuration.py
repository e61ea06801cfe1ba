"""Configuration: config-as-code, from_dict(), and multiple clients.

Demonstrates different ways to create and use RegistryConfig.
"""

from __future__ import annotations

from bucket_client import ClientProfile, Registry, RegistryConfig, TransportConfig

if __name__ == "__main__":
    # --- Option 1: Config-as-code with Python objects ---
    config = RegistryConfig(
        transports={
            "http": TransportConfig(type="requests", options={"timeout": 15}),
            "insecure": TransportConfig(type="requests", options={"verify": False}),
        },
        clients={
            "prod": ClientProfile(
                transport="http",
                host="https://bucket.example.com",
                username="deploy",
                password_env="BUCKET_PASSWORD",
                options={"expiry_leeway": 600},
            ),
            "dev": ClientProfile(
                transport="insecure",
                host="https://localhost:8443",
                username="dev",
                password="dev",
            ),
        },
    )

    with Registry(config) as registry:
        dev = registry.get_client("dev")
        print(f"Client: {dev!r}")
        print(f"Seeker: {dev.my_buckets()!r}")

    # --- Option 2: from_dict(): e.g. loaded from TOML or JSON ---
    raw = {
        "transports": {"http": {"type": "requests", "options": {"timeout": 30}}},
        "clients": {
            "main": {
                "transport": "http",
                "host": "https://bucket.example.com",
                "username": "alice",
                "password_env": "BUCKET_PASSWORD",
                "options": {"session_endpoint": "/api/v1/session"},
            },
        },
    }
    config = RegistryConfig.from_dict(raw)
    print(f"\nfrom_dict(): {len(config.clients)} client(s) on {len(config.transports)} transport(s)")

    # --- Config validation: referencing unknown transport raises ValueError ---
    try:
        bad = RegistryConfig(
            transports={},
            clients={"orphan": ClientProfile(transport="nonexistent", host="https://h", username="x")},
        )
        bad.validate()
    except ValueError as exc:
        print(f"\nValidation error: {exc}")

    print("\nDone!")
