"""Error handling: catching RenewalFailed, ServerError, Exhausted, etc.

Demonstrates the normalized error hierarchy and how to handle errors
programmatically using structured attributes.
"""

from __future__ import annotations

import os

from bucket_client import (
    BucketClientError,
    ClientProfile,
    Exhausted,
    Registry,
    RegistryConfig,
    RenewalFailed,
    ServerError,
    TransportConfig,
    TransportError,
)

if __name__ == "__main__":
    host = os.environ.get("BUCKET_HOST", "http://localhost:8080")
    config = RegistryConfig(
        transports={"http": TransportConfig(type="requests", options={"timeout": 5})},
        clients={
            "good": ClientProfile(transport="http", host=host, username="demo", password_env="BUCKET_PASSWORD"),
            "bad": ClientProfile(transport="http", host=host, username="demo", password="wrong"),
            "offline": ClientProfile(transport="http", host="http://127.0.0.1:9", username="demo"),
        },
    )

    with Registry(config) as registry:
        # --- RenewalFailed: wrong credentials, nothing else is sent ---
        try:
            registry.get_client("bad").me()
        except RenewalFailed as exc:
            print(f"RenewalFailed: {exc}")
            print(f"  cause={type(exc.cause).__name__}")

        # --- TransportError surfaces as the renewal cause when offline ---
        try:
            registry.get_client("offline").me()
        except RenewalFailed as exc:
            if isinstance(exc.cause, TransportError):
                print(f"\nOffline: {exc.cause}")

        client = registry.get_client("good")

        # --- ServerError: the envelope reports failure ---
        try:
            client.get_my_bucket("does-not-exist")
        except ServerError as exc:
            print(f"\nServerError: msg={exc.msg!r} err={exc.err!r} code={exc.code}")

        # --- Exhausted: pagination end, not a fault ---
        seeker = client.my_buckets()
        seeker.seek(1_000_000)
        try:
            seeker.next()
        except Exhausted as exc:
            print(f"\nExhausted at offset {exc.offset}; cursor still at {seeker.offset}")

        # --- Catch any client error with the base class ---
        try:
            client.delete_bucket("does-not-exist")
        except BucketClientError as exc:
            print(f"\nBucketClientError ({type(exc).__name__}): {exc}")

        # --- Postmortem: the pipeline keeps every error it raised ---
        print(f"\nErrors recorded: {[type(e).__name__ for e in client.pipeline.errors]}")

        # --- KeyError for unknown client names ---
        try:
            registry.get_client("unknown")
        except KeyError as exc:
            print(f"\nKeyError: {exc}")

    print("\nDone!")
