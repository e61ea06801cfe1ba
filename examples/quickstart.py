"""Quickstart: connect, list buckets, and download an object.

Demonstrates:
- Creating a RegistryConfig with a requests transport
- Opening a Registry and getting a BucketClient
- Reading the current user, buckets, and object content

Set BUCKET_HOST, BUCKET_USER and BUCKET_PASSWORD to point at a live service.
"""

from __future__ import annotations

import logging
import os

from bucket_client import ClientProfile, Registry, RegistryConfig, TransportConfig

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    config = RegistryConfig(
        transports={"http": TransportConfig(type="requests", options={"timeout": 10})},
        clients={
            "main": ClientProfile(
                transport="http",
                host=os.environ.get("BUCKET_HOST", "http://localhost:8080"),
                username=os.environ.get("BUCKET_USER", "demo"),
                password_env="BUCKET_PASSWORD",
            )
        },
    )

    with Registry(config) as registry:
        client = registry.get_client("main")

        me = client.me()
        print(f"Logged in as {me.username} (id={me.user_id})")

        for bucket in client.get_my_buckets({"limit": 5}):
            print(f"Bucket: {bucket.alias} public={bucket.is_public}")

            objects = client.get_my_objects(bucket.alias, {"limit": 1})
            if objects:
                with client.fetch_my_object_content(bucket.alias, objects[0].alias) as stream:
                    head = stream.read(64)
                print(f"  First object {objects[0].alias!r} starts with {head!r}")

    print("Done!")
