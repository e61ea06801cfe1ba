"""Pagination: windowed, cached reading with a Seeker.

Demonstrates:
- Reading pages with get_data() and next()
- Cache hits when seeking back to a previously read offset
- The short first window after seeking to a misaligned offset
- Exhausted as the end-of-data signal
"""

from __future__ import annotations

import os

from bucket_client import ClientProfile, Exhausted, Registry, RegistryConfig, TransportConfig

if __name__ == "__main__":
    config = RegistryConfig(
        transports={"http": TransportConfig(type="requests")},
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
        seeker = client.my_buckets({"sort": "desc"})
        seeker.set_limit(5)

        # --- First window: fetched, cached at offset 0, cursor moves to 5 ---
        page = seeker.get_data()
        print(f"Fetched {len(page)} buckets, offset is now {seeker.offset}")

        # --- Seek back: served from cache, no request ---
        seeker.seek(0)
        again = seeker.get_data()
        print(f"Same items: {again == page}, cached offsets: {sorted(seeker.cache)}")

        # --- Misaligned seek: the next window is short (5 - 7 % 5 = 3 items) ---
        seeker.seek(7)
        try:
            short = seeker.get_data()
            print(f"Window at 7 has {len(short)} items, offset is now {seeker.offset}")
        except Exhausted as exc:
            print(f"Nothing at offset {exc.offset}")

        # --- Walk the rest until Exhausted ---
        for window in seeker.pages():
            print(f"Window of {len(window)} ending at offset {seeker.offset}")

        # --- Iterate every object in a bucket ---
        if page:
            for obj in client.my_objects(page[0].alias):
                print(f"{obj.alias}: {obj.content_length} bytes")

    print("Done!")
