"""Transport implementations."""

from bucket_client.transports._requests import RequestsTransport

__all__ = ["RequestsTransport"]
