"""Client for a bucket/object storage API with session renewal and cached pagination."""

from bucket_client._client import BucketClient
from bucket_client._config import ClientProfile, RegistryConfig, TransportConfig
from bucket_client._errors import (
    BucketClientError,
    DecodeError,
    Exhausted,
    RenewalFailed,
    ServerError,
    TransportError,
)
from bucket_client._models import Bucket, Envelope, Object, Session, User
from bucket_client._pipeline import Pipeline
from bucket_client._registry import Registry, register_transport
from bucket_client._seeker import Seeker
from bucket_client._transport import Response, Transport

__version__ = "0.1.0"

__all__ = [
    # Core
    "BucketClient",
    "Pipeline",
    "Seeker",
    "Registry",
    "register_transport",
    # Transport
    "Transport",
    "Response",
    # Models
    "Envelope",
    "Session",
    "User",
    "Bucket",
    "Object",
    # Config
    "TransportConfig",
    "ClientProfile",
    "RegistryConfig",
    # Errors
    "BucketClientError",
    "TransportError",
    "DecodeError",
    "ServerError",
    "RenewalFailed",
    "Exhausted",
    # Version
    "__version__",
]
