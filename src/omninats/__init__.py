"""
OmniNATS - Declarative NATS producers with pluggable payload serdes.

Provides:
- Declarative client interfaces (``@nats_client`` / ``@subject``)
- Priority ordered serdes selection (basic types, JSON via msgspec)
- Named NATS connections configured from code, environment or YAML
"""

from .client import ClientBuilder, Headers, Subject, nats_client, subject
from .config import ConnectionSettings, Settings
from .exceptions import (
    ClientDefinitionError,
    DecodingError,
    EncodingError,
    NoCodecFoundError,
    OmniNatsError,
    SerDesError,
)
from .models import Payload, ReceivedMessage
from .serdes import BaseSerDes, BasicSerDes, JsonSerDes, SerDesRegistry, default_registry
from .transport import ConnectionManager, NatsTransport, Transport

# Public API exports
__all__ = [
    "BaseSerDes",
    "BasicSerDes",
    "ClientBuilder",
    "ClientDefinitionError",
    "ConnectionManager",
    "ConnectionSettings",
    "DecodingError",
    "EncodingError",
    "Headers",
    "JsonSerDes",
    "NatsTransport",
    "NoCodecFoundError",
    "OmniNatsError",
    "Payload",
    "ReceivedMessage",
    "SerDesError",
    "SerDesRegistry",
    "Settings",
    "Subject",
    "Transport",
    "default_registry",
    "nats_client",
    "subject",
]

# Version info
__version__ = "0.1.0"
