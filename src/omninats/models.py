"""
Data models for OmniNATS.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable

import msgspec
from msgspec import Struct


@runtime_checkable
class ReceivedMessage(Protocol):
    """
    A message received from the transport.

    ``nats.aio.msg.Msg`` satisfies this protocol.
    """

    subject: str
    data: bytes
    headers: Optional[Dict[str, str]]


class Payload(Struct, frozen=True):
    """
    Immutable message payload.

    Holds the encoded bytes and, optionally, the type the bytes decode to.
    """

    data: bytes = b""
    target_type: Any = None

    def __len__(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        """Check if the payload carries no bytes."""
        return not self.data


class ClientOptions(Struct, frozen=True):
    """Options attached to a class by the ``@nats_client`` decorator."""

    connection: str = ""


class OutgoingMessage(Struct, frozen=True):
    """A message about to be handed to the transport."""

    subject: str
    payload: Payload = msgspec.field(default_factory=Payload)
    headers: Optional[Dict[str, str]] = None
