"""
Shared test fixtures and utilities for OmniNATS tests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import msgspec
import pytest

from omninats.config import ConnectionSettings, Settings
from omninats.serdes import BaseSerDes, SerDesRegistry, default_registry
from omninats.transport import ConnectionManager


class Order(msgspec.Struct):
    """A simple record with JSON representable fields."""

    sku: str
    quantity: int
    tags: List[str] = msgspec.field(default_factory=list)


@dataclass
class Point:
    a: int
    label: Optional[str] = None


class SpySerDes(BaseSerDes):
    """SerDes that records every call, for selection and invocation tests."""

    def __init__(self, name: str, priority: int, supported=(object,), fail: bool = False):
        self._name = name
        self._priority = priority
        self.supported = tuple(supported)
        self.fail = fail
        self.supports_calls: List[Any] = []
        self.serialize_calls: List[Any] = []
        self.deserialize_calls: List[Any] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    def supports(self, target_type: Any) -> bool:
        self.supports_calls.append(target_type)
        return object in self.supported or target_type in self.supported

    def serialize(self, value: Any, target_type: Any = None) -> Optional[bytes]:
        self.serialize_calls.append(value)
        if self.fail:
            raise RuntimeError("boom")
        return f"{self._name}:{value}".encode()

    def deserialize(self, data: bytes, target_type: Any) -> Any:
        self.deserialize_calls.append(data)
        if self.fail:
            raise RuntimeError("boom")
        return (self._name, data)


class FakeReply:
    """Stand-in for ``nats.aio.msg.Msg``."""

    def __init__(self, data: bytes, subject: str = "_INBOX.reply", headers=None):
        self.data = data
        self.subject = subject
        self.headers = headers


@dataclass
class FakeTransport:
    """In-memory transport recording published messages and requests."""

    replies: Dict[str, bytes] = field(default_factory=dict)
    published: List[tuple] = field(default_factory=list)
    requests: List[tuple] = field(default_factory=list)
    connected: bool = False
    closed: bool = False

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    async def publish(self, subject, payload, headers=None) -> None:
        self.published.append((subject, payload, headers))

    async def request(self, subject, payload, timeout, headers=None) -> FakeReply:
        self.requests.append((subject, payload, timeout, headers))
        return FakeReply(self.replies.get(subject, b""))


@pytest.fixture
def registry() -> SerDesRegistry:
    """Registry with the built-in serdes."""
    return default_registry()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def audit_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connections(transport: FakeTransport, audit_transport: FakeTransport) -> ConnectionManager:
    """Connection manager with fake 'default' and 'audit' transports."""
    settings = Settings(
        connections={
            "default": ConnectionSettings(),
            "audit": ConnectionSettings(name="audit"),
        },
        request_timeout=1.5,
    )
    return ConnectionManager(
        settings,
        transports={"default": transport, "audit": audit_transport},
    )
