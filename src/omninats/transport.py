"""
NATS transport for OmniNATS.

This module wraps the nats-py client behind a small ``Transport`` protocol
used by generated clients, and manages a set of named connections.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

import nats
from nats.aio.client import Client as NATS

from .config import DEFAULT_CONNECTION, ConnectionSettings, Settings
from .exceptions import ConnectionNotFoundError, NotConnectedError
from .logging import (
    get_logger,
    log_connection_closed,
    log_connection_opened,
    log_message_published,
    log_request_sent,
)
from .models import ReceivedMessage


class Transport(Protocol):
    """Publish side of a message broker connection."""

    async def publish(
        self,
        subject: str,
        payload: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        ...

    async def request(
        self,
        subject: str,
        payload: bytes,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
    ) -> ReceivedMessage:
        ...


class NatsTransport:
    """Transport backed by a single nats-py connection."""

    def __init__(self, settings: Optional[ConnectionSettings] = None):
        self.settings = settings or ConnectionSettings()
        self._nc: Optional[NATS] = None

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        """Connect to NATS."""
        if self._nc is not None:
            return
        self._nc = await nats.connect(**self.settings.to_connect_options())
        log_connection_opened(self.name, self.settings.servers)

    async def close(self) -> None:
        """Drain pending messages and close the connection."""
        if self._nc is None:
            return
        nc, self._nc = self._nc, None
        await nc.drain()
        log_connection_closed(self.name)

    @property
    def nc(self) -> NATS:
        """The underlying nats-py client."""
        return self._client()

    def _client(self) -> NATS:
        if self._nc is None:
            raise NotConnectedError(f"NATS connection '{self.name}' is not connected")
        return self._nc

    async def publish(
        self,
        subject: str,
        payload: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Publish a payload to a subject."""
        await self._client().publish(subject, payload, headers=headers)
        log_message_published(self.name, subject, len(payload))

    async def request(
        self,
        subject: str,
        payload: bytes,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
    ) -> ReceivedMessage:
        """Send a request and wait for the reply message."""
        log_request_sent(self.name, subject, len(payload), timeout)
        return await self._client().request(
            subject, payload, timeout=timeout, headers=headers
        )

    async def __aenter__(self) -> NatsTransport:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class ConnectionManager:
    """
    Named NATS connections.

    Transports are created eagerly from the settings, but only connect
    when :meth:`connect_all` is awaited (or the manager is entered as an
    async context manager).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transports: Optional[Dict[str, Transport]] = None,
    ):
        """
        Initialize the connection manager.

        Args:
            settings: Settings describing the named connections
            transports: Pre-built transports by name. Takes precedence over
                connections of the same name in ``settings``.
        """
        self.settings = settings or Settings()
        self._transports: Dict[str, Transport] = {
            name: NatsTransport(conn) for name, conn in self.settings.connections.items()
        }
        if transports:
            self._transports.update(transports)

    def get(self, name: str = "") -> Transport:
        """Get a transport by name; empty means the default connection."""
        key = name or DEFAULT_CONNECTION
        try:
            return self._transports[key]
        except KeyError:
            raise ConnectionNotFoundError(
                f"No NATS connection configured with name '{key}'"
            ) from None

    def names(self) -> list[str]:
        return list(self._transports)

    async def connect_all(self) -> None:
        """Connect every transport that supports connecting."""
        for transport in self._transports.values():
            connect = getattr(transport, "connect", None)
            if connect is not None:
                await connect()

    async def close_all(self) -> None:
        """Close every transport, logging failures and raising the first one."""
        first_error: Optional[BaseException] = None
        for name, transport in self._transports.items():
            close = getattr(transport, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                get_logger(connection=name).error(f"Failed to close NATS connection '{name}': {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    async def __aenter__(self) -> ConnectionManager:
        await self.connect_all()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_all()
