from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import msgspec
import yaml

from .exceptions import ConfigurationError

DEFAULT_CONNECTION = "default"
DEFAULT_SERVERS = ["nats://localhost:4222"]


class ConnectionSettings(msgspec.Struct, kw_only=True):
    """Settings for a single named NATS connection."""

    name: str = DEFAULT_CONNECTION
    servers: List[str] = msgspec.field(default_factory=lambda: list(DEFAULT_SERVERS))
    user: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None
    connect_timeout: float = 2.0
    reconnect_time_wait: float = 2.0
    max_reconnect_attempts: int = 60
    options: Dict[str, Any] = msgspec.field(default_factory=dict)

    def to_connect_options(self) -> Dict[str, Any]:
        """Build the keyword arguments for ``nats.connect``."""
        options: Dict[str, Any] = {
            "servers": list(self.servers),
            "name": self.name,
            "connect_timeout": self.connect_timeout,
            "reconnect_time_wait": self.reconnect_time_wait,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            **self.options,
        }

        # Add authentication
        if self.user and self.password:
            options["user"] = self.user
            options["password"] = self.password
        elif self.token:
            options["token"] = self.token

        return options


class Settings:
    """
    Configuration settings for OmniNATS with environment variable support.

    Default values are designed for development against a local NATS
    server and can be overridden via environment variables or a YAML file.
    """

    def __init__(
        self,
        *,
        connections: Optional[Dict[str, ConnectionSettings]] = None,
        request_timeout: float = 5.0,
        log_level: str = "INFO",
    ):
        """Initialize OmniNATS settings.

        Args:
            connections: Named connection settings. Defaults to a single
                "default" connection to ``nats://localhost:4222``.
            request_timeout: Seconds to wait for a reply in request/reply
                client methods. Defaults to 5.0.
            log_level: Logging level. Must be one of "DEBUG", "INFO",
                "WARNING", "ERROR", or "CRITICAL". Defaults to "INFO".

        Example:
            >>> from omninats.config import Settings, ConnectionSettings
            >>>
            >>> settings = Settings(
            ...     connections={
            ...         "default": ConnectionSettings(servers=["nats://nats:4222"]),
            ...     },
            ...     request_timeout=2.0,
            ... )
        """
        if connections is None:
            connections = {DEFAULT_CONNECTION: ConnectionSettings()}
        self.connections = connections
        self.request_timeout = request_timeout
        self.log_level = log_level

    @classmethod
    def from_env(cls) -> Settings:
        """Create Settings for the default connection from environment variables.

        Environment variables:
        - OMNINATS_SERVERS: Comma separated server URLs
        - OMNINATS_USER / OMNINATS_PASSWORD: Username and password
        - OMNINATS_TOKEN: Authentication token
        - OMNINATS_CONNECT_TIMEOUT: Connection timeout in seconds
        - OMNINATS_MAX_RECONNECT_ATTEMPTS: Maximum reconnect attempts
        - OMNINATS_REQUEST_TIMEOUT: Request/reply timeout in seconds
        - OMNINATS_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

        Raises:
            ConfigurationError: If any environment variable has an invalid value
        """
        servers_env = os.getenv("OMNINATS_SERVERS")
        servers = list(DEFAULT_SERVERS)
        if servers_env is not None:
            servers = [s.strip() for s in servers_env.split(",") if s.strip()]
            if not servers:
                raise ConfigurationError("OMNINATS_SERVERS must list at least one server")

        connect_timeout = _float_env("OMNINATS_CONNECT_TIMEOUT", 2.0)
        max_reconnect_attempts = _int_env("OMNINATS_MAX_RECONNECT_ATTEMPTS", 60)
        request_timeout = _float_env("OMNINATS_REQUEST_TIMEOUT", 5.0)

        log_level = os.getenv("OMNINATS_LOG_LEVEL", "INFO").upper()
        if log_level not in _VALID_LEVELS:
            raise ConfigurationError(
                f"Invalid OMNINATS_LOG_LEVEL: {log_level}. Must be one of {_VALID_LEVELS}"
            )

        default = ConnectionSettings(
            servers=servers,
            user=os.getenv("OMNINATS_USER"),
            password=os.getenv("OMNINATS_PASSWORD"),
            token=os.getenv("OMNINATS_TOKEN"),
            connect_timeout=connect_timeout,
            max_reconnect_attempts=max_reconnect_attempts,
        )
        return cls(
            connections={DEFAULT_CONNECTION: default},
            request_timeout=request_timeout,
            log_level=log_level,
        )

    @classmethod
    def from_yaml(cls, file_path: Union[str, Path]) -> Settings:
        """Load settings from a YAML file.

        The file holds a ``connections`` mapping of connection name to
        connection settings, plus optional ``request_timeout`` and
        ``log_level`` keys::

            request_timeout: 2.5
            connections:
              default:
                servers: ["nats://localhost:4222"]
              audit:
                servers: ["nats://audit:4222"]
                token: s3cr3t

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is not valid configuration
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        try:
            with open(file_path, "r") as f:
                config_dict = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration: {e}") from e

        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> Settings:
        """Build settings from a plain dictionary."""
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a mapping")

        raw_connections = config_dict.get("connections") or {}
        if not isinstance(raw_connections, dict):
            raise ConfigurationError("'connections' must be a mapping of name to settings")

        connections: Dict[str, ConnectionSettings] = {}
        for name, raw in raw_connections.items():
            if raw is None:
                raw = {}
            if not isinstance(raw, dict):
                raise ConfigurationError(f"Invalid connection '{name}': settings must be a mapping")
            raw = dict(raw)
            raw.setdefault("name", str(name))
            try:
                connections[name] = msgspec.convert(raw, ConnectionSettings)
            except msgspec.ValidationError as e:
                raise ConfigurationError(f"Invalid connection '{name}': {e}") from e

        try:
            request_timeout = float(config_dict.get("request_timeout", 5.0))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid request_timeout: {e}") from e

        settings = cls(
            connections=connections or None,
            request_timeout=request_timeout,
            log_level=str(config_dict.get("log_level", "INFO")).upper(),
        )
        settings.validate()
        return settings

    def connection(self, name: str = "") -> ConnectionSettings:
        """Get connection settings by name; empty means the default connection."""
        key = name or DEFAULT_CONNECTION
        try:
            return self.connections[key]
        except KeyError:
            raise ConfigurationError(f"No connection configured with name '{key}'") from None

    def validate(self) -> None:
        """Validate settings and raise errors for invalid configurations."""
        if not self.connections:
            raise ConfigurationError("At least one connection must be configured")

        for name, conn in self.connections.items():
            if not conn.servers:
                raise ConfigurationError(f"Connection '{name}' has no servers")
            if conn.connect_timeout <= 0:
                raise ConfigurationError(f"Connection '{name}': connect timeout must be positive")
            if conn.user and not conn.password:
                raise ConfigurationError(f"Connection '{name}': user requires a password")

        if self.request_timeout <= 0:
            raise ConfigurationError("Request timeout must be positive")

        if self.log_level.upper() not in _VALID_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {_VALID_LEVELS}"
            )


_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        result = float(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {e}") from e
    if result <= 0:
        raise ConfigurationError(f"Invalid {name}: must be positive")
    return result


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        result = int(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {e}") from e
    if result < 0:
        raise ConfigurationError(f"Invalid {name}: must be non-negative")
    return result
