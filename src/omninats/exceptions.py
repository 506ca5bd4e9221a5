"""
Exception hierarchy for OmniNATS.
"""

from typing import Any, Optional


def type_name(target_type: Any) -> str:
    """Human readable name of a type or typing construct."""
    name = getattr(target_type, "__qualname__", None) or getattr(target_type, "__name__", None)
    if name is None or getattr(target_type, "__origin__", None) is not None:
        return repr(target_type).replace("typing.", "")
    return name


class OmniNatsError(Exception):
    """Base class for all OmniNATS errors."""


class SerDesError(OmniNatsError):
    """Base class for payload serialization errors."""

    def __init__(self, message: str, target_type: Any = None):
        super().__init__(message)
        self.target_type = target_type


class NoCodecFoundError(SerDesError):
    """No registered serdes declares support for the requested type."""

    def __init__(self, target_type: Any):
        super().__init__(
            f"No serdes found for type [{type_name(target_type)}]",
            target_type,
        )


class EncodingError(SerDesError):
    """A serdes failed to turn a value into payload bytes."""

    def __init__(
        self,
        message: str,
        target_type: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, target_type)
        self.cause = cause


class DecodingError(SerDesError):
    """A serdes failed to turn payload bytes into a value."""

    def __init__(
        self,
        message: str,
        target_type: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, target_type)
        self.cause = cause


class ClientDefinitionError(OmniNatsError, TypeError):
    """A client interface cannot be turned into a working client."""


class ConnectionNotFoundError(OmniNatsError, KeyError):
    """No connection is configured under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class NotConnectedError(OmniNatsError, RuntimeError):
    """The transport was used before connecting or after closing."""


class ConfigurationError(OmniNatsError, ValueError):
    """Settings are missing or invalid."""
