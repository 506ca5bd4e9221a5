"""BaseSerDes contract and type classification helpers."""

from __future__ import annotations

import decimal
from abc import ABC, abstractmethod
from typing import Any, Annotated, Optional, get_args, get_origin


# Types carried as plain text or raw bytes on the wire. They bypass the
# generic JSON serdes and are served by BasicSerDes.
BASIC_TYPES = frozenset(
    {
        str,
        bytes,
        bytearray,
        memoryview,
        int,
        float,
        bool,
        decimal.Decimal,
    }
)


def resolve_type(target_type: Any) -> Any:
    """
    Reduce a typing construct to the class used for classification.

    ``Annotated[X, ...]`` becomes ``X`` and generic aliases such as
    ``list[int]`` become their origin (``list``). Plain classes and
    ``typing.Any`` are returned unchanged.
    """
    if get_origin(target_type) is Annotated:
        target_type = get_args(target_type)[0]
    origin = get_origin(target_type)
    return origin if origin is not None else target_type


def is_basic_type(target_type: Any) -> bool:
    """Check if a type is one of the explicit basic wire types."""
    return resolve_type(target_type) in BASIC_TYPES


class BaseSerDes(ABC):
    """
    Abstract base class for payload serializers/deserializers.

    A serdes converts between Python values and message payload bytes for
    the types it declares support for. Implementations must keep
    ``supports`` cheap and free of side effects: the registry may call it
    on every encode/decode until a match is found.
    """

    #: Default priority; lower values are tried first.
    ORDER = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """SerDes name for identification."""
        pass

    @property
    def priority(self) -> int:
        """Selection priority. Lower values win."""
        return self.ORDER

    @abstractmethod
    def supports(self, target_type: Any) -> bool:
        """Check if this serdes can handle values of ``target_type``."""
        pass

    @abstractmethod
    def serialize(self, value: Any, target_type: Any = None) -> Optional[bytes]:
        """
        Serialize a value to payload bytes.

        ``target_type`` is the declared type the value is sent as; it
        defaults to ``type(value)``.
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes, target_type: Any) -> Any:
        """Deserialize payload bytes into an instance of ``target_type``."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"
