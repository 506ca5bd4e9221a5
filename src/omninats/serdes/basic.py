"""BasicSerDes for strings, raw bytes and numbers."""

from __future__ import annotations

import decimal
from typing import Any, Optional

from ..exceptions import DecodingError, EncodingError, type_name
from .base import BASIC_TYPES, BaseSerDes, resolve_type


_BYTES_TYPES = (bytes, bytearray, memoryview)


class BasicSerDes(BaseSerDes):
    """
    Serdes for the basic wire types.

    Strings and numbers travel as UTF-8 text, booleans as ``true``/``false``
    and bytes-like values are passed through untouched.
    """

    ORDER = 100

    @property
    def name(self) -> str:
        """SerDes name."""
        return "basic"

    def supports(self, target_type: Any) -> bool:
        return resolve_type(target_type) in BASIC_TYPES

    def serialize(self, value: Any, target_type: Any = None) -> Optional[bytes]:
        """
        Serialize ``value`` in the wire format of ``target_type``.

        The value must be an instance of the declared type, with the
        numeric widenings ``bool -> int``, ``int -> float`` and
        ``int -> Decimal`` allowed, so that the bytes decode back
        as ``target_type``.
        """
        if value is None:
            return None
        cls = resolve_type(target_type) if target_type is not None else type(value)
        if cls in _BYTES_TYPES and isinstance(value, _BYTES_TYPES):
            return bytes(value)
        if cls is bool and isinstance(value, bool):
            return b"true" if value else b"false"
        if cls is int and isinstance(value, int):
            return str(int(value)).encode("ascii")
        if cls is float and isinstance(value, (int, float)) and not isinstance(value, bool):
            return repr(float(value)).encode("ascii")
        if cls is decimal.Decimal and isinstance(value, (int, decimal.Decimal)) and not isinstance(value, bool):
            return str(value).encode("ascii")
        if cls is str and isinstance(value, str):
            return value.encode("utf-8")
        raise EncodingError(
            f"Error encoding object [{value!r}] as [{type_name(cls)}]: "
            f"value of type [{type_name(type(value))}] cannot be sent as [{type_name(cls)}]",
            target_type if target_type is not None else type(value),
        )

    def deserialize(self, data: bytes, target_type: Any) -> Any:
        if not data:
            return None
        cls = resolve_type(target_type)
        if cls is bytes:
            return bytes(data)
        if cls is bytearray:
            return bytearray(data)
        if cls is memoryview:
            return memoryview(bytes(data))
        try:
            text = bytes(data).decode("utf-8")
            if cls is bool:
                return self._parse_bool(text)
            if cls is str:
                return text
            return cls(text)
        except (UnicodeDecodeError, ValueError, decimal.InvalidOperation) as e:
            raise DecodingError(
                f"Error decoding payload for type [{type_name(target_type)}]: {e}",
                target_type,
                e,
            ) from e

    @staticmethod
    def _parse_bool(text: str) -> bool:
        lowered = text.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError(f"invalid boolean literal {text!r}")
