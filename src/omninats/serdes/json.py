"""JsonSerDes, the generic fallback serdes for structured payloads."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol

import msgspec

from ..exceptions import DecodingError, EncodingError, type_name
from .base import BaseSerDes, is_basic_type


class JsonMapper(Protocol):
    """Protocol for the JSON library a JsonSerDes delegates to."""

    def dumps(self, value: Any) -> bytes:
        """Encode a value to UTF-8 JSON bytes."""
        ...

    def loads(self, data: bytes, target_type: Any) -> Any:
        """Decode UTF-8 JSON bytes into an instance of ``target_type``."""
        ...


class MsgspecJsonMapper:
    """
    JSON mapper backed by msgspec.

    Handles msgspec Structs, dataclasses, attrs classes, TypedDicts and the
    builtin containers. Output is compact (``{"a":1}``).
    """

    def __init__(
        self,
        enc_hook: Optional[Callable[[Any], Any]] = None,
        dec_hook: Optional[Callable[[type, Any], Any]] = None,
    ):
        """
        Initialize the msgspec mapper.

        Args:
            enc_hook: Called for objects msgspec cannot encode natively
            dec_hook: Called to build custom types msgspec cannot decode natively
        """
        self._encoder = msgspec.json.Encoder(enc_hook=enc_hook)
        self._dec_hook = dec_hook
        self._decoders: Dict[Any, msgspec.json.Decoder] = {}

    def _decoder_for(self, target_type: Any) -> msgspec.json.Decoder:
        decoder = self._decoders.get(target_type)
        if decoder is None:
            decoder = msgspec.json.Decoder(
                Any if target_type is object else target_type,
                dec_hook=self._dec_hook,
            )
            self._decoders[target_type] = decoder
        return decoder

    def dumps(self, value: Any) -> bytes:
        return self._encoder.encode(value)

    def loads(self, data: bytes, target_type: Any) -> Any:
        return self._decoder_for(target_type).decode(data)


class ModuleJsonMapper:
    """
    Adapter exposing any ``dumps``/``loads`` JSON module as a JsonMapper.

    Works with the stdlib ``json`` module, ``orjson`` and similar libraries.
    Values are lowered to builtins with ``msgspec.to_builtins`` before
    ``dumps`` (UTF-8 encoded when the module returns ``str``); decoded
    builtins are converted to the target type with ``msgspec.convert``.
    """

    def __init__(self, module: Any):
        if not (hasattr(module, "dumps") and hasattr(module, "loads")):
            raise TypeError(f"{module!r} does not provide dumps() and loads()")
        self.module = module

    def dumps(self, value: Any) -> bytes:
        data = self.module.dumps(msgspec.to_builtins(value))
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    def loads(self, data: bytes, target_type: Any) -> Any:
        obj = self.module.loads(data)
        if target_type is object or target_type is Any:
            return obj
        return msgspec.convert(obj, target_type)


class JsonSerDes(BaseSerDes):
    """Serializes and deserializes objects as JSON."""

    ORDER = 200

    def __init__(self, mapper: Optional[JsonMapper] = None):
        """
        Initialize the JSON serdes.

        Args:
            mapper: JSON mapper to delegate to. Defaults to MsgspecJsonMapper.
        """
        self.mapper = mapper if mapper is not None else MsgspecJsonMapper()

    @property
    def name(self) -> str:
        """SerDes name."""
        return "json"

    def supports(self, target_type: Any) -> bool:
        """Any type that is not a basic wire type."""
        return not is_basic_type(target_type)

    def serialize(self, value: Any, target_type: Any = None) -> Optional[bytes]:
        """Serialize a value to JSON bytes."""
        if value is None:
            return None
        if target_type is None:
            target_type = type(value)
        try:
            return self.mapper.dumps(value)
        except (TypeError, ValueError, OverflowError, msgspec.MsgspecError) as e:
            raise EncodingError(
                f"Error encoding object [{value!r}] of type "
                f"[{type_name(target_type)}] to JSON: {e}",
                target_type,
                e,
            ) from e

    def deserialize(self, data: bytes, target_type: Any) -> Any:
        """Deserialize JSON bytes into ``target_type``."""
        if not data:
            return None
        try:
            return self.mapper.loads(data, target_type)
        except (TypeError, ValueError, msgspec.MsgspecError) as e:
            raise DecodingError(
                f"Error decoding JSON stream for type [{type_name(target_type)}]: {e}",
                target_type,
                e,
            ) from e
