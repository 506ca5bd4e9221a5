"""SerDesRegistry: priority ordered serdes selection and dispatch."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from ..exceptions import (
    DecodingError,
    EncodingError,
    NoCodecFoundError,
    type_name,
)
from ..logging import get_logger, log_serdes_selected, log_serialization_error
from ..models import ReceivedMessage
from .base import BaseSerDes


class SerDesRegistry:
    """
    Ordered collection of serdes with priority based selection.

    Serdes are registered during startup. The first selection (or an
    explicit :meth:`freeze`) sorts them by ascending priority, keeping
    registration order for equal priorities, and freezes the result.
    After that the registry is read-only and safe to share between
    threads and tasks.
    """

    def __init__(self, serdes: Iterable[BaseSerDes] = ()):
        self._pending: List[BaseSerDes] = []
        self._frozen: Optional[Tuple[BaseSerDes, ...]] = None
        self.logger = get_logger()
        for item in serdes:
            self.register(item)

    def register(self, serdes: BaseSerDes) -> None:
        """Register a serdes. Only valid before the registry is frozen."""
        if self._frozen is not None:
            raise RuntimeError(
                f"Cannot register {serdes!r}: registry is frozen"
            )
        self._pending.append(serdes)

    def freeze(self) -> Tuple[BaseSerDes, ...]:
        """Sort and freeze the registered serdes. Idempotent."""
        if self._frozen is None:
            # sorted() is stable, so ties keep registration order
            self._frozen = tuple(sorted(self._pending, key=lambda s: s.priority))
            self.logger.debug(
                "SerDes registry frozen: "
                + ", ".join(f"{s.name}({s.priority})" for s in self._frozen)
            )
        return self._frozen

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    @property
    def codecs(self) -> Tuple[BaseSerDes, ...]:
        """Registered serdes in selection order."""
        return self.freeze()

    def serdes_for(self, target_type: Any) -> BaseSerDes:
        """
        Select the serdes for a type.

        Returns the first serdes, by ascending priority, whose ``supports``
        accepts ``target_type``.

        Raises:
            NoCodecFoundError: If no registered serdes supports the type
        """
        for serdes in self.freeze():
            if serdes.supports(target_type):
                log_serdes_selected(serdes.name, type_name(target_type))
                return serdes
        raise NoCodecFoundError(target_type)

    def encode(self, value: Any, target_type: Any = None) -> bytes:
        """
        Encode a value to payload bytes.

        Args:
            value: Value to encode. ``None`` yields ``b""`` without
                consulting any serdes.
            target_type: Type used for selection. Defaults to ``type(value)``.

        Raises:
            NoCodecFoundError: If no serdes supports the type
            EncodingError: If the selected serdes fails
        """
        if value is None:
            return b""
        if target_type is None:
            target_type = type(value)

        serdes = self.serdes_for(target_type)
        try:
            data = serdes.serialize(value, target_type)
        except Exception as e:
            # re-raised under the declared type, which may differ from type(value)
            log_serialization_error("encode", str(e))
            raise EncodingError(
                f"Error encoding value for type [{type_name(target_type)}] "
                f"with {serdes.name}: {e}",
                target_type,
                e,
            ) from e
        return data if data is not None else b""

    def decode(self, data: Optional[bytes], target_type: Any) -> Any:
        """
        Decode payload bytes into an instance of ``target_type``.

        Empty or missing data yields ``None`` without consulting any serdes.

        Raises:
            NoCodecFoundError: If no serdes supports the type
            DecodingError: If the selected serdes fails
        """
        if not data:
            return None

        serdes = self.serdes_for(target_type)
        try:
            return serdes.deserialize(data, target_type)
        except Exception as e:
            log_serialization_error("decode", str(e))
            raise DecodingError(
                f"Error decoding payload for type [{type_name(target_type)}] "
                f"with {serdes.name}: {e}",
                target_type,
                e,
            ) from e

    def decode_message(self, message: ReceivedMessage, target_type: Any) -> Any:
        """Decode the payload of a received message."""
        return self.decode(message.data, target_type)

    def __len__(self) -> int:
        if self._frozen is not None:
            return len(self._frozen)
        return len(self._pending)


def default_registry(mapper: Any = None) -> SerDesRegistry:
    """
    Create a registry with the built-in serdes.

    Args:
        mapper: Optional JsonMapper for the JSON serdes
    """
    from .basic import BasicSerDes
    from .json import JsonSerDes

    return SerDesRegistry([BasicSerDes(), JsonSerDes(mapper)])
