"""OmniNATS SerDes - priority ordered payload serialization."""

from .base import BASIC_TYPES, BaseSerDes, is_basic_type, resolve_type
from .basic import BasicSerDes
from .json import JsonMapper, JsonSerDes, ModuleJsonMapper, MsgspecJsonMapper
from .registry import SerDesRegistry, default_registry

__all__ = [
    "BASIC_TYPES",
    "BaseSerDes",
    "BasicSerDes",
    "JsonMapper",
    "JsonSerDes",
    "ModuleJsonMapper",
    "MsgspecJsonMapper",
    "SerDesRegistry",
    "default_registry",
    "is_basic_type",
    "resolve_type",
]
