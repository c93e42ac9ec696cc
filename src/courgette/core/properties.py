"""Three-tier option resolution: process property > declared value > fallback.

Process properties are read from the environment by default. Every overridable
option goes through `resolve`; there are no per-field precedence rules.
"""

from __future__ import annotations

import enum
import os
from typing import Any, Mapping, Sequence

from courgette.core.errors import ConfigurationError

COURGETTE_NAMESPACE = "COURGETTE"
CUCUMBER_NAMESPACE = "CUCUMBER"

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class PropertyKind(enum.Enum):
    INT = "int"
    BOOL = "bool"
    ENUM = "enum"
    STRING = "string"
    STRING_ARRAY = "string_array"


def property_key(namespace: str, option: str) -> str:
    """Map an option name such as `rerun_attempts` to `COURGETTE_RERUN_ATTEMPTS`."""
    return f"{namespace}_{option}".upper().replace(".", "_").replace("-", "_")


def courgette_key(option: str) -> str:
    return property_key(COURGETTE_NAMESPACE, option)


def cucumber_key(option: str) -> str:
    return property_key(CUCUMBER_NAMESPACE, option)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_int(key: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Property {key} must be an integer, got {raw!r}", key=key, value=raw) from exc


def parse_bool(key: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Property {key} must be a boolean, got {raw!r}", key=key, value=raw)


def parse_enum(key: str, raw: str, enum_type: type[enum.Enum]) -> enum.Enum:
    wanted = raw.strip().lower()
    for member in enum_type:
        if member.name.lower() == wanted or str(member.value).lower() == wanted:
            return member
    choices = ", ".join(member.name.lower() for member in enum_type)
    raise ConfigurationError(f"Property {key} must be one of {choices}, got {raw!r}", key=key, value=raw)


def split_array(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",")]


def _parse(kind: PropertyKind, key: str, raw: str, enum_type: type[enum.Enum] | None) -> Any:
    if kind is PropertyKind.INT:
        return parse_int(key, raw)
    if kind is PropertyKind.BOOL:
        return parse_bool(key, raw)
    if kind is PropertyKind.ENUM:
        if enum_type is None:
            raise TypeError("enum_type is required for PropertyKind.ENUM")
        return parse_enum(key, raw, enum_type)
    if kind is PropertyKind.STRING_ARRAY:
        return split_array(raw)
    return raw


def resolve(
    kind: PropertyKind,
    key: str,
    declared: Any,
    fallback: Any = None,
    *,
    enum_type: type[enum.Enum] | None = None,
    properties: Mapping[str, str] | None = None,
) -> Any:
    """Resolve one option.

    A present, non-blank property wins. Typed kinds (int, bool, enum) raise
    `ConfigurationError` when the property cannot be parsed. String arrays are
    split on commas and replace the declared value in full.

    Without a property, scalars fall back from `declared` to `fallback` when
    the declared value is unset or blank. String arrays return `declared`
    unmodified.
    """
    source = os.environ if properties is None else properties
    raw = source.get(key)
    if not _is_blank(raw):
        return _parse(kind, key, raw, enum_type)

    if kind is PropertyKind.STRING_ARRAY:
        return list(declared) if declared is not None else []
    if _is_blank(declared):
        return fallback
    if kind is PropertyKind.ENUM and isinstance(declared, str):
        if enum_type is None:
            raise TypeError("enum_type is required for PropertyKind.ENUM")
        return parse_enum(key, declared, enum_type)
    return declared


def resolve_array(key: str, declared: Sequence[str] | None, *, properties: Mapping[str, str] | None = None) -> list[str]:
    return resolve(PropertyKind.STRING_ARRAY, key, declared, properties=properties)
