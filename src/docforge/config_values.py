"""Tagged configuration values and deep merging.

Generated settings and user override documents are both lifted into
:class:`ConfigValue` before merging, so merge behaviour depends only on the
pair of kinds involved and never on ad-hoc type checks of raw data.

Examples
--------
>>> from docforge.config_values import merge_settings
>>> merge_settings({"a": {"x": 1, "y": 2}}, {"a": {"y": 9, "z": 3}})
{'a': {'x': 1, 'y': 9, 'z': 3}}
>>> merge_settings({"a": [1, 2]}, {"a": [3]})
{'a': [3]}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from types import MappingProxyType
from typing import Final, cast

__all__ = [
    "ABSENT",
    "ConfigValue",
    "ValueKind",
    "deep_merge",
    "merge_settings",
]


class ValueKind(StrEnum):
    """Kinds a configuration value can take."""

    ABSENT = "absent"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


@dataclass(frozen=True, slots=True)
class ConfigValue:
    """Immutable tagged configuration value.

    Attributes
    ----------
    kind : ValueKind
        Tag selecting which payload is meaningful.
    scalar : bool | int | float | str | None
        Payload for ``BOOLEAN``, ``NUMBER`` and ``STRING`` values.
    items : tuple[ConfigValue, ...]
        Payload for ``SEQUENCE`` values.
    entries : Mapping[str, ConfigValue]
        Payload for ``MAPPING`` values, in insertion order.
    """

    kind: ValueKind
    scalar: bool | int | float | str | None = None
    items: tuple[ConfigValue, ...] = ()
    entries: Mapping[str, ConfigValue] = MappingProxyType({})

    @classmethod
    def mapping(cls, entries: Mapping[str, ConfigValue]) -> ConfigValue:
        return cls(ValueKind.MAPPING, entries=MappingProxyType(dict(entries)))

    @classmethod
    def sequence(cls, items: Sequence[ConfigValue]) -> ConfigValue:
        return cls(ValueKind.SEQUENCE, items=tuple(items))

    @classmethod
    def from_python(cls, value: object) -> ConfigValue:
        """Lift plain Python data (as produced by JSON or YAML parsers).

        Dates and datetimes, which YAML produces for unquoted ISO values,
        become ISO 8601 strings.

        Raises
        ------
        TypeError
            If ``value`` (or anything nested in it) has no configuration kind.
        """
        if value is None:
            return ABSENT
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, scalar=value)
        if isinstance(value, (int, float)):
            return cls(ValueKind.NUMBER, scalar=value)
        if isinstance(value, str):
            return cls(ValueKind.STRING, scalar=value)
        if isinstance(value, date):
            return cls(ValueKind.STRING, scalar=value.isoformat())
        if isinstance(value, Mapping):
            return cls.mapping({str(key): cls.from_python(item) for key, item in value.items()})
        if isinstance(value, (list, tuple)):
            return cls.sequence([cls.from_python(item) for item in value])
        msg = f"Unsupported configuration value of type {type(value).__name__}"
        raise TypeError(msg)

    def to_python(self) -> object:
        """Lower the value back to plain Python data."""
        match self.kind:
            case ValueKind.ABSENT:
                return None
            case ValueKind.SEQUENCE:
                return [item.to_python() for item in self.items]
            case ValueKind.MAPPING:
                return {key: item.to_python() for key, item in self.entries.items()}
            case _:
                return self.scalar


ABSENT: Final[ConfigValue] = ConfigValue(ValueKind.ABSENT)


def deep_merge(base: ConfigValue, override: ConfigValue) -> ConfigValue:
    """Merge ``override`` over ``base``.

    Two mappings merge key by key, recursively: keys only in ``base`` keep
    their value and keys in ``override`` win. Every other pair of kinds,
    including two sequences, resolves to ``override`` unchanged; sequences
    are replaced, never concatenated.
    """
    match (base.kind, override.kind):
        case (ValueKind.MAPPING, ValueKind.MAPPING):
            merged = dict(base.entries)
            for key, value in override.entries.items():
                merged[key] = deep_merge(merged.get(key, ABSENT), value)
            return ConfigValue.mapping(merged)
        case _:
            return override


def merge_settings(base: Mapping[str, object], override: Mapping[str, object]) -> dict[str, object]:
    """Deep-merge two plain mappings through :func:`deep_merge`."""
    merged = deep_merge(ConfigValue.from_python(base), ConfigValue.from_python(override))
    return cast("dict[str, object]", merged.to_python())
