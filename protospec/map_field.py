"""Fields holding protobuf maps."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from protospec.meta import (
    DeriveError,
    Meta,
    MetaList,
    MetaNameValue,
    MetaPath,
    set_option,
    tag_attr,
)
from protospec.scalar_type import ScalarType

_KEY_TYPES = frozenset(
    {
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "string",
    }
)


class MapType(Enum):
    """The kind of container a map field uses."""

    HASH_MAP = "hash_map"
    BTREE_MAP = "btree_map"

    @classmethod
    def _from_name(cls, name: str) -> Optional[MapType]:
        if name in ("map", "hash_map"):
            return cls.HASH_MAP
        if name == "btree_map":
            return cls.BTREE_MAP
        return None


def parse_key_type(text: str) -> ScalarType:
    """Parse the key type of a map; only integral, bool and string types qualify."""
    ty = ScalarType.parse(text)
    if ty.name not in _KEY_TYPES:
        raise DeriveError(f"invalid map key type: {text}")
    return ty


@dataclass(frozen=True)
class MapValueType:
    """The value type of a map: a scalar type, or a message when ``scalar`` is None."""

    scalar: Optional[ScalarType] = None

    @property
    def is_message(self) -> bool:
        return self.scalar is None

    @classmethod
    def parse(cls, text: str) -> MapValueType:
        """Parse a value type name such as ``int32`` or ``message``."""
        try:
            return cls(ScalarType.parse(text))
        except DeriveError:
            pass
        if text.strip() == "message":
            return cls(None)
        raise DeriveError(f"invalid map value type: {text}")

    def __str__(self) -> str:
        return "message" if self.scalar is None else str(self.scalar)


def _single_ident(item: object) -> Optional[str]:
    if isinstance(item, MetaPath) and "::" not in item.path:
        return item.path
    return None


def _key_and_value(attr: Meta) -> Optional[tuple[str, str]]:
    """Return the key and value type names of a map attribute, or None."""
    if isinstance(attr, MetaNameValue) and isinstance(attr.value, str):
        items = attr.value.split(",")
        if len(items) < 2:
            raise DeriveError("invalid map attribute: must have key and value types")
        if len(items) > 2:
            raise DeriveError(f"invalid map attribute: {attr}")
        return items[0], items[1]
    if isinstance(attr, MetaList):
        if len(attr.items) != 2:
            raise DeriveError(
                "invalid map attribute: must contain key and value types"
            )
        key = _single_ident(attr.items[0])
        if key is None:
            raise DeriveError("invalid map attribute: key must be an identifier")
        value = _single_ident(attr.items[1])
        if value is None:
            raise DeriveError("invalid map attribute: value must be an identifier")
        return key, value
    return None


@dataclass(frozen=True)
class MapField:
    """A map field with its container, key and value types and tag."""

    map_type: MapType
    key_type: ScalarType
    value_type: MapValueType
    tag: int

    @classmethod
    def from_attrs(
        cls, attrs: Sequence[Meta], inferred_tag: Optional[int]
    ) -> Optional[MapField]:
        """Build a field from its attributes, or return None if it is not a map."""
        types: Optional[tuple[MapType, ScalarType, MapValueType]] = None
        tag: Optional[int] = None

        for attr in attrs:
            if (found_tag := tag_attr(attr)) is not None:
                tag = set_option(tag, found_tag, "duplicate tag attributes")
                continue
            map_type = MapType._from_name(attr.path)
            if map_type is None:
                return None
            names = _key_and_value(attr)
            if names is None:
                return None
            key, value = names
            types = set_option(
                types,
                (map_type, parse_key_type(key), MapValueType.parse(value)),
                "duplicate map type attribute",
            )

        if tag is None:
            tag = inferred_tag
        if types is None or tag is None:
            return None
        map_type, key_type, value_type = types
        return cls(map_type, key_type, value_type, tag)

    @classmethod
    def from_oneof_attrs(cls, attrs: Sequence[Meta]) -> Optional[MapField]:
        """Build a map field for a oneof variant; no tag is inferred."""
        return cls.from_attrs(attrs, None)

    def tags(self) -> list[int]:
        """Return the tags the field occupies."""
        return [self.tag]

    def default(self) -> dict:
        """Return the value a newly created message holds in this field."""
        return {}

    def clear(self, value: Any) -> Any:
        """Empty the map in place and return it."""
        value.clear()
        return value