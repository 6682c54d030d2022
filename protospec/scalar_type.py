"""Scalar protobuf field types and their default values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from protospec.meta import (
    DeriveError,
    Literal,
    Meta,
    MetaList,
    MetaNameValue,
    MetaPath,
    parse_attributes,
)

DefaultValue = Union[int, float, bool, str, bytes, None]

_PLAIN_TYPES = (
    "double",
    "float",
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
)

_I32 = ("i32", -(2**31), 2**31 - 1)
_I64 = ("i64", -(2**63), 2**63 - 1)
_U32 = ("u32", 0, 2**32 - 1)
_U64 = ("u64", 0, 2**64 - 1)

_INT_RANGES = {
    "int32": _I32,
    "sint32": _I32,
    "sfixed32": _I32,
    "int64": _I64,
    "sint64": _I64,
    "sfixed64": _I64,
    "uint32": _U32,
    "fixed32": _U32,
    "uint64": _U64,
    "fixed64": _U64,
}

_FLOAT_SUFFIXES = {"float": "f32", "double": "f64"}

_SPECIAL_FLOATS = {
    "inf": float("inf"),
    "-inf": float("-inf"),
    "nan": float("nan"),
}

_INT_SUFFIXES = frozenset(
    f"{sign}{width}"
    for sign in "iu"
    for width in ("8", "16", "32", "64", "128", "size")
)

_IDENT = r"(?:r\#)?[A-Za-z_][A-Za-z0-9_]*"
_IDENT_RE = re.compile(_IDENT)
_PATH_RE = re.compile(rf"(?:::\s*)?{_IDENT}(?:\s*::\s*{_IDENT})*")

_NUMBER_RE = re.compile(
    r"""
    (?P<sign>-)?
    (?:
        (?P<radix>0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+)
      | (?P<decimal>[0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9_]+)?)
    )
    (?P<suffix>[A-Za-z_][A-Za-z0-9_]*)?
    """,
    re.VERBOSE,
)

_ENUMERATION = "enumeration"


def _parse_path(text: str) -> str:
    stripped = text.strip()
    if _PATH_RE.fullmatch(stripped) is None:
        raise DeriveError(f"invalid path: {text!r}")
    return re.sub(r"\s+", "", stripped)


class BytesType(Enum):
    """The Python container a bytes field is exposed as."""

    VEC = "vec"
    BYTES = "bytes"

    @classmethod
    def _parse(cls, text: str) -> BytesType:
        try:
            return cls(text)
        except ValueError:
            raise DeriveError(f"Invalid bytes type: {text}") from None


@dataclass(frozen=True)
class ScalarType:
    """A scalar protobuf type; enumerations carry the path of their type."""

    name: str
    bytes_type: Optional[BytesType] = None
    enumeration: Optional[str] = None

    def __post_init__(self) -> None:
        if self.name not in _PLAIN_TYPES and self.name not in ("bytes", "enum"):
            raise DeriveError(f"invalid type: {self.name}")
        if self.name == "bytes":
            if self.bytes_type is None:
                object.__setattr__(self, "bytes_type", BytesType.VEC)
        elif self.bytes_type is not None:
            raise DeriveError(f"type {self.name} takes no bytes type")
        if (self.name == "enum") != (self.enumeration is not None):
            raise DeriveError("an enumeration type needs exactly an enumeration path")

    @classmethod
    def from_attr(cls, attr: Meta) -> Optional[ScalarType]:
        """Return the type an attribute names, or None if it names no type."""
        if isinstance(attr, MetaPath):
            if attr.path in _PLAIN_TYPES:
                return cls(attr.path)
            if attr.path == "bytes":
                return cls("bytes", BytesType.VEC)
            return None
        if isinstance(attr, MetaNameValue) and isinstance(attr.value, str):
            if attr.path == "bytes":
                return cls("bytes", BytesType._parse(attr.value))
            if attr.path == _ENUMERATION:
                return cls("enum", enumeration=_parse_path(attr.value))
            return None
        if isinstance(attr, MetaList) and attr.path == _ENUMERATION:
            if len(attr.items) != 1:
                raise DeriveError(
                    "invalid enumeration attribute: only a single identifier is supported"
                )
            item = attr.items[0]
            if not isinstance(item, MetaPath):
                raise DeriveError(
                    "invalid enumeration attribute: item must be an identifier"
                )
            return cls("enum", enumeration=item.path)
        return None

    @classmethod
    def parse(cls, text: str) -> ScalarType:
        """Parse a type name such as ``int32`` or ``enumeration<Foo>``."""
        s = text.strip()
        if s in _PLAIN_TYPES:
            return cls(s)
        if s == "bytes":
            return cls("bytes", BytesType.VEC)
        if len(s) > len(_ENUMERATION) and s.startswith(_ENUMERATION):
            rest = s[len(_ENUMERATION):].strip()
            if rest and rest[0] in "<(" and rest[-1] in ">)" and len(rest) >= 2:
                try:
                    return cls("enum", enumeration=_parse_path(rest[1:-1]))
                except DeriveError:
                    pass
        raise DeriveError(f"invalid type: {text}")

    def as_str(self) -> str:
        """Return the type as written in protobuf field declarations."""
        return self.name

    def module(self) -> str:
        """Return the name of the wire encoding used for this type."""
        return "int32" if self.name == "enum" else self.name

    def is_numeric(self) -> bool:
        """Return False for the length-delimited types string and bytes."""
        return self.name not in ("string", "bytes")

    def zero(self) -> DefaultValue:
        """Return the default value of the type.

        For an enumeration this is None, standing for the enumeration's own
        default variant.
        """
        if self.name in _FLOAT_SUFFIXES:
            return 0.0
        if self.name in _INT_RANGES:
            return 0
        if self.name == "bool":
            return False
        if self.name == "string":
            return ""
        if self.name == "bytes":
            return b""
        return None

    def __str__(self) -> str:
        return self.as_str()


def _number_literal(text: str) -> Optional[tuple[Union[int, float], str]]:
    match = _NUMBER_RE.fullmatch(text)
    if match is None:
        return None
    suffix = match.group("suffix") or ""
    value: Union[int, float]
    if match.group("radix"):
        if suffix and suffix not in _INT_SUFFIXES:
            return None
        value = int(match.group("radix").replace("_", ""), 0)
    else:
        digits = match.group("decimal").replace("_", "")
        is_float = "." in digits or "e" in digits.lower() or suffix in ("f32", "f64")
        if is_float:
            if suffix and suffix not in ("f32", "f64"):
                return None
            value = float(digits)
        else:
            if suffix and suffix not in _INT_SUFFIXES:
                return None
            value = int(digits)
    if match.group("sign"):
        value = -value
    return value, suffix


def _reparse(text: str) -> Optional[tuple[Literal, str]]:
    """Parse ``text`` as a literal, returning its value and suffix."""
    number = _number_literal(text)
    if number is not None:
        return number
    try:
        items = parse_attributes(f"v = {text}")
    except DeriveError:
        return None
    if len(items) == 1 and isinstance(items[0], MetaNameValue):
        value = items[0].value
        if isinstance(value, (str, bytes, bool)):
            return value, ""
    return None


def _invalid(value: object) -> DeriveError:
    return DeriveError(f"invalid default value: {value!r}")


def _from_text(ty: ScalarType, text: str) -> DefaultValue:
    value = text.strip()

    if ty.enumeration is not None:
        if _IDENT_RE.fullmatch(value) is None:
            raise DeriveError(f"invalid enumeration variant: {value!r}")
        return value

    if ty.name in _FLOAT_SUFFIXES and value in _SPECIAL_FLOATS:
        return _SPECIAL_FLOATS[value]

    parsed = _reparse(value)
    if parsed is not None and not isinstance(parsed[0], str):
        return _from_literal(ty, parsed[0], parsed[1])
    raise _invalid(value)


def _from_literal(ty: ScalarType, value: Literal, suffix: str) -> DefaultValue:
    name = ty.name
    if isinstance(value, bool):
        if name == "bool":
            return value
        raise _invalid(value)
    if isinstance(value, int):
        if name in _INT_RANGES:
            expected, low, high = _INT_RANGES[name]
            if suffix in ("", expected):
                if not low <= value <= high:
                    raise DeriveError(
                        f"default value {value} is out of range for {name}"
                    )
                return value
        if name in _FLOAT_SUFFIXES:
            return float(value)
        raise _invalid(value)
    if isinstance(value, float):
        if name in _FLOAT_SUFFIXES and suffix in ("", _FLOAT_SUFFIXES[name]):
            return value
        raise _invalid(value)
    if isinstance(value, bytes):
        if name == "bytes":
            return value
        raise _invalid(value)
    if isinstance(value, str):
        if name == "string":
            return value
        return _from_text(ty, value)
    raise _invalid(value)


def parse_default(ty: ScalarType, literal: Literal) -> DefaultValue:
    """Return the default value a ``default = ...`` literal gives a field of type ``ty``.

    Strings are parsed further for non-string types, so ``"-5"`` is a valid
    int32 default. For an enumeration the result is the variant name.
    """
    return _from_literal(ty, literal, "")