"""Fields holding scalar protobuf values."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from protospec.meta import (
    DeriveError,
    Label,
    Literal,
    Meta,
    MetaNameValue,
    bool_attr,
    set_option,
    tag_attr,
)
from protospec.scalar_type import DefaultValue, ScalarType, parse_default


class Kind(Enum):
    """How a scalar field is stored and encoded."""

    PLAIN = "plain"
    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"
    PACKED = "packed"

    @property
    def is_repeated(self) -> bool:
        return self in (Kind.REPEATED, Kind.PACKED)


def _default_literal(attr: Meta) -> Optional[Literal]:
    """Return the literal of a ``default = ...`` attribute, or None for others."""
    if attr.path != "default":
        return None
    if isinstance(attr, MetaNameValue):
        return attr.value
    raise DeriveError(f"invalid default value attribute: {attr}")


def _kind(
    ty: ScalarType, label: Optional[Label], packed: Optional[bool], has_default: bool
) -> Kind:
    if packed is True and label is not Label.REPEATED:
        raise DeriveError("packed attribute may only be applied to repeated fields")
    if label is Label.REPEATED:
        if packed is True and not ty.is_numeric():
            raise DeriveError("packed attribute may only be applied to numeric types")
        if has_default:
            raise DeriveError("repeated fields may not have a default value")
        is_packed = ty.is_numeric() if packed is None else packed
        return Kind.PACKED if is_packed else Kind.REPEATED
    if label is None:
        return Kind.PLAIN
    if label is Label.OPTIONAL:
        return Kind.OPTIONAL
    return Kind.REQUIRED


@dataclass(frozen=True)
class ScalarField:
    """A scalar field with its type, kind, tag and default value.

    For enumeration fields ``default_value`` is a variant name, or None for
    the enumeration's first variant; ``enum_type`` resolves it to a number.
    """

    ty: ScalarType
    kind: Kind
    tag: int
    default_value: DefaultValue = None
    enum_type: Optional[type] = field(default=None, compare=False)

    @classmethod
    def from_attrs(
        cls, attrs: Sequence[Meta], inferred_tag: Optional[int]
    ) -> Optional[ScalarField]:
        """Build a field from its attributes, or return None if it has no scalar type."""
        ty: Optional[ScalarType] = None
        label: Optional[Label] = None
        packed: Optional[bool] = None
        default: Optional[Literal] = None
        tag: Optional[int] = None
        unknown: list[Meta] = []

        for attr in attrs:
            if (found_ty := ScalarType.from_attr(attr)) is not None:
                ty = set_option(ty, found_ty, "duplicate type attributes")
            elif (found_packed := bool_attr("packed", attr)) is not None:
                packed = set_option(packed, found_packed, "duplicate packed attributes")
            elif (found_tag := tag_attr(attr)) is not None:
                tag = set_option(tag, found_tag, "duplicate tag attributes")
            elif (found_label := Label.from_attr(attr)) is not None:
                label = set_option(label, found_label, "duplicate label attributes")
            elif (found_default := _default_literal(attr)) is not None:
                default = set_option(
                    default, found_default, "duplicate default attributes"
                )
            else:
                unknown.append(attr)

        if ty is None:
            return None

        if len(unknown) == 1:
            raise DeriveError(f"unknown attribute: {unknown[0]}")
        if unknown:
            names = ", ".join(str(attr) for attr in unknown)
            raise DeriveError(f"unknown attributes: [{names}]")

        if tag is None:
            tag = inferred_tag
        if tag is None:
            raise DeriveError("missing tag attribute")

        has_default = default is not None
        default_value = parse_default(ty, default) if has_default else ty.zero()
        kind = _kind(ty, label, packed, has_default)
        return cls(ty, kind, tag, default_value)

    @classmethod
    def from_oneof_attrs(cls, attrs: Sequence[Meta]) -> Optional[ScalarField]:
        """Build a oneof variant field; labels are not allowed there."""
        built = cls.from_attrs(attrs, None)
        if built is None:
            return None
        if built.kind is Kind.OPTIONAL:
            raise DeriveError("invalid optional attribute on oneof field")
        if built.kind is Kind.REQUIRED:
            raise DeriveError("invalid required attribute on oneof field")
        if built.kind.is_repeated:
            raise DeriveError("invalid repeated attribute on oneof field")
        return dataclasses.replace(built, kind=Kind.REQUIRED)

    def tags(self) -> list[int]:
        """Return the tags the field occupies."""
        return [self.tag]

    def _single_default(self) -> Any:
        if self.ty.enumeration is None:
            return self.default_value
        if self.enum_type is None:
            raise DeriveError(
                f"enumeration field has no type for {self.ty.enumeration}"
            )
        if self.default_value is None:
            try:
                return int(next(iter(self.enum_type)))
            except StopIteration:
                raise DeriveError(
                    f"enumeration {self.ty.enumeration} has no variants"
                ) from None
        try:
            return int(self.enum_type[self.default_value])
        except KeyError:
            raise DeriveError(
                f"{self.ty.enumeration} has no variant {self.default_value}"
            ) from None

    def default(self) -> Any:
        """Return the value a newly created message holds in this field."""
        if self.kind is Kind.OPTIONAL:
            return None
        if self.kind.is_repeated:
            return []
        return self._single_default()

    def clear(self, value: Any) -> Any:
        """Clear ``value`` and return what the field holds afterwards.

        Strings and bytes are cleared to empty, other single values are reset
        to the field's default.
        """
        if self.kind is Kind.OPTIONAL:
            return None
        if self.kind.is_repeated:
            value.clear()
            return value
        if self.ty.name in ("string", "bytes"):
            return self.ty.zero()
        return self._single_default()