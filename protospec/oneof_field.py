"""Message fields holding a oneof."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from protospec.meta import (
    DeriveError,
    Meta,
    MetaList,
    MetaNameValue,
    MetaPath,
    set_option,
    tags_attr,
)

_IDENT = r"(?:r\#)?[A-Za-z_][A-Za-z0-9_]*"
_PATH_RE = re.compile(rf"(?:::\s*)?{_IDENT}(?:\s*::\s*{_IDENT})*")


def _parse_path(text: str) -> str:
    stripped = text.strip()
    if _PATH_RE.fullmatch(stripped) is None:
        raise DeriveError(f"invalid oneof type path: {text!r}")
    return re.sub(r"\s+", "", stripped)


def _oneof_type(attr: Meta) -> str:
    if isinstance(attr, MetaNameValue) and isinstance(attr.value, str):
        return _parse_path(attr.value)
    if isinstance(attr, MetaList) and len(attr.items) == 1:
        item = attr.items[0]
        if isinstance(item, MetaPath) and "::" not in item.path:
            return item.path
        raise DeriveError("invalid oneof attribute: item must be an identifier")
    raise DeriveError(f"invalid oneof attribute: {attr}")


@dataclass(frozen=True)
class OneofField:
    """A field holding one of several variants, each under its own tag."""

    oneof_type: str
    oneof_tags: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "oneof_tags", tuple(self.oneof_tags))

    @classmethod
    def from_attrs(cls, attrs: Sequence[Meta]) -> Optional[OneofField]:
        """Build a field from its attributes, or return None if it is not a oneof."""
        oneof_type: Optional[str] = None
        tags: Optional[list[int]] = None
        unknown: list[Meta] = []

        for attr in attrs:
            if attr.path == "oneof":
                oneof_type = set_option(
                    oneof_type, _oneof_type(attr), "duplicate oneof attribute"
                )
            elif (found_tags := tags_attr(attr)) is not None:
                tags = set_option(tags, found_tags, "duplicate tags attributes")
            else:
                unknown.append(attr)

        if oneof_type is None:
            return None

        if len(unknown) == 1:
            raise DeriveError(f"unknown attribute for message field: {unknown[0]}")
        if unknown:
            names = ", ".join(str(attr) for attr in unknown)
            raise DeriveError(f"unknown attributes for message field: [{names}]")

        if tags is None:
            raise DeriveError("oneof field is missing a tags attribute")

        return cls(oneof_type, tuple(tags))

    def tags(self) -> list[int]:
        """Return the tags the field occupies."""
        return list(self.oneof_tags)

    def default(self) -> Any:
        """Return the value a newly created message holds: no variant."""
        return None

    def clear(self, value: Any) -> Any:
        """Return what the field holds once cleared: no variant."""
        return None