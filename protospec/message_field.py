"""Fields holding embedded messages."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from protospec.meta import (
    DeriveError,
    Label,
    Meta,
    set_bool,
    set_option,
    tag_attr,
    word_attr,
)


@dataclass(frozen=True)
class MessageField:
    """A message field with its label and tag.

    ``message_type`` builds a default instance for required fields.
    """

    label: Label
    tag: int
    message_type: Optional[Callable[[], Any]] = field(default=None, compare=False)

    @classmethod
    def from_attrs(
        cls, attrs: Sequence[Meta], inferred_tag: Optional[int]
    ) -> Optional[MessageField]:
        """Build a field from its attributes, or return None if it is not a message."""
        message = False
        boxed = False
        label: Optional[Label] = None
        tag: Optional[int] = None
        unknown: list[Meta] = []

        for attr in attrs:
            if word_attr("message", attr):
                message = set_bool(message, "duplicate message attribute")
            elif word_attr("boxed", attr):
                boxed = set_bool(boxed, "duplicate boxed attribute")
            elif (found_tag := tag_attr(attr)) is not None:
                tag = set_option(tag, found_tag, "duplicate tag attributes")
            elif (found_label := Label.from_attr(attr)) is not None:
                label = set_option(label, found_label, "duplicate label attributes")
            else:
                unknown.append(attr)

        if not message:
            return None

        if len(unknown) == 1:
            raise DeriveError(f"unknown attribute for message field: {unknown[0]}")
        if unknown:
            names = ", ".join(str(attr) for attr in unknown)
            raise DeriveError(f"unknown attributes for message field: [{names}]")

        if tag is None:
            tag = inferred_tag
        if tag is None:
            raise DeriveError("message field is missing a tag attribute")

        return cls(label or Label.OPTIONAL, tag)

    @classmethod
    def from_oneof_attrs(cls, attrs: Sequence[Meta]) -> Optional[MessageField]:
        """Build a oneof variant field; labels are not allowed there."""
        built = cls.from_attrs(attrs, None)
        if built is None:
            return None
        for attr in attrs:
            if Label.from_attr(attr) is not None:
                raise DeriveError(f"invalid attribute for oneof field: {attr.path}")
        return dataclasses.replace(built, label=Label.REQUIRED)

    def tags(self) -> list[int]:
        """Return the tags the field occupies."""
        return [self.tag]

    def default(self) -> Any:
        """Return the value a newly created message holds in this field."""
        if self.label is Label.OPTIONAL:
            return None
        if self.label is Label.REPEATED:
            return []
        if self.message_type is None:
            raise DeriveError("required message field has no message type")
        return self.message_type()

    def clear(self, value: Any) -> Any:
        """Clear ``value`` and return what the field holds afterwards."""
        if self.label is Label.OPTIONAL:
            return None
        value.clear()
        return value