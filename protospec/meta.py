"""Field annotation items and helpers for reading them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeVar, Union

Literal = Union[str, bytes, bool, int, float]

T = TypeVar("T")

_U32_MAX = 2**32 - 1


class DeriveError(Exception):
    """Raised for an invalid field or type annotation."""


def _render_string(value: str) -> str:
    out = []
    for c in value:
        if c in "\\\"":
            out.append("\\" + c)
        elif c == "\n":
            out.append("\\n")
        elif c == "\r":
            out.append("\\r")
        elif c == "\t":
            out.append("\\t")
        elif c == "\0":
            out.append("\\0")
        elif not c.isprintable():
            out.append(f"\\u{{{ord(c):x}}}")
        else:
            out.append(c)
    return '"' + "".join(out) + '"'


def _render_bytes(value: bytes) -> str:
    out = []
    for byte in value:
        c = chr(byte)
        if c in "\\\"":
            out.append("\\" + c)
        elif 0x20 <= byte < 0x7F:
            out.append(c)
        else:
            out.append(f"\\x{byte:02x}")
    return 'b"' + "".join(out) + '"'


def _render_literal(value: Literal) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _render_string(value)
    if isinstance(value, bytes):
        return _render_bytes(value)
    return repr(value)


@dataclass(frozen=True)
class MetaPath:
    """A bare word such as ``optional`` or ``foo::Bar``."""

    path: str

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class MetaNameValue:
    """A ``name = literal`` item."""

    path: str
    value: Literal

    def __str__(self) -> str:
        return f"{self.path} = {_render_literal(self.value)}"


@dataclass(frozen=True)
class MetaList:
    """A ``name(item, ...)`` item whose items are metas or literals."""

    path: str
    items: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __str__(self) -> str:
        inner = ", ".join(
            str(item)
            if isinstance(item, (MetaPath, MetaNameValue, MetaList))
            else _render_literal(item)
            for item in self.items
        )
        return f"{self.path}({inner})"


Meta = Union[MetaPath, MetaNameValue, MetaList]


class Label(Enum):
    """The cardinality of a field."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"

    @classmethod
    def from_attr(cls, attr: Meta) -> Optional[Label]:
        """Return the label a bare word names, or None."""
        if not isinstance(attr, MetaPath):
            return None
        try:
            return cls(attr.path)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


_TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<bytes>b"(?:[^"\\]|\\.)*")
    | (?P<string>"(?:[^"\\]|\\.)*")
    | (?P<number>0[xX][0-9a-fA-F_]+(?:[iu](?:8|16|32|64|128|size))?
        | [0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9_]+)?(?:[A-Za-z_][A-Za-z0-9_]*)?)
    | (?P<ident>(?:r\#)?[A-Za-z_][A-Za-z0-9_]*)
    | (?P<punct>::|[=,()])
    """,
    re.VERBOSE | re.DOTALL,
)

_INT_SUFFIXES = frozenset(
    f"{sign}{width}"
    for sign in "iu"
    for width in ("8", "16", "32", "64", "128", "size")
)
_FLOAT_SUFFIXES = frozenset({"f32", "f64"})

_ESCAPE_RE = re.compile(r"\\(x[0-9a-fA-F]{2}|u\{[0-9a-fA-F_]{1,6}\}|\n\s*|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}


def _unescape(body: str, as_bytes: bool) -> Union[str, bytes]:
    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[escape]
        if escape.startswith("\n"):
            return ""
        if escape.startswith("x"):
            code = int(escape[1:], 16)
            if code > 0x7F and not as_bytes:
                raise DeriveError(f"invalid escape in string literal: \\{escape}")
            return chr(code)
        if escape.startswith("u{") and not as_bytes:
            return chr(int(escape[2:-1].replace("_", ""), 16))
        raise DeriveError(f"invalid escape in literal: \\{escape}")

    text = _ESCAPE_RE.sub(replace, body)
    if as_bytes:
        if not body.isascii():
            raise DeriveError("byte string literals must be ASCII")
        return text.encode("latin-1")
    return text


def _number(text: str) -> Union[int, float]:
    if text[:2].lower() == "0x":
        match = re.fullmatch(r"0[xX]([0-9a-fA-F_]+?)([iu](?:8|16|32|64|128|size))?", text)
        if match is None:
            raise DeriveError(f"invalid number literal: {text}")
        return int(match.group(1).replace("_", ""), 16)

    match = re.fullmatch(
        r"([0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9_]+)?)([A-Za-z_][A-Za-z0-9_]*)?",
        text,
    )
    if match is None:
        raise DeriveError(f"invalid number literal: {text}")
    digits = match.group(1).replace("_", "")
    suffix = match.group(2) or ""
    is_float = "." in digits or "e" in digits.lower() or suffix in _FLOAT_SUFFIXES
    if is_float:
        if suffix and suffix not in _FLOAT_SUFFIXES:
            raise DeriveError(f"invalid suffix on float literal: {text}")
        return float(digits)
    if suffix and suffix not in _INT_SUFFIXES:
        raise DeriveError(f"invalid suffix on integer literal: {text}")
    return int(digits)


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise DeriveError(f"unexpected character {text[pos]!r} in attribute")
        pos = match.end()
        kind = match.lastgroup
        if kind != "space":
            tokens.append((kind, match.group()))
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = _tokenize(text)
        self._pos = 0

    def _peek(self, offset: int = 0) -> Optional[tuple[str, str]]:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _at_punct(self, value: str) -> bool:
        return self._peek() == ("punct", value)

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise DeriveError("unexpected end of attribute")
        self._pos += 1
        return token

    def _literal(self) -> Literal:
        kind, text = self._next()
        if kind == "string":
            return _unescape(text[1:-1], as_bytes=False)
        if kind == "bytes":
            return _unescape(text[2:-1], as_bytes=True)
        if kind == "number":
            return _number(text)
        if kind == "ident" and text in ("true", "false"):
            return text == "true"
        raise DeriveError(f"expected a literal, found {text!r}")

    def _starts_literal(self) -> bool:
        token = self._peek()
        if token is None:
            return False
        kind, text = token
        if kind in ("string", "bytes", "number"):
            return True
        return (
            kind == "ident"
            and text in ("true", "false")
            and self._peek(1) != ("punct", "=")
        )

    def _ident(self) -> str:
        kind, text = self._next()
        if kind != "ident":
            raise DeriveError(f"expected an identifier, found {text!r}")
        return text

    def _meta(self) -> Meta:
        prefix = ""
        if self._at_punct("::"):
            self._next()
            prefix = "::"
        segments = [self._ident()]
        while self._at_punct("::"):
            self._next()
            segments.append(self._ident())
        path = prefix + "::".join(segments)

        if self._at_punct("="):
            self._next()
            return MetaNameValue(path, self._literal())
        if self._at_punct("("):
            self._next()
            return MetaList(path, tuple(self.items(closing=True)))
        return MetaPath(path)

    def _nested(self) -> Union[Meta, Literal]:
        return self._literal() if self._starts_literal() else self._meta()

    def items(self, closing: bool) -> list:
        items: list = []
        while True:
            if closing and self._at_punct(")"):
                self._next()
                return items
            if not closing and self._peek() is None:
                return items
            items.append(self._nested())
            if self._at_punct(","):
                self._next()
            elif closing and self._at_punct(")"):
                self._next()
                return items
            elif not closing and self._peek() is None:
                return items
            else:
                token = self._peek()
                found = token[1] if token else "end of attribute"
                raise DeriveError(f"expected ',' in attribute, found {found!r}")


def parse_attributes(text: str) -> list[Meta]:
    """Parse the comma separated items of a field annotation.

    Bare literals at the top level are ignored.
    """
    return [
        item
        for item in _Parser(text).items(closing=False)
        if isinstance(item, (MetaPath, MetaNameValue, MetaList))
    ]


def set_option(current: Optional[T], value: T, message: str) -> T:
    """Return ``value``, or raise if ``current`` is already set."""
    if current is not None:
        raise DeriveError(f"{message}: {current!r} and {value!r}")
    return value


def set_bool(current: bool, message: str) -> bool:
    """Return True, or raise if ``current`` is already set."""
    if current:
        raise DeriveError(message)
    return True


def _is_bool(value: object) -> bool:
    return isinstance(value, bool)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _u32(value: int, attr: Meta) -> int:
    if not 0 <= value <= _U32_MAX:
        raise DeriveError(f"tag out of range in {attr}")
    return value


def _parse_u32(text: str) -> int:
    if re.fullmatch(r"\+?[0-9]+", text) is None:
        raise DeriveError(f"invalid digit in {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise DeriveError(f"number too large: {text!r}")
    return value


def bool_attr(key: str, attr: Meta) -> Optional[bool]:
    """Return the boolean value of a ``key`` attribute, or None for other keys."""
    if attr.path != key:
        return None
    if isinstance(attr, MetaPath):
        return True
    if isinstance(attr, MetaList):
        if len(attr.items) == 1 and _is_bool(attr.items[0]):
            return attr.items[0]
        raise DeriveError(f"invalid {key} attribute")
    if isinstance(attr.value, bool):
        return attr.value
    if isinstance(attr.value, str):
        if attr.value == "true":
            return True
        if attr.value == "false":
            return False
        raise DeriveError(f"invalid {key} attribute: {attr.value!r} is not a boolean")
    raise DeriveError(f"invalid {key} attribute")


def word_attr(key: str, attr: Meta) -> bool:
    """Return True if the attribute is the bare word ``key``."""
    return isinstance(attr, MetaPath) and attr.path == key


def tag_attr(attr: Meta) -> Optional[int]:
    """Return the tag of a ``tag`` attribute, or None for other attributes."""
    if attr.path != "tag":
        return None
    if isinstance(attr, MetaList):
        if len(attr.items) == 1 and _is_int(attr.items[0]):
            return _u32(attr.items[0], attr)
        raise DeriveError(f"invalid tag attribute: {attr}")
    if isinstance(attr, MetaNameValue):
        if isinstance(attr.value, str):
            return _parse_u32(attr.value)
        if _is_int(attr.value):
            return _u32(attr.value, attr)
    raise DeriveError(f"invalid tag attribute: {attr}")


def tags_attr(attr: Meta) -> Optional[list[int]]:
    """Return the tags of a ``tags`` attribute, or None for other attributes."""
    if attr.path != "tags":
        return None
    if isinstance(attr, MetaList):
        if not all(_is_int(item) for item in attr.items):
            raise DeriveError(f"invalid tag attribute: {attr}")
        return [_u32(item, attr) for item in attr.items]
    if isinstance(attr, MetaNameValue) and isinstance(attr.value, str):
        return [_parse_u32(part.strip()) for part in attr.value.split(",")]
    raise DeriveError(f"invalid tag attribute: {attr}")