import pytest

from protospec.meta import DeriveError, Label, parse_attributes
from protospec.message_field import MessageField


def _field(text, inferred_tag=None):
    return MessageField.from_attrs(parse_attributes(text), inferred_tag)


class _Inner:
    def __init__(self):
        self.items = [1, 2]

    def clear(self):
        self.items = []


def test_optional_by_default():
    field = _field('message, tag = "3"')
    assert field.label is Label.OPTIONAL
    assert field.tag == 3


def test_explicit_labels():
    assert _field("message, repeated, tag = 4").label is Label.REPEATED
    assert _field("message, required, tag(5)").label is Label.REQUIRED


def test_not_a_message_returns_none():
    assert _field('int32, tag = "1"') is None


def test_inferred_tag_used_when_missing():
    assert _field("message, optional", inferred_tag=7).tag == 7
    assert _field('message, tag = "2"', inferred_tag=7).tag == 2


def test_missing_tag():
    with pytest.raises(DeriveError, match="missing a tag"):
        _field("message")


def test_boxed_is_accepted():
    assert _field('message, boxed, tag = "1"').tag == 1


@pytest.mark.parametrize(
    "text, match",
    [
        ('message, message, tag = "1"', "duplicate message"),
        ('message, boxed, boxed, tag = "1"', "duplicate boxed"),
        ('message, tag = "1", tag = "2"', "duplicate tag"),
        ('message, optional, repeated, tag = "1"', "duplicate label"),
        ('message, packed, tag = "1"', "unknown attribute for message field"),
        ('message, packed, foo, tag = "1"', "unknown attributes for message field"),
    ],
)
def test_invalid_attributes(text, match):
    with pytest.raises(DeriveError, match=match):
        _field(text)


def test_oneof_variant_is_required():
    field = MessageField.from_oneof_attrs(parse_attributes('message, tag = "9"'))
    assert field.label is Label.REQUIRED
    assert field.tags() == [9]


def test_oneof_rejects_label():
    with pytest.raises(DeriveError, match="invalid attribute for oneof field: optional"):
        MessageField.from_oneof_attrs(parse_attributes('message, optional, tag = "9"'))


def test_oneof_needs_tag_and_message():
    with pytest.raises(DeriveError):
        MessageField.from_oneof_attrs(parse_attributes("message"))
    assert MessageField.from_oneof_attrs(parse_attributes('string, tag = "1"')) is None


def test_defaults():
    assert _field("message, tag = 1").default() is None
    assert _field("message, repeated, tag = 1").default() == []
    required = MessageField(Label.REQUIRED, 1, message_type=_Inner)
    assert required.default().items == [1, 2]
    with pytest.raises(DeriveError):
        MessageField(Label.REQUIRED, 1).default()


def test_clear():
    assert MessageField(Label.OPTIONAL, 1).clear(_Inner()) is None
    values = [1, 2, 3]
    assert MessageField(Label.REPEATED, 1).clear(values) == []
    inner = _Inner()
    assert MessageField(Label.REQUIRED, 1).clear(inner).items == []