import pytest

from protospec.map_field import MapField, MapType, MapValueType, parse_key_type
from protospec.meta import DeriveError, parse_attributes
from protospec.scalar_type import ScalarType


def build(text, inferred_tag=None):
    return MapField.from_attrs(parse_attributes(text), inferred_tag)


@pytest.mark.parametrize("name", ["int32", "uint64", "sfixed32", "bool", "string"])
def test_parse_key_type_accepts_key_types(name):
    assert parse_key_type(f" {name} ") == ScalarType(name)


@pytest.mark.parametrize(
    "name", ["float", "double", "bytes", "enumeration<Foo>"]
)
def test_parse_key_type_rejects_other_types(name):
    with pytest.raises(DeriveError):
        parse_key_type(name)


def test_value_type_parse_scalar():
    value = MapValueType.parse("int32")
    assert value.scalar == ScalarType("int32")
    assert not value.is_message


def test_value_type_parse_enumeration():
    value = MapValueType.parse("enumeration(Color)")
    assert value.scalar.enumeration == "Color"


def test_value_type_parse_message():
    value = MapValueType.parse(" message ")
    assert value.is_message
    assert str(value) == "message"


def test_value_type_parse_invalid():
    with pytest.raises(DeriveError, match="invalid map value type"):
        MapValueType.parse("widget")


def test_name_value_form():
    field = build('map = "string, int32", tag = "1"')
    assert field == MapField(
        MapType.HASH_MAP, ScalarType("string"), MapValueType(ScalarType("int32")), 1
    )
    assert field.tags() == [1]


def test_list_form_btree_map():
    field = build("btree_map(string, message), tag = 3")
    assert field.map_type is MapType.BTREE_MAP
    assert field.key_type == ScalarType("string")
    assert field.value_type.is_message
    assert field.tag == 3


def test_hash_map_name():
    field = build('hash_map = "int64, bool"', inferred_tag=7)
    assert field.map_type is MapType.HASH_MAP
    assert field.tags() == [7]


def test_explicit_tag_wins_over_inferred():
    field = build('map = "string, string", tag = 4', inferred_tag=9)
    assert field.tag == 4


def test_missing_tag_gives_none():
    assert build('map = "string, string"') is None


def test_other_attribute_gives_none():
    assert build('map = "string, string", tag = 1, optional') is None


def test_bare_map_word_gives_none():
    assert build("map, tag = 1") is None


def test_non_string_value_gives_none():
    assert build("map = 5, tag = 1") is None


def test_missing_value_type():
    with pytest.raises(DeriveError, match="must have key and value types"):
        build('map = "string", tag = 1')


def test_too_many_types():
    with pytest.raises(DeriveError, match="invalid map attribute"):
        build('map = "string, int32, bool", tag = 1')


def test_list_needs_two_items():
    with pytest.raises(DeriveError, match="must contain key and value types"):
        build("map(string), tag = 1")


def test_list_key_must_be_identifier():
    with pytest.raises(DeriveError, match="key must be an identifier"):
        build("map(a::b, int32), tag = 1")


def test_list_value_must_be_identifier():
    with pytest.raises(DeriveError, match="value must be an identifier"):
        build('map(string, "x"), tag = 1')


def test_invalid_key_type():
    with pytest.raises(DeriveError, match="invalid map key type"):
        build('map = "double, int32", tag = 1')


def test_duplicate_map_type():
    with pytest.raises(DeriveError, match="duplicate map type attribute"):
        build('map = "string, int32", btree_map = "string, int32", tag = 1')


def test_duplicate_tag():
    with pytest.raises(DeriveError, match="duplicate tag attributes"):
        build('map = "string, int32", tag = 1, tag = 2')


def test_oneof_attrs_do_not_infer_tag():
    attrs = parse_attributes('map = "string, int32"')
    assert MapField.from_oneof_attrs(attrs) is None
    tagged = parse_attributes('map = "string, int32", tag = 2')
    assert MapField.from_oneof_attrs(tagged) == MapField.from_attrs(tagged, None)


def test_default_is_fresh_empty_dict():
    field = build('map = "string, int32", tag = 1')
    first = field.default()
    second = field.default()
    assert first == {}
    first["a"] = 1
    assert second == {}


def test_clear_empties_in_place():
    field = build('map = "string, int32", tag = 1')
    value = {"a": 1, "b": 2}
    result = field.clear(value)
    assert result is value
    assert value == {}