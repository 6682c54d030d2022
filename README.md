# protospec

Building blocks for Protocol Buffers in plain Python, with no dependencies:

- `protospec.timestamp`: `Timestamp`, `Duration` and a UTC `DateTime` that covers every
  second a 64-bit timestamp can hold, far outside what `datetime` allows, plus the calendar
  helpers `days_in_month`, `year_to_seconds` and `datetime_to_seconds`.
- `protospec.rfc3339`: `parse_timestamp` and `parse_duration` for the text forms used by the
  protobuf JSON mapping.
- `protospec.meta`: parses field attribute specifications such as
  `int32, optional, tag = "1"` into `MetaPath`, `MetaNameValue` and `MetaList` items, and
  the helpers `tag_attr`, `tags_attr`, `bool_attr`, `word_attr` and `Label`.
- `protospec.scalar_type`: `ScalarType`, `BytesType` and `parse_default`.
- Field descriptions built from attribute items, each with `from_attrs`, `tags`,
  `default` and `clear`:
  - `protospec.scalar.ScalarField` (with its `Kind`: plain, optional, required,
    repeated or packed),
  - `protospec.message_field.MessageField`,
  - `protospec.group_field.GroupField`,
  - `protospec.map_field.MapField` (with `MapType`, `MapValueType`, `parse_key_type`),
  - `protospec.oneof_field.OneofField`.

## Install

```
pip install protospec
```

## Timestamps and durations

```python
from protospec.timestamp import DateTime, Timestamp, days_in_month
from protospec.rfc3339 import parse_timestamp, parse_duration

str(DateTime.from_timestamp(Timestamp(seconds=0, nanos=50_000_000)))
# '1970-01-01T00:00:00.050Z'

str(parse_timestamp("1996-12-19T16:39:57-08:00"))
# '1996-12-20T00:39:57Z'

parse_duration("-15.1s")
# Duration(seconds=-15, nanos=-100000000)

days_in_month(2020, 2)
# 29
```

`str()` of a `Timestamp` gives its RFC 3339 form in UTC, with fractional seconds shown
as milliseconds, microseconds or nanoseconds as needed. `Timestamp.normalize()` returns
an equivalent timestamp whose nanos lie in `[0, 999_999_999]`.

Parsing accepts a space in place of `T`, a missing offset (taken as UTC), a space before
the offset, offsets without minutes or without a colon, and a leap second `:60`, which is
rolled back to `:59`. Years may be written with a sign (`-0008`, `+19370`). Input that
cannot be parsed, including non-ASCII text and the unknown offset `-00:00`, raises
`ValueError`.

## Field specifications

```python
from protospec.meta import parse_attributes
from protospec.scalar import Kind, ScalarField
from protospec.map_field import MapField
from protospec.oneof_field import OneofField
from protospec.scalar_type import ScalarType, parse_default

spec = ScalarField.from_attrs(parse_attributes('int32, repeated, tag = "4"'), None)
spec.kind, spec.tags()
# (Kind.PACKED, [4])

MapField.from_attrs(parse_attributes('map = "string, int32", tag = "3"'), None).tags()
# [3]

OneofField.from_attrs(parse_attributes('oneof = "Choice", tags = "5, 6"')).tags()
# [5, 6]

parse_default(ScalarType.parse("int32"), "-5")
# -5
```

Each `from_attrs` returns `None` when the attributes describe a different kind of field,
and takes an inferred tag that is used when no `tag` attribute is given. Repeated numeric
scalars are packed unless `packed = false` is given.

Bad specifications raise `protospec.meta.DeriveError`: duplicate attributes, unknown
attributes, a missing tag, `packed` on a field that is not repeated or not numeric, a
default on a repeated field, a default out of range for its type, an invalid map key type,
or a label on a oneof variant.

## What this package does not do

It describes single fields; it has no function that tries every field kind in turn for a
set of attributes, and it does not check a whole message for duplicate tags. It does not
turn classes into messages, and it does not encode or decode the protobuf wire format.

## Tests

```
pip install -e ".[test]"
pytest
```