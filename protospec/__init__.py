"""Protocol Buffers field attribute specifications, timestamp types and RFC 3339 parsing."""

__version__ = "0.1.0"

__all__ = [
    "group_field",
    "map_field",
    "message_field",
    "meta",
    "oneof_field",
    "rfc3339",
    "scalar",
    "scalar_type",
    "timestamp",
]