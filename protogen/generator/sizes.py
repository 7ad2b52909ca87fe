"""Wire-format encoded sizes for field types."""

from .types import UnhandledFieldKind, WireFieldType, ensure_total

# Returned for kinds whose encoded length depends on the value
VARIABLE_SIZE = -1

FLOAT_SIZE = 4
DOUBLE_SIZE = 8
BOOL_SIZE = 1
FIXED32_SIZE = 4
FIXED64_SIZE = 8
SFIXED32_SIZE = 4
SFIXED64_SIZE = 8

# Fixed-width kinds and their size in bytes
FIXED_SIZES: dict[WireFieldType, int] = {
    WireFieldType.FLOAT: FLOAT_SIZE,
    WireFieldType.DOUBLE: DOUBLE_SIZE,
    WireFieldType.BOOL: BOOL_SIZE,
    WireFieldType.FIXED32: FIXED32_SIZE,
    WireFieldType.FIXED64: FIXED64_SIZE,
    WireFieldType.SFIXED32: SFIXED32_SIZE,
    WireFieldType.SFIXED64: SFIXED64_SIZE,
}

# Varints and length-delimited kinds
VARIABLE_LENGTH_KINDS = frozenset(
    [
        WireFieldType.INT32,
        WireFieldType.INT64,
        WireFieldType.UINT32,
        WireFieldType.UINT64,
        WireFieldType.SINT32,
        WireFieldType.SINT64,
        WireFieldType.ENUM,
        WireFieldType.STRING,
        WireFieldType.BYTES,
        WireFieldType.MESSAGE,
        WireFieldType.GROUP,
    ]
)

if FIXED_SIZES.keys() & VARIABLE_LENGTH_KINDS:
    raise RuntimeError("A field type cannot be both fixed and variable length")
ensure_total(FIXED_SIZES.keys() | VARIABLE_LENGTH_KINDS, WireFieldType, "sizes")


def encoded_size(wire_type: WireFieldType) -> int:
    """Size in bytes for a fixed-width kind, VARIABLE_SIZE otherwise."""
    if wire_type in FIXED_SIZES:
        return FIXED_SIZES[wire_type]
    if wire_type in VARIABLE_LENGTH_KINDS:
        return VARIABLE_SIZE
    raise UnhandledFieldKind(wire_type)
