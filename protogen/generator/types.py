"""Type definitions for field descriptors and code generation."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum, StrEnum, auto
from typing import Any

from dataclasses_json import DataClassJsonMixin


class WireFieldType(StrEnum):
    """Closed set of logical field kinds.

    The value is the capitalized type tag used to pick the matching
    CodedInputStream/CodedOutputStream routines (ReadSFixed32, WriteUInt64...).
    """

    FLOAT = "Float"
    DOUBLE = "Double"
    INT32 = "Int32"
    INT64 = "Int64"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    SINT32 = "SInt32"
    SINT64 = "SInt64"
    FIXED32 = "Fixed32"
    FIXED64 = "Fixed64"
    SFIXED32 = "SFixed32"
    SFIXED64 = "SFixed64"
    BOOL = "Bool"
    STRING = "String"
    BYTES = "Bytes"
    ENUM = "Enum"
    MESSAGE = "Message"
    GROUP = "Group"

    @classmethod
    def from_name(cls, name: str) -> "WireFieldType":
        """Look up a wire type by tag, case-insensitively ("sfixed32", "SFixed32")."""
        for member in cls:
            if member.value.lower() == name.lower():
                return member
        raise ValueError(f"Unknown field type: {name}")


class KindClass(Enum):
    """How a wire type's default value is rendered."""

    NUMERIC = auto()
    BOOL = auto()
    STRING = auto()
    BYTES = auto()
    ENUM = auto()
    MESSAGE = auto()


class UnhandledFieldKind(RuntimeError):
    """Raised when a wire type reaches a branch with no defined behavior.

    This means a mapping table is out of sync with WireFieldType. It is never
    recovered from; code generation has to stop.
    """

    def __init__(self, wire_type: Any, field_name: str | None = None):
        self.wire_type = wire_type
        self.field_name = field_name
        where = f" (field {field_name})" if field_name else ""
        super().__init__(f"Invalid field descriptor type: {wire_type!r}{where}")


def ensure_total(
    table: Mapping[Any, Any] | Iterable[Any], kinds: Iterable[Any], table_name: str
) -> None:
    """Check that a table covers exactly the given kinds.

    Called at import time for every mapping table, so a new WireFieldType
    member fails as soon as the package is imported.
    """
    expected = frozenset(kinds)
    actual = frozenset(table)

    missing = expected - actual
    if missing:
        raise UnhandledFieldKind(sorted(missing)[0], field_name=f"<{table_name}>")

    extra = actual - expected
    if extra:
        raise UnhandledFieldKind(sorted(extra)[0], field_name=f"<{table_name}>")


KIND_CLASSES: dict[WireFieldType, KindClass] = {
    WireFieldType.FLOAT: KindClass.NUMERIC,
    WireFieldType.DOUBLE: KindClass.NUMERIC,
    WireFieldType.INT32: KindClass.NUMERIC,
    WireFieldType.INT64: KindClass.NUMERIC,
    WireFieldType.UINT32: KindClass.NUMERIC,
    WireFieldType.UINT64: KindClass.NUMERIC,
    WireFieldType.SINT32: KindClass.NUMERIC,
    WireFieldType.SINT64: KindClass.NUMERIC,
    WireFieldType.FIXED32: KindClass.NUMERIC,
    WireFieldType.FIXED64: KindClass.NUMERIC,
    WireFieldType.SFIXED32: KindClass.NUMERIC,
    WireFieldType.SFIXED64: KindClass.NUMERIC,
    WireFieldType.BOOL: KindClass.BOOL,
    WireFieldType.STRING: KindClass.STRING,
    WireFieldType.BYTES: KindClass.BYTES,
    WireFieldType.ENUM: KindClass.ENUM,
    WireFieldType.MESSAGE: KindClass.MESSAGE,
    WireFieldType.GROUP: KindClass.MESSAGE,
}

ensure_total(KIND_CLASSES, WireFieldType, "KIND_CLASSES")

NUMERIC_KINDS = frozenset(t for t, k in KIND_CLASSES.items() if k is KindClass.NUMERIC)
FLOATING_KINDS = frozenset([WireFieldType.FLOAT, WireFieldType.DOUBLE])
VARINT_KINDS = frozenset(
    [
        WireFieldType.INT32,
        WireFieldType.INT64,
        WireFieldType.UINT32,
        WireFieldType.UINT64,
        WireFieldType.SINT32,
        WireFieldType.SINT64,
    ]
)
# Kinds whose type name comes from a referenced descriptor
COMPOSITE_KINDS = frozenset([WireFieldType.ENUM, WireFieldType.MESSAGE, WireFieldType.GROUP])
SCALAR_KINDS = frozenset(WireFieldType) - COMPOSITE_KINDS

# Value-like kinds are never null; reference-like kinds need a null guard
VALUE_KINDS = NUMERIC_KINDS | frozenset([WireFieldType.BOOL, WireFieldType.ENUM])
REFERENCE_KINDS = frozenset(
    [WireFieldType.STRING, WireFieldType.BYTES, WireFieldType.MESSAGE, WireFieldType.GROUP]
)

ensure_total(VALUE_KINDS | REFERENCE_KINDS, WireFieldType, "VALUE_KINDS | REFERENCE_KINDS")
if VALUE_KINDS & REFERENCE_KINDS:
    raise RuntimeError("A field type cannot be both value-like and reference-like")


@dataclass
class SchemaFileOptions(DataClassJsonMixin):
    """C#-specific options for a schema file."""

    namespace: str = ""
    umbrella_classname: str = ""
    nest_classes: bool = False
    cls_compliance: bool = True


@dataclass
class SchemaEnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    number: int


@dataclass
class SchemaEnum(DataClassJsonMixin):
    """Represents an enum type definition."""

    name: str
    values: list[SchemaEnumValue]


@dataclass
class SchemaField(DataClassJsonMixin):
    """Represents a field of a message.

    For enum, message and group fields `type_name` names the referenced type,
    either relative to the enclosing scope or absolute with a leading dot.
    `default` is the schema text of an explicit default, if any.
    """

    name: str
    number: int
    type: str
    type_name: str | None = None
    default: str | None = None
    property_name: str | None = None


@dataclass
class SchemaMessage(DataClassJsonMixin):
    """Represents a message type definition."""

    name: str
    fields: list[SchemaField] = field(default_factory=list)
    messages: list["SchemaMessage"] = field(default_factory=list)
    enums: list[SchemaEnum] = field(default_factory=list)


@dataclass
class SchemaFile(DataClassJsonMixin):
    """Represents a complete schema file."""

    package: str = ""
    options: SchemaFileOptions = field(default_factory=SchemaFileOptions)
    messages: list[SchemaMessage] = field(default_factory=list)
    enums: list[SchemaEnum] = field(default_factory=list)
