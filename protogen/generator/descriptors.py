"""Resolved, read-only descriptor graph built from a schema file.

The builder runs in two passes: first every message and enum gets a
descriptor registered under its full name, then fields are created with
their type references and typed default values resolved. After
build_descriptors() returns nothing in the graph changes.
"""

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .types import (
    FLOATING_KINDS,
    KIND_CLASSES,
    KindClass,
    SchemaEnum,
    SchemaFile,
    SchemaFileOptions,
    SchemaMessage,
    UnhandledFieldKind,
    WireFieldType,
)
from .util import underscores_to_pascal_case

_LOG = logging.getLogger(__name__)


class DescriptorError(RuntimeError):
    """Raised when a schema cannot be resolved into descriptors."""


# Inclusive value ranges for integer kinds
_INTEGER_RANGES: dict[WireFieldType, tuple[int, int]] = {
    WireFieldType.INT32: (-(2**31), 2**31 - 1),
    WireFieldType.SINT32: (-(2**31), 2**31 - 1),
    WireFieldType.SFIXED32: (-(2**31), 2**31 - 1),
    WireFieldType.INT64: (-(2**63), 2**63 - 1),
    WireFieldType.SINT64: (-(2**63), 2**63 - 1),
    WireFieldType.SFIXED64: (-(2**63), 2**63 - 1),
    WireFieldType.UINT32: (0, 2**32 - 1),
    WireFieldType.FIXED32: (0, 2**32 - 1),
    WireFieldType.UINT64: (0, 2**64 - 1),
    WireFieldType.FIXED64: (0, 2**64 - 1),
}

# Unsigned kinds map to uint/ulong, which are not CLS-compliant
_UNSIGNED_KINDS = frozenset(
    [WireFieldType.UINT32, WireFieldType.UINT64, WireFieldType.FIXED32, WireFieldType.FIXED64]
)


@dataclass(frozen=True, eq=False)
class FileDescriptor:
    """Describes a schema file and its top-level types."""

    package: str
    options: SchemaFileOptions
    _messages: list["MessageDescriptor"] = field(default_factory=list, repr=False)
    _enums: list["EnumDescriptor"] = field(default_factory=list, repr=False)

    @property
    def messages(self) -> tuple["MessageDescriptor", ...]:
        return tuple(self._messages)

    @property
    def enums(self) -> tuple["EnumDescriptor", ...]:
        return tuple(self._enums)

    def all_messages(self) -> Iterator["MessageDescriptor"]:
        """Iterate over every message, depth first."""
        for message in self._messages:
            yield from message.walk()

    def all_fields(self) -> Iterator["FieldDescriptor"]:
        for message in self.all_messages():
            yield from message.fields


@dataclass(frozen=True)
class EnumValueDescriptor:
    name: str
    number: int
    index: int


@dataclass(frozen=True, eq=False)
class EnumDescriptor:
    """Describes an enum type."""

    name: str
    full_name: str
    file: FileDescriptor = field(repr=False)
    values: tuple[EnumValueDescriptor, ...]

    def find_value(self, name: str) -> EnumValueDescriptor | None:
        for value in self.values:
            if value.name == name:
                return value
        return None


@dataclass(frozen=True, eq=False)
class MessageDescriptor:
    """Describes a message type; fields are in declaration order."""

    name: str
    full_name: str
    file: FileDescriptor = field(repr=False)
    _fields: list["FieldDescriptor"] = field(default_factory=list, repr=False)
    _messages: list["MessageDescriptor"] = field(default_factory=list, repr=False)
    _enums: list[EnumDescriptor] = field(default_factory=list, repr=False)

    @property
    def fields(self) -> tuple["FieldDescriptor", ...]:
        return tuple(self._fields)

    @property
    def nested_types(self) -> tuple["MessageDescriptor", ...]:
        return tuple(self._messages)

    @property
    def enum_types(self) -> tuple[EnumDescriptor, ...]:
        return tuple(self._enums)

    def walk(self) -> Iterator["MessageDescriptor"]:
        yield self
        for nested in self._messages:
            yield from nested.walk()


@dataclass(frozen=True, eq=False)
class FieldDescriptor:
    """Read-only view of one field's resolved attributes."""

    name: str
    full_name: str
    number: int
    wire_type: WireFieldType
    containing_type: MessageDescriptor = field(repr=False)
    index: int
    default_value: Any
    raw_default: str | None = None
    property_name: str = ""
    is_cls_compliant: bool = True
    message_type: MessageDescriptor | None = field(default=None, repr=False)
    enum_type: EnumDescriptor | None = field(default=None, repr=False)

    @property
    def has_default_value(self) -> bool:
        return self.raw_default is not None


def _full_name(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


def _parse_integer(text: str, wire_type: WireFieldType) -> int:
    body = text.strip()
    sign = 1
    if body.startswith("-"):
        sign = -1
        body = body[1:]

    if body.lower().startswith("0x"):
        value = int(body[2:], 16)
    elif len(body) > 1 and body.startswith("0"):
        value = int(body[1:], 8)
    else:
        value = int(body, 10)
    value *= sign

    low, high = _INTEGER_RANGES[wire_type]
    if not low <= value <= high:
        raise ValueError(f"{text} out of range for {wire_type}")
    return value


def _parse_float(text: str) -> float:
    lowered = text.strip().lower()
    if lowered in ("inf", "+inf"):
        return math.inf
    if lowered == "-inf":
        return -math.inf
    if lowered == "nan":
        return math.nan
    return float(lowered)


def _unescape_bytes(text: str) -> bytes:
    """Decode C-style escapes (\\n, \\x41, \\101) in a bytes default."""
    return text.encode("utf-8").decode("unicode_escape").encode("latin-1")


def _implicit_default(wire_type: WireFieldType, enum_type: EnumDescriptor | None) -> Any:
    match KIND_CLASSES[wire_type]:
        case KindClass.NUMERIC:
            return 0.0 if wire_type in FLOATING_KINDS else 0
        case KindClass.BOOL:
            return False
        case KindClass.STRING:
            return ""
        case KindClass.BYTES:
            return b""
        case KindClass.ENUM:
            return enum_type.values[0] if enum_type and enum_type.values else None
        case KindClass.MESSAGE:
            return None
    raise UnhandledFieldKind(wire_type)


def _explicit_default(
    wire_type: WireFieldType, text: str, enum_type: EnumDescriptor | None, full_name: str
) -> Any:
    try:
        match KIND_CLASSES[wire_type]:
            case KindClass.NUMERIC:
                if "_" in text:
                    raise ValueError(f"digit separators are not allowed in {text!r}")
                if wire_type in FLOATING_KINDS:
                    return _parse_float(text)
                return _parse_integer(text, wire_type)
            case KindClass.BOOL:
                if text not in ("true", "false"):
                    raise ValueError(f"expected true or false, got {text!r}")
                return text == "true"
            case KindClass.STRING:
                return text
            case KindClass.BYTES:
                return _unescape_bytes(text)
            case KindClass.ENUM:
                if enum_type is None:
                    raise ValueError("enum field has no enum type")
                value = enum_type.find_value(text)
                if value is None:
                    raise ValueError(f"{enum_type.full_name} has no value named {text}")
                return value
            case KindClass.MESSAGE:
                raise ValueError("message and group fields cannot have default values")
    except (ValueError, UnicodeError) as exc:
        raise DescriptorError(f"Invalid default for {full_name}: {exc}") from exc
    raise UnhandledFieldKind(wire_type, full_name)


class _Builder:
    def __init__(self, schema: SchemaFile):
        self.schema = schema
        self.file = FileDescriptor(package=schema.package, options=schema.options)
        self.messages: dict[str, MessageDescriptor] = {}
        self.enums: dict[str, EnumDescriptor] = {}
        # (schema message, descriptor) in declaration order for the field pass
        self._pending: list[tuple[SchemaMessage, MessageDescriptor]] = []

    def build(self) -> FileDescriptor:
        for schema_enum in self.schema.enums:
            self.file._enums.append(self._add_enum(schema_enum, self.schema.package))
        for schema_message in self.schema.messages:
            self.file._messages.append(self._add_message(schema_message, self.schema.package))

        for schema_message, message in self._pending:
            self._add_fields(schema_message, message)

        _LOG.debug(
            "Built %d messages and %d enums for package %r",
            len(self.messages),
            len(self.enums),
            self.file.package,
        )
        return self.file

    def _register(self, full_name: str) -> None:
        if full_name in self.messages or full_name in self.enums:
            raise DescriptorError(f"{full_name} is already defined")

    def _add_enum(self, schema_enum: SchemaEnum, scope: str) -> EnumDescriptor:
        full_name = _full_name(scope, schema_enum.name)
        self._register(full_name)
        if not schema_enum.values:
            raise DescriptorError(f"Enum {full_name} must have at least one value")

        values = tuple(
            EnumValueDescriptor(name=v.name, number=v.number, index=i)
            for i, v in enumerate(schema_enum.values)
        )
        enum = EnumDescriptor(
            name=schema_enum.name, full_name=full_name, file=self.file, values=values
        )
        self.enums[full_name] = enum
        return enum

    def _add_message(self, schema_message: SchemaMessage, scope: str) -> MessageDescriptor:
        full_name = _full_name(scope, schema_message.name)
        self._register(full_name)

        message = MessageDescriptor(name=schema_message.name, full_name=full_name, file=self.file)
        self.messages[full_name] = message
        self._pending.append((schema_message, message))

        for nested_enum in schema_message.enums:
            message._enums.append(self._add_enum(nested_enum, full_name))
        for nested in schema_message.messages:
            message._messages.append(self._add_message(nested, full_name))
        return message

    def _resolve(self, type_name: str, scope: str) -> MessageDescriptor | EnumDescriptor | None:
        """Resolve a type reference the way protoc does: innermost scope first."""
        if type_name.startswith("."):
            name = type_name[1:]
            return self.messages.get(name) or self.enums.get(name)

        while True:
            candidate = _full_name(scope, type_name)
            found = self.messages.get(candidate) or self.enums.get(candidate)
            if found is not None:
                return found
            if not scope:
                return None
            scope = scope.rpartition(".")[0]

    def _add_fields(self, schema_message: SchemaMessage, message: MessageDescriptor) -> None:
        numbers: set[int] = set()

        for index, schema_field in enumerate(schema_message.fields):
            full_name = f"{message.full_name}.{schema_field.name}"

            try:
                wire_type = WireFieldType.from_name(schema_field.type)
            except ValueError as exc:
                raise DescriptorError(f"{full_name}: {exc}") from exc

            if schema_field.number <= 0:
                raise DescriptorError(f"{full_name}: field numbers must be positive")
            if schema_field.number in numbers:
                raise DescriptorError(f"{full_name}: field number {schema_field.number} reused")
            numbers.add(schema_field.number)

            message_type: MessageDescriptor | None = None
            enum_type: EnumDescriptor | None = None
            if KIND_CLASSES[wire_type] in (KindClass.ENUM, KindClass.MESSAGE):
                if not schema_field.type_name:
                    raise DescriptorError(f"{full_name}: {wire_type} fields need a type_name")
                resolved = self._resolve(schema_field.type_name, message.full_name)
                if wire_type == WireFieldType.ENUM and isinstance(resolved, EnumDescriptor):
                    enum_type = resolved
                elif wire_type != WireFieldType.ENUM and isinstance(resolved, MessageDescriptor):
                    message_type = resolved
                else:
                    raise DescriptorError(
                        f"{full_name}: {schema_field.type_name} is not a known "
                        f"{'enum' if wire_type == WireFieldType.ENUM else 'message'} type"
                    )
                _LOG.debug("Resolved %s to %s", schema_field.type_name, resolved.full_name)

            if schema_field.default is None:
                default_value = _implicit_default(wire_type, enum_type)
            else:
                default_value = _explicit_default(
                    wire_type, schema_field.default, enum_type, full_name
                )

            # Groups take their identifiers from the group's type name
            base_name = schema_field.name
            if wire_type == WireFieldType.GROUP and message_type is not None:
                base_name = message_type.name
            property_name = schema_field.property_name or underscores_to_pascal_case(base_name)

            message._fields.append(
                FieldDescriptor(
                    name=schema_field.name,
                    full_name=full_name,
                    number=schema_field.number,
                    wire_type=wire_type,
                    containing_type=message,
                    index=index,
                    default_value=default_value,
                    raw_default=schema_field.default,
                    property_name=property_name,
                    is_cls_compliant=(
                        wire_type not in _UNSIGNED_KINDS
                        and not underscores_to_pascal_case(schema_field.name).startswith("Cls")
                    ),
                    message_type=message_type,
                    enum_type=enum_type,
                )
            )


def build_descriptors(schema: SchemaFile) -> FileDescriptor:
    """Resolve a schema into an immutable descriptor graph."""
    return _Builder(schema).build()


def load_schema(path: str) -> SchemaFile:
    """Load a JSON schema file."""
    with open(path, encoding="utf-8") as f:
        return SchemaFile.from_json(f.read())
