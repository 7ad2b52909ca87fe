"""Source fragments for a single message field.

Per-field-kind generators (single, repeated, map...) call into this module
for the leaf pieces they splice into generated C#: default literals, type
names, encoded sizes and guard/attribute lines. Everything here is a pure
function of the field descriptor and the injected naming/format settings.
"""

from collections.abc import Callable

from .descriptors import EnumDescriptor, FieldDescriptor, MessageDescriptor
from .options import DEFAULT_OPTIONS, INVARIANT, FormatPolicy, GeneratorOptions
from .sizes import encoded_size
from .types import (
    KIND_CLASSES,
    REFERENCE_KINDS,
    SCALAR_KINDS,
    VALUE_KINDS,
    KindClass,
    UnhandledFieldKind,
    WireFieldType,
    ensure_total,
)
from .util import class_name, field_name, underscores_to_camel_case

ClassNamer = Callable[[MessageDescriptor | EnumDescriptor], str]

# C# type for each scalar kind; {runtime} is the runtime namespace alias
SCALAR_TYPE_NAMES: dict[WireFieldType, str] = {
    WireFieldType.FLOAT: "float",
    WireFieldType.DOUBLE: "double",
    WireFieldType.INT32: "int",
    WireFieldType.INT64: "long",
    WireFieldType.UINT32: "uint",
    WireFieldType.UINT64: "ulong",
    WireFieldType.SINT32: "int",
    WireFieldType.SINT64: "long",
    WireFieldType.FIXED32: "uint",
    WireFieldType.FIXED64: "ulong",
    WireFieldType.SFIXED32: "int",
    WireFieldType.SFIXED64: "long",
    WireFieldType.BOOL: "bool",
    WireFieldType.STRING: "string",
    WireFieldType.BYTES: "{runtime}ByteString",
}

ensure_total(SCALAR_TYPE_NAMES, SCALAR_KINDS, "SCALAR_TYPE_NAMES")


def _kind_class(field: FieldDescriptor) -> KindClass:
    try:
        return KIND_CLASSES[field.wire_type]
    except KeyError:
        raise UnhandledFieldKind(field.wire_type, field.full_name) from None


def all_printable_ascii(text: str) -> bool:
    """Check if every character is in the printable ASCII range 0x20-0x7e."""
    return all(0x20 <= ord(c) <= 0x7E for c in text)


def _quote(text: str) -> str:
    # Only called on printable ASCII, so quotes and backslashes are all that need escaping
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')
    return f'"{escaped}"'


def _descriptor_default_ref(field: FieldDescriptor, cast: str, class_namer: ClassNamer) -> str:
    """Expression that reads the default back out of the compiled descriptor."""
    containing = class_namer(field.containing_type)
    return f"({cast}) {containing}.Descriptor.Fields[{field.index}].DefaultValue"


def resolve_type_name(
    field: FieldDescriptor,
    *,
    class_namer: ClassNamer = class_name,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> str:
    """C# type name of a field's value."""
    match field.wire_type:
        case WireFieldType.ENUM:
            if field.enum_type is None:
                raise ValueError(f"{field.full_name} is an enum field without an enum type")
            return class_namer(field.enum_type)
        case WireFieldType.MESSAGE | WireFieldType.GROUP:
            if field.message_type is None:
                raise ValueError(f"{field.full_name} is a message field without a message type")
            return class_namer(field.message_type)

    if field.wire_type not in SCALAR_TYPE_NAMES:
        raise UnhandledFieldKind(field.wire_type, field.full_name)
    return SCALAR_TYPE_NAMES[field.wire_type].format(runtime=options.runtime_alias)


def render_default(
    field: FieldDescriptor,
    *,
    class_namer: ClassNamer = class_name,
    policy: FormatPolicy = INVARIANT,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> str:
    """C# expression for a field's default value."""
    match _kind_class(field):
        case KindClass.NUMERIC:
            value = field.default_value
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{field.full_name} has non-numeric default {value!r}")
            return policy.format_number(field.wire_type, value)

        case KindClass.BOOL:
            if not isinstance(field.default_value, bool):
                raise ValueError(f"{field.full_name} has non-bool default {field.default_value!r}")
            return "true" if field.default_value else "false"

        case KindClass.BYTES:
            bytes_type = resolve_type_name(field, class_namer=class_namer, options=options)
            if not field.has_default_value:
                return f"{bytes_type}.Empty"
            # Arbitrary binary has no literal form
            return _descriptor_default_ref(field, bytes_type, class_namer)

        case KindClass.STRING:
            text = field.raw_default if field.raw_default is not None else ""
            if all_printable_ascii(text):
                return _quote(text)
            # Keep non-ASCII text out of the generated source
            return _descriptor_default_ref(field, "string", class_namer)

        case KindClass.ENUM:
            value_name = getattr(field.default_value, "name", None)
            if value_name is None:
                raise ValueError(f"{field.full_name} has no default enum value")
            return f"{resolve_type_name(field, class_namer=class_namer)}.{value_name}"

        case KindClass.MESSAGE:
            return f"{resolve_type_name(field, class_namer=class_namer)}.DefaultInstance"

    raise UnhandledFieldKind(field.wire_type, field.full_name)


def fixed_encoded_size(field: FieldDescriptor) -> int:
    """Encoded size in bytes for fixed-width kinds, -1 for everything else."""
    try:
        return encoded_size(field.wire_type)
    except UnhandledFieldKind:
        raise UnhandledFieldKind(field.wire_type, field.full_name) from None


def is_reference_like(field: FieldDescriptor) -> bool:
    """Check if the C# type of a field can be null."""
    if field.wire_type in REFERENCE_KINDS:
        return True
    if field.wire_type in VALUE_KINDS:
        return False
    raise UnhandledFieldKind(field.wire_type, field.full_name)


def emit_null_guard(
    field: FieldDescriptor,
    parameter_name: str = "value",
    *,
    options: GeneratorOptions = DEFAULT_OPTIONS,
) -> str:
    """Statement rejecting a null argument, or "" when the type can't be null."""
    if not is_reference_like(field):
        return ""
    return f'{options.runtime(options.null_check)}({parameter_name}, "{parameter_name}");'


def emit_compliance_marker(
    field: FieldDescriptor, *, options: GeneratorOptions = DEFAULT_OPTIONS
) -> str:
    """CLSCompliant(false) attribute for members that break CLS rules, else "".

    Files with the cls_compliance option turned off never get the attribute.
    """
    if field.is_cls_compliant or not field.containing_type.file.options.cls_compliance:
        return ""
    return f"[{options.cls_compliant_attribute}(false)]"


def capitalized_type_name(field: FieldDescriptor) -> str:
    """Type name as used in CodedInputStream method names: SFixed32, UInt32 etc."""
    return field.wire_type.value


def message_or_group(field: FieldDescriptor) -> str:
    return "Group" if field.wire_type == WireFieldType.GROUP else "Message"


class FieldGenerator:
    """Base for the per-field-kind generators.

    Binds one field descriptor to the naming and formatting settings and
    exposes the fragments as properties.
    """

    def __init__(
        self,
        descriptor: FieldDescriptor,
        *,
        class_namer: ClassNamer = class_name,
        policy: FormatPolicy = INVARIANT,
        options: GeneratorOptions = DEFAULT_OPTIONS,
    ):
        self.descriptor = descriptor
        self.class_namer = class_namer
        self.policy = policy
        self.options = options

    @property
    def default_value(self) -> str:
        return render_default(
            self.descriptor, class_namer=self.class_namer, policy=self.policy, options=self.options
        )

    @property
    def type_name(self) -> str:
        return resolve_type_name(
            self.descriptor, class_namer=self.class_namer, options=self.options
        )

    @property
    def fixed_size(self) -> int:
        return fixed_encoded_size(self.descriptor)

    @property
    def is_nullable_type(self) -> bool:
        return is_reference_like(self.descriptor)

    @property
    def capitalized_type_name(self) -> str:
        return capitalized_type_name(self.descriptor)

    @property
    def message_or_group(self) -> str:
        return message_or_group(self.descriptor)

    @property
    def property_name(self) -> str:
        return self.descriptor.property_name

    @property
    def name(self) -> str:
        return underscores_to_camel_case(field_name(self.descriptor))

    @property
    def number(self) -> int:
        return self.descriptor.number

    def null_check(self, parameter_name: str = "value") -> str:
        return emit_null_guard(self.descriptor, parameter_name, options=self.options)

    def cls_compliance_check(self) -> str:
        return emit_compliance_marker(self.descriptor, options=self.options)
