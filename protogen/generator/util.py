"""Naming helpers shared by the generators."""

from typing import TYPE_CHECKING

from .types import WireFieldType

if TYPE_CHECKING:
    from .descriptors import EnumDescriptor, FieldDescriptor, MessageDescriptor


def _underscores_to_pascal_or_camel_case(name: str, pascal: bool) -> str:
    result: list[str] = []
    capitalize_next = pascal

    for i, c in enumerate(name):
        if "a" <= c <= "z":
            result.append(c.upper() if capitalize_next else c)
            capitalize_next = False
        elif "A" <= c <= "Z":
            if i == 0 and not pascal:
                # Force first letter to lower-case for camel case
                result.append(c.lower())
            else:
                result.append(c)
            capitalize_next = False
        elif "0" <= c <= "9":
            result.append(c)
            capitalize_next = True
        else:
            # Separators are dropped
            capitalize_next = True

    return "".join(result)


def underscores_to_camel_case(name: str) -> str:
    """Convert foo_bar_baz to fooBarBaz."""
    return _underscores_to_pascal_or_camel_case(name, pascal=False)


def underscores_to_pascal_case(name: str) -> str:
    """Convert foo_bar_baz to FooBarBaz."""
    return _underscores_to_pascal_or_camel_case(name, pascal=True)


def field_name(field: "FieldDescriptor") -> str:
    """Schema name used to derive a field's identifiers.

    Groups are named after their message type, since the field name of a
    group is just the lower-cased type name.
    """
    if field.wire_type == WireFieldType.GROUP and field.message_type is not None:
        return field.message_type.name
    return field.name


def class_name(descriptor: "MessageDescriptor | EnumDescriptor") -> str:
    """Fully qualified generated class name for a message or enum.

    Nested types live in a `Types` class inside their parent, so
    `pkg.Outer.Inner` becomes `global::Ns.Outer.Types.Inner`.
    """
    file = descriptor.file
    result = file.options.namespace

    if file.options.nest_classes and file.options.umbrella_classname:
        if result:
            result += "."
        result += file.options.umbrella_classname

    if result:
        result += "."

    if file.package:
        relative = descriptor.full_name[len(file.package) + 1 :]
    else:
        relative = descriptor.full_name

    result += relative.replace(".", ".Types.")
    return "global::" + result
