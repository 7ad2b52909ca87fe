"""Tests for field fragment rendering."""

import dataclasses
import locale

import pytest

from protogen.generator import (
    VARIABLE_SIZE,
    VARINT_KINDS,
    FieldGenerator,
    FormatPolicy,
    GeneratorOptions,
    SchemaField,
    SchemaFile,
    SchemaFileOptions,
    SchemaMessage,
    UnhandledFieldKind,
    WireFieldType,
    build_descriptors,
    emit_compliance_marker,
    emit_null_guard,
    fixed_encoded_size,
    is_reference_like,
    render_default,
    resolve_type_name,
)
from protogen.generator.options import DEFAULT_LITERAL_SUFFIXES

TYPE_NAMES = {
    WireFieldType.ENUM: "Color",
    WireFieldType.MESSAGE: "Inner",
    WireFieldType.GROUP: "Inner",
}


def short_name(descriptor):
    return descriptor.name


def describe_render_default():
    def describe_numbers():
        def renders_int32_without_suffix(expect, make_field):
            expect(render_default(make_field("int32", default="42"))) == "42"

        def renders_implicit_zero(expect, make_field):
            expect(render_default(make_field("int32"))) == "0"
            expect(render_default(make_field("sfixed64"))) == "0"

        def renders_int64_suffix(expect, make_field):
            expect(render_default(make_field("int64", default="-5"))) == "-5L"

        def renders_uint64_suffix(expect, make_field):
            field = make_field("uint64", default="18446744073709551615")
            expect(render_default(field)) == "18446744073709551615UL"

        def renders_other_integers_without_suffix(expect, make_field):
            expect(render_default(make_field("uint32", default="7"))) == "7"
            expect(render_default(make_field("sint64", default="-9"))) == "-9"
            expect(render_default(make_field("fixed32", default="0x10"))) == "16"

        def renders_float_suffix(expect, make_field):
            expect(render_default(make_field("float", default="1.5"))) == "1.5F"

        def renders_double_suffix(expect, make_field):
            expect(render_default(make_field("double", default="1.5"))) == "1.5D"
            expect(render_default(make_field("double"))) == "0D"

        def drops_fraction_of_whole_numbers(expect, make_field):
            expect(render_default(make_field("double", default="2"))) == "2D"
            expect(render_default(make_field("double", default="-100.0"))) == "-100D"
            expect(render_default(make_field("float"))) == "0F"

        def renders_exponents(expect, make_field):
            expect(render_default(make_field("double", default="1e20"))) == "1E+20D"
            expect(render_default(make_field("double", default="1e-7"))) == "1E-07D"
            expect(render_default(make_field("double", default="1.25e15"))) == "1.25E+15D"
            expect(render_default(make_field("float", default="1e20"))) == "1E+20F"

        def switches_to_exponents_at_general_precision(expect, make_field):
            expect(render_default(make_field("double", default="1e14"))) == "100000000000000D"
            expect(render_default(make_field("double", default="0.0001"))) == "0.0001D"
            expect(render_default(make_field("double", default="0.00001"))) == "1E-05D"
            expect(render_default(make_field("float", default="1000000"))) == "1000000F"
            expect(render_default(make_field("float", default="10000000"))) == "1E+07F"

        def narrows_floats_to_single_precision(expect, make_field):
            expect(render_default(make_field("float", default="16777217"))) == "16777216F"
            expect(render_default(make_field("float", default="0.1"))) == "0.1F"
            expect(render_default(make_field("float", default="3.4e39"))) == "float.PositiveInfinity"

        def renders_non_finite_values(expect, make_field):
            expect(render_default(make_field("double", default="inf"))) == "double.PositiveInfinity"
            expect(render_default(make_field("float", default="-inf"))) == "float.NegativeInfinity"
            expect(render_default(make_field("double", default="nan"))) == "double.NaN"

        def ignores_locale_settings(expect, make_field, monkeypatch):
            field = make_field("double", default="1.5")
            before = render_default(field)

            conv = dict(locale.localeconv())
            conv.update(decimal_point=",", thousands_sep=".")
            monkeypatch.setattr(locale, "localeconv", lambda: conv)

            expect(render_default(field)) == before
            expect(before) == "1.5D"

        def ignores_process_locale(expect, make_field):
            field = make_field("double", default="1.5")
            saved = locale.setlocale(locale.LC_ALL)
            for name in ("de_DE.UTF-8", "de_DE.utf8", "fr_FR.UTF-8"):
                try:
                    locale.setlocale(locale.LC_ALL, name)
                    break
                except locale.Error:
                    continue
            else:
                pytest.skip("no locale with a decimal comma installed")

            try:
                expect(render_default(field)) == "1.5D"
            finally:
                locale.setlocale(locale.LC_ALL, saved)

        def uses_injected_policy(expect, make_field):
            suffixes = dict(DEFAULT_LITERAL_SUFFIXES)
            suffixes[WireFieldType.UINT32] = "U"
            policy = FormatPolicy(literal_suffixes=suffixes)

            expect(render_default(make_field("uint32", default="7"), policy=policy)) == "7U"

        def rejects_incomplete_policy(expect):
            with pytest.raises(UnhandledFieldKind):
                FormatPolicy(literal_suffixes={WireFieldType.INT32: ""})

    def describe_bool():
        def renders_true_and_false(expect, make_field):
            expect(render_default(make_field("bool", default="true"))) == "true"
            expect(render_default(make_field("bool", default="false"))) == "false"
            expect(render_default(make_field("bool"))) == "false"

    def describe_bytes():
        def renders_empty_bytes_when_unset(expect, make_field):
            expect(render_default(make_field("bytes"))) == "pb::ByteString.Empty"

        def reads_explicit_default_from_descriptor(expect, make_field):
            field = make_field("bytes", default="abc\\x00")
            expect(render_default(field)) == (
                "(pb::ByteString) global::Test.Outer.Descriptor.Fields[1].DefaultValue"
            )

        def uses_injected_class_namer(expect, make_field):
            field = make_field("bytes", default="abc")
            expect(render_default(field, class_namer=short_name)) == (
                "(pb::ByteString) Outer.Descriptor.Fields[1].DefaultValue"
            )

    def describe_string():
        def renders_empty_string_when_unset(expect, make_field):
            expect(render_default(make_field("string"))) == '""'

        def escapes_quotes(expect, make_field):
            field = make_field("string", default='hello "world"')
            expect(render_default(field)) == '"hello \\"world\\""'

        def escapes_backslashes_and_single_quotes(expect, make_field):
            field = make_field("string", default="it's a\\b")
            expect(render_default(field)) == '"it\\\'s a\\\\b"'

        def reads_non_ascii_default_from_descriptor(expect, make_field):
            field = make_field("string", default="café")
            expect(render_default(field)) == (
                "(string) global::Test.Outer.Descriptor.Fields[1].DefaultValue"
            )

        def reads_control_characters_from_descriptor(expect, make_field):
            field = make_field("string", default="line\nbreak")
            expect(render_default(field).startswith("(string) ")) == True

    def describe_enum():
        def renders_enum_member(expect, make_field):
            field = make_field("enum", type_name="Color", default="FOO")
            expect(render_default(field, class_namer=short_name)) == "Color.FOO"

        def renders_first_member_when_unset(expect, make_field):
            field = make_field("enum", type_name="Color")
            expect(render_default(field)) == "global::Test.Color.RED"

    def describe_messages():
        def renders_default_instance(expect, make_field):
            field = make_field("message", type_name="Inner")
            expect(render_default(field)) == "global::Test.Outer.Types.Inner.DefaultInstance"

        def renders_default_instance_for_groups(expect, make_field):
            field = make_field("group", type_name="Inner")
            expect(render_default(field, class_namer=short_name)) == "Inner.DefaultInstance"

    def describe_invalid_state():
        def rejects_mismatched_default(expect, make_field):
            field = dataclasses.replace(make_field("int32"), default_value="oops")
            with pytest.raises(ValueError):
                render_default(field)


def describe_resolve_type_name():
    def maps_scalars(expect, make_field):
        expected = {
            "float": "float",
            "double": "double",
            "int32": "int",
            "sint32": "int",
            "sfixed32": "int",
            "int64": "long",
            "sint64": "long",
            "sfixed64": "long",
            "uint32": "uint",
            "fixed32": "uint",
            "uint64": "ulong",
            "fixed64": "ulong",
            "bool": "bool",
            "string": "string",
            "bytes": "pb::ByteString",
        }
        for type, name in expected.items():
            expect(resolve_type_name(make_field(type))) == name

    def resolves_enum_and_message_classes(expect, make_field):
        expect(resolve_type_name(make_field("enum", type_name="Color"))) == "global::Test.Color"
        expect(resolve_type_name(make_field("message", type_name="Inner"))) == (
            "global::Test.Outer.Types.Inner"
        )

    def uses_runtime_alias_option(expect, make_field):
        options = GeneratorOptions(runtime_alias="global::Google.ProtocolBuffers.")
        expect(resolve_type_name(make_field("bytes"), options=options)) == (
            "global::Google.ProtocolBuffers.ByteString"
        )


def describe_exhaustiveness():
    def defines_every_operation_for_every_kind(expect, make_field):
        for wire_type in WireFieldType:
            field = make_field(wire_type.value, type_name=TYPE_NAMES.get(wire_type))
            expect(render_default(field)) != ""
            expect(resolve_type_name(field)) != ""
            expect(fixed_encoded_size(field) in (VARIABLE_SIZE, 1, 4, 8)) == True
            expect(isinstance(is_reference_like(field), bool)) == True

    def partitions_fixed_and_variable_kinds(expect, make_field):
        for wire_type in WireFieldType:
            field = make_field(wire_type.value, type_name=TYPE_NAMES.get(wire_type))
            variable = (
                is_reference_like(field)
                or wire_type in VARINT_KINDS
                or wire_type == WireFieldType.ENUM
            )
            expect(fixed_encoded_size(field) == VARIABLE_SIZE) == variable

    def fails_loudly_on_unknown_kind(expect, make_field):
        field = dataclasses.replace(make_field("int32"), wire_type="Weird")

        with pytest.raises(UnhandledFieldKind) as exinfo:
            render_default(field)
        expect(str(exinfo.value)).includes("test.Outer.value")

        with pytest.raises(UnhandledFieldKind):
            resolve_type_name(field)
        with pytest.raises(UnhandledFieldKind):
            fixed_encoded_size(field)
        with pytest.raises(UnhandledFieldKind):
            is_reference_like(field)


def describe_fixed_encoded_size():
    def returns_fixed_widths(expect, make_field):
        expect(fixed_encoded_size(make_field("float"))) == 4
        expect(fixed_encoded_size(make_field("double"))) == 8
        expect(fixed_encoded_size(make_field("bool"))) == 1
        expect(fixed_encoded_size(make_field("fixed32"))) == 4
        expect(fixed_encoded_size(make_field("sfixed64"))) == 8

    def returns_sentinel_for_variable_kinds(expect, make_field):
        expect(fixed_encoded_size(make_field("int32"))) == -1
        expect(fixed_encoded_size(make_field("string"))) == -1
        expect(fixed_encoded_size(make_field("enum", type_name="Color"))) == -1


def describe_emit_null_guard():
    def emits_nothing_for_value_kinds(expect, make_field):
        expect(emit_null_guard(make_field("int32"), "other")) == ""
        expect(emit_null_guard(make_field("bool"), "other")) == ""
        expect(emit_null_guard(make_field("enum", type_name="Color"), "other")) == ""

    def emits_guard_for_reference_kinds(expect, make_field):
        expect(emit_null_guard(make_field("string"))) == (
            'pb::ThrowHelper.ThrowIfNull(value, "value");'
        )
        expect(emit_null_guard(make_field("bytes"), "other")) == (
            'pb::ThrowHelper.ThrowIfNull(other, "other");'
        )
        expect(emit_null_guard(make_field("message", type_name="Inner"), "other")) != ""


def describe_emit_compliance_marker():
    def marks_unsigned_fields(expect, make_field):
        expect(emit_compliance_marker(make_field("uint32"))) == (
            "[global::System.CLSCompliant(false)]"
        )
        expect(emit_compliance_marker(make_field("fixed64"))) != ""

    def marks_cls_prefixed_names(expect, make_field):
        expect(emit_compliance_marker(make_field("int32", name="cls_id"))) != ""

    def emits_nothing_for_compliant_fields(expect, make_field):
        expect(emit_compliance_marker(make_field("int32"))) == ""
        expect(emit_compliance_marker(make_field("string"))) == ""

    def respects_file_option(expect):
        schema = SchemaFile(
            options=SchemaFileOptions(cls_compliance=False),
            messages=[
                SchemaMessage(name="M", fields=[SchemaField(name="a", number=1, type="uint32")])
            ],
        )
        field = build_descriptors(schema).messages[0].fields[0]
        expect(field.is_cls_compliant) == False
        expect(emit_compliance_marker(field)) == ""


def describe_field_generator():
    def exposes_names(expect, make_field):
        gen = FieldGenerator(make_field("sfixed32", name="foo_bar"))
        expect(gen.name) == "fooBar"
        expect(gen.property_name) == "FooBar"
        expect(gen.number) == 2
        expect(gen.capitalized_type_name) == "SFixed32"

    def honours_property_name_option(expect, make_field):
        gen = FieldGenerator(make_field("int32", name="foo_bar", property_name="Renamed"))
        expect(gen.property_name) == "Renamed"
        expect(gen.name) == "fooBar"

    def names_groups_after_their_type(expect, make_field):
        gen = FieldGenerator(make_field("group", name="inner", type_name="Inner"))
        expect(gen.name) == "inner"
        expect(gen.property_name) == "Inner"
        expect(gen.message_or_group) == "Group"
        expect(FieldGenerator(make_field("message", type_name="Inner")).message_or_group) == (
            "Message"
        )

    def renders_fragments(expect, make_field):
        gen = FieldGenerator(make_field("uint64", default="3"), class_namer=short_name)
        expect(gen.default_value) == "3UL"
        expect(gen.type_name) == "ulong"
        expect(gen.fixed_size) == -1
        expect(gen.is_nullable_type) == False
        expect(gen.null_check()) == ""
        expect(gen.cls_compliance_check()) == "[global::System.CLSCompliant(false)]"

    def applies_options(expect, make_field):
        options = GeneratorOptions(runtime_alias="", null_check="Guard.NotNull")
        gen = FieldGenerator(make_field("bytes"), options=options)
        expect(gen.default_value) == "ByteString.Empty"
        expect(gen.null_check("data")) == 'Guard.NotNull(data, "data");'
