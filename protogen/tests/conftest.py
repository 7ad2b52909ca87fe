"""Unit tests configuration file."""

import pytest

from protogen.generator import (
    SchemaEnum,
    SchemaEnumValue,
    SchemaField,
    SchemaFile,
    SchemaFileOptions,
    SchemaMessage,
    build_descriptors,
)


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def _make_field(type, *, default=None, type_name=None, name="value", property_name=None):
    """Build a schema with one message and return the descriptor of its second field.

    The message is test.Outer (class global::Test.Outer) with a nested
    message Inner; the file also declares enum Color { RED, FOO }.
    """
    schema = SchemaFile(
        package="test",
        options=SchemaFileOptions(namespace="Test"),
        enums=[
            SchemaEnum(
                name="Color",
                values=[
                    SchemaEnumValue(name="RED", number=0),
                    SchemaEnumValue(name="FOO", number=1),
                ],
            )
        ],
        messages=[
            SchemaMessage(
                name="Outer",
                fields=[
                    SchemaField(name="id", number=1, type="int32"),
                    SchemaField(
                        name=name,
                        number=2,
                        type=type,
                        type_name=type_name,
                        default=default,
                        property_name=property_name,
                    ),
                ],
                messages=[SchemaMessage(name="Inner")],
            )
        ],
    )
    return build_descriptors(schema).messages[0].fields[1]


@pytest.fixture
def make_field():
    return _make_field
