"""Tests for the built-in accessor generators."""

from __future__ import annotations

import pytest

from gentoolkit.config import SessionConfig
from gentoolkit.generators import (
    AccessorGenerator,
    GetterGenerator,
    SetterGenerator,
    available_generators,
    get_generator,
)
from gentoolkit.session import GenerationSession
from tests._fixtures.package_builder import PackageBuilder

EXAMPLE = """
    package example

    import "time"

    type ExampleStruct struct {
        Field1 time.Time
        Field2 string
    }
    """


def _generate(package_builder: PackageBuilder, generator, source: str = EXAMPLE) -> str:  # type: ignore[no-untyped-def]
    package_builder.write({"example.go": source})
    package = package_builder.load()
    config = SessionConfig(
        tool_name="gentoolkit-test", file_suffix=generator.file_suffix, format_output=False
    )
    session = GenerationSession(package, generator, config)
    session.generate("ExampleStruct")
    return session.buffer("ExampleStruct").decode("utf-8")


def test_getter_generator_emits_one_getter_per_field(package_builder: PackageBuilder) -> None:
    output = _generate(package_builder, GetterGenerator())

    assert output == (
        "func (e *ExampleStruct) GetField1() time.Time {\n"
        "\treturn e.Field1\n"
        "}\n\n"
        "func (e *ExampleStruct) GetField2() string {\n"
        "\treturn e.Field2\n"
        "}\n\n"
    )


def test_setter_generator_emits_one_setter_per_field(package_builder: PackageBuilder) -> None:
    output = _generate(package_builder, SetterGenerator())

    assert "func (e *ExampleStruct) SetField1(param time.Time) {\n\te.Field1 = param\n}" in output
    assert "func (e *ExampleStruct) SetField2(param string) {\n\te.Field2 = param\n}" in output


def test_accessor_generator_pairs_getters_and_setters(package_builder: PackageBuilder) -> None:
    output = _generate(package_builder, AccessorGenerator())

    positions = [
        output.index("GetField1"),
        output.index("SetField1"),
        output.index("GetField2"),
        output.index("SetField2"),
    ]
    assert positions == sorted(positions)


def test_fields_tagged_with_dash_are_skipped(package_builder: PackageBuilder) -> None:
    output = _generate(
        package_builder,
        GetterGenerator(),
        """
        package example

        type ExampleStruct struct {
            Visible string
            Hidden  string `accessor:"-"`
            Broken  string `accessor:-`
        }
        """,
    )

    assert "GetVisible" in output
    assert "GetHidden" not in output
    # A malformed tag degrades to no tags, so the field is still generated.
    assert "GetBroken" in output


def test_registry_lists_builtin_generators() -> None:
    names = list(available_generators())
    assert names[:3] == ["getter", "setter", "accessor"]
    assert isinstance(get_generator("accessor"), AccessorGenerator)


def test_unknown_generator_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown generator"):
        get_generator("nope")
