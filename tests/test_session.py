"""Tests for the generation session."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import List, Tuple

import pytest

from gentoolkit import extractor
from gentoolkit.config import SessionConfig
from gentoolkit.errors import FormatError, RenderError, TypeNotFoundError
from gentoolkit.generators.base import Generator
from gentoolkit.models import RecordInfo
from gentoolkit.session import GenerationSession
from gentoolkit.sink import OutputSink
from tests._fixtures.package_builder import PackageBuilder


class RecordingGenerator(Generator):
    """Writes one line per field and remembers every dispatch."""

    name = "recording"
    file_suffix = "rec"

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, List[str]]] = []

    def generate(self, record: RecordInfo, sink: OutputSink) -> None:
        self.calls.append((record.file.path.name, record.name, [f.name for f in record.fields]))
        sink.printf("// %s from %s\n", record.name, record.file.path.name)
        for field in record.fields:
            sink.write(f"// {field.name} {field.type}\n".encode("utf-8"))


class UpperFormatter:
    def __init__(self) -> None:
        self.calls = 0

    def format(self, source: bytes) -> bytes:
        self.calls += 1
        return source.upper()


class FailingFormatter:
    def format(self, source: bytes) -> bytes:
        raise FormatError("formatting output: expected declaration")


def _config(**overrides) -> SessionConfig:  # type: ignore[no-untyped-def]
    values = {"tool_name": "gentoolkit-recording", "file_suffix": "rec", "format_output": False}
    values.update(overrides)
    return SessionConfig(**values)


def _session(package, generator, **overrides):  # type: ignore[no-untyped-def]
    formatter = overrides.pop("formatter", None)
    return GenerationSession(package, generator, _config(**overrides), formatter=formatter)


@pytest.fixture
def two_struct_package(package_builder: PackageBuilder):  # type: ignore[no-untyped-def]
    package_builder.write(
        {
            "models.go": """
                package models

                type UserProfile struct {
                    Name  string
                    Email string `json:"email"`
                }

                type Account struct {
                    ID int
                }
                """,
        }
    )
    return package_builder.load()


def test_only_requested_struct_is_dispatched(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    generator = RecordingGenerator()
    session = _session(two_struct_package, generator)

    dispatched = session.generate("UserProfile")

    assert dispatched == 1
    assert generator.calls == [("models.go", "UserProfile", ["Name", "Email"])]
    assert session.buffer("Account") is None
    assert session.buffer("UserProfile") == (
        b"// UserProfile from models.go\n// Name string\n// Email string\n"
    )
    assert all(f.type_name == "UserProfile" for f in two_struct_package.files)


def test_multi_type_run_writes_each_buffer_once(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    generator = RecordingGenerator()
    session = _session(two_struct_package, generator)

    written = session.run(["UserProfile", "Account"])

    directory = two_struct_package.directory
    assert written == [directory / "user_profile_rec.go", directory / "account_rec.go"]
    assert (directory / "account_rec.go").read_bytes() == b"// Account from models.go\n// ID int\n"
    assert (directory / "user_profile_rec.go").read_text(encoding="utf-8").count("UserProfile") == 1
    assert [call[1] for call in generator.calls] == ["UserProfile", "Account"]


def test_repeated_type_name_is_generated_once(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    generator = RecordingGenerator()
    session = _session(two_struct_package, generator)

    written = session.run(["Account", "Account"])

    assert len(written) == 1
    assert len(generator.calls) == 1
    assert session.generate("Account") == 0


def test_session_can_run_the_same_type_twice(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    generator = RecordingGenerator()
    session = _session(two_struct_package, generator)
    target = two_struct_package.directory / "account_rec.go"

    assert session.run(["Account"]) == [target]
    target.unlink()
    assert session.run(["Account"]) == [target]

    assert target.read_bytes() == b"// Account from models.go\n// ID int\n"
    assert len(generator.calls) == 2
    assert session.generate("Account") == 1


def test_buffers_accumulate_across_files(package_builder: PackageBuilder) -> None:
    package_builder.write(
        {
            "a.go": "package dup\n\ntype Shared struct {\n\tFirst int\n}\n",
            "b.go": "package dup\n\ntype Shared struct {\n\tSecond string\n}\n",
        }
    )
    package = package_builder.load()
    generator = RecordingGenerator()
    session = _session(package, generator)

    assert session.generate("Shared") == 2
    assert session.buffer("Shared") == (
        b"// Shared from a.go\n// First int\n"
        b"// Shared from b.go\n// Second string\n"
    )


def test_missing_type_raises_before_writing(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    generator = RecordingGenerator()
    session = _session(two_struct_package, generator)

    with pytest.raises(TypeNotFoundError) as excinfo:
        session.run(["Account", "Ghost"])

    assert excinfo.value.missing == ["Ghost"]
    assert "Ghost" in str(excinfo.value)
    assert not (two_struct_package.directory / "account_rec.go").exists()


def test_found_type_with_no_output_is_still_written(package_builder: PackageBuilder) -> None:
    package_builder.write({"a.go": "package quiet\n\ntype Quiet struct{}\n"})
    package = package_builder.load()

    class SilentGenerator(Generator):
        def generate(self, record: RecordInfo, sink: OutputSink) -> None:
            return None

    written = _session(package, SilentGenerator()).run(["Quiet"])

    assert written[0].read_bytes() == b""


def test_formatter_runs_when_enabled(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    formatter = UpperFormatter()
    session = _session(two_struct_package, RecordingGenerator(), format_output=True, formatter=formatter)

    written = session.run(["Account"])

    assert formatter.calls == 1
    assert written[0].read_bytes() == b"// ACCOUNT FROM MODELS.GO\n// ID INT\n"


def test_format_failure_aborts_the_run(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    session = _session(
        two_struct_package, RecordingGenerator(), format_output=True, formatter=FailingFormatter()
    )

    with pytest.raises(FormatError):
        session.run(["Account"])
    assert not (two_struct_package.directory / "account_rec.go").exists()


def test_explicit_output_path_overrides_naming(two_struct_package, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
    target = tmp_path / "custom.go"
    session = _session(two_struct_package, RecordingGenerator(), output=target)

    written = session.run(["Account"])

    assert written == [target]
    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_existing_output_is_overwritten(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    target = two_struct_package.directory / "account_rec.go"
    target.write_text("stale content that is longer than the new output\n", encoding="utf-8")

    _session(two_struct_package, RecordingGenerator()).run(["Account"])

    assert target.read_bytes() == b"// Account from models.go\n// ID int\n"


def test_render_failure_skips_record_for_that_file_only(
    package_builder: PackageBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    package_builder.write(
        {
            "a.go": "package partial\n\ntype Item struct {\n\tBad Broken\n}\n",
            "b.go": "package partial\n\ntype Item struct {\n\tGood int\n}\n",
        }
    )
    package = package_builder.load()
    real_render = extractor.render_type

    def _render(node, source):  # type: ignore[no-untyped-def]
        if source[node.start_byte : node.end_byte] == b"Broken":
            raise RenderError("cannot render Broken")
        return real_render(node, source)

    monkeypatch.setattr(extractor, "render_type", _render)
    generator = RecordingGenerator()

    assert _session(package, generator).generate("Item") == 1
    assert generator.calls == [("b.go", "Item", ["Good"])]


def test_record_info_exposes_receiver(two_struct_package) -> None:  # type: ignore[no-untyped-def]
    seen: List[RecordInfo] = []

    class CapturingGenerator(Generator):
        def generate(self, record: RecordInfo, sink: OutputSink) -> None:
            seen.append(record)

    _session(two_struct_package, CapturingGenerator()).generate("UserProfile")

    record = seen[0]
    assert record.receiver == "u"
    assert record.package is two_struct_package
    assert record.fields[1].tags.get("json").name == "email"
