"""Getter and setter generators rendered from Jinja templates."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import FieldInfo, RecordInfo
from ..sink import OutputSink
from .base import Generator

SKIP_TAG = "accessor"

_TEMPLATES_DIR = Path(__file__).with_name("templates")


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def is_skipped(field: FieldInfo) -> bool:
    """Fields tagged ``accessor:"-"`` get no accessors."""
    if field.tags is None:
        return False
    tag = field.tags.get(SKIP_TAG)
    return tag is not None and tag.name == "-"


class TemplateGenerator(Generator):
    """Renders one template per field, separated by blank lines."""

    templates: Sequence[str] = ()

    def __init__(self, environment: Environment | None = None) -> None:
        self._env = environment or _environment()

    def generate(self, record: RecordInfo, sink: OutputSink) -> None:
        for field in record.fields:
            if is_skipped(field):
                continue
            for template_name in self.templates:
                sink.printf("%s\n\n", self.render(template_name, record, field))

    def render(self, template_name: str, record: RecordInfo, field: FieldInfo) -> str:
        template = self._env.get_template(template_name)
        return template.render(
            receiver=record.receiver,
            struct=record.name,
            field=field.name,
            type=field.type,
        ).rstrip("\n")


class GetterGenerator(TemplateGenerator):
    name = "getter"
    file_suffix = "getter"
    templates = ("getter.go.j2",)


class SetterGenerator(TemplateGenerator):
    name = "setter"
    file_suffix = "setter"
    templates = ("setter.go.j2",)


class AccessorGenerator(TemplateGenerator):
    """Getter and setter pairs for every field."""

    name = "accessor"
    file_suffix = "access"
    templates = ("getter.go.j2", "setter.go.j2")


__all__ = [
    "AccessorGenerator",
    "GetterGenerator",
    "SKIP_TAG",
    "SetterGenerator",
    "TemplateGenerator",
    "is_skipped",
]
