"""Configuration loading for gentoolkit (.gentoolkit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".gentoolkit.yml"


@dataclass
class GeneratorOptions:
    """Per-generator overrides from the ``generators`` mapping."""

    suffix: Optional[str] = None
    format: Optional[bool] = None


@dataclass
class GeneratorConfig:
    """Represents the settings defined in .gentoolkit.yml."""

    root: Path
    generator: Optional[str] = None
    suffix: Optional[str] = None
    format: bool = True
    types: List[str] = field(default_factory=list)
    output: Optional[Path] = None
    log_file: Optional[Path] = None
    generators: Dict[str, GeneratorOptions] = field(default_factory=dict)

    def options_for(self, name: str) -> GeneratorOptions:
        return self.generators.get(name, GeneratorOptions())


@dataclass(frozen=True)
class SessionConfig:
    """Explicit settings for one generation session."""

    tool_name: str
    file_suffix: str
    format_output: bool = True
    output: Optional[Path] = None
    extension: str = ".go"


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GeneratorConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    generators: Dict[str, GeneratorOptions] = {}
    for name, raw in _as_dict(data.get("generators")).items():
        options = _as_dict(raw)
        generators[str(name)] = GeneratorOptions(
            suffix=_as_str(options.get("suffix")),
            format=_as_bool(options.get("format")),
        )

    output = _as_str(data.get("output"))
    log_file = _as_str(data.get("log_file"))
    fmt = _as_bool(data.get("format"))

    return GeneratorConfig(
        root=root,
        generator=_as_str(data.get("generator")),
        suffix=_as_str(data.get("suffix")),
        format=True if fmt is None else fmt,
        types=_as_str_list(data.get("types")),
        output=root / output if output else None,
        log_file=root / log_file if log_file else None,
        generators=generators,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "GeneratorConfig",
    "GeneratorOptions",
    "SessionConfig",
    "load_config",
]
