"""Report configuration and the table of user-settable options."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, replace

from grains.errors import CommandError

TMPDIR_ENV = "GRAINS_TMPDIR"


@dataclass(frozen=True)
class Config:
    # Filename for the report, stdout when empty.
    output: str = ""
    # Directory for trimmed dump files, the working directory when empty.
    trim_path: str = ""
    # Seconds to wait for a remote dump.
    timeout: float = 60.0

    def __post_init__(self):
        if not self.timeout > 0:
            raise CommandError(f"timeout must be positive, got {self.timeout}")


def default_config() -> Config:
    return Config()


@dataclass(frozen=True)
class ConfigField:
    name: str
    attr: str
    kind: type
    help: str


CONFIG_FIELDS: tuple[ConfigField, ...] = (
    ConfigField("output", "output", str, "Output filename for file-based outputs"),
    ConfigField("trim_path", "trim_path", str, "Directory where the dump command writes trimmed dumps"),
    ConfigField("timeout", "timeout", float, "Timeout in seconds for fetching remote dumps"),
)

CONFIG_FIELD_MAP: dict[str, ConfigField] = {f.name: f for f in CONFIG_FIELDS}


def _convert(field: ConfigField, value: str):
    if field.kind in (int, float):
        try:
            return field.kind(value)
        except ValueError as exc:
            raise CommandError(f"invalid {field.name!r} value {value!r}") from exc
    return value


def is_configurable(name: str) -> bool:
    return name in CONFIG_FIELD_MAP


def configure(cfg: Config, name: str, value: str) -> Config:
    """Return a copy of cfg with the option called name set from its string value."""
    field = CONFIG_FIELD_MAP.get(name)
    if field is None:
        raise CommandError(f"unknown config field {name!r}")
    return replace(cfg, **{field.attr: _convert(field, value)})


def get_value(cfg: Config, field: ConfigField) -> str:
    return str(getattr(cfg, field.attr))


def format_options(cfg: Config) -> str:
    lines = []
    for field in CONFIG_FIELDS:
        value = get_value(cfg, field) or '""'
        lines.append(f"  {field.name:<25} = {value}")
    return "\n".join(sorted(lines))


def temp_dir() -> str:
    return os.environ.get(TMPDIR_ENV) or tempfile.gettempdir()
