"""Configuration management for blastradius."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from blastradius.exceptions import ConfigError

BLASTRADIUS_DIR = ".blastradius"
CONFIG_FILE = "config.json"


class ResolverConfig(BaseModel):
    """How import names are turned into module identities."""

    vendor_segment: str = "vendor"
    source_suffixes: list[str] = Field(default_factory=lambda: [".py", ".pyi"])
    test_patterns: list[str] = Field(
        default_factory=lambda: ["test_*.py", "*_test.py", "conftest.py"]
    )
    # Top-level names treated like the standard library (never traversed)
    foreign_modules: list[str] = Field(default_factory=list)
    # Directories searched for modules, in order. Empty = source root only.
    search_paths: list[str] = Field(default_factory=list)


class GitConfig(BaseModel):
    """Git client configuration."""

    executable: str = "git"
    timeout: int = 60


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    source_root: str = "."
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    git: GitConfig = Field(default_factory=GitConfig)

    def source_root_path(self) -> Path:
        return Path(self.source_root).resolve()

    def search_path_list(self) -> list[Path]:
        """Search paths as absolute paths, defaulting to the source root."""
        if not self.resolver.search_paths:
            return [self.source_root_path()]
        base = self.source_root_path()
        return [(base / p).resolve() for p in self.resolver.search_paths]


def find_project_root(start: Path | None = None) -> Path | None:
    """Nearest directory at or above ``start`` holding a .blastradius directory."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / BLASTRADIUS_DIR).is_dir():
            return candidate
    return None


def get_blastradius_dir(root: Path) -> Path:
    """Get the .blastradius directory for a project root."""
    return root / BLASTRADIUS_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .blastradius/config.json.

    A relative ``source_root`` is interpreted against ``root``.

    Raises:
        ConfigError: the file is not valid JSON or does not match the schema.
    """
    config_path = get_blastradius_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            config = ProjectConfig.model_validate(json.loads(config_path.read_text()))
        except json.JSONDecodeError as e:
            raise ConfigError(f"{config_path} is not valid JSON: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}:\n{e}") from e
    else:
        config = ProjectConfig(name=root.name)
    if not Path(config.source_root).is_absolute():
        config.source_root = str((root / config.source_root).resolve())
    return config


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .blastradius/config.json."""
    br_dir = get_blastradius_dir(root)
    br_dir.mkdir(parents=True, exist_ok=True)
    data = config.model_dump()
    source_root = Path(config.source_root)
    if source_root.is_absolute():
        try:
            data["source_root"] = source_root.relative_to(root.resolve()).as_posix()
        except ValueError:
            # Outside the project: keep it absolute
            pass
    (br_dir / CONFIG_FILE).write_text(json.dumps(data, indent=2))


def _section(data: dict, key: str) -> tuple[dict, str]:
    """Dict holding the last segment of a dotted key, and that segment."""
    *sections, leaf = key.split(".")
    for name in sections:
        data = data.get(name)
        if not isinstance(data, dict):
            raise KeyError(key)
    if leaf not in data:
        raise KeyError(key)
    return data, leaf


def get_config_value(config: ProjectConfig, key: str) -> Any:
    """Read a value by dotted key, e.g. 'resolver.vendor_segment'.

    Raises:
        KeyError: no such setting.
    """
    data, leaf = _section(config.model_dump(), key)
    return data[leaf]


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Return a copy of ``config`` with a dotted key set to ``value``.

    Raises:
        KeyError: no such setting.
        ConfigError: the value has the wrong type for the setting.
    """
    dumped = config.model_dump()
    data, leaf = _section(dumped, key)
    data[leaf] = value
    try:
        return ProjectConfig.model_validate(dumped)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
