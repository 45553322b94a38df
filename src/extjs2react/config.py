"""Configuration management for extjs2react.

Schema of extjs2react.yaml:
- source_dir: directory holding the Ext JS application sources
- target_dir: output root (guarded by the generator stamp)
- framework_file: framework build that supplies the base alias table
- snapshot_dir: cache directory for resolved registry snapshots
- words: extra words for the capitalization heuristic
- define_callee: class definition call, e.g. Ext.define
- component_base / application_base: classes that mark components and singletons
- capabilities: path to a capability table replacing the bundled one
- libraries: helper library import table
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from extjs2react.errors import ConfigError

CONFIG_FILE_NAME = "extjs2react.yaml"


class LibraryConfig(BaseModel):
    """One importable helper library."""

    source: str = Field(description="Module specifier used in the import statement")
    default: str | None = Field(
        default=None, description="Tag imported as the default export"
    )
    named: list[str] = Field(
        default_factory=list, description="Tags imported as named specifiers"
    )

    def tags(self) -> list[str]:
        return ([self.default] if self.default else []) + list(self.named)


DEFAULT_LIBRARIES = [
    LibraryConfig(source="framework", named=["Template"]),
    LibraryConfig(source="app", default="App"),
    LibraryConfig(source="react", default="React", named=["useMemo", "useEffect"]),
    LibraryConfig(source="lodash", default="_"),
]


class Settings(BaseModel):
    """Main extjs2react.yaml configuration."""

    model_config = {"populate_by_name": True}

    source_dir: Path = Field(default=Path("app"), description="Ext JS sources")
    target_dir: Path = Field(default=Path("build/react"), description="Output root")
    framework_file: Path | None = Field(
        default=None, description="Framework source for the base alias table"
    )
    snapshot_dir: Path | None = Field(
        default=None, description="Directory for cached registry snapshots"
    )
    words: list[str] = Field(
        default_factory=list, description="Extra words for capitalization"
    )
    define_callee: str = Field(default="Ext.define", description="Class definition call")
    component_base: str = Field(
        default="Ext.Widget", description="Classes extending this become components"
    )
    application_base: str = Field(
        default="Ext.app.Application",
        description="Classes extending this are exported as singletons",
    )
    capabilities: Path | None = Field(
        default=None, description="Capability table replacing the bundled one"
    )
    libraries: list[LibraryConfig] = Field(
        default_factory=lambda: [lib.model_copy() for lib in DEFAULT_LIBRARIES],
        description="Helper library import table",
    )

    def resolve_paths(self, base_dir: Path) -> "Settings":
        """Return a copy with relative paths anchored at base_dir."""

        def anchor(path: Path | None) -> Path | None:
            if path is None or path.is_absolute():
                return path
            return (base_dir / path).resolve()

        return self.model_copy(
            update={
                "source_dir": anchor(self.source_dir),
                "target_dir": anchor(self.target_dir),
                "framework_file": anchor(self.framework_file),
                "snapshot_dir": anchor(self.snapshot_dir),
                "capabilities": anchor(self.capabilities),
            }
        )


def find_config_file(start: Path | None = None) -> Path | None:
    """Find extjs2react.yaml in the start directory or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None


def load_settings(path: Path) -> Settings:
    """Load extjs2react.yaml from path, resolving paths against its directory."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    return settings.resolve_paths(path.parent.resolve())


def save_settings(settings: Settings, path: Path) -> None:
    """Save settings to extjs2react.yaml."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = settings.model_dump(mode="json", exclude_none=True)

    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
