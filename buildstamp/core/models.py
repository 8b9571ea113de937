"""
buildstamp.core.models — Pydantic schemas for the build version record.

The version record is the single persisted asset that answers "which
build is this?": the semantic version derived from the last Git tag, the
commit it was built from, and when the build ran (UTC).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field

from buildstamp.core.errors import ConfigError

# Type discriminator stored in every record; the store finds records by it.
RECORD_KIND = "BuildVersion"

# ``2026 October 19 - 14:05``
BUILD_TIMESTAMP_FORMAT = "%Y %B %d - %H:%M"


# ---------------------------------------------------------------------------
# Project discovery
# ---------------------------------------------------------------------------

def discover_project_root(start: Path | None = None) -> Path | None:
    """
    Walk up from *start* (default: CWD) looking for ``pyproject.toml`` or a
    ``.git`` entry, similar to how Git walks up to find ``.git/``.

    Returns the project root, or ``None``.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / "pyproject.toml").is_file() or (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            break  # Reached filesystem root
        current = parent
    return None


def load_project_table(project_root: Path) -> dict[str, Any]:
    """Return the ``[tool.buildstamp]`` table of the project's pyproject.toml."""
    pyproject = project_root / "pyproject.toml"
    if not pyproject.is_file():
        return {}
    data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    table = data.get("tool", {}).get("buildstamp", {})
    return table if isinstance(table, dict) else {}


# ---------------------------------------------------------------------------
# Version triple
# ---------------------------------------------------------------------------

class VersionTriple(BaseModel):
    """An immutable ``major.minor.patch`` version."""
    model_config = ConfigDict(frozen=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


# ---------------------------------------------------------------------------
# The persisted version record
# ---------------------------------------------------------------------------

class VersionRecord(BaseModel):
    """
    The project's current build version, stored as one JSON asset.

    Exactly one of these may exist under the asset directory.  It is
    created with default values on first use and overwritten in place by
    every build.
    """
    kind: str = RECORD_KIND
    game_version: VersionTriple = Field(default_factory=VersionTriple)
    git_hash: str = ""
    build_timestamp: str = ""                # UTC, BUILD_TIMESTAMP_FORMAT


class ResolvedVersion(BaseModel):
    """Outcome of a successful resolution pass, reported back to the host."""
    version: VersionTriple
    git_hash: str
    build_timestamp: str
    location: Path

    @computed_field  # type: ignore[prop-decorator]
    @property
    def version_string(self) -> str:
        return str(self.version)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class BuildstampConfig(BaseModel):
    """Runtime configuration for a resolution pass."""
    project_root: Path = Path(".")
    assets_dir: Path = Path("Assets")
    record_path: Path = Path("Assets/Version/BuildVersion.json")
    settings_path: Path = Path("ProjectSettings/ProjectSettings.json")
    git_timeout: float = 30.0
    short_hash: bool = False

    def resolve_path(self, path: Path) -> Path:
        """Anchor a configured path to the project root."""
        return path if path.is_absolute() else self.project_root / path

    @property
    def assets_path(self) -> Path:
        return self.resolve_path(self.assets_dir)

    @property
    def record_file(self) -> Path:
        return self.resolve_path(self.record_path)

    @property
    def settings_file(self) -> Path:
        return self.resolve_path(self.settings_path)

    @classmethod
    def for_project(cls, project_root: Path | None = None, **overrides: Any) -> "BuildstampConfig":
        """
        Build a config anchored to a specific project directory.

        Resolution order (highest priority first):
          1. Explicit ``overrides`` keyword arguments
          2. Environment variables (BUILDSTAMP_ASSETS_DIR, …)
          3. ``[tool.buildstamp]`` in the project's pyproject.toml
          4. Built-in defaults

        If *project_root* is ``None``, :func:`discover_project_root` is used
        to walk up from CWD.  If still not found, CWD is used.
        """
        if project_root is None:
            project_root = discover_project_root()
        if project_root is None:
            project_root = Path.cwd()

        try:
            table = load_project_table(project_root)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Cannot read {project_root / 'pyproject.toml'}: {e}") from e
        defaults = cls.model_fields

        def pick(key: str, env: str) -> Any:
            if key in overrides:
                return overrides.pop(key)
            return os.getenv(env) or table.get(key, defaults[key].default)

        try:
            return cls(
                project_root=project_root,
                assets_dir=pick("assets_dir", "BUILDSTAMP_ASSETS_DIR"),
                record_path=pick("record_path", "BUILDSTAMP_RECORD_PATH"),
                settings_path=pick("settings_path", "BUILDSTAMP_SETTINGS_PATH"),
                git_timeout=pick("git_timeout", "BUILDSTAMP_GIT_TIMEOUT"),
                short_hash=pick("short_hash", "BUILDSTAMP_SHORT_HASH"),
                **overrides,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid buildstamp configuration: {e}") from e
