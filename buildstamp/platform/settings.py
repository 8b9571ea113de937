"""
buildstamp.platform.settings — Mirror the resolved version into build settings.

Some platforms reject a build whose bundle version never changes, so the
dotted version string is copied into the project's own build-number
fields once the version record has been persisted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger("buildstamp.settings")


class PlatformSettingsSink(Protocol):
    """Receives the ``major.minor.patch`` string after a successful resolution."""

    def set_version_string(self, version: str) -> None: ...


class ProjectSettingsFile:
    """
    ``PlatformSettingsSink`` writing into a JSON project settings file.

    Sets the general ``bundle_version`` field and the platform-specific
    ``macos.build_number`` field; every other key in the file is kept.
    """

    BUNDLE_VERSION_KEY = "bundle_version"
    PLATFORM_SECTION = "macos"
    BUILD_NUMBER_KEY = "build_number"

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any]:
        """Current settings, or an empty dict when the file doesn't exist."""
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Project settings {self.path} must contain a JSON object")
        return data

    def set_version_string(self, version: str) -> None:
        settings = self.load()
        settings[self.BUNDLE_VERSION_KEY] = version
        platform = settings.get(self.PLATFORM_SECTION)
        if not isinstance(platform, dict):
            platform = {}
        platform[self.BUILD_NUMBER_KEY] = version
        settings[self.PLATFORM_SECTION] = platform

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2) + "\n", encoding="utf-8")
        logger.debug("Mirrored version %s into %s", version, self.path)
