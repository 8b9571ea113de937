"""
buildstamp.core.errors — Failure taxonomy for version resolution.

Each stage of a resolution pass raises its own error kind; the resolver
wraps whichever one fired in a ``BuildAbortError`` so the host pipeline
only ever has to understand a single type.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Sequence


class BuildstampError(Exception):
    """Base class for every error raised by buildstamp."""


class VcsQueryError(BuildstampError):
    """A read-only Git query failed (no repository, no tags, git missing)."""

    def __init__(self, message: str, args: Sequence[str] = (), stderr: str = "") -> None:
        super().__init__(message)
        self.git_args = tuple(args)
        self.stderr = stderr


class ParseError(BuildstampError, ValueError):
    """A tag does not match ``[v]MAJOR.MINOR.PATCH[-suffix][...]``."""

    def __init__(self, tag: str, reason: str = "") -> None:
        detail = f"Error parsing git tag: {tag!r}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail)
        self.tag = tag
        self.reason = reason


class ConfigError(BuildstampError):
    """The project configuration (pyproject table, env vars, overrides) is invalid."""


class StoreError(BuildstampError):
    """The version record store could not produce a usable record."""


class DuplicateRecordError(StoreError):
    """More than one version record exists in the asset directory."""

    def __init__(self, locations: Sequence[Path]) -> None:
        self.locations = list(locations)
        listing = "\n".join(str(p) for p in self.locations)
        super().__init__(
            "More than one version record in the project. "
            f"Please ensure only one exists.\n{listing}"
        )


class BuildStage(StrEnum):
    """The resolution stage a ``BuildAbortError`` originated from."""
    CONFIG = "config"
    VERSION_RECORD = "version-record"
    VERSION_LOOKUP = "version-lookup"
    TAG_PARSE = "tag-parse"
    COMMIT_HASH_LOOKUP = "commit-hash-lookup"
    PERSIST = "persist"
    PLATFORM_SETTINGS = "platform-settings"


class BuildAbortError(BuildstampError):
    """
    Umbrella error handed to the host pipeline.

    ``stage`` names the step that failed; the underlying stage error is
    chained as ``__cause__`` and its text is folded into the message.
    """

    def __init__(self, stage: BuildStage, message: str) -> None:
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
