"""
buildstamp.operations.resolver — The pre-build version resolution pass.

Runs once per build, before anything is compiled or packaged.  Each step
is a hard gate: the first failure raises ``BuildAbortError`` and the
version record on disk is left exactly as it was.  There are no retries
and no fallback versions; a build must never ship with stale metadata.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from buildstamp.core.errors import (
    BuildAbortError,
    BuildStage,
    DuplicateRecordError,
    ParseError,
    StoreError,
    VcsQueryError,
)
from buildstamp.core.models import BUILD_TIMESTAMP_FORMAT, BuildstampConfig, ResolvedVersion
from buildstamp.core.store import VersionRecordStore
from buildstamp.core.tags import parse_version
from buildstamp.platform.settings import PlatformSettingsSink, ProjectSettingsFile
from buildstamp.vcs.git import GitAccessor, VcsAccessor

logger = logging.getLogger("buildstamp.resolver")


def format_build_timestamp(moment: datetime) -> str:
    """Render a moment as the UTC build timestamp stored in the record."""
    return moment.astimezone(timezone.utc).strftime(BUILD_TIMESTAMP_FORMAT)


class BuildVersionResolver:
    """
    Orchestrates one resolution pass over the VCS accessor, the record
    store and the platform settings sink.
    """

    def __init__(
        self,
        vcs: VcsAccessor,
        store: VersionRecordStore,
        settings_sink: PlatformSettingsSink,
    ) -> None:
        self.vcs = vcs
        self.store = store
        self.settings_sink = settings_sink

    @classmethod
    def from_config(cls, config: BuildstampConfig) -> "BuildVersionResolver":
        """Wire the Git, asset-directory and settings-file collaborators."""
        try:
            store = VersionRecordStore(config.assets_path, config.record_file)
        except StoreError as e:
            raise BuildAbortError(BuildStage.VERSION_RECORD, str(e)) from e
        return cls(
            vcs=GitAccessor(
                config.project_root,
                timeout=config.git_timeout,
                short_hash=config.short_hash,
            ),
            store=store,
            settings_sink=ProjectSettingsFile(config.settings_file),
        )

    def resolve(self) -> ResolvedVersion:
        """Stamp the version record for this build and report the version."""
        # 1. The singular record
        try:
            handle = self.store.get_or_create_record()
        except DuplicateRecordError as e:
            raise BuildAbortError(BuildStage.VERSION_RECORD, str(e)) from e
        except StoreError as e:
            raise BuildAbortError(
                BuildStage.VERSION_RECORD, f"Could not get version record: {e}"
            ) from e
        record = handle.record

        # 2. Version from the last tag
        try:
            tag = self.vcs.get_last_tag()
        except VcsQueryError as e:
            raise BuildAbortError(BuildStage.VERSION_LOOKUP, f"Could not get version: {e}") from e
        try:
            version = parse_version(tag)
        except ParseError as e:
            raise BuildAbortError(BuildStage.TAG_PARSE, f"Could not get version: {e}") from e
        record.game_version = version

        # 3. Commit hash
        try:
            git_hash = self.vcs.get_commit_hash()
        except VcsQueryError as e:
            raise BuildAbortError(
                BuildStage.COMMIT_HASH_LOOKUP, f"Could not get commit hash: {e}"
            ) from e

        record.git_hash = git_hash
        record.build_timestamp = format_build_timestamp(datetime.now(timezone.utc))

        # 4. Persist
        handle.mark_dirty()
        try:
            self.store.save(handle)
        except StoreError as e:
            raise BuildAbortError(BuildStage.PERSIST, str(e)) from e

        resolved = ResolvedVersion(
            version=version,
            git_hash=git_hash,
            build_timestamp=record.build_timestamp,
            location=handle.location,
        )

        # 5. Mirror into the platform build-number fields
        try:
            self.settings_sink.set_version_string(resolved.version_string)
        except (OSError, ValueError) as e:
            raise BuildAbortError(
                BuildStage.PLATFORM_SETTINGS,
                f"Could not mirror version {resolved.version_string}: {e}",
            ) from e

        logger.info(
            "Storing version: %s, commit hash: %s and timestamp: %s",
            resolved.version_string,
            resolved.git_hash,
            resolved.build_timestamp,
        )
        return resolved
