"""
buildstamp.core.store — The singular version record in the asset directory.

Records are plain JSON documents anywhere under the asset directory; they
are recognised by their ``kind`` field rather than by file name, so the
store keeps an index of matching files that ``refresh()`` rebuilds.

Cardinality is enforced on every lookup:

    0 records  → create one at the default location
    1 record   → load it
    >1 records → ``DuplicateRecordError`` (never repaired automatically)
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from buildstamp.core.errors import DuplicateRecordError, StoreError
from buildstamp.core.models import RECORD_KIND, VersionRecord

logger = logging.getLogger("buildstamp.store")


@dataclass
class VersionRecordHandle:
    """A loaded record plus where it lives; mutations stay in memory until saved."""
    record: VersionRecord
    location: Path
    dirty: bool = False

    def mark_dirty(self) -> None:
        self.dirty = True


class VersionRecordStore:
    """Type-based lookup, creation and persistence of the version record."""

    def __init__(self, assets_dir: Path, default_location: Path) -> None:
        self.assets_dir = assets_dir
        self.default_location = default_location
        if not default_location.resolve().is_relative_to(assets_dir.resolve()):
            raise StoreError(
                f"Default record location {default_location} is outside "
                f"the asset directory {assets_dir}"
            )
        self._index: list[Path] | None = None

    # ------------------------------------------------------------------
    # Asset index
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Rescan the asset directory for version records."""
        found: list[Path] = []
        if self.assets_dir.is_dir():
            for path in sorted(self.assets_dir.rglob("*.json")):
                if path.is_file() and self._is_record(path):
                    found.append(path)
        self._index = found
        logger.debug("Asset index refreshed: %d version record(s)", len(found))

    def find_records(self) -> list[Path]:
        """Locations of every version record in the asset directory."""
        if self._index is None:
            self.refresh()
        assert self._index is not None
        return list(self._index)

    @staticmethod
    def _is_record(path: Path) -> bool:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Skipping unreadable asset %s", path)
            return False
        return isinstance(data, dict) and data.get("kind") == RECORD_KIND

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_or_create_record(self) -> VersionRecordHandle:
        """Return a handle to the one version record, creating it if absent."""
        locations = self.find_records()
        if len(locations) > 1:
            raise DuplicateRecordError(locations)
        if not locations:
            return self.create_record(self.default_location)
        return self.load_record(locations[0])

    def create_record(self, location: Path) -> VersionRecordHandle:
        """Write a record with default values at *location*."""
        if location.exists():
            raise StoreError(f"Cannot create version record: {location} already exists")
        handle = VersionRecordHandle(record=VersionRecord(), location=location, dirty=True)
        self.save(handle)
        logger.info("Created version record at %s", location)
        return handle

    def load_record(self, location: Path) -> VersionRecordHandle:
        """Load the record stored at *location*."""
        try:
            record = VersionRecord.model_validate_json(location.read_text(encoding="utf-8"))
        except OSError as e:
            raise StoreError(f"Cannot read version record {location}: {e}") from e
        except ValidationError as e:
            raise StoreError(f"Malformed version record {location}: {e}") from e
        if record.kind != RECORD_KIND:
            raise StoreError(f"{location} is not a version record (kind={record.kind!r})")
        return VersionRecordHandle(record=record, location=location)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, handle: VersionRecordHandle) -> None:
        """Flush a dirty handle to disk and refresh the asset index."""
        if handle.dirty:
            self._write(handle.location, handle.record.model_dump_json(indent=2) + "\n")
            handle.dirty = False
        self.refresh()

    @staticmethod
    def _write(location: Path, text: str) -> None:
        location.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=location.parent, prefix=f".{location.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, location)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write version record {location}: {e}") from e
