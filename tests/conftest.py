from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from buildstamp.core.errors import VcsQueryError
from buildstamp.core.models import BuildstampConfig
from buildstamp.core.store import VersionRecordStore


@dataclass
class FakeVcs:
    """Scripted stand-in for ``GitAccessor``; ``None`` means the query fails."""
    tag: str | None = "v2.10.4"
    commit_hash: str | None = "abc1234"
    calls: list[str] = field(default_factory=list)

    def get_last_tag(self) -> str:
        self.calls.append("tag")
        if self.tag is None:
            raise VcsQueryError("git describe --tags --abbrev=0 exited with status 128: "
                                "fatal: No names found, cannot describe anything.")
        return self.tag

    def get_commit_hash(self) -> str:
        self.calls.append("hash")
        if self.commit_hash is None:
            raise VcsQueryError("git rev-parse HEAD exited with status 128")
        return self.commit_hash


@dataclass
class RecordingSink:
    versions: list[str] = field(default_factory=list)

    def set_version_string(self, version: str) -> None:
        self.versions.append(version)


@pytest.fixture
def config(tmp_path: Path) -> BuildstampConfig:
    return BuildstampConfig(project_root=tmp_path)


@pytest.fixture
def store(config: BuildstampConfig) -> VersionRecordStore:
    return VersionRecordStore(config.assets_path, config.record_file)


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


def write_record(path: Path, version=(1, 0, 0), git_hash="old", timestamp="2020 January 01 - 00:00") -> Path:
    """Place a version record JSON document at *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    major, minor, patch = version
    path.write_text(
        json.dumps({
            "kind": "BuildVersion",
            "game_version": {"major": major, "minor": minor, "patch": patch},
            "git_hash": git_hash,
            "build_timestamp": timestamp,
        }),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def make_record():
    return write_record
