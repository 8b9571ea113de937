"""The ``buildstamp`` command group."""
from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

import buildstamp
from buildstamp import cli
from buildstamp.vcs.git import GitAccessor


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def scripted_git(monkeypatch):
    answers = {"tag": "v2.10.4", "hash": "abc1234"}
    monkeypatch.setattr(GitAccessor, "get_last_tag", lambda self: answers["tag"])
    monkeypatch.setattr(GitAccessor, "get_commit_hash", lambda self: answers["hash"])
    return answers


def test_resolve_stamps_record_and_settings(runner, tmp_path, scripted_git):
    result = runner.invoke(cli.main, ["resolve", "--project", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "2.10.4" in result.output

    record = json.loads((tmp_path / "Assets" / "Version" / "BuildVersion.json").read_text(encoding="utf-8"))
    assert record["game_version"] == {"major": 2, "minor": 10, "patch": 4}
    assert record["git_hash"] == "abc1234"

    settings = json.loads((tmp_path / "ProjectSettings" / "ProjectSettings.json").read_text(encoding="utf-8"))
    assert settings["bundle_version"] == "2.10.4"
    assert settings["macos"]["build_number"] == "2.10.4"


def test_resolve_bad_tag_exits_nonzero(runner, tmp_path, scripted_git):
    scripted_git["tag"] = "notasemver"

    result = runner.invoke(cli.main, ["resolve", "--project", str(tmp_path)])

    assert result.exit_code == 1
    assert "tag-parse" in result.output
    assert "notasemver" in result.output
    assert not (tmp_path / "ProjectSettings" / "ProjectSettings.json").exists()


def test_show_without_record(runner, tmp_path):
    result = runner.invoke(cli.main, ["show", "--project", str(tmp_path)])

    assert result.exit_code == 0
    assert "No version record" in result.output
    assert not (tmp_path / "Assets").exists()


def test_show_after_resolve(runner, tmp_path, scripted_git):
    runner.invoke(cli.main, ["resolve", "--project", str(tmp_path)])

    result = runner.invoke(cli.main, ["show", "--project", str(tmp_path)])

    assert result.exit_code == 0
    assert "2.10.4" in result.output
    assert "abc1234" in result.output


def test_show_reports_duplicates(runner, tmp_path, make_record):
    make_record(tmp_path / "Assets" / "a.json")
    make_record(tmp_path / "Assets" / "b.json")

    result = runner.invoke(cli.main, ["show", "--project", str(tmp_path)])

    assert result.exit_code == 1
    assert "Cannot read version record" in result.output


def test_version_flag(runner):
    result = runner.invoke(cli.main, ["--version"])

    assert result.exit_code == 0
    assert "buildstamp" in result.output
    assert buildstamp.__version__ in result.output


def test_resolve_bad_timeout_env_aborts_with_config_stage(runner, tmp_path, scripted_git, monkeypatch):
    monkeypatch.setenv("BUILDSTAMP_GIT_TIMEOUT", "abc")

    result = runner.invoke(cli.main, ["resolve", "--project", str(tmp_path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Build aborted" in result.output
    assert "config" in result.output
    assert not (tmp_path / "Assets").exists()


def test_resolve_malformed_pyproject_aborts(runner, tmp_path, scripted_git):
    (tmp_path / "pyproject.toml").write_text("[tool.buildstamp\nshort_hash = ", encoding="utf-8")

    result = runner.invoke(cli.main, ["resolve", "--project", str(tmp_path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "config" in result.output


def test_show_bad_config_exits_nonzero(runner, tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.buildstamp]\nassets_dir = 42\n", encoding="utf-8")

    result = runner.invoke(cli.main, ["show", "--project", str(tmp_path)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
