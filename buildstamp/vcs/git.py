"""
buildstamp.vcs.git — Read-only Git queries used to version a build.

Two questions are asked of the repository: "what is the most recent tag
reachable from HEAD?" and "which commit is HEAD?".  Nothing is cached and
nothing is written; every call spawns a fresh ``git`` process.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from buildstamp.core.errors import VcsQueryError

logger = logging.getLogger("buildstamp.vcs")


class VcsAccessor(Protocol):
    """What the resolver needs from version control."""

    def get_last_tag(self) -> str: ...

    def get_commit_hash(self) -> str: ...


class GitAccessor:
    """``VcsAccessor`` backed by the ``git`` executable."""

    def __init__(
        self,
        repo_root: Path | None = None,
        *,
        timeout: float = 30.0,
        short_hash: bool = False,
        git_executable: str = "git",
    ) -> None:
        self.repo_root = repo_root
        self.timeout = timeout
        self.short_hash = short_hash
        self.git_executable = git_executable

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_last_tag(self) -> str:
        """Name of the most recent tag reachable from HEAD."""
        return self._git("describe", "--tags", "--abbrev=0")

    def get_commit_hash(self) -> str:
        """Hash of HEAD, abbreviated when ``short_hash`` is set."""
        if self.short_hash:
            return self._git("rev-parse", "--short", "HEAD")
        return self._git("rev-parse", "HEAD")

    # ------------------------------------------------------------------
    # Git helpers
    # ------------------------------------------------------------------

    def _git(self, *args: str) -> str:
        """Run a Git command in the repo root and return its stripped stdout."""
        command = [self.git_executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                cwd=str(self.repo_root) if self.repo_root else None,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise VcsQueryError(
                f"git executable not found: {self.git_executable}", args
            ) from e
        except subprocess.TimeoutExpired as e:
            raise VcsQueryError(
                f"git {' '.join(args)} timed out after {self.timeout}s", args
            ) from e

        stderr = result.stderr.strip()
        if result.returncode != 0:
            raise VcsQueryError(
                f"git {' '.join(args)} exited with status {result.returncode}: {stderr}",
                args,
                stderr,
            )

        output = result.stdout.strip()
        if not output:
            raise VcsQueryError(f"git {' '.join(args)} returned no output", args, stderr)
        return output
