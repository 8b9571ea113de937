"""
buildstamp — Build version stamping from Git tags.

Derives a ``major.minor.patch`` version and a build provenance record
(commit hash, UTC build timestamp) from the host Git repository and
persists it into a single version asset before the build proceeds.
"""

from pathlib import Path
import tomllib
from importlib.metadata import version, PackageNotFoundError

def _resolve_version() -> str:
    """Resolve the buildstamp version.

    Priority:
    1) Local source checkout version from pyproject.toml (if present)
    2) Installed package metadata (buildstamp)
    3) Safe fallback
    """
    try:
        root = Path(__file__).resolve().parent.parent
        pyproject = root / "pyproject.toml"
        if pyproject.exists():
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            proj = data.get("project", {})
            ver = proj.get("version")
            if isinstance(ver, str) and ver.strip():
                return ver.strip()
    except (OSError, tomllib.TOMLDecodeError):
        pass

    try:
        return version("buildstamp")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _resolve_version()
