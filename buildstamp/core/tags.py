"""
buildstamp.core.tags — Git tag → ``VersionTriple``.

Grammar accepted::

    [v]MAJOR.MINOR.PATCH[-suffix][.anything...]

Only the first three dot-separated tokens are inspected; anything after
the first ``-`` of the patch token is discarded (``3-rc1`` → ``3``).
"""

from __future__ import annotations

from buildstamp.core.errors import ParseError
from buildstamp.core.models import VersionTriple


def _component(tag: str, name: str, token: str) -> int:
    # ASCII digits only: int() alone would accept signs, whitespace and "1_0".
    if not token or not (token.isascii() and token.isdigit()):
        raise ParseError(tag, f"{name} component {token!r} is not a number")
    return int(token)


def parse_version(tag: str) -> VersionTriple:
    """
    Parse a Git tag such as ``v2.10.4`` or ``2.10.4-beta.1`` into a triple.

    Raises ``ParseError`` carrying the original tag for any malformed input;
    a partial triple is never returned.
    """
    trimmed = tag[1:] if tag.startswith("v") else tag
    tokens = trimmed.split(".")
    if len(tokens) < 3:
        raise ParseError(tag, f"expected MAJOR.MINOR.PATCH, got {len(tokens)} token(s)")

    major = _component(tag, "major", tokens[0])
    minor = _component(tag, "minor", tokens[1])
    patch_segment = tokens[2].split("-", 1)[0]
    patch = _component(tag, "patch", patch_segment)

    return VersionTriple(major=major, minor=minor, patch=patch)
