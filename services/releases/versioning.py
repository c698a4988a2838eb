"""Helpers for parsing and comparing ``v``-prefixed release tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from packaging.version import Version

from services.releases.errors import MalformedVersionError


__all__ = [
    "SemVer",
    "compare_versions",
    "is_newer",
    "is_prerelease_version",
    "parse_version",
]

_TAG_PATTERN = re.compile(
    r"v(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)(?:-(?P<prerelease>[0-9A-Za-z][0-9A-Za-z.\-]*))?"
)


@dataclass(frozen=True)
class SemVer:
    """A parsed release tag."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def release(self) -> Version:
        """The numeric ``major.minor.patch`` triple as a comparable version."""

        return Version(f"{self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        tag = f"v{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is not None:
            tag = f"{tag}-{self.prerelease}"
        return tag


VersionLike = Union[SemVer, str]


def parse_version(tag: str) -> SemVer:
    """Parse ``tag`` or raise :class:`MalformedVersionError`.

    Only ``v<int>.<int>.<int>`` with an optional ``-<suffix>`` is accepted; a
    missing ``v`` prefix or non-numeric components are rejected rather than
    guessed at.
    """

    if not isinstance(tag, str):
        raise MalformedVersionError(repr(tag))
    match = _TAG_PATTERN.fullmatch(tag)
    if match is None:
        raise MalformedVersionError(tag)
    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
    )


def compare_versions(left: VersionLike, right: VersionLike) -> int:
    """Return ``1`` when ``left`` is newer, ``-1`` when older, ``0`` when equivalent.

    Triples are compared numerically. A pre-release sorts before the final
    release of the same triple; two pre-releases of the same triple are
    considered equivalent whatever their suffixes.
    """

    left_version = _coerce(left)
    right_version = _coerce(right)

    if left_version.release != right_version.release:
        return 1 if left_version.release > right_version.release else -1
    if left_version.is_prerelease == right_version.is_prerelease:
        return 0
    return -1 if left_version.is_prerelease else 1


def is_newer(candidate: VersionLike, baseline: VersionLike) -> bool:
    """Return ``True`` if ``candidate`` is strictly newer than ``baseline``."""

    return compare_versions(candidate, baseline) > 0


def is_prerelease_version(tag: str) -> bool:
    return parse_version(tag).is_prerelease


def _coerce(version: VersionLike) -> SemVer:
    if isinstance(version, SemVer):
        return version
    return parse_version(version)
