"""Exceptions raised while resolving releases and release assets."""

from __future__ import annotations


class ReleaseError(RuntimeError):
    """Base class for release lookup failures.

    Each subclass records the lookup context (``project``, ``tag`` and
    ``asset_name``) so callers can render a message without re-parsing it.
    """

    def __init__(
        self,
        message: str,
        *,
        project: str | None = None,
        tag: str | None = None,
        asset_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.project = project
        self.tag = tag
        self.asset_name = asset_name


class MalformedVersionError(ReleaseError, ValueError):
    """Raised when a version string is not ``v<major>.<minor>.<patch>[-suffix]``."""

    def __init__(self, version: str) -> None:
        super().__init__(
            f"Malformed version {version!r}: expected v<major>.<minor>.<patch>[-<prerelease>]",
            tag=version,
        )


class NoReleasesFoundError(ReleaseError):
    def __init__(self, project: str) -> None:
        super().__init__(f"No releases found for project {project!r}", project=project)


class NoStableReleaseFoundError(NoReleasesFoundError):
    def __init__(self, project: str) -> None:
        ReleaseError.__init__(
            self,
            f"Project {project!r} has no stable release; all releases are pre-releases",
            project=project,
        )


class VersionNotFoundError(ReleaseError):
    def __init__(self, project: str, tag: str) -> None:
        super().__init__(
            f"Version {tag} does not exist for project {project!r}",
            project=project,
            tag=tag,
        )


class AssetNotFoundError(ReleaseError):
    def __init__(self, asset_name: str, tag: str, project: str | None = None) -> None:
        location = f" of project {project!r}" if project else ""
        super().__init__(
            f"Asset {asset_name!r} not found in release {tag}{location}",
            project=project,
            tag=tag,
            asset_name=asset_name,
        )


class UpstreamLookupFailedError(ReleaseError):
    """Raised when the release source itself fails; the cause is chained."""

    def __init__(self, project: str, reason: object, *, tag: str | None = None) -> None:
        target = f"{project} {tag}" if tag else project
        super().__init__(
            f"Failed to look up releases for {target}: {reason}",
            project=project,
            tag=tag,
        )


class ExecutablePathUnresolvableError(ReleaseError):
    def __init__(self, executable: str, reason: object) -> None:
        super().__init__(f"Unable to resolve executable path {executable!r}: {reason}")
        self.executable = executable


class ReleaseSourceError(RuntimeError):
    """Raised by release sources when the upstream service cannot be queried."""


__all__ = [
    "AssetNotFoundError",
    "ExecutablePathUnresolvableError",
    "MalformedVersionError",
    "NoReleasesFoundError",
    "NoStableReleaseFoundError",
    "ReleaseError",
    "ReleaseSourceError",
    "UpstreamLookupFailedError",
    "VersionNotFoundError",
]
