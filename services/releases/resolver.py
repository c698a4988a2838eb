"""Resolve releases of a project through a :class:`ReleaseSource`."""

from __future__ import annotations

import logging
from typing import Sequence

from services.releases.assets import find_asset
from services.releases.errors import (
    NoReleasesFoundError,
    NoStableReleaseFoundError,
    ReleaseSourceError,
    UpstreamLookupFailedError,
    VersionNotFoundError,
)
from services.releases.models import Asset, Release
from services.releases.providers import ReleaseSource
from services.releases.versioning import parse_version


_LOGGER = logging.getLogger(__name__)


class ReleaseResolver:
    """Look up releases, commits and assets of projects.

    The resolver holds no state besides its source: every call queries the
    source afresh and nothing is cached between calls.
    """

    def __init__(self, source: ReleaseSource) -> None:
        self._source = source

    @property
    def source(self) -> ReleaseSource:
        return self._source

    def get_latest(self, project: str) -> Release:
        """Return the newest release of ``project``, pre-releases included."""

        releases = self._list_releases(project)
        if not releases:
            raise NoReleasesFoundError(project)
        latest = releases[0]
        _LOGGER.info("Latest release of %s is %s", project, latest.tag_name)
        return latest

    def get_latest_excluding_prerelease(self, project: str) -> Release:
        """Return the newest release of ``project`` not flagged as a pre-release."""

        releases = self._list_releases(project)
        if not releases:
            raise NoReleasesFoundError(project)
        for release in releases:
            if release.prerelease:
                _LOGGER.debug("Skipping pre-release %s of %s", release.tag_name, project)
                continue
            _LOGGER.info("Latest stable release of %s is %s", project, release.tag_name)
            return release
        raise NoStableReleaseFoundError(project)

    def check_version_exists(self, tag: str, project: str) -> Release:
        """Return the release tagged ``tag`` or raise :class:`VersionNotFoundError`."""

        parse_version(tag)
        _LOGGER.debug("Looking up release %s of %s", tag, project)
        try:
            release = self._source.get_release(project, tag)
        except ReleaseSourceError as exc:
            raise UpstreamLookupFailedError(project, exc, tag=tag) from exc
        if release is None:
            raise VersionNotFoundError(project, tag)
        return release

    def get_commit_sha(self, tag: str, project: str) -> str:
        return self.check_version_exists(tag, project).commit

    def get_assets_from_release(self, tag: str, asset_name: str, project: str) -> Asset:
        """Return ``asset_name`` from release ``tag``, or from the latest release when ``tag`` is empty."""

        if tag:
            release = self.check_version_exists(tag, project)
        else:
            release = self.get_latest(project)
        return find_asset(release, asset_name, project=project)

    def _list_releases(self, project: str) -> Sequence[Release]:
        _LOGGER.debug("Listing releases of %s via %s", project, type(self._source).__name__)
        try:
            return self._source.list_releases(project)
        except ReleaseSourceError as exc:
            raise UpstreamLookupFailedError(project, exc) from exc


__all__ = ["ReleaseResolver"]
