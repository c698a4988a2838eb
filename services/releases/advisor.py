"""Compose the notice shown when a newer release of the tool is available."""

from __future__ import annotations

import logging
from typing import Callable

from services.releases.constants import DEFAULT_TOOL, GITHUB_OWNER
from services.releases.install_detection import ManagedInstall, detect_package_manager
from services.releases.resolver import ReleaseResolver
from services.releases.versioning import is_newer, parse_version
from shared.platforms import Platform


_LOGGER = logging.getLogger(__name__)

PackageManagerDetector = Callable[..., "ManagedInstall | None"]


class UpgradeAdvisor:
    """Decide whether the running build is outdated and how to upgrade it."""

    def __init__(
        self,
        resolver: ReleaseResolver,
        *,
        tool: str = DEFAULT_TOOL,
        project: str | None = None,
        owner: str = GITHUB_OWNER,
        detector: PackageManagerDetector = detect_package_manager,
    ) -> None:
        self._resolver = resolver
        self._tool = tool
        self._project = project or tool
        self._owner = owner
        self._detector = detector

    def upgrade_command(self, platform: Platform, *, executable: str | None = None) -> str:
        """Return the command that upgrades the tool on ``platform``."""

        managed = self._detector(platform, self._tool, executable=executable)
        if managed is not None:
            _LOGGER.debug("Install at %s is managed by %s", managed.path, managed.manager.name)
            return managed.manager.upgrade_command(self._tool)
        return f"{self._tool} upgrade"

    def build_upgrade_message(
        self,
        current_version: str,
        platform: Platform,
        *,
        executable: str | None = None,
    ) -> str:
        """Return an upgrade notice, or ``""`` when ``current_version`` is current.

        Raises :class:`MalformedVersionError` for an unparseable
        ``current_version`` and propagates resolver errors unchanged.
        """

        current = parse_version(current_version)
        latest = self._resolver.get_latest_excluding_prerelease(self._project)
        if not is_newer(latest.version, current):
            _LOGGER.debug("Current version %s is up to date (latest %s)", current, latest.tag_name)
            return ""

        _LOGGER.info("Update available: %s -> %s", current, latest.tag_name)
        command = self.upgrade_command(platform, executable=executable)
        lines = [
            f"A new release of {self._tool} is available: {current_version} -> {latest.tag_name}",
            f"To upgrade, run: {command}",
            latest.html_url or self._release_url(latest.tag_name),
        ]
        return "\n".join(lines) + "\n"

    def _release_url(self, tag: str) -> str:
        repository = self._project if "/" in self._project else f"{self._owner}/{self._project}"
        return f"https://github.com/{repository}/releases/tag/{tag}"


__all__ = ["PackageManagerDetector", "UpgradeAdvisor"]
