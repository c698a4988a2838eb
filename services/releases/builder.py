"""Helpers for constructing resolvers and advisors for the current environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

from services.releases.advisor import UpgradeAdvisor
from services.releases.constants import GITHUB_TOKEN_ENV, LOCAL_RELEASE_ENV
from services.releases.providers import GitHubReleaseSource, LocalFolderReleaseSource, ReleaseSource
from services.releases.resolver import ReleaseResolver

if TYPE_CHECKING:
    from app.config import ReleaseConfig


_LOGGER = logging.getLogger(__name__)


def _default_config() -> ReleaseConfig:
    from app.config import get_release_config

    return get_release_config()


def build_release_source(
    config: ReleaseConfig | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ReleaseSource:
    """Return the local folder source when configured, otherwise GitHub."""

    env = os.environ if environ is None else environ
    config = config or _default_config()

    local_dir = env.get(LOCAL_RELEASE_ENV)
    if local_dir:
        folder = Path(local_dir).expanduser()
        if folder.is_dir():
            _LOGGER.info("Using local release metadata at %s", folder)
            return LocalFolderReleaseSource(folder)
        _LOGGER.warning("Configured local release directory does not exist: %s", folder)

    token = env.get(GITHUB_TOKEN_ENV) or None
    _LOGGER.debug(
        "Using GitHub releases at %s (owner=%s, authenticated=%s)",
        config.github.api_url,
        config.github.owner,
        token is not None,
    )
    return GitHubReleaseSource(
        config.github.api_url,
        owner=config.github.owner,
        token=token,
        per_page=config.github.per_page,
        timeout=config.github.timeout,
    )


def build_release_resolver(
    config: ReleaseConfig | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ReleaseResolver:
    return ReleaseResolver(build_release_source(config, environ=environ))


def build_upgrade_advisor(
    config: ReleaseConfig | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> UpgradeAdvisor:
    config = config or _default_config()
    resolver = build_release_resolver(config, environ=environ)
    return UpgradeAdvisor(resolver, tool=config.tool, owner=config.github.owner)


__all__ = ["build_release_resolver", "build_release_source", "build_upgrade_advisor"]
