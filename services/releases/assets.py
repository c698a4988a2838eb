"""Helpers for naming and locating platform-specific release assets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Tuple

from services.releases.constants import DEFAULT_ASSET_EXTENSION
from services.releases.errors import AssetNotFoundError
from services.releases.models import Asset, Release
from services.releases.versioning import parse_version
from shared.platforms import Architecture, Platform

if TYPE_CHECKING:
    from services.releases.resolver import ReleaseResolver


_LOGGER = logging.getLogger(__name__)

__all__ = ["asset_name", "find_asset", "resolve_image_reference"]


def asset_name(
    tool: str,
    platform: Platform,
    arch: Architecture,
    extension: str = DEFAULT_ASSET_EXTENSION,
) -> str:
    """Return the archive name published for ``tool`` on ``platform``/``arch``.

    >>> asset_name("flytectl", Platform.DARWIN, Architecture.I386)
    'flytectl_Darwin_386.tar.gz'
    """

    platform = Platform(platform)
    arch = Architecture(arch)
    return f"{tool}_{platform.title_case}_{arch.value}{extension}"


def find_asset(release: Release, name: str, *, project: str | None = None) -> Asset:
    """Return the asset of ``release`` named exactly ``name``."""

    for asset in release.assets:
        if asset.name == name:
            _LOGGER.debug("Release %s includes asset %s", release.tag_name, name)
            return asset
    _LOGGER.debug(
        "Release %s has no asset %s (available: %s)",
        release.tag_name,
        name,
        ", ".join(release.asset_names) or "none",
    )
    raise AssetNotFoundError(name, release.tag_name, project)


def resolve_image_reference(
    resolver: "ReleaseResolver",
    project: str,
    explicit_tag: str,
    base_image_name: str,
    include_prerelease: bool,
    *,
    prefix: str | None = None,
) -> Tuple[str, str]:
    """Return ``(image_reference, tag)`` for a container image of ``project``.

    An explicit tag is used as given (it must still be well formed); otherwise
    the latest release is looked up, skipping pre-releases unless
    ``include_prerelease`` is set.
    """

    if explicit_tag:
        parse_version(explicit_tag)
        tag = explicit_tag
    elif include_prerelease:
        tag = resolver.get_latest(project).tag_name
    else:
        tag = resolver.get_latest_excluding_prerelease(project).tag_name

    image_tag = f"{prefix}-{tag}" if prefix else tag
    image = f"{base_image_name}:{image_tag}"
    _LOGGER.info("Resolved image reference %s for %s", image, project)
    return image, tag
