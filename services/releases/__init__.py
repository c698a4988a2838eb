"""Public API for release discovery and upgrade advice."""

from __future__ import annotations

from services.releases.advisor import UpgradeAdvisor
from services.releases.assets import asset_name, find_asset, resolve_image_reference
from services.releases.builder import build_release_resolver, build_release_source, build_upgrade_advisor
from services.releases.constants import (
    DEFAULT_TOOL,
    GITHUB_API_URL,
    GITHUB_OWNER,
    GITHUB_TOKEN_ENV,
    LOCAL_RELEASE_ENV,
    SANDBOX_IMAGE,
    SANDBOX_MANIFEST,
)
from services.releases.errors import (
    AssetNotFoundError,
    ExecutablePathUnresolvableError,
    MalformedVersionError,
    NoReleasesFoundError,
    NoStableReleaseFoundError,
    ReleaseError,
    ReleaseSourceError,
    UpstreamLookupFailedError,
    VersionNotFoundError,
)
from services.releases.install_detection import (
    ManagedInstall,
    PackageManager,
    detect_managed_install,
    detect_package_manager,
)
from services.releases.models import Asset, Release
from services.releases.providers import (
    GitHubReleaseSource,
    InMemoryReleaseSource,
    LocalFolderReleaseSource,
    ReleaseSource,
)
from services.releases.resolver import ReleaseResolver
from services.releases.versioning import SemVer, compare_versions, is_newer, parse_version

__all__ = [
    "DEFAULT_TOOL",
    "GITHUB_API_URL",
    "GITHUB_OWNER",
    "GITHUB_TOKEN_ENV",
    "LOCAL_RELEASE_ENV",
    "SANDBOX_IMAGE",
    "SANDBOX_MANIFEST",
    "Asset",
    "AssetNotFoundError",
    "ExecutablePathUnresolvableError",
    "GitHubReleaseSource",
    "InMemoryReleaseSource",
    "LocalFolderReleaseSource",
    "MalformedVersionError",
    "ManagedInstall",
    "NoReleasesFoundError",
    "NoStableReleaseFoundError",
    "PackageManager",
    "Release",
    "ReleaseError",
    "ReleaseResolver",
    "ReleaseSource",
    "ReleaseSourceError",
    "SemVer",
    "UpgradeAdvisor",
    "UpstreamLookupFailedError",
    "VersionNotFoundError",
    "asset_name",
    "build_release_resolver",
    "build_release_source",
    "build_upgrade_advisor",
    "compare_versions",
    "detect_managed_install",
    "detect_package_manager",
    "find_asset",
    "is_newer",
    "parse_version",
    "resolve_image_reference",
]
