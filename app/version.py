from __future__ import annotations

"""The build version of the running tool."""

from functools import lru_cache
import logging
import os
import subprocess
from importlib import resources

from services.releases.errors import MalformedVersionError
from services.releases.versioning import parse_version

_LOGGER = logging.getLogger(__name__)

_FALLBACK_VERSION = "v0.0.0-dev"
VERSION_ENV = "FLYTECTL_VERSION"


def _read_version_file() -> str | None:
    try:
        text = resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError):
        return None
    version = text.strip()
    return _normalize(version) if version else None


def _version_from_env() -> str | None:
    env_version = os.environ.get(VERSION_ENV) or os.environ.get("GITHUB_REF_NAME")
    if not env_version or not env_version.strip():
        return None
    return _normalize(env_version)


def _version_from_git() -> str | None:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--abbrev=0"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return _normalize(output) if output.strip() else None


def _normalize(raw_version: str) -> str:
    """Return ``raw_version`` as a tag with exactly one leading ``v``."""

    version = raw_version.strip()
    if version.startswith("refs/tags/"):
        version = version[len("refs/tags/"):]
    return f"v{version.lstrip('vV')}"


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the build version as a ``v``-prefixed tag.

    The order of precedence is:
    1. Explicit environment variables (``FLYTECTL_VERSION`` or ``GITHUB_REF_NAME``).
    2. Embedded ``VERSION`` file packaged with the tool.
    3. ``git describe`` output when running from a source checkout.
    4. A fallback development version string.

    Candidates that are not well-formed release tags are skipped.
    """

    for resolver in (_version_from_env, _read_version_file, _version_from_git):
        version = resolver()
        if not version:
            continue
        try:
            parse_version(version)
        except MalformedVersionError:
            _LOGGER.warning("Ignoring malformed build version %r", version)
            continue
        return version
    return _FALLBACK_VERSION


__all__ = ["VERSION_ENV", "get_app_version"]
