"""Release lookup configuration loaded from a bundled JSON resource."""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from math import isfinite
from pathlib import Path
from typing import Any, Mapping

from services.releases.constants import (
    DEFAULT_PER_PAGE,
    DEFAULT_TIMEOUT,
    DEFAULT_TOOL,
    GITHUB_API_URL,
    GITHUB_OWNER,
    SANDBOX_IMAGE,
    SANDBOX_MANIFEST,
    SANDBOX_PROJECT,
)

_CONFIG_RESOURCE = "release.json"
_RELEASE_CONFIG_CACHE: ReleaseConfig | None = None


@dataclass(frozen=True)
class GitHubConfig:
    """Where and how the GitHub Releases API is queried."""

    api_url: str
    owner: str
    per_page: int
    timeout: float


@dataclass(frozen=True)
class SandboxConfig:
    """The project whose releases version the sandbox image."""

    project: str
    image: str
    manifest: str


@dataclass(frozen=True)
class ReleaseConfig:
    github: GitHubConfig
    tool: str
    sandbox: SandboxConfig


def get_release_config() -> ReleaseConfig:
    """Return the cached release configuration."""

    global _RELEASE_CONFIG_CACHE
    if _RELEASE_CONFIG_CACHE is None:
        _RELEASE_CONFIG_CACHE = load_release_config()
    return _RELEASE_CONFIG_CACHE


def reset_release_config_cache() -> None:
    global _RELEASE_CONFIG_CACHE
    _RELEASE_CONFIG_CACHE = None


def load_release_config(path: str | Path | None = None) -> ReleaseConfig:
    """Load configuration from ``path`` or the bundled JSON resource."""

    data = _read_config_data(path)
    github = _parse_github_section(data.get("github"))
    tool = _coerce_name(data.get("tool"), default=DEFAULT_TOOL)
    sandbox = _parse_sandbox_section(data.get("sandbox"))
    return ReleaseConfig(github=github, tool=tool, sandbox=sandbox)


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _parse_github_section(section: Any) -> GitHubConfig:
    if not isinstance(section, Mapping):
        section = {}
    return GitHubConfig(
        api_url=_coerce_url(section.get("api_url"), default=GITHUB_API_URL),
        owner=_coerce_name(section.get("owner"), default=GITHUB_OWNER),
        per_page=_coerce_positive_int(section.get("per_page"), default=DEFAULT_PER_PAGE, maximum=100),
        timeout=_coerce_timeout(section.get("timeout"), default=DEFAULT_TIMEOUT),
    )


def _parse_sandbox_section(section: Any) -> SandboxConfig:
    if not isinstance(section, Mapping):
        section = {}
    return SandboxConfig(
        project=_coerce_name(section.get("project"), default=SANDBOX_PROJECT),
        image=_coerce_name(section.get("image"), default=SANDBOX_IMAGE),
        manifest=_coerce_name(section.get("manifest"), default=SANDBOX_MANIFEST),
    )


def _coerce_name(value: Any, *, default: str) -> str:
    if not isinstance(value, str):
        return default
    cleaned = value.strip()
    return cleaned or default


def _coerce_url(value: Any, *, default: str) -> str:
    candidate = _coerce_name(value, default=default)
    if not candidate.startswith(("https://", "http://")):
        return default
    return candidate.rstrip("/")


def _coerce_positive_int(value: Any, *, default: int, maximum: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        candidate = int(value)
    elif isinstance(value, str):
        try:
            candidate = int(float(value))
        except ValueError:
            return default
    else:
        return default
    if candidate <= 0 or candidate > maximum:
        return default
    return candidate


def _coerce_timeout(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        candidate = float(value)
    elif isinstance(value, str):
        try:
            candidate = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not isfinite(candidate) or candidate <= 0:
        return default
    return candidate
