"""Release source implementations."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from services.releases.constants import (
    DEFAULT_PER_PAGE,
    DEFAULT_TIMEOUT,
    GITHUB_API_URL,
    GITHUB_OWNER,
)
from services.releases.errors import MalformedVersionError, ReleaseSourceError
from services.releases.models import Asset, Release


_LOGGER = logging.getLogger(__name__)

_COMMIT_SHA_PATTERN = re.compile(r"[0-9a-f]{40}")


class ReleaseSource(Protocol):
    """Protocol describing where release metadata comes from."""

    def list_releases(self, project: str) -> Sequence[Release]:
        """Return the releases of ``project``, newest first."""

    def get_release(self, project: str, tag: str) -> Release | None:
        """Return the release tagged ``tag`` or ``None`` when it does not exist."""


class GitHubReleaseSource:
    """Fetch release metadata from the GitHub Releases API."""

    def __init__(
        self,
        api_url: str = GITHUB_API_URL,
        *,
        owner: str = GITHUB_OWNER,
        token: str | None = None,
        per_page: int = DEFAULT_PER_PAGE,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._owner = owner
        self._token = token or None
        self._per_page = per_page
        self._timeout = timeout

    def list_releases(self, project: str) -> list[Release]:
        url = f"{self._api_url}/repos/{self._repository(project)}/releases?per_page={self._per_page}"
        payload = self._request_json(url)
        if not isinstance(payload, list):
            raise ReleaseSourceError(f"Unexpected release listing payload from {url}")

        releases: list[Release] = []
        for entry in payload:
            if not isinstance(entry, Mapping):
                continue
            if entry.get("draft"):
                _LOGGER.debug("Skipping draft release %s of %s", entry.get("tag_name"), project)
                continue
            release = _release_from_listing_entry(entry, project)
            if release is not None:
                releases.append(release)
        _LOGGER.debug("GitHub returned %d releases for %s", len(releases), project)
        return releases

    def get_release(self, project: str, tag: str) -> Release | None:
        url = f"{self._api_url}/repos/{self._repository(project)}/releases/tags/{quote(tag, safe='')}"
        payload = self._request_json(url, allow_missing=True)
        if payload is None:
            _LOGGER.debug("GitHub has no release %s for %s", tag, project)
            return None
        if not isinstance(payload, Mapping):
            raise ReleaseSourceError(f"Unexpected release payload from {url}")
        release = release_from_payload(payload)
        return replace(release, commit=self._commit_for_tag(project, release.tag_name))

    def _commit_for_tag(self, project: str, tag: str) -> str:
        """Return the SHA of the commit ``tag`` points at."""

        url = f"{self._api_url}/repos/{self._repository(project)}/commits/{quote(tag, safe='')}"
        payload = self._request_json(url)
        sha = payload.get("sha") if isinstance(payload, Mapping) else None
        if not isinstance(sha, str) or not sha.strip():
            raise ReleaseSourceError(f"No commit SHA returned by {url}")
        _LOGGER.debug("Tag %s of %s points at %s", tag, project, sha)
        return sha.strip()

    def _repository(self, project: str) -> str:
        if "/" in project:
            return project
        return f"{self._owner}/{project}"

    def _build_request(self, url: str) -> Request:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "flytectl-release-support",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return Request(url, headers=headers)

    def _request_json(self, url: str, *, allow_missing: bool = False) -> Any:
        _LOGGER.debug("Querying GitHub releases endpoint %s", url)
        try:
            with urlopen(self._build_request(url), timeout=self._timeout) as response:  # nosec - GitHub API over HTTPS
                return json.load(response)
        except HTTPError as exc:
            if allow_missing and exc.code == 404:
                return None
            raise ReleaseSourceError(f"GitHub responded with HTTP {exc.code} for {url}") from exc
        except (OSError, URLError) as exc:
            raise ReleaseSourceError(f"Failed to query {url}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ReleaseSourceError(f"Invalid JSON returned by {url}: {exc}") from exc


class LocalFolderReleaseSource:
    """Serve release metadata from ``<folder>/<project>.json`` for offline use.

    Each file holds a list of GitHub-shaped release objects, newest first.
    """

    def __init__(self, folder: Path) -> None:
        self._folder = Path(folder)

    def list_releases(self, project: str) -> list[Release]:
        releases: list[Release] = []
        for entry in self._read_entries(project):
            if entry.get("draft"):
                continue
            release = _release_from_listing_entry(entry, project)
            if release is not None:
                releases.append(release)
        return releases

    def get_release(self, project: str, tag: str) -> Release | None:
        for release in self.list_releases(project):
            if release.tag_name == tag:
                return release
        return None

    def _read_entries(self, project: str) -> list[Mapping[str, Any]]:
        metadata_path = self._folder / f"{project.rsplit('/', 1)[-1]}.json"
        if not metadata_path.exists():
            raise ReleaseSourceError(f"Local release metadata missing: {metadata_path}")
        try:
            data = json.loads(metadata_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ReleaseSourceError(f"Failed to read local release metadata: {exc}") from exc
        if not isinstance(data, list):
            raise ReleaseSourceError(f"Local release metadata must be a list: {metadata_path}")
        _LOGGER.debug("Loaded %d local release entries from %s", len(data), metadata_path)
        return [entry for entry in data if isinstance(entry, Mapping)]


class InMemoryReleaseSource:
    """Serve a fixed set of releases keyed by project name."""

    def __init__(self, releases: Mapping[str, Sequence[Release]]) -> None:
        self._releases = {project: tuple(entries) for project, entries in releases.items()}

    def list_releases(self, project: str) -> list[Release]:
        try:
            return list(self._releases[project])
        except KeyError:
            raise ReleaseSourceError(f"Unknown project {project!r}") from None

    def get_release(self, project: str, tag: str) -> Release | None:
        for release in self.list_releases(project):
            if release.tag_name == tag:
                return release
        return None


def release_from_payload(data: Mapping[str, Any]) -> Release:
    """Build a :class:`Release` from a GitHub release object."""

    tag_name = str(data.get("tag_name") or "").strip()
    assets = tuple(
        _asset_from_payload(asset)
        for asset in data.get("assets") or []
        if isinstance(asset, Mapping) and asset.get("name")
    )
    return Release(
        tag_name=tag_name,
        commit=_commit_from_payload(data),
        prerelease=bool(data.get("prerelease")),
        assets=assets,
        name=_clean_text(data.get("name")),
        html_url=_clean_text(data.get("html_url")),
        draft=bool(data.get("draft")),
    )


def _commit_from_payload(data: Mapping[str, Any]) -> str:
    explicit = _clean_text(data.get("commit"))
    if explicit:
        return explicit
    commitish = _clean_text(data.get("target_commitish")) or ""
    return commitish if _COMMIT_SHA_PATTERN.fullmatch(commitish) else ""


def _release_from_listing_entry(entry: Mapping[str, Any], project: str) -> Release | None:
    try:
        return release_from_payload(entry)
    except MalformedVersionError:
        _LOGGER.warning(
            "Ignoring release of %s with malformed tag %r", project, entry.get("tag_name")
        )
        return None


def _asset_from_payload(data: Mapping[str, Any]) -> Asset:
    size = data.get("size")
    return Asset(
        name=str(data.get("name")),
        download_url=_clean_text(data.get("browser_download_url")),
        size=size if isinstance(size, int) and not isinstance(size, bool) else None,
        content_type=_clean_text(data.get("content_type")),
    )


def _clean_text(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


__all__ = [
    "GitHubReleaseSource",
    "InMemoryReleaseSource",
    "LocalFolderReleaseSource",
    "ReleaseSource",
    "release_from_payload",
]
