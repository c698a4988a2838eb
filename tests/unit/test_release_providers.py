from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from urllib.error import HTTPError, URLError

import pytest

from services.releases import (
    GitHubReleaseSource,
    InMemoryReleaseSource,
    LocalFolderReleaseSource,
    MalformedVersionError,
    NoStableReleaseFoundError,
    ReleaseResolver,
    ReleaseSourceError,
)
from services.releases.providers import release_from_payload
from tests.unit.release_test_utils import make_release


API = "https://example.invalid/api"
SHA = "3f2a9c1e8b7d6054a1b2c3d4e5f60718293a4b5c"


def _release_payload(tag: str, **extra: object) -> dict:
    payload = {
        "tag_name": tag,
        "target_commitish": "master",
        "prerelease": False,
        "draft": False,
        "html_url": f"https://github.com/flyteorg/flytectl/releases/tag/{tag}",
        "assets": [
            {
                "name": "flytectl_Darwin_386.tar.gz",
                "browser_download_url": f"https://github.com/flyteorg/flytectl/releases/download/{tag}/flytectl_Darwin_386.tar.gz",
                "size": 1024,
                "content_type": "application/gzip",
            }
        ],
    }
    payload.update(extra)
    return payload


class FakeResponse(io.BytesIO):
    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FakeOpener:
    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.requests: list = []

    def __call__(self, request, timeout=None):  # type: ignore[no-untyped-def]
        self.requests.append(request)
        url = request.full_url
        if url not in self.responses:
            raise HTTPError(url, 404, "Not Found", None, None)  # type: ignore[arg-type]
        payload = self.responses[url]
        if isinstance(payload, BaseException):
            raise payload
        if isinstance(payload, bytes):
            return FakeResponse(payload)
        return FakeResponse(json.dumps(payload).encode("utf-8"))


def _install_opener(monkeypatch: pytest.MonkeyPatch, responses: dict[str, object]) -> FakeOpener:
    opener = FakeOpener(responses)
    monkeypatch.setattr("services.releases.providers.urlopen", opener)
    return opener


def test_github_source_lists_releases_newest_first(monkeypatch: pytest.MonkeyPatch) -> None:
    listing = [
        _release_payload("v0.3.0", draft=True),
        _release_payload("v0.2.1-rc1", prerelease=True),
        _release_payload("v0.2.0"),
    ]
    opener = _install_opener(
        monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=30": listing}
    )

    releases = GitHubReleaseSource(API).list_releases("flytectl")

    assert [release.tag_name for release in releases] == ["v0.2.1-rc1", "v0.2.0"]
    assert releases[0].prerelease is True
    assert releases[1].commit == ""
    asset = releases[1].assets[0]
    assert asset.name == "flytectl_Darwin_386.tar.gz"
    assert asset.size == 1024
    assert asset.download_url is not None and asset.download_url.endswith("/v0.2.0/flytectl_Darwin_386.tar.gz")
    request = opener.requests[0]
    assert request.get_header("Accept") == "application/vnd.github+json"
    assert request.get_header("Authorization") is None


def test_github_source_passes_token_through(monkeypatch: pytest.MonkeyPatch) -> None:
    opener = _install_opener(
        monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=5": []}
    )

    GitHubReleaseSource(API, token="s3cret", per_page=5).list_releases("flytectl")

    assert opener.requests[0].get_header("Authorization") == "Bearer s3cret"


def test_github_source_accepts_owner_qualified_project(monkeypatch: pytest.MonkeyPatch) -> None:
    opener = _install_opener(
        monkeypatch, {f"{API}/repos/example/tool/releases?per_page=30": [_release_payload("v1.0.0")]}
    )

    releases = GitHubReleaseSource(API + "/").list_releases("example/tool")

    assert releases[0].tag_name == "v1.0.0"
    assert opener.requests[0].full_url == f"{API}/repos/example/tool/releases?per_page=30"


def test_github_source_skips_malformed_tags(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    listing = [_release_payload("nightly"), _release_payload("v0.2.0")]
    _install_opener(monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=30": listing})

    with caplog.at_level(logging.WARNING, logger="services.releases.providers"):
        releases = GitHubReleaseSource(API).list_releases("flytectl")

    assert [release.tag_name for release in releases] == ["v0.2.0"]
    assert "malformed tag 'nightly'" in caplog.text


def test_github_source_unknown_project_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(monkeypatch, {})

    with pytest.raises(ReleaseSourceError, match="HTTP 404"):
        GitHubReleaseSource(API).list_releases("fl")


def test_github_source_network_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(
        monkeypatch,
        {f"{API}/repos/flyteorg/flytectl/releases?per_page=30": URLError("connection refused")},
    )

    with pytest.raises(ReleaseSourceError) as excinfo:
        GitHubReleaseSource(API).list_releases("flytectl")

    assert isinstance(excinfo.value.__cause__, URLError)


def test_github_source_invalid_json_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=30": b"<html>"})

    with pytest.raises(ReleaseSourceError, match="Invalid JSON"):
        GitHubReleaseSource(API).list_releases("flytectl")


def test_github_source_get_release_by_tag(monkeypatch: pytest.MonkeyPatch) -> None:
    opener = _install_opener(
        monkeypatch,
        {
            f"{API}/repos/flyteorg/flyte/releases/tags/v0.15.0": _release_payload("v0.15.0"),
            f"{API}/repos/flyteorg/flyte/commits/v0.15.0": {"sha": SHA},
        },
    )

    release = GitHubReleaseSource(API).get_release("flyte", "v0.15.0")

    assert release is not None
    assert release.tag_name == "v0.15.0"
    assert release.commit == SHA
    assert [request.full_url for request in opener.requests][-1] == f"{API}/repos/flyteorg/flyte/commits/v0.15.0"
    assert release.html_url == "https://github.com/flyteorg/flytectl/releases/tag/v0.15.0"


def test_github_source_get_missing_release_returns_none(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(monkeypatch, {})

    assert GitHubReleaseSource(API).get_release("flyte", "v100.0.0") is None


def test_github_source_get_release_server_error_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    url = f"{API}/repos/flyteorg/flyte/releases/tags/v0.15.0"
    _install_opener(monkeypatch, {url: HTTPError(url, 503, "Unavailable", None, None)})  # type: ignore[arg-type]

    with pytest.raises(ReleaseSourceError, match="HTTP 503"):
        GitHubReleaseSource(API).get_release("flyte", "v0.15.0")


def test_release_from_payload_rejects_malformed_tag() -> None:
    with pytest.raises(MalformedVersionError):
        release_from_payload({"tag_name": "0.15.0"})


def test_release_from_payload_ignores_nameless_assets() -> None:
    release = release_from_payload(
        {"tag_name": "v0.15.0", "assets": [{"browser_download_url": "https://x"}, {"name": "a", "size": True}]}
    )

    assert release.asset_names == ("a",)
    assert release.assets[0].size is None
    assert release.commit == ""


def test_local_folder_source_reads_project_file(tmp_path: Path) -> None:
    listing = [
        _release_payload("v0.2.1"),
        _release_payload("v0.2.0", draft=True),
        _release_payload("v0.1.0", commit="abc123"),
    ]
    (tmp_path / "flytectl.json").write_text(json.dumps(listing), encoding="utf-8")
    source = LocalFolderReleaseSource(tmp_path)

    assert [release.tag_name for release in source.list_releases("flytectl")] == ["v0.2.1", "v0.1.0"]
    assert [release.tag_name for release in source.list_releases("flyteorg/flytectl")] == ["v0.2.1", "v0.1.0"]
    release = source.get_release("flytectl", "v0.1.0")
    assert release is not None and release.commit == "abc123"
    assert source.get_release("flytectl", "v9.9.9") is None


def test_local_folder_source_missing_project_raises(tmp_path: Path) -> None:
    with pytest.raises(ReleaseSourceError, match="missing"):
        LocalFolderReleaseSource(tmp_path).list_releases("flyte")


def test_local_folder_source_invalid_metadata_raises(tmp_path: Path) -> None:
    (tmp_path / "flyte.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ReleaseSourceError):
        LocalFolderReleaseSource(tmp_path).list_releases("flyte")

    (tmp_path / "flyte.json").write_text(json.dumps({"tag_name": "v1.0.0"}), encoding="utf-8")
    with pytest.raises(ReleaseSourceError, match="must be a list"):
        LocalFolderReleaseSource(tmp_path).list_releases("flyte")


def test_in_memory_source() -> None:
    source = InMemoryReleaseSource({"flytectl": [make_release("v0.2.0"), make_release("v0.1.0")]})

    assert [release.tag_name for release in source.list_releases("flytectl")] == ["v0.2.0", "v0.1.0"]
    assert source.get_release("flytectl", "v0.1.0") is not None
    assert source.get_release("flytectl", "v0.3.0") is None
    with pytest.raises(ReleaseSourceError):
        source.get_release("flyte", "v0.1.0")


def test_commit_sha_resolves_tag_instead_of_target_branch(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(
        monkeypatch,
        {
            f"{API}/repos/flyteorg/flyte/releases/tags/v0.15.0": {"tag_name": "v0.15.0", "target_commitish": "master"},
            f"{API}/repos/flyteorg/flyte/commits/v0.15.0": {"sha": SHA, "commit": {"message": "Release"}},
        },
    )

    commit = ReleaseResolver(GitHubReleaseSource(API)).get_commit_sha("v0.15.0", "flyte")

    assert commit == SHA


def test_github_source_commit_lookup_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_opener(
        monkeypatch,
        {
            f"{API}/repos/flyteorg/flyte/releases/tags/v0.15.0": _release_payload("v0.15.0"),
            f"{API}/repos/flyteorg/flyte/commits/v0.15.0": {"message": "No commit found"},
        },
    )

    with pytest.raises(ReleaseSourceError, match="No commit SHA"):
        GitHubReleaseSource(API).get_release("flyte", "v0.15.0")


def test_listing_keeps_only_sha_shaped_target_commitish(monkeypatch: pytest.MonkeyPatch) -> None:
    listing = [_release_payload("v0.2.1", target_commitish=SHA), _release_payload("v0.2.0")]
    _install_opener(monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=30": listing})

    releases = GitHubReleaseSource(API).list_releases("flytectl")

    assert [release.commit for release in releases] == [SHA, ""]


def test_listing_reads_a_single_page(monkeypatch: pytest.MonkeyPatch) -> None:
    listing = [_release_payload(f"v0.2.{patch}-rc1", prerelease=True) for patch in range(2, 0, -1)]
    opener = _install_opener(monkeypatch, {f"{API}/repos/flyteorg/flytectl/releases?per_page=2": listing})
    resolver = ReleaseResolver(GitHubReleaseSource(API, per_page=2))

    with pytest.raises(NoStableReleaseFoundError):
        resolver.get_latest_excluding_prerelease("flytectl")

    assert [request.full_url for request in opener.requests] == [
        f"{API}/repos/flyteorg/flytectl/releases?per_page=2"
    ]
