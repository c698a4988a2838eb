"""Data models describing releases and their downloadable assets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from services.releases.versioning import SemVer, parse_version


@dataclass(frozen=True)
class Asset:
    """A downloadable artifact attached to a release."""

    name: str
    download_url: str | None = None
    size: int | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class Release:
    """A tagged release of a project.

    ``tag_name`` is validated on construction, so every release handed out by
    a source carries a well-formed ``v<major>.<minor>.<patch>`` tag.
    """

    tag_name: str
    commit: str = ""
    prerelease: bool = False
    assets: Tuple[Asset, ...] = field(default_factory=tuple)
    name: str | None = None
    html_url: str | None = None
    draft: bool = False

    def __post_init__(self) -> None:
        parse_version(self.tag_name)
        if not isinstance(self.assets, tuple):
            object.__setattr__(self, "assets", tuple(self.assets))

    @property
    def version(self) -> SemVer:
        return parse_version(self.tag_name)

    @property
    def asset_names(self) -> Tuple[str, ...]:
        return tuple(asset.name for asset in self.assets)


__all__ = ["Asset", "Release"]
