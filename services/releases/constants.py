"""Constants shared across the release resolution modules."""

from __future__ import annotations

GITHUB_OWNER = "flyteorg"
GITHUB_API_URL = "https://api.github.com"
DEFAULT_TOOL = "flytectl"
DEFAULT_PER_PAGE = 30
DEFAULT_TIMEOUT = 30.0

SANDBOX_PROJECT = "flyte"
SANDBOX_IMAGE = "cr.flyte.org/flyteorg/flyte-sandbox"
SANDBOX_MANIFEST = "flyte_sandbox_manifest.yaml"
DEFAULT_ASSET_EXTENSION = ".tar.gz"

LOCAL_RELEASE_ENV = "FLYTECTL_RELEASES_LOCAL_DIR"
GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
HOMEBREW_CELLAR_ENV = "HOMEBREW_CELLAR"
HOMEBREW_PREFIX_ENV = "HOMEBREW_PREFIX"
SCOOP_ENV = "SCOOP"
SCOOP_GLOBAL_ENV = "SCOOP_GLOBAL"
