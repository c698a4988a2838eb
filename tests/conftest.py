from __future__ import annotations

import sys
from pathlib import Path

import pytest


_ISOLATED_ENV_VARS = (
    "FLYTECTL_RELEASES_LOCAL_DIR",
    "FLYTECTL_VERSION",
    "FLYTECTL_LOG_FILE",
    "FLYTECTL_LOG_DIR",
    "GITHUB_TOKEN",
    "GITHUB_REF_NAME",
    "HOMEBREW_CELLAR",
    "HOMEBREW_PREFIX",
    "SCOOP",
    "SCOOP_GLOBAL",
)


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    tests_dir = root / "tests"
    tests_str = str(tests_dir)
    if tests_str not in sys.path:
        sys.path.insert(1, tests_str)


_ensure_project_root_on_path()


@pytest.fixture(autouse=True)
def _isolated_release_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's tokens, package-manager roots and overrides out of tests."""

    from app.config import reset_release_config_cache
    from app.version import get_app_version

    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_release_config_cache()
    get_app_version.cache_clear()

    yield

    reset_release_config_cache()
    get_app_version.cache_clear()
