"""Detect whether the running executable is managed by a package manager.

A tool installed through Homebrew (macOS and Linux) or Scoop (Windows) must
be upgraded through that package manager; replacing the binary in place would
leave the package manager's bookkeeping out of sync. Detection follows
symlinks from the running executable and checks whether the real path sits in
one of the package manager's install locations.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from services.releases.constants import (
    DEFAULT_TOOL,
    HOMEBREW_CELLAR_ENV,
    HOMEBREW_PREFIX_ENV,
    SCOOP_ENV,
    SCOOP_GLOBAL_ENV,
)
from services.releases.errors import ExecutablePathUnresolvableError
from shared.platforms import Platform


_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManager:
    """A package manager and the command template it upgrades tools with."""

    name: str
    upgrade_template: str

    def upgrade_command(self, tool: str) -> str:
        return self.upgrade_template.format(tool=tool)


HOMEBREW = PackageManager("homebrew", "brew update && brew upgrade {tool}")
SCOOP = PackageManager("scoop", "scoop update {tool}")


@dataclass(frozen=True)
class ManagedInstall:
    path: str
    manager: PackageManager


def resolve_executable(executable: str | os.PathLike[str] | None = None) -> str:
    """Return the real path of ``executable`` (default: the running program)."""

    candidate = os.fspath(executable) if executable is not None else _default_executable()
    if not candidate:
        raise ExecutablePathUnresolvableError(candidate, "empty executable path")
    try:
        return str(Path(candidate).resolve(strict=True))
    except (OSError, RuntimeError) as exc:
        raise ExecutablePathUnresolvableError(candidate, exc) from exc


def detect_package_manager(
    platform: Platform,
    tool: str = DEFAULT_TOOL,
    *,
    executable: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ManagedInstall | None:
    """Return the managed install owning the executable, or ``None``."""

    env = os.environ if environ is None else environ
    real_path = resolve_executable(executable)
    platform = Platform(platform)

    if platform in (Platform.DARWIN, Platform.LINUX):
        if _is_homebrew_path(real_path, tool, env):
            _LOGGER.debug("Executable %s is managed by Homebrew", real_path)
            return ManagedInstall(real_path, HOMEBREW)
    elif platform is Platform.WINDOWS:
        if _is_scoop_path(real_path, tool, env):
            _LOGGER.debug("Executable %s is managed by Scoop", real_path)
            return ManagedInstall(real_path, SCOOP)

    _LOGGER.debug("Executable %s is not managed by a package manager", real_path)
    return None


def detect_managed_install(
    platform: Platform,
    tool: str = DEFAULT_TOOL,
    *,
    executable: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the executable's real path if a package manager owns it, else ``""``.

    Only a failure to resolve the executable raises
    (:class:`ExecutablePathUnresolvableError`); an unmanaged install is not an
    error.
    """

    managed = detect_package_manager(platform, tool, executable=executable, environ=environ)
    return managed.path if managed is not None else ""


def _default_executable() -> str:
    if getattr(sys, "frozen", False):
        return sys.executable
    program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    located = shutil.which(program)
    if located:
        return located
    if Path(program).exists():
        return program
    # `python -c` and interactive sessions leave no script path in argv.
    return sys.executable


def _is_homebrew_path(real_path: str, tool: str, env: Mapping[str, str]) -> bool:
    normalised = real_path.replace("\\", "/")
    if f"/Cellar/{tool}/" in normalised:
        return True
    cellar = _env_path(env, HOMEBREW_CELLAR_ENV)
    prefix = _env_path(env, HOMEBREW_PREFIX_ENV)
    roots = [cellar, prefix / "Cellar" if prefix is not None else None]
    return any(
        _is_within(Path(real_path), root / tool) for root in roots if root is not None
    )


def _is_scoop_path(real_path: str, tool: str, env: Mapping[str, str]) -> bool:
    normalised = real_path.replace("\\", "/").lower()
    if f"/scoop/apps/{tool.lower()}/" in normalised:
        return True
    roots = [_env_path(env, SCOOP_ENV), _env_path(env, SCOOP_GLOBAL_ENV)]
    return any(
        _is_within(Path(real_path), root / "apps" / tool) for root in roots if root is not None
    )


def _env_path(env: Mapping[str, str], name: str) -> Path | None:
    value = env.get(name)
    if not value:
        return None
    return Path(value).expanduser().resolve()


def _is_within(path: Path, root: Path | None) -> bool:
    if root is None:
        return False
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


__all__ = [
    "HOMEBREW",
    "SCOOP",
    "ManagedInstall",
    "PackageManager",
    "detect_managed_install",
    "detect_package_manager",
    "resolve_executable",
]
