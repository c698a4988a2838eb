"""Command-line front-end for release lookups and upgrade checks."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Sequence

from app.config import ReleaseConfig, get_release_config
from app.version import get_app_version
from services.releases import (
    ReleaseError,
    ReleaseResolver,
    UpgradeAdvisor,
    asset_name,
    build_release_resolver,
    resolve_image_reference,
)
from shared.logging_config import LogVerbosity, ensure_cli_logging
from shared.platforms import Architecture, Platform


_LOGGER = logging.getLogger(__name__)

Printer = Callable[[str], None]


def build_parser(config: ReleaseConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=config.tool,
        description="Look up releases and check for a newer build.",
    )
    parser.add_argument(
        "--verbosity",
        choices=[level.value for level in LogVerbosity],
        default=LogVerbosity.WARNING.value,
        help="Diagnostics written to stderr (default: warning).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    latest = commands.add_parser("latest", help="Print the latest release tag.")
    latest.add_argument("--project", default=config.tool)
    latest.add_argument("--stable", action="store_true", help="Skip pre-releases.")

    check = commands.add_parser("check", help="Verify that a release tag exists.")
    check.add_argument("tag")
    check.add_argument("--project", default=config.tool)

    commit = commands.add_parser("commit", help="Print the commit a release tag points at.")
    commit.add_argument("tag")
    commit.add_argument("--project", default=config.tool)

    asset = commands.add_parser("asset", help="Print the download URL of a release asset.")
    asset.add_argument("--tag", default="", help="Release tag (default: latest).")
    asset.add_argument("--project", default=config.tool)
    asset.add_argument(
        "--name",
        help=(
            "Exact asset name; defaults to the sandbox manifest for the sandbox project "
            "and is otherwise derived from platform and architecture."
        ),
    )
    asset.add_argument("--platform", choices=[item.value for item in Platform])
    asset.add_argument("--arch", choices=[item.value for item in Architecture])

    image = commands.add_parser("image", help="Print the sandbox image reference.")
    image.add_argument("--tag", default="", help="Explicit image version (default: latest).")
    image.add_argument("--project", default=config.sandbox.project)
    image.add_argument("--image", default=config.sandbox.image)
    image.add_argument("--pre", action="store_true", help="Consider pre-releases.")
    image.add_argument("--prefix", default=None, help="Tag prefix, e.g. 'dind'.")

    upgrade = commands.add_parser("upgrade-check", help="Print a notice when a newer release exists.")
    upgrade.add_argument("--current", default=None, help="Version to compare (default: this build).")
    upgrade.add_argument("--platform", choices=[item.value for item in Platform])

    return parser


def _default_asset_name(args: argparse.Namespace, config: ReleaseConfig) -> str:
    if args.project == config.sandbox.project and not (args.platform or args.arch):
        return config.sandbox.manifest
    return asset_name(
        args.project,
        Platform(args.platform) if args.platform else Platform.current(),
        Architecture(args.arch) if args.arch else Architecture.current(),
    )


def run(
    args: argparse.Namespace,
    resolver: ReleaseResolver,
    config: ReleaseConfig,
    echo: Printer = print,
) -> int:
    """Execute the parsed command; raises :class:`ReleaseError` on failure."""

    if args.command == "latest":
        if args.stable:
            release = resolver.get_latest_excluding_prerelease(args.project)
        else:
            release = resolver.get_latest(args.project)
        echo(release.tag_name)
    elif args.command == "check":
        release = resolver.check_version_exists(args.tag, args.project)
        echo(f"{release.tag_name} exists for {args.project}")
    elif args.command == "commit":
        echo(resolver.get_commit_sha(args.tag, args.project))
    elif args.command == "asset":
        name = args.name or _default_asset_name(args, config)
        found = resolver.get_assets_from_release(args.tag, name, args.project)
        echo(found.download_url or found.name)
    elif args.command == "image":
        reference, _ = resolve_image_reference(
            resolver,
            args.project,
            args.tag,
            args.image,
            args.pre,
            prefix=args.prefix,
        )
        echo(reference)
    elif args.command == "upgrade-check":
        advisor = UpgradeAdvisor(resolver, tool=config.tool, owner=config.github.owner)
        platform = Platform(args.platform) if args.platform else Platform.current()
        message = advisor.build_upgrade_message(args.current or get_app_version(), platform)
        if message:
            echo(message.rstrip("\n"))
    else:  # pragma: no cover - argparse rejects unknown commands
        raise ValueError(f"Unknown command: {args.command}")
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    resolver: ReleaseResolver | None = None,
    config: ReleaseConfig | None = None,
) -> int:
    config = config or get_release_config()
    args = build_parser(config).parse_args(argv)
    ensure_cli_logging(args.verbosity)

    resolver = resolver or build_release_resolver(config)
    try:
        return run(args, resolver, config)
    except ReleaseError as exc:
        _LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


__all__ = ["build_parser", "main", "run"]
