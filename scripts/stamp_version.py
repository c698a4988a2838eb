"""Stamp the tool's VERSION file from a Git tag or ref name."""

from __future__ import annotations

import argparse
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_VERSION_FILE = PROJECT_ROOT / "app" / "VERSION"


def normalize_ref_name(ref_name: str) -> str:
    """Normalize a Git ref name to a ``v``-prefixed release tag.

    ``refs/tags/`` is dropped and the tag gains a ``v`` if it lacks one, so
    the stamped value is comparable with published release tags.
    """

    stripped = ref_name.strip()
    if stripped.startswith("refs/tags/"):
        stripped = stripped[len("refs/tags/"):]
    if stripped.startswith("v"):
        return stripped
    return f"v{stripped}"


def stamp_version(ref_name: str, output: Path) -> Path:
    """Write the normalized tag derived from *ref_name* to *output*."""

    normalized = normalize_ref_name(ref_name)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(f"{normalized}\n", encoding="utf-8")
    return output


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "ref_name",
        help="Git ref name to stamp (e.g. 'v0.3.1' or 'refs/tags/v0.3.1').",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to the VERSION file that should be stamped.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    stamp_version(args.ref_name, args.output or DEFAULT_VERSION_FILE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
