# =============================================================================
# src/cli/cache.py -- Operator CLI for the image directory cache
# =============================================================================
#
# Runs the same synchronizer the web server uses, against the same cache
# store, without starting the server:
#
#   refresh   -- force a full refetch and rewrite of the cache
#   resolve   -- resolve <image> [variant] to its rendition URL
#
# Logging is raised to WARNING so command output stays clean for scripting.
# =============================================================================

"""Operator CLI for the hosuto image directory cache.

Usage::

    python -m src.cli refresh
    python -m src.cli resolve sunset
    python -m src.cli resolve sunset thumbnail
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from src.utils.errors import HosutoError, ImageNotFoundError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Inspect and rebuild the hosuto image directory cache.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("refresh", help="Force a full refresh of the cached image directory.")

    resolve = sub.add_parser("resolve", help="Print the rendition URL for an image.")
    resolve.add_argument("image", help="Filename or id prefix.")
    resolve.add_argument("variant", nargs="?", default=None, help="Variant name (default: public).")

    return parser


async def _run(args: argparse.Namespace) -> int:
    # Deferred so --help works without reading settings.
    from src.main import build_services, config, settings
    from src.utils.logging import configure_logging

    # src.main configures logging at import; quieten it afterwards.
    configure_logging(log_level="WARNING")

    async with httpx.AsyncClient(timeout=settings.http_timeout) as http_client:
        services = build_services(settings, config, http_client)
        await services["cache_store"].initialize()
        synchronizer = services["synchronizer"]

        if args.command == "refresh":
            result = await synchronizer.force_refresh()
            print(f"updated: {result.updated}")
            print(f"images:  {len(result.directory)}")
            print(f"size:    {result.size_mib} MiB")
            return 0

        directory = await synchronizer.resolve_directory()
        try:
            resolution = services["resolver"].resolve(directory, args.image, args.variant)
        except ImageNotFoundError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        print(resolution.url)
        return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits 0 on success, 1 on a miss or a failure."""
    args = _build_parser().parse_args(argv)

    try:
        exit_code = asyncio.run(_run(args))
    except HosutoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
