"""Command line entrypoint.

Usage:
    roboscan scan example.com [--json]
    roboscan test-bot https://example.com/page GPTBot
"""

import argparse
import asyncio
import json
import sys

import structlog

from roboscan.crawler.bot_access import probe_bot_access
from roboscan.crawler.permissions import TRACKED_CRAWLERS
from roboscan.crawler.resources import RESOURCES
from roboscan.exceptions import RoboscanError
from roboscan.logging import setup_logging
from roboscan.models import AuditSnapshot
from roboscan.scanner import scan

logger = structlog.get_logger(__name__)


def print_snapshot(snapshot: AuditSnapshot) -> None:
    target = snapshot.target
    print(f"\n{'=' * 60}")
    print(f"AUDIT: {target.url}")
    if not target.canonical_verified:
        print("(canonical URL not verified)")
    print(f"{'=' * 60}")

    print("\nFiles:")
    for spec in RESOURCES:
        outcome = snapshot.outcome(spec.kind)
        marker = "found" if outcome.found else "missing"
        location = f"  {outcome.url}" if outcome.url else ""
        print(f"  {spec.display_name:<16} {marker}{location}")

    print("\nCrawler permissions:")
    for agent, label in snapshot.permission_labels.items():
        crawler = TRACKED_CRAWLERS.get(agent)
        about = f"  {crawler['owner']}: {crawler['purpose']}" if crawler else ""
        print(f"  {agent:<16} {label:<12}{about}")

    if snapshot.warnings:
        print("\nWarnings:")
        for warning in snapshot.warnings:
            print(f"  - {warning}")
    if snapshot.errors:
        print("\nErrors:")
        for error in snapshot.errors:
            print(f"  - {error}")


async def run_scan(url: str, as_json: bool = False) -> int:
    snapshot = await scan(url)
    if as_json:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print_snapshot(snapshot)
    return 0


async def run_test_bot(url: str, bot_name: str) -> int:
    result = await probe_bot_access(url, bot_name)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.accessible else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roboscan",
        description="Audit a website's robots.txt, llms.txt and other well-known files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Run a full audit of a site")
    scan_parser.add_argument("url", help="Hostname or URL to audit")
    scan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the audit snapshot as JSON",
    )

    bot_parser = subparsers.add_parser(
        "test-bot", help="Request a URL with a crawler's user agent"
    )
    bot_parser.add_argument("url", help="URL to request")
    bot_parser.add_argument("bot", help="Crawler name, e.g. GPTBot")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        if args.command == "scan":
            return asyncio.run(run_scan(args.url, as_json=args.json))
        return asyncio.run(run_test_bot(args.url, args.bot))
    except RoboscanError as e:
        logger.error("command_failed", command=args.command, code=e.code, error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
