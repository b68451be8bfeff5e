"""
Command-line interface for the image counter.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from image_counter.config import DEFAULT_MAX_DEPTH, DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, CountConfig
from image_counter.core import count_images, CountStats
from image_counter.errors import ConfigError
from image_counter.fetch import to_identifier


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def print_summary(stats: CountStats) -> None:
    """Print count summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("COUNT SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Resources visited:      {stats.resources_visited}\n")
    sys.stderr.write(f"Resources failed:       {stats.resources_failed}\n")
    sys.stderr.write(f"Duplicates skipped:     {stats.duplicates_skipped}\n")
    sys.stderr.write(f"Depth cutoffs:          {stats.depth_cutoffs}\n")
    sys.stderr.write(f"Unresolved links:       {stats.links_unresolved}\n")
    sys.stderr.write(f"Total images:           {stats.total_images}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            sys.stderr.write(f"  {error_type}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-counter",
        description="Count the images reachable from a root folder or URL by following its links.",
    )
    parser.add_argument("root", help="Root folder or URL (e.g. ./photos or https://example.com)")
    parser.add_argument(
        "--max-depth",
        type=positive_int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum link depth, the root being depth 1 (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument("--diagnostics", action="store_true", help="Log traversal diagnostics to stderr")
    parser.add_argument("--workers", type=positive_int, default=1, help="Fetch sibling links concurrently (default: 1)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--json", action="store_true", help="Output the result as JSON")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--summary", action="store_true", help="Print a count summary to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the image counter CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.diagnostics else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    try:
        config = CountConfig(
            root=to_identifier(args.root),
            max_depth=args.max_depth,
            diagnostics_enabled=args.diagnostics,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            workers=args.workers,
        ).validate()
    except ConfigError as e:
        parser.error(str(e))

    total, stats = count_images(config)

    if args.summary:
        print_summary(stats)

    if args.json:
        payload = {
            "root": config.root,
            "max_depth": config.max_depth,
            "total_images": total,
            "stats": stats.to_dict(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None))
    else:
        print(f"{total} total image(s) are reachable from {config.root}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
