#!/usr/bin/env python3
"""
NessusLens - CLI Module
Copyright (C) 2026  Dorin Badea
GPLv3 License

Command-line interface and argument parsing.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from nessuslens.core.crypto import ask_password_twice, derive_key_from_password
from nessuslens.core.diff import format_diff_markdown, format_diff_text, generate_diff_report
from nessuslens.core.exporter import export_all
from nessuslens.core.filtering import filter_findings, sort_findings
from nessuslens.core.grouping import group_findings_by_cve
from nessuslens.core.loader import analyze_scan, load_scans
from nessuslens.core.models import ScanData
from nessuslens.core.ui import (
    make_console,
    print_status,
    render_diff,
    render_findings,
    render_hosts,
    render_summary,
)
from nessuslens.utils.config import get_persistent_defaults, update_persistent_defaults
from nessuslens.utils.constants import (
    DEFAULT_EXPORT_FORMATS,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    DEFAULT_WORKERS,
    EXPORT_FORMATS,
    FILTER_TYPES,
    MAX_WORKERS,
    MIN_PASSWORD_LENGTH,
    MIN_WORKERS,
    SECURE_FILE_MODE,
    SORT_DIRECTIONS,
    SORT_FIELDS,
    VERSION,
)
from nessuslens.utils.logging_setup import setup_logging


def _parse_formats(value: str) -> List[str]:
    formats = [v.strip().lower() for v in value.split(",") if v.strip()]
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown or not formats:
        raise argparse.ArgumentTypeError(
            f"invalid format list '{value}' (choose from {', '.join(EXPORT_FORMATS)})"
        )
    return formats


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="nessuslens",
        description=f"NessusLens v{VERSION} - Nessus scan findings analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summary, hosts and critical findings of one scan
  nessuslens scan.json --hosts --filter critical

  # Group by CVE, headers only
  nessuslens scan.json --group-by-cve --collapse

  # Compare two scans
  nessuslens --diff baseline.json latest.json

  # Export encrypted CSV + JSON
  nessuslens scan.json --export-dir ./out --formats csv,json --encrypt
""",
    )

    # Load persisted defaults (best-effort).
    persisted_defaults = {}
    try:
        persisted_defaults = get_persistent_defaults()
    except Exception:
        persisted_defaults = {}

    # Apply persisted defaults with safe validation/fallbacks.
    default_sort = persisted_defaults.get("sort_field")
    if default_sort not in SORT_FIELDS:
        default_sort = DEFAULT_SORT_FIELD

    default_order = persisted_defaults.get("sort_direction")
    if default_order not in SORT_DIRECTIONS:
        default_order = DEFAULT_SORT_DIRECTION

    default_filter = persisted_defaults.get("filter")
    if default_filter not in FILTER_TYPES:
        default_filter = "all"

    default_workers = persisted_defaults.get("max_workers")
    if not isinstance(default_workers, int) or not (MIN_WORKERS <= default_workers <= MAX_WORKERS):
        default_workers = DEFAULT_WORKERS

    default_output = persisted_defaults.get("output_dir")
    if not isinstance(default_output, str) or not default_output.strip():
        default_output = None

    default_formats = persisted_defaults.get("export_formats")
    if not isinstance(default_formats, list) or not all(
        f in EXPORT_FORMATS for f in default_formats
    ):
        default_formats = list(DEFAULT_EXPORT_FORMATS)

    parser.add_argument(
        "scans",
        nargs="*",
        help="Finding documents (JSON or JSONL) written by the Nessus importer",
    )
    parser.add_argument(
        "--filter",
        "-f",
        choices=FILTER_TYPES,
        default=default_filter,
        help="Finding category filter (default: %(default)s)",
    )
    parser.add_argument("--search", "-s", default="", help="Case-insensitive free-text search")
    parser.add_argument(
        "--sort",
        choices=SORT_FIELDS,
        default=default_sort,
        help="Sort field (default: %(default)s)",
    )
    parser.add_argument(
        "--order",
        choices=SORT_DIRECTIONS,
        default=default_order,
        help="Sort direction (default: %(default)s)",
    )
    parser.add_argument(
        "--group-by-cve",
        action="store_true",
        default=bool(persisted_defaults.get("group_by_cve")),
        help="Group findings by CVE with group header rows",
    )
    parser.add_argument(
        "--collapse",
        action="store_true",
        default=bool(persisted_defaults.get("collapse_groups")),
        help="With --group-by-cve, show only the header row of each CVE group",
    )
    parser.add_argument("--hosts", action="store_true", help="Show per-host rollup table")
    parser.add_argument(
        "--no-findings", action="store_true", help="Do not print the findings table"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum finding rows to print (0 = no limit)",
    )
    parser.add_argument(
        "--diff",
        nargs=2,
        metavar=("BASELINE", "COMPARISON"),
        help="Compare two scans instead of analyzing one",
    )
    parser.add_argument(
        "--diff-markdown",
        metavar="PATH",
        help="With --diff, also save the comparison as Markdown",
    )
    parser.add_argument(
        "--export-dir",
        "-o",
        default=default_output,
        help="Export the (filtered) findings into this directory",
    )
    parser.add_argument(
        "--formats",
        type=_parse_formats,
        default=default_formats,
        help=f"Comma-separated export formats ({', '.join(EXPORT_FORMATS)})",
    )
    parser.add_argument(
        "--encrypt", "-e", action="store_true", help="Encrypt exported files (AES-128)"
    )
    parser.add_argument(
        "--encrypt-password",
        metavar="PASSWORD",
        help="Password for --encrypt (prompted when omitted)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=default_workers,
        help=f"Concurrent scan loaders ({MIN_WORKERS}-{MAX_WORKERS}, default: %(default)s)",
    )
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Persist the current sort/filter/grouping/export options as defaults",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Echo INFO logs to stderr")
    parser.add_argument("--version", "-V", action="version", version=f"NessusLens v{VERSION}")

    args = parser.parse_args(argv)

    if not args.diff and not args.scans:
        parser.error("at least one scan file is required (or use --diff BASELINE COMPARISON)")
    if not (MIN_WORKERS <= args.workers <= MAX_WORKERS):
        parser.error(f"--workers must be between {MIN_WORKERS} and {MAX_WORKERS}")
    if args.encrypt_password and len(args.encrypt_password) < MIN_PASSWORD_LENGTH:
        parser.error(f"--encrypt-password must be at least {MIN_PASSWORD_LENGTH} characters")
    return args


def _save_defaults(args: argparse.Namespace) -> bool:
    return update_persistent_defaults(
        sort_field=args.sort,
        sort_direction=args.order,
        filter=args.filter,
        group_by_cve=args.group_by_cve,
        collapse_groups=args.collapse,
        output_dir=args.export_dir,
        export_formats=args.formats,
        max_workers=args.workers,
    )


def run_diff(args: argparse.Namespace, console, logger: logging.Logger) -> int:
    baseline_path, comparison_path = args.diff
    print_status(console, f"Comparing scans: {baseline_path} vs {comparison_path}")
    scans, failures = load_scans([baseline_path, comparison_path], max_workers=args.workers)
    for path, exc in failures.items():
        print_status(console, f"Could not load {path}: {exc.reason}", "FAIL")
    if failures or len(scans) != 2:
        return 1

    diff = generate_diff_report(scans[0], scans[1])
    if console.is_terminal:
        render_diff(console, diff)
    else:
        # Plain-text rendering for pipes and redirects.
        console.print(format_diff_text(diff), markup=False, highlight=False)
    logger.info(
        "Diff %s -> %s: %d new, %d resolved",
        baseline_path,
        comparison_path,
        diff["summary"]["total_new"],
        diff["summary"]["total_resolved"],
    )

    if args.diff_markdown:
        with open(args.diff_markdown, "w", encoding="utf-8") as f:
            f.write(format_diff_markdown(diff))
        try:
            os.chmod(args.diff_markdown, SECURE_FILE_MODE)
        except OSError:
            logger.debug("Failed to chmod %s", args.diff_markdown, exc_info=True)
        print_status(console, f"Markdown report saved: {args.diff_markdown}", "OK")
    return 0


def run_analysis(args: argparse.Namespace, console, logger: logging.Logger) -> int:
    scans, failures = load_scans(args.scans, max_workers=args.workers)
    for path, exc in failures.items():
        print_status(console, f"Could not load {path}: {exc.reason}", "FAIL")
    if not scans:
        return 1

    encryption_key = salt = None
    if args.export_dir and args.encrypt:
        password = args.encrypt_password or ask_password_twice("Encryption password", console)
        encryption_key, salt = derive_key_from_password(password)

    for scan in scans:
        analysis = analyze_scan(scan)
        render_summary(console, analysis)
        if args.hosts:
            render_hosts(console, analysis.hosts)

        view = filter_findings(analysis.findings, args.filter, args.search)
        view = sort_findings(view, args.sort, args.order)
        if args.group_by_cve:
            # Grouping defines the order; sort first so members keep the requested order.
            view = group_findings_by_cve(
                view, include_headers=True, collapse_members=args.collapse
            )
        if not args.no_findings:
            if args.limit is None:
                render_findings(console, view)
            else:
                render_findings(console, view, limit=args.limit)

        if args.export_dir:
            filtered = analysis
            if args.filter != "all" or args.search:
                kept = filter_findings(analysis.findings, args.filter, args.search)
                filtered = analyze_scan(ScanData(meta=scan.meta, findings=kept))
            output_dir = os.path.expanduser(args.export_dir)
            exported = export_all(
                filtered,
                output_dir,
                formats=args.formats,
                encryption_key=encryption_key,
                salt=salt,
            )
            for path in exported["files"]:
                print_status(console, f"Saved: {path}", "OK")

    if failures:
        print_status(console, f"{len(failures)} scan(s) could not be loaded", "WARN")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for NessusLens CLI."""
    args = parse_arguments(argv)
    logger = setup_logging(console_level=logging.INFO if args.verbose else logging.ERROR)
    console = make_console(no_color=args.no_color)

    if args.save_defaults:
        if _save_defaults(args):
            print_status(console, "Defaults saved", "OK")
        else:
            print_status(console, "Could not save defaults", "WARN")

    if args.diff:
        return run_diff(args, console, logger)
    return run_analysis(args, console, logger)


if __name__ == "__main__":
    sys.exit(main())
