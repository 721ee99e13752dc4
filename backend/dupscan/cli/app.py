from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config.settings import GROUP_ORDERS, load_settings
from ..scanner.errors import ScanError
from ..scanner.models import ScanPreferences
from .services.scan_service import ScanService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dupscan",
        description="Find files with identical content and append them to a report file.",
    )
    parser.add_argument("output", type=Path, help="Report file to append duplicate groups to.")
    parser.add_argument("root", type=Path, help="Directory to scan.")
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of hashing threads (default: DUPSCAN_WORKERS or CPU count).",
    )
    parser.add_argument(
        "--order",
        choices=GROUP_ORDERS,
        help="Order of the groups in the report (default: DUPSCAN_ORDER or first-seen).",
    )
    parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        metavar="NAME",
        help="Directory name to skip while walking. Repeatable.",
    )
    parser.add_argument(
        "--ext",
        action="append",
        default=[],
        metavar="EXT",
        help="Only hash files with this extension. Repeatable.",
    )
    parser.add_argument("--max-size-mb", type=float, help="Skip files larger than this.")
    parser.add_argument(
        "--follow-symlinks",
        action="store_true",
        help="Follow symbolic links (no cycle detection).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the analysis as JSON instead of a text summary.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Logging level (default: DUPSCAN_LOG_LEVEL or INFO).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    try:
        settings = load_settings()
    except ScanError as exc:
        print(json.dumps({"error": exc.code, "message": str(exc)}), file=sys.stderr)
        return 1

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    preferences = ScanPreferences(
        allowed_extensions=args.ext or None,
        excluded_dirs=args.exclude_dir or None,
        max_file_size_bytes=int(args.max_size_mb * 1024 * 1024) if args.max_size_mb is not None else None,
        follow_symlinks=args.follow_symlinks,
    )

    service = ScanService(settings=settings)
    try:
        run = service.run_scan(
            args.output,
            args.root,
            workers=args.workers,
            preferences=preferences,
            order=args.order,
        )
    except ScanError as exc:
        logger.error(str(exc))
        print(json.dumps({"error": exc.code, "message": str(exc)}), file=sys.stderr)
        return 1

    for label, seconds in run.timings:
        logger.debug(f"{label}: {seconds:.3f}s")

    detection = service.detection_service
    if args.json:
        print(json.dumps(detection.export_duplicates_json(run.analysis), indent=2))
    else:
        print(detection.format_duplicate_summary(run.analysis))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
