# butterknife_removal/main.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConversionMode, get_settings
from .logging_config import configure_logging
from .translator.batch import CONVERTED, FAILED, SKIPPED, UNCHANGED, process_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="butterknife-removal",
        description="ButterKnife -> findViewById / View Binding converter",
    )
    parser.add_argument(
        "path",
        help="Java file or source directory (e.g., app/src/main/java)",
    )
    parser.add_argument(
        "--file-only",
        action="store_true",
        help="Convert only the given file",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ConversionMode],
        default=None,
        help="What bound fields become (default: view_binding)",
    )
    parser.add_argument(
        "--project-root",
        default=None,
        help="Gradle project root used to find res/layout*/ (default: detected)",
    )
    parser.add_argument(
        "--no-xml",
        action="store_true",
        help="Do not check or add android:id attributes in layouts",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="GLOB",
        help="Extra ignore pattern, relative to the path (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings(
        mode=ConversionMode(args.mode) if args.mode else None,
        validate_xml=False if args.no_xml else None,
        dry_run=True if args.dry_run else None,
        log_level="DEBUG" if args.verbose else None,
    )
    if args.ignore:
        settings = settings.with_overrides(ignore_patterns=settings.ignore_patterns + args.ignore)
    configure_logging(settings.log_level, settings.log_file)

    path = Path(args.path)
    if not path.exists() or (args.file_only and not path.is_file()):
        print(f"[ERROR] Not a file or directory: {path}", file=sys.stderr)
        return 2

    outcomes = process_path(path, settings, file_only=args.file_only, project_root=args.project_root)
    for outcome in outcomes:
        if outcome.status == CONVERTED:
            print(f"Converted: {outcome.path}")
        elif outcome.status == UNCHANGED:
            print(f"Unchanged: {outcome.path}")
        elif outcome.status == SKIPPED:
            print(f"Skipped: {outcome.path}")
        elif outcome.status == FAILED:
            print(f"[ERROR] {outcome.path}: {outcome.message}", file=sys.stderr)
        for line in outcome.report:
            print(f"  {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
