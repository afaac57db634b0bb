"""Command-line entry point for dirmirror.

Loads configuration (CLI > env/.env > YAML > defaults), sets up the
timestamped run log, runs the ``MirrorEngine`` and prints the report.

Exit codes:
    0 -- completed, every operation succeeded
    1 -- fatal error before or during scanning (nothing was applied)
    3 -- completed, but at least one operation failed
    130 -- interrupted
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import LoggingConfig, build_config
from .logger import build_log_path, setup_logging
from .sync.engine import MirrorEngine
from .sync.errors import ScanError
from .sync.models import OperationRecord
from .sync.reporter import (
    format_dry_run_preview,
    format_record,
    format_sync_report,
    report_to_json,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_DEGRADED = 3
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirmirror",
        description="Mirror a source directory tree into a destination directory tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Mirror with roots from .env or .dirmirror/config.yml
  dirmirror

  # Explicit roots
  dirmirror -s /data/photos -d /mnt/backup/photos -l /var/log/dirmirror

  # Preview without touching the destination
  dirmirror -s /data/photos -d /mnt/backup/photos -l ./logs --dry-run

  # Echo every operation and stop on failures
  dirmirror -s src -d dst -l logs --console --pause-on-error

Files are compared by size and modification time only; contents are not read.
        """,
    )

    parser.add_argument(
        "-s",
        "--source",
        help="Source directory (overrides DIRMIRROR_SOURCE and config files)",
    )
    parser.add_argument(
        "-d",
        "--destination",
        help="Destination directory, created if missing "
        "(overrides DIRMIRROR_DESTINATION and config files)",
    )
    parser.add_argument(
        "-l",
        "--log-dir",
        help="Directory for timestamped run logs, created if missing "
        "(overrides DIRMIRROR_LOG_DIR and config files)",
    )
    parser.add_argument(
        "--console",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Echo per-item outcomes to the console as well as the log file",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Glob pattern skipped in both trees (repeatable)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show planned operations without applying them",
    )
    parser.add_argument(
        "--pause-on-error",
        action="store_true",
        help="Wait for Enter after each failed operation (interactive only)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--debug-format",
        choices=["text", "json"],
        default=None,
        help="Log line format (default: text, or logging.format from config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"dirmirror version {__version__}",
    )
    return parser


def make_pause_handler(enabled: bool):
    """Return an ``on_record`` callback that pauses after failures.

    Pausing only happens when *enabled* and stdin is a terminal, so
    scheduled runs never block.
    """
    if not enabled or not sys.stdin.isatty():
        return None

    def _pause(record: OperationRecord) -> None:
        if record.success:
            return
        print(f"\n{format_record(record)}", file=sys.stderr)
        input("Press Enter to continue...")

    return _pause


def _load_run_config(
    args: argparse.Namespace,
) -> tuple[Config, LoggingConfig]:
    """Resolve the run config and the logging section of the config file."""
    load_dotenv()

    unified = build_config(load_hierarchical_config())
    config_files = discover_config_files()
    if config_files:
        logger.debug("Using config file: %s", config_files[0])

    config = load_config(
        source=args.source,
        destination=args.destination,
        log_dir=args.log_dir,
        console=args.console,
        debug=args.debug,
        exclude=args.exclude,
        yaml_fallbacks=unified.mirror.model_dump(exclude_none=True),
    )
    return config, unified.logging


def main(argv: list[str] | None = None) -> int:
    """Run one mirror pass and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config, logging_config = _load_run_config(args)
    except (ValueError, ValidationError, OSError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    log_file = build_log_path(config.log_dir)
    setup_logging(
        log_file=log_file,
        console=config.console,
        debug=config.debug,
        debug_format=args.debug_format or logging_config.format,
        level=logging_config.level,
    )
    logger.info("dirmirror %s, log file %s", __version__, log_file)

    engine = MirrorEngine(
        source_root=config.source,
        destination_root=config.destination,
        exclude=config.exclude,
        on_record=make_pause_handler(args.pause_on_error),
    )

    try:
        report = engine.run(dry_run=args.dry_run)
    except ScanError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    elif report.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))

    return EXIT_DEGRADED if report.summary.has_failures else EXIT_OK


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    run()
