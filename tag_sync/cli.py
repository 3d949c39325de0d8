# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""
Command-line entry point for tag-sync.

Usage:
    tag-sync backup-tags
    tag-sync apply-default-tags
    tag-sync sync-to-volumes
    tag-sync sync-to-snapshots
    tag-sync sync-from-csv <csv-file> [--yes]
    tag-sync restore-backup <backup-file>
    tag-sync full-sync [csv-file] [--yes]

Dry-run, overwrite and deletion policy come from environment variables
(see tag_sync.config.Settings); every resource class is dry-run by default.
"""

import argparse
import asyncio
import logging
import sys

from . import __version__
from .clients.aws_client import AWSAPIError, AWSClient, DefaultTagsError
from .config import Settings, get_settings
from .models.sync import FullSyncResult, StageResult
from .services.backup_service import (
    BackupFormatError,
    BackupNotFoundError,
    BackupService,
    BackupWriteError,
)
from .services.confirmation import InteractiveConfirmer, StaticConfirmer
from .services.csv_service import CsvFormatError
from .services.propagation_pipeline import PropagationPipeline
from .utils.cloudwatch_logger import LOG_FORMAT, configure_cloudwatch_logging

logger = logging.getLogger(__name__)

COMMANDS = {
    "backup-tags": "Back up every instance's tags to a timestamped JSON file",
    "apply-default-tags": "Apply the SSM default tags to every instance",
    "sync-to-volumes": "Copy instance tags (except Name) to attached volumes",
    "restore-backup": "Re-apply the tags stored in a backup file (requires <file>)",
    "sync-from-csv": "Make instance tags match a CSV declaration (requires <file>)",
    "sync-to-snapshots": "Copy volume tags to their snapshots",
    "full-sync": "Backup, CSV sync, default tags, volumes, snapshots ([file] optional)",
}

FILE_COMMANDS = {"restore-backup", "sync-from-csv"}

# Errors that abort the command with a non-zero exit status
CONFIGURATION_ERRORS = (
    DefaultTagsError,
    BackupNotFoundError,
    BackupFormatError,
    BackupWriteError,
    CsvFormatError,
    AWSAPIError,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tag-sync command."""
    epilog = "commands:\n" + "\n".join(
        f"  {name:<20}{description}" for name, description in COMMANDS.items()
    )
    parser = argparse.ArgumentParser(
        prog="tag-sync",
        description="Propagate and reconcile EC2 instance, volume and snapshot tags.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", help="Command to run (see below)")
    parser.add_argument("file", nargs="?", help="CSV or backup file for the command")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm tag deletion without prompting",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(log_level: str) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # boto is chatty at DEBUG
    logging.getLogger("botocore").setLevel(max(numeric_level, logging.INFO))
    logging.getLogger("boto3").setLevel(max(numeric_level, logging.INFO))


def build_pipeline(config: Settings, assume_yes: bool = False) -> PropagationPipeline:
    """
    Wire a PropagationPipeline from settings.

    Args:
        config: Application settings
        assume_yes: Confirm deletions without prompting

    Returns:
        Ready-to-run pipeline
    """
    return PropagationPipeline(
        aws_client=AWSClient(region=config.aws_region),
        options=config.to_sync_options(),
        backup_service=BackupService(config.backup_dir),
        confirmer=StaticConfirmer(True) if assume_yes else InteractiveConfirmer(),
        default_tags_parameter=config.default_tags_parameter,
    )


def _log_stage(result: StageResult) -> None:
    reported = sum(1 for m in result.mutations if m.dry_run)
    applied = len(result.mutations) - reported
    logger.info(
        f"{result.stage}: {applied} mutations applied, {reported} reported (dry run), "
        f"{len(result.skipped)} resources skipped"
    )


async def run_command(pipeline: PropagationPipeline, command: str, file: str | None) -> int:
    """
    Dispatch one command to the pipeline.

    Args:
        pipeline: Pipeline to run against
        command: Command name (one of COMMANDS)
        file: File argument, when the command takes one

    Returns:
        Process exit status
    """
    if command == "backup-tags":
        await pipeline.backup_tags()
        return 0

    if command == "apply-default-tags":
        result = await pipeline.apply_default_tags()
    elif command == "sync-to-volumes":
        result = await pipeline.sync_to_volumes()
    elif command == "sync-to-snapshots":
        result = await pipeline.sync_to_snapshots()
    elif command == "sync-from-csv":
        result = await pipeline.sync_from_csv(file)
    elif command == "restore-backup":
        result = await pipeline.restore_backup(file)
    else:
        full: FullSyncResult = await pipeline.full_sync(file)
        for stage in full.stages:
            _log_stage(stage)
        return 1 if full.errors else 0

    _log_stage(result)
    return 0


def main(argv: list[str] | None = None, pipeline: PropagationPipeline | None = None) -> int:
    """
    Main entry point for the tag-sync CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        pipeline: Pre-built pipeline (built from settings when omitted)

    Returns:
        Process exit status: 0 on success, 1 on configuration errors or a
        missing file argument, 2 for an unknown command
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command not in COMMANDS:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        parser.print_help()
        return 2

    if args.command in FILE_COMMANDS and not args.file:
        print(f"Command '{args.command}' requires a file argument", file=sys.stderr)
        parser.print_usage()
        return 1

    if pipeline is None:
        config = get_settings()
        configure_logging(config.log_level)
        if config.cloudwatch_enabled:
            configure_cloudwatch_logging(
                log_group=config.cloudwatch_log_group,
                log_stream=config.cloudwatch_log_stream,
                region=config.aws_region,
            )
        pipeline = build_pipeline(config, assume_yes=args.yes)

    logger.info(f"Running {args.command}")
    try:
        return asyncio.run(run_command(pipeline, args.command, args.file))
    except CONFIGURATION_ERRORS as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
