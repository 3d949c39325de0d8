# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Service for backing up instance tags to timestamped JSON files."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ..models.backup import BackupRecord
from ..models.resource import Instance

logger = logging.getLogger(__name__)

BACKUP_FILE_PREFIX = "instance-tags-backup-"


class BackupNotFoundError(Exception):
    """Raised when a backup file to restore does not exist."""
    pass


class BackupFormatError(Exception):
    """Raised when a backup file is not a JSON object of tag objects."""
    pass


class BackupWriteError(Exception):
    """Raised when a backup file cannot be created."""
    pass


def backup_timestamp(moment: datetime) -> str:
    """Format a UTC moment as ISO-8601 with milliseconds, e.g. ``2025-06-14T13:23:35.031Z``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def backup_file_name(moment: datetime) -> str:
    return f"{BACKUP_FILE_PREFIX}{backup_timestamp(moment)}.json"


class BackupService:
    """
    Writes and reads instance tag backups.

    Backups are write-once: a file is created exclusively and never
    rewritten, and restore consumes the stored record as a whole.
    """

    def __init__(self, backup_dir: str | Path = "."):
        """
        Initialize the backup service.

        Args:
            backup_dir: Directory where backup files are written
        """
        self.backup_dir = Path(backup_dir)

    def backup(self, instances: list[Instance], now: datetime | None = None) -> BackupRecord:
        """
        Capture every instance's tags and write them to a new backup file.

        Args:
            instances: Instances whose tags are captured
            now: Capture time (defaults to the current UTC time)

        Returns:
            The written BackupRecord

        Raises:
            BackupWriteError: If the file already exists or the backup
                directory is not writable
        """
        created_at = now or datetime.now(timezone.utc)
        record = {instance.instance_id: dict(instance.tags) for instance in instances}
        path = self.backup_dir / backup_file_name(created_at)

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "x", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
        except FileExistsError as e:
            raise BackupWriteError(f"Backup file {path} already exists") from e
        except OSError as e:
            raise BackupWriteError(f"Could not write backup file {path}: {e}") from e

        logger.info(f"Instance tags backup saved to {path} ({len(record)} instances)")
        return BackupRecord(instances=record, created_at=created_at, path=path)

    def load(self, path: str | Path) -> BackupRecord:
        """
        Read a backup file.

        Args:
            path: Path to the backup file; relative paths that do not exist
                are also looked up in the backup directory

        Returns:
            The stored BackupRecord

        Raises:
            BackupNotFoundError: If the file cannot be located
            BackupFormatError: If the file is not valid backup JSON
        """
        path = Path(path)
        if not path.exists() and not path.is_absolute():
            candidate = self.backup_dir / path
            if candidate.exists():
                path = candidate

        if not path.is_file():
            raise BackupNotFoundError(f"Backup file {path} does not exist or is not a file")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackupFormatError(f"Invalid JSON in backup file {path}: {e}") from e
        except OSError as e:
            raise BackupNotFoundError(f"Could not read backup file {path}: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(tags, dict)
            and all(isinstance(k, str) and isinstance(v, str) for k, v in tags.items())
            for tags in data.values()
        ):
            raise BackupFormatError(
                f"Backup file {path} must map instance IDs to objects of string tags"
            )

        return BackupRecord(instances=data, path=path)
