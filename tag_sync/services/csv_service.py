# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Parsing of tag declaration CSV files (Tag Editor export format)."""

import csv
import logging
from pathlib import Path

from ..models.csv_record import CsvTagRecord

logger = logging.getLogger(__name__)

TAG_COLUMN_PREFIX = "Tag: "
NOT_TAGGED = "(not tagged)"

REQUIRED_COLUMNS = ["Identifier"]


class CsvFormatError(Exception):
    """Raised when a tag CSV file is missing or malformed."""
    pass


def parse_tag_row(row: dict[str, str | None]) -> CsvTagRecord:
    """
    Turn one CSV row into a CsvTagRecord.

    Columns named ``Tag: <key>`` become tags; cells holding the
    ``(not tagged)`` sentinel or nothing at all are dropped.

    Args:
        row: Mapping of column header to cell value

    Returns:
        The parsed record
    """
    tags: dict[str, str] = {}
    for column, value in row.items():
        if column is None or not column.startswith(TAG_COLUMN_PREFIX):
            continue
        if value is None or value == "" or value == NOT_TAGGED:
            continue
        tags[column[len(TAG_COLUMN_PREFIX):]] = value

    return CsvTagRecord(
        identifier=row.get("Identifier") or "",
        service=row.get("Service") or "",
        type=row.get("Type") or "",
        region=row.get("Region") or "",
        arn=row.get("ARN") or "",
        tags=tags,
    )


def parse_tag_csv(path: str | Path) -> list[CsvTagRecord]:
    """
    Read a tag declaration CSV.

    Args:
        path: Path to the CSV file

    Returns:
        One record per non-blank data row

    Raises:
        CsvFormatError: If the file does not exist, cannot be read or decoded,
            or lacks required headers
    """
    path = Path(path)
    if not path.exists():
        raise CsvFormatError(f"CSV file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            headers = reader.fieldnames or []
            missing = [column for column in REQUIRED_COLUMNS if column not in headers]
            if missing:
                raise CsvFormatError(
                    f"CSV file {path} is missing columns: {', '.join(missing)}"
                )

            records = [parse_tag_row(row) for row in reader]
    except UnicodeDecodeError as e:
        raise CsvFormatError(f"CSV file {path} is not UTF-8 encoded: {e}") from e
    except (csv.Error, OSError) as e:
        raise CsvFormatError(f"Could not read CSV file {path}: {e}") from e

    records = [record for record in records if record.identifier]
    logger.info(f"Parsed {len(records)} tag records from {path}")
    return records
