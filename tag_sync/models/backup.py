# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Instance tag backup model."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BackupRecord(BaseModel):
    """Every instance's tags captured at one point in time."""

    model_config = ConfigDict(frozen=True)

    instances: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Instance ID to the full tag set at capture time"
    )
    created_at: datetime | None = Field(
        None,
        description="When the backup was captured (None when loaded from a file)"
    )
    path: Path | None = Field(
        None,
        description="File the backup was written to or loaded from"
    )
