# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Parsed CSV tag declaration model."""

from pydantic import BaseModel, Field


class CsvTagRecord(BaseModel):
    """One row of a tag declaration CSV export."""

    identifier: str = Field(..., description="Resource identifier (EC2 instance ID)")
    service: str = Field("", description="AWS service name, descriptive only")
    type: str = Field("", description="Resource type, descriptive only")
    region: str = Field("", description="AWS region, descriptive only")
    arn: str = Field("", description="Resource ARN, descriptive only")
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Desired tags taken from the 'Tag: <key>' columns"
    )
