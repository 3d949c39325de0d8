# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""EC2 resource data models."""

from enum import Enum

from pydantic import BaseModel, Field


class ResourceType(str, Enum):
    """Kinds of resources the pipeline tags."""

    INSTANCE = "ec2:instance"
    VOLUME = "ec2:volume"
    SNAPSHOT = "ec2:snapshot"


class Instance(BaseModel):
    """An EC2 instance with its tags and attached EBS volume IDs."""

    instance_id: str = Field(..., description="EC2 instance ID")
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Tags currently on the instance"
    )
    volume_ids: list[str] = Field(
        default_factory=list,
        description="EBS volume IDs from the instance's block-device mappings"
    )


class Volume(BaseModel):
    """An EBS volume with its tags."""

    volume_id: str = Field(..., description="EBS volume ID")
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Tags currently on the volume"
    )


class Snapshot(BaseModel):
    """An EBS snapshot with its tags and source volume."""

    snapshot_id: str = Field(..., description="EBS snapshot ID")
    volume_id: str | None = Field(
        None,
        description="ID of the volume the snapshot was taken from"
    )
    tags: dict[str, str] = Field(
        default_factory=dict,
        description="Tags currently on the snapshot"
    )
