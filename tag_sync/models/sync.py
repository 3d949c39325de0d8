# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Data models for sync options and pipeline stage results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .backup import BackupRecord
from .resource import Instance, ResourceType, Volume
from .tags import Tag


class SyncOptions(BaseModel):
    """
    Overwrite, dry-run and deletion policy for one pipeline run.

    Built from Settings by the CLI and passed explicitly to every
    pipeline entry point.
    """

    model_config = ConfigDict(frozen=True)

    overwrite_on_volume_from_instance: bool = Field(
        default=True,
        description="Overwrite differing volume tags with the instance's value",
    )
    overwrite_on_instance_from_default: bool = Field(
        default=False,
        description="Overwrite differing instance tags with the default value",
    )
    apply_default_tags_to_instances: bool = Field(
        default=True,
        description="Run the default-tag stage at all",
    )
    delete_tags_from_instances: bool = Field(
        default=False,
        description="Delete instance tags that are absent from the CSV declaration",
    )
    dry_run_instances: bool = Field(default=True, description="Report instance changes only")
    dry_run_volumes: bool = Field(default=True, description="Report volume changes only")
    dry_run_snapshots: bool = Field(default=True, description="Report snapshot changes only")

    def dry_run_for(self, resource_type: ResourceType) -> bool:
        """Return the dry-run flag that governs a resource type."""
        if resource_type == ResourceType.INSTANCE:
            return self.dry_run_instances
        if resource_type == ResourceType.VOLUME:
            return self.dry_run_volumes
        return self.dry_run_snapshots


class MutationAction(str, Enum):
    """Kinds of tag mutation passed through the apply gate."""

    CREATE = "create"
    DELETE = "delete"


class TagMutation(BaseModel):
    """A single tag mutation decided by the apply gate."""

    resource_id: str = Field(..., description="ID of the resource being tagged")
    resource_type: ResourceType = Field(..., description="Kind of resource")
    action: MutationAction = Field(..., description="Whether tags are created or deleted")
    tags: list[Tag] = Field(default_factory=list, description="Tags involved")
    dry_run: bool = Field(..., description="True when the mutation was only reported")


class StageResult(BaseModel):
    """Outcome of one pipeline stage, including the post-stage resource snapshot."""

    stage: str = Field(..., description="Stage name")
    instances: list[Instance] = Field(
        default_factory=list,
        description="Instances as the next stage should see them",
    )
    volumes: dict[str, Volume] = Field(
        default_factory=dict,
        description="Volumes by ID as the next stage should see them",
    )
    mutations: list[TagMutation] = Field(
        default_factory=list,
        description="Every mutation the gate applied or reported",
    )
    skipped: list[str] = Field(
        default_factory=list,
        description="Drift warnings for resources that were skipped",
    )


class FullSyncResult(BaseModel):
    """Outcome of a full sync: the backup and every stage in order."""

    backup: BackupRecord = Field(..., description="Backup taken before any mutation")
    stages: list[StageResult] = Field(default_factory=list, description="Stage results in run order")
    errors: list[str] = Field(
        default_factory=list,
        description="Configuration errors that aborted a stage",
    )
