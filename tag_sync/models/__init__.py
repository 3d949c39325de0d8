"""Data models for tag-sync."""

from .tags import Tag, TagDiff, TagSet
from .resource import Instance, ResourceType, Snapshot, Volume
from .csv_record import CsvTagRecord
from .backup import BackupRecord
from .sync import (
    FullSyncResult,
    MutationAction,
    StageResult,
    SyncOptions,
    TagMutation,
)

__all__ = [
    "Tag",
    "TagDiff",
    "TagSet",
    "Instance",
    "ResourceType",
    "Snapshot",
    "Volume",
    "CsvTagRecord",
    "BackupRecord",
    "FullSyncResult",
    "MutationAction",
    "StageResult",
    "SyncOptions",
    "TagMutation",
]
