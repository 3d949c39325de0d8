# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""
Propagation pipeline.

Sequences tag reconciliation across the four levels:

1. default tags (SSM) -> instances
2. instance tags -> attached volumes
3. volume tags -> snapshots
4. CSV declarations -> instances (optionally deleting undeclared tags)

Each stage takes the previous stage's resource snapshot and returns its own
post-stage snapshot in a StageResult. When a stage mutated tags live, the
returned snapshot is re-fetched from AWS so the next stage sees the new tags.
"""

import logging
from pathlib import Path

from ..clients.aws_client import AWSAPIError, AWSClient, DefaultTagsError
from ..models.backup import BackupRecord
from ..models.resource import Instance, ResourceType, Snapshot, Volume
from ..models.sync import FullSyncResult, StageResult, SyncOptions, TagMutation
from ..models.tags import TagDiff
from ..utils.tag_utils import tag_list
from .apply_gate import ApplyGate
from .backup_service import BackupService
from .confirmation import Confirmer, InteractiveConfirmer
from .csv_service import parse_tag_csv
from .diff_engine import (
    INSTANCE_PROTECTED_KEYS,
    NO_PROTECTED_KEYS,
    VOLUME_PROPAGATION_PROTECTED_KEYS,
    compute_tag_diff,
)

logger = logging.getLogger(__name__)

DEFAULT_TAGS_PARAMETER = "/tag-sync/tags"


def _any_live(mutations: list[TagMutation]) -> bool:
    return any(not mutation.dry_run for mutation in mutations)


class PropagationPipeline:
    """
    Orchestrates tag propagation between default tags, instances, volumes
    and snapshots, plus CSV-driven sync and backup restore.

    All policy (overwrite, dry-run, deletion) comes from the SyncOptions
    passed in; every mutation goes through the ApplyGate.
    """

    def __init__(
        self,
        aws_client: AWSClient,
        options: SyncOptions,
        backup_service: BackupService | None = None,
        confirmer: Confirmer | None = None,
        gate: ApplyGate | None = None,
        default_tags_parameter: str = DEFAULT_TAGS_PARAMETER,
    ):
        """
        Initialize the pipeline.

        Args:
            aws_client: Client for fetching resources and default tags
            options: Overwrite, dry-run and deletion policy for this run
            backup_service: Where instance tag backups are written
            confirmer: Asked before any live tag deletion
            gate: Dry-run / apply gate (built from aws_client when omitted)
            default_tags_parameter: SSM parameter holding the default tags
        """
        self.aws_client = aws_client
        self.options = options
        self.backup_service = backup_service or BackupService()
        self.confirmer = confirmer or InteractiveConfirmer()
        self.gate = gate or ApplyGate(aws_client)
        self.default_tags_parameter = default_tags_parameter

    async def backup_tags(self, instances: list[Instance] | None = None) -> BackupRecord:
        """
        Write a backup of every instance's current tags.

        Args:
            instances: Instances to back up (fetched when omitted)

        Returns:
            The written BackupRecord
        """
        if instances is None:
            instances = await self.aws_client.list_instances()
        return self.backup_service.backup(instances)

    async def apply_default_tags(
        self,
        instances: list[Instance] | None = None,
        backup: bool = True,
    ) -> StageResult:
        """
        Apply the default tag set from SSM to every instance.

        Args:
            instances: Current instances (fetched when omitted)
            backup: Back up instance tags before applying

        Returns:
            StageResult whose instances reflect any live changes

        Raises:
            DefaultTagsError: If the default-tag parameter is missing, empty or
                cannot be read
        """
        stage = "apply-default-tags"

        if not self.options.apply_default_tags_to_instances:
            logger.info("Applying default tags to instances is disabled, skipping")
            if instances is None:
                instances = await self.aws_client.list_instances()
            return StageResult(stage=stage, instances=instances)

        try:
            default_tags = await self.aws_client.get_default_tags(self.default_tags_parameter)
        except AWSAPIError as e:
            raise DefaultTagsError(
                f"Could not read default tags from {self.default_tags_parameter}: {e}"
            ) from e
        logger.info(
            f"Loaded {len(default_tags)} default tags from {self.default_tags_parameter}"
        )

        if instances is None:
            instances = await self.aws_client.list_instances()
        if backup:
            self.backup_service.backup(instances)

        mutations: list[TagMutation] = []
        for instance in instances:
            diff = compute_tag_diff(
                instance.tags,
                default_tags,
                overwrite=self.options.overwrite_on_instance_from_default,
                protected_keys=NO_PROTECTED_KEYS,
            )
            mutations.extend(
                await self.gate.apply(
                    instance.instance_id,
                    ResourceType.INSTANCE,
                    diff,
                    dry_run=self.options.dry_run_for(ResourceType.INSTANCE),
                )
            )

        if _any_live(mutations):
            logger.info("Re-fetching instances after applying default tags")
            instances = await self.aws_client.list_instances()

        return StageResult(stage=stage, instances=instances, mutations=mutations)

    async def sync_to_volumes(
        self,
        instances: list[Instance] | None = None,
        volumes: dict[str, Volume] | None = None,
    ) -> StageResult:
        """
        Copy each instance's tags, except any form of ``Name``, to its volumes.

        Args:
            instances: Current instances (fetched when omitted)
            volumes: Current volumes by ID (fetched when omitted)

        Returns:
            StageResult whose volumes reflect any live changes
        """
        stage = "sync-to-volumes"

        if instances is None:
            instances = await self.aws_client.list_instances()
        if volumes is None:
            volumes = await self.aws_client.list_volumes()

        mutations: list[TagMutation] = []
        skipped: list[str] = []

        for instance in instances:
            if not instance.tags:
                logger.info(f"Instance '{instance.instance_id}' has no tags, skipping")
                continue

            for volume_id in instance.volume_ids:
                volume = volumes.get(volume_id)
                if volume is None:
                    message = (
                        f"Volume '{volume_id}' not found for instance '{instance.instance_id}'"
                    )
                    logger.warning(message)
                    skipped.append(message)
                    continue

                diff = compute_tag_diff(
                    volume.tags,
                    instance.tags,
                    overwrite=self.options.overwrite_on_volume_from_instance,
                    protected_keys=VOLUME_PROPAGATION_PROTECTED_KEYS,
                )
                mutations.extend(
                    await self.gate.apply(
                        volume_id,
                        ResourceType.VOLUME,
                        diff,
                        dry_run=self.options.dry_run_for(ResourceType.VOLUME),
                    )
                )

        if _any_live(mutations):
            logger.info("Re-fetching volumes after applying instance tags")
            volumes = await self.aws_client.list_volumes()

        return StageResult(
            stage=stage,
            instances=instances,
            volumes=volumes,
            mutations=mutations,
            skipped=skipped,
        )

    async def sync_to_snapshots(
        self,
        volumes: dict[str, Volume] | None = None,
        snapshots: dict[str, Snapshot] | None = None,
    ) -> StageResult:
        """
        Copy each volume's tags to the snapshots taken from it.

        Snapshot tags that differ from the volume's are always overwritten.

        Args:
            volumes: Current volumes by ID (fetched when omitted)
            snapshots: Current snapshots by ID (fetched when omitted)

        Returns:
            StageResult with the emitted mutations and skipped snapshots
        """
        stage = "sync-to-snapshots"

        if volumes is None:
            volumes = await self.aws_client.list_volumes()
        if snapshots is None:
            snapshots = await self.aws_client.list_snapshots()

        mutations: list[TagMutation] = []
        skipped: list[str] = []

        for snapshot in snapshots.values():
            volume = volumes.get(snapshot.volume_id) if snapshot.volume_id else None
            if volume is None:
                message = (
                    f"Volume '{snapshot.volume_id}' not found for snapshot "
                    f"'{snapshot.snapshot_id}'"
                )
                logger.warning(message)
                skipped.append(message)
                continue

            diff = compute_tag_diff(snapshot.tags, volume.tags, overwrite=True)
            mutations.extend(
                await self.gate.apply(
                    snapshot.snapshot_id,
                    ResourceType.SNAPSHOT,
                    diff,
                    dry_run=self.options.dry_run_for(ResourceType.SNAPSHOT),
                )
            )

        return StageResult(stage=stage, volumes=volumes, mutations=mutations, skipped=skipped)

    async def sync_from_csv(
        self,
        csv_path: str | Path,
        instances: list[Instance] | None = None,
        backup: bool = True,
    ) -> StageResult:
        """
        Make instance tags match a CSV tag declaration.

        Declared tags are added or overwritten. When deletion is enabled,
        undeclared tags (other than ``Name``) are deleted too, after a single
        confirmation covering every instance; declining keeps all tags and
        only applies the additions.

        Args:
            csv_path: Path to the CSV declaration
            instances: Current instances (fetched when omitted)
            backup: Back up instance tags before applying

        Returns:
            StageResult whose instances reflect any live changes

        Raises:
            CsvFormatError: If the CSV file is missing or malformed
        """
        stage = "sync-from-csv"

        records = parse_tag_csv(csv_path)

        if instances is None:
            instances = await self.aws_client.list_instances()
        if backup:
            self.backup_service.backup(instances)

        by_id = {instance.instance_id: instance for instance in instances}
        delete = self.options.delete_tags_from_instances
        skipped: list[str] = []
        planned: list[tuple[Instance, TagDiff]] = []

        for record in records:
            instance = by_id.get(record.identifier)
            if instance is None:
                message = f"Instance '{record.identifier}' from CSV not found"
                logger.warning(message)
                skipped.append(message)
                continue

            diff = compute_tag_diff(
                instance.tags,
                record.tags,
                overwrite=True,
                protected_keys=INSTANCE_PROTECTED_KEYS,
                delete=delete,
            )
            planned.append((instance, diff))

        if delete:
            planned = self._confirm_deletions(planned)

        mutations: list[TagMutation] = []
        for instance, diff in planned:
            mutations.extend(
                await self.gate.apply(
                    instance.instance_id,
                    ResourceType.INSTANCE,
                    diff,
                    dry_run=self.options.dry_run_for(ResourceType.INSTANCE),
                )
            )

        if _any_live(mutations):
            logger.info("Re-fetching instances after applying CSV tags")
            instances = await self.aws_client.list_instances()

        return StageResult(stage=stage, instances=instances, mutations=mutations, skipped=skipped)

    def _confirm_deletions(
        self, planned: list[tuple[Instance, TagDiff]]
    ) -> list[tuple[Instance, TagDiff]]:
        """Ask once before live deletions; strip every deletion if declined."""
        pending = [(instance, diff) for instance, diff in planned if diff.to_delete]
        if not pending:
            logger.info("No tags to delete from instances")
            return planned

        tag_count = sum(len(diff.to_delete) for _, diff in pending)
        for instance, diff in pending:
            keys = ", ".join(tag.key for tag in diff.to_delete)
            logger.info(f"Tags to delete from instance '{instance.instance_id}': {keys}")

        if self.options.dry_run_for(ResourceType.INSTANCE):
            return planned

        prompt = f"Delete {tag_count} tags from {len(pending)} instances?"
        if self.confirmer.confirm(prompt):
            return planned

        logger.warning("Tag deletion not confirmed; only additions will be applied")
        return [(instance, TagDiff(to_apply=diff.to_apply)) for instance, diff in planned]

    async def restore_backup(self, path: str | Path) -> StageResult:
        """
        Resubmit every tag stored in a backup file to its instance.

        Tags are applied as-is without comparing against live tags, and no
        tag is ever deleted. Instances are not checked for existence.

        Args:
            path: Backup file to restore

        Returns:
            StageResult with the emitted mutations

        Raises:
            BackupNotFoundError: If the backup file cannot be located
            BackupFormatError: If the backup file is malformed
        """
        record = self.backup_service.load(path)
        logger.info(f"Restoring tags for {len(record.instances)} instances from {record.path}")

        mutations: list[TagMutation] = []
        for instance_id, tags in record.instances.items():
            mutations.extend(
                await self.gate.apply(
                    instance_id,
                    ResourceType.INSTANCE,
                    TagDiff(to_apply=tag_list(tags), to_delete=[]),
                    dry_run=self.options.dry_run_for(ResourceType.INSTANCE),
                )
            )

        return StageResult(stage="restore-backup", mutations=mutations)

    async def full_sync(self, csv_path: str | Path | None = None) -> FullSyncResult:
        """
        Run every stage in dependency order.

        backup -> CSV sync -> default tags -> volumes -> snapshots. Nested
        backups are skipped since one is taken up front. A default-tag
        failure aborts only that stage; downstream stages still run against
        the instances as they were.

        Args:
            csv_path: CSV declaration to sync from (CSV stage skipped when None)

        Returns:
            FullSyncResult with the backup and each stage's result
        """
        instances = await self.aws_client.list_instances()
        backup = self.backup_service.backup(instances)
        stages: list[StageResult] = []
        errors: list[str] = []

        if csv_path is not None:
            csv_result = await self.sync_from_csv(csv_path, instances=instances, backup=False)
            stages.append(csv_result)
            instances = csv_result.instances
        else:
            logger.info("No CSV file given, skipping CSV sync")

        try:
            default_result = await self.apply_default_tags(instances=instances, backup=False)
        except DefaultTagsError as e:
            logger.error(f"Default tag stage aborted: {e}")
            errors.append(str(e))
            default_result = StageResult(stage="apply-default-tags", instances=instances)
        stages.append(default_result)
        instances = default_result.instances

        volume_result = await self.sync_to_volumes(instances=instances)
        stages.append(volume_result)

        stages.append(await self.sync_to_snapshots(volumes=volume_result.volumes))

        return FullSyncResult(backup=backup, stages=stages, errors=errors)
