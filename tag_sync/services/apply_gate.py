# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Dry-run / apply gate: the single path through which tags are mutated."""

import logging

from ..clients.aws_client import AWSClient
from ..models.resource import ResourceType
from ..models.sync import MutationAction, TagMutation
from ..models.tags import Tag, TagDiff

logger = logging.getLogger(__name__)


def _format_tags(tags: list[Tag]) -> str:
    return ", ".join(f"{tag.key}={tag.value!r}" for tag in tags)


class ApplyGate:
    """
    Either reports or performs a computed tag diff, never both.

    Pipeline stages and restore hand every diff to this gate; nothing else
    calls the mutating AWSClient methods.
    """

    def __init__(self, aws_client: AWSClient):
        """
        Initialize the gate.

        Args:
            aws_client: Client used for live create/delete tag calls
        """
        self.aws_client = aws_client

    async def apply(
        self,
        resource_id: str,
        resource_type: ResourceType,
        diff: TagDiff,
        dry_run: bool,
    ) -> list[TagMutation]:
        """
        Report or perform the diff on one resource.

        Deletions are issued before additions so a key that is both removed
        and re-added ends up with the new value.

        Args:
            resource_id: ID of the resource to tag
            resource_type: Kind of resource, used in log output
            diff: Tags to apply and delete
            dry_run: Report the mutation instead of performing it

        Returns:
            One TagMutation per non-empty side of the diff

        Raises:
            AWSAPIError: If a live tagging call fails
        """
        label = f"{resource_type.value} '{resource_id}'"

        if diff.is_empty:
            logger.info(f"No tags to change on {label}")
            return []

        mutations: list[TagMutation] = []
        for action, tags in (
            (MutationAction.DELETE, diff.to_delete),
            (MutationAction.CREATE, diff.to_apply),
        ):
            if not tags:
                continue

            verb = "delete" if action == MutationAction.DELETE else "apply"
            if dry_run:
                logger.info(f"DRY RUN: Would {verb} tags on {label}: {_format_tags(tags)}")
            else:
                logger.info(f"Applying tag {action.value} on {label}: {_format_tags(tags)}")
                if action == MutationAction.DELETE:
                    await self.aws_client.delete_tags([resource_id], tags)
                else:
                    await self.aws_client.create_tags([resource_id], tags)
                logger.info(f"Tag {action.value} complete on {label}")

            mutations.append(
                TagMutation(
                    resource_id=resource_id,
                    resource_type=resource_type,
                    action=action,
                    tags=list(tags),
                    dry_run=dry_run,
                )
            )

        return mutations
