# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""AWS client wrapper for EC2 tagging and the SSM default-tag parameter."""

import asyncio
import json
import logging
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..models.resource import Instance, Snapshot, Volume
from ..models.tags import Tag
from ..utils.tag_utils import tags_from_aws, tags_to_aws

logger = logging.getLogger(__name__)


class AWSAPIError(Exception):
    """Raised when AWS API calls fail."""

    def __init__(self, message: str, error_code: str = ""):
        super().__init__(message)
        self.error_code = error_code


class DefaultTagsError(Exception):
    """Raised when the default-tag parameter is missing, empty or malformed."""
    pass


class AWSClient:
    """
    Wrapper around the boto3 EC2 and SSM clients.

    Every call is attempted exactly once; failures are wrapped in
    AWSAPIError and propagate to the caller. Blocking boto3 calls run in
    the default executor so the pipeline can await them one at a time.
    """

    def __init__(self, region: str = "us-east-1"):
        """
        Initialize AWS clients.

        Args:
            region: AWS region to use for EC2 and SSM
        """
        config = Config(
            region_name=region,
            retries={
                "max_attempts": 1,
                "mode": "standard"
            }
        )

        self.region = region
        self.ec2 = boto3.client("ec2", config=config)
        self.ssm = boto3.client("ssm", config=config)

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a boto3 call in the executor and wrap its errors.

        Args:
            operation: Human-readable operation name for error messages
            func: Boto3 client method (or helper) to call
            *args: Positional arguments for the method
            **kwargs: Keyword arguments for the method

        Returns:
            Response from AWS API

        Raises:
            AWSAPIError: If the call fails
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, lambda: func(*args, **kwargs))
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            raise AWSAPIError(
                f"AWS API error in {operation}: {error_code} - {str(e)}", error_code
            ) from e
        except BotoCoreError as e:
            raise AWSAPIError(f"Boto3 error in {operation}: {str(e)}") from e

    def _paginate(self, method: str, result_key: str, **kwargs) -> list[dict[str, Any]]:
        """Collect every item under ``result_key`` across all pages of an EC2 call."""
        paginator = self.ec2.get_paginator(method)
        items: list[dict[str, Any]] = []
        for page in paginator.paginate(**kwargs):
            items.extend(page.get(result_key, []))
        return items

    async def list_instances(self) -> list[Instance]:
        """
        Fetch every EC2 instance in the region with its tags and EBS volume IDs.

        Returns:
            List of Instance models
        """
        reservations = await self._call(
            "DescribeInstances", self._paginate, "describe_instances", "Reservations"
        )

        instances = []
        for reservation in reservations:
            for instance in reservation.get("Instances", []):
                volume_ids = [
                    mapping["Ebs"]["VolumeId"]
                    for mapping in instance.get("BlockDeviceMappings", [])
                    if mapping.get("Ebs", {}).get("VolumeId")
                ]
                instances.append(
                    Instance(
                        instance_id=instance["InstanceId"],
                        tags=tags_from_aws(instance.get("Tags")),
                        volume_ids=volume_ids,
                    )
                )

        logger.info(f"Fetched {len(instances)} EC2 instances in {self.region}")
        return instances

    async def list_volumes(self) -> dict[str, Volume]:
        """
        Fetch every EBS volume in the region.

        Returns:
            Dictionary of Volume models keyed by volume ID
        """
        raw_volumes = await self._call(
            "DescribeVolumes", self._paginate, "describe_volumes", "Volumes"
        )

        volumes = {
            volume["VolumeId"]: Volume(
                volume_id=volume["VolumeId"],
                tags=tags_from_aws(volume.get("Tags")),
            )
            for volume in raw_volumes
        }

        logger.info(f"Fetched {len(volumes)} EBS volumes in {self.region}")
        return volumes

    async def list_snapshots(self) -> dict[str, Snapshot]:
        """
        Fetch every EBS snapshot owned by this account.

        Returns:
            Dictionary of Snapshot models keyed by snapshot ID
        """
        raw_snapshots = await self._call(
            "DescribeSnapshots",
            self._paginate,
            "describe_snapshots",
            "Snapshots",
            OwnerIds=["self"],
        )

        snapshots = {
            snapshot["SnapshotId"]: Snapshot(
                snapshot_id=snapshot["SnapshotId"],
                volume_id=snapshot.get("VolumeId"),
                tags=tags_from_aws(snapshot.get("Tags")),
            )
            for snapshot in raw_snapshots
        }

        logger.info(f"Fetched {len(snapshots)} EBS snapshots in {self.region}")
        return snapshots

    async def get_default_tags(self, parameter_name: str) -> dict[str, str]:
        """
        Read the default tag set from an SSM parameter holding a JSON object.

        Args:
            parameter_name: Name of the SSM parameter

        Returns:
            Dictionary of default tag key-value pairs

        Raises:
            DefaultTagsError: If the parameter is missing, empty, or not a
                JSON object of strings
            AWSAPIError: If the SSM call fails for any other reason
        """
        try:
            response = await self._call(
                "GetParameter", self.ssm.get_parameter, Name=parameter_name
            )
        except AWSAPIError as e:
            if e.error_code == "ParameterNotFound":
                raise DefaultTagsError(f"Parameter {parameter_name} not found") from e
            raise

        value = response.get("Parameter", {}).get("Value")
        if not value:
            raise DefaultTagsError(f"Parameter {parameter_name} not found or has no value")

        try:
            tags = json.loads(value)
        except json.JSONDecodeError as e:
            raise DefaultTagsError(f"Parameter {parameter_name} is not valid JSON: {e}") from e

        if not isinstance(tags, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in tags.items()
        ):
            raise DefaultTagsError(
                f"Parameter {parameter_name} must be a JSON object of string values"
            )
        if not tags:
            raise DefaultTagsError(f"Parameter {parameter_name} has no tags")

        return tags

    async def create_tags(self, resource_ids: list[str], tags: list[Tag]) -> None:
        """
        Add or overwrite tags on resources.

        Args:
            resource_ids: IDs of the resources to tag
            tags: Tags to set
        """
        await self._call(
            "CreateTags",
            self.ec2.create_tags,
            Resources=resource_ids,
            Tags=tags_to_aws(tags),
        )

    async def delete_tags(self, resource_ids: list[str], tags: list[Tag]) -> None:
        """
        Delete tags from resources.

        Tags are deleted by key and value, so a tag whose value changed since
        it was read is left in place.

        Args:
            resource_ids: IDs of the resources to untag
            tags: Tags to delete
        """
        await self._call(
            "DeleteTags",
            self.ec2.delete_tags,
            Resources=resource_ids,
            Tags=tags_to_aws(tags),
        )
