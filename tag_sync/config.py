# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Configuration management for tag-sync.

This module handles loading and validating configuration from environment
variables (and an optional .env file) with safe defaults: every resource
class runs in dry-run mode until explicitly switched off.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.sync import SyncOptions


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The tagging policy fields are converted into a SyncOptions value with
    to_sync_options() and passed explicitly to the pipeline.
    """

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region for EC2 and SSM",
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION")
    )
    default_tags_parameter: str = Field(
        default="/tag-sync/tags",
        description="SSM parameter holding the default tags as a JSON object",
        validation_alias="DEFAULT_TAGS_PARAMETER"
    )

    # Backup Configuration
    backup_dir: str = Field(
        default=".",
        description="Directory for instance tag backup files",
        validation_alias="BACKUP_DIR"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="LOG_LEVEL"
    )
    cloudwatch_enabled: bool = Field(
        default=False,
        description="Also ship logs to CloudWatch Logs",
        validation_alias="CLOUDWATCH_ENABLED"
    )
    cloudwatch_log_group: str = Field(
        default="/tag-sync/runs",
        description="CloudWatch log group name",
        validation_alias="CLOUDWATCH_LOG_GROUP"
    )
    cloudwatch_log_stream: Optional[str] = Field(
        default=None,
        description="CloudWatch log stream name (one per run if not set)",
        validation_alias="CLOUDWATCH_LOG_STREAM"
    )

    # Tagging Policy
    overwrite_tags_on_volume_from_instance: bool = Field(
        default=True,
        description="Overwrite volume tags whose value differs from the instance's",
        validation_alias="OVERWRITE_TAGS_ON_VOLUME_FROM_INSTANCE"
    )
    overwrite_tags_on_instance_from_default: bool = Field(
        default=False,
        description="Overwrite instance tags whose value differs from the default",
        validation_alias="OVERWRITE_TAGS_ON_INSTANCE_FROM_DEFAULT"
    )
    apply_default_tags_to_instances: bool = Field(
        default=True,
        description="Apply the SSM default tags to instances",
        validation_alias="APPLY_DEFAULT_TAGS_TO_INSTANCES"
    )
    delete_tags_from_instances: bool = Field(
        default=False,
        description="Delete instance tags missing from the CSV declaration",
        validation_alias="DELETE_TAGS_FROM_INSTANCES"
    )
    dry_run_instances: bool = Field(
        default=True,
        description="Only report instance tag changes",
        validation_alias="DRY_RUN_INSTANCES"
    )
    dry_run_volumes: bool = Field(
        default=True,
        description="Only report volume tag changes",
        validation_alias="DRY_RUN_VOLUMES"
    )
    dry_run_snapshots: bool = Field(
        default=True,
        description="Only report snapshot tag changes",
        validation_alias="DRY_RUN_SNAPSHOTS"
    )

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix for environment variables
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def to_sync_options(self) -> SyncOptions:
        """
        Build the immutable policy value the pipeline runs with.

        Returns:
            SyncOptions mirroring the tagging policy settings
        """
        return SyncOptions(
            overwrite_on_volume_from_instance=self.overwrite_tags_on_volume_from_instance,
            overwrite_on_instance_from_default=self.overwrite_tags_on_instance_from_default,
            apply_default_tags_to_instances=self.apply_default_tags_to_instances,
            delete_tags_from_instances=self.delete_tags_from_instances,
            dry_run_instances=self.dry_run_instances,
            dry_run_volumes=self.dry_run_volumes,
            dry_run_snapshots=self.dry_run_snapshots,
        )


def get_settings() -> Settings:
    """
    Get application settings.

    Loads settings from environment variables and .env file. A fresh
    instance is built on every call; callers pass it on explicitly.

    Returns:
        Settings instance with all configuration values
    """
    return Settings()
