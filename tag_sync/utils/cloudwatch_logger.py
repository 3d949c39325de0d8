# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Optional CloudWatch Logs handler for sync run logs."""

import logging
import sys
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CloudWatchHandler(logging.Handler):
    """Logging handler that ships each record to a CloudWatch log stream."""

    def __init__(self, log_group: str, log_stream: str, region: str = "us-east-1"):
        """
        Initialize the handler and make sure the group and stream exist.

        Args:
            log_group: CloudWatch log group name
            log_stream: CloudWatch log stream name
            region: AWS region for CloudWatch Logs
        """
        super().__init__()
        self.log_group = log_group
        self.log_stream = log_stream
        self.region = region
        self.client = boto3.client("logs", region_name=region)
        self._ensure_log_group_and_stream()

    def _ensure_log_group_and_stream(self) -> None:
        """Create log group and stream, tolerating ones that already exist."""
        try:
            self.client.create_log_group(logGroupName=self.log_group)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceAlreadyExistsException":
                raise

        try:
            self.client.create_log_stream(
                logGroupName=self.log_group,
                logStreamName=self.log_stream,
            )
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceAlreadyExistsException":
                raise

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.client.put_log_events(
                logGroupName=self.log_group,
                logStreamName=self.log_stream,
                logEvents=[
                    {
                        "message": self.format(record),
                        "timestamp": int(record.created * 1000),
                    }
                ],
            )
        except (ClientError, BotoCoreError):
            # A logging handler must not raise into the caller
            self.handleError(record)


def default_log_stream() -> str:
    """Stream name for one CLI run, e.g. ``tag-sync-20260101T120000Z``."""
    return f"tag-sync-{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}"


def configure_cloudwatch_logging(
    log_group: str,
    log_stream: str | None = None,
    region: str = "us-east-1",
) -> CloudWatchHandler | None:
    """
    Attach a CloudWatch handler to the root logger.

    Setup failures are reported on stderr and leave console logging in place.

    Args:
        log_group: CloudWatch log group name
        log_stream: CloudWatch log stream name (one per run when not given)
        region: AWS region for CloudWatch Logs

    Returns:
        The attached handler, or None if setup failed
    """
    log_stream = log_stream or default_log_stream()

    try:
        handler = CloudWatchHandler(log_group=log_group, log_stream=log_stream, region=region)
    except (ClientError, BotoCoreError) as e:
        print(f"Failed to configure CloudWatch logging: {e}", file=sys.stderr)
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)

    logging.getLogger(__name__).info(
        f"CloudWatch logging configured: group={log_group}, stream={log_stream}"
    )
    return handler
