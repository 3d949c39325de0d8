"""Utility modules for tag-sync."""

from .cloudwatch_logger import CloudWatchHandler, configure_cloudwatch_logging
from .tag_utils import is_reserved_tag_key, tag_list, tags_from_aws, tags_to_aws

__all__ = [
    "CloudWatchHandler",
    "configure_cloudwatch_logging",
    "is_reserved_tag_key",
    "tag_list",
    "tags_from_aws",
    "tags_to_aws",
]
