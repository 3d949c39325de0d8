# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Conversions between AWS tag lists and tag dictionaries."""

from ..models.tags import Tag

# Keys AWS sets itself (CloudFormation, Auto Scaling); CreateTags rejects them
RESERVED_TAG_PREFIX = "aws:"


def is_reserved_tag_key(key: str) -> bool:
    return key.lower().startswith(RESERVED_TAG_PREFIX)


def tags_from_aws(tag_list: list[dict[str, str]] | None) -> dict[str, str]:
    """
    Convert AWS tag list format to dictionary.

    Reserved ``aws:`` keys are left out, since they can be neither
    copied to nor deleted from another resource.

    Args:
        tag_list: List of tags in AWS format [{"Key": "...", "Value": "..."}]

    Returns:
        Dictionary of tag key-value pairs
    """
    if not tag_list:
        return {}

    result = {}
    for tag in tag_list:
        key = tag.get("Key", "")
        if key and not is_reserved_tag_key(key):
            result[key] = tag.get("Value", "")

    return result


def tags_to_aws(tags: list[Tag] | dict[str, str]) -> list[dict[str, str]]:
    """
    Convert tags to the AWS tag list format expected by CreateTags/DeleteTags.

    Args:
        tags: Either a list of Tag models or a key-value dictionary

    Returns:
        List of {"Key": ..., "Value": ...} dictionaries
    """
    if isinstance(tags, dict):
        return [{"Key": key, "Value": value} for key, value in tags.items()]
    return [tag.to_aws() for tag in tags]


def tag_list(tags: dict[str, str]) -> list[Tag]:
    """Convert a tag dictionary into Tag models, preserving order."""
    return [Tag(key=key, value=value) for key, value in tags.items()]
