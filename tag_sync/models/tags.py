# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Tag and tag diff data models."""

from pydantic import BaseModel, ConfigDict, Field

# A resource's tags, keyed by tag key.
TagSet = dict[str, str]


class Tag(BaseModel):
    """A single key/value tag."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Tag key, the identity used for matching")
    value: str = Field(..., description="Tag value, compared for equality")

    def to_aws(self) -> dict[str, str]:
        """Return the tag in the AWS wire shape ``{"Key": ..., "Value": ...}``."""
        return {"Key": self.key, "Value": self.value}


class TagDiff(BaseModel):
    """The tags to add or overwrite and the tags to delete on one resource."""

    to_apply: list[Tag] = Field(
        default_factory=list,
        description="Tags to add or overwrite, in desired-set order",
    )
    to_delete: list[Tag] = Field(
        default_factory=list,
        description="Tags to delete, carrying their current value",
    )

    @property
    def is_empty(self) -> bool:
        return not self.to_apply and not self.to_delete
