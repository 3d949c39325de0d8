# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""
Tag diff engine.

Pure functions that compute which tags to add, overwrite and delete to move a
resource from its current tag set towards a desired one. Nothing here talks
to AWS or raises; callers hand the resulting TagDiff to the apply gate.
"""

import logging
from typing import Iterable

from ..models.tags import Tag, TagDiff

logger = logging.getLogger(__name__)


class ProtectedKeys:
    """
    A set of tag keys the engine never adds, overwrites or deletes.

    Matching is either exact or case-insensitive; the two policies are kept
    as separate named values because different propagation paths use them.
    """

    def __init__(self, keys: Iterable[str] = (), case_sensitive: bool = True):
        self.case_sensitive = case_sensitive
        self._keys = frozenset(keys if case_sensitive else (k.lower() for k in keys))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return (key if self.case_sensitive else key.lower()) in self._keys

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __repr__(self) -> str:
        mode = "exact" if self.case_sensitive else "case-insensitive"
        return f"ProtectedKeys({sorted(self._keys)!r}, {mode})"


def exact_protected_keys(*keys: str) -> ProtectedKeys:
    """Protect keys that match exactly, including case."""
    return ProtectedKeys(keys, case_sensitive=True)


def case_insensitive_protected_keys(*keys: str) -> ProtectedKeys:
    """Protect keys regardless of case (``Name``, ``name``, ``NAME``...)."""
    return ProtectedKeys(keys, case_sensitive=False)


NO_PROTECTED_KEYS = exact_protected_keys()

# CSV-driven instance sync: only the exact "Name" key is left alone
INSTANCE_PROTECTED_KEYS = exact_protected_keys("Name")

# Instance -> volume propagation skips every case variant of "name"
VOLUME_PROPAGATION_PROTECTED_KEYS = case_insensitive_protected_keys("Name")


def compute_tag_additions(
    current: dict[str, str],
    desired: dict[str, str],
    overwrite: bool,
    protected_keys: ProtectedKeys = NO_PROTECTED_KEYS,
) -> list[Tag]:
    """
    Compute the tags to add or overwrite.

    For each desired key that is not protected:
    - absent from ``current``: add it
    - present with a different value: overwrite it only when ``overwrite``
    - present with the same value: nothing to do

    Args:
        current: Tags currently on the resource
        desired: Tags the resource should carry
        overwrite: Whether differing values are replaced
        protected_keys: Keys that are never touched

    Returns:
        Tags to apply, in ``desired`` order
    """
    to_apply: list[Tag] = []

    for key, value in desired.items():
        if key in protected_keys:
            logger.debug(f"Skipping protected tag '{key}'")
            continue

        if key not in current:
            to_apply.append(Tag(key=key, value=value))
        elif current[key] != value:
            if overwrite:
                logger.debug(f"Overwriting tag '{key}': '{current[key]}' -> '{value}'")
                to_apply.append(Tag(key=key, value=value))
            else:
                logger.debug(
                    f"Skipping tag '{key}' because it already exists with a "
                    f"different value and overwrite is false"
                )

    return to_apply


def compute_tag_deletions(
    current: dict[str, str],
    desired: dict[str, str],
    protected_keys: ProtectedKeys = NO_PROTECTED_KEYS,
) -> list[Tag]:
    """
    Compute the tags present on the resource but absent from the desired set.

    Args:
        current: Tags currently on the resource
        desired: Tags the resource should carry
        protected_keys: Keys that are never deleted

    Returns:
        Tags to delete with their current values, in ``current`` order
    """
    return [
        Tag(key=key, value=value)
        for key, value in current.items()
        if key not in desired and key not in protected_keys
    ]


def compute_tag_diff(
    current: dict[str, str],
    desired: dict[str, str],
    overwrite: bool,
    protected_keys: ProtectedKeys = NO_PROTECTED_KEYS,
    delete: bool = False,
) -> TagDiff:
    """
    Compute the full diff between a resource's current and desired tags.

    Deletions are only computed when ``delete`` is requested; every other
    caller gets an add/overwrite-only diff.

    Args:
        current: Tags currently on the resource
        desired: Tags the resource should carry
        overwrite: Whether differing values are replaced
        protected_keys: Keys that are never added, overwritten or deleted
        delete: Whether to also delete tags absent from ``desired``

    Returns:
        TagDiff with the tags to apply and the tags to delete
    """
    return TagDiff(
        to_apply=compute_tag_additions(current, desired, overwrite, protected_keys),
        to_delete=compute_tag_deletions(current, desired, protected_keys) if delete else [],
    )
