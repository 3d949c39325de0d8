"""Service layer for tag-sync."""

from .apply_gate import ApplyGate
from .backup_service import (
    BackupFormatError,
    BackupNotFoundError,
    BackupService,
    BackupWriteError,
)
from .confirmation import Confirmer, InteractiveConfirmer, StaticConfirmer
from .csv_service import CsvFormatError, parse_tag_csv
from .diff_engine import (
    INSTANCE_PROTECTED_KEYS,
    NO_PROTECTED_KEYS,
    VOLUME_PROPAGATION_PROTECTED_KEYS,
    ProtectedKeys,
    case_insensitive_protected_keys,
    compute_tag_additions,
    compute_tag_deletions,
    compute_tag_diff,
    exact_protected_keys,
)
from .propagation_pipeline import DEFAULT_TAGS_PARAMETER, PropagationPipeline

__all__ = [
    "ApplyGate",
    "BackupFormatError",
    "BackupNotFoundError",
    "BackupService",
    "BackupWriteError",
    "Confirmer",
    "InteractiveConfirmer",
    "StaticConfirmer",
    "CsvFormatError",
    "parse_tag_csv",
    "INSTANCE_PROTECTED_KEYS",
    "NO_PROTECTED_KEYS",
    "VOLUME_PROPAGATION_PROTECTED_KEYS",
    "ProtectedKeys",
    "case_insensitive_protected_keys",
    "compute_tag_additions",
    "compute_tag_deletions",
    "compute_tag_diff",
    "exact_protected_keys",
    "DEFAULT_TAGS_PARAMETER",
    "PropagationPipeline",
]
