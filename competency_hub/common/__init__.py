"""Common module — shared utilities for Competency Hub."""

from competency_hub.common.constants import (
    NO_DESCRIPTION,
    PERMISSIONS,
    EvaluationStatusFilter,
    UserRole,
)
from competency_hub.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InUseError,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from competency_hub.common.filters import apply_filters, apply_search
from competency_hub.common.scoring import (
    DEFAULT_MAX_SCORE,
    GapBuckets,
    bucket_gaps,
    clamp_score,
    gap_tier,
    score_gap,
)

__all__ = [
    # Constants / Enums
    "EvaluationStatusFilter",
    "UserRole",
    "PERMISSIONS",
    "NO_DESCRIPTION",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InUseError",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    # Scoring
    "DEFAULT_MAX_SCORE",
    "GapBuckets",
    "bucket_gaps",
    "clamp_score",
    "gap_tier",
    "score_gap",
]
