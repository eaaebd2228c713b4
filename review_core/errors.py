"""Domain errors and failure typing."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ReviewExplorerError(Exception):
    """Base class for review explorer failures."""

    error_code = "REVIEW_EXPLORER_ERROR"


class DatasetLoadError(ReviewExplorerError):
    """Raised when one review dataset cannot be read or normalized."""

    error_code = "DATASET_LOAD_ERROR"

    def __init__(self, entity_type: str, path: Optional[Path], message: str):
        self.entity_type = entity_type
        self.path = path
        super().__init__(message)


class UnknownEntityTypeError(ReviewExplorerError, ValueError):
    error_code = "UNKNOWN_ENTITY_TYPE"


class UnknownDimensionError(ReviewExplorerError, KeyError):
    error_code = "UNKNOWN_DIMENSION"

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownBucketModeError(ReviewExplorerError, ValueError):
    error_code = "UNKNOWN_BUCKET_MODE"
