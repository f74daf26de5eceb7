"""Core cross-cutting concerns (exceptions)."""

from quote_scoring.core.exceptions import (
    ExperimentNotFoundError,
    ExperimentValidationError,
    InsufficientDataError,
    QuoteScoringException,
    TaskExecutionError,
    TaskTimeoutError,
)

__all__ = [
    "ExperimentNotFoundError",
    "ExperimentValidationError",
    "InsufficientDataError",
    "QuoteScoringException",
    "TaskExecutionError",
    "TaskTimeoutError",
]
