"""
Custom Exceptions - Quote Scoring Engine
quote_scoring/core/exceptions.py

Custom exception classes for the executor, scoring and experiment layers.
"""

from typing import Any, Dict, List, Optional


class QuoteScoringException(Exception):
    """Base exception for scoring engine operations."""

    pass


class ExperimentValidationError(QuoteScoringException, ValueError):
    """Experiment configuration rejected at registration."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ExperimentNotFoundError(QuoteScoringException):
    """Experiment is not registered with the harness."""

    def __init__(self, test_id: str):
        self.test_id = test_id
        super().__init__(f"Test {test_id} not found")


class InsufficientDataError(QuoteScoringException):
    """A bucket has no observations to compare."""

    def __init__(self, test_id: str, control_count: int, variant_count: int):
        self.test_id = test_id
        self.control_count = control_count
        self.variant_count = variant_count
        super().__init__(
            f"Insufficient data for comparison of test {test_id} "
            f"(control={control_count}, variant={variant_count})"
        )


class TaskTimeoutError(QuoteScoringException, TimeoutError):
    """A unit of work did not settle within its timeout."""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"Timeout after {timeout_ms:g}ms")


class TaskExecutionError(QuoteScoringException):
    """A unit of work failed while continue_on_error was disabled."""

    def __init__(self, index: int, cause: BaseException):
        self.index = index
        self.cause = cause
        super().__init__(f"Task {index} failed: {cause}")
