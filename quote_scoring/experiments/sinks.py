"""
Result sinks receive one (test_id, subject_id, bucket, score) tuple per
scored subject. Durable storage is the caller's business; this module ships a
structured-log sink (default) and an in-memory sink for tests and notebooks.
"""

from typing import List, Protocol, Tuple

import structlog

from quote_scoring.models.enumerations import Bucket

logger = structlog.get_logger(__name__)


class ResultSink(Protocol):
    async def log_result(self, test_id: str, subject_id: str, bucket: Bucket, score: float) -> None:
        ...


class LoggingResultSink:
    """Emit each result as an `experiment_result` log event."""

    async def log_result(self, test_id: str, subject_id: str, bucket: Bucket, score: float) -> None:
        logger.info(
            "experiment_result",
            test_id=test_id,
            subject_id=subject_id,
            bucket=bucket.value,
            score=score,
        )


class InMemoryResultSink:
    """Keep results in a list."""

    def __init__(self):
        self.results: List[Tuple[str, str, Bucket, float]] = []

    async def log_result(self, test_id: str, subject_id: str, bucket: Bucket, score: float) -> None:
        self.results.append((test_id, subject_id, bucket, score))
