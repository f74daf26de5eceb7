"""
experiments/ - A/B Experimentation

Modules:
    hashing.py      - Deterministic subject → bucket assignment
    statistics.py   - Bucket aggregates, significance test, recommendation
    registry.py     - In-memory test definitions and outcomes
    sinks.py        - Per-subject result sinks
    harness.py      - ExperimentHarness (create, score, compare)
"""

from quote_scoring.experiments.harness import ExperimentHarness, ScoringRequest, VariantScore
from quote_scoring.experiments.registry import ExperimentRegistry, OutcomeLog
from quote_scoring.experiments.sinks import InMemoryResultSink, LoggingResultSink, ResultSink

__all__ = [
    "ExperimentHarness",
    "ExperimentRegistry",
    "InMemoryResultSink",
    "LoggingResultSink",
    "OutcomeLog",
    "ResultSink",
    "ScoringRequest",
    "VariantScore",
]
