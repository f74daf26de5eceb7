"""
Services module for the Quote Scoring Engine.
"""

from quote_scoring.services.executor import (
    ExecutionOptions,
    ExecutionStats,
    ParallelExecutor,
    TaskResult,
)

__all__ = ["ExecutionOptions", "ExecutionStats", "ParallelExecutor", "TaskResult"]
