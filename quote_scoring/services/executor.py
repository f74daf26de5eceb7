"""
Parallel Executor - Quote Scoring Engine
quote_scoring/services/executor.py

Runs zero-argument async units of work under a concurrency cap, with a
per-attempt timeout and exponential-backoff retries. One TaskResult is
returned per unit, at the unit's index, whatever the completion order.

Backoff between attempts:
    delay_ms = min(base_ms × 2^attempt, cap_ms)     (1000 ms doubling, 10 s cap)

A timed-out unit is not cancelled unless ExecutionOptions.cancel_on_timeout is
set: the executor stops waiting and the unit keeps running in the background.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, Set, TypeVar

import structlog

from quote_scoring.config import settings
from quote_scoring.core.exceptions import TaskExecutionError, TaskTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[], Awaitable[T]]
SleepFn = Callable[[float], Awaitable[Any]]

# Strong references to timed-out units still running in the background
_orphaned_tasks: Set[asyncio.Future] = set()


def _release_orphan(task: asyncio.Future) -> None:
    _orphaned_tasks.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("orphaned_task_failed", error=repr(error))


@dataclass
class TaskResult(Generic[T]):
    """Outcome of one unit of work."""
    success: bool
    data: Optional[T] = None
    error: Optional[BaseException] = None
    duration_ms: float = 0.0


@dataclass
class ExecutionOptions:
    max_concurrency: int = field(default_factory=lambda: settings.EXECUTOR_MAX_CONCURRENCY)
    timeout_ms: float = field(default_factory=lambda: settings.EXECUTOR_TIMEOUT_MS)
    retries: int = field(default_factory=lambda: settings.EXECUTOR_RETRIES)
    continue_on_error: bool = True
    cancel_on_timeout: bool = field(default_factory=lambda: settings.EXECUTOR_CANCEL_ON_TIMEOUT)

    def __post_init__(self):
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {self.timeout_ms}")
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")


@dataclass
class ExecutionStats:
    total: int
    successful: int
    failed: int
    average_duration_ms: float
    total_duration_ms: float


class ParallelExecutor:
    """Bounded-concurrency executor with timeout and retry."""

    def __init__(
        self,
        backoff_base_ms: Optional[float] = None,
        backoff_cap_ms: Optional[float] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.backoff_base_ms = (
            settings.EXECUTOR_BACKOFF_BASE_MS if backoff_base_ms is None else backoff_base_ms
        )
        self.backoff_cap_ms = (
            settings.EXECUTOR_BACKOFF_CAP_MS if backoff_cap_ms is None else backoff_cap_ms
        )
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute_parallel(
        self,
        units: Sequence[UnitOfWork],
        options: Optional[ExecutionOptions] = None,
    ) -> List[TaskResult]:
        """
        Execute units with at most options.max_concurrency in flight.

        Args:
            units: Zero-argument callables returning awaitables.
            options: Concurrency / timeout / retry settings.

        Returns:
            One TaskResult per unit, in input order.

        Raises:
            TaskExecutionError: a unit exhausted its retries while
                continue_on_error is False. Remaining units are abandoned.
        """
        options = options or ExecutionOptions()
        if not units:
            return []

        results: List[Optional[TaskResult]] = [None] * len(units)
        executing: Set[asyncio.Task] = set()

        try:
            for index, unit in enumerate(units):
                if len(executing) >= options.max_concurrency:
                    done, executing = await asyncio.wait(
                        executing, return_when=asyncio.FIRST_COMPLETED
                    )
                    self._raise_first_failure(done)

                executing.add(asyncio.create_task(self._run_slot(index, unit, options, results)))

            while executing:
                done, executing = await asyncio.wait(
                    executing, return_when=asyncio.FIRST_COMPLETED
                )
                self._raise_first_failure(done)
        except BaseException:
            for task in executing:
                task.cancel()
            raise

        stats = self.get_stats(results)
        logger.info(
            "parallel_execution_completed",
            total=stats.total,
            successful=stats.successful,
            failed=stats.failed,
            average_duration_ms=round(stats.average_duration_ms, 2),
        )
        return results

    async def execute_batched(
        self,
        units: Sequence[UnitOfWork],
        batch_size: Optional[int] = None,
    ) -> List[TaskResult]:
        """
        Execute units in sequential batches, each batch fully parallel.

        A failing unit never cancels its siblings; its failure is captured in
        its TaskResult.
        """
        if batch_size is None:
            batch_size = settings.EXECUTOR_BATCH_SIZE
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        results: List[TaskResult] = []
        for start in range(0, len(units), batch_size):
            batch = units[start:start + batch_size]
            settled = await asyncio.gather(*(self._settle(unit) for unit in batch))
            results.extend(settled)
            logger.debug(
                "batch_completed",
                batch_start=start,
                batch_size=len(batch),
                failed=sum(1 for r in settled if not r.success),
            )
        return results

    @staticmethod
    def filter_successful(results: Sequence[TaskResult]) -> List[Any]:
        """Values of the successful results, in order."""
        return [r.data for r in results if r.success and r.data is not None]

    @staticmethod
    def get_stats(results: Sequence[TaskResult]) -> ExecutionStats:
        total = len(results)
        successful = sum(1 for r in results if r.success)
        total_duration = sum(r.duration_ms for r in results)
        return ExecutionStats(
            total=total,
            successful=successful,
            failed=total - successful,
            average_duration_ms=total_duration / total if total > 0 else 0.0,
            total_duration_ms=total_duration,
        )

    def backoff_delay_ms(self, attempt: int) -> float:
        """Delay before retrying after the given (0-based) failed attempt."""
        return min(self.backoff_base_ms * (2 ** attempt), self.backoff_cap_ms)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_first_failure(done: Set[asyncio.Task]) -> None:
        first_error: Optional[BaseException] = None
        for task in done:
            error = task.exception()
            if error is not None and first_error is None:
                first_error = error
        if first_error is not None:
            raise first_error

    async def _run_slot(
        self,
        index: int,
        unit: UnitOfWork,
        options: ExecutionOptions,
        results: List[Optional[TaskResult]],
    ) -> None:
        result = await self._execute_with_retry(unit, options)
        results[index] = result
        if not result.success and not options.continue_on_error:
            raise TaskExecutionError(index, result.error) from result.error

    async def _execute_with_retry(self, unit: UnitOfWork, options: ExecutionOptions) -> TaskResult:
        start = time.perf_counter()
        last_error: Optional[BaseException] = None

        for attempt in range(options.retries + 1):
            try:
                data = await self._attempt(unit, options)
                return TaskResult(success=True, data=data, duration_ms=_elapsed_ms(start))
            except Exception as e:
                last_error = e
                if attempt < options.retries:
                    delay_ms = self.backoff_delay_ms(attempt)
                    logger.warning(
                        "task_retry_scheduled",
                        attempt=attempt + 1,
                        retries=options.retries,
                        delay_ms=delay_ms,
                        error=str(e),
                    )
                    await self._sleep(delay_ms / 1000)

        logger.warning("task_failed", attempts=options.retries + 1, error=repr(last_error))
        return TaskResult(success=False, error=last_error, duration_ms=_elapsed_ms(start))

    async def _attempt(self, unit: UnitOfWork, options: ExecutionOptions) -> Any:
        task = asyncio.ensure_future(unit())
        try:
            done, _ = await asyncio.wait({task}, timeout=options.timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task in done:
            return task.result()

        if options.cancel_on_timeout:
            task.cancel()
        else:
            _orphaned_tasks.add(task)
            task.add_done_callback(_release_orphan)
        raise TaskTimeoutError(options.timeout_ms)

    @staticmethod
    async def _settle(unit: UnitOfWork) -> TaskResult:
        start = time.perf_counter()
        try:
            data = await unit()
        except Exception as e:
            return TaskResult(success=False, error=e, duration_ms=_elapsed_ms(start))
        return TaskResult(success=True, data=data, duration_ms=_elapsed_ms(start))


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
