"""
experiments/harness.py - A/B Experimentation Harness

Splits quotes between a control and a variant scoring configuration and
compares the outcomes.

Lifecycle of a harness instance:
    new → create_test* → score_with_variant* / compare_test* → discard

Test states:
    unregistered → pending (before start_date) → active → expired (after end_date)
Only active tests split traffic; every other state scores with the default
configuration and reports the control bucket.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from quote_scoring.core.exceptions import (
    ExperimentNotFoundError,
    ExperimentValidationError,
    InsufficientDataError,
)
from quote_scoring.experiments.hashing import assign_bucket
from quote_scoring.experiments.registry import ExperimentRegistry, OutcomeLog
from quote_scoring.experiments.sinks import LoggingResultSink, ResultSink
from quote_scoring.experiments.statistics import (
    aggregate,
    calculate_improvement,
    calculate_significance,
    recommend,
)
from quote_scoring.models.enrichment import EnrichmentBundle
from quote_scoring.models.enumerations import Bucket, ExperimentStatus
from quote_scoring.models.experiment import (
    ComparisonResult,
    ExperimentComparison,
    ExperimentConfig,
    ExperimentOutcome,
    OutcomeMetrics,
)
from quote_scoring.models.quote import Quote, ScoringContext
from quote_scoring.models.score import BaselineScore
from quote_scoring.scoring.engine import EngineFactory, ScoringEngine, adjusted_engine_factory
from quote_scoring.services.executor import ExecutionOptions, ParallelExecutor, TaskResult

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class VariantScore:
    """Output of ExperimentHarness.score_with_variant()."""
    score: BaselineScore
    bucket: Bucket


@dataclass
class ScoringRequest:
    quote: Quote
    enrichment: EnrichmentBundle = field(default_factory=EnrichmentBundle)
    context: ScoringContext = field(default_factory=ScoringContext)


class ExperimentHarness:
    """Deterministic traffic splitting and outcome comparison."""

    def __init__(
        self,
        engine_factory: EngineFactory,
        registry: Optional[ExperimentRegistry] = None,
        outcomes: Optional[OutcomeLog] = None,
        sink: Optional[ResultSink] = None,
        executor: Optional[ParallelExecutor] = None,
        clock: Clock = _utcnow,
    ):
        self.engine_factory = engine_factory
        self.registry = registry if registry is not None else ExperimentRegistry()
        self.outcomes = outcomes or OutcomeLog()
        self.sink = sink or LoggingResultSink()
        self.executor = executor or ParallelExecutor()
        self._clock = clock

    @classmethod
    def with_baseline(cls, baseline: ScoringEngine, **kwargs: Any) -> "ExperimentHarness":
        """Harness whose buckets wrap `baseline` in AdjustedScoringEngine."""
        return cls(adjusted_engine_factory(baseline), **kwargs)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def create_test(self, config: Union[ExperimentConfig, Mapping[str, Any]]) -> ExperimentConfig:
        """
        Validate and register a test, replacing any test with the same id.

        Raises:
            ExperimentValidationError: traffic_split outside [0, 1] or
                start_date not before end_date.
        """
        payload = config.model_dump() if isinstance(config, ExperimentConfig) else dict(config)
        try:
            validated = ExperimentConfig.model_validate(payload)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            message = "; ".join(err["msg"] for err in errors)
            logger.warning("experiment_rejected", test_id=payload.get("test_id"), errors=message)
            raise ExperimentValidationError(message, errors=errors) from e

        self.registry.register(validated)
        logger.info(
            "experiment_created",
            test_id=validated.test_id,
            name=validated.name,
            traffic_split=validated.traffic_split,
            start_date=validated.start_date.isoformat(),
            end_date=validated.end_date.isoformat() if validated.end_date else None,
        )
        return validated

    def remove_test(self, test_id: str) -> None:
        self.registry.remove(test_id)
        self.outcomes.clear(test_id)

    def get_status(self, test_id: str) -> ExperimentStatus:
        config = self.registry.get(test_id)
        if config is None:
            return ExperimentStatus.UNREGISTERED
        now = self._clock()
        if now < config.start_date:
            return ExperimentStatus.PENDING
        if config.end_date is not None and now > config.end_date:
            return ExperimentStatus.EXPIRED
        return ExperimentStatus.ACTIVE

    def is_active(self, test_id: str) -> bool:
        return self.get_status(test_id) == ExperimentStatus.ACTIVE

    # ------------------------------------------------------------------
    # Assignment and scoring
    # ------------------------------------------------------------------

    def get_variant(self, test_id: str, subject_id: str) -> Bucket:
        """Bucket for a subject; control unless the test is active."""
        if not self.is_active(test_id):
            return Bucket.CONTROL
        config = self.registry.get(test_id)
        return assign_bucket(subject_id, config.traffic_split)

    async def score_with_variant(
        self,
        test_id: str,
        quote: Quote,
        enrichment: Optional[EnrichmentBundle] = None,
        context: Optional[ScoringContext] = None,
    ) -> VariantScore:
        """
        Score a quote with the configuration of its bucket.

        Scoring engine errors propagate unchanged.
        """
        enrichment = enrichment or EnrichmentBundle()
        context = context or ScoringContext()

        if not self.is_active(test_id):
            engine = self.engine_factory(None)
            score = await engine.calculate_score(quote, enrichment, context)
            return VariantScore(score=score, bucket=Bucket.CONTROL)

        config = self.registry.get(test_id)
        bucket = assign_bucket(quote.id, config.traffic_split)
        engine = self.engine_factory(config.variant_for(bucket))
        score = await engine.calculate_score(quote, enrichment, context)

        confidence = score.confidence_level / 100
        self.outcomes.record(
            ExperimentOutcome(
                test_id=test_id,
                subject_id=quote.id,
                bucket=bucket,
                score=score.total_score,
                confidence=confidence,
                # engine confidence stands in for accuracy until feedback arrives
                metrics=OutcomeMetrics(score_accuracy=confidence),
                recorded_at=self._clock(),
            )
        )
        await self.sink.log_result(test_id, quote.id, bucket, score.total_score)

        logger.info(
            "experiment_scored",
            test_id=test_id,
            subject_id=quote.id,
            bucket=bucket.value,
            score=round(score.total_score, 2),
            grade=score.grade,
            confidence=round(confidence, 4),
        )
        return VariantScore(score=score, bucket=bucket)

    async def score_many(
        self,
        test_id: str,
        requests: Sequence[ScoringRequest],
        options: Optional[ExecutionOptions] = None,
    ) -> List[TaskResult]:
        """Score a batch of quotes through the parallel executor."""
        units = [
            lambda r=request: self.score_with_variant(test_id, r.quote, r.enrichment, r.context)
            for request in requests
        ]
        return await self.executor.execute_parallel(units, options)

    def record_outcome(self, outcome: ExperimentOutcome) -> None:
        """Store an outcome with observed metrics, replacing the subject's previous one."""
        if outcome.test_id not in self.registry:
            raise ExperimentNotFoundError(outcome.test_id)
        self.outcomes.record(outcome)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def evaluate_test(self, test_id: str) -> ComparisonResult:
        """
        Compare control and variant outcomes.

        Returns:
            ComparisonResult carrying either the comparison or an
            InsufficientDataError when a bucket has no observations.

        Raises:
            ExperimentNotFoundError: test_id is not registered.
        """
        if test_id not in self.registry:
            raise ExperimentNotFoundError(test_id)

        control = self.outcomes.for_bucket(test_id, Bucket.CONTROL)
        variant = self.outcomes.for_bucket(test_id, Bucket.VARIANT)
        if not control or not variant:
            return ComparisonResult(
                test_id=test_id,
                error=InsufficientDataError(test_id, len(control), len(variant)),
            )

        control_agg = aggregate(Bucket.CONTROL, control)
        variant_agg = aggregate(Bucket.VARIANT, variant)
        significance = calculate_significance(
            [o.score for o in control],
            [o.score for o in variant],
        )
        improvement = calculate_improvement(control_agg, variant_agg)
        recommendation = recommend(significance, improvement)

        logger.info(
            "experiment_compared",
            test_id=test_id,
            control_count=control_agg.count,
            variant_count=variant_agg.count,
            score_accuracy_pct=improvement.score_accuracy_pct,
            p_value=significance.p_value,
            recommendation=recommendation.value,
        )

        return ComparisonResult(
            test_id=test_id,
            comparison=ExperimentComparison(
                test_id=test_id,
                control=control_agg,
                variant=variant_agg,
                improvement=improvement,
                significance=significance,
                recommendation=recommendation,
            ),
        )

    def compare_test(self, test_id: str) -> ExperimentComparison:
        """
        Raises:
            ExperimentNotFoundError: test_id is not registered.
            InsufficientDataError: either bucket has no observations.
        """
        return self.evaluate_test(test_id).unwrap()
