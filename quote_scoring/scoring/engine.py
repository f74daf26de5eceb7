"""
Scoring Engine seam
quote_scoring/scoring/engine.py

The baseline rule engine lives outside this package; it is consumed through
the ScoringEngine protocol. AdjustedScoringEngine wraps a baseline engine and,
when the alternate model is enabled, blends in the adjustment prediction.

Formula (alternate model enabled):
    w      = prediction_confidence × model_weight
    final  = clamp(total × (1 − w) + predicted × w, 0, 1000)
    conf%  = baseline_conf% × 0.7 + prediction_confidence × 100 × 0.3
"""

from typing import Callable, Optional, Protocol

import structlog

from quote_scoring.config import settings
from quote_scoring.models.enrichment import EnrichmentBundle
from quote_scoring.models.experiment import VariantConfig
from quote_scoring.models.quote import Quote, ScoringContext
from quote_scoring.models.score import BaselineScore
from quote_scoring.scoring.adjustment import AdjustmentOrchestrator, score_to_grade
from quote_scoring.scoring.features import FeatureExtractor

logger = structlog.get_logger(__name__)


class ScoringEngine(Protocol):
    async def calculate_score(
        self,
        quote: Quote,
        enrichment: EnrichmentBundle,
        context: ScoringContext,
    ) -> BaselineScore:
        ...


EngineFactory = Callable[[Optional[VariantConfig]], ScoringEngine]


def default_variant() -> VariantConfig:
    """Configuration used when no experiment applies."""
    return VariantConfig(
        id="default",
        name="Default scoring",
        use_alternate_model=True,
        model_weight=settings.ALTERNATE_MODEL_WEIGHT,
    )


class AdjustedScoringEngine:
    """Baseline engine plus optional weak-predictor blend."""

    def __init__(
        self,
        baseline: ScoringEngine,
        variant: Optional[VariantConfig] = None,
        extractor: Optional[FeatureExtractor] = None,
        orchestrator: Optional[AdjustmentOrchestrator] = None,
    ):
        self.baseline = baseline
        self.variant = variant or default_variant()
        self.extractor = extractor or FeatureExtractor()
        self.orchestrator = orchestrator or AdjustmentOrchestrator()

    async def calculate_score(
        self,
        quote: Quote,
        enrichment: EnrichmentBundle,
        context: ScoringContext,
    ) -> BaselineScore:
        base = await self.baseline.calculate_score(quote, enrichment, context)
        metadata = {**base.metadata, "variant_id": self.variant.id, "version": self.variant.version}

        if not self.variant.use_alternate_model:
            return base.model_copy(update={"metadata": metadata})

        features = self.extractor.extract(quote, enrichment)
        prediction = self.orchestrator.predict_score(features, base.total_score)

        confidence = float(prediction.confidence)
        weight = confidence * self.variant.model_weight
        blended = base.total_score * (1 - weight) + float(prediction.predicted_score) * weight
        final_score = max(settings.SCORE_MIN, min(settings.SCORE_MAX, blended))
        confidence_level = base.confidence_level * 0.7 + confidence * 100 * 0.3

        logger.info(
            "alternate_model_applied",
            quote_id=quote.id,
            variant_id=self.variant.id,
            baseline_score=base.total_score,
            final_score=round(final_score, 2),
            model_weight=round(weight, 4),
        )

        return base.model_copy(
            update={
                "total_score": final_score,
                "grade": score_to_grade(final_score).value,
                "confidence_level": min(100.0, confidence_level),
                "model_adjustment": final_score - base.total_score,
                "metadata": metadata,
            }
        )


def adjusted_engine_factory(baseline: ScoringEngine) -> EngineFactory:
    """Factory building one AdjustedScoringEngine per variant configuration."""

    def _factory(variant: Optional[VariantConfig]) -> ScoringEngine:
        return AdjustedScoringEngine(baseline, variant)

    return _factory
