"""
Adjustment Orchestrator
quote_scoring/scoring/adjustment.py

Blends the baseline rule score with the three weak-predictor adjustments.

Formula:
    predicted = clamp(baseline + Δprice + Δquality + Δrisk, 0, 1000)
    confidence = min(1, 0.5
                        + (sources / 5) × 0.20
                        + description_quality × 0.15
                        + technical_completeness × 0.15)

Grade ladder (top-down):
    ≥ 800 A   ≥ 650 B   ≥ 500 C   ≥ 350 D   else E

Feature importance is reported for explainability only; it never feeds back
into the score.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Sequence, TYPE_CHECKING

import structlog

from quote_scoring.config import settings
from quote_scoring.models.enumerations import Grade
from quote_scoring.scoring.features import FeatureVector
from quote_scoring.scoring.predictors import PricePredictor, QualityPredictor, RiskPredictor
from quote_scoring.scoring.utils import clamp, to_decimal

if TYPE_CHECKING:
    from quote_scoring.scoring.training import TrainingExample

logger = structlog.get_logger(__name__)

GRADE_LADDER = [
    (Decimal("800"), Grade.A),
    (Decimal("650"), Grade.B),
    (Decimal("500"), Grade.C),
    (Decimal("350"), Grade.D),
]

MAX_ENRICHMENT_SOURCES = 5


def score_to_grade(score) -> Grade:
    """Map a 0-1000 score to its letter grade."""
    score_d = Decimal(str(score))
    for threshold, grade in GRADE_LADDER:
        if score_d >= threshold:
            return grade
    return Grade.E


@dataclass(frozen=True)
class ScoreAdjustments:
    price: float
    quality: float
    risk: float

    @property
    def total(self) -> float:
        return self.price + self.quality + self.risk


@dataclass
class AdjustedScorePrediction:
    """Output of AdjustmentOrchestrator.predict_score()."""
    predicted_score: Decimal       # [0, 1000] quantized to 0.01
    predicted_grade: Grade
    confidence: Decimal            # [0, 1] quantized to 0.0001
    feature_importance: Dict[str, float] = field(default_factory=dict)
    adjustments: ScoreAdjustments = field(default_factory=lambda: ScoreAdjustments(0.0, 0.0, 0.0))


class AdjustmentOrchestrator:
    """Combine baseline score and weak predictors into a calibrated prediction."""

    def __init__(self):
        self.price_model = PricePredictor()
        self.quality_model = QualityPredictor()
        self.risk_model = RiskPredictor()

    def predict_score(self, features: FeatureVector, baseline_score: float) -> AdjustedScorePrediction:
        """
        Args:
            features: FeatureVector for the quote being scored.
            baseline_score: Score from the baseline rule engine (0-1000 scale).

        Returns:
            AdjustedScorePrediction with clamped score, grade and confidence.
        """
        price = self.price_model.predict(features)
        quality = self.quality_model.predict(features)
        risk = self.risk_model.predict(features)

        adjustments = ScoreAdjustments(
            price=price.adjustment,
            quality=quality.adjustment,
            risk=risk.adjustment,
        )

        raw = Decimal(str(baseline_score)) + Decimal(str(adjustments.total))
        predicted = clamp(
            raw.quantize(Decimal("0.01"), rounding=ROUND_FLOOR),
            Decimal(str(settings.SCORE_MIN)),
            Decimal(str(settings.SCORE_MAX)),
        )

        confidence = self._confidence(features)

        feature_importance = {
            "total_amount": price.importance,
            "enrichment_sources_count": quality.importance,
            "company_has_financial_data": risk.importance,
            "items_description_quality": quality.importance * 0.8,
            "technical_details_completeness": quality.importance * 0.6,
        }

        grade = score_to_grade(predicted)

        logger.info(
            "score_adjusted",
            baseline_score=float(baseline_score),
            price_adjustment=adjustments.price,
            quality_adjustment=adjustments.quality,
            risk_adjustment=adjustments.risk,
            predicted_score=float(predicted),
            predicted_grade=grade.value,
            confidence=float(confidence),
        )

        return AdjustedScorePrediction(
            predicted_score=predicted,
            predicted_grade=grade,
            confidence=confidence,
            feature_importance=feature_importance,
            adjustments=adjustments,
        )

    def _confidence(self, features: FeatureVector) -> Decimal:
        raw = (
            0.5
            + (features.enrichment_sources_count / MAX_ENRICHMENT_SOURCES) * 0.2
            + features.items_description_quality * 0.15
            + features.technical_details_completeness * 0.15
        )
        return clamp(to_decimal(raw, places=4), Decimal("0"), Decimal("1"))

    def train(self, training_examples: Sequence["TrainingExample"]) -> None:
        """Forward examples to each predictor's (inert) calibration hook."""
        logger.debug("adjustment_training_requested", count=len(training_examples))
        self.price_model.adjust_weights(training_examples)
        self.quality_model.adjust_weights(training_examples)
        self.risk_model.adjust_weights(training_examples)
