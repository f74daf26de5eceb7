"""
Weak Predictors
quote_scoring/scoring/predictors.py

Three independent rule-based scorers. Each reads a FeatureVector and returns a
signed score adjustment (points on the 0-1000 scale) and an importance weight
in [0, 1]. They expose the contract a trained model would; adjust_weights() is
a calibration hook that currently does nothing.

    Price    overpricing / competitive pricing / under-itemized large quotes
    Quality  description and technical completeness, materials specified
    Risk     missing financial data, missing certifications, thin enrichment
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import structlog

from quote_scoring.models.enumerations import ProjectSize
from quote_scoring.scoring.features import FeatureVector

if TYPE_CHECKING:
    from quote_scoring.scoring.training import TrainingExample

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PredictorOutcome:
    """Output of WeakPredictor.predict()."""
    adjustment: float   # signed points
    importance: float   # [0, 1]


class WeakPredictor:
    """Base class for rule-based predictors."""

    name: str = "weak"

    def predict(self, features: FeatureVector) -> PredictorOutcome:
        raise NotImplementedError

    def adjust_weights(self, training_examples: Sequence["TrainingExample"]) -> None:
        """Inert calibration hook; does not change predictions."""
        logger.debug(
            "predictor_adjust_weights_noop",
            predictor=self.name,
            count=len(training_examples),
        )


class PricePredictor(WeakPredictor):
    """Flags over- and under-pricing against price references."""

    name = "price"

    HIGH_AVG_ITEM_PRICE = 500.0
    LOW_AVG_ITEM_PRICE = 100.0
    MIN_ITEMS_LARGE_PROJECT = 20

    def predict(self, features: FeatureVector) -> PredictorOutcome:
        adjustment = 0.0
        importance = 0.0

        if features.has_price_references:
            if features.average_item_price > self.HIGH_AVG_ITEM_PRICE:
                adjustment -= 20  # overpricing
                importance = 0.8
            elif features.average_item_price < self.LOW_AVG_ITEM_PRICE:
                adjustment += 10  # competitive
                importance = 0.6

        # Few lines for a large project is suspicious
        if (
            features.project_size == ProjectSize.LARGE
            and features.items_count < self.MIN_ITEMS_LARGE_PROJECT
        ):
            adjustment -= 15
            importance = max(importance, 0.7)

        return PredictorOutcome(adjustment=adjustment, importance=importance)


class QualityPredictor(WeakPredictor):
    """Rewards well-described, technically complete quotes."""

    name = "quality"

    IMPORTANCE = 0.7

    def predict(self, features: FeatureVector) -> PredictorOutcome:
        adjustment = 0.0

        if features.items_description_quality > 0.8:
            adjustment += 15
        elif features.items_description_quality < 0.5:
            adjustment -= 20

        if features.technical_details_completeness > 0.9:
            adjustment += 10
        elif features.technical_details_completeness < 0.6:
            adjustment -= 15

        if features.materials_specified > features.items_count * 0.3:
            adjustment += 5

        return PredictorOutcome(adjustment=adjustment, importance=self.IMPORTANCE)


class RiskPredictor(WeakPredictor):
    """Penalizes companies the enrichment could not vouch for."""

    name = "risk"

    BASE_IMPORTANCE = 0.6
    MIN_ENRICHMENT_SOURCES = 2

    def predict(self, features: FeatureVector) -> PredictorOutcome:
        adjustment = 0.0
        importance = self.BASE_IMPORTANCE

        if not features.company_has_financial_data:
            adjustment -= 10
            importance = 0.8

        if not features.company_has_certifications and features.project_size == ProjectSize.LARGE:
            adjustment -= 15
            importance = 0.9

        if features.enrichment_sources_count < self.MIN_ENRICHMENT_SOURCES:
            adjustment -= 5

        return PredictorOutcome(adjustment=adjustment, importance=importance)
