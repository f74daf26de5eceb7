"""
experiments/statistics.py

Aggregation and simplified two-sample significance test for A/B outcomes.

Formula:
    pooled_std = √((var_control + var_variant) / 2)        (population variances)
    t          = |mean_v − mean_c| / (pooled_std / √min(n_c, n_v))
    p          = 2 × (1 − Φ(|t|))
    Φ(x)       = ½ × (1 + erf(x / √2))

erf uses the Abramowitz–Stegun 7.1.26 polynomial (max error ≈ 1.5e-7).
"""

import math
from typing import Optional, Sequence

from quote_scoring.config import settings
from quote_scoring.models.enumerations import Bucket, Recommendation
from quote_scoring.models.experiment import (
    BucketAggregate,
    ExperimentOutcome,
    Improvement,
    Significance,
)
from quote_scoring.scoring.utils import mean, population_variance

A1 = 0.254829592
A2 = -0.284496736
A3 = 1.421413741
A4 = -1.453152027
A5 = 1.061405429
P = 0.3275911


def erf(x: float) -> float:
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + P * x)
    y = 1.0 - (((((A5 * t + A4) * t) + A3) * t + A2) * t + A1) * t * math.exp(-x * x)
    return sign * y


def normal_cdf(x: float) -> float:
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def aggregate(bucket: Bucket, outcomes: Sequence[ExperimentOutcome]) -> BucketAggregate:
    """Means of score, confidence and score accuracy for one bucket."""
    if not outcomes:
        raise ValueError(f"no outcomes to aggregate for bucket {bucket.value}")
    return BucketAggregate(
        bucket=bucket,
        count=len(outcomes),
        mean_score=mean([o.score for o in outcomes]),
        mean_confidence=mean([o.confidence for o in outcomes]),
        mean_score_accuracy=mean([o.metrics.score_accuracy for o in outcomes]),
    )


def calculate_significance(
    control_scores: Sequence[float],
    variant_scores: Sequence[float],
    alpha: Optional[float] = None,
) -> Significance:
    """
    Simplified t-test on scores.

    A zero pooled deviation yields p = 0 when the means differ and p = 1 when
    they are equal.
    """
    alpha = settings.SIGNIFICANCE_ALPHA if alpha is None else alpha

    diff = abs(mean(variant_scores) - mean(control_scores))
    pooled_std = math.sqrt(
        (population_variance(control_scores) + population_variance(variant_scores)) / 2
    )
    n = min(len(control_scores), len(variant_scores))

    if pooled_std == 0:
        t_stat = math.inf if diff > 0 else 0.0
        p_value = 0.0 if diff > 0 else 1.0
    else:
        t_stat = diff / (pooled_std / math.sqrt(n))
        p_value = 2 * (1 - normal_cdf(abs(t_stat)))

    p_value = max(0.0, min(1.0, p_value))
    return Significance(p_value=p_value, t_statistic=t_stat, significant=p_value < alpha)


def relative_change_pct(control: float, variant: float) -> float:
    """(variant − control) / control × 100, signed infinity for a zero control."""
    if control == 0:
        if variant == control:
            return 0.0
        return math.copysign(math.inf, variant - control)
    return (variant - control) / control * 100


def calculate_improvement(control: BucketAggregate, variant: BucketAggregate) -> Improvement:
    return Improvement(
        score_accuracy_pct=relative_change_pct(
            control.mean_score_accuracy, variant.mean_score_accuracy
        ),
        confidence_delta=variant.mean_confidence - control.mean_confidence,
    )


def recommend(
    significance: Significance,
    improvement: Improvement,
    threshold_pct: Optional[float] = None,
) -> Recommendation:
    threshold_pct = settings.RECOMMENDATION_THRESHOLD_PCT if threshold_pct is None else threshold_pct
    if significance.significant and improvement.score_accuracy_pct > threshold_pct:
        return Recommendation.VARIANT
    if significance.significant and improvement.score_accuracy_pct < -threshold_pct:
        return Recommendation.CONTROL
    return Recommendation.INCONCLUSIVE
