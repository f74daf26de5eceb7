"""
Experiment Statistics Tests - Quote Scoring Engine
tests/test_statistics.py
"""
import math

import pytest

from quote_scoring.experiments.statistics import (
    aggregate,
    calculate_improvement,
    calculate_significance,
    erf,
    normal_cdf,
    recommend,
    relative_change_pct,
)
from quote_scoring.models.enumerations import Bucket, Recommendation
from quote_scoring.models.experiment import (
    BucketAggregate,
    ExperimentOutcome,
    Improvement,
    OutcomeMetrics,
    Significance,
)


def make_outcome(subject, bucket, score, confidence=0.7, accuracy=0.7):
    return ExperimentOutcome(
        test_id="t",
        subject_id=subject,
        bucket=bucket,
        score=score,
        confidence=confidence,
        metrics=OutcomeMetrics(score_accuracy=accuracy),
    )


class TestNormalApproximation:

    def test_erf_zero(self):
        assert erf(0.0) == pytest.approx(0.0, abs=1e-6)

    def test_erf_is_odd(self):
        assert erf(-0.7) == pytest.approx(-erf(0.7))

    @pytest.mark.parametrize("x, expected", [(0.5, 0.5204999), (1.0, 0.8427008), (2.0, 0.9953223)])
    def test_erf_accuracy(self, x, expected):
        assert erf(x) == pytest.approx(expected, abs=3e-7)

    def test_normal_cdf(self):
        assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-6)
        assert normal_cdf(1.96) == pytest.approx(0.975, abs=1e-4)
        assert normal_cdf(-1.96) == pytest.approx(0.025, abs=1e-4)


class TestAggregate:

    def test_means(self):
        outcomes = [
            make_outcome("a", Bucket.CONTROL, 600, confidence=0.6, accuracy=0.5),
            make_outcome("b", Bucket.CONTROL, 700, confidence=0.8, accuracy=0.7),
        ]
        agg = aggregate(Bucket.CONTROL, outcomes)
        assert agg.count == 2
        assert agg.mean_score == pytest.approx(650)
        assert agg.mean_confidence == pytest.approx(0.7)
        assert agg.mean_score_accuracy == pytest.approx(0.6)

    def test_empty_bucket_rejected(self):
        with pytest.raises(ValueError):
            aggregate(Bucket.VARIANT, [])


class TestSignificance:

    def test_clear_difference_is_significant(self):
        # pooled std 10, n 2 → t ≈ 7.07
        result = calculate_significance([90, 110], [140, 160])
        assert result.t_statistic == pytest.approx(50 / (10 / math.sqrt(2)))
        assert result.p_value < 0.001
        assert result.significant is True

    def test_small_difference_is_not_significant(self):
        result = calculate_significance([90, 110], [91, 111])
        assert result.p_value == pytest.approx(0.8875, abs=1e-3)
        assert result.significant is False

    def test_identical_samples(self):
        result = calculate_significance([1, 2, 3], [1, 2, 3])
        assert result.t_statistic == 0
        assert result.p_value == pytest.approx(1.0)
        assert result.significant is False

    def test_zero_variance_with_different_means(self):
        result = calculate_significance([600, 600, 600], [750, 750])
        assert result.p_value == 0.0
        assert math.isinf(result.t_statistic)
        assert result.significant is True

    def test_zero_variance_with_equal_means(self):
        result = calculate_significance([600, 600], [600])
        assert result.p_value == 1.0
        assert result.t_statistic == 0.0
        assert result.significant is False

    def test_uses_smaller_sample_size(self):
        few = calculate_significance([90, 110], [140, 160])
        many = calculate_significance([90, 110] * 10, [140, 160])
        assert few.t_statistic == pytest.approx(many.t_statistic)

    def test_custom_alpha(self):
        result = calculate_significance([90, 110], [91, 111], alpha=0.95)
        assert result.significant is True


class TestImprovement:

    @pytest.mark.parametrize(
        "control, variant, expected",
        [(0.5, 0.6, 20.0), (0.5, 0.4, -20.0), (0.8, 0.8, 0.0), (0.0, 0.0, 0.0)],
    )
    def test_relative_change(self, control, variant, expected):
        assert relative_change_pct(control, variant) == pytest.approx(expected)

    def test_zero_control_gives_signed_infinity(self):
        assert relative_change_pct(0.0, 0.2) == math.inf
        assert relative_change_pct(0.0, -0.2) == -math.inf

    def test_calculate_improvement(self):
        control = BucketAggregate(bucket=Bucket.CONTROL, count=3, mean_score=600,
                                  mean_confidence=0.6, mean_score_accuracy=0.6)
        variant = BucketAggregate(bucket=Bucket.VARIANT, count=3, mean_score=750,
                                  mean_confidence=0.8, mean_score_accuracy=0.8)
        improvement = calculate_improvement(control, variant)
        assert improvement.score_accuracy_pct == pytest.approx(100 / 3)
        assert improvement.confidence_delta == pytest.approx(0.2)


class TestRecommend:

    SIGNIFICANT = Significance(p_value=0.01, t_statistic=3.0, significant=True)
    NOT_SIGNIFICANT = Significance(p_value=0.4, t_statistic=0.8, significant=False)

    @pytest.mark.parametrize(
        "significance, pct, expected",
        [
            (SIGNIFICANT, 20.0, Recommendation.VARIANT),
            (SIGNIFICANT, -20.0, Recommendation.CONTROL),
            (SIGNIFICANT, 5.0, Recommendation.INCONCLUSIVE),
            (SIGNIFICANT, -5.0, Recommendation.INCONCLUSIVE),
            (NOT_SIGNIFICANT, 50.0, Recommendation.INCONCLUSIVE),
            (SIGNIFICANT, math.inf, Recommendation.VARIANT),
        ],
    )
    def test_recommendation(self, significance, pct, expected):
        improvement = Improvement(score_accuracy_pct=pct, confidence_delta=0.0)
        assert recommend(significance, improvement) == expected

    def test_custom_threshold(self):
        improvement = Improvement(score_accuracy_pct=8.0, confidence_delta=0.0)
        assert recommend(self.SIGNIFICANT, improvement, threshold_pct=10.0) == Recommendation.INCONCLUSIVE
