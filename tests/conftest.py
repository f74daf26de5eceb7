# tests/conftest.py

"""
Pytest Fixtures - Shared quotes, enrichment bundles, stub engines and harnesses

QUOTE REFERENCE:
- sparse_quote:    2 short items, no company id, no surface      (small project)
- detailed_quote:  5 fully specified items with brand markers    (medium project)
- large_quote:     3 items for a 150k project                    (large project)
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from quote_scoring.experiments.harness import ExperimentHarness
from quote_scoring.experiments.sinks import InMemoryResultSink
from quote_scoring.models.enrichment import (
    EnrichedCompany,
    EnrichmentBundle,
    FinancialData,
    PriceReference,
)
from quote_scoring.models.experiment import VariantConfig
from quote_scoring.models.quote import CompanyInfo, LineItem, ProjectInfo, Quote, ScoringContext
from quote_scoring.models.score import BaselineScore
from quote_scoring.scoring.adjustment import score_to_grade
from quote_scoring.services.executor import ParallelExecutor

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# STUB ENGINES
# =============================================================================

class StubBaselineEngine:
    """Baseline engine returning a fixed score and recording its calls."""

    def __init__(self, total_score: float = 700.0, confidence_level: float = 70.0):
        self.total_score = total_score
        self.confidence_level = confidence_level
        self.calls: List[str] = []

    async def calculate_score(self, quote, enrichment, context) -> BaselineScore:
        self.calls.append(quote.id)
        return BaselineScore(
            total_score=self.total_score,
            grade=score_to_grade(self.total_score).value,
            confidence_level=self.confidence_level,
            metadata={"engine": "stub"},
        )


class VariantAwareEngine:
    """Scores differently per variant id; used to drive comparisons."""

    def __init__(self, variant: Optional[VariantConfig], scores: dict, confidences: dict):
        self.variant = variant
        self.scores = scores
        self.confidences = confidences

    async def calculate_score(self, quote, enrichment, context) -> BaselineScore:
        key = self.variant.id if self.variant else "default"
        score = self.scores[key]
        return BaselineScore(
            total_score=score,
            grade=score_to_grade(score).value,
            confidence_level=self.confidences[key],
            metadata={"variant_id": key},
        )


class FailingEngine:
    async def calculate_score(self, quote, enrichment, context) -> BaselineScore:
        raise RuntimeError("baseline unavailable")


async def _no_sleep(_seconds: float) -> None:
    return None


# =============================================================================
# QUOTE FIXTURES
# =============================================================================

@pytest.fixture
def sparse_quote():
    """Two vague lines, nothing to identify the company."""
    return Quote(
        id="quote-sparse",
        total_amount=2_400.0,
        items=[
            LineItem(description="Peinture", total_price=1_200.0),
            LineItem(description="Divers", total_price=1_200.0),
        ],
    )


@pytest.fixture
def detailed_quote():
    """Five fully specified lines, each naming a brand or reference."""
    description = (
        "Fourniture et pose de carrelage grès cérame, marque Porcelanosa, "
        "format 60x60, colle flexible incluse"
    )
    return Quote(
        id="quote-detailed",
        total_amount=45_000.0,
        items=[
            LineItem(
                description=description,
                quantity=20.0,
                unit="m2",
                unit_price=90.0,
                total_price=1_800.0,
            )
            for _ in range(5)
        ],
        project=ProjectInfo(type="renovation", surface=90.0, region="Occitanie"),
        company=CompanyInfo(siret="12345678900012", name="Carrelages du Sud"),
    )


@pytest.fixture
def large_quote():
    return Quote(
        id="quote-large",
        total_amount=150_000.0,
        items=[
            LineItem(description="Gros oeuvre", quantity=1, unit="forfait",
                     unit_price=100_000.0, total_price=100_000.0),
            LineItem(description="Charpente", quantity=1, unit="forfait",
                     unit_price=30_000.0, total_price=30_000.0),
            LineItem(description="Couverture", quantity=1, unit="forfait",
                     unit_price=20_000.0, total_price=20_000.0),
        ],
        project=ProjectInfo(type="construction", region="Bretagne"),
    )


# =============================================================================
# ENRICHMENT FIXTURES
# =============================================================================

@pytest.fixture
def empty_enrichment():
    return EnrichmentBundle()


@pytest.fixture
def full_enrichment():
    """All five counted sources present, certified company."""
    return EnrichmentBundle(
        company=EnrichedCompany(
            siret="12345678900012",
            name="Carrelages du Sud",
            financial_data=FinancialData(revenue=[850_000.0, 910_000.0], result=[42_000.0, 51_000.0]),
            certifications=["RGE", "Qualibat"],
            years_active=12,
        ),
        price_references=[
            PriceReference(label="carrelage", unit="m2", min_price=40.0, max_price=120.0, average_price=75.0),
        ],
        regional_data={"region": "Occitanie", "price_index": 1.02},
        compliance_data={"rge_valid": True},
    )


@pytest.fixture
def scoring_context():
    return ScoringContext(profile="B2C", project_type="renovation")


# =============================================================================
# ENGINE / EXECUTOR / HARNESS FIXTURES
# =============================================================================

@pytest.fixture
def stub_engine():
    return StubBaselineEngine()


@pytest.fixture
def fast_executor():
    """Executor whose backoff sleeps return immediately."""
    return ParallelExecutor(sleep=_no_sleep)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def result_sink():
    return InMemoryResultSink()


@pytest.fixture
def variant_scores():
    """Per-variant score / confidence tables for VariantAwareEngine."""
    return {
        "scores": {"default": 600.0, "ctrl": 600.0, "alt": 750.0},
        "confidences": {"default": 60.0, "ctrl": 60.0, "alt": 80.0},
    }


@pytest.fixture
def variant_harness(variant_scores, fixed_clock, result_sink, fast_executor):
    """Harness whose engine score depends only on the variant id."""
    factory = lambda variant: VariantAwareEngine(variant, **variant_scores)
    return ExperimentHarness(
        factory,
        sink=result_sink,
        executor=fast_executor,
        clock=fixed_clock,
    )


@pytest.fixture
def experiment_payload():
    """Valid experiment definition active at FIXED_NOW."""
    return {
        "test_id": "alt-model-2025",
        "name": "Alternate model rollout",
        "control": {"id": "ctrl", "name": "Control"},
        "variant": {"id": "alt", "name": "Alternate", "use_alternate_model": True, "model_weight": 0.3},
        "traffic_split": 0.5,
        "start_date": FIXED_NOW - timedelta(days=7),
        "end_date": FIXED_NOW + timedelta(days=7),
    }
