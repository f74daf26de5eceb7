"""Pydantic data models for quotes, enrichment, scores and experiments."""

from quote_scoring.models.enumerations import (
    Bucket,
    ExperimentStatus,
    Grade,
    ProjectSize,
    Recommendation,
)
from quote_scoring.models.quote import CompanyInfo, LineItem, ProjectInfo, Quote, ScoringContext
from quote_scoring.models.enrichment import (
    EnrichedCompany,
    EnrichmentBundle,
    FinancialData,
    PriceReference,
)
from quote_scoring.models.score import BaselineScore
from quote_scoring.models.experiment import (
    BucketAggregate,
    ComparisonResult,
    ExperimentComparison,
    ExperimentConfig,
    ExperimentOutcome,
    Improvement,
    OutcomeMetrics,
    Significance,
    VariantConfig,
)
