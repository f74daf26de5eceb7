"""
Training Data Collector
quote_scoring/scoring/training.py

Turns already-scored quotes into training examples for future calibration of
the weak predictors, validates them and summarizes them as a dataset.

Completeness (%) is measured over 8 fields:
    quote:      company id, company name, line items, project type
    enrichment: financial data, price references, regional data, compliance data
"""

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from quote_scoring.models.enrichment import EnrichmentBundle
from quote_scoring.models.quote import Quote
from quote_scoring.scoring.adjustment import AdjustmentOrchestrator
from quote_scoring.scoring.features import FeatureExtractor, FeatureVector

logger = structlog.get_logger(__name__)

MIN_COMPLETENESS_PCT = 30.0


@dataclass
class TrainingRecord:
    """A quote with the score it actually received."""
    quote: Quote
    actual_score: float
    actual_grade: str
    enrichment: Optional[EnrichmentBundle] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class TrainingExample:
    id: str
    quote_id: str
    features: FeatureVector
    actual_score: float
    actual_grade: str
    data_completeness: float       # 0-100
    sources_count: int
    created_at: datetime
    predicted_score: Optional[float] = None
    predicted_grade: Optional[str] = None
    error: Optional[float] = None  # |predicted − actual|


@dataclass
class DatasetStatistics:
    total: int
    by_grade: Dict[str, int]
    average_score: float
    average_completeness: float
    regions: List[str]
    project_types: List[str]


@dataclass
class TrainingDataset:
    version: str
    created_at: datetime
    examples: List[TrainingExample]
    statistics: DatasetStatistics


class TrainingDataCollector:
    """Collect, validate and export training examples."""

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        orchestrator: Optional[AdjustmentOrchestrator] = None,
    ):
        self.extractor = extractor or FeatureExtractor()
        self.orchestrator = orchestrator or AdjustmentOrchestrator()

    def collect(self, records: Iterable[TrainingRecord]) -> List[TrainingExample]:
        """Build one TrainingExample per record."""
        examples: List[TrainingExample] = []
        for record in records:
            enrichment = record.enrichment or EnrichmentBundle()
            features = self.extractor.extract(record.quote, enrichment)
            prediction = self.orchestrator.predict_score(features, record.actual_score)
            predicted = float(prediction.predicted_score)

            examples.append(
                TrainingExample(
                    id=f"training_{record.quote.id}",
                    quote_id=record.quote.id,
                    features=features,
                    actual_score=record.actual_score,
                    actual_grade=record.actual_grade,
                    data_completeness=self.calculate_completeness(record.quote, enrichment),
                    sources_count=len(enrichment.sources()),
                    created_at=record.created_at,
                    predicted_score=predicted,
                    predicted_grade=prediction.predicted_grade.value,
                    error=abs(predicted - record.actual_score),
                )
            )

        logger.info("training_examples_collected", count=len(examples))
        return examples

    @staticmethod
    def calculate_completeness(quote: Quote, enrichment: EnrichmentBundle) -> float:
        checks = [
            bool(quote.company.siret),
            bool(quote.company.name),
            len(quote.items) > 0,
            bool(quote.project.type),
            enrichment.has_financial_data(),
            enrichment.has_price_references(),
            enrichment.has_regional_data(),
            enrichment.has_compliance_data(),
        ]
        return sum(checks) / len(checks) * 100

    @staticmethod
    def validate_example(example: TrainingExample) -> Tuple[bool, List[str]]:
        """
        Returns:
            (valid, errors); errors lists every failed rule.
        """
        errors: List[str] = []
        if example.features.total_amount <= 0:
            errors.append("total_amount missing or invalid")
        if example.features.items_count <= 0:
            errors.append("items_count must be > 0")
        if not 0 < example.actual_score <= 1000:
            errors.append("actual_score invalid")
        if example.data_completeness < MIN_COMPLETENESS_PCT:
            errors.append(f"data_completeness too low (<{MIN_COMPLETENESS_PCT:g}%)")
        return len(errors) == 0, errors

    def clean_dataset(self, examples: Iterable[TrainingExample]) -> List[TrainingExample]:
        """Drop examples failing validate_example()."""
        kept: List[TrainingExample] = []
        for example in examples:
            valid, errors = self.validate_example(example)
            if valid:
                kept.append(example)
            else:
                logger.debug("training_example_rejected", example_id=example.id, errors=errors)
        return kept

    def create_dataset(self, examples: List[TrainingExample], version: str = "1.0.0") -> TrainingDataset:
        total = len(examples)
        by_grade = Counter(ex.actual_grade for ex in examples)
        stats = DatasetStatistics(
            total=total,
            by_grade=dict(by_grade),
            average_score=sum(ex.actual_score for ex in examples) / total if total else 0.0,
            average_completeness=(
                sum(ex.data_completeness for ex in examples) / total if total else 0.0
            ),
            regions=sorted({ex.features.region for ex in examples}),
            project_types=sorted({ex.features.project_type for ex in examples}),
        )
        return TrainingDataset(
            version=version,
            created_at=datetime.now(timezone.utc),
            examples=examples,
            statistics=stats,
        )

    def export_dataset(self, dataset: TrainingDataset, file_path: Path) -> Path:
        """Write the dataset as indented JSON."""
        path = Path(file_path)
        path.write_text(json.dumps(asdict(dataset), indent=2, default=str), encoding="utf-8")
        logger.info("training_dataset_exported", path=str(path), total=dataset.statistics.total)
        return path
