#quote_scoring/models/experiment.py
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime, timezone
from typing import Optional, List

from quote_scoring.core.exceptions import InsufficientDataError
from quote_scoring.models.enumerations import Bucket, Recommendation


class VariantConfig(BaseModel):
    """Scoring configuration served to one bucket."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    use_alternate_model: bool = False
    model_weight: float = Field(default=0.0, ge=0, le=1)
    version: str = "1.0.0"


class ExperimentConfig(BaseModel):
    """
    A/B test definition. Immutable once built; re-register under the same
    test_id to replace it.
    """
    model_config = ConfigDict(frozen=True)

    test_id: str = Field(..., min_length=1)
    name: str
    control: VariantConfig
    variant: VariantConfig
    traffic_split: float = Field(..., description="Share of subjects routed to the variant (0-1)")
    start_date: datetime
    end_date: Optional[datetime] = None
    metrics: List[str] = Field(default_factory=lambda: ["score_accuracy", "confidence"])

    @field_validator("traffic_split")
    @classmethod
    def validate_traffic_split(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"traffic_split must be between 0 and 1, got {v}")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def ensure_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive datetimes are read as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def validate_date_range(self) -> "ExperimentConfig":
        if self.end_date is not None and self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        return self

    def variant_for(self, bucket: Bucket) -> VariantConfig:
        return self.variant if bucket == Bucket.VARIANT else self.control


class OutcomeMetrics(BaseModel):
    score_accuracy: float = Field(ge=0)
    user_satisfaction: Optional[float] = None
    recommendation_accuracy: Optional[float] = None


class ExperimentOutcome(BaseModel):
    """One scored subject within one test."""
    test_id: str
    subject_id: str
    bucket: Bucket
    score: float
    confidence: float = Field(ge=0, le=1)
    metrics: OutcomeMetrics
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BucketAggregate(BaseModel):
    """Per-bucket means."""
    bucket: Bucket
    count: int = Field(ge=0)
    mean_score: float
    mean_confidence: float
    mean_score_accuracy: float


class Improvement(BaseModel):
    score_accuracy_pct: float    # relative change of variant vs control, in %
    confidence_delta: float      # variant − control


class Significance(BaseModel):
    p_value: float
    t_statistic: float
    significant: bool


class ExperimentComparison(BaseModel):
    test_id: str
    control: BucketAggregate
    variant: BucketAggregate
    improvement: Improvement
    significance: Significance
    recommendation: Recommendation


@dataclass
class ComparisonResult:
    """Either a comparison or the reason none could be made."""
    test_id: str
    comparison: Optional[ExperimentComparison] = None
    error: Optional[InsufficientDataError] = None

    @property
    def ok(self) -> bool:
        return self.comparison is not None

    def unwrap(self) -> ExperimentComparison:
        if self.comparison is None:
            raise self.error or InsufficientDataError(self.test_id, 0, 0)
        return self.comparison
