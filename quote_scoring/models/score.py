#quote_scoring/models/score.py
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class BaselineScore(BaseModel):
    """Output of a scoring engine for one quote."""
    total_score: float = Field(ge=0)
    grade: str
    axis_scores: List[Dict[str, Any]] = Field(default_factory=list)
    alerts: List[Dict[str, Any]] = Field(default_factory=list)
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)
    confidence_level: float = Field(default=70.0, ge=0, le=100, description="0-100%")
    model_adjustment: Optional[float] = Field(
        default=None,
        description="Points added by the adjustment model (None when not applied)"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)
