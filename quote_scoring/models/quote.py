#quote_scoring/models/quote.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal, Dict, Any


class LineItem(BaseModel):
    """A single priced line of a construction quote."""
    description: str = ""
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None


class ProjectInfo(BaseModel):
    """Project context extracted from the quote document."""
    type: Optional[str] = None
    surface: Optional[float] = Field(default=None, ge=0, description="Surface in m²")
    region: Optional[str] = None


class CompanyInfo(BaseModel):
    """Issuing company as printed on the quote."""
    siret: Optional[str] = Field(default=None, description="Official company identifier")
    name: Optional[str] = None


class Quote(BaseModel):
    """Quote record as handed over by the upload pipeline."""
    id: str
    total_amount: float = Field(default=0.0, ge=0)
    items: List[LineItem] = Field(default_factory=list)
    project: ProjectInfo = Field(default_factory=ProjectInfo)
    company: CompanyInfo = Field(default_factory=CompanyInfo)


class ScoringContext(BaseModel):
    """Caller context forwarded untouched to the scoring engine."""
    model_config = ConfigDict(extra="allow")

    profile: Literal["B2C", "B2B"] = "B2C"
    project_type: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
