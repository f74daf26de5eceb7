"""
Enrichment bundle - external data gathered about a quoted company.

Every sub-record is optional; callers test presence through the ``has_*``
helpers instead of probing attributes.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class FinancialData(BaseModel):
    """Filed accounts (revenue and result history)."""
    revenue: List[float] = Field(default_factory=list)
    result: List[float] = Field(default_factory=list)
    ebitda: Optional[float] = None
    debt: Optional[float] = None
    last_update: Optional[str] = None


class EnrichedCompany(BaseModel):
    """Company record from official registries."""
    siret: Optional[str] = None
    name: Optional[str] = None
    financial_data: Optional[FinancialData] = None
    certifications: List[str] = Field(default_factory=list)
    years_active: Optional[int] = Field(default=None, ge=0)


class PriceReference(BaseModel):
    """Market price reference for a type of work."""
    label: str
    unit: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    average_price: Optional[float] = None


class EnrichmentBundle(BaseModel):
    """Read-only enrichment data consumed by feature extraction."""
    company: Optional[EnrichedCompany] = None
    price_references: List[PriceReference] = Field(default_factory=list)
    regional_data: Optional[Dict[str, Any]] = None
    compliance_data: Optional[Dict[str, Any]] = None
    weather_data: Optional[Dict[str, Any]] = None

    def has_official_identifier(self) -> bool:
        return self.company is not None and bool(self.company.siret)

    def has_financial_data(self) -> bool:
        return self.company is not None and self.company.financial_data is not None

    def has_certifications(self) -> bool:
        return self.company is not None and len(self.company.certifications) > 0

    def has_price_references(self) -> bool:
        return len(self.price_references) > 0

    def has_regional_data(self) -> bool:
        return bool(self.regional_data)

    def has_compliance_data(self) -> bool:
        return bool(self.compliance_data)

    def has_weather_data(self) -> bool:
        return bool(self.weather_data)

    def sources(self) -> List[str]:
        """Names of the enrichment sources present (weather is not counted)."""
        found: List[str] = []
        if self.has_official_identifier():
            found.append("sirene")
        if self.has_financial_data():
            found.append("infogreffe")
        if self.has_price_references():
            found.append("prices")
        if self.has_regional_data():
            found.append("regional")
        if self.has_compliance_data():
            found.append("compliance")
        return found
