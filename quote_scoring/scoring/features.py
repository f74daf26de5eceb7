"""
Feature Extractor
quote_scoring/scoring/features.py

Derives the fixed-shape FeatureVector consumed by the weak predictors from a
quote and its enrichment bundle.

Features:
    monetary     total_amount, average_item_price, price_per_area
    company      official id, financial data, certifications, years active
    enrichment   source count (max 5) + per-source presence flags
    text         description quality, technical completeness, materials specified
    context      project type, region, size bucket

Ratios are guarded against zero-item quotes (they default to 0).
"""

import re
from dataclasses import dataclass
from typing import Optional

import structlog

from quote_scoring.config import settings
from quote_scoring.models.enrichment import EnrichmentBundle
from quote_scoring.models.enumerations import ProjectSize
from quote_scoring.models.quote import LineItem, Quote
from quote_scoring.scoring.utils import safe_ratio

logger = structlog.get_logger(__name__)

# Descriptions longer than this count as "described"
DESCRIPTION_MIN_LENGTH = 50

# Brand / reference / model stems (French and English), inflections included
MATERIAL_MARKERS = re.compile(
    r"\b(marque|r[ée]f[ée]rence|mod[èe]le|brand|reference|model)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class FeatureVector:
    """Immutable snapshot derived once per scoring pass."""
    # Monetary
    total_amount: float
    items_count: int
    average_item_price: float
    price_per_area: Optional[float]
    # Company trust
    company_has_official_id: bool
    company_has_financial_data: bool
    company_has_certifications: bool
    company_years_active: Optional[int]
    # Enrichment coverage
    enrichment_sources_count: int
    has_price_references: bool
    has_regional_data: bool
    has_compliance_data: bool
    # Text quality (ratios in [0, 1])
    items_description_quality: float
    technical_details_completeness: float
    materials_specified: int
    quantities_accuracy: float
    # Context
    project_type: str
    region: str
    project_size: ProjectSize

    def __post_init__(self):
        for name in (
            "items_description_quality",
            "technical_details_completeness",
            "quantities_accuracy",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        for name in ("items_count", "enrichment_sources_count", "materials_specified"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")


def size_bucket(total_amount: float) -> ProjectSize:
    """Map a quote total to its coarse size bucket."""
    if total_amount > settings.SIZE_LARGE_THRESHOLD:
        return ProjectSize.LARGE
    if total_amount > settings.SIZE_MEDIUM_THRESHOLD:
        return ProjectSize.MEDIUM
    return ProjectSize.SMALL


def _is_described(item: LineItem) -> bool:
    return len(item.description or "") > DESCRIPTION_MIN_LENGTH


def _is_technically_complete(item: LineItem) -> bool:
    return bool(item.unit) and bool(item.quantity) and bool(item.unit_price)


def _specifies_material(item: LineItem) -> bool:
    return MATERIAL_MARKERS.search(item.description or "") is not None


class FeatureExtractor:
    """Build a FeatureVector from a quote and its enrichment bundle."""

    def extract(
        self,
        quote: Quote,
        enrichment: Optional[EnrichmentBundle] = None,
    ) -> FeatureVector:
        enrichment = enrichment or EnrichmentBundle()
        items = quote.items
        items_count = len(items)
        total_amount = float(quote.total_amount or 0.0)

        average_item_price = (
            sum(item.total_price or 0.0 for item in items) / items_count
            if items_count > 0
            else 0.0
        )

        described = sum(1 for item in items if _is_described(item))
        complete = sum(1 for item in items if _is_technically_complete(item))
        materials = sum(1 for item in items if _specifies_material(item))

        description_quality = safe_ratio(described, items_count)
        technical_completeness = safe_ratio(complete, items_count)

        surface = quote.project.surface
        price_per_area = total_amount / surface if surface else None

        company = enrichment.company
        features = FeatureVector(
            total_amount=total_amount,
            items_count=items_count,
            average_item_price=average_item_price,
            price_per_area=price_per_area,
            company_has_official_id=bool(quote.company.siret) or enrichment.has_official_identifier(),
            company_has_financial_data=enrichment.has_financial_data(),
            company_has_certifications=enrichment.has_certifications(),
            company_years_active=company.years_active if company is not None else None,
            enrichment_sources_count=len(enrichment.sources()),
            has_price_references=enrichment.has_price_references(),
            has_regional_data=enrichment.has_regional_data(),
            has_compliance_data=enrichment.has_compliance_data(),
            items_description_quality=description_quality,
            technical_details_completeness=technical_completeness,
            materials_specified=materials,
            quantities_accuracy=technical_completeness,
            project_type=quote.project.type or "unknown",
            region=quote.project.region or "unknown",
            project_size=size_bucket(total_amount),
        )

        logger.debug(
            "features_extracted",
            quote_id=quote.id,
            items_count=items_count,
            enrichment_sources=features.enrichment_sources_count,
            project_size=features.project_size.value,
        )
        return features
