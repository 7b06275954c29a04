# SPDX-License-Identifier: Apache-2.0

"""
Reporting period domain logic.

Pure functions for date validation, interval overlap, the default section
catalog and generation of report sections for a new period.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from ..models.entities import ReportingPeriod, ReportSection, SectionCatalogItem
from ..models.enums import Category, ReportingMode


INVALID_DATES = "Invalid date format. Please provide valid dates."
START_AFTER_END = "Start date must be before end date."
OVERLAP = "Reporting period overlaps with existing period '{name}' ({start} - {end})."

# Catalog codes a simplified report is limited to
SIMPLIFIED_CODES = frozenset({"ENV-001", "ENV-002", "SOC-001", "SOC-002", "GOV-001", "GOV-002"})

DEFAULT_CATALOG: Tuple[Tuple[str, str, Category, str], ...] = (
    ("ENV-001", "Energy & Emissions", Category.ENVIRONMENTAL,
     "Energy consumption, GHG emissions, carbon footprint"),
    ("ENV-002", "Waste & Recycling", Category.ENVIRONMENTAL,
     "Waste generation, recycling rates, circular economy initiatives"),
    ("ENV-003", "Water & Biodiversity", Category.ENVIRONMENTAL,
     "Water usage, water quality, biodiversity impact"),
    ("ENV-004", "Supply Chain Environmental Impact", Category.ENVIRONMENTAL,
     "Supplier environmental performance, sustainable sourcing"),
    ("SOC-001", "Employee Health & Safety", Category.SOCIAL,
     "Workplace safety metrics, injury rates, wellness programs"),
    ("SOC-002", "Diversity & Inclusion", Category.SOCIAL,
     "Workforce diversity, equal opportunity, inclusion initiatives"),
    ("SOC-003", "Employee Development", Category.SOCIAL,
     "Training hours, skill development, career progression"),
    ("SOC-004", "Community Engagement", Category.SOCIAL,
     "Social investment, local employment, community programs"),
    ("SOC-005", "Human Rights", Category.SOCIAL,
     "Human rights policy, supply chain labor practices"),
    ("GOV-001", "Board Composition", Category.GOVERNANCE,
     "Board structure, independence, diversity, expertise"),
    ("GOV-002", "Ethics & Compliance", Category.GOVERNANCE,
     "Code of conduct, anti-corruption, compliance training"),
    ("GOV-003", "Risk Management", Category.GOVERNANCE,
     "Risk framework, ESG risk integration, climate risk"),
    ("GOV-004", "Stakeholder Engagement", Category.GOVERNANCE,
     "Stakeholder dialogue, materiality assessment"),
)


@dataclass
class DateRangeResult:
    """Parsed and validated period bounds."""
    is_valid: bool
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    error_message: Optional[str] = None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime string.

    Timezone-aware values are converted to UTC and made naive so plain dates
    and timestamps compare against each other. Returns None when the value is
    empty or unparseable.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def validate_date_range(start_date: str, end_date: str) -> DateRangeResult:
    """Validate that both bounds parse and start precedes end."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return DateRangeResult(is_valid=False, error_message=INVALID_DATES)
    if start >= end:
        return DateRangeResult(is_valid=False, error_message=START_AFTER_END)
    return DateRangeResult(is_valid=True, start=start, end=end)


def ranges_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap test."""
    return a_start < b_end and b_start < a_end


def find_overlapping_period(
    start: datetime,
    end: datetime,
    periods: Iterable[ReportingPeriod],
    exclude_id: Optional[str] = None
) -> Optional[ReportingPeriod]:
    """
    Return the first period whose range overlaps [start, end).

    Periods with unparseable stored dates are ignored. Status is not
    considered: closed periods still block overlapping ranges.
    """
    for period in periods:
        if exclude_id is not None and period.id == exclude_id:
            continue
        other_start = parse_date(period.start_date)
        other_end = parse_date(period.end_date)
        if other_start is None or other_end is None:
            continue
        if ranges_overlap(start, end, other_start, other_end):
            return period
    return None


def overlap_message(period: ReportingPeriod) -> str:
    return OVERLAP.format(name=period.name, start=period.start_date, end=period.end_date)


def build_default_catalog() -> List[SectionCatalogItem]:
    """Fresh copies of the default catalog items."""
    return [
        SectionCatalogItem(code=code, title=title, category=category, description=description)
        for code, title, category, description in DEFAULT_CATALOG
    ]


def select_catalog_items(
    catalog: Iterable[SectionCatalogItem],
    reporting_mode: str
) -> List[SectionCatalogItem]:
    """
    Pick the catalog items a period receives.

    Deprecated items are always skipped. Simplified mode keeps only the fixed
    simplified code subset; extended mode keeps everything. Catalog order is
    preserved.
    """
    active = [item for item in catalog if not item.is_deprecated]
    if reporting_mode == ReportingMode.SIMPLIFIED.value:
        return [item for item in active if item.code.upper() in SIMPLIFIED_CODES]
    return active


def generate_sections(period_id: str, catalog_items: List[SectionCatalogItem]) -> List[ReportSection]:
    """Materialize one draft section per catalog item with a zero-based order."""
    return [
        ReportSection(
            period_id=period_id,
            title=item.title,
            category=item.category,
            description=item.description,
            status="draft",
            completeness="empty",
            order=index,
            catalog_code=item.code
        )
        for index, item in enumerate(catalog_items)
    ]
