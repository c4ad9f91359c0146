"""
SLA Domain Entities
====================

Pure Python domain entities for incident SLA reporting.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns. They are built
once per input snapshot and never mutated afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from incident_sla.config import ComplianceFlag, TOTAL_ROW_LABEL
from incident_sla.sla.domain.dates import DateNormalizer
from incident_sla.sla.domain.value_objects import UpdateEvent


def round_percentage(value: float) -> float:
    """One decimal, exact ties away from zero: 6.25 -> 6.3."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Incident:
    """
    Incident entity: all input rows sharing one ticket number.

    ``updates`` is already in chronological order (see ``UpdateEvent.sort_key``).
    """

    number: str
    priority: str = ""
    state: str = ""
    opened_at: Optional[datetime] = None
    updates: Tuple[UpdateEvent, ...] = ()

    def __post_init__(self):
        """Validate incident on initialization."""
        if not self.number.strip():
            raise ValueError("incident number cannot be blank")

    @property
    def update_count(self) -> int:
        return len(self.updates)

    @property
    def opened_display(self) -> str:
        return DateNormalizer.format_canonical(self.opened_at)

    def event_time(self, position: int) -> Optional[datetime]:
        """Parsed timestamp of update ``position`` (0-based), None when absent."""
        if 0 <= position < len(self.updates):
            return self.updates[position].parsed_at
        return None


@dataclass(frozen=True)
class ComplianceRow:
    """
    One line of the compliance summary.

    ``percentage_within`` is measured against the grand total of incidents in
    all buckets, so bucket percentages do not add up to 100.
    """

    label: str
    total: int = 0
    within: int = 0
    exceeding: int = 0
    percentage_within: Optional[float] = None
    flag: ComplianceFlag = ComplianceFlag.NOT_EVALUATED

    @property
    def is_total(self) -> bool:
        return self.label == TOTAL_ROW_LABEL

    @property
    def percentage_display(self) -> str:
        if self.percentage_within is None:
            return ""
        return f"{self.percentage_within:.1f}%"

    def as_cells(self) -> list:
        """Values in compliance table column order."""
        return [
            self.label,
            self.total,
            self.within,
            self.percentage_display,
            self.exceeding,
            self.flag.value,
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "priority": self.label,
            "total": self.total,
            "within": self.within,
            "exceeding": self.exceeding,
            "percentage_within": self.percentage_within,
            "flag": self.flag.value,
        }


@dataclass(frozen=True)
class ComplianceSummary:
    """Bucket rows, the trailing Total row, and the title metadata."""

    rows: Tuple[ComplianceRow, ...]
    opened_from: Optional[datetime] = None
    opened_to: Optional[datetime] = None
    title: str = ""
    excluded_incidents: Tuple[str, ...] = ()

    @property
    def bucket_rows(self) -> Tuple[ComplianceRow, ...]:
        return tuple(row for row in self.rows if not row.is_total)

    @property
    def total_row(self) -> ComplianceRow:
        return self.rows[-1]

    @property
    def overall_within_percentage(self) -> Optional[float]:
        """Share of all bucketed incidents that made SLA (title metadata only)."""
        total = self.total_row
        if total.total == 0:
            return None
        return round_percentage(total.within / total.total * 100)

    def row_for(self, label_prefix: str) -> Optional[ComplianceRow]:
        prefix = label_prefix.upper()
        for row in self.rows:
            if row.label.upper().startswith(prefix):
                return row
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "title": self.title,
            "opened_from": self.opened_from.isoformat() if self.opened_from else None,
            "opened_to": self.opened_to.isoformat() if self.opened_to else None,
            "overall_within_percentage": self.overall_within_percentage,
            "rows": [row.to_dict() for row in self.rows],
        }
