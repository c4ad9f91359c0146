"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from incident_sla.config import (
    SLAVerdict,
    DEFAULT_SLA_TARGET_MINUTES,
    DEFAULT_THRESHOLD_MINUTES,
    DEFAULT_PRIORITY_BUCKETS,
    DEFAULT_FLAGGED_PRIORITIES,
    DEFAULT_COMPLIANCE_TARGET_PERCENT,
)
from incident_sla.sla.domain.dates import DateNormalizer, to_milliseconds


_PRIORITY_DIGIT = re.compile(r"^P(\d)")


def leading_token(label: str) -> str:
    """Upper-cased token before the first separator: ``"p2 - High"`` -> ``"P2"``."""
    parts = label.strip().upper().split()
    return parts[0] if parts else ""


class SLAThresholdConfig(BaseModel):
    """
    SLA threshold table loaded from YAML.

    Maps a priority token (``P1`` .. ``P4``) to the longest allowed gap, in
    minutes, between two consecutive events of an incident.

    This is a value object - immutable and defined by its attributes.
    """
    sla_targets: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_SLA_TARGET_MINUTES),
        description="SLA threshold in minutes by priority token"
    )
    default_minutes: int = Field(
        default=DEFAULT_THRESHOLD_MINUTES,
        ge=1,
        description="Threshold for unknown or missing priorities"
    )
    compliance_target_percent: float = Field(
        default=DEFAULT_COMPLIANCE_TARGET_PERCENT,
        ge=0,
        le=100,
        description="Minimum % within SLA for a flagged bucket to be compliant"
    )
    flagged_priorities: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FLAGGED_PRIORITIES),
        description="Priority tokens whose bucket carries a compliance flag"
    )
    priority_buckets: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_BUCKETS),
        description="Compliance buckets in report order"
    )

    model_config = {"frozen": True}

    @field_validator("sla_targets")
    @classmethod
    def validate_sla_targets(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Normalise keys and back-fill missing priorities with defaults."""
        targets = {key.strip().upper(): minutes for key, minutes in v.items()}
        for priority, minutes in targets.items():
            if minutes <= 0:
                raise ValueError(f"SLA target for {priority} must be positive")
        for priority, minutes in DEFAULT_SLA_TARGET_MINUTES.items():
            targets.setdefault(priority, minutes)
        return targets

    @field_validator("flagged_priorities")
    @classmethod
    def validate_flagged_priorities(cls, v: List[str]) -> List[str]:
        return [token.strip().upper() for token in v]

    def threshold_for(self, priority_label: Any) -> timedelta:
        """
        Threshold for an incident priority label.

        Example:
            "P2 - High" -> 3 hours
            "p4"        -> 8 hours
            "Urgent"    -> default (8 hours)
        """
        if not isinstance(priority_label, str):
            return timedelta(minutes=self.default_minutes)

        label = priority_label.strip().upper()
        for priority in ("P1", "P2", "P3", "P4"):
            if label.startswith(priority):
                return self._minutes_for(priority)

        match = _PRIORITY_DIGIT.match(label)
        if match:
            return self._minutes_for(f"P{match.group(1)}")

        return timedelta(minutes=self.default_minutes)

    def _minutes_for(self, priority: str) -> timedelta:
        return timedelta(minutes=self.sla_targets.get(priority, self.default_minutes))

    def bucket_for(self, priority_label: Any) -> Optional[str]:
        """Compliance bucket whose leading token prefixes the label, if any."""
        label = str(priority_label or "").strip().upper()
        if not label:
            return None
        for bucket in self.priority_buckets:
            if label.startswith(leading_token(bucket)):
                return bucket
        return None

    def is_flagged(self, bucket: str) -> bool:
        return leading_token(bucket) in self.flagged_priorities


@dataclass(frozen=True)
class UpdateEvent:
    """
    One update touch of an incident.

    ``raw`` keeps the original cell content so unparsable values can still
    be shown in the report; ``parsed_at`` is None for those.
    """
    raw: Any
    parsed_at: Optional[datetime] = None

    @property
    def display(self) -> str:
        if self.parsed_at is not None:
            return DateNormalizer.format_canonical(self.parsed_at)
        return str(self.raw)

    def sort_key(self) -> tuple:
        """Parsed events first in time order, then unparsed ones by raw text."""
        if self.parsed_at is not None:
            return (0, self.parsed_at, "")
        return (1, datetime.min, str(self.raw))


@dataclass(frozen=True)
class Interval:
    """
    Gap between two consecutive events of an incident.

    Slot ``index`` is 1-based. When either endpoint is missing the interval
    is empty: it still occupies its slot but has no duration.
    """
    index: int
    previous: Optional[datetime] = None
    current: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.previous is None or self.current is None

    @property
    def duration(self) -> Optional[timedelta]:
        """Signed ``current - previous``; None for an empty interval."""
        if self.is_empty:
            return None
        return self.current - self.previous

    @property
    def is_negative(self) -> bool:
        """True when the later event is recorded before the earlier one."""
        duration = self.duration
        return duration is not None and duration < timedelta(0)

    @property
    def display(self) -> str:
        duration = self.duration
        if duration is None:
            return ""
        return DateNormalizer.format_duration(to_milliseconds(duration))


@dataclass(frozen=True)
class IncidentOutcome:
    """Per-interval verdicts of an incident plus the aggregate verdict."""
    number: str
    interval_verdicts: tuple
    verdict: SLAVerdict
