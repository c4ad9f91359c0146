"""
SLA Domain Layer
================

Domain layer for incident SLA reporting.

Contains:
- Entities: Core business objects (Incident, ComplianceRow, ComplianceSummary)
- Value Objects: Immutable objects defined by attributes (SLAThresholdConfig,
  UpdateEvent, Interval, IncidentOutcome)
- Domain Services: Stateless business logic (DateNormalizer, IncidentGrouper,
  IntervalCalculator, SLAClassifier, ComplianceAggregator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from incident_sla.sla.domain.dates import DateNormalizer
from incident_sla.sla.domain.entities import Incident, ComplianceRow, ComplianceSummary
from incident_sla.sla.domain.value_objects import (
    SLAThresholdConfig,
    UpdateEvent,
    Interval,
    IncidentOutcome,
)
from incident_sla.sla.domain.services import (
    ColumnMapping,
    IncidentGrouper,
    IntervalCalculator,
    SLAClassifier,
    ComplianceAggregator,
    resolve_column,
)

__all__ = [
    # Entities
    "Incident",
    "ComplianceRow",
    "ComplianceSummary",
    # Value Objects
    "SLAThresholdConfig",
    "UpdateEvent",
    "Interval",
    "IncidentOutcome",
    # Domain Services
    "DateNormalizer",
    "ColumnMapping",
    "IncidentGrouper",
    "IntervalCalculator",
    "SLAClassifier",
    "ComplianceAggregator",
    "resolve_column",
]
