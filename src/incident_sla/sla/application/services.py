"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain services and configuration providers.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (config provider), not concrete implementations
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from incident_sla.config import (
    DETAIL_BASE_HEADERS, INCIDENT_SLA_HEADER, COLUMN_ROLES,
)
from incident_sla.core.exceptions import InvalidInputException
from incident_sla.shared.infrastructure.logging import get_logger, log_latency
from incident_sla.sla.domain import (
    ColumnMapping,
    ComplianceAggregator,
    ComplianceSummary,
    Incident,
    IncidentGrouper,
    IncidentOutcome,
    Interval,
    IntervalCalculator,
    SLAClassifier,
    SLAThresholdConfig,
)

logger = get_logger(__name__)


# ========== Config Interface (Dependency Inversion) ==========

class ISLAConfigProvider(ABC):
    """Interface for SLA threshold configuration access."""

    @abstractmethod
    def get_config(self) -> SLAThresholdConfig:
        """Get current SLA threshold configuration."""


# ========== Report headers ==========

def ordinal_suffix(n: int) -> str:
    """English ordinal suffix: 1 -> st, 2 -> nd, 11 -> th, 22 -> nd."""
    if 11 <= n % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def slot_headers(slot: int) -> tuple[str, str, str]:
    """Updated / Interval / Made SLA header names for 1-based ``slot``."""
    return (
        f"{slot}{ordinal_suffix(slot)} Updated",
        f"Interval {slot}",
        f"{INCIDENT_SLA_HEADER} {slot}",
    )


def build_headers(max_width: int) -> List[str]:
    headers = list(DETAIL_BASE_HEADERS)
    for slot in range(1, max_width + 1):
        headers.extend(slot_headers(slot))
    headers.append(INCIDENT_SLA_HEADER)
    return headers


@dataclass
class IncidentReport:
    """
    Everything derived from one input snapshot.

    ``headers`` and ``rows`` form the per-incident detail table; the typed
    incidents, intervals and outcomes are kept alongside for callers that
    want more than the rendered cells.
    """
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)
    max_width: int = 0
    incidents: List[Incident] = field(default_factory=list)
    intervals: List[List[Interval]] = field(default_factory=list)
    outcomes: List[IncidentOutcome] = field(default_factory=list)
    compliance: Optional[ComplianceSummary] = None

    @property
    def is_empty(self) -> bool:
        return not self.incidents


# ========== Application Services ==========

class IncidentReportService:
    """
    Service turning raw incident records into the interval report and the
    compliance summary.

    Pure batch transform: no state survives between calls.
    """

    def __init__(self, config_provider: ISLAConfigProvider):
        self._config_provider = config_provider

    def build_report(self, records: Any) -> IncidentReport:
        """
        Run the whole pipeline over one record snapshot.

        Args:
            records: Sequence of mappings (column name -> cell value)

        Returns:
            IncidentReport

        Raises:
            InvalidInputException: records are not a sequence of mappings,
                or carry no column at all
        """
        config = self._config_provider.get_config()
        records = self._validate_records(records)

        aggregator = ComplianceAggregator(config)
        if not records:
            logger.info("No incident records supplied")
            return IncidentReport(compliance=aggregator.aggregate([], []))

        keys = IncidentGrouper.column_keys(records)
        if not keys:
            raise InvalidInputException("records have no columns", {"records": len(records)})

        columns = self._resolve_columns(keys)
        discarded = sum(1 for record in records if not columns.number_of(record))

        with log_latency(logger, "group_incidents", records=len(records)):
            incidents = IncidentGrouper.group(records, columns)

        max_width, intervals = IntervalCalculator.compute(incidents)

        classifier = SLAClassifier(config)
        outcomes = [
            classifier.classify(incident, incident_intervals)
            for incident, incident_intervals in zip(incidents, intervals)
        ]

        compliance = aggregator.aggregate(incidents, outcomes)

        self._log_data_quality(incidents, intervals, compliance, discarded)
        logger.info(
            "Incident report built",
            extra={
                "records": len(records),
                "incidents": len(incidents),
                "max_width": max_width,
                "discarded_records": discarded,
            }
        )

        return IncidentReport(
            headers=build_headers(max_width),
            rows=[
                self._detail_row(incident, incident_intervals, outcome)
                for incident, incident_intervals, outcome in zip(incidents, intervals, outcomes)
            ],
            max_width=max_width,
            incidents=incidents,
            intervals=intervals,
            outcomes=outcomes,
            compliance=compliance,
        )

    @staticmethod
    def _validate_records(records: Any) -> List[Mapping]:
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            raise InvalidInputException(
                "expected a sequence of records",
                {"type": type(records).__name__}
            )
        records = list(records)
        for position, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise InvalidInputException(
                    f"record {position} is not a mapping",
                    {"position": position, "type": type(record).__name__}
                )
        return records

    @staticmethod
    def _resolve_columns(keys: List[str]) -> ColumnMapping:
        columns = ColumnMapping.resolve(keys)
        for role in COLUMN_ROLES:
            resolved = getattr(columns, role.lower())
            if resolved not in keys:
                logger.warning(
                    "No column resembles %s, falling back to default name",
                    role,
                    extra={"role": role, "headers": keys}
                )
        logger.debug("Resolved input columns", extra={"columns": asdict(columns)})
        return columns

    @staticmethod
    def _detail_row(
        incident: Incident,
        intervals: List[Interval],
        outcome: IncidentOutcome
    ) -> Dict[str, str]:
        row = {
            "Number": incident.number,
            "Priority": incident.priority,
            "State": incident.state,
            "Opened Date": incident.opened_display,
        }
        for interval, verdict in zip(intervals, outcome.interval_verdicts):
            updated_header, interval_header, sla_header = slot_headers(interval.index)
            position = interval.index - 1
            row[updated_header] = (
                incident.updates[position].display if position < incident.update_count else ""
            )
            row[interval_header] = interval.display
            row[sla_header] = verdict.value
        row[INCIDENT_SLA_HEADER] = outcome.verdict.value
        return row

    @staticmethod
    def _log_data_quality(
        incidents: List[Incident],
        intervals: List[List[Interval]],
        compliance: ComplianceSummary,
        discarded: int
    ) -> None:
        unparsed_updates = sum(
            1 for incident in incidents for event in incident.updates if event.parsed_at is None
        )
        missing_opened = sum(1 for incident in incidents if incident.opened_at is None)
        negative = [
            (incident.number, interval.index)
            for incident, incident_intervals in zip(incidents, intervals)
            for interval in incident_intervals
            if interval.is_negative
        ]

        if discarded:
            logger.info("Discarded records without an incident number", extra={"count": discarded})
        if unparsed_updates or missing_opened:
            logger.info(
                "Unparsable timestamps kept as empty values",
                extra={"unparsed_updates": unparsed_updates, "missing_opened": missing_opened}
            )
        if negative:
            logger.warning(
                "Out-of-order timestamps produced negative intervals",
                extra={"count": len(negative), "intervals": negative[:20]}
            )
        if compliance.excluded_incidents:
            logger.info(
                "Incidents outside every priority bucket left out of compliance",
                extra={"count": len(compliance.excluded_incidents)}
            )
