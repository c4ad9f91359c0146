"""
SLA Domain Services
====================

Stateless business logic turning raw incident records into intervals,
SLA verdicts and the compliance summary.

Pipeline:
    records -> IncidentGrouper -> IntervalCalculator -> SLAClassifier
            -> ComplianceAggregator
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from incident_sla.config import (
    ColumnRole, ComplianceFlag, SLAVerdict,
    COMPLIANCE_TITLE, TOTAL_ROW_LABEL,
)
from incident_sla.core.exceptions import DomainException
from incident_sla.sla.domain.dates import DateNormalizer
from incident_sla.sla.domain.entities import (
    Incident, ComplianceRow, ComplianceSummary, round_percentage,
)
from incident_sla.sla.domain.value_objects import (
    IncidentOutcome, Interval, SLAThresholdConfig, UpdateEvent,
)


_UPDATE_SEPARATORS = re.compile(r"[;,\n]+")
_WHITESPACE = re.compile(r"\s+")


def cell_text(value: Any) -> str:
    """Text of a cell; integral floats lose their ``.0`` (spreadsheet ids)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def resolve_column(keys: Iterable[str], target: str) -> Optional[str]:
    """
    Find the header best matching ``target``.

    An exact match ignoring case and whitespace wins; otherwise the first
    header containing ``target`` (case-insensitive). None when nothing fits.
    """
    keys = list(keys)
    wanted = _WHITESPACE.sub("", target.lower())
    for key in keys:
        if _WHITESPACE.sub("", str(key).lower()) == wanted:
            return key
    for key in keys:
        if target.lower() in str(key).lower():
            return key
    return None


@dataclass(frozen=True)
class ColumnMapping:
    """Header name used for each column role in one input snapshot."""
    number: str = ColumnRole.NUMBER
    priority: str = ColumnRole.PRIORITY
    state: str = ColumnRole.STATE
    opened: str = ColumnRole.OPENED
    updated: str = ColumnRole.UPDATED

    @classmethod
    def resolve(cls, keys: Iterable[str]) -> "ColumnMapping":
        """Resolve every role, falling back to the default literal name."""
        keys = list(keys)
        return cls(
            number=resolve_column(keys, ColumnRole.NUMBER) or ColumnRole.NUMBER,
            priority=resolve_column(keys, ColumnRole.PRIORITY) or ColumnRole.PRIORITY,
            state=resolve_column(keys, ColumnRole.STATE) or ColumnRole.STATE,
            opened=resolve_column(keys, ColumnRole.OPENED) or ColumnRole.OPENED,
            updated=resolve_column(keys, ColumnRole.UPDATED) or ColumnRole.UPDATED,
        )

    def number_of(self, record: Mapping[str, Any]) -> str:
        return cell_text(record.get(self.number)).strip()


def split_update_cell(value: Any) -> List[Any]:
    """A text cell may hold several timestamps separated by ``;``, ``,`` or newlines."""
    if is_blank(value):
        return []
    if isinstance(value, str):
        return [part.strip() for part in _UPDATE_SEPARATORS.split(value) if part.strip()]
    return [value]


class _IncidentDraft:
    """Mutable accumulator, only alive while grouping runs."""

    def __init__(self, number: str):
        self.number = number
        self.priority = ""
        self.state = ""
        self.opened_candidates: List[Any] = []
        self.updated_candidates: List[Any] = []

    def absorb(self, record: Mapping[str, Any], columns: ColumnMapping) -> None:
        if not self.priority:
            self.priority = cell_text(record.get(columns.priority))
        if not self.state:
            self.state = cell_text(record.get(columns.state))

        opened = record.get(columns.opened)
        if not is_blank(opened):
            self.opened_candidates.append(opened)
        self.updated_candidates.extend(split_update_cell(record.get(columns.updated)))

    def freeze(self) -> Incident:
        opened_at: Optional[datetime] = None
        for candidate in self.opened_candidates:
            parsed = DateNormalizer.parse(candidate)
            # strict < keeps the first-seen candidate on ties
            if parsed is not None and (opened_at is None or parsed < opened_at):
                opened_at = parsed

        updates = sorted(
            (UpdateEvent(raw=raw, parsed_at=DateNormalizer.parse(raw))
             for raw in self.updated_candidates),
            key=UpdateEvent.sort_key,
        )

        return Incident(
            number=self.number,
            priority=self.priority,
            state=self.state,
            opened_at=opened_at,
            updates=tuple(updates),
        )


class IncidentGrouper:
    """Groups raw records by incident number."""

    @staticmethod
    def column_keys(records: Sequence[Mapping[str, Any]]) -> List[str]:
        """Every header seen across the records, in first-seen order."""
        seen: Dict[str, None] = {}
        for record in records:
            for key in record.keys():
                seen.setdefault(key, None)
        return list(seen)

    @staticmethod
    def group(
        records: Sequence[Mapping[str, Any]],
        columns: Optional[ColumnMapping] = None
    ) -> List[Incident]:
        """
        Reduce records to incidents, in order of first appearance.

        Records whose number is blank after trimming are discarded.

        Args:
            records: Input rows (column name -> cell value)
            columns: Pre-resolved column mapping; resolved from the headers if omitted

        Returns:
            List of incidents
        """
        if columns is None:
            columns = ColumnMapping.resolve(IncidentGrouper.column_keys(records))

        drafts: Dict[str, _IncidentDraft] = {}
        for record in records:
            number = columns.number_of(record)
            if not number:
                continue
            if number not in drafts:
                drafts[number] = _IncidentDraft(number)
            drafts[number].absorb(record, columns)

        return [draft.freeze() for draft in drafts.values()]


class IntervalCalculator:
    """Builds the interval grid, sized to the widest incident of the dataset."""

    @staticmethod
    def max_width(incidents: Iterable[Incident]) -> int:
        return max((incident.update_count for incident in incidents), default=0)

    @staticmethod
    def intervals_for(incident: Incident, width: int) -> List[Interval]:
        """
        Exactly ``width`` intervals for one incident.

        Slot 1 spans opened -> first update, slot i spans update i-1 -> update i.
        Slots beyond the incident's own updates are empty.
        """
        intervals = []
        for position in range(width):
            previous = incident.opened_at if position == 0 else incident.event_time(position - 1)
            intervals.append(
                Interval(
                    index=position + 1,
                    previous=previous,
                    current=incident.event_time(position),
                )
            )
        return intervals

    @staticmethod
    def compute(incidents: Sequence[Incident]) -> Tuple[int, List[List[Interval]]]:
        """
        Two passes: reduce to the dataset width, then map every incident.

        Returns:
            Tuple of (max_width, intervals per incident in input order)
        """
        width = IntervalCalculator.max_width(incidents)
        return width, [IntervalCalculator.intervals_for(incident, width) for incident in incidents]


class SLAClassifier:
    """Classifies intervals against the incident's priority threshold."""

    def __init__(self, config: SLAThresholdConfig):
        self._config = config

    def verdict_for(self, interval: Interval, priority: str) -> SLAVerdict:
        duration = interval.duration
        if duration is None:
            return SLAVerdict.UNDETERMINED
        # signed comparison: an out-of-order (negative) gap never fails
        if duration <= self._config.threshold_for(priority):
            return SLAVerdict.PASS
        return SLAVerdict.FAIL

    @staticmethod
    def aggregate(verdicts: Iterable[SLAVerdict]) -> SLAVerdict:
        """
        Incident verdict: any Fail wins, else Pass if anything was computed.

        Example:
            [Y, N, Y] -> N
            [Y, Y]    -> Y
            []        -> ""
        """
        computed = [verdict for verdict in verdicts if verdict != SLAVerdict.UNDETERMINED]
        if not computed:
            return SLAVerdict.UNDETERMINED
        if SLAVerdict.FAIL in computed:
            return SLAVerdict.FAIL
        return SLAVerdict.PASS

    def classify(self, incident: Incident, intervals: Sequence[Interval]) -> IncidentOutcome:
        verdicts = tuple(self.verdict_for(interval, incident.priority) for interval in intervals)
        return IncidentOutcome(
            number=incident.number,
            interval_verdicts=verdicts,
            verdict=self.aggregate(verdicts),
        )


@dataclass
class _BucketCount:
    total: int = 0
    within: int = 0
    exceeding: int = 0


class ComplianceAggregator:
    """Rolls incident verdicts up into per-priority compliance rows."""

    def __init__(self, config: SLAThresholdConfig):
        self._config = config

    def aggregate(
        self,
        incidents: Sequence[Incident],
        outcomes: Sequence[IncidentOutcome]
    ) -> ComplianceSummary:
        """
        Build the compliance summary.

        Incidents whose priority matches no bucket are left out of every
        count and listed in ``excluded_incidents``.
        """
        if len(incidents) != len(outcomes):
            raise DomainException(
                "every incident needs exactly one outcome",
                {"incidents": len(incidents), "outcomes": len(outcomes)}
            )

        counts = {bucket: _BucketCount() for bucket in self._config.priority_buckets}
        excluded = []
        for incident, outcome in zip(incidents, outcomes):
            bucket = self._config.bucket_for(incident.priority)
            if bucket is None:
                excluded.append(incident.number)
                continue
            count = counts[bucket]
            count.total += 1
            if outcome.verdict == SLAVerdict.PASS:
                count.within += 1
            elif outcome.verdict == SLAVerdict.FAIL:
                count.exceeding += 1

        grand_total = sum(count.total for count in counts.values())
        rows = [self._bucket_row(bucket, count, grand_total) for bucket, count in counts.items()]
        rows.append(
            ComplianceRow(
                label=TOTAL_ROW_LABEL,
                total=grand_total,
                within=sum(count.within for count in counts.values()),
                exceeding=sum(count.exceeding for count in counts.values()),
            )
        )

        opened_from, opened_to = self.opened_range(incidents)
        return ComplianceSummary(
            rows=tuple(rows),
            opened_from=opened_from,
            opened_to=opened_to,
            title=self.title(opened_from, opened_to),
            excluded_incidents=tuple(excluded),
        )

    def _bucket_row(self, bucket: str, count: _BucketCount, grand_total: int) -> ComplianceRow:
        if grand_total == 0:
            return ComplianceRow(label=bucket)

        # normalised by the grand total, not by the bucket's own total
        percentage = count.within / grand_total * 100
        flag = ComplianceFlag.NOT_EVALUATED
        if self._config.is_flagged(bucket):
            if percentage < self._config.compliance_target_percent:
                flag = ComplianceFlag.NON_COMPLIANT
            else:
                flag = ComplianceFlag.COMPLIANT

        return ComplianceRow(
            label=bucket,
            total=count.total,
            within=count.within,
            exceeding=count.exceeding,
            percentage_within=round_percentage(percentage),
            flag=flag,
        )

    @staticmethod
    def opened_range(incidents: Iterable[Incident]) -> Tuple[Optional[datetime], Optional[datetime]]:
        opened = [incident.opened_at for incident in incidents if incident.opened_at is not None]
        if not opened:
            return None, None
        return min(opened), max(opened)

    @staticmethod
    def title(opened_from: Optional[datetime], opened_to: Optional[datetime]) -> str:
        if opened_from is None or opened_to is None:
            return COMPLIANCE_TITLE
        return (
            f"{COMPLIANCE_TITLE} - {DateNormalizer.format_short(opened_from)}"
            f" to {DateNormalizer.format_short(opened_to)}"
        )
