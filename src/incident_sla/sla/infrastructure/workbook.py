"""
Workbook Adapter
================

openpyxl-backed reader and writer for the spreadsheet boundary:
- WorkbookReader turns the first (or a named) sheet into raw records
- WorkbookWriter renders an IncidentReport as the two-sheet output workbook

Timestamps are written as text so that spreadsheet applications do not
shift them into another timezone.
"""

import io
import zipfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from incident_sla.config import (
    SheetName, COMPLIANCE_HEADERS, INCIDENT_SLA_HEADER,
)
from incident_sla.core.exceptions import WorkbookException
from incident_sla.shared.infrastructure.logging import get_logger
from incident_sla.sla.application.services import IncidentReport

logger = get_logger(__name__)

Source = Union[str, Path, BinaryIO]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_CENTER = Alignment(horizontal="center", vertical="center")
_BOLD = Font(bold=True)


def _describe(source: Any) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", "<stream>")


class WorkbookReader:
    """Reads raw incident records from an .xlsx workbook."""

    @staticmethod
    def read_records(source: Source, sheet_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read one sheet as records.

        The first row holds the headers. Empty cells become ``""`` and fully
        blank rows are skipped; other cell types (datetime, numbers, text)
        are passed through untouched.

        Args:
            source: Path or binary stream of the workbook
            sheet_name: Sheet to read (first sheet if omitted)

        Returns:
            List of records (header -> cell value)
        """
        try:
            workbook = load_workbook(source, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as e:
            raise WorkbookException(_describe(source), f"cannot open workbook: {e}") from e

        try:
            if sheet_name is None:
                sheet = workbook.worksheets[0]
            elif sheet_name in workbook.sheetnames:
                sheet = workbook[sheet_name]
            else:
                raise WorkbookException(
                    _describe(source),
                    f"no sheet named '{sheet_name}'",
                    {"sheets": workbook.sheetnames}
                )

            rows = sheet.iter_rows(values_only=True)
            header_row = next(rows, None)
            if header_row is None:
                return []
            headers = WorkbookReader._headers(header_row)

            records = []
            for values in rows:
                if all(value is None or value == "" for value in values):
                    continue
                record = {header: "" for header in headers}
                for header, value in zip(headers, values):
                    if value is not None:
                        record[header] = value
                records.append(record)
        finally:
            workbook.close()

        logger.info(
            "Workbook read",
            extra={"source": _describe(source), "sheet": sheet.title, "records": len(records)}
        )
        return records

    @staticmethod
    def _headers(header_row: tuple) -> List[str]:
        headers: List[str] = []
        for position, value in enumerate(header_row, start=1):
            name = str(value).strip() if value is not None and str(value).strip() else f"Column {position}"
            candidate, suffix = name, 1
            while candidate in headers:
                candidate = f"{name}_{suffix}"
                suffix += 1
            headers.append(candidate)
        return headers


class WorkbookWriter:
    """Renders an IncidentReport into the 'Incident Intervals' and 'Compliance and Credit' sheets."""

    DETAIL_MIN_WIDTH = 12
    DETAIL_MAX_WIDTH = 60
    SUMMARY_MIN_WIDTH = 10
    SUMMARY_MAX_WIDTH = 40
    SUMMARY_ROW_HEIGHT = 18

    def build(self, report: IncidentReport) -> Workbook:
        workbook = Workbook()
        detail = workbook.active
        detail.title = SheetName.INCIDENT_INTERVALS
        self._write_detail(detail, report)

        summary = workbook.create_sheet(SheetName.COMPLIANCE)
        self._write_compliance(summary, report)
        return workbook

    def write(self, report: IncidentReport, destination: Union[str, Path, BinaryIO]) -> None:
        """Save the report workbook to a path or binary stream."""
        workbook = self.build(report)
        try:
            workbook.save(destination)
        except OSError as e:
            raise WorkbookException(_describe(destination), f"cannot write workbook: {e}") from e
        logger.info(
            "Workbook written",
            extra={"destination": _describe(destination), "incidents": len(report.rows)}
        )

    def to_bytes(self, report: IncidentReport) -> bytes:
        buffer = io.BytesIO()
        self.write(report, buffer)
        return buffer.getvalue()

    def _write_detail(self, sheet: Worksheet, report: IncidentReport) -> None:
        headers = report.headers
        if not headers:
            return

        sheet.append(headers)
        for row in report.rows:
            sheet.append([row.get(header) or None for header in headers])

        for cell in sheet[1]:
            cell.font = _BOLD
            cell.alignment = _CENTER

        for position, header in enumerate(headers, start=1):
            letter = get_column_letter(position)
            longest = max(
                [len(header)] + [len(str(row.get(header, ""))) for row in report.rows]
            )
            sheet.column_dimensions[letter].width = min(
                self.DETAIL_MAX_WIDTH, max(self.DETAIL_MIN_WIDTH, longest + 2)
            )
            if header.startswith(INCIDENT_SLA_HEADER):
                for (cell,) in sheet.iter_rows(min_row=2, min_col=position, max_col=position):
                    cell.alignment = _CENTER

        sheet.freeze_panes = "A2"

    def _write_compliance(self, sheet: Worksheet, report: IncidentReport) -> None:
        summary = report.compliance
        table = [COMPLIANCE_HEADERS] + [row.as_cells() for row in summary.rows]

        sheet.append([summary.title] + [None] * (len(COMPLIANCE_HEADERS) - 1))
        for cells in table:
            sheet.append(cells)

        sheet.merge_cells(
            start_row=1, start_column=1, end_row=1, end_column=len(COMPLIANCE_HEADERS)
        )
        title = sheet.cell(row=1, column=1)
        title.font = _BOLD
        title.alignment = _CENTER

        for row_number in range(1, sheet.max_row + 1):
            sheet.row_dimensions[row_number].height = self.SUMMARY_ROW_HEIGHT
            if row_number == 1:
                continue
            for cell in sheet[row_number]:
                cell.alignment = _CENTER
                if row_number == 2:
                    cell.font = _BOLD

        for position in range(1, len(COMPLIANCE_HEADERS) + 1):
            longest = max(len(str(cells[position - 1])) for cells in table)
            width = min(self.SUMMARY_MAX_WIDTH, max(self.SUMMARY_MIN_WIDTH, longest + 4))
            sheet.column_dimensions[get_column_letter(position)].width = width
        last = get_column_letter(len(COMPLIANCE_HEADERS))
        sheet.column_dimensions[last].width = max(sheet.column_dimensions[last].width, 12)

        sheet.freeze_panes = "A3"
