"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for SLA reporting:
- External: YAML threshold config manager (with file watcher)
- Workbook: openpyxl reader/writer for the spreadsheet boundary
"""

from incident_sla.sla.infrastructure.external import (
    SLAConfigManager,
    StaticConfigProvider,
)
from incident_sla.sla.infrastructure.workbook import (
    WorkbookReader,
    WorkbookWriter,
    XLSX_MEDIA_TYPE,
)

__all__ = [
    "SLAConfigManager",
    "StaticConfigProvider",
    "WorkbookReader",
    "WorkbookWriter",
    "XLSX_MEDIA_TYPE",
]
