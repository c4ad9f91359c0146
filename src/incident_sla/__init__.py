"""
Incident SLA Reporting
======================

Incident interval and SLA compliance reporting for spreadsheet exports.
"""

__version__ = "1.0.0"
