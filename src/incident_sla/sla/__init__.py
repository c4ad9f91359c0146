"""
SLA Reporting Module
====================

Bounded Context for incident SLA interval and compliance reporting.

Responsibilities:
- Normalise heterogeneous timestamps from spreadsheet exports
- Group raw rows into incidents with ordered update events
- Compute the gap between consecutive events, sized to the widest incident
- Classify each gap against the priority SLA threshold
- Summarise compliance per priority bucket
"""

__version__ = "1.0.0"
