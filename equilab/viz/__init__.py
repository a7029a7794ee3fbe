"""Visualization module."""

from .results import RangeDisplay, display_range, display_report, report_table

__all__ = [
    "RangeDisplay",
    "display_range",
    "display_report",
    "report_table",
]
