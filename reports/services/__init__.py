"""
Report services module
"""

from .aggregation import DateWindow, Measure, PeriodAggregator
from .builder import ReportBuilder

__all__ = [
    'DateWindow',
    'Measure',
    'PeriodAggregator',
    'ReportBuilder',
]
