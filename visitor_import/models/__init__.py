"""
Models package for the visitor log import.

Contains the parsed log entry, the storage-independent visitor models and
the per-line result values.
"""

from .entries import LogEntry, APACHE_TIME_FORMAT

from .visitor_models import (
    Visitor,
    Visit,
    UserAgentStat
)

from .results import (
    LineStatus,
    SkipReason,
    LineResult,
    ImportSummary
)

__all__ = [
    # Log entries
    "LogEntry",
    "APACHE_TIME_FORMAT",

    # Visitor models
    "Visitor",
    "Visit",
    "UserAgentStat",

    # Results
    "LineStatus",
    "SkipReason",
    "LineResult",
    "ImportSummary"
]
