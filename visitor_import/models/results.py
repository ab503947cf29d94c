"""
Result values exchanged between the per-line handler and the import loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class LineStatus(Enum):
    """Outcome of processing a single log line."""

    RECORDED = "recorded"
    SKIPPED = "skipped"
    FAILED = "failed"
    FATAL = "fatal"


class SkipReason(Enum):
    """Why a line was skipped without an error."""

    BLANK = "blank"
    NO_HOST = "no_host"
    NOISE = "noise"
    IGNORED = "ignored"


@dataclass(slots=True)
class LineResult:
    """Outcome of one line, consumed by the import loop."""

    status: LineStatus
    reason: Optional[SkipReason] = None
    error: Optional[BaseException] = None
    address: Optional[str] = None
    visitor_created: bool = False

    @classmethod
    def recorded(cls, address: str, visitor_created: bool = False) -> "LineResult":
        return cls(LineStatus.RECORDED, address=address, visitor_created=visitor_created)

    @classmethod
    def skipped(cls, reason: SkipReason, address: Optional[str] = None,
                visitor_created: bool = False) -> "LineResult":
        return cls(LineStatus.SKIPPED, reason=reason, address=address,
                   visitor_created=visitor_created)

    @classmethod
    def failed(cls, error: BaseException, address: Optional[str] = None,
               visitor_created: bool = False) -> "LineResult":
        return cls(LineStatus.FAILED, error=error, address=address,
                   visitor_created=visitor_created)

    @classmethod
    def fatal(cls, error: BaseException, address: Optional[str] = None) -> "LineResult":
        return cls(LineStatus.FATAL, error=error, address=address)


@dataclass
class ImportSummary:
    """Counters collected over one import run."""

    files: int = 0
    total_lines: int = 0
    processed: int = 0
    recorded: int = 0
    failed: int = 0
    visitors_created: int = 0
    commits: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)

    def add(self, result: LineResult) -> None:
        """Fold one line result into the counters."""
        self.processed += 1
        if result.visitor_created:
            self.visitors_created += 1
        if result.status is LineStatus.RECORDED:
            self.recorded += 1
        elif result.status is LineStatus.SKIPPED and result.reason is not None:
            key = result.reason.value
            self.skipped[key] = self.skipped.get(key, 0) + 1
        elif result.status is LineStatus.FAILED:
            self.failed += 1

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "files": self.files,
            "total_lines": self.total_lines,
            "processed": self.processed,
            "recorded": self.recorded,
            "skipped": dict(self.skipped),
            "failed": self.failed,
            "visitors_created": self.visitors_created,
            "commits": self.commits,
        }
