"""
Import Pipeline

Orchestrates parsing, noise filtering, visitor registration, visit
persistence and user-agent counting over a sequence of access-log files.

ARCHITECTURE:
- Files are processed one at a time in the order given, lines in file order
- Lines are streamed; nothing holds a whole file in memory
- Each line is handled by :meth:`ImportPipeline.process_line`, which never
  raises and returns a :class:`~visitor_import.models.LineResult`
- Writes for one line run inside a savepoint of the current batch, so a
  failing line leaves the batch open and earlier lines untouched
- A registry failure is fatal: the pending batch is committed and the
  error re-raised to the caller
"""

import logging
from contextlib import closing
from datetime import timezone
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError

from .agent_ledger import UserAgentLedger
from .batching import BatchTransactionManager
from .errors import FatalInputError, RegistryCreationError, TransientPersistenceError, UserDeclinedError
from .file_selection import describe_files, iter_lines
from .log_parser import LineParser
from .models import ImportSummary, LineResult, LineStatus, LogEntry, SkipReason, Visit
from .noise_filter import NoiseFilter
from .progress import NullProgress, ProgressReporter
from .registry import VisitorRegistry
from .storage import VisitRepository

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[int], bool]


class ImportPipeline:
    """Seeds the visitor store from access-log files."""

    def __init__(
        self,
        batches: BatchTransactionManager,
        parser: Optional[LineParser] = None,
        noise_filter: Optional[NoiseFilter] = None,
        registry: Optional[VisitorRegistry] = None,
        ledger: Optional[UserAgentLedger] = None,
        visits: Optional[VisitRepository] = None,
        reporter: Optional[ProgressReporter] = None,
        confirm: Optional[ConfirmCallback] = None,
        exempt_addresses: Sequence[str] = (),
    ):
        """Initialize the pipeline.

        Args:
            batches: Transaction manager owning the batch transaction
            parser: Line parser (default: combined format)
            noise_filter: Static-asset filter (default prefixes)
            registry: Visitor registry
            ledger: User-agent ledger
            visits: Repository the visits are written to
            reporter: Progress collaborator
            confirm: Called with the total line count before any work; a
                falsy answer aborts the run
            exempt_addresses: Addresses whose visits are never logged; they
                are whitelisted in the first batch of the run
        """
        self.batches = batches
        self.parser = parser or LineParser()
        self.noise_filter = noise_filter or NoiseFilter()
        self.registry = registry or VisitorRegistry()
        self.ledger = ledger or UserAgentLedger()
        self.visits = visits or VisitRepository()
        self.reporter = reporter or NullProgress()
        self.confirm = confirm
        self.exempt_addresses = list(exempt_addresses)

    def count_records(self, files: Sequence[Path]) -> int:
        """Total number of lines across *files*."""
        total = 0
        for path, size, lines in describe_files(files):
            logger.info("%s size %d bytes, %d lines", path, size, lines)
            total += lines
        logger.info("Total lines %d", total)
        return total

    def run(self, files: Sequence[Union[str, Path]]) -> ImportSummary:
        """Import every line of *files*.

        Returns:
            Counters for the run

        Raises:
            FatalInputError: If there is nothing to import or a file is missing
            UserDeclinedError: If the confirmation callback declines
            RegistryCreationError: If a visitor cannot be created; lines
                processed before the failure are committed
            sqlalchemy.exc.SQLAlchemyError: If a batch commit fails; the
                uncommitted batch is rolled back, earlier batches are kept
        """
        paths = [Path(f) for f in files]
        if not paths:
            raise FatalInputError("No log files to import")

        total = self.count_records(paths)
        if self.confirm is not None and not self.confirm(total):
            raise UserDeclinedError(f"Import of {total} records declined")

        summary = ImportSummary(files=len(paths), total_lines=total)
        processed = 0
        ctx = self.batches.begin()
        self.reporter.start(total)
        try:
            for address in self.exempt_addresses:
                self.registry.exempt(ctx, address)

            for path in paths:
                logger.info("Importing %s", path)
                with closing(iter_lines(path)) as lines:
                    for line_number, raw in enumerate(lines, start=1):
                        result = self.process_line(raw)
                        summary.add(result)
                        processed += 1
                        self.reporter.update(processed, str(path))

                        if result.status is LineStatus.RECORDED:
                            self.batches.record_written()
                        elif result.status is LineStatus.SKIPPED:
                            logger.debug("%s:%d skipped (%s)", path, line_number, result.reason.value)
                        elif result.status is LineStatus.FAILED:
                            logger.warning("%s:%d skipped: %s", path, line_number, result.error)
                        elif result.status is LineStatus.FATAL:
                            logger.error("%s:%d aborting import: %s", path, line_number, result.error)
                            raise result.error

            session = self.batches.context.session
            logger.info(
                "Store holds %d visitor(s) and %d visit(s)",
                self.registry.repository.count(session), self.visits.count(session),
            )
        finally:
            self.reporter.close()
            summary.commits = self.batches.finish()

        logger.info(
            "Imported %d visit(s) from %d line(s): %d skipped, %d failed, %d new visitor(s), %d commit(s)",
            summary.recorded, summary.processed, summary.skipped_total,
            summary.failed, summary.visitors_created, summary.commits,
        )
        return summary

    def process_line(self, raw: str) -> LineResult:
        """Handle one raw line inside the open batch.

        Never raises; every outcome, including fatal registry failures, is
        returned as a LineResult.
        """
        if not raw.strip():
            return LineResult.skipped(SkipReason.BLANK)

        address = None
        created = False
        try:
            entry = self.parser.parse(raw)
            address = entry.host
            if not address:
                return LineResult.skipped(SkipReason.NO_HOST)
            if not self.noise_filter.keep_entry(entry):
                return LineResult.skipped(SkipReason.NOISE, address)

            visitor, created = self.registry.lookup(self.batches.context, address)
            if self.registry.is_ignored(visitor, address):
                return LineResult.skipped(SkipReason.IGNORED, address, created)

            with self.batches.savepoint() as ctx:
                try:
                    self.visits.create(ctx.session, self.build_visit(entry))
                except SQLAlchemyError as exc:
                    raise TransientPersistenceError(f"Could not store visit: {exc}") from exc
                self.registry.increment_count(ctx, address)
                self.ledger.record(ctx, entry.user_agent)
        except RegistryCreationError as exc:
            return LineResult.fatal(exc, address)
        except Exception as exc:  # pylint: disable=broad-except
            return LineResult.failed(exc, address, created)

        return LineResult.recorded(address, created)

    @staticmethod
    def build_visit(entry: LogEntry) -> Visit:
        """Build the visit recorded for *entry*; times are stored as naive UTC."""
        created_at = entry.timestamp
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
        return Visit(
            address=entry.host,
            request=entry.request_path,
            referrer=entry.referrer,
            user_agent=entry.user_agent,
            created_at=created_at,
        )
