"""
Batched Transaction Management

Groups the writes of an import run into bounded commit units. The manager is
the only component that begins, commits or rolls back a transaction; every
other component receives the open :class:`TransactionContext` and works on
its session.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class TransactionState(Enum):
    """Lifecycle of the batch transaction."""

    IDLE = "idle"
    OPEN = "open"
    COMMITTED = "committed"


@dataclass(frozen=True)
class TransactionContext:
    """Handle on the currently open batch."""

    session: Session
    batch_number: int


class BatchTransactionManager:
    """Commits every ``batch_size`` records and always flushes the tail."""

    def __init__(self, session_factory: Callable[[], Session], batch_size: int = DEFAULT_BATCH_SIZE):
        """Initialize the manager.

        Args:
            session_factory: Zero-argument callable returning a new Session
            batch_size: Number of records per commit
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self._session_factory = session_factory
        self._session: Optional[Session] = None
        self._context: Optional[TransactionContext] = None
        self.state = TransactionState.IDLE
        self.records_written = 0
        self.pending = 0
        self.batch_sizes: List[int] = []

    @property
    def commit_count(self) -> int:
        """Number of commits that carried at least one record."""
        return len(self.batch_sizes)

    @property
    def context(self) -> TransactionContext:
        if self.state is not TransactionState.OPEN or self._context is None:
            raise RuntimeError("No open batch transaction")
        return self._context

    def begin(self) -> TransactionContext:
        """Open a new batch transaction."""
        if self.state is TransactionState.OPEN:
            raise RuntimeError("A batch transaction is already open")
        if self._session is None:
            self._session = self._session_factory()
        self._session.begin()
        self._context = TransactionContext(self._session, self.commit_count + 1)
        self.state = TransactionState.OPEN
        return self._context

    @contextmanager
    def savepoint(self) -> Iterator[TransactionContext]:
        """Wrap one line's writes; on error only those writes are undone."""
        ctx = self.context
        with ctx.session.begin_nested():
            yield ctx

    def record_written(self) -> bool:
        """Count one persisted record and commit on every batch boundary.

        Returns:
            True if this record closed a batch
        """
        if self.state is not TransactionState.OPEN:
            raise RuntimeError("No open batch transaction")
        self.records_written += 1
        self.pending += 1
        if self.records_written % self.batch_size == 0:
            self._commit()
            self.begin()
            return True
        return False

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError:
            logger.error("Commit of batch %d failed", self._context.batch_number)
            self.rollback()
            raise
        if self.pending:
            self.batch_sizes.append(self.pending)
            logger.debug("Committed batch %d with %d record(s)", self.commit_count, self.pending)
        self.pending = 0
        self._context = None
        self.state = TransactionState.COMMITTED

    def finish(self) -> int:
        """Commit whatever is pending and release the session.

        Safe to call more than once.

        Returns:
            Total number of record-carrying commits

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the commit fails; the batch is
                rolled back before the error propagates
        """
        try:
            if self.state is TransactionState.OPEN:
                self._commit()
        finally:
            self._close()
        return self.commit_count

    def rollback(self) -> None:
        """Discard the open batch and release the session."""
        try:
            if self.state is TransactionState.OPEN:
                self._session.rollback()
                logger.warning("Rolled back %d uncommitted record(s)", self.pending)
                self.pending = 0
                self.state = TransactionState.COMMITTED
        finally:
            self._close()

    def _close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        self._context = None
