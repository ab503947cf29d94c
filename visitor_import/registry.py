"""
Visitor Registry

Get-or-create of visitors by address, visit counting and the per-visitor
ignore list.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .batching import TransactionContext
from .errors import RegistryCreationError, TransientPersistenceError
from .models import Visitor
from .storage import VisitorRepository

logger = logging.getLogger(__name__)


class VisitorRegistry:
    """Owns visitor identities for the duration of an import."""

    def __init__(self, repository: Optional[VisitorRepository] = None):
        self.repository = repository or VisitorRepository()
        self.created_count = 0

    def get_or_create(self, ctx: TransactionContext, address: str) -> Visitor:
        """Return the visitor for *address*, creating it on first sight.

        Args:
            ctx: The open batch transaction
            address: Network address of the visitor

        Returns:
            The persisted visitor

        Raises:
            RegistryCreationError: If a new visitor cannot be stored
        """
        visitor, _ = self.lookup(ctx, address)
        return visitor

    def lookup(self, ctx: TransactionContext, address: str) -> tuple[Visitor, bool]:
        """Like :meth:`get_or_create`, also telling whether the visitor is new."""
        visitor = self.repository.find_by_key(ctx.session, address)
        if visitor is not None:
            return visitor, False

        try:
            with ctx.session.begin_nested():
                visitor = self.repository.create(ctx.session, address)
        except SQLAlchemyError as exc:
            raise RegistryCreationError(address, exc) from exc

        self.created_count += 1
        logger.debug("New visitor %s", address)
        return visitor, True

    @staticmethod
    def is_ignored(visitor: Visitor, address: str) -> bool:
        """True iff *address* is on the visitor's whitelist."""
        return visitor.ignores(address)

    def increment_count(self, ctx: TransactionContext, address: str) -> int:
        """Record one more visit for *address*; returns the new count."""
        try:
            return self.repository.increment_count(ctx.session, address)
        except (LookupError, SQLAlchemyError) as exc:
            raise TransientPersistenceError(f"Could not count visit for {address}: {exc}") from exc

    def exempt(self, ctx: TransactionContext, address: str) -> Visitor:
        """Exclude *address* from visit logging, creating its visitor if needed."""
        visitor = self.get_or_create(ctx, address)
        if visitor.ignores(address):
            return visitor
        visitor = self.repository.update_whitelist(
            ctx.session, address, visitor.whitelist | {address}
        )
        logger.info("Visits from %s will not be logged", address)
        return visitor
