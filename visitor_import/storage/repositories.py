"""
Repositories for the visitor store.

Each repository works on the session of the caller's open transaction and
never begins or ends a transaction itself. Rows are converted to the
storage-independent models in :mod:`visitor_import.models`.
"""

from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import UserAgentStat, Visit, Visitor
from .schema import UserAgentRow, VisitorRow, VisitRow


class VisitorRepository:
    """Visitors keyed by network address."""

    @staticmethod
    def _to_model(row: VisitorRow) -> Visitor:
        return Visitor(
            address=row.address,
            visit_count=row.visit_count,
            whitelist=set(row.whitelist or []),
            created_at=row.created_at,
        )

    def find_by_key(self, session: Session, address: str) -> Optional[Visitor]:
        """Look up a visitor by address."""
        row = session.get(VisitorRow, address)
        return self._to_model(row) if row is not None else None

    def create(self, session: Session, address: str) -> Visitor:
        """Insert a new visitor with no visits and an empty whitelist.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the row cannot be written
        """
        row = VisitorRow(address=address, visit_count=0, whitelist=[])
        session.add(row)
        session.flush()
        return self._to_model(row)

    def increment_count(self, session: Session, address: str) -> int:
        """Add one to the visit count of *address* and return the new count.

        Raises:
            LookupError: If no visitor exists for the address
        """
        row = session.get(VisitorRow, address)
        if row is None:
            raise LookupError(f"No visitor for address {address!r}")
        row.visit_count = row.visit_count + 1
        session.flush()
        return row.visit_count

    def update_whitelist(self, session: Session, address: str, addresses: Iterable[str]) -> Visitor:
        row = session.get(VisitorRow, address)
        if row is None:
            raise LookupError(f"No visitor for address {address!r}")
        row.whitelist = sorted(set(addresses))
        session.flush()
        return self._to_model(row)

    def count(self, session: Session) -> int:
        return session.scalar(select(func.count()).select_from(VisitorRow)) or 0


class VisitRepository:
    """Individual recorded requests."""

    def create(self, session: Session, visit: Visit) -> Visit:
        """Insert *visit*.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the row cannot be written
        """
        session.add(VisitRow(
            address=visit.address,
            request=visit.request,
            referrer=visit.referrer,
            user_agent=visit.user_agent,
            created_at=visit.created_at,
        ))
        session.flush()
        return visit

    def count(self, session: Session) -> int:
        return session.scalar(select(func.count()).select_from(VisitRow)) or 0


class UserAgentRepository:
    """Occurrence counters per user-agent string."""

    @staticmethod
    def _to_model(row: UserAgentRow) -> UserAgentStat:
        return UserAgentStat(
            user_agent=row.user_agent,
            count=row.count,
            browser=row.browser,
            os=row.os,
            device=row.device,
        )

    def _find_row(self, session: Session, user_agent: str) -> Optional[UserAgentRow]:
        return session.scalars(
            select(UserAgentRow).where(UserAgentRow.user_agent == user_agent)
        ).first()

    def find_by_key(self, session: Session, user_agent: str) -> Optional[UserAgentStat]:
        row = self._find_row(session, user_agent)
        return self._to_model(row) if row is not None else None

    def create(self, session: Session, stat: UserAgentStat) -> UserAgentStat:
        row = UserAgentRow(
            user_agent=stat.user_agent,
            count=stat.count,
            browser=stat.browser,
            os=stat.os,
            device=stat.device,
        )
        session.add(row)
        session.flush()
        return self._to_model(row)

    def increment(self, session: Session, user_agent: str) -> Optional[UserAgentStat]:
        """Add one to an existing counter; returns None if the agent is unseen."""
        row = self._find_row(session, user_agent)
        if row is None:
            return None
        row.count = row.count + 1
        session.flush()
        return self._to_model(row)
