"""
Database schema for the visitor store.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class VisitorRow(Base):
    """One row per distinct remote address."""
    __tablename__ = "visitors"

    address: Mapped[str] = mapped_column(String(255), primary_key=True)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    whitelist: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<VisitorRow(address={self.address}, visit_count={self.visit_count})>"


class VisitRow(Base):
    """One recorded request."""
    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    address: Mapped[str] = mapped_column(
        String(255), ForeignKey("visitors.address", ondelete="CASCADE"), nullable=False, index=True
    )
    request: Mapped[str] = mapped_column(Text, nullable=False)
    referrer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<VisitRow(address={self.address}, request={self.request})>"


class UserAgentRow(Base):
    """Occurrence counter per user-agent string."""
    __tablename__ = "user_agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    browser: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    os: Mapped[str] = mapped_column(String(32), nullable=False, default="Unknown")
    device: Mapped[str] = mapped_column(String(32), nullable=False, default="Desktop")

    def __repr__(self):
        return f"<UserAgentRow(count={self.count}, user_agent={self.user_agent[:40]})>"
