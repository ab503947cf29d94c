"""
Storage package: SQLAlchemy schema, engine setup and repositories.
"""

from .database import create_session_factory, create_store_engine, init_schema, lazy_session_factory
from .repositories import UserAgentRepository, VisitorRepository, VisitRepository
from .schema import Base, UserAgentRow, VisitorRow, VisitRow

__all__ = [
    "create_store_engine",
    "create_session_factory",
    "init_schema",
    "lazy_session_factory",
    "VisitorRepository",
    "VisitRepository",
    "UserAgentRepository",
    "Base",
    "VisitorRow",
    "VisitRow",
    "UserAgentRow",
]
