"""
Engine and session factory for the visitor store.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import Base

logger = logging.getLogger(__name__)


def create_store_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for *database_url*.

    SQLite connections get explicit BEGIN handling so that per-line
    savepoints work with the pysqlite driver.
    """
    engine = create_engine(database_url, echo=echo)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def init_schema(engine: Engine) -> None:
    """Create the visitor tables if they do not exist yet."""
    Base.metadata.create_all(engine)
    logger.debug("Schema ready on %s", engine.url.render_as_string(hide_password=True))


def create_session_factory(engine: Engine) -> sessionmaker:
    # Repositories flush explicitly after each write
    return sessionmaker(bind=engine, class_=Session, autoflush=False)


def lazy_session_factory(engine: Engine) -> Callable[[], Session]:
    """Session factory that creates the schema on first use.

    Nothing touches the database until the first session is requested.
    """
    factory: Optional[sessionmaker] = None

    def make_session() -> Session:
        nonlocal factory
        if factory is None:
            init_schema(engine)
            factory = create_session_factory(engine)
        return factory()

    return make_session
