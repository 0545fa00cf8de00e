"""Engine and session plumbing for the ORM demos.

Invariants:
    - Every engine created by ``demo_database`` has its schema dropped and
      is disposed on exit, including exit by exception
    - ``session_scope`` commits on success and rolls back on any exception
    - ``StatementCounter`` removes its event listener on exit
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lessons.config import get_settings
from lessons.orm.models import Base

logger = logging.getLogger(__name__)


def create_demo_engine(url: str | None = None, echo: bool | None = None, **options: Any) -> Engine:
    settings = get_settings()
    return create_engine(
        url or settings.database_url,
        echo=settings.sql_echo if echo is None else echo,
        **options,
    )


@contextmanager
def demo_database(url: str | None = None, echo: bool | None = None) -> Iterator[tuple[Engine, sessionmaker[Session]]]:
    """Create the schema on a fresh engine, yield it, then drop and dispose.

    The schema is dropped even when the block raises, so a file-backed
    ``DATABASE_URL`` starts empty on the next run.
    """
    engine = create_demo_engine(url, echo)
    try:
        Base.metadata.create_all(engine)
        yield engine, sessionmaker(engine, expire_on_commit=False)
    finally:
        try:
            Base.metadata.drop_all(engine)
        finally:
            engine.dispose()


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional session with auto-rollback on exception."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        if isinstance(e, SQLAlchemyError):
            logger.info("Transaction rolled back: %s", type(e).__name__)
        raise
    finally:
        session.close()


def health_check(engine: Engine) -> bool:
    """Check database connectivity (for readiness checks)."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("DB health check failed: %s", e)
        return False


class StatementCounter:
    """Record every SQL statement an engine executes inside the block."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.statements: list[str] = []

    def _record(self, conn, cursor, statement, parameters, context, executemany) -> None:
        self.statements.append(statement)

    @property
    def count(self) -> int:
        return len(self.statements)

    def __enter__(self) -> StatementCounter:
        event.listen(self.engine, "before_cursor_execute", self._record)
        return self

    def __exit__(self, *exc_info: object) -> None:
        event.remove(self.engine, "before_cursor_execute", self._record)
