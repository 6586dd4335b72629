"""Engine and session wiring for the habit store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig) -> Engine:
    return create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())


def init_database(engine: Engine) -> None:
    """Create the habit, entry, reminder and notification tables if missing."""
    from .. import models  # noqa: F401  registers the tables on SQLModel.metadata

    SQLModel.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> SessionFactory:
    """Return a factory of sessions that commit on success and roll back on error.

    Objects stay loaded after commit so repositories can hand them out
    detached.
    """

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


def bootstrap_database(config: BaseConfig) -> tuple[Engine, SessionFactory]:
    """Build the engine, make sure the schema exists and return both handles."""

    engine = create_db_engine(config)
    init_database(engine)
    logger.info(
        "Habit store ready",
        extra={"database": make_url(config.DATABASE_URL).render_as_string(hide_password=True)},
    )
    return engine, create_session_factory(engine)
