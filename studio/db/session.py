"""SQLite engine and session factory."""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from studio.db.base import Base

logger = logging.getLogger(__name__)


def _is_in_memory(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        # The store serialises access itself; connections may be used from any thread
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(database_url):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Records outlive their section and are read after commit
    return sessionmaker(engine, class_=Session, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables if they do not exist."""
    import studio.models  # noqa: F401  (register mappers)

    Base.metadata.create_all(engine)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))
