"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine for the registry.
By default the database is a local SQLite file located at the backend
root as `registry.db`; `REGISTRY_DATABASE_URL` points it elsewhere.
"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from .config import settings

logger = logging.getLogger("registry.database")

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str) -> Engine:
    """Build an engine for `url`.

    SQLite connections are shared across threads (FastAPI runs sync
    handlers in a threadpool). An in-memory SQLite database lives only
    as long as its connection, so it is pinned to a single one.
    """
    if url in _MEMORY_URLS:
        return create_engine(url, echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(url, echo=False)


def create_db_and_tables(target: Engine) -> None:
    """Create the registry tables if they do not exist yet."""
    # models must be imported so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(target)
    logger.debug("tables ready on %s", target.url)


engine = make_engine(settings.DATABASE_URL)
