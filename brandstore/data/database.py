"""
Database connection setup.
Uses SQLAlchemy so the same code runs against MySQL, Postgres or SQLite.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from brandstore.utils.logger import get_logger

logger = get_logger("data.database")

# Base class for all our database models (must be defined before engine)
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the process-wide engine for ``database_url``.

    In-memory SQLite gets a StaticPool so every connection (and every
    request thread) sees the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    logger.info(f"Database engine created for dialect={engine.dialect.name}")
    return engine


def create_tables(engine: Engine) -> None:
    """Create all tables that don't exist yet. In production, use migrations instead."""
    # Import models so they register on Base.metadata
    from brandstore.data import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
