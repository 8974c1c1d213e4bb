# jobassist/db/session.py
"""
SQLAlchemy engine + SessionLocal (sync).

DATABASE_URL selects the backend: sqlite for local development and tests,
mysql+pymysql:// for deployments. Routes take a session through the
`get_db` dependency so tests can override it with an in-memory engine.
"""

import logging
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from jobassist.core.config import settings
from jobassist.db.base import Base

logger = logging.getLogger(__name__)


def make_engine(url: str) -> Engine:
    kwargs = {"future": True, "echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # request handlers and the event loop may touch the connection from different threads
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db() -> Generator[Session, None, None]:
    """
    Yields a SQLAlchemy session. Use as dependency:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create any missing tables."""
    # models must be imported so their tables are registered on Base.metadata
    from jobassist.db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def check_db_connection(bind: Engine = None) -> bool:
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Successfully connected to the database.")
        return True
    except Exception as exc:
        logger.error("Failed to connect to the database: %s", exc)
        return False
