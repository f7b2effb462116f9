# FILE: uigen/db.py
"""
Persistence wiring for saved projects.

UIGEN_DATABASE_URL picks the store (default: SQLite file under ./data).
create_db_engine() is also what the tests use for an in-memory database, so
the application and the suite share one set of engine rules.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("UIGEN_DATABASE_URL", "sqlite:///./data/uigen.db")
SQL_ECHO = os.getenv("UIGEN_SQL_ECHO", "").lower() in ("1", "true", "yes")


def _is_memory_sqlite(url) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Engine for url. SQLite sessions cross threads (sync routes run in a pool)."""
    parsed = make_url(url)
    kwargs = {"echo": SQL_ECHO}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(parsed):
            # One shared connection, otherwise every checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def ensure_data_dir(url: str = DATABASE_URL) -> Optional[Path]:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or _is_memory_sqlite(parsed):
        return None
    parent = Path(parsed.database).expanduser().parent
    parent.mkdir(parents=True, exist_ok=True)
    return parent


engine = create_db_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the saved-project tables on bind (default: the app engine)."""
    from uigen.projects import models  # noqa: F401

    target = bind or engine
    ensure_data_dir(str(target.url))
    Base.metadata.create_all(bind=target)
    logger.info("[db] tables ready on %s", target.url.render_as_string(hide_password=True))
