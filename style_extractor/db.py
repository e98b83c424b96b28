"""Engine and session plumbing for the recent-URL store."""
from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/recent.db")


class Base(DeclarativeBase):
    """Declarative base for the store's tables."""


def _anchor_sqlite_file(url: URL) -> URL:
    """Resolve a relative SQLite path against the project root and create its folder."""

    path = Path(url.database).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    path = path.resolve(strict=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    return url.set(database=path.as_posix())


def build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    connect_args: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        # Sessions cross into FastAPI's threadpool workers.
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            url = _anchor_sqlite_file(url)
    return create_engine(url, connect_args=connect_args)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, class_=Session)


def init_db() -> None:
    """Create the store's tables if they do not exist yet."""
    from . import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Commit on success, roll back and re-raise on failure."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a transactional session."""
    with session_scope() as session:
        yield session
