"""
Database access client.

A single ``Database`` is constructed when the application starts and is
handed to request handlers through ``app.state``; nothing here caches an
engine at module level.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """資料庫連線與 Session 工廠"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {"echo": echo}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def create_all(self) -> None:
        """建立所有資料表（正式環境請使用 Alembic migration）"""
        # Register the mappers before touching the metadata
        from nfc_attendance import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transactional scope: commit on success, rollback on error."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the application's database client."""
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    db = request.app.state.database.session_factory()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db: Session, model):
    """
    Return the dialect-specific ``insert()`` construct for ``model`` so callers
    can use ``on_conflict_do_update``. Only PostgreSQL and SQLite are supported.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Atomic upsert is not supported on {dialect}")
    return insert(model)
