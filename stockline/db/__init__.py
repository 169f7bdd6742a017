"""Database package: engine, session factory, init_db(), get_session()."""

import threading
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from stockline.config import DATABASE_URL
from stockline.db.base import Base

# Import all models so Base.metadata has all tables
from stockline.db.models import (  # noqa: F401
    BatchAllocation,
    Batch,
    BatchReceipt,
    BatchRequirement,
    Bom,
    CarType,
    ExpectedInventory,
    InventoryTransaction,
    Item,
    VinPlan,
    ZoneBomMapping,
)

_init_lock = threading.Lock()
_engine = None
_SessionLocal: sessionmaker | None = None


def _get_engine(url: str):
    """Create engine; SQLite connections are shared with executor threads used by fan-out."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, echo=False, connect_args=connect_args)


def init_db(database_url: str | None = None) -> None:
    """Create engine and tables if not already initialized."""
    global _engine, _SessionLocal
    with _init_lock:
        if _SessionLocal is not None:
            return
        _engine = _get_engine(database_url or DATABASE_URL)
        Base.metadata.create_all(bind=_engine)
        _SessionLocal = sessionmaker(bind=_engine, autocommit=False, autoflush=False, expire_on_commit=False)


def dispose_db() -> None:
    """Drop the engine and session factory; the next get_session() re-initializes."""
    global _engine, _SessionLocal
    with _init_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionLocal = None


def reset_db(database_url: str | None = None) -> None:
    """Point the package at database_url and recreate all tables empty (tests, CLI init-db --reset)."""
    dispose_db()
    init_db(database_url)
    Base.metadata.drop_all(bind=_engine)
    Base.metadata.create_all(bind=_engine)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Context manager yielding a DB session. Calls init_db() on first use."""
    init_db()
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
