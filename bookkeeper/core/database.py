"""
SQLAlchemy engine, session factory and declarative base.

Usage:
    from bookkeeper.core.database import SessionLocal, Base

    with session_scope() as db:
        db.query(Customer).all()
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bookkeeper.core.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "pool_pre_ping": True,
    }


engine = create_engine(
    settings.database_url,
    echo=settings.SQL_ECHO,
    **_engine_kwargs(settings.database_url),
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside FastAPI routes
    (startup hooks, maintenance scripts).
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """
    Create all tables that do not exist yet.
    For production, use Alembic migrations instead.
    """
    import bookkeeper.models  # noqa: F401  registers every model on Base
    Base.metadata.create_all(bind=engine)
