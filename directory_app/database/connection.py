"""
Database engine and session management.

One engine per process, one session per request (see get_db).
Background work (click recording) opens its own sessions from SessionLocal.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from directory_app.config import settings


def _connect_args(database_url: str) -> dict:
    # SQLite connections are shared between the request thread and background tasks
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=_connect_args(settings.database_url),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session and close it when the request is done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
