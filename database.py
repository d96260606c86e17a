from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker, configure_mappers
import logging
from typing import Any, Dict

from config import settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def _engine_kwargs(url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    elif settings.DB_POOL_SIZE:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
    return kwargs


engine = create_engine(SQLALCHEMY_DATABASE_URL, **_engine_kwargs(SQLALCHEMY_DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def init_models():
    """Import all models so they are registered on Base.metadata, then configure mappers."""
    import models  # noqa: F401

    configure_mappers()


def ping(db) -> bool:
    """Return True when the datastore answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database ping failed: {str(e)}")
        return False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
