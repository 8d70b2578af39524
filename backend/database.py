import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL

logger = logging.getLogger(__name__)

SQLITE_DATA_DIR = "data"


def engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        # Hosted PostgreSQL
        return {"pool_size": 5, "max_overflow": 10, "pool_timeout": 30, "pool_recycle": 1800}
    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees its own empty database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request, closed (and rolled back if open) afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create every table registered on Base; makes the local SQLite data dir on first run."""
    bind = bind or engine
    if str(bind.url).startswith(f"sqlite:///./{SQLITE_DATA_DIR}/"):
        os.makedirs(SQLITE_DATA_DIR, exist_ok=True)

    import models  # noqa: F401  (registers the tables)

    Base.metadata.create_all(bind=bind)
    logger.info(f"Database ready ({bind.url.get_backend_name()})")
