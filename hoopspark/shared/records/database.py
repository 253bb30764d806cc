"""Database setup and configuration."""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from hoopspark.shared.config import get_database_url

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str):
    """Creates an engine; SQLite gets thread-safe connect args and its directory created."""
    connect_args = {}
    if "sqlite" in database_url:
        connect_args = {"check_same_thread": False}
        if database_url.startswith("sqlite:///"):
            db_path = database_url.replace("sqlite:///", "")
            if db_path != ":memory:":
                db_dir = os.path.dirname(db_path)
                if db_dir:
                    os.makedirs(db_dir, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args)


DATABASE_URL = get_database_url()
engine = create_db_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Initialize database tables."""
    # Import models so they are registered on Base.metadata
    from hoopspark.shared.records import models  # noqa: F401
    try:
        Base.metadata.create_all(bind=bind or engine)
    except Exception as e:
        logger.error("Database initialization error: %s", e)
        raise

