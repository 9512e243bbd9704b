"""Database helpers: engines, session factories and DB initialization.

Provides read/write session factories and an `init_db` helper that creates
tables and seeds sample feedback when the feedback table is empty.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core import config
from core.logger import get_logger
from .models import Base, Feedback

logger = get_logger("database")

# In production, set WRITE_DATABASE_URL and READ_DATABASE_URL to different DB instances.
# For SQLite this defaults to the same file but the interfaces are separated.
WRITE_DATABASE_URL = config.WRITE_DATABASE_URL
READ_DATABASE_URL = config.READ_DATABASE_URL


def _connect_args(url: str) -> dict:
    # SQLite connections are shared with the threadpool FastAPI runs sync routes on
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


write_engine = create_engine(WRITE_DATABASE_URL, connect_args=_connect_args(WRITE_DATABASE_URL))
read_engine = create_engine(READ_DATABASE_URL, connect_args=_connect_args(READ_DATABASE_URL))

WriteSessionLocal = sessionmaker(bind=write_engine)
ReadSessionLocal = sessionmaker(bind=read_engine)


def init_db(seed: bool = None):
    """Create the schema and optionally seed sample feedback.

    Args:
        seed: Seed sample rows into an empty feedback table. Defaults to the
            `SEED_SAMPLE_DATA` setting.
    """
    from data.sample_feedback import SAMPLE_FEEDBACK

    Base.metadata.create_all(bind=write_engine)
    if seed is None:
        seed = config.SEED_SAMPLE_DATA
    if not seed:
        return

    session = WriteSessionLocal()
    try:
        if session.query(Feedback).count() == 0:
            for item in SAMPLE_FEEDBACK:
                session.add(Feedback(**item))
            session.commit()
            logger.info("Seeded %s sample feedback rows", len(SAMPLE_FEEDBACK))
    finally:
        session.close()


def get_write_session():
    """Yield a write-enabled session and close it when the request ends."""
    db = WriteSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_read_session():
    """Yield a read-only session, routed to the replica when configured."""
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()
