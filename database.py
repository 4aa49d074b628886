import logging
import sqlite3
from contextlib import contextmanager

from config import get_settings
from database_schemas import TABLE_SCHEMAS, INDEX_SCHEMAS
from errors import StorageError

logger = logging.getLogger(__name__)

DB_NAME = get_settings().database_path

@contextmanager
def get_db():
    """One connection per unit of work.

    Foreign keys are enforced on every connection. Any sqlite error that
    escapes the block is rolled back and re-raised as StorageError; callers
    that give IntegrityError a domain meaning catch it inside the block.
    """
    try:
        conn = sqlite3.connect(DB_NAME, timeout=get_settings().database_timeout_seconds)
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        raise StorageError(str(exc), "connect") from exc
    try:
        yield conn
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error(f"Database error: {exc}")
        raise StorageError(str(exc), "query") from exc
    finally:
        conn.close()

def init_db():
    with get_db() as conn:
        cursor = conn.cursor()
        for schema in TABLE_SCHEMAS:
            cursor.execute(schema)
        for index in INDEX_SCHEMAS:
            cursor.execute(index)
        conn.commit()

def check_db() -> bool:
    """Readiness probe: can we open the store and run a trivial query"""
    try:
        with get_db() as conn:
            conn.execute("SELECT 1").fetchone()
        return True
    except StorageError as exc:
        logger.warning(f"Readiness check failed: {exc.message}")
        return False

if __name__ == "__main__":
    init_db()
