# prodlog/db.py
"""
Database connection management with singleton pattern

The engine backs the SQL storage slots (see kv_store.SqlKeyValueStore).
Defaults to a local SQLite file; any SQLAlchemy URL can be configured.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
import logging
import threading
from pathlib import Path
from typing import Tuple, Optional

from .config import DB_CONFIG, APP_CONFIG

logger = logging.getLogger(__name__)

# Singleton engine instance
_engine = None
_engine_lock = threading.Lock()


def _mask_url(url: str) -> str:
    """Hide the password part of a database URL for logging"""
    if "@" not in url or "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


def get_db_engine() -> Engine:
    """
    Create and return SQLAlchemy database engine (singleton pattern)

    Returns the same engine instance across all calls so that every
    storage slot shares one connection pool.
    """
    global _engine

    # Double-checked locking pattern for thread safety
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                logger.info("🔌 Creating database engine (singleton)...")

                url = DB_CONFIG["url"]
                logger.info(f"🔐 SQLAlchemy URL: {_mask_url(url)}")

                if url.startswith("sqlite"):
                    # Ensure the parent directory of a file database exists
                    db_path = url.split("///", 1)[1] if "///" in url else ""
                    if db_path and db_path != ":memory:":
                        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
                    _engine = create_engine(url, echo=False)
                else:
                    pool_size = APP_CONFIG.get("DB_POOL_SIZE", 5)
                    pool_recycle = APP_CONFIG.get("DB_POOL_RECYCLE", 3600)
                    _engine = create_engine(
                        url,
                        pool_size=pool_size,        # Number of connections to keep open
                        max_overflow=10,
                        pool_timeout=30,
                        pool_recycle=pool_recycle,
                        pool_pre_ping=True,         # Test connection before using (auto-reconnect)
                        echo=False
                    )

                logger.info("✅ Database engine created")

    return _engine


def check_db_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if database connection is healthy

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, None
    except OperationalError as e:
        error_msg = "Cannot open the production database. Please check the storage location."
        logger.error(f"❌ Database connection failed: {e}")
        return False, error_msg
    except Exception as e:
        error_msg = f"Database error: {str(e)}"
        logger.error(f"❌ Database error: {e}")
        return False, error_msg


def reset_db_engine():
    """
    Dispose the engine so the next call to get_db_engine() reconnects
    """
    global _engine

    with _engine_lock:
        if _engine is not None:
            try:
                _engine.dispose()
                logger.info("🔄 Database engine disposed")
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")
            _engine = None

    logger.info("🔄 Database engine reset - will reconnect on next query")
