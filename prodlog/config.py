# prodlog/config.py
"""
Application configuration

All settings come from environment variables and are read once at import.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.getenv("PRODLOG_DATA_DIR", str(BASE_DIR / "data")))

DB_CONFIG = {
    "url": os.getenv("PRODLOG_DB_URL", f"sqlite:///{DATA_DIR / 'prodlog.db'}"),
}

APP_CONFIG = {
    "STORAGE_BACKEND": os.getenv("PRODLOG_STORAGE_BACKEND", "sql"),  # sql | file | memory
    "DATA_DIR": DATA_DIR,
    "DB_POOL_SIZE": int(os.getenv("PRODLOG_DB_POOL_SIZE", "5")),
    "DB_POOL_RECYCLE": int(os.getenv("PRODLOG_DB_POOL_RECYCLE", "3600")),
    "LANGUAGE": os.getenv("PRODLOG_LANGUAGE", "ja"),
    "TIMEZONE": os.getenv("PRODLOG_TIMEZONE", "Asia/Tokyo"),
    "LOG_LEVEL": os.getenv("PRODLOG_LOG_LEVEL", "INFO"),
}

# Storage slot names
STORAGE_KEYS = {
    "production_data": "productionData",
    "products": "products",
    "processes": "processes",
    "workers": "workers",
}
