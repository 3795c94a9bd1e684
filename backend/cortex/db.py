import sqlite3
from typing import Optional

from loguru import logger

from cortex.config import DATABASE_PATH

def get_db_connection():
    """Obtains a connection to the SQLite database."""

    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row

    return conn

def init_db():
    """Creates the key-value table if it does not exist."""

    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS KeyValue (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()
    conn.close()

    logger.info(f"SQLite store initialized at {DATABASE_PATH}.")

def read_value(key: str) -> Optional[str]:
    """Returns the raw value stored under `key`, or None."""

    conn = get_db_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT value FROM KeyValue WHERE key = ?", (key,))
    row = cursor.fetchone()

    conn.close()

    return row["value"] if row else None

def write_value(key: str, value: str):
    """Replaces the whole value stored under `key`."""

    conn = get_db_connection()
    cursor = conn.cursor()

    try:
        cursor.execute(
            "INSERT OR REPLACE INTO KeyValue (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, value)
        )
        conn.commit()
    finally:
        conn.close()
