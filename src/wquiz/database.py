import os
import sqlite3

from .config import settings


def get_db_path() -> str:
    return os.path.join(settings.DB_DIR, settings.DB_FILE)


def get_db_connection(db_path: str = None):
    """Establishes a connection to the SQLite log database."""
    conn = sqlite3.connect(db_path or get_db_path())
    conn.row_factory = sqlite3.Row
    return conn


def create_log_table(db_path: str = None):
    """Creates the log table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                message TEXT
            );
        """
        )
    conn.close()


def init_db(db_path: str = None):
    """Creates the database directory and the log table."""
    db_path = db_path or get_db_path()
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    create_log_table(db_path)
