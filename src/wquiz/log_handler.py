import logging

from .database import get_db_connection


class SQLiteHandler(logging.Handler):
    """
    A logging handler that writes quiz log records to an SQLite database.
    """

    def __init__(self, db_path: str = None):
        super().__init__()
        self.db_path = db_path

    def emit(self, record):
        try:
            conn = get_db_connection(self.db_path)
            with conn:
                conn.execute(
                    "INSERT INTO logs (level, logger, message) VALUES (?, ?, ?)",
                    (record.levelname, record.name, self.format(record)),
                )
            conn.close()
        except Exception:
            self.handleError(record)
