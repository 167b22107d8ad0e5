import logging

from wquiz.database import get_db_connection, init_db
from wquiz.log_handler import SQLiteHandler


def test_records_are_written_to_logs_table(tmp_path):
    db_path = str(tmp_path / "db" / "wquiz.db")
    init_db(db_path)

    logger = logging.getLogger("wquiz.tests.sqlite")
    logger.propagate = False
    handler = SQLiteHandler(db_path)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    try:
        logger.warning("Quiz content unavailable: boom")
    finally:
        logger.removeHandler(handler)

    conn = get_db_connection(db_path)
    rows = conn.execute("SELECT level, logger, message FROM logs").fetchall()
    conn.close()

    assert [tuple(row) for row in rows] == [
        ("WARNING", "wquiz.tests.sqlite", "Quiz content unavailable: boom")
    ]
