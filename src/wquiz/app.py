import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI

from .config import settings
from .database import init_db
from .globals import session_manager, vocab_manager
from .log_handler import SQLiteHandler
from .router import router


# --- Logging Setup ---
def setup_logging():
    logger = logging.getLogger("wquiz")
    logger.setLevel(settings.LOG_LEVEL)

    # create_app may run more than once per process (tests); attach handlers once.
    if not logger.handlers:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

        if settings.LOG_TO_DB:
            init_db()
            db_handler = SQLiteHandler()
            db_handler.setLevel(logging.WARNING)
            db_handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(db_handler)

    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    vocab_manager.load_all()
    yield
    session_manager.close_all()


# --- App Factory ---
def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )

    app.include_router(router)

    return app
