import os


class Settings:
    PROJECT_NAME: str = "wquiz"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "wquiz.log"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_DB: bool = os.environ.get("LOG_TO_DB", "0") == "1"
    DB_DIR: str = "db"
    DB_FILE: str = "wquiz.db"
    VOCAB_DIR: str = "vocabulary"
    QUIZ_SOURCE_URL: str = os.environ.get("QUIZ_SOURCE_URL", "")
    QUIZ_FETCH_TIMEOUT: float = 10.0
    QUESTION_SECONDS: float = 5
    TICK_SECONDS: float = 1
    DEFAULT_LOCALE: str = "ko"
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
