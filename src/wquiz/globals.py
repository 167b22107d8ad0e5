from .config import settings
from .sessions import SessionManager
from .vocabulary import VocabularyManager

vocab_manager = VocabularyManager(f"{settings.VOCAB_DIR}")
session_manager = SessionManager()
