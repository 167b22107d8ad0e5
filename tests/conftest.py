import pytest
from fastapi.testclient import TestClient

from wquiz.app import create_app
from wquiz.config import settings
from wquiz.globals import session_manager, vocab_manager
from wquiz.models import WordPair


class FakeHandle:
    def __init__(self, when, seq, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Manual clock with the call_later surface of an asyncio loop."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._handles = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        self._seq += 1
        handle = FakeHandle(self.now + delay, self._seq, callback, args)
        self._handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending() if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def apple_quiz():
    return [WordPair(prompt="apple", answer="사과")]


@pytest.fixture
def two_word_quiz():
    return [
        WordPair(prompt="apple", answer="사과"),
        WordPair(prompt="book", answer="책"),
    ]


@pytest.fixture
def vocab_dir(tmp_path):
    directory = tmp_path / "vocabulary"
    directory.mkdir()
    (directory / "one_word.csv").write_text("word,translation\ndog,개\n", encoding="utf-8")
    (directory / "fruit.csv").write_text(
        "en,ko\napple,사과\ngrape,포도\n", encoding="utf-8"
    )
    return directory


@pytest.fixture
def client(tmp_path, vocab_dir, monkeypatch):
    """
    TestClient running the app lifespan, with vocabulary and logs in a
    temporary directory and a long deadline so requests never race it.
    """
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(settings, "QUESTION_SECONDS", 30)
    monkeypatch.setattr(settings, "TICK_SECONDS", 1)
    monkeypatch.setattr(vocab_manager, "directory", str(vocab_dir))

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    session_manager.close_all()
