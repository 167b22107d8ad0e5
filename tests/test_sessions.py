import asyncio
from datetime import datetime, timedelta

import pytest

from wquiz.config import settings
from wquiz.models import SessionStatus, WordPair
from wquiz.sessions import SessionManager
from wquiz.vocabulary import load_remote


class SlowSource:
    def __init__(self):
        self.started = asyncio.Event()

    async def fetch_async(self, quiz_id):
        self.started.set()
        await asyncio.sleep(60)
        return [WordPair(prompt="key", answer="열쇠")]


def age(manager, session_id, days=10):
    manager.entries[session_id].created_at = datetime.now() - timedelta(days=days)


def test_expired_session_is_closed_on_lookup(loop, apple_quiz):
    manager = SessionManager()
    session_id = manager.create(loop, topic="fruit", words=apple_quiz)
    session = manager.get(session_id)
    assert loop.pending()

    age(manager, session_id)

    assert manager.get(session_id) is None
    assert session_id not in manager.entries
    assert loop.pending() == []
    assert session.submit("사과") is None


def test_session_within_timeout_is_kept(loop, apple_quiz):
    manager = SessionManager()
    session_id = manager.create(loop, topic="fruit", words=apple_quiz)
    manager.entries[session_id].created_at = datetime.now() - timedelta(
        minutes=settings.SESSION_TIMEOUT_MINUTES - 1
    )
    assert manager.get(session_id) is not None


def test_create_sweeps_abandoned_sessions(loop, apple_quiz):
    manager = SessionManager()
    old_ids = [manager.create(loop, topic="fruit", words=apple_quiz) for _ in range(3)]
    for session_id in old_ids:
        age(manager, session_id)

    new_id = manager.create(loop, topic="fruit", words=apple_quiz)

    assert list(manager.entries) == [new_id]
    assert len(loop.pending()) == 2


def test_discard_cancels_pending_remote_load(loop):
    manager = SessionManager()

    async def scenario():
        session_id = manager.create(loop, topic="remote:abc")
        entry = manager.get_entry(session_id)
        source = SlowSource()
        entry.loader = asyncio.create_task(load_remote(entry.session, source, "abc"))
        await source.started.wait()

        manager.discard(session_id)
        with pytest.raises(asyncio.CancelledError):
            await entry.loader
        return entry

    entry = asyncio.run(scenario())

    assert entry.loader.cancelled()
    entry.session.load([WordPair(prompt="key", answer="열쇠")])
    assert entry.session.status == SessionStatus.loading
    assert loop.pending() == []


def test_close_all_empties_entries(loop, two_word_quiz):
    manager = SessionManager()
    for _ in range(3):
        manager.create(loop, topic="fruit", words=two_word_quiz)

    manager.close_all()

    assert manager.entries == {}
    assert loop.pending() == []


def test_discard_unknown_session_is_noop():
    manager = SessionManager()
    manager.discard("missing")
    assert manager.entries == {}
