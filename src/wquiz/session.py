import logging
from typing import List, Optional, Sequence

from .models import AnswerRecord, QuizSummary, SessionState, SessionStatus, WordPair

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_SECONDS = 5
DEFAULT_TICK_SECONDS = 1


def _whole(seconds):
    """Reports whole-second countdowns as ints."""
    return int(seconds) if float(seconds).is_integer() else seconds


class QuizSession:
    """
    Drives a quiz one question at a time through a countdown.

    Timers are scheduled on ``loop`` (anything with an asyncio-style
    ``call_later(delay, callback, *args)`` returning a handle with
    ``cancel()``). Every callback carries the generation it was armed in and
    is ignored once the session has moved past it.
    """

    def __init__(
        self,
        loop,
        words: Optional[Sequence[WordPair]] = None,
        question_seconds: float = DEFAULT_QUESTION_SECONDS,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ):
        self.loop = loop
        self.question_seconds = question_seconds
        self.tick_seconds = tick_seconds

        self.words: List[WordPair] = []
        self.status = SessionStatus.loading
        self.current_index = 0
        self.score = 0
        self.records: List[AnswerRecord] = []
        self.seconds_remaining: float = 0
        self.current_input = ""
        self.error: Optional[str] = None

        self._generation = 0
        self._closed = False
        self._deadline_handle = None
        self._tick_handle = None

        if words is not None:
            self.load(words)

    # --- Transitions ---

    def load(self, words: Sequence[WordPair]) -> None:
        """Replaces the quiz and starts it from the first question."""
        if self._closed:
            return
        self._cancel_timers()
        self.words = list(words)
        self.current_index = 0
        self.score = 0
        self.records = []
        self.error = None
        logger.info(f"Quiz loaded with {len(self.words)} words")
        self._enter_question(0)

    def mark_unavailable(self, reason: str) -> None:
        if self.status != SessionStatus.loading:
            return
        self.status = SessionStatus.unavailable
        self.error = reason
        logger.warning(f"Quiz content unavailable: {reason}")

    def set_input(self, text: str) -> None:
        if self.status == SessionStatus.active:
            self.current_input = text

    def submit(self, text: Optional[str] = None) -> Optional[AnswerRecord]:
        """Answers the current question; returns None when nothing is being asked."""
        if self._closed or self.status != SessionStatus.active:
            return None
        if text is None:
            text = self.current_input
        return self._leave_question(text, submitted=True)

    def close(self) -> None:
        """Cancels every outstanding timer; the session accepts nothing afterwards."""
        self._closed = True
        self._cancel_timers()
        self._generation += 1

    # --- Queries ---

    def is_finished(self) -> bool:
        return self.status == SessionStatus.finished

    def state(self) -> SessionState:
        prompt = None
        if self.status == SessionStatus.active:
            prompt = self.words[self.current_index].prompt
        return SessionState(
            status=self.status,
            current_index=self.current_index,
            total=len(self.words),
            score=self.score,
            seconds_remaining=_whole(self.seconds_remaining),
            current_input=self.current_input,
            prompt=prompt,
            records=list(self.records),
            error=self.error,
        )

    def summary(self) -> QuizSummary:
        return QuizSummary(
            score=self.score, total=len(self.words), records=list(self.records)
        )

    # --- Internals ---

    def _enter_question(self, index: int) -> None:
        self._generation += 1
        self.current_index = index
        self.current_input = ""

        if index >= len(self.words):
            self.status = SessionStatus.finished
            self.seconds_remaining = 0
            logger.info(f"Quiz finished: {self.score}/{len(self.words)}")
            return

        self.status = SessionStatus.active
        self.seconds_remaining = self.question_seconds
        generation = self._generation
        self._deadline_handle = self.loop.call_later(
            self.question_seconds, self._on_deadline, generation
        )
        self._tick_handle = self.loop.call_later(
            self.tick_seconds, self._on_tick, generation
        )

    def _leave_question(self, text: str, submitted: bool) -> AnswerRecord:
        self._cancel_timers()
        word = self.words[self.current_index]
        given = text.strip()
        is_correct = given == word.answer
        record = AnswerRecord(
            prompt=word.prompt,
            answer=word.answer,
            given_text=given,
            was_submitted=submitted,
            is_correct=is_correct,
        )
        self.records.append(record)
        # A correct answer only counts when it was submitted before the deadline.
        if submitted and is_correct:
            self.score += 1
        self._enter_question(self.current_index + 1)
        return record

    def _on_deadline(self, generation: int) -> None:
        if generation != self._generation or self.status != SessionStatus.active:
            return
        logger.debug(f"Question {self.current_index} timed out")
        self._leave_question(self.current_input, submitted=False)

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self.status != SessionStatus.active:
            return
        self.seconds_remaining = max(self.seconds_remaining - self.tick_seconds, 0)
        if self.seconds_remaining > 0:
            self._tick_handle = self.loop.call_later(
                self.tick_seconds, self._on_tick, generation
            )
        else:
            self._tick_handle = None

    def _cancel_timers(self) -> None:
        for handle in (self._deadline_handle, self._tick_handle):
            if handle is not None:
                handle.cancel()
        self._deadline_handle = None
        self._tick_handle = None
