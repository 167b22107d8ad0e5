from enum import Enum
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field


# --- Models ---
class WordPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(validation_alias=AliasChoices("prompt", "en", "word"))
    answer: str = Field(validation_alias=AliasChoices("answer", "ko", "translation"))


class AnswerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    answer: str
    given_text: str
    was_submitted: bool
    is_correct: bool


class SessionStatus(str, Enum):
    loading = "loading"
    active = "active"
    finished = "finished"
    unavailable = "unavailable"


class SessionState(BaseModel):
    status: SessionStatus
    current_index: int
    total: int
    score: int
    seconds_remaining: Union[int, float]
    current_input: str
    prompt: Optional[str] = None
    records: List[AnswerRecord]
    error: Optional[str] = None


class QuizSummary(BaseModel):
    score: int
    total: int
    records: List[AnswerRecord]

    @computed_field
    @property
    def score_percentage(self) -> int:
        return round((self.score / self.total) * 100) if self.total > 0 else 0


class ShareText(BaseModel):
    title: str
    text: str
