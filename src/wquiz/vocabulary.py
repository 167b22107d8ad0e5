import asyncio
import glob
import logging
import os
from typing import Any, Dict, List
from urllib.parse import quote

import pandas as pd
import requests
from pydantic import ValidationError

from .errors import ContentUnavailable
from .models import WordPair
from .session import QuizSession

logger = logging.getLogger(__name__)

BUILTIN_TOPIC = "basic_korean"

BUILTIN_WORDS: List[WordPair] = [
    WordPair(prompt="apple", answer="사과"),
    WordPair(prompt="book", answer="책"),
    WordPair(prompt="computer", answer="컴퓨터"),
    WordPair(prompt="dog", answer="개"),
    WordPair(prompt="elephant", answer="코끼리"),
    WordPair(prompt="fish", answer="물고기"),
    WordPair(prompt="grape", answer="포도"),
    WordPair(prompt="hat", answer="모자"),
    WordPair(prompt="ice", answer="얼음"),
    WordPair(prompt="juice", answer="주스"),
    WordPair(prompt="key", answer="열쇠"),
    WordPair(prompt="lamp", answer="램프"),
]

# Accepted (prompt, answer) column spellings in topic CSV files.
COLUMN_PAIRS = [("word", "translation"), ("prompt", "answer"), ("en", "ko")]


# --- Service Layer: Vocabulary Management ---
class VocabularyManager:
    """Manages loading and accessing vocabulary sets."""

    def __init__(self, directory: str):
        self.directory = directory
        self.vocab_sets: Dict[str, List[WordPair]] = {}

    def load_all(self):
        self.vocab_sets = {BUILTIN_TOPIC: list(BUILTIN_WORDS)}
        if not os.path.isdir(self.directory):
            logger.info(f"No vocabulary directory at {self.directory}")
            return

        csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
        for file_path in csv_files:
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue

            columns = next(
                (pair for pair in COLUMN_PAIRS if set(pair) <= set(df.columns)), None
            )
            if columns is None:
                logger.error(f"Skipping {file_name}: Missing columns.")
                continue

            df = df.dropna(subset=list(columns))
            self.vocab_sets[file_name] = [
                WordPair(prompt=row[columns[0]], answer=row[columns[1]])
                for row in df.to_dict("records")
            ]
            logger.info(f"Loaded {len(df)} words from {file_name}")

    def get_words(self, topic: str) -> List[WordPair]:
        return list(self.vocab_sets.get(topic, []))

    def get_topics(self) -> List[Dict[str, Any]]:
        topics = []
        for key, words in self.vocab_sets.items():
            display_name = key.replace("_", " ").title()
            topics.append({"id": key, "name": display_name, "count": len(words)})
        topics.sort(key=lambda x: x["name"])
        return topics


# --- Remote content ---
class RemoteWordSource:
    """Fetches a quiz by identifier from ``{base_url}/{quiz_id}``."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, quiz_id: str) -> List[WordPair]:
        if not self.base_url:
            raise ContentUnavailable("No quiz source configured")

        url = f"{self.base_url}/{quote(quiz_id, safe='')}"
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise ContentUnavailable(f"Could not fetch quiz {quiz_id}: {exc}") from exc
        except ValueError as exc:
            raise ContentUnavailable(f"Quiz {quiz_id} is not valid JSON") from exc

        if isinstance(payload, dict):
            payload = payload.get("words")
        if not isinstance(payload, list):
            raise ContentUnavailable(f"Quiz {quiz_id} has no word list")

        try:
            return [WordPair.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise ContentUnavailable(f"Quiz {quiz_id} has malformed words") from exc

    async def fetch_async(self, quiz_id: str) -> List[WordPair]:
        return await asyncio.to_thread(self.fetch, quiz_id)


async def load_remote(
    session: QuizSession, source: RemoteWordSource, quiz_id: str
) -> None:
    """Fetches once and hands the result to the session; failures leave it unavailable."""
    try:
        words = await source.fetch_async(quiz_id)
    except ContentUnavailable as exc:
        session.mark_unavailable(str(exc))
        return
    session.load(words)
