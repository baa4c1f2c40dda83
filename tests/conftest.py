from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from quiz.ledger import AnswerLedger
from quiz.models import Question
from quiz.providers.base import QuestionSource
from quiz.score_store import SqliteScoreStore
from quiz.session import QuizSession


class FakeSource(QuestionSource):
    """Hands out queued questions; None or an exception simulate a failing API"""

    def __init__(self, questions: Optional[List] = None):
        self.questions = list(questions or [])
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    async def get_question(self) -> Optional[Question]:
        self.calls += 1
        if not self.questions:
            return None
        item = self.questions.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class StepClock:
    """Deterministic clock advancing one second per call"""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_question(text="2+2?", correct="4", incorrect=("3", "5", "6")) -> Question:
    return Question(question=text, correct_answer=correct, incorrect_answers=list(incorrect))


def keep_order(items: list) -> None:
    """Shuffle stand-in that leaves the correct answer first"""


@pytest.fixture
async def store(tmp_path):
    score_store = SqliteScoreStore(str(tmp_path / "scores.db"))
    await score_store.connect()
    yield score_store
    await score_store.close()


@pytest.fixture
def ledger():
    return AnswerLedger()


@pytest.fixture
def source():
    return FakeSource([make_question()])


@pytest.fixture
def session(source, ledger, store):
    return QuizSession(source, ledger, store, shuffle=keep_order, clock=StepClock())
