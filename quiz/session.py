# quiz/session.py - Question to answer cycle: fetch, present, grade, persist

import html
import logging
import random
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from quiz.errors import NoPendingQuiz, NoQuestionAvailable
from quiz.ledger import AnswerLedger
from quiz.models import AnnouncedQuiz, PresentedQuiz, Question, Verdict
from quiz.providers.base import QuestionSource
from quiz.score_store import ScoreStore

logger = logging.getLogger(__name__)

MAX_OPTION_LABEL = 80


def decode_text(text: str) -> str:
    """OpenTDB encodes quotes, ampersands and accents as HTML entities"""
    return html.unescape(text)


def option_label(option: str) -> str:
    """Option text as it fits on a button (Discord caps labels at 80 characters)"""
    if len(option) <= MAX_OPTION_LABEL:
        return option
    return option[:MAX_OPTION_LABEL - 3] + "..."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuizSession:
    """
    Runs quizzes for users against one question source, answer ledger and
    score store.

    Interactive quizzes record the correct answer in the ledger and are
    graded by ``submit_answer``. Announced quizzes are broadcast with the
    answer already revealed and never touch the ledger or the store.
    """

    def __init__(self, source: QuestionSource, ledger: AnswerLedger, store: ScoreStore,
                 shuffle: Optional[Callable[[list], None]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.source = source
        self.ledger = ledger
        self.store = store
        self._shuffle = shuffle or random.shuffle
        self._clock = clock or _utc_now

    async def _fetch_question(self) -> Question:
        try:
            question = await self.source.get_question()
        except Exception as e:
            logger.error(f"{self.source.name} failed to supply a question: {e}")
            raise NoQuestionAvailable(str(e)) from e

        if question is None:
            logger.warning(f"No quiz questions available from {self.source.name}")
            raise NoQuestionAvailable()
        return question

    def _arrange(self, question: Question) -> Tuple[List[str], int]:
        """Shuffle and decode the options; returns them with the correct one's position"""
        answers = question.all_answers
        order = list(range(len(answers)))
        self._shuffle(order)
        options = [decode_text(answers[i]) for i in order]
        return options, order.index(0)

    async def start_interactive_quiz(self, user_id: str) -> PresentedQuiz:
        question = await self._fetch_question()
        options, _ = self._arrange(question)

        async with self.ledger.lock(user_id):
            self.ledger.set(user_id, question.correct_answer)

        logger.info(f"Stored correct answer for user {user_id}: {question.correct_answer}")
        return PresentedQuiz(question=decode_text(question.question), options=options)

    async def submit_answer(self, user_id: str, selected_option: str) -> Verdict:
        async with self.ledger.lock(user_id):
            pending = self.ledger.get(user_id)
            if pending is None:
                raise NoPendingQuiz(f"user {user_id} has no pending quiz")

            # Options are shown decoded, so grade against the decoded answer.
            # A press only carries the button label, which may be shortened.
            correct_answer = decode_text(pending)
            is_correct = option_label(selected_option).lower() == option_label(correct_answer).lower()

            try:
                await self.store.record_attempt(user_id, is_correct, self._clock())
            finally:
                self.ledger.delete(user_id)

        logger.info(f"User {user_id} answered {'correctly' if is_correct else 'incorrectly'}")
        return Verdict(is_correct=is_correct, correct_answer=correct_answer)

    async def announce_quiz(self) -> AnnouncedQuiz:
        question = await self._fetch_question()
        options, correct_index = self._arrange(question)
        return AnnouncedQuiz(
            question=decode_text(question.question),
            options=options,
            correct_index=correct_index,
        )
