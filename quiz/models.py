from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Question:
    """One multiple choice question as delivered by a question source"""
    question: str
    correct_answer: str
    incorrect_answers: List[str]
    category: Optional[str] = None
    difficulty: Optional[str] = None

    @property
    def all_answers(self) -> List[str]:
        return [self.correct_answer, *self.incorrect_answers]


@dataclass
class Attempt:
    is_correct: bool
    timestamp: datetime


@dataclass
class UserScoreRecord:
    user_id: str
    score: int = 0
    attempts: List[Attempt] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def correct_count(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.is_correct)

    @property
    def total_attempts(self) -> int:
        return len(self.attempts)


@dataclass
class PresentedQuiz:
    """Decoded question and shuffled option labels for an interactive quiz"""
    question: str
    options: List[str]


@dataclass
class AnnouncedQuiz:
    """Fully revealed quiz for broadcast; nobody answers it"""
    question: str
    options: List[str]
    correct_index: int

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]


@dataclass
class Verdict:
    is_correct: bool
    correct_answer: str
