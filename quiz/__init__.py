"""
Quiz Bot Package

Button-driven trivia quizzes with a persistent leaderboard and a scheduled
question broadcast.
"""

from .cog import QuizAction, QuizCog, create_quiz_cog
from .errors import ChannelNotAllowed, NoPendingQuiz, NoQuestionAvailable, PersistenceFailure, QuizError
from .ledger import AnswerLedger
from .score_store import ScoreStore, SqliteScoreStore
from .session import QuizSession

__all__ = [
    'QuizAction',
    'QuizCog',
    'create_quiz_cog',
    'QuizError',
    'NoQuestionAvailable',
    'NoPendingQuiz',
    'ChannelNotAllowed',
    'PersistenceFailure',
    'AnswerLedger',
    'ScoreStore',
    'SqliteScoreStore',
    'QuizSession',
]
