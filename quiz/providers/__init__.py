# quiz/providers/__init__.py - Question sources

from quiz.providers.base import QuestionSource
from quiz.providers.opentdb import OpenTDBProvider

__all__ = [
    "QuestionSource",
    "OpenTDBProvider",
]
