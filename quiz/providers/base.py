# quiz/providers/base.py - Abstract base class for question sources

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from quiz.models import Question


class QuestionSource(ABC):
    """Supplies one trivia question on demand"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name"""
        pass

    @abstractmethod
    async def get_question(self) -> Optional[Question]:
        """
        Fetch a single question.

        Returns:
            Question with its raw (possibly HTML-encoded) text, or None if
            the source had nothing to give
        """
        pass

    async def initialize(self) -> None:
        """Optional initialization (e.g., create HTTP session)"""
        pass

    async def cleanup(self) -> None:
        """Optional cleanup (e.g., close HTTP session)"""
        pass

    def get_statistics(self) -> Dict[str, Any]:
        return {"name": self.name}
