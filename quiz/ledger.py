# quiz/ledger.py - In-memory record of each user's pending quiz answer

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)


class AnswerLedger:
    """
    Maps a user id to the correct answer of the one quiz that user has open.

    Entries live for the lifetime of the process only. Starting a quiz
    overwrites the user's previous entry; answering removes it.

    Callers that read and then write an entry across an ``await`` must hold
    ``lock(user_id)`` so a start and a submit for the same user cannot
    interleave.
    """

    def __init__(self):
        self._answers: Dict[str, str] = {}
        # Locks disappear once no task is holding or waiting on them
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def set(self, user_id: str, answer: str) -> None:
        if user_id in self._answers:
            logger.debug(f"Replacing pending quiz for user {user_id}")
        self._answers[user_id] = answer

    def get(self, user_id: str) -> Optional[str]:
        return self._answers.get(user_id)

    def delete(self, user_id: str) -> None:
        self._answers.pop(user_id, None)

    def clear(self) -> None:
        self._answers.clear()

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    @asynccontextmanager
    async def lock(self, user_id: str) -> AsyncIterator[None]:
        user_lock = self._locks.get(user_id)
        if user_lock is None:
            user_lock = asyncio.Lock()
            self._locks[user_id] = user_lock
        async with user_lock:
            yield
