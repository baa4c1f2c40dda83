# quiz/score_store.py - Durable per-user scores and attempt history

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

import aiosqlite

from quiz.errors import PersistenceFailure
from quiz.models import Attempt, UserScoreRecord

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_scores (
  user_id     TEXT    PRIMARY KEY,
  score       INTEGER NOT NULL DEFAULT 0,
  created_at  TEXT    NOT NULL             -- first attempt, used for tie-breaks
);

CREATE TABLE IF NOT EXISTS quiz_attempts (
  id          INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id     TEXT    NOT NULL,
  is_correct  INTEGER NOT NULL,
  timestamp   TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_quiz_attempts_user ON quiz_attempts(user_id);
CREATE INDEX IF NOT EXISTS idx_user_scores_rank ON user_scores(score DESC, created_at);
"""


def _to_iso(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


class ScoreStore(ABC):
    """Per-user cumulative score plus every graded attempt"""

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def record_attempt(self, user_id: str, is_correct: bool, timestamp: datetime) -> None:
        """Append one attempt and add 1 to the score iff correct, creating the record if needed"""
        pass

    @abstractmethod
    async def top_scores(self, limit: int = 10) -> List[UserScoreRecord]:
        """Highest scores first; ties go to whoever scored first"""
        pass

    @abstractmethod
    async def get_record(self, user_id: str) -> Optional[UserScoreRecord]:
        pass


class SqliteScoreStore(ScoreStore):
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

    async def connect(self) -> None:
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA_SQL)
        await self._db.commit()
        logger.info(f"Connected to score database: {self.db_path}")

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Closed score database connection")

    def _conn(self) -> aiosqlite.Connection:
        if not self._db:
            raise RuntimeError("SqliteScoreStore not connected")
        return self._db

    async def record_attempt(self, user_id: str, is_correct: bool, timestamp: datetime) -> None:
        db = self._conn()
        stamp = _to_iso(timestamp)
        async with self._write_lock:
            try:
                await db.execute(
                    "INSERT INTO user_scores (user_id, score, created_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(user_id) DO UPDATE SET score = score + excluded.score",
                    (user_id, 1 if is_correct else 0, stamp),
                )
                await db.execute(
                    "INSERT INTO quiz_attempts (user_id, is_correct, timestamp) VALUES (?, ?, ?)",
                    (user_id, 1 if is_correct else 0, stamp),
                )
                await db.commit()
            except aiosqlite.Error as e:
                await db.rollback()
                logger.error(f"Failed to record attempt for user {user_id}: {e}")
                raise PersistenceFailure(f"could not record attempt for {user_id}") from e

        logger.debug(f"Recorded {'correct' if is_correct else 'incorrect'} attempt for user {user_id}")

    async def _load_attempts(self, user_ids: List[str]) -> Dict[str, List[Attempt]]:
        if not user_ids:
            return {}
        db = self._conn()
        placeholders = ",".join("?" for _ in user_ids)
        cur = await db.execute(
            f"SELECT user_id, is_correct, timestamp FROM quiz_attempts "
            f"WHERE user_id IN ({placeholders}) ORDER BY id",
            tuple(user_ids),
        )
        rows = await cur.fetchall()
        out: Dict[str, List[Attempt]] = {user_id: [] for user_id in user_ids}
        for r in rows:
            out[r["user_id"]].append(
                Attempt(is_correct=bool(r["is_correct"]), timestamp=datetime.fromisoformat(r["timestamp"]))
            )
        return out

    def _to_record(self, row, attempts: List[Attempt]) -> UserScoreRecord:
        return UserScoreRecord(
            user_id=row["user_id"],
            score=int(row["score"]),
            attempts=attempts,
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    async def top_scores(self, limit: int = 10) -> List[UserScoreRecord]:
        if limit <= 0:
            return []
        db = self._conn()
        try:
            cur = await db.execute(
                "SELECT user_id, score, created_at FROM user_scores "
                "ORDER BY score DESC, created_at ASC, user_id ASC LIMIT ?",
                (limit,),
            )
            rows = await cur.fetchall()
            attempts = await self._load_attempts([r["user_id"] for r in rows])
        except aiosqlite.Error as e:
            logger.error(f"Failed to read leaderboard: {e}")
            raise PersistenceFailure("could not read leaderboard") from e

        return [self._to_record(r, attempts[r["user_id"]]) for r in rows]

    async def get_record(self, user_id: str) -> Optional[UserScoreRecord]:
        db = self._conn()
        try:
            cur = await db.execute(
                "SELECT user_id, score, created_at FROM user_scores WHERE user_id = ?",
                (user_id,),
            )
            row = await cur.fetchone()
            if not row:
                return None
            attempts = await self._load_attempts([user_id])
        except aiosqlite.Error as e:
            logger.error(f"Failed to read record for user {user_id}: {e}")
            raise PersistenceFailure(f"could not read record for {user_id}") from e

        return self._to_record(row, attempts[user_id])
