# quiz/providers/opentdb.py - Open Trivia Database question source

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import aiohttp

from quiz.models import Question
from quiz.providers.base import QuestionSource

logger = logging.getLogger(__name__)

OPENTDB_URL = "https://opentdb.com/api.php"

# OpenTDB answers response_code 5 when called more than once every 5 seconds
MIN_REQUEST_INTERVAL = 5.1

RESPONSE_CODES = {
    0: "success",
    1: "no results",
    2: "invalid parameter",
    3: "token not found",
    4: "token empty",
    5: "rate limited",
}


def parse_question(payload: Dict[str, Any]) -> Optional[Question]:
    """Pull the first question out of an api.php response body"""
    code = payload.get("response_code")
    results = payload.get("results") or []
    if code != 0 or not results:
        logger.warning(f"OpenTDB returned {RESPONSE_CODES.get(code, code)} with {len(results)} result(s)")
        return None

    item = results[0]
    try:
        return Question(
            question=item["question"],
            correct_answer=item["correct_answer"],
            incorrect_answers=list(item["incorrect_answers"]),
            category=item.get("category"),
            difficulty=item.get("difficulty"),
        )
    except (KeyError, TypeError) as e:
        logger.error(f"Malformed OpenTDB question: {e}")
        return None


class OpenTDBProvider(QuestionSource):
    """Provider for Open Trivia Database (opentdb.com)"""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None,
                 min_interval: float = MIN_REQUEST_INTERVAL):
        self._session = session
        self._owns_session = session is None
        self._min_interval = min_interval
        self._last_request_time = 0.0
        self._rate_lock = asyncio.Lock()
        self.requests_made = 0
        self.failures = 0

    @property
    def name(self) -> str:
        return "Open Trivia DB"

    async def initialize(self) -> None:
        """Create HTTP session for API calls"""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=5,
                limit_per_host=2,
                ttl_dns_cache=300,
            )
            timeout = aiohttp.ClientTimeout(total=15, connect=5)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers={'User-Agent': 'QuizBot/1.0'}
            )
            self._owns_session = True
            logger.info("OpenTDB provider session created")

    async def cleanup(self) -> None:
        """Close HTTP session"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            logger.info("OpenTDB provider session closed")

    async def _wait_for_rate_limit(self):
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()

    async def get_question(self) -> Optional[Question]:
        if self._session is None or self._session.closed:
            await self.initialize()

        params = {"amount": "1", "type": "multiple"}

        async with self._rate_lock:
            await self._wait_for_rate_limit()
            self.requests_made += 1
            try:
                async with self._session.get(OPENTDB_URL, params=params) as resp:
                    if resp.status != 200:
                        logger.error(f"OpenTDB HTTP error: {resp.status}")
                        self.failures += 1
                        return None
                    payload = await resp.json()
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.error(f"Error fetching quiz question: {e}")
                self.failures += 1
                return None

        question = parse_question(payload)
        if question is None:
            self.failures += 1
        return question

    def get_statistics(self) -> Dict[str, Any]:
        stats = super().get_statistics()
        stats["requests_made"] = self.requests_made
        stats["failures"] = self.failures
        return stats
