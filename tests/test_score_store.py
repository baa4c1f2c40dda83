import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from quiz.errors import PersistenceFailure
from quiz.score_store import SqliteScoreStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def test_first_attempt_creates_record(store):
    await store.record_attempt("U", True, T0)

    record = await store.get_record("U")
    assert record.user_id == "U"
    assert record.score == 1
    assert record.total_attempts == 1
    assert record.created_at == T0


async def test_incorrect_first_attempt_starts_at_zero(store):
    await store.record_attempt("U", False, T0)

    record = await store.get_record("U")
    assert record.score == 0
    assert record.attempts[0].is_correct is False


async def test_attempts_kept_in_order(store):
    for i, correct in enumerate([True, False, False, True]):
        await store.record_attempt("U", correct, T0 + timedelta(minutes=i))

    record = await store.get_record("U")
    assert [a.is_correct for a in record.attempts] == [True, False, False, True]
    assert record.score == record.correct_count == 2
    assert record.attempts[-1].timestamp == T0 + timedelta(minutes=3)


async def test_concurrent_attempts_are_not_lost(store):
    await asyncio.gather(*[store.record_attempt("U", True, T0) for _ in range(20)])

    record = await store.get_record("U")
    assert record.score == 20
    assert record.total_attempts == 20


async def test_naive_timestamps_are_treated_as_utc(store):
    await store.record_attempt("U", True, datetime(2024, 1, 1))

    record = await store.get_record("U")
    assert record.attempts[0].timestamp == T0


async def test_top_scores_sorted_and_limited(store):
    for n in range(12):
        user_id = f"user{n:02d}"
        for i in range(n):
            await store.record_attempt(user_id, True, T0 + timedelta(seconds=n))
        await store.record_attempt(user_id, False, T0 + timedelta(seconds=n))

    top = await store.top_scores(10)

    assert len(top) == 10
    scores = [r.score for r in top]
    assert scores == sorted(scores, reverse=True)
    assert top[0].user_id == "user11"
    assert top[0].total_attempts == 12


async def test_top_scores_ties_go_to_earliest_record(store):
    await store.record_attempt("late", True, T0 + timedelta(hours=1))
    await store.record_attempt("early", True, T0)

    top = await store.top_scores(10)

    assert [r.user_id for r in top] == ["early", "late"]


async def test_top_scores_empty_and_zero_limit(store):
    assert await store.top_scores(10) == []
    await store.record_attempt("U", True, T0)
    assert await store.top_scores(0) == []


async def test_unknown_user_has_no_record(store):
    assert await store.get_record("ghost") is None


async def test_driver_errors_become_persistence_failure(store):
    await store._conn().execute("DROP TABLE quiz_attempts")
    await store._conn().commit()

    with pytest.raises(PersistenceFailure):
        await store.record_attempt("U", True, T0)

    # The score update was rolled back with the failed attempt insert
    assert await store.top_scores(10) == []


async def test_using_store_before_connect_raises(tmp_path):
    unconnected = SqliteScoreStore(str(tmp_path / "never.db"))

    with pytest.raises(RuntimeError):
        await unconnected.top_scores(10)
