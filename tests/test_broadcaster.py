from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import FakeSource, make_question
from quiz.broadcaster import ScheduledBroadcaster
from quiz.session import QuizSession

CHANNEL_ID = 555


@pytest.fixture
def channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    return channel


@pytest.fixture
def bot(channel):
    bot = MagicMock()
    bot.get_channel.return_value = channel
    return bot


def reverse(items):
    items.reverse()


async def test_posts_revealed_quiz(bot, channel, ledger, store):
    session = QuizSession(FakeSource([make_question()]), ledger, store, shuffle=reverse)
    broadcaster = ScheduledBroadcaster(bot, session, CHANNEL_ID, interval_seconds=60)

    assert await broadcaster.post_once() is True

    bot.get_channel.assert_called_once_with(CHANNEL_ID)
    kwargs = channel.send.call_args.kwargs
    assert "2+2?" in kwargs["embed"].description
    assert kwargs["embed"].footer.text == "Correct answer is shown below:"

    # Sent finished, so discord.py does not keep one view per tick
    assert kwargs["view"].is_finished()
    buttons = kwargs["view"].children
    assert [b.label for b in buttons] == ["6", "5", "3", "4"]
    assert all(b.disabled for b in buttons)
    assert buttons[3].style == discord.ButtonStyle.success
    assert all(b.style == discord.ButtonStyle.danger for b in buttons[:3])

    # Broadcasts are informational only
    assert len(ledger) == 0
    assert await store.top_scores(10) == []


async def test_skips_tick_without_question(bot, channel, ledger, store):
    session = QuizSession(FakeSource([]), ledger, store)
    broadcaster = ScheduledBroadcaster(bot, session, CHANNEL_ID)

    assert await broadcaster.post_once() is False
    channel.send.assert_not_awaited()


async def test_skips_tick_when_channel_missing(ledger, store):
    bot = MagicMock()
    bot.get_channel.return_value = None
    source = FakeSource([make_question()])
    broadcaster = ScheduledBroadcaster(bot, QuizSession(source, ledger, store), CHANNEL_ID)

    assert await broadcaster.post_once() is False
    assert source.calls == 0


async def test_send_failure_is_contained(bot, channel, ledger, store):
    response = MagicMock(status=403, reason="Forbidden")
    channel.send.side_effect = discord.Forbidden(response, "Missing Access")
    session = QuizSession(FakeSource([make_question()]), ledger, store)
    broadcaster = ScheduledBroadcaster(bot, session, CHANNEL_ID)

    assert await broadcaster.post_once() is False


async def test_interval_is_configurable(bot, ledger, store):
    session = QuizSession(FakeSource(), ledger, store)
    broadcaster = ScheduledBroadcaster(bot, session, CHANNEL_ID, interval_seconds=42)

    assert broadcaster.broadcast.seconds == 42
    assert not broadcaster.broadcast.is_running()
