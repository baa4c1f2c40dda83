# quiz/broadcaster.py - Posts a revealed quiz to one channel on a fixed timer

import asyncio
import logging

import discord
from discord.ext import commands, tasks

from quiz.errors import NoQuestionAvailable
from quiz.session import QuizSession
from quiz.views import RevealedQuizView, announced_quiz_embed

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5 * 60


class ScheduledBroadcaster:
    def __init__(self, bot: commands.Bot, session: QuizSession, channel_id: int,
                 interval_seconds: int = DEFAULT_INTERVAL_SECONDS):
        self.bot = bot
        self.session = session
        self.channel_id = channel_id
        self.interval_seconds = interval_seconds
        self.broadcast.change_interval(seconds=interval_seconds)

    def start(self) -> None:
        if self.broadcast.is_running():
            return
        self.broadcast.start()
        logger.info(f"Quiz broadcaster started for channel {self.channel_id} every {self.interval_seconds}s")

    def stop(self) -> None:
        if self.broadcast.is_running():
            self.broadcast.cancel()
            logger.info("Quiz broadcaster stopped")

    async def post_once(self) -> bool:
        """Announce one quiz; returns False when nothing was posted"""
        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            logger.warning(f"Channel {self.channel_id} not found or bot does not have access")
            return False

        try:
            quiz = await self.session.announce_quiz()
        except NoQuestionAvailable:
            logger.error("Failed to fetch a quiz question, waiting for next tick")
            return False

        try:
            await channel.send(embed=announced_quiz_embed(quiz), view=RevealedQuizView(quiz))
        except discord.HTTPException as e:
            logger.error(f"Error posting quiz to channel {self.channel_id}: {e}")
            return False

        logger.info(f"Posted scheduled quiz to channel {self.channel_id}")
        return True

    @tasks.loop(seconds=DEFAULT_INTERVAL_SECONDS)
    async def broadcast(self):
        await self.post_once()

    @broadcast.before_loop
    async def _before_broadcast(self):
        await self.bot.wait_until_ready()
        # First post goes out one full interval after startup
        await asyncio.sleep(self.interval_seconds)

    @broadcast.error
    async def _broadcast_error(self, error: BaseException):
        logger.error(f"Quiz broadcaster stopped by unexpected error: {error}", exc_info=error)
