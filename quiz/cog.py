# quiz/cog.py - Slash commands, answer buttons and the scheduled broadcast

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional

import discord
from discord import app_commands
from discord.ext import commands

from quiz.broadcaster import ScheduledBroadcaster
from quiz.errors import GENERIC_ERROR_MESSAGE, ChannelNotAllowed, QuizError
from quiz.ledger import AnswerLedger
from quiz.providers import OpenTDBProvider
from quiz.score_store import ScoreStore
from quiz.session import QuizSession
from quiz.views import (AnswerButton, QuizAnswerView, interactive_quiz_embed,
                        leaderboard_embed, verdict_embed)

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10


class QuizAction(Enum):
    START_QUIZ = "start_quiz"
    LEADERBOARD = "leaderboard"
    ANSWER = "answer"


Handler = Callable[[discord.Interaction, Optional[str]], Awaitable[None]]


class QuizCog(commands.Cog):
    def __init__(self, bot: commands.Bot, session: QuizSession,
                 allowed_channel_ids: Iterable[int] = (),
                 log_channel_id: Optional[int] = None,
                 broadcaster: Optional[ScheduledBroadcaster] = None):
        self.bot = bot
        self.session = session
        self.allowed_channel_ids = set(allowed_channel_ids)
        self.log_channel_id = log_channel_id
        self.broadcaster = broadcaster

        self._handlers: Dict[QuizAction, Handler] = {
            QuizAction.START_QUIZ: self._handle_start_quiz,
            QuizAction.LEADERBOARD: self._handle_leaderboard,
            QuizAction.ANSWER: self._handle_answer,
        }

        if not self.allowed_channel_ids:
            logger.warning("No quiz channels configured, quiz commands are accepted everywhere")
        logger.info("QuizCog initialized")

    async def cog_load(self):
        self.bot.add_dynamic_items(AnswerButton)
        await self.session.source.initialize()
        if self.broadcaster:
            self.broadcaster.start()

    async def cog_unload(self):
        if self.broadcaster:
            self.broadcaster.stop()
        await self.session.source.cleanup()
        self.bot.remove_dynamic_items(AnswerButton)
        logger.info(f"Question source stats: {self.session.source.get_statistics()}")
        # Unanswered quizzes do not survive a reload; late presses get NoPendingQuiz
        self.session.ledger.clear()
        logger.info("QuizCog cleaned up")

    # ---- dispatch ----
    def check_channel(self, interaction: discord.Interaction) -> None:
        if self.allowed_channel_ids and interaction.channel_id not in self.allowed_channel_ids:
            raise ChannelNotAllowed(f"channel {interaction.channel_id} is not a quiz channel")

    async def dispatch(self, interaction: discord.Interaction, action: QuizAction,
                       option: Optional[str] = None) -> None:
        """Single entry point for every quiz command and answer button"""
        try:
            self.check_channel(interaction)
            await self._handlers[action](interaction, option)
        except QuizError as e:
            logger.info(f"{action.value} for user {interaction.user.id} rejected: {e}")
            await self._reply_ephemeral(interaction, e.user_message)
        except Exception as e:
            logger.error(f"Error handling {action.value} interaction: {e}", exc_info=True)
            await self._reply_ephemeral(interaction, GENERIC_ERROR_MESSAGE)

    async def _reply_ephemeral(self, interaction: discord.Interaction, content: str) -> None:
        try:
            if interaction.response.is_done():
                await interaction.followup.send(content, ephemeral=True)
            else:
                await interaction.response.send_message(content, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Could not deliver error reply: {e}")

    # ---- handlers ----
    async def _handle_start_quiz(self, interaction: discord.Interaction, option: Optional[str]) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)

        quiz = await self.session.start_interactive_quiz(str(interaction.user.id))
        view = QuizAnswerView(quiz)
        await interaction.followup.send(embed=interactive_quiz_embed(quiz), view=view, ephemeral=True)

        await self.notify_audit(f"{interaction.user.name} started a quiz!")

    async def _handle_answer(self, interaction: discord.Interaction, option: Optional[str]) -> None:
        if option is None:
            raise QuizError("answer button without an option")
        verdict = await self.session.submit_answer(str(interaction.user.id), option)
        await interaction.response.send_message(embed=verdict_embed(verdict), ephemeral=True)

    async def _handle_leaderboard(self, interaction: discord.Interaction, option: Optional[str]) -> None:
        records = await self.session.store.top_scores(LEADERBOARD_SIZE)
        await interaction.response.send_message(embed=leaderboard_embed(records), ephemeral=True)

    @commands.Cog.listener()
    async def on_quiz_answer(self, interaction: discord.Interaction, option: Optional[str]) -> None:
        """Raised by every AnswerButton press, live view or not"""
        await self.dispatch(interaction, QuizAction.ANSWER, option)

    async def notify_audit(self, message: str) -> None:
        """Post to the audit channel; never fails the caller"""
        if not self.log_channel_id:
            return
        channel = self.bot.get_channel(self.log_channel_id)
        if channel is None:
            logger.warning(f"Audit channel {self.log_channel_id} not found")
            return
        try:
            await channel.send(message)
        except Exception as e:
            logger.warning(f"Failed to send audit notification: {e}")

    # ---- slash commands ----
    @app_commands.command(name="start_quiz", description="Starts a new quiz session with random questions.")
    async def start_quiz(self, interaction: discord.Interaction):
        await self.dispatch(interaction, QuizAction.START_QUIZ)

    @app_commands.command(name="leaderboard", description="Displays the top scorers in the server.")
    async def leaderboard(self, interaction: discord.Interaction):
        await self.dispatch(interaction, QuizAction.LEADERBOARD)


def create_quiz_cog(bot: commands.Bot, config, store: ScoreStore) -> QuizCog:
    """Wire the question source, ledger, session and broadcaster from config"""
    session = QuizSession(OpenTDBProvider(), AnswerLedger(), store)

    broadcaster = None
    quiz_channel_id = getattr(config, 'QUIZ_CHANNEL_ID', None)
    if quiz_channel_id:
        broadcaster = ScheduledBroadcaster(
            bot,
            session,
            quiz_channel_id,
            interval_seconds=getattr(config, 'QUIZ_INTERVAL_SECONDS', 300),
        )
    else:
        logger.warning("No quiz channel configured, scheduled quizzes disabled")

    return QuizCog(
        bot,
        session,
        allowed_channel_ids=getattr(config, 'ALLOWED_CHANNEL_IDS', []),
        log_channel_id=getattr(config, 'LOG_CHANNEL_ID', None),
        broadcaster=broadcaster,
    )
