# quiz/views.py - Embeds and button views for quiz messages

import logging
import re
from typing import List, Optional

import discord

from quiz.models import AnnouncedQuiz, PresentedQuiz, UserScoreRecord, Verdict
from quiz.session import option_label

logger = logging.getLogger(__name__)

QUIZ_COLOR = 0x0099FF
CORRECT_COLOR = 0x00FF00
INCORRECT_COLOR = 0xFF0000

ANSWER_CUSTOM_ID = re.compile(r"quiz_answer:(?P<index>[0-9]+)")

# Client event the answer buttons raise; QuizCog listens for it
ANSWER_EVENT = "quiz_answer"


def quiz_embed(question: str, footer: str) -> discord.Embed:
    embed = discord.Embed(
        title="🎉 Quiz Time! 🎉",
        description=f"**Question:**\n{question}",
        color=QUIZ_COLOR,
    )
    embed.set_footer(text=footer)
    return embed


def interactive_quiz_embed(quiz: PresentedQuiz) -> discord.Embed:
    return quiz_embed(quiz.question, "Choose an option below:")


def announced_quiz_embed(quiz: AnnouncedQuiz) -> discord.Embed:
    return quiz_embed(quiz.question, "Correct answer is shown below:")


def verdict_embed(verdict: Verdict) -> discord.Embed:
    if verdict.is_correct:
        return discord.Embed(
            title="Correct!",
            description="✅ You got it right!",
            color=CORRECT_COLOR,
        )
    return discord.Embed(
        title="Incorrect!",
        description=f"❌ The correct answer was: **{verdict.correct_answer}**",
        color=INCORRECT_COLOR,
    )


def format_leaderboard(records: List[UserScoreRecord]) -> str:
    lines = [
        f"{rank}. <@{record.user_id}> - {record.score} points "
        f"({record.correct_count}/{record.total_attempts} correct)"
        for rank, record in enumerate(records, start=1)
    ]
    return "\n".join(lines) or "No scores yet."


def leaderboard_embed(records: List[UserScoreRecord]) -> discord.Embed:
    return discord.Embed(
        title="🏆 Leaderboard 🏆",
        description=format_leaderboard(records),
        color=QUIZ_COLOR,
    )


class AnswerButton(discord.ui.DynamicItem[discord.ui.Button], template=ANSWER_CUSTOM_ID):
    """
    One selectable option.

    Registered with ``bot.add_dynamic_items`` so a press is routed here even
    when no view is alive, for example after a restart. The option text is
    read back from the pressed button's label.
    """

    def __init__(self, option: Optional[str], index: int):
        super().__init__(discord.ui.Button(
            label=option_label(option) if option else None,
            style=discord.ButtonStyle.primary,
            custom_id=f"quiz_answer:{index}",
        ))
        self.option = option
        self.index = index

    @classmethod
    async def from_custom_id(cls, interaction: discord.Interaction, item: discord.ui.Item,
                             match: re.Match) -> "AnswerButton":
        return cls(getattr(item, "label", None), int(match["index"]))

    async def callback(self, interaction: discord.Interaction):
        interaction.client.dispatch(ANSWER_EVENT, interaction, self.option)


class QuizAnswerView(discord.ui.View):
    """
    Carries the answer buttons of one interactive quiz.

    The view is finished as soon as it is built, so discord.py never stores
    it; presses are handled by the ``AnswerButton`` dynamic item instead.
    """

    def __init__(self, quiz: PresentedQuiz):
        super().__init__(timeout=None)
        for index, option in enumerate(quiz.options):
            self.add_item(AnswerButton(option, index))
        self.stop()


class RevealedQuizView(discord.ui.View):
    """Every option shown and disabled, the correct one in green"""

    def __init__(self, quiz: AnnouncedQuiz):
        super().__init__(timeout=None)
        for index, option in enumerate(quiz.options):
            is_correct = index == quiz.correct_index
            self.add_item(discord.ui.Button(
                label=option_label(option),
                style=discord.ButtonStyle.success if is_correct else discord.ButtonStyle.danger,
                custom_id=f"quiz_reveal:{index}",
                disabled=True,
            ))
        # Nothing here can be pressed, keep it out of the view store
        self.stop()
