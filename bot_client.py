"""
Bot subclass with presence, startup logging and ordered shutdown handlers
"""

import asyncio
import logging
import time

import discord
from discord.ext import commands


class QuizBot(commands.Bot):
    """commands.Bot that runs registered cleanup handlers on close"""

    def __init__(self, config_module=None):
        self.config = config_module
        self.logger = logging.getLogger(__name__)

        # Slash commands and buttons only; no message content needed
        intents = discord.Intents.default()

        super().__init__(
            command_prefix="!",
            help_command=None,
            intents=intents,
            chunk_guilds_at_startup=False,
            application_id=getattr(config_module, 'CLIENT_ID', None),
        )

        self.startup_time = None
        self.shutdown_handlers = []

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.startup_time = time.time()

    async def on_ready(self):
        startup_duration = time.time() - (self.startup_time or time.time())

        self.logger.info(f"✅ Logged in as {self.user} (ID: {self.user.id})")
        self.logger.info(f"🏁 Startup completed in {startup_duration:.2f} seconds")
        self.logger.info(f"📊 Connected to {len(self.guilds)} guild(s)")

        await self.change_presence(
            activity=discord.Game(name="with quizzes"),
            status=discord.Status.online,
        )

    async def close(self):
        """Run shutdown handlers, then disconnect"""
        self.logger.info("🔄 Initiating graceful shutdown...")

        for handler in self.shutdown_handlers:
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler()
                else:
                    handler()
            except Exception as e:
                self.logger.error(f"Error in shutdown handler: {e}")
        self.shutdown_handlers.clear()

        await super().close()
        self.logger.info("✅ Shutdown complete")

    def add_shutdown_handler(self, handler):
        """Add a function to be called during shutdown"""
        self.shutdown_handlers.append(handler)
