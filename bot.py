import asyncio
import signal
import sys
import traceback
from typing import Optional

import discord

# Local imports
import config
from bot_client import QuizBot
from logging_utils import setup_logging, log_system_info
from quiz import SqliteScoreStore, create_quiz_cog


class BotManager:
    """Manages bot lifecycle: store, cog, command sync and startup retries"""

    def __init__(self):
        self.logger = setup_logging(config)
        self.bot: Optional[QuizBot] = None
        self.store: Optional[SqliteScoreStore] = None
        self.setup_complete = False
        self.commands_synced = False

        log_system_info(self.logger, {
            'Bot Version': getattr(config, 'BOT_VERSION', '1.0.0'),
            'Environment': 'Production' if not getattr(config, 'DEBUG', False) else 'Development',
            'Database': getattr(config, 'DATABASE_PATH', 'quiz_bot.db'),
        })

    async def initialize_bot(self) -> bool:
        """Open the score store, create the bot and load the quiz cog"""
        try:
            self.store = SqliteScoreStore(getattr(config, 'DATABASE_PATH', 'quiz_bot.db'))
            await self.store.connect()
        except Exception as e:
            self.logger.error(f"❌ Could not open score database: {e}")
            return False

        try:
            self.bot = QuizBot(config)
            self.bot.add_shutdown_handler(self.store.close)

            await self.bot.add_cog(create_quiz_cog(self.bot, config, self.store))
            self.logger.info("✅ Quiz cog loaded")

            registered_commands = [cmd.name for cmd in self.bot.tree.get_commands()]
            self.logger.info(f"📋 Registered commands: {registered_commands}")

            self._setup_signal_handlers()

            self.setup_complete = True
            self.logger.info("🚀 Bot initialization complete")
            return True

        except Exception as e:
            self.logger.error(f"❌ Bot initialization failed: {e}")
            traceback.print_exc()
            return False

    async def sync_commands(self):
        """Sync slash commands with Discord"""
        try:
            guild_ids = getattr(config, 'GUILD_IDS_TEST', [])
            if guild_ids:
                # Guild-specific sync (instant)
                self.logger.info("🔄 Syncing commands to guilds...")

                for guild_id in guild_ids:
                    guild = discord.Object(id=guild_id)
                    self.bot.tree.copy_global_to(guild=guild)
                    synced = await self.bot.tree.sync(guild=guild)

                    command_names = [cmd.name for cmd in synced]
                    self.logger.info(f"✅ Guild {guild_id} synced {len(synced)} commands: {command_names}")

            else:
                # Global sync (takes up to 1 hour to update)
                self.logger.info("🔄 Syncing commands globally...")
                synced = await self.bot.tree.sync()

                command_names = [cmd.name for cmd in synced]
                self.logger.info(f"✅ Globally synced {len(synced)} commands: {command_names}")

            self.commands_synced = True

        except discord.HTTPException as e:
            self.logger.error(f"❌ Failed to sync commands: {e}")

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self.logger.info(f"📡 Received signal {signum}, initiating shutdown...")

            async def shutdown():
                if self.bot:
                    await self.bot.close()

            try:
                loop = asyncio.get_running_loop()
                loop.create_task(shutdown())
            except RuntimeError:
                # No event loop running, exit immediately
                sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start_bot(self) -> bool:
        """Start the bot with retry logic"""
        if not self.setup_complete:
            self.logger.error("❌ Bot not initialized properly")
            return False

        if not getattr(config, 'DISCORD_TOKEN', None):
            self.logger.error("❌ DISCORD_TOKEN not found in config!")
            return False

        max_retries = getattr(config, 'MAX_STARTUP_RETRIES', 3)
        retry_delay = getattr(config, 'STARTUP_RETRY_DELAY', 5)

        @self.bot.event
        async def on_ready():
            await QuizBot.on_ready(self.bot)

            # on_ready fires again after every reconnect
            if not self.commands_synced:
                await self.sync_commands()

            self.logger.info("🎉 Bot is ready and operational!")

        for attempt in range(max_retries):
            try:
                self.logger.info(f"🚀 Starting bot (attempt {attempt + 1}/{max_retries})...")
                await self.bot.start(config.DISCORD_TOKEN)
                return True

            except discord.LoginFailure as e:
                self.logger.error(f"❌ Invalid Discord token: {e}")
                return False  # Don't retry on auth failures

            except Exception as e:
                self.logger.error(f"❌ Bot startup failed (attempt {attempt + 1}/{max_retries}): {e}")

                if attempt < max_retries - 1:
                    self.logger.info(f"⏳ Retrying in {retry_delay} seconds...")
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2  # Exponential backoff
                else:
                    self.logger.error("❌ Max retries reached. Bot startup failed.")
                    return False

        return False


async def main():
    """Main function - entry point"""
    bot_manager = BotManager()

    try:
        if not await bot_manager.initialize_bot():
            bot_manager.logger.error("❌ Failed to initialize bot. Exiting.")
            return

        if not await bot_manager.start_bot():
            bot_manager.logger.error("❌ Failed to start bot. Exiting.")
            return

    except KeyboardInterrupt:
        bot_manager.logger.info("⌨️ Received keyboard interrupt")
    finally:
        if bot_manager.bot and not bot_manager.bot.is_closed():
            await bot_manager.bot.close()
        elif bot_manager.store:
            await bot_manager.store.close()

        bot_manager.logger.info("🔚 Bot process ended")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot interrupted by user")
