# config.py - Environment-driven settings for the quiz bot

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _id_list(raw: str):
    """Parse a comma separated list of Discord snowflakes"""
    return [int(part) for part in raw.replace(" ", "").split(",") if part]


def _optional_int(raw: str):
    return int(raw) if raw and raw.strip() else None


BOT_VERSION = "1.0.0"
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
CLIENT_ID = _optional_int(os.getenv("CLIENT_ID", ""))

# Guild-scoped command sync (fast); global sync when empty
GUILD_IDS_TEST = _id_list(os.getenv("GUILD_IDS", os.getenv("GUILD_ID", "")))

# Channels where quiz commands and buttons are accepted
ALLOWED_CHANNEL_IDS = _id_list(os.getenv("ALLOWED_CHANNEL_IDS", os.getenv("CHANNEL_ID", "")))

# Scheduled questions go to the first allowed channel unless overridden
QUIZ_CHANNEL_ID = _optional_int(os.getenv("QUIZ_CHANNEL_ID", "")) or (
    ALLOWED_CHANNEL_IDS[0] if ALLOWED_CHANNEL_IDS else None
)
LOG_CHANNEL_ID = _optional_int(os.getenv("LOG_CHANNEL_ID", ""))
QUIZ_INTERVAL_SECONDS = int(os.getenv("QUIZ_INTERVAL_SECONDS", "300"))

# Storage
DATABASE_PATH = os.getenv("DATABASE_PATH", "quiz_bot.db")

# Logging
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
LOGS_DIR = os.getenv("LOGS_DIR", "logs")
LOG_FILE = os.getenv("LOG_FILE", "bot.log")

# Startup
MAX_STARTUP_RETRIES = int(os.getenv("MAX_STARTUP_RETRIES", "3"))
STARTUP_RETRY_DELAY = int(os.getenv("STARTUP_RETRY_DELAY", "5"))
