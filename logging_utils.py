# logging_utils.py
"""
Logging setup for the quiz bot: rotating file log plus console output
"""

import logging
import os
import platform
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


class LoggingConfig:
    """Logging settings read from the config module"""

    def __init__(self, config_module=None):
        self.config = config_module

        self.log_level = self._get_config_value('LOG_LEVEL', logging.INFO)
        self.max_bytes = self._get_config_value('MAX_LOG_SIZE', 5*1024*1024)  # 5MB
        self.backup_count = self._get_config_value('LOG_BACKUP_COUNT', 3)
        self.logs_dir = self._get_config_value('LOGS_DIR', 'logs')
        self.log_file = self._get_config_value('LOG_FILE', 'bot.log')

        self.enable_file_logging = self._get_config_value('ENABLE_FILE_LOGGING', True)
        self.enable_console_logging = self._get_config_value('ENABLE_CONSOLE_LOGGING', True)

        # Keep discord.py and aiohttp quiet unless something goes wrong
        self.third_party_levels = {
            'discord': self._get_config_value('DISCORD_LOG_LEVEL', logging.WARNING),
            'discord.http': self._get_config_value('DISCORD_HTTP_LOG_LEVEL', logging.WARNING),
            'aiohttp': self._get_config_value('AIOHTTP_LOG_LEVEL', logging.WARNING),
            'aiosqlite': self._get_config_value('AIOSQLITE_LOG_LEVEL', logging.WARNING),
        }

    def _get_config_value(self, key: str, default):
        """Get configuration value with fallback to default"""
        if self.config and hasattr(self.config, key):
            return getattr(self.config, key)
        return default


class QuizBotLogger:
    """Builds handlers once and wires them onto the root logger"""

    def __init__(self, config_module=None):
        self.config = LoggingConfig(config_module)
        self.logger: Optional[logging.Logger] = None

    def setup_logging(self) -> logging.Logger:
        detailed = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        simple = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

        handlers = []
        if self.config.enable_file_logging:
            file_handler = self._create_file_handler(detailed)
            if file_handler:
                handlers.append(file_handler)

        if self.config.enable_console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(simple)
            console_handler.setLevel(self.config.log_level)
            handlers.append(console_handler)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.handlers.clear()
        for handler in handlers:
            root_logger.addHandler(handler)

        for logger_name, level in self.config.third_party_levels.items():
            logging.getLogger(logger_name).setLevel(level)

        self.logger = logging.getLogger("quiz_bot")
        return self.logger

    def _create_file_handler(self, formatter) -> Optional[RotatingFileHandler]:
        """Create file handler with rotation"""
        try:
            os.makedirs(self.config.logs_dir, exist_ok=True)
            log_path = os.path.join(self.config.logs_dir, self.config.log_file)

            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=self.config.max_bytes,
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            return file_handler

        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}")
            return None


def setup_logging(config_module=None) -> logging.Logger:
    """Setup logging and return main logger"""
    return QuizBotLogger(config_module).setup_logging()


def log_system_info(logger: logging.Logger, additional_info: dict = None):
    """Log interpreter and platform details at startup"""
    logger.info("=" * 50)
    logger.info("SYSTEM INFORMATION")
    logger.info("=" * 50)
    logger.info(f"Python Version: {sys.version}")
    logger.info(f"Platform: {platform.platform()}")

    if additional_info:
        logger.info("-" * 30)
        for key, value in additional_info.items():
            logger.info(f"{key}: {value}")

    logger.info("=" * 50)
