"""
Project logger: console plus rotating JSON file.

Usage:
    from marketbook.core.logger import configure, get_logger, LoggerConfig

    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/marketbook"))
    configure()  # or from LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, ...

    logger = get_logger(__name__)
    logger.info("Slot staged", extra={"order_id": 7, "resource_id": 3})
"""
from marketbook.core.logger.config import LoggerConfig
from marketbook.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from marketbook.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
