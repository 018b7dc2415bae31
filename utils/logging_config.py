"""
logging configuration module
sets up the engine logger
console output plus rotating log files
"""

import logging
import logging.handlers
from datetime import datetime
from typing import Optional

import config


# ============================================================================
#                           LOGGING SETUP
# ============================================================================

def setup_logging(level: Optional[str] = None, log_to_file: bool = True) -> logging.Logger:
    # configure engine logging
    log_config = config.LOGGING
    log_level = level or log_config["level"]

    logger = logging.getLogger(config.LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level))

    # clear existing handlers
    logger.handlers.clear()

    # console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    # file handler
    if log_to_file:
        config.ensure_directories()
        log_filename = log_config["file_format"].format(
            date=datetime.now().strftime("%Y%m%d")
        )
        file_handler = logging.handlers.RotatingFileHandler(
            config.LOG_DIR / log_filename,
            maxBytes=log_config["max_file_size_mb"] * 1024 * 1024,
            backupCount=log_config["backup_count"]
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_config["format"]))
        logger.addHandler(file_handler)

    logger.info(f"{config.APP_NAME} {config.APP_VERSION} logging initialized - level: {log_level}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    # get engine logger or a named child of it
    if not name:
        return logging.getLogger(config.LOGGER_NAME)
    return logging.getLogger(f"{config.LOGGER_NAME}.{name}")


class LogCapture:
    # context manager to capture log messages

    def __init__(self, logger_name: Optional[str] = None, level: int = logging.DEBUG):
        # initialize capture
        self.logger = get_logger(logger_name)
        self.level = level
        self.messages = []
        self.handler = None
        self._previous_level = None

    def __enter__(self):
        # start capturing
        self.handler = LogCaptureHandler(self.messages)
        self.handler.setLevel(self.level)
        self._previous_level = self.logger.level
        if self.logger.getEffectiveLevel() > self.level:
            self.logger.setLevel(self.level)
        self.logger.addHandler(self.handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # stop capturing
        if self.handler:
            self.logger.removeHandler(self.handler)
            self.logger.setLevel(self._previous_level)
        return False

    def get_messages(self, level: Optional[str] = None) -> list:
        # return captured messages optionally filtered by level name
        if level is None:
            return self.messages.copy()
        return [m for m in self.messages if m["level"] == level]


class LogCaptureHandler(logging.Handler):
    # handler that captures messages to list

    def __init__(self, message_list: list):
        # initialize handler
        super().__init__()
        self.messages = message_list

    def emit(self, record):
        # capture log record
        self.messages.append({
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": datetime.fromtimestamp(record.created)
        })
