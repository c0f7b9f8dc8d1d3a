import logging
import os
import sys

from loguru import logger

__all__ = ("InterceptHandler", "create_logger")


class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(logger_name=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
JSON_LOGS = os.environ.get("JSON_LOGS", "0") == "1"

_FORMAT = (
    "<green>{time:YYMMDD HH:mm:ss}</green> | <level>{level: <8}</level> |"
    " {extra[logger_name]} | <level>{message}</level>"
)


def create_logger(level: str = LOG_LEVEL, json_logs: bool = JSON_LOGS):
    """
    Sends session store and pymongo logging through loguru. Returns the
    ``mongosession`` stdlib logger.
    """
    level = level.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"unknown log level: {level}")
    logger.remove()
    logger.configure(extra={"logger_name": "mongosession"})
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_FORMAT)

    # pymongo is chatty below WARNING
    pymongo_level = max(logging.getLevelName(level), logging.WARNING)
    for logger_name, logger_level in (
        ("mongosession", level),
        ("pymongo", pymongo_level),
    ):
        std_logger = logging.getLogger(logger_name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(logger_level)
    return logging.getLogger("mongosession")
