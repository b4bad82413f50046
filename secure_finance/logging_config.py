import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "secure_finance"
AUTH_LOGGER_NAME = "secure_finance.auth"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers of the libraries this service runs on
THIRD_PARTY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "alembic",
    "uvicorn.access",
    "uvicorn.error",
    "faker",
)


class OpaqueBytesFilter(logging.Filter):
    """
    Replace bytes arguments of a log record with their length.

    User-owned fields are client-side ciphertext and are never written out.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(
                f"<{len(arg)} opaque bytes>" if isinstance(arg, (bytes, bytearray, memoryview)) else arg
                for arg in record.args
            )
        return True


def _level(value: str, default: int) -> int:
    return getattr(logging, value.upper(), default)


def _rotating_handler(log_file: str, level: int, formatter: logging.Formatter,
                      max_file_size: int, backup_count: int) -> logging.Handler:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_file_size,
        backupCount=backup_count
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(OpaqueBytesFilter())
    return handler


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    auth_log_level: Optional[str] = None,
    auth_log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Set up logging for the Secure Finance Manager API.

    Application records go to stdout and, optionally, a rotating file.
    Authentication events (rejected logins, failed credential checks,
    refused account access) go through the ``secure_finance.auth`` child
    logger. It has its own level, and can be sent to a separate audit file
    as well.

    Args:
        app_log_level: Level for application logs (env APP_LOG_LEVEL, default INFO)
        third_party_log_level: Level for library loggers (env THIRD_PARTY_LOG_LEVEL, default WARNING)
        log_file: Optional application log file (env LOG_FILE)
        auth_log_level: Level for authentication events (env AUTH_LOG_LEVEL, default INFO)
        auth_log_file: Optional audit file for authentication events (env AUTH_LOG_FILE)
        max_file_size: Maximum size of a log file before rotation (bytes)
        backup_count: Number of rotated files to keep

    Returns:
        The application logger
    """
    app_log_level = app_log_level or os.getenv("APP_LOG_LEVEL", "INFO")
    third_party_log_level = third_party_log_level or os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING")
    log_file = log_file or os.getenv("LOG_FILE")
    auth_log_level = auth_log_level or os.getenv("AUTH_LOG_LEVEL", "INFO")
    auth_log_file = auth_log_file or os.getenv("AUTH_LOG_FILE")

    app_level = _level(app_log_level, logging.INFO)
    auth_level = _level(auth_log_level, logging.INFO)
    third_party_level = _level(third_party_log_level, logging.WARNING)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)
    app_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    # auth records may be more verbose than the app level allows
    console_handler.setLevel(min(app_level, auth_level))
    console_handler.setFormatter(formatter)
    console_handler.addFilter(OpaqueBytesFilter())
    app_logger.addHandler(console_handler)

    if log_file:
        app_logger.addHandler(
            _rotating_handler(log_file, min(app_level, auth_level), formatter, max_file_size, backup_count)
        )

    auth_logger = logging.getLogger(AUTH_LOGGER_NAME)
    auth_logger.setLevel(auth_level)
    auth_logger.handlers.clear()
    if auth_log_file:
        auth_logger.addHandler(
            _rotating_handler(auth_log_file, auth_level, formatter, max_file_size, backup_count)
        )
    auth_logger.propagate = True

    for logger_name in THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(third_party_level)

    app_logger.propagate = False

    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger inside the application tree.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def get_auth_logger() -> logging.Logger:
    """Logger for authentication and credential-validation events"""
    return logging.getLogger(AUTH_LOGGER_NAME)
