"""
Logging setup for helperkit, plus a handler that writes one log file per day:

    <log_dir>/2024-05-01.log
    [2024-05-01 13:37:00] info: User logged in {"user_id": 123}
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

LOGGER_NAME = "helperkit"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DailyFormatter(logging.Formatter):
    """Formats records as `[timestamp] level: message {context}`."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        context = getattr(record, "context", None) or {}
        line = f"[{timestamp}] {record.levelname.lower()}: {record.getMessage()} {json.dumps(context, default=str)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class DailyFileHandler(logging.Handler):
    """Appends records to `<log_dir>/<YYYY-MM-DD>.log`, picking the file per record."""

    def __init__(self, log_dir: Path, level: int = logging.NOTSET):
        super().__init__(level)
        self.log_dir = log_dir
        self.setFormatter(DailyFormatter())

    def path_for(self, record: logging.LogRecord) -> Path:
        day = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d")
        return self.log_dir / f"{day}.log"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(self.path_for(record), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:  # pylint: disable=broad-except
            self.handleError(record)


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> logging.Logger:
    """Set up the helperkit logger, with a daily file handler when log_dir is given."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logging.getLogger().hasHandlers():
        # don't override uvicorn logging if it's already set up
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=CONSOLE_FORMAT,
        )
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if log_dir is not None:
        # replace a previous daily handler rather than stacking them
        for handler in list(logger.handlers):
            if isinstance(handler, DailyFileHandler):
                logger.removeHandler(handler)
        logger.addHandler(DailyFileHandler(log_dir))
    return logger


def log(logger: logging.Logger, level: str | int, message: str, context: dict[str, Any] | None = None) -> None:
    """Log a message at a named level ('info', 'error', ...) with a context mapping."""
    if isinstance(level, str):
        levelno = logging.getLevelName(level.upper())
        if not isinstance(levelno, int):
            raise ValueError(f"Unknown log level: {level}")
    else:
        levelno = level
    logger.log(levelno, message, extra={"context": context or {}})


def info(logger: logging.Logger, message: str, context: dict[str, Any] | None = None) -> None:
    log(logger, logging.INFO, message, context)
