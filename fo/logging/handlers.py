"""
Custom Log Handlers for fo.

JSONL rotating file handler for the run log, and the rich console handler
used for --debug diagnostics on stderr.
"""

import json
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


class JSONLRotatingHandler(RotatingFileHandler):
    """Size-rotated runs.jsonl writer: one JSON object per record, one record per line."""

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = 10_000_000,  # 10MB
        backup_count: int = 5,
    ):
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            str(filepath),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )

    def emit(self, record: logging.LogRecord) -> None:
        """
        Append one record to the run log.

        Messages that are already JSON (entries use .to_json()) are written
        as-is; plain text is wrapped in a JSON object.
        """
        try:
            msg = self.format(record)

            try:
                data = json.loads(msg)
            except json.JSONDecodeError:
                data = {
                    "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                    "level": record.levelname,
                    "message": msg,
                    "logger": record.name,
                }

            if self.shouldRollover(record):
                self.doRollover()
            if self.stream is None:
                self.stream = self._open()
            self.stream.write(json.dumps(data, default=str) + "\n")
            self.flush()

        except Exception:
            self.handleError(record)


class PassthroughFormatter(logging.Formatter):
    """Formatter that returns the message as-is, since entries are already JSON."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_jsonl_logger(
    name: str,
    filepath: Path | None,
    level: str = "INFO",
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Build the logger behind run_logger.

    Args:
        name: Logger name
        filepath: Path to log file; None gives a logger that discards records
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        max_bytes: Max file size before rotation
        backup_count: Number of backup files

    Returns:
        Logger with exactly one handler and propagation off
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()

    if filepath is None:
        logger.addHandler(logging.NullHandler())
    else:
        handler = JSONLRotatingHandler(
            filepath,
            max_bytes=max_bytes,
            backup_count=backup_count,
        )
        handler.setFormatter(PassthroughFormatter())
        logger.addHandler(handler)

    # Run records never reach the console
    logger.propagate = False

    return logger


def setup_console_logging(level: str | int = "WARNING", console: Console | None = None) -> logging.Handler:
    """
    Attach a rich handler on stderr to the "fo" logger.

    Diagnostics go to stderr so they never mix with the wrapped
    command's report on stdout.

    Returns:
        The installed handler
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("fo")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
