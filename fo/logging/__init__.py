"""
fo Logging System.

Provides:
- A structured JSONL run log, one entry per wrapped command
- Rich console diagnostics on stderr for --debug

Usage:
    from fo.logging import RunLogEntry, now_iso, run_logger

    entry = RunLogEntry(timestamp=now_iso(), run_id=str(uuid.uuid4()), command="make")
    run_logger.info(entry.to_json())

The run log is written to $FO_LOG_DIR/runs.jsonl and is disabled when
FO_LOG_DIR is unset.
"""

import threading
from typing import Any

from .config import LogConfig, get_config, set_config
from .entries import RunLogEntry, now_iso
from .handlers import create_jsonl_logger, setup_console_logging

# Lazy-initialized so no file is created before the first run is logged
_run_logger: Any = None
_init_lock = threading.Lock()


def _ensure_logger() -> Any:
    """Initialize the run logger on first use."""
    global _run_logger

    if _run_logger is not None:
        return _run_logger

    with _init_lock:
        if _run_logger is None:
            config = get_config()
            _run_logger = create_jsonl_logger(
                "fo.runs",
                config.run_log_path,
                level=config.run_level,
                max_bytes=config.max_file_size_bytes,
                backup_count=config.backup_count,
            )
    return _run_logger


def reset_run_logger() -> None:
    """Drop the cached run logger so the next use re-reads the log config."""
    global _run_logger
    with _init_lock:
        _run_logger = None


class _LazyLogger:
    """Lazy wrapper that initializes the actual logger on first use."""

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        _ensure_logger().info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        _ensure_logger().warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        _ensure_logger().error(msg, *args, **kwargs)


# Public logger instance
run_logger = _LazyLogger()


__all__ = [
    # Logger
    "run_logger",
    "reset_run_logger",
    # Log entries
    "RunLogEntry",
    # Utilities
    "now_iso",
    "create_jsonl_logger",
    "setup_console_logging",
    # Config
    "LogConfig",
    "get_config",
    "set_config",
]
