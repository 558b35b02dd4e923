"""
Logging Configuration for fo.

The JSONL run log is off unless FO_LOG_DIR is set; fo is usually run in
build scripts and CI where writing files as a side effect is unwelcome.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class LogConfig:
    """Configuration for the fo logging system."""

    # Paths (None disables the run log)
    log_dir: Path | None = None

    # File settings
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    # Log levels: DEBUG, INFO, WARNING, ERROR
    run_level: str = "INFO"
    console_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Load config from environment variables with defaults."""
        config = cls()

        if level := os.environ.get("FO_LOG_LEVEL"):
            config.run_level = level
            config.console_level = level

        if log_dir := os.environ.get("FO_LOG_DIR"):
            config.log_dir = Path(log_dir).expanduser()

        # Max file size in MB
        if max_size := os.environ.get("FO_LOG_MAX_SIZE_MB"):
            try:
                config.max_file_size_bytes = int(max_size) * 1024 * 1024
            except ValueError:
                pass

        return config

    @property
    def enabled(self) -> bool:
        return self.log_dir is not None

    def ensure_log_dir(self) -> None:
        """Create log directory if logging to files is enabled."""
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def run_log_path(self) -> Path | None:
        """Path to the per-command run log."""
        if self.log_dir is None:
            return None
        return self.log_dir / "runs.jsonl"


_config: LogConfig | None = None


def get_config() -> LogConfig:
    """Get the global log config, initializing from env if needed."""
    global _config
    if _config is None:
        _config = LogConfig.from_env()
        _config.ensure_log_dir()
    return _config


def set_config(config: LogConfig) -> None:
    """Set a custom log config (useful for testing)."""
    global _config
    _config = config
    _config.ensure_log_dir()
