"""
Log Entry Data Structures for fo.

One RunLogEntry is written per wrapped command to the JSONL run log.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


def now_iso() -> str:
    """Current local time as ISO 8601."""
    return datetime.now().isoformat()


@dataclass
class RunLogEntry:
    """Log entry for one wrapped command execution."""

    # Identity
    timestamp: str  # ISO 8601
    run_id: str  # UUID

    # Command
    command: str
    args: list[str] = field(default_factory=list)
    label: str = ""
    intent: str = ""
    cwd: str = ""
    stream_mode: bool = False

    # Outcome
    exit_code: int | None = None
    status: str = ""
    duration_ms: int = 0

    # Output shape
    line_count: int = 0
    error_count: int = 0
    warning_count: int = 0
    cognitive_load: str = ""
    complexity: int = 0
    truncated: bool = False

    # Error (if the command could not be started)
    error: str | None = None
    error_type: str | None = None

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(asdict(self), default=str)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunLogEntry":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
