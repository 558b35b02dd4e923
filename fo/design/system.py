"""
fo - Task Model

A Task is one wrapped command execution: its identity, timing, the
classified output it has produced so far, and a derived context used to
decide how emphatic the final report should be.

State transitions:
RUNNING -> SUCCESS | WARNING | ERROR (via Task.complete, exactly once)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class LineType(str, Enum):
    """Semantic category of one line of command output."""

    DETAIL = "detail"
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    PROGRESS = "progress"
    SUMMARY = "summary"


class TaskStatus(str, Enum):
    """Lifecycle status of a Task."""

    RUNNING = "running"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class CognitiveLoad(str, Enum):
    """How much visual emphasis the rendered output should carry."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Messages fo itself records into a task; they never count as command issues.
INTERNAL_PREFIXES = ("[fo] ", "Error starting command")


@dataclass
class LineContext:
    """Per-line annotation produced by the classifier."""

    cognitive_load: CognitiveLoad = CognitiveLoad.MEDIUM
    importance: int = 2  # 1-5
    is_highlighted: bool = False
    is_summary: bool = False


@dataclass
class TaskContext:
    """Derived view of a Task, recomputed by Task.update_context."""

    cognitive_load: CognitiveLoad = CognitiveLoad.MEDIUM
    complexity: int = 2  # 1-5
    is_detail_view: bool = False


@dataclass(frozen=True)
class OutputLine:
    """One classified line of command output. Immutable once created."""

    content: str
    type: LineType
    timestamp: datetime = field(default_factory=datetime.now)
    indentation: int = 0
    context: LineContext = field(default_factory=LineContext)

    @property
    def is_internal(self) -> bool:
        """True for messages fo recorded about the run rather than command output."""
        return self.content.startswith(INTERNAL_PREFIXES)


def complexity_for(line_count: int) -> int:
    """Map an output line count onto the 2-5 complexity scale."""
    if line_count > 100:
        return 5
    if line_count > 50:
        return 4
    if line_count > 20:
        return 3
    return 2


def cognitive_load_for(errors: int, warnings: int, complexity: int) -> CognitiveLoad:
    """Derive cognitive load from issue counts and complexity."""
    if errors > 5 or complexity >= 4:
        return CognitiveLoad.HIGH
    if errors > 0 or warnings > 2 or complexity == 3:
        return CognitiveLoad.MEDIUM
    return CognitiveLoad.LOW


@dataclass
class Task:
    """
    A single wrapped command execution.

    output_lines is appended to only by the ingestion path while the task
    is running. Grouping and final rendering read it after complete() has
    returned, so no locking is needed around it.
    """

    label: str
    intent: str
    command: str
    args: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None
    exit_code: int | None = None
    status: TaskStatus = TaskStatus.RUNNING
    output_lines: list[OutputLine] = field(default_factory=list)
    context: TaskContext = field(default_factory=TaskContext)

    @property
    def is_running(self) -> bool:
        return self.status == TaskStatus.RUNNING

    @property
    def is_complete(self) -> bool:
        return self.status != TaskStatus.RUNNING

    @property
    def duration(self) -> float:
        """Seconds elapsed: final duration once completed, time so far while running."""
        end = self.end_time or datetime.now()
        return max((end - self.start_time).total_seconds(), 0.0)

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args])

    def add_output_line(
        self,
        content: str,
        line_type: LineType,
        context: LineContext | None = None,
        indentation: int = 0,
        timestamp: datetime | None = None,
    ) -> OutputLine:
        """Append one classified line. Called only by the ingestion path."""
        line = OutputLine(
            content=content,
            type=line_type,
            timestamp=timestamp or datetime.now(),
            indentation=indentation,
            context=context or LineContext(),
        )
        self.output_lines.append(line)
        return line

    def has_type(self, line_type: LineType) -> bool:
        return any(line.type == line_type for line in self.output_lines)

    def issue_counts(self) -> tuple[int, int]:
        """(errors, warnings) produced by the command, excluding fo's own messages."""
        errors = warnings = 0
        for line in self.output_lines:
            if line.is_internal:
                continue
            if line.type == LineType.ERROR:
                errors += 1
            elif line.type == LineType.WARNING:
                warnings += 1
        return errors, warnings

    def complete(self, exit_code: int) -> TaskStatus:
        """
        Mark the task finished and compute its final status.

        Must be called exactly once, after the ingestion path has stopped
        appending lines. A second call, or a call while lines are still
        being appended, leaves the final state undefined.

        Args:
            exit_code: The command's exit code

        Returns:
            The final TaskStatus
        """
        self.end_time = datetime.now()
        self.exit_code = exit_code

        if exit_code != 0:
            self.status = TaskStatus.ERROR
        elif self.has_type(LineType.ERROR):
            self.status = TaskStatus.ERROR
        elif self.has_type(LineType.WARNING):
            self.status = TaskStatus.WARNING
        else:
            self.status = TaskStatus.SUCCESS

        return self.status

    def update_context(
        self,
        auto_detect: bool = True,
        default_load: CognitiveLoad = CognitiveLoad.MEDIUM,
    ) -> TaskContext:
        """
        Recompute complexity and cognitive load from the current output.

        Safe to call any number of times, including after completion.
        When auto_detect is off the load is pinned to default_load.
        """
        complexity = complexity_for(len(self.output_lines))
        if auto_detect:
            errors, warnings = self.issue_counts()
            load = cognitive_load_for(errors, warnings, complexity)
        else:
            load = default_load

        self.context.complexity = complexity
        self.context.cognitive_load = load
        return self.context
