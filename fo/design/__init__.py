"""
fo design system.

Split into focused modules:
- system.py: Task, OutputLine and their enums
- theme.py: Theme definitions and style resolution
- recognition.py: Line classification and intent detection
- grouping.py: Grouping and summarizing repetitive lines
- render.py: Task and message rendering
- progress.py: Inline progress indicator
"""

from fo.design.grouping import group_key, group_similar_lines, ordered_groups, summarize_lines
from fo.design.progress import InlineProgress
from fo.design.recognition import ClassificationRule, PatternMatcher
from fo.design.render import TaskRenderer, format_duration
from fo.design.system import (
    CognitiveLoad,
    LineContext,
    LineType,
    OutputLine,
    Task,
    TaskContext,
    TaskStatus,
)
from fo.design.theme import Theme, ascii_minimal, get_builtin_themes, unicode_vibrant

__all__ = [
    # Model
    "CognitiveLoad",
    "LineContext",
    "LineType",
    "OutputLine",
    "Task",
    "TaskContext",
    "TaskStatus",
    # Themes
    "Theme",
    "ascii_minimal",
    "unicode_vibrant",
    "get_builtin_themes",
    # Classification
    "ClassificationRule",
    "PatternMatcher",
    # Grouping
    "group_key",
    "group_similar_lines",
    "ordered_groups",
    "summarize_lines",
    # Rendering
    "TaskRenderer",
    "format_duration",
    "InlineProgress",
]
