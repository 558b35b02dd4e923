"""
Task Rendering

Turns Tasks, OutputLines and direct messages into rich Text using the
resolved Theme. Nothing here writes to the terminal; callers print the
returned Text through a rich Console.

Boxed themes frame a task:

    ╒═ GO BUILD ══════════════════════
    │
    │   ▶️ Building...
    │   main.go:12: undefined: foo
    │   ❌ Failed (1.2s)
    └─

Monochrome themes render the same information line by line with ASCII
icons.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text

from fo.design.grouping import summarize_lines
from fo.design.system import CognitiveLoad, LineType, OutputLine, Task, TaskStatus

if TYPE_CHECKING:
    from fo.config import FoConfig

CAPTURED_OUTPUT_HEADER = "--- Captured output: ---"

MIN_HEADER_WIDTH = 40
MAX_HEADER_WIDTH = 60


class MessageType(str, Enum):
    """Message kinds accepted by `fo print`."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    HEADER = "header"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"
    RAW = "raw"


# Message type -> (element, icon key, fallback color)
MESSAGE_ELEMENTS: dict[MessageType, tuple[str, str, str]] = {
    MessageType.H1: ("H1", "start", "Process"),
    MessageType.HEADER: ("H1", "start", "Process"),
    MessageType.H2: ("H2", "info", "Process"),
    MessageType.H3: ("H3", "bullet", "Detail"),
    MessageType.SUCCESS: ("Success", "success", "Success"),
    MessageType.WARNING: ("Warning", "warning", "Warning"),
    MessageType.ERROR: ("Error", "error", "Error"),
    MessageType.INFO: ("Info", "info", "Process"),
}

# Final status -> (element, icon key, default text, fallback color)
STATUS_BLOCKS: dict[TaskStatus, tuple[str, str, str, str]] = {
    TaskStatus.SUCCESS: ("Task_Status_Success_Block", "success", "Complete", "Success"),
    TaskStatus.WARNING: ("Task_Status_Warning_Block", "warning", "Completed with warnings", "Warning"),
    TaskStatus.ERROR: ("Task_Status_Failed_Block", "error", "Failed", "Error"),
    TaskStatus.RUNNING: ("Task_Status_Info_Block", "info", "Done", "Process"),
}

PLAIN_STATUS_TAGS: dict[TaskStatus, str] = {
    TaskStatus.SUCCESS: "[OK]",
    TaskStatus.WARNING: "[WARNING]",
    TaskStatus.ERROR: "[ERROR]",
}

# Line type -> (prefix element, content element, fallback color)
LINE_ELEMENTS: dict[LineType, tuple[str, str, str]] = {
    LineType.ERROR: ("Stderr_Error_Line_Prefix", "Task_Content_Stderr_Error_Text", "Error"),
    LineType.WARNING: ("Stderr_Warning_Line_Prefix", "Task_Content_Stderr_Warning_Text", "Warning"),
    LineType.INFO: ("Make_Info_Line_Prefix", "Task_Content_Info_Text", "Process"),
    LineType.SUCCESS: ("Stdout_Line_Prefix", "Task_Content_Success_Text", "Success"),
    LineType.SUMMARY: ("Stdout_Line_Prefix", "Task_Content_Summary_Text", "Muted"),
}
DEFAULT_LINE_ELEMENT = ("Stdout_Line_Prefix", "Task_Content_Stdout_Text", "Detail")


def format_duration(seconds: float) -> str:
    """Format a duration: 850µs, 12ms, 3.4s or 2:05.120s."""
    if seconds < 0.001:
        return f"{int(seconds * 1_000_000)}µs"
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    total_ms = int(seconds * 1000)
    minutes, remainder = divmod(total_ms, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{minutes}:{secs:02d}.{millis:03d}s"


def header_width(label: str) -> int:
    """Width of task header rules: label plus padding, kept within 40-60 cells."""
    return max(MIN_HEADER_WIDTH, min(len(label) + 10, MAX_HEADER_WIDTH))


def process_label(intent: str) -> str:
    """Capitalized intent for the start line, e.g. "Building"."""
    if not intent:
        return "Running"
    return intent[0].upper() + intent[1:].lower()


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class TaskRenderer:
    """
    Renders task lifecycle lines, captured output and direct messages.

    Report rendering reads task.output_lines, so it must only be used after
    Task.complete has returned.
    """

    def __init__(self, config: FoConfig, boxed: bool | None = None):
        """
        Args:
            config: Resolved configuration supplying the theme
            boxed: Override the theme's box framing; a theme without boxes
                is never framed
        """
        self.config = config
        self.theme = config.theme
        self.boxed = self.theme.use_boxes if boxed is None else boxed and self.theme.use_boxes

    def _indent(self, level: int = 1) -> str:
        return self.theme.indentation * level

    def _border(self, key: str, default: str) -> str:
        return self.theme.border.get(key) or default

    def render_start_line(self, task: Task) -> Text:
        theme = self.theme
        if theme.monochrome:
            return Text(f"{theme.icon('start')} {task.label}...")

        text = Text()
        if self.boxed:
            header_char = self._border("header_char", "═")
            vertical = self._border("vertical_char", "│")
            text.append(self._border("top_corner_char", "╒") + header_char + " ")
            text.append(
                theme.apply_case("Task_Label_Header", task.label),
                style=theme.style("Task_Label_Header", "Process"),
            )
            fill = max(header_width(task.label) - len(task.label) - 2, 0)
            text.append(" " + header_char * fill)
            text.append(f"\n{vertical}\n{vertical} {self._indent()}")
        else:
            text.append(task.label, style=theme.style("H2", "Process"))
            text.append("\n\n" + self._indent())

        element = theme.element("Task_StartIndicator_Line")
        text.append(f"{theme.icon(element.icon_key or 'start')} ")
        text.append(
            process_label(task.intent) + "...",
            style=theme.style("Task_StartIndicator_Line", "Process"),
        )
        return text

    def _duration(self, task: Task) -> Text | None:
        if self.config.no_timer:
            return None
        element = self.theme.element("Task_Status_Duration")
        prefix = element.prefix or "("
        suffix = element.suffix or ")"
        return Text(
            f" {prefix}{format_duration(task.duration)}{suffix}",
            style=self.theme.style("Task_Status_Duration", "Muted"),
        )

    def render_end_line(self, task: Task) -> Text:
        theme = self.theme
        element_name, icon_key, default_text, color = STATUS_BLOCKS[task.status]
        duration = self._duration(task)

        if theme.monochrome:
            text = Text(f"{theme.icon(icon_key)} {task.label}")
            if duration:
                text.append_text(duration)
            return text

        element = theme.element(element_name)
        text = Text()
        if self.boxed:
            text.append(self._border("vertical_char", "│") + " ")
        text.append(self._indent())
        text.append(f"{theme.icon(element.icon_key or icon_key)} ")
        text.append(element.text_content or default_text, style=theme.style(element_name, color))
        if duration:
            text.append_text(duration)
        if self.boxed:
            footer = self._border("footer_continuation_char", "") or self._border("header_char", "─")
            text.append("\n" + self._border("bottom_corner_char", "└") + footer)
        return text

    def render_output_line(self, line: OutputLine) -> Text:
        theme = self.theme
        indent = self._indent(1 + line.indentation)

        if theme.monochrome:
            if line.is_internal:
                prefix = ""
            elif line.type in (LineType.ERROR, LineType.WARNING):
                prefix = "  > "
            elif line.type == LineType.DETAIL:
                prefix = "  "
            else:
                prefix = ""
            return Text(indent + prefix + line.content)

        text = Text()
        if self.boxed:
            text.append(self._border("vertical_char", "│") + " ")
        text.append(indent)

        prefix_name, content_name, color = LINE_ELEMENTS.get(line.type, DEFAULT_LINE_ELEMENT)
        if not line.is_internal:
            prefix = theme.element(prefix_name)
            prefix_text = ""
            if prefix.icon_key:
                prefix_text += theme.icon(prefix.icon_key) + " "
            prefix_text += prefix.additional_chars
            if prefix_text:
                text.append(prefix_text, style=theme.style(prefix_name))

        style = theme.style(content_name, color)
        if (
            line.type == LineType.ERROR
            and line.context.cognitive_load == CognitiveLoad.HIGH
            and not line.is_internal
        ):
            style += Style(italic=True)
        text.append(line.content, style=style)
        return text

    def render_summary(self, task: Task) -> Text | None:
        """Issue count block, or None when the command reported no issues."""
        errors, warnings = task.issue_counts()
        if errors == 0 and warnings == 0:
            return None

        theme = self.theme
        text = Text()
        if self.boxed and not theme.monochrome:
            vertical = self._border("vertical_char", "│")
            base = f"{vertical} {self._indent()}"
            text.append(vertical + "\n")
        else:
            base = self._indent()
            text.append("\n")

        heading = theme.element("Task_Content_Summary_Heading")
        text.append(base)
        text.append(
            heading.text_content or "SUMMARY:",
            style=theme.style("Task_Content_Summary_Heading", "Process"),
        )

        items = (
            ("Task_Content_Summary_Item_Error", errors, "error", "Error"),
            ("Task_Content_Summary_Item_Warning", warnings, "warning", "Warning"),
        )
        for element_name, count, word, color in items:
            if count == 0:
                continue
            if theme.monochrome:
                bullet = theme.icon("bullet") or "*"
            else:
                bullet = theme.element(element_name).bullet_char or theme.icon("bullet") or "•"
            text.append("\n" + base + self._indent())
            text.append(f"{bullet} {plural(count, word)}", style=theme.style(element_name, color))
        return text

    def report_lines(self, task: Task) -> list[OutputLine]:
        """Lines to show for a completed task, summarized when load is high."""
        if self.config.summarize and task.context.cognitive_load == CognitiveLoad.HIGH:
            return summarize_lines(task.output_lines, self.config.sample_size, enabled=True)
        return list(task.output_lines)

    def render_report(self, task: Task) -> list[Text]:
        """Captured output block for a completed task."""
        rendered = []
        if not self.boxed or self.theme.monochrome:
            rendered.append(Text(CAPTURED_OUTPUT_HEADER, style=self.theme.style("Header", "Muted")))
        rendered.extend(self.render_output_line(line) for line in self.report_lines(task))
        return rendered

    def render_progress(
        self,
        task: Task,
        status: TaskStatus,
        spinner_char: str = "",
        plain: bool = False,
    ) -> Text:
        """
        Single progress line: running spinner, or the final status.

        Monochrome themes always use the bracketed ASCII form; plain=True
        asks for it too, e.g. when output is not a terminal.
        """
        theme = self.theme
        plain = plain or theme.monochrome
        no_timer = self.config.no_timer

        if status == TaskStatus.RUNNING:
            if plain:
                return Text(f"[BUSY] {task.label} [Working...]")
            text = Text()
            if spinner_char:
                text.append(spinner_char + " ", style=theme.style("Task_Progress_Line", "Process"))
            text.append(task.label)
            working = "[Working...]" if no_timer else f"[Working {format_duration(task.duration)}]"
            text.append(" " + working, style=theme.style("Task_Status_Duration", "Muted"))
            return text

        command = os.path.basename(task.command)
        details = command if no_timer else f"{command}, {format_duration(task.duration)}"
        if plain:
            return Text(f"{PLAIN_STATUS_TAGS.get(status, '[INFO]')} {task.label} [{details}]")

        element_name, icon_key, _, color = STATUS_BLOCKS[status]
        text = Text()
        text.append(f"{theme.icon(theme.element(element_name).icon_key or icon_key)} ")
        text.append(task.label, style=theme.style(element_name, color))
        text.append(f" [{details}]", style=theme.style("Task_Status_Duration", "Muted"))
        return text

    def render_direct_message(
        self,
        message_type: MessageType | str,
        message: str,
        icon: str = "",
        indent: int = 0,
    ) -> Text:
        """Styled one-off message for `fo print`."""
        if not isinstance(message_type, MessageType):
            message_type = MessageType(message_type.lower())
        text = Text(self._indent(indent))
        if message_type == MessageType.RAW:
            text.append(message)
            return text

        element_name, icon_key, color = MESSAGE_ELEMENTS[message_type]
        element = self.theme.element(element_name)
        icon = icon or self.theme.icon(element.icon_key or icon_key)
        body = f"{icon} {message}" if icon else message
        text.append(body, style=self.theme.style(element_name, color))
        return text
