"""Tests for task rendering."""

import pytest

from fo.design.render import (
    CAPTURED_OUTPUT_HEADER,
    MessageType,
    TaskRenderer,
    format_duration,
    header_width,
    plural,
    process_label,
)
from fo.design.system import CognitiveLoad, LineContext, LineType, OutputLine, Task, TaskStatus

from .conftest import build_config


def make_task(**kwargs) -> Task:
    defaults = {"label": "Build", "intent": "building", "command": "/usr/bin/make", "args": ["all"]}
    defaults.update(kwargs)
    return Task(**defaults)


class TestFormatting:
    """Tests for small formatting helpers."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0.0, "0µs"),
            (2**-11, "488µs"),
            (0.25, "250ms"),
            (3.4, "3.4s"),
            (59.94, "59.9s"),
            (125.5, "2:05.500s"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        """Durations use µs, ms, seconds or minutes."""
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize("label,expected", [("go", 40), ("x" * 40, 50), ("x" * 80, 60)])
    def test_header_width(self, label, expected):
        """Header width is label plus ten, kept within 40-60."""
        assert header_width(label) == expected

    def test_process_label(self):
        """Intents are capitalized for the start line."""
        assert process_label("building") == "Building"
        assert process_label("") == "Running"

    def test_plural(self):
        assert plural(1, "error") == "1 error"
        assert plural(3, "warning") == "3 warnings"


class TestBoxing:
    """Tests for box framing decisions."""

    def test_theme_default(self, fo_config, plain_config):
        """The theme decides framing by default."""
        assert TaskRenderer(fo_config).boxed
        assert not TaskRenderer(plain_config).boxed

    def test_override(self, fo_config, plain_config):
        """Framing can be turned off but never forced onto an unboxed theme."""
        assert not TaskRenderer(fo_config, boxed=False).boxed
        assert not TaskRenderer(plain_config, boxed=True).boxed


class TestLifecycleLines:
    """Tests for start and end lines."""

    def test_plain_start(self, plain_config):
        """Monochrome start lines are a single ASCII line."""
        assert TaskRenderer(plain_config).render_start_line(make_task()).plain == "[START] Build..."

    def test_boxed_start(self, fo_config):
        """Boxed start lines open a frame with the upper-cased label."""
        text = TaskRenderer(fo_config).render_start_line(make_task()).plain
        first, *rest = text.split("\n")
        assert first.startswith("╒═ BUILD ═")
        assert len(first) == 3 + len("BUILD") + 1 + (header_width("Build") - len("Build") - 2)
        assert rest[-1].endswith("▶️ Building...")

    def test_plain_end_no_timer(self):
        """Monochrome end lines show icon and label, duration optional."""
        config = build_config(theme="ascii_minimal", no_timer=True)
        task = make_task()
        task.complete(0)
        assert TaskRenderer(config).render_end_line(task).plain == "[SUCCESS] Build"

    def test_plain_end_with_timer(self, plain_config):
        """The duration is appended in parentheses."""
        task = make_task()
        task.add_output_line("Error: oops", LineType.ERROR)
        task.complete(0)
        text = TaskRenderer(plain_config).render_end_line(task).plain
        assert text.startswith("[FAILED] Build (")
        assert text.endswith(")")

    def test_boxed_end_closes_frame(self, fo_config):
        """Boxed end lines show the status text and close the frame."""
        task = make_task()
        task.add_output_line("Warning: careful", LineType.WARNING)
        task.complete(0)
        text = TaskRenderer(fo_config).render_end_line(task).plain
        assert "Completed with warnings" in text
        assert text.split("\n")[-1].startswith("└")


class TestOutputLines:
    """Tests for captured output lines."""

    def test_plain_error_marker(self, plain_config):
        """Monochrome errors are marked with '>'."""
        line = OutputLine("main.go:3: bad", LineType.ERROR)
        assert TaskRenderer(plain_config).render_output_line(line).plain == "    > main.go:3: bad"

    def test_plain_detail(self, plain_config):
        line = OutputLine("compiling", LineType.DETAIL)
        assert TaskRenderer(plain_config).render_output_line(line).plain == "    compiling"

    def test_plain_summary_indent(self, plain_config):
        """Summary lines are indented one extra level."""
        line = OutputLine("... 4 similar detail_x", LineType.SUMMARY, indentation=1)
        assert TaskRenderer(plain_config).render_output_line(line).plain == "    ... 4 similar detail_x"

    def test_high_load_error_italic(self, fo_config):
        """High-load error lines are emphasized."""
        line = OutputLine("Error: boom", LineType.ERROR, context=LineContext(CognitiveLoad.HIGH, 5))
        text = TaskRenderer(fo_config).render_output_line(line)
        assert any(span.style.italic for span in text.spans if not isinstance(span.style, str))

    def test_internal_line_no_prefix(self, fo_config):
        """fo's own messages carry no status icon."""
        line = OutputLine("[fo] LINE LIMIT: stdout", LineType.WARNING)
        text = TaskRenderer(fo_config).render_output_line(line).plain
        assert "⚠️" not in text
        assert text.endswith("[fo] LINE LIMIT: stdout")


class TestSummary:
    """Tests for the issue summary block."""

    def test_no_issues(self, plain_config):
        """No summary when the command reported no issues."""
        task = make_task()
        task.add_output_line("[fo] BUFFER LIMIT: stdout", LineType.WARNING)
        task.complete(0)
        assert TaskRenderer(plain_config).render_summary(task) is None

    def test_counts(self, plain_config):
        """Errors and warnings are counted with correct plurals."""
        task = make_task()
        task.add_output_line("Error: a", LineType.ERROR)
        task.add_output_line("Warning: b", LineType.WARNING)
        task.add_output_line("Warning: c", LineType.WARNING)
        task.complete(0)
        text = TaskRenderer(plain_config).render_summary(task).plain
        assert "SUMMARY:" in text
        assert "* 1 error" in text
        assert "* 2 warnings" in text

    def test_no_color_uses_ascii_bullets(self):
        """A color theme forced monochrome summarizes with ASCII bullets."""
        task = make_task()
        task.add_output_line("Error: a", LineType.ERROR)
        task.add_output_line("Warning: b", LineType.WARNING)
        task.complete(0)
        text = TaskRenderer(build_config(no_color=True)).render_summary(task).plain
        assert "* 1 error" in text
        assert "* 1 warning" in text
        assert "•" not in text


class TestReport:
    """Tests for the captured output block."""

    def test_plain_header(self, plain_config):
        """Monochrome reports start with the captured output header."""
        task = make_task()
        task.add_output_line("hello", LineType.DETAIL)
        task.complete(0)
        rendered = TaskRenderer(plain_config).render_report(task)
        assert rendered[0].plain == CAPTURED_OUTPUT_HEADER
        assert rendered[1].plain.endswith("hello")

    def test_boxed_no_header(self, fo_config):
        """Boxed reports sit inside the frame and need no header."""
        task = make_task()
        task.add_output_line("hello", LineType.DETAIL)
        task.complete(0)
        rendered = TaskRenderer(fo_config).render_report(task)
        assert len(rendered) == 1
        assert rendered[0].plain.startswith("│")

    def test_high_load_summarized(self, plain_config):
        """High-load reports are grouped and sampled."""
        task = make_task()
        for i in range(10):
            task.add_output_line(f"main.go:{i}: unused variable", LineType.ERROR)
        task.complete(1)
        task.update_context()
        assert task.context.cognitive_load == CognitiveLoad.HIGH
        lines = TaskRenderer(plain_config).report_lines(task)
        assert len(lines) == 10

        grouped = make_task()
        for _ in range(10):
            grouped.add_output_line("Error: unused variable x", LineType.ERROR)
        grouped.complete(1)
        grouped.update_context()
        lines = TaskRenderer(plain_config).report_lines(grouped)
        assert len(lines) == 4
        assert lines[-1].content == "... 7 similar error_Error:_unused"

    def test_summarize_disabled(self):
        """--no-summarize keeps every line."""
        config = build_config(theme="ascii_minimal", summarize=False)
        task = make_task()
        for _ in range(10):
            task.add_output_line("Error: unused variable x", LineType.ERROR)
        task.complete(1)
        task.update_context()
        assert len(TaskRenderer(config).report_lines(task)) == 10


class TestProgressLine:
    """Tests for the single-line progress rendering."""

    def test_plain_running(self, plain_config):
        assert (
            TaskRenderer(plain_config).render_progress(make_task(), TaskStatus.RUNNING).plain
            == "[BUSY] Build [Working...]"
        )

    def test_plain_final_no_timer(self):
        """Final plain lines show the tag, label and command basename."""
        config = build_config(theme="ascii_minimal", no_timer=True)
        renderer = TaskRenderer(config)
        assert renderer.render_progress(make_task(), TaskStatus.SUCCESS).plain == "[OK] Build [make]"
        assert renderer.render_progress(make_task(), TaskStatus.ERROR).plain == "[ERROR] Build [make]"
        assert renderer.render_progress(make_task(), TaskStatus.WARNING).plain == "[WARNING] Build [make]"

    def test_plain_final_with_timer(self, plain_config):
        text = TaskRenderer(plain_config).render_progress(make_task(), TaskStatus.SUCCESS).plain
        assert text.startswith("[OK] Build [make, ")

    def test_color_running_spinner(self):
        """Color progress lines lead with the spinner frame."""
        config = build_config(no_timer=True)
        text = TaskRenderer(config).render_progress(make_task(), TaskStatus.RUNNING, "|").plain
        assert text == "| Build [Working...]"

    def test_plain_requested_for_color_theme(self):
        """plain=True gives the bracketed form even for a color theme."""
        renderer = TaskRenderer(build_config(no_timer=True))
        running = renderer.render_progress(make_task(), TaskStatus.RUNNING, "|", plain=True)
        assert running.plain == "[BUSY] Build [Working...]"
        final = renderer.render_progress(make_task(), TaskStatus.SUCCESS, plain=True)
        assert final.plain == "[OK] Build [make]"


class TestDirectMessage:
    """Tests for `fo print` messages."""

    def test_plain_types(self, plain_config):
        renderer = TaskRenderer(plain_config)
        assert renderer.render_direct_message(MessageType.SUCCESS, "done").plain == "[SUCCESS] done"
        assert renderer.render_direct_message("error", "broken").plain == "[FAILED] broken"
        assert renderer.render_direct_message("H3", "item").plain == "* item"

    def test_raw_and_indent(self, plain_config):
        """Raw messages are printed as given, after the indent."""
        renderer = TaskRenderer(plain_config)
        assert renderer.render_direct_message("raw", "as is", indent=2).plain == "    as is"

    def test_icon_override(self, fo_config):
        text = TaskRenderer(fo_config).render_direct_message("info", "note", icon=">>")
        assert text.plain == ">> note"

    def test_unknown_type(self, plain_config):
        with pytest.raises(ValueError):
            TaskRenderer(plain_config).render_direct_message("shout", "hi")
