"""
Command execution for `fo run`.

Wires the pieces together for one wrapped command:
classify -> Task -> complete -> update context -> report.
"""

import asyncio
import logging
import os

from rich.console import Console

from fo.config import FoConfig, ShowOutput
from fo.design.progress import InlineProgress
from fo.design.recognition import PatternMatcher
from fo.design.render import TaskRenderer
from fo.design.system import Task, TaskStatus
from fo.runner import CommandRunner, RunResult, log_run

logger = logging.getLogger(__name__)

MAX_DEFAULT_LABEL_LENGTH = 50


def default_label(command: str, args: list[str]) -> str:
    """Label used when neither a flag nor a preset provides one."""
    label = " ".join([os.path.basename(command), *args])
    if len(label) > MAX_DEFAULT_LABEL_LENGTH:
        label = label[: MAX_DEFAULT_LABEL_LENGTH - 3] + "..."
    return label


def build_task(config: FoConfig, matcher: PatternMatcher, command: str, args: list[str]) -> Task:
    """Create the Task for a command, detecting its intent."""
    return Task(
        label=config.label or default_label(command, args),
        intent=matcher.detect_intent(command, args),
        command=command,
        args=list(args),
    )


def should_show_output(config: FoConfig, task: Task, result: RunResult) -> bool:
    """Whether the captured output block is printed after the run."""
    if not task.output_lines:
        return False
    if result.startup_failed:
        return True
    if config.stream:
        # stderr was already echoed live
        return False
    if config.show_output == ShowOutput.ALWAYS:
        return True
    if config.show_output == ShowOutput.NEVER:
        return False
    return result.exit_code != 0


def show_task_result(
    task: Task,
    result: RunResult,
    config: FoConfig,
    renderer: TaskRenderer,
    console: Console,
    show_end_line: bool = True,
) -> None:
    """Print captured output, the issue summary and (optionally) the end line."""
    if should_show_output(config, task, result):
        for text in renderer.render_report(task):
            console.print(text, soft_wrap=True)

    if task.status in (TaskStatus.ERROR, TaskStatus.WARNING):
        summary = renderer.render_summary(task)
        if summary is not None:
            console.print(summary, soft_wrap=True)

    if show_end_line:
        console.print(renderer.render_end_line(task), soft_wrap=True)


def execute_command(
    config: FoConfig,
    command: str,
    args: list[str],
    console: Console,
    forward_signals: bool = True,
) -> int:
    """
    Run one command and render its report.

    Args:
        config: Resolved configuration
        command: Executable to run
        args: Its arguments
        console: Console the report is printed to
        forward_signals: Forward SIGINT/SIGTERM to the command

    Returns:
        The command's exit code

    Raises:
        PatternError: If the configured pattern tables do not compile
    """
    matcher = PatternMatcher(config)
    task = build_task(config, matcher, command, args)
    logger.debug(f"Task '{task.label}' intent={task.intent}")

    use_progress = config.use_inline_progress and not config.stream
    renderer = TaskRenderer(config, boxed=not use_progress)
    runner = CommandRunner(config, matcher)

    progress = InlineProgress(task, renderer, console) if use_progress else None
    if progress is not None:
        progress.start()
    else:
        console.print(renderer.render_start_line(task), soft_wrap=True)

    try:
        result = asyncio.run(runner.run(task, forward_signals=forward_signals))
    except BaseException:
        if progress is not None:
            progress.stop()
        raise

    task.complete(result.exit_code)
    task.update_context(
        auto_detect=config.cognitive_load.auto_detect,
        default_load=config.cognitive_load.default,
    )

    if progress is not None:
        progress.complete(task.status)
    show_task_result(task, result, config, renderer, console, show_end_line=progress is None)

    log_run(task, result, stream_mode=config.stream)
    return result.exit_code
