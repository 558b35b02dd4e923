"""
fo CLI components.

Split into focused modules:
- execution.py: Running a wrapped command and showing its report
- typer_commands.py: CLI entry points (run, print, themes)
"""

from fo.cli.execution import (
    build_task,
    execute_command,
    should_show_output,
    show_task_result,
)
from fo.cli.typer_commands import (
    app,
    list_themes,
    main,
    print_message,
    run,
)

__all__ = [
    # Typer app
    "app",
    "main",
    # Execution
    "build_task",
    "execute_command",
    "should_show_output",
    "show_task_result",
    # CLI commands
    "run",
    "print_message",
    "list_themes",
]
