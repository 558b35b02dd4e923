"""
fo CLI - Typer Commands

    fo run [OPTIONS] -- COMMAND [ARGS...]   Run a command and render its report
    fo print [OPTIONS] MESSAGE...           Print a themed message
    fo themes                               List available themes
"""

import logging
import os

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fo import __version__
from fo.cli.execution import execute_command
from fo.config import AppConfig, CliFlags, ShowOutput, load_config, resolve_config
from fo.design.render import MessageType, TaskRenderer
from fo.exceptions import FoError
from fo.logging import get_config as get_log_config
from fo.logging import setup_console_logging

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)

# Typer app for CLI
app = typer.Typer(
    name="fo",
    help="Run a command and render its output as a themed, classified report",
    add_completion=False,
    no_args_is_help=True,
)


def _fail(error: FoError) -> None:
    """Report a configuration or usage error and exit 1."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def _setup_logging(debug: bool) -> None:
    if debug:
        setup_console_logging("DEBUG", console=err_console)
    elif "FO_LOG_LEVEL" in os.environ:
        setup_console_logging(get_log_config().console_level, console=err_console)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"fo {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """fo - wrap commands with classified, themed output."""


@app.command(
    context_settings={
        "allow_extra_args": True,
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    },
)
def run(
    command: list[str] = typer.Argument(..., help="Command to run, followed by its arguments"),
    label: str = typer.Option(None, "--label", "-l", help="Label shown for the task"),
    stream: bool = typer.Option(False, "--stream", "-s", help="Show stdout live instead of capturing it"),
    show_output: ShowOutput = typer.Option(
        None, "--show-output", case_sensitive=False, help="When to show captured output"
    ),
    no_timer: bool = typer.Option(False, "--no-timer", help="Hide durations"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color and emoji"),
    ci: bool = typer.Option(False, "--ci", help="CI mode: no color, no timer, no spinner"),
    theme: str = typer.Option(None, "--theme", help="Theme name"),
    max_buffer_size: int = typer.Option(
        None, "--max-buffer-size", min=1, help="Max captured output per stream, in MB"
    ),
    max_line_length: int = typer.Option(None, "--max-line-length", min=1, help="Max line length, in KB"),
    no_summarize: bool = typer.Option(False, "--no-summarize", help="Never collapse repeated lines"),
    config_path: str = typer.Option(None, "--config", help="Path to .fo.yaml"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Print diagnostics to stderr"),
) -> None:
    """Run a command and render its report. Exits with the command's exit code."""
    _setup_logging(debug)

    flags = CliFlags(
        label=label,
        stream=True if stream else None,
        show_output=show_output,
        no_timer=True if no_timer else None,
        no_color=True if no_color else None,
        ci=True if ci else None,
        debug=True if debug else None,
        theme=theme,
        max_buffer_size=max_buffer_size * 1024 * 1024 if max_buffer_size else None,
        max_line_length=max_line_length * 1024 if max_line_length else None,
        summarize=False if no_summarize else None,
    )

    executable, args = command[0], command[1:]
    try:
        app_config = load_config(config_path)
        config = resolve_config(app_config, flags, command=executable, args=args)
        if config.debug and not debug:
            _setup_logging(True)
        exit_code = execute_command(config, executable, args, console)
    except FoError as e:
        _fail(e)

    raise typer.Exit(exit_code)


@app.command(name="print")
def print_message(
    message: list[str] = typer.Argument(..., help="Message text"),
    message_type: MessageType = typer.Option(
        MessageType.INFO, "--type", "-t", case_sensitive=False, help="Message style"
    ),
    icon: str = typer.Option("", "--icon", help="Custom icon"),
    indent: int = typer.Option(0, "--indent", min=0, help="Indentation level"),
    theme: str = typer.Option(None, "--theme", help="Theme name"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color and emoji"),
    ci: bool = typer.Option(False, "--ci", help="CI mode: no color"),
    config_path: str = typer.Option(None, "--config", help="Path to .fo.yaml"),
) -> None:
    """Print a message styled by the active theme."""
    flags = CliFlags(
        theme=theme,
        no_color=True if no_color else None,
        ci=True if ci else None,
    )
    try:
        config = resolve_config(load_config(config_path), flags)
    except FoError as e:
        _fail(e)

    renderer = TaskRenderer(config)
    console.print(
        renderer.render_direct_message(message_type, " ".join(message), icon=icon, indent=indent),
        soft_wrap=True,
    )


@app.command(name="themes")
def list_themes(
    config_path: str = typer.Option(None, "--config", help="Path to .fo.yaml"),
) -> None:
    """List available themes."""
    try:
        app_config: AppConfig = load_config(config_path)
    except FoError as e:
        _fail(e)

    table = Table(title="Themes")
    table.add_column("", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("Style")
    table.add_column("Description")

    for name, theme in sorted(app_config.themes.items()):
        marker = "*" if name == app_config.active_theme else ""
        style = "monochrome" if theme.monochrome else "color"
        if theme.use_boxes:
            style += ", boxed"
        table.add_row(marker, name, style, theme.description)

    console.print(table)


def main() -> None:
    """Entry point for the `fo` console script."""
    app()
