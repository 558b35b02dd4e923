"""
Command Runner

Runs the wrapped command as an asyncio subprocess, splits its stdout and
stderr into lines, classifies each line as it arrives and appends it to
the Task.

Capture mode pipes both streams. Stream mode leaves stdout attached to the
terminal and only captures (and echoes) stderr, so interactive tools keep
their own output while fo still sees errors.

Limits: each stream records at most max_buffer_size bytes and each line at
most max_line_length bytes. Past a limit fo records one "[fo] ..." warning
and keeps draining the pipe so the child never blocks on a full pipe.
"""

import asyncio
import logging
import os
import signal
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import IO

from fo.config import FoConfig
from fo.design.recognition import PatternMatcher
from fo.design.system import CognitiveLoad, LineContext, LineType, OutputLine, Task
from fo.exceptions import CommandNotFoundError, CommandStartError
from fo.logging import RunLogEntry, now_iso, run_logger

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024

# Time between forwarding a signal and killing the process group
KILL_GRACE_SECONDS = 2.0

FORWARDED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@dataclass
class RunResult:
    """Outcome of one command run."""

    exit_code: int
    startup_failed: bool = False
    truncated: bool = False
    signalled: bool = False


@dataclass
class _StreamState:
    """Per-stream bookkeeping for line splitting and limits."""

    name: str
    total_bytes: int = 0
    buffer_limit_hit: bool = False
    line_limit_hit: bool = False
    skipping: bool = False  # dropping the rest of an overlong line


class CommandRunner:
    """
    Executes one command at a time and feeds its output into a Task.

    send_signal() and cancel() must be called from the event loop thread
    (for example from a loop signal handler).
    """

    def __init__(
        self,
        config: FoConfig,
        matcher: PatternMatcher,
        echo_stream: IO[str] | None = None,
    ):
        """
        Initialize runner.

        Args:
            config: Resolved configuration (stream mode, limits)
            matcher: Classifier used for every output line
            echo_stream: Where stderr is echoed in stream mode (default: sys.stderr)
        """
        self.config = config
        self.matcher = matcher
        self.echo_stream = echo_stream
        self._process: asyncio.subprocess.Process | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._kill_handle: asyncio.TimerHandle | None = None
        self._signalled = False

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def run(
        self,
        task: Task,
        on_line: Callable[[OutputLine], None] | None = None,
        forward_signals: bool = False,
    ) -> RunResult:
        """
        Run the task's command to completion.

        Never raises for command failures: a command that cannot be started
        is recorded as an error line and reported with exit code 127 (not
        found), 126 (not executable) or 1.

        Args:
            task: Task whose command is run and whose output is collected
            on_line: Called with each OutputLine as it is recorded
            forward_signals: Forward SIGINT/SIGTERM received by fo to the command

        Returns:
            RunResult with the command's exit code
        """
        self._loop = asyncio.get_running_loop()
        self._signalled = False
        stream_mode = self.config.stream
        cmd = [task.command, *task.args]
        logger.debug(f"Starting {cmd} (stream={stream_mode})")

        try:
            process = await self._spawn(cmd, stream_mode)
        except CommandStartError as e:
            return self._start_failed(task, e, on_line)

        self._process = process
        installed = self._install_signal_handlers() if forward_signals else []
        states = [_StreamState("stderr")]
        try:
            readers = [self._read_stream(process.stderr, task, states[0], stream_mode, on_line)]
            if not stream_mode:
                states.append(_StreamState("stdout"))
                readers.append(self._read_stream(process.stdout, task, states[1], False, on_line))
            await asyncio.gather(*readers)
            returncode = await process.wait()
        finally:
            self._remove_signal_handlers(installed)
            if self._kill_handle is not None:
                self._kill_handle.cancel()
                self._kill_handle = None
            self._process = None

        # Killed by a signal: report it the way shells do
        exit_code = 128 - returncode if returncode < 0 else returncode
        truncated = any(s.buffer_limit_hit or s.line_limit_hit for s in states)
        logger.debug(f"Command exited with {exit_code}")
        return RunResult(exit_code=exit_code, truncated=truncated, signalled=self._signalled)

    async def _spawn(self, cmd: list[str], stream_mode: bool) -> asyncio.subprocess.Process:
        """
        Start the command in its own session so signals reach its whole group.

        Raises:
            CommandNotFoundError: If the executable does not exist
            CommandStartError: For any other start failure
        """
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdout=None if stream_mode else asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise CommandNotFoundError(e.strerror or str(e), cmd[0]) from e
        except PermissionError as e:
            raise CommandStartError(e.strerror or str(e), cmd[0], exit_code=126) from e
        except OSError as e:
            raise CommandStartError(e.strerror or str(e), cmd[0], exit_code=1) from e

    def _start_failed(
        self,
        task: Task,
        error: CommandStartError,
        on_line: Callable[[OutputLine], None] | None,
    ) -> RunResult:
        logger.debug(f"Failed to start {task.command}: {error}")
        line = task.add_output_line(
            f"Error starting command '{task.command}': {error.message}",
            LineType.ERROR,
            LineContext(cognitive_load=CognitiveLoad.HIGH, importance=5),
        )
        if on_line:
            on_line(line)
        return RunResult(exit_code=error.exit_code, startup_failed=True)

    async def _read_stream(
        self,
        stream: asyncio.StreamReader | None,
        task: Task,
        state: _StreamState,
        echo: bool,
        on_line: Callable[[OutputLine], None] | None,
    ) -> None:
        """Read a pipe to EOF, recording complete lines within the limits."""
        if stream is None:
            return

        pending = bytearray()
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            if state.buffer_limit_hit:
                continue  # drain

            state.total_bytes += len(chunk)
            if state.total_bytes > self.config.max_buffer_size:
                state.buffer_limit_hit = True
                pending.clear()
                self._record_internal(
                    task,
                    f"[fo] BUFFER LIMIT: {state.name} output exceeded "
                    f"{self.config.max_buffer_size} bytes; remaining output discarded",
                    on_line,
                )
                continue

            pending.extend(chunk)
            for raw in self._split_lines(pending, state, task, on_line):
                self._ingest(raw, task, state, echo, on_line)

        # Final line without a trailing newline
        if pending and not state.buffer_limit_hit and not state.skipping:
            self._ingest(bytes(pending), task, state, echo, on_line)

    def _split_lines(
        self,
        pending: bytearray,
        state: _StreamState,
        task: Task,
        on_line: Callable[[OutputLine], None] | None,
    ) -> list[bytes]:
        """Pop complete lines off pending, truncating overlong ones."""
        limit = self.config.max_line_length
        lines: list[bytes] = []
        while True:
            index = pending.find(b"\n")
            if index < 0:
                if len(pending) > limit and not state.skipping:
                    lines.append(bytes(pending[:limit]))
                    self._line_limit(task, state, on_line)
                    state.skipping = True
                if state.skipping:
                    pending.clear()
                return lines

            raw = bytes(pending[:index])
            del pending[: index + 1]
            if state.skipping:
                state.skipping = False
                continue
            if len(raw) > limit:
                raw = raw[:limit]
                self._line_limit(task, state, on_line)
            lines.append(raw)

    def _line_limit(
        self,
        task: Task,
        state: _StreamState,
        on_line: Callable[[OutputLine], None] | None,
    ) -> None:
        if state.line_limit_hit:
            return
        state.line_limit_hit = True
        self._record_internal(
            task,
            f"[fo] LINE LIMIT: {state.name} line longer than "
            f"{self.config.max_line_length} bytes was truncated",
            on_line,
        )

    def _ingest(
        self,
        raw: bytes,
        task: Task,
        state: _StreamState,
        echo: bool,
        on_line: Callable[[OutputLine], None] | None,
    ) -> None:
        text = raw.decode("utf-8", errors="replace").rstrip("\r")
        line_type, context = self.matcher.classify_line(text, task.command, task.args)

        # Unclassified stderr output still deserves more attention than stdout detail
        if state.name == "stderr" and line_type == LineType.DETAIL:
            line_type = LineType.INFO
            context = LineContext(cognitive_load=context.cognitive_load, importance=3)

        line = task.add_output_line(text, line_type, context)
        if echo:
            out = self.echo_stream or sys.stderr
            out.write(text + "\n")
            out.flush()
        if on_line:
            on_line(line)

    def _record_internal(
        self,
        task: Task,
        message: str,
        on_line: Callable[[OutputLine], None] | None,
    ) -> None:
        logger.warning(message)
        line = task.add_output_line(
            message,
            LineType.WARNING,
            LineContext(cognitive_load=CognitiveLoad.MEDIUM, importance=4),
        )
        if on_line:
            on_line(line)

    # --- Signals ---

    def _install_signal_handlers(self) -> list[signal.Signals]:
        installed = []
        for signum in FORWARDED_SIGNALS:
            try:
                self._loop.add_signal_handler(signum, self.send_signal, signum)
            except (NotImplementedError, RuntimeError) as e:
                # Not the main thread, or no signal support on this platform
                logger.debug(f"Cannot forward {signum.name}: {e}")
                continue
            installed.append(signum)
        return installed

    def _remove_signal_handlers(self, installed: list[signal.Signals]) -> None:
        for signum in installed:
            self._loop.remove_signal_handler(signum)

    def send_signal(self, signum: int) -> None:
        """
        Forward a signal to the command's process group.

        The group is killed if it is still alive KILL_GRACE_SECONDS later.
        """
        process = self._process
        if process is None or process.returncode is not None:
            return

        logger.debug(f"Forwarding signal {signum} to process group {process.pid}")
        self._signalled = True
        try:
            os.killpg(process.pid, signum)
        except ProcessLookupError:
            return

        if self._kill_handle is None and self._loop is not None:
            self._kill_handle = self._loop.call_later(KILL_GRACE_SECONDS, self._kill_group)

    def cancel(self) -> None:
        """Ask the command to terminate (SIGTERM, then SIGKILL after the grace period)."""
        self.send_signal(signal.SIGTERM)

    def _kill_group(self) -> None:
        self._kill_handle = None
        process = self._process
        if process is None or process.returncode is not None:
            return
        logger.warning(f"Process group {process.pid} still running, sending SIGKILL")
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass


def log_run(task: Task, result: RunResult, stream_mode: bool = False) -> RunLogEntry:
    """Write a completed task to the run log and return the entry."""
    errors, warnings = task.issue_counts()
    entry = RunLogEntry(
        timestamp=now_iso(),
        run_id=str(uuid.uuid4()),
        command=task.command,
        args=list(task.args),
        label=task.label,
        intent=task.intent,
        cwd=os.getcwd(),
        stream_mode=stream_mode,
        exit_code=result.exit_code,
        status=task.status.value,
        duration_ms=int(task.duration * 1000),
        line_count=len(task.output_lines),
        error_count=errors,
        warning_count=warnings,
        cognitive_load=task.context.cognitive_load.value,
        complexity=task.context.complexity,
        truncated=result.truncated,
    )
    if result.startup_failed and task.output_lines:
        entry.error = task.output_lines[-1].content
        entry.error_type = "CommandStartError"
    run_logger.info(entry.to_json())
    return entry
