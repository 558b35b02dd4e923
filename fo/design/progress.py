"""
Inline Progress Indicator

Shows a single status line for a running task. On an interactive terminal
(and outside CI/monochrome mode) the line is redrawn in place by a
background thread; otherwise one plain ASCII line is printed at start and
one at completion.

The only state shared with the background thread is the active flag and
spinner index, both guarded by one lock. complete() clears the flag and
draws the final line while holding that lock, and each tick re-checks the
flag under the lock before drawing, so nothing is drawn after the final
line.

Usage:
    progress = InlineProgress(task, renderer, console)
    progress.start()
    # ... run the command ...
    progress.complete(task.status)
"""

from __future__ import annotations

import logging
import threading

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType

from fo.design.render import TaskRenderer
from fo.design.system import Task, TaskStatus

logger = logging.getLogger(__name__)

# Extra time allowed for the loop thread to notice the stop event
JOIN_GRACE_SECONDS = 1.0


class InlineProgress:
    """Spinner line for one running task."""

    def __init__(
        self,
        task: Task,
        renderer: TaskRenderer,
        console: Console,
        interval: float | None = None,
    ) -> None:
        self.task = task
        self.renderer = renderer
        self.console = console
        self.config = renderer.config
        self.interval = interval if interval is not None else self.config.spinner_interval
        self.spinner_chars = renderer.theme.spinner_chars or "-"

        self._lock = threading.Lock()
        self._active = False
        self._spinner_index = 0
        self._stop = threading.Event()
        self._cancel: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def in_place(self) -> bool:
        """True when the line can be redrawn in place."""
        return self.console.is_terminal and not self.config.ci and not self.renderer.theme.monochrome

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    @property
    def is_spinning(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, cancel: threading.Event | None = None, enable_spinner: bool = True) -> None:
        """
        Mark active, draw the running line once, and start the redraw loop
        when the terminal supports in-place updates.

        Args:
            cancel: Event that stops the redraw loop when set
            enable_spinner: Set False to draw the running line only once
        """
        with self._lock:
            if self._active:
                return
            self._active = True
            self._spinner_index = 0
            self._render(TaskStatus.RUNNING)

        if not (enable_spinner and self.in_place and not self.config.no_spinner):
            logger.debug("Progress spinner disabled, using static status lines")
            return

        self._cancel = cancel
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="fo-progress", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        """Redraw the running line every interval until stopped."""
        while not self._stop.wait(self.interval):
            if self._cancel is not None and self._cancel.is_set():
                logger.debug("Progress loop cancelled")
                break
            with self._lock:
                if not self._active:
                    break
                self._spinner_index += 1
                self._render(TaskStatus.RUNNING)

    def complete(self, status: TaskStatus) -> None:
        """Mark inactive, draw the final line, and wait for the loop to exit."""
        with self._lock:
            self._active = False
            self._render(status)
        self._join()

    def stop(self) -> None:
        """Stop without drawing a final line, e.g. when the run is aborted."""
        with self._lock:
            was_active = self._active
            self._active = False
        self._join()
        if was_active and self.in_place:
            self.console.line()

    def _join(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + JOIN_GRACE_SECONDS)
            if self._thread.is_alive():
                logger.warning("Progress loop did not exit in time")
            self._thread = None

    def _render(self, status: TaskStatus) -> None:
        # Caller holds self._lock
        spinner = ""
        if status == TaskStatus.RUNNING:
            spinner = self.spinner_chars[self._spinner_index % len(self.spinner_chars)]
        in_place = self.in_place
        message = self.renderer.render_progress(self.task, status, spinner, plain=not in_place)

        if in_place:
            self.console.control(Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 2)))
            end = "" if status == TaskStatus.RUNNING else "\n"
            self.console.print(message, end=end, soft_wrap=True)
        else:
            self.console.print(message, soft_wrap=True)
