"""
fo - run a command, classify its output, render a themed report.

fo wraps build steps, linters and test runners: it shows a live status
line while the command runs, sorts every output line into errors,
warnings, successes and details, and summarizes repetitive output when a
run produces a lot of it.
"""

import logging

__version__ = "0.1.0"

from fo.exceptions import (
    CommandError,
    CommandNotFoundError,
    CommandStartError,
    ConfigError,
    FoError,
    PatternError,
    ThemeNotFoundError,
)

# Library default: stay silent unless the CLI attaches a handler
logging.getLogger("fo").addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "FoError",
    "ConfigError",
    "ThemeNotFoundError",
    "PatternError",
    "CommandError",
    "CommandStartError",
    "CommandNotFoundError",
]
