"""
Line Recognition - Output Classification and Intent Detection

Classifies each line of command output into a LineType with an importance
and cognitive-load annotation, and guesses what a command is doing.

Classification is an ordered list of rules; the first rule whose pattern
matches wins:
1. Tool patterns for the command (basename, then basename + first arg),
   in declared order
2. Global output patterns, categories in CATEGORY_ORDER, then any other
   declared category
3. Structural heuristics (source file:line tokens, PASS:/FAIL: prefixes)
4. Fallback: detail, importance 2, configured default load
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fo.design.system import CognitiveLoad, LineContext, LineType
from fo.exceptions import PatternError

# TYPE_CHECKING guard avoids the fo.config -> fo.design import cycle
if TYPE_CHECKING:
    from fo.config import FoConfig, ToolConfig

logger = logging.getLogger(__name__)


# Global categories are tried in this order regardless of file order
CATEGORY_ORDER = ("error", "warning", "success", "info", "progress", "summary")

# Category -> (line type, importance, cognitive load or None for the default, is_summary)
CATEGORY_EFFECTS: dict[str, tuple[LineType, int, CognitiveLoad | None, bool]] = {
    "error": (LineType.ERROR, 5, CognitiveLoad.HIGH, False),
    "warning": (LineType.WARNING, 4, CognitiveLoad.MEDIUM, False),
    "success": (LineType.SUCCESS, 3, None, False),
    "info": (LineType.INFO, 3, None, False),
    "progress": (LineType.PROGRESS, 2, None, False),
    "summary": (LineType.SUMMARY, 4, None, True),
}
DETAIL_EFFECT: tuple[LineType, int, CognitiveLoad | None, bool] = (LineType.DETAIL, 2, None, False)

# Verb vocabulary for guessing intent from a command name or its arguments
INTENT_VERBS: dict[str, str] = {
    "build": "building",
    "test": "testing",
    "check": "checking",
    "lint": "linting",
    "run": "running",
    "install": "installing",
    "format": "formatting",
    "clean": "cleaning",
    "fetch": "fetching",
    "pull": "pulling",
    "push": "pushing",
    "deploy": "deploying",
}
DEFAULT_INTENT = "running"


@dataclass(frozen=True)
class ClassificationRule:
    """One (pattern, category) rule in the classification order."""

    source: str  # "tool:<name>", "global" or "heuristic"
    category: str
    pattern: re.Pattern
    # Heuristic rules set importance explicitly and keep the default load
    importance: int | None = None

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None

    def classify(self, default_load: CognitiveLoad) -> tuple[LineType, LineContext]:
        line_type, importance, load, is_summary = CATEGORY_EFFECTS.get(self.category, DETAIL_EFFECT)
        if self.importance is not None:
            importance = self.importance
            load = None
        return line_type, LineContext(
            cognitive_load=load or default_load,
            importance=importance,
            is_summary=is_summary,
        )


HEURISTIC_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("heuristic", "error", re.compile(r"\w+\.(go|js|py|java|rb|cpp|c):\d+"), importance=4),
    ClassificationRule("heuristic", "success", re.compile(r"^PASS:"), importance=3),
    ClassificationRule("heuristic", "error", re.compile(r"^FAIL:"), importance=4),
)


def _compile(pattern: str, category: str, table: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(
            f"Invalid pattern in {table} table: {e}",
            pattern=pattern,
            category=category,
            table=table,
        ) from e


def _ordered_categories(table: dict[str, list[str]]) -> list[str]:
    known = [c for c in CATEGORY_ORDER if c in table]
    return known + [c for c in table if c not in CATEGORY_ORDER]


class PatternMatcher:
    """
    Classifies command output lines against compiled pattern tables.

    All tables are compiled once at construction; an invalid regular
    expression raises PatternError there. After that the matcher is
    read-only and classify_line can be called from any thread.
    """

    def __init__(self, config: FoConfig):
        """
        Initialize matcher with pre-compiled patterns.

        Args:
            config: Resolved configuration supplying pattern tables and tools

        Raises:
            PatternError: If any pattern is not a valid regular expression
        """
        self.config = config
        self.default_load = config.cognitive_load.default

        self._global_rules: list[ClassificationRule] = []
        output = config.patterns.output
        for category in _ordered_categories(output):
            for pattern in output[category]:
                self._global_rules.append(
                    ClassificationRule("global", category, _compile(pattern, category, "output"))
                )

        self._tool_rules: dict[str, list[ClassificationRule]] = {}
        for name, tool in config.tools.items():
            rules = []
            for category, patterns in tool.output_patterns.items():
                for pattern in patterns:
                    rules.append(
                        ClassificationRule(f"tool:{name}", category, _compile(pattern, category, f"tools.{name}"))
                    )
            self._tool_rules[name] = rules

        logger.debug(
            f"Compiled {len(self._global_rules)} global rules, "
            f"{sum(len(r) for r in self._tool_rules.values())} tool rules"
        )

    def _tool_key(self, command: str, args: list[str]) -> str | None:
        base = os.path.basename(command)
        if base in self.config.tools:
            return base
        if args:
            key = f"{base} {args[0]}"
            if key in self.config.tools:
                return key
        return None

    def find_tool_config(self, command: str, args: list[str] | None = None) -> ToolConfig | None:
        """Tool config for the exact basename, else for basename plus first argument."""
        key = self._tool_key(command, args or [])
        return self.config.tools[key] if key else None

    def rules_for(self, command: str, args: list[str] | None = None) -> list[ClassificationRule]:
        """The full ordered rule list used to classify output of this command."""
        key = self._tool_key(command, args or [])
        tool_rules = self._tool_rules.get(key, []) if key else []
        return [*tool_rules, *self._global_rules, *HEURISTIC_RULES]

    def classify_line(
        self, line: str, command: str, args: list[str] | None = None
    ) -> tuple[LineType, LineContext]:
        """
        Classify one line of output.

        Never fails: a line that matches no rule is a detail line.

        Returns:
            (line type, line context)
        """
        for rule in self.rules_for(command, args):
            if rule.matches(line):
                return rule.classify(self.default_load)
        return LineType.DETAIL, LineContext(cognitive_load=self.default_load, importance=2)

    def detect_intent(self, command: str, args: list[str] | None = None) -> str:
        """
        Guess what a command is doing, e.g. "building" or "testing".

        Precedence: tool-configured intent, global intent table, verb at the
        start or end of the command name, verb inside an argument, "running".
        """
        args = args or []
        tool = self.find_tool_config(command, args)
        if tool is not None and tool.intent:
            return tool.intent

        base = os.path.basename(command)
        command_line = base + " " + " ".join(args)
        for intent, patterns in self.config.patterns.intent.items():
            for pattern in patterns:
                if pattern in command_line:
                    return intent

        base_lower = base.lower()
        for verb, intent in INTENT_VERBS.items():
            if base_lower.startswith(verb) or base_lower.endswith(verb):
                return intent

        for arg in args:
            arg_lower = arg.lower()
            for verb, intent in INTENT_VERBS.items():
                if verb in arg_lower:
                    return intent

        return DEFAULT_INTENT
