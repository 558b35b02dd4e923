"""
fo - Configuration Management

Loads .fo.yaml, applies command presets, environment variables and CLI
flags, and produces one immutable FoConfig that is passed explicitly to
the classifier, renderer, progress indicator and runner.

Precedence (lowest to highest):
built-in defaults < .fo.yaml < command preset < environment < CLI flags

Config file lookup: $FO_CONFIG, ./.fo.yaml, then $XDG_CONFIG_HOME/fo/.fo.yaml
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from fo.design.system import CognitiveLoad
from fo.design.theme import DEFAULT_THEME, Theme, get_builtin_themes
from fo.exceptions import ConfigError, ThemeNotFoundError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".fo.yaml"

DEFAULT_MAX_BUFFER_SIZE = 10 * 1024 * 1024  # 10MB per stream
DEFAULT_MAX_LINE_LENGTH = 1024 * 1024  # 1MB per line
DEFAULT_SAMPLE_SIZE = 3
DEFAULT_SPINNER_INTERVAL_MS = 80

# Environment variables that switch features on when set to a truthy value
NO_COLOR_VARS = ("FO_NO_COLOR", "NO_COLOR")
CI_VARS = ("FO_CI", "CI")


class ShowOutput(str, Enum):
    """When to show a command's captured output."""

    ON_FAIL = "on-fail"
    ALWAYS = "always"
    NEVER = "never"


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in ("", "0", "false", "no", "off")


def _pattern_map(data: Any, where: str) -> dict[str, list[str]]:
    """Validate a {category: [pattern, ...]} mapping, keeping declared order."""
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"'{where}' must be a mapping of category to patterns", {"got": type(data).__name__})
    result: dict[str, list[str]] = {}
    for category, patterns in data.items():
        if isinstance(patterns, str):
            patterns = [patterns]
        if not isinstance(patterns, list):
            raise ConfigError(
                f"Patterns for '{where}.{category}' must be a list",
                {"got": type(patterns).__name__},
            )
        result[str(category)] = [str(p) for p in patterns]
    return result


@dataclass(frozen=True)
class ToolConfig:
    """Per-command preset: display label, intent, stream override and output patterns."""

    label: str = ""
    intent: str = ""
    stream: bool | None = None
    output_patterns: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any] | None) -> "ToolConfig":
        data = data or {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"Tool config '{name}' must be a mapping", {"got": type(data).__name__})
        stream = data.get("stream")
        return cls(
            label=str(data.get("label", "")),
            intent=str(data.get("intent", "")),
            stream=bool(stream) if stream is not None else None,
            output_patterns=_pattern_map(data.get("output_patterns"), f"tools.{name}.output_patterns"),
        )


@dataclass(frozen=True)
class PatternTables:
    """Global intent and output pattern tables. Categories keep their declared order."""

    intent: dict[str, list[str]] = field(default_factory=dict)
    output: dict[str, list[str]] = field(default_factory=dict)


def default_patterns() -> PatternTables:
    """Built-in pattern tables used when the config file defines none."""
    return PatternTables(
        intent={
            "building": ["go build", "make", "gcc", "g++"],
            "testing": ["go test", "pytest", "jest", "jasmine"],
            "linting": ["golangci-lint", "eslint", "pylint", "flake8"],
            "checking": ["go vet", "check", "verify"],
            "installing": ["go install", "npm install", "pip install"],
            "formatting": ["go fmt", "prettier", "black", "gofmt"],
        },
        output={
            "error": [
                r"^Error:",
                r"^ERROR:",
                r"^ERRO[R]?\[",
                r"^E!",
                r"^panic:",
                r"^fatal:",
                r"^Failed",
                r"\[ERROR\]",
                r"^FAIL\t",
                r"failure",
            ],
            "warning": [
                r"^Warning:",
                r"^WARNING:",
                r"^WARN\[",
                r"^W!",
                r"^deprecated:",
                r"^\[warn\]",
                r"\[WARNING\]",
                r"^Warn:",
            ],
            "success": [
                r"^Success:",
                r"^SUCCESS:",
                r"^PASS\t",
                r"^ok\t",
                r"^Done!",
                r"^Completed",
                r"^✓",
                r"^All tests passed!",
            ],
            "info": [
                r"^Info:",
                r"^INFO:",
                r"^INFO\[",
                r"^I!",
                r"^\[info\]",
                r"^Running",
            ],
        },
    )


@dataclass(frozen=True)
class CognitiveLoadSettings:
    """Whether cognitive load is derived from output, and the load used otherwise."""

    auto_detect: bool = True
    default: CognitiveLoad = CognitiveLoad.MEDIUM


@dataclass
class AppConfig:
    """Settings as read from .fo.yaml, before environment and flags are applied."""

    label: str = ""
    stream: bool = False
    show_output: ShowOutput = ShowOutput.ON_FAIL
    no_timer: bool = False
    no_color: bool = False
    ci: bool = False
    debug: bool = False
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    active_theme: str = DEFAULT_THEME
    summarize: bool = True
    sample_size: int = DEFAULT_SAMPLE_SIZE
    use_inline_progress: bool = True
    no_spinner: bool = False
    spinner_interval: int = DEFAULT_SPINNER_INTERVAL_MS
    cognitive_load: CognitiveLoadSettings = field(default_factory=CognitiveLoadSettings)
    patterns: PatternTables = field(default_factory=default_patterns)
    tools: dict[str, ToolConfig] = field(default_factory=dict)
    themes: dict[str, Theme] = field(default_factory=get_builtin_themes)

    def get_theme(self, name: str) -> Theme:
        """
        Get a theme by name.

        Raises:
            ThemeNotFoundError: If no theme with that name is defined
        """
        if name in self.themes:
            return self.themes[name]
        raise ThemeNotFoundError(
            f"Theme '{name}' not found",
            {"available": sorted(self.themes)},
        )

    def find_tool(self, command: str, args: list[str] | None = None) -> ToolConfig | None:
        """Tool config for the command basename, else for basename plus first argument."""
        base = os.path.basename(command)
        if base in self.tools:
            return self.tools[base]
        if args:
            return self.tools.get(f"{base} {args[0]}")
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from a parsed .fo.yaml document.

        Raises:
            ConfigError: If a value has the wrong type
        """
        if not isinstance(data, Mapping):
            raise ConfigError("Config root must be a mapping", {"got": type(data).__name__})

        config = cls()
        style = data.get("style") or {}

        try:
            config.label = str(data.get("label", config.label))
            config.stream = bool(data.get("stream", config.stream))
            config.show_output = ShowOutput(data.get("show_output", config.show_output.value))
            config.no_timer = bool(data.get("no_timer", config.no_timer))
            config.no_color = bool(data.get("no_color", config.no_color))
            config.ci = bool(data.get("ci", config.ci))
            config.debug = bool(data.get("debug", config.debug))
            config.max_buffer_size = int(data.get("max_buffer_size", config.max_buffer_size))
            config.max_line_length = int(data.get("max_line_length", config.max_line_length))
            config.active_theme = str(data.get("active_theme", config.active_theme))
            config.summarize = bool(data.get("summarize", config.summarize))
            config.sample_size = int(data.get("sample_size", config.sample_size))
            config.use_inline_progress = bool(style.get("use_inline_progress", config.use_inline_progress))
            config.no_spinner = bool(style.get("no_spinner", config.no_spinner))
            config.spinner_interval = int(style.get("spinner_interval", config.spinner_interval))

            load = data.get("cognitive_load") or {}
            config.cognitive_load = CognitiveLoadSettings(
                auto_detect=bool(load.get("auto_detect", True)),
                default=CognitiveLoad(load.get("default", CognitiveLoad.MEDIUM.value)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError("Invalid value in config", {"error": str(e)})

        if config.max_buffer_size <= 0 or config.max_line_length <= 0:
            raise ConfigError(
                "Buffer limits must be positive",
                {"max_buffer_size": config.max_buffer_size, "max_line_length": config.max_line_length},
            )

        if config.sample_size < 1:
            raise ConfigError("sample_size must be at least 1", {"sample_size": config.sample_size})

        patterns = data.get("patterns")
        if patterns is not None:
            if not isinstance(patterns, Mapping):
                raise ConfigError("'patterns' must be a mapping", {"got": type(patterns).__name__})
            defaults = default_patterns()
            config.patterns = PatternTables(
                intent=_pattern_map(patterns["intent"], "patterns.intent")
                if "intent" in patterns
                else defaults.intent,
                output=_pattern_map(patterns["output"], "patterns.output")
                if "output" in patterns
                else defaults.output,
            )

        # Presets and tools share one table; tools win on conflicts
        for section in ("presets", "tools"):
            entries = data.get(section) or {}
            if not isinstance(entries, Mapping):
                raise ConfigError(f"'{section}' must be a mapping", {"got": type(entries).__name__})
            for name, entry in entries.items():
                config.tools[str(name)] = ToolConfig.from_dict(str(name), entry)

        themes = data.get("themes") or {}
        if not isinstance(themes, Mapping):
            raise ConfigError("'themes' must be a mapping", {"got": type(themes).__name__})
        for name, theme_data in themes.items():
            if theme_data is not None and not isinstance(theme_data, Mapping):
                raise ConfigError(f"Theme '{name}' must be a mapping", {"got": type(theme_data).__name__})
            config.themes[str(name)] = Theme.from_dict(str(name), dict(theme_data or {}))

        return config


@dataclass
class CliFlags:
    """Values given explicitly on the command line. None means not given."""

    label: str | None = None
    stream: bool | None = None
    show_output: ShowOutput | None = None
    no_timer: bool | None = None
    no_color: bool | None = None
    ci: bool | None = None
    debug: bool | None = None
    theme: str | None = None
    max_buffer_size: int | None = None
    max_line_length: int | None = None
    summarize: bool | None = None


@dataclass(frozen=True)
class FoConfig:
    """Resolved, immutable configuration for one fo invocation."""

    theme: Theme
    label: str = ""
    stream: bool = False
    show_output: ShowOutput = ShowOutput.ON_FAIL
    no_timer: bool = False
    no_color: bool = False
    ci: bool = False
    debug: bool = False
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    summarize: bool = True
    sample_size: int = DEFAULT_SAMPLE_SIZE
    use_inline_progress: bool = True
    no_spinner: bool = False
    spinner_interval_ms: int = DEFAULT_SPINNER_INTERVAL_MS
    cognitive_load: CognitiveLoadSettings = field(default_factory=CognitiveLoadSettings)
    patterns: PatternTables = field(default_factory=default_patterns)
    tools: dict[str, ToolConfig] = field(default_factory=dict)

    @property
    def monochrome(self) -> bool:
        return self.theme.monochrome

    @property
    def spinner_interval(self) -> float:
        """Spinner interval in seconds; the theme's own interval wins."""
        ms = self.theme.spinner_interval_ms or self.spinner_interval_ms
        return max(ms, 10) / 1000.0


def find_config_path(environ: Mapping[str, str] | None = None) -> Path | None:
    """Locate the config file, or None if there is none."""
    env = os.environ if environ is None else environ

    if explicit := env.get("FO_CONFIG"):
        return Path(explicit).expanduser()

    local = Path.cwd() / CONFIG_FILENAME
    if local.is_file():
        return local

    xdg = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    user = Path(xdg) / "fo" / CONFIG_FILENAME
    if user.is_file():
        return user

    return None


def load_config(path: Path | str | None = None) -> AppConfig:
    """
    Load configuration from .fo.yaml.

    Args:
        path: Explicit config file; looked up with find_config_path if omitted

    Returns:
        AppConfig with file settings applied over the defaults

    Raises:
        ConfigError: If the file is unreadable or invalid
    """
    config_path = Path(path) if path is not None else find_config_path()
    if config_path is None:
        logger.debug("No config file found, using defaults")
        return AppConfig()

    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}", {"path": str(config_path)})

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}", {"error": str(e)})
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}", {"error": str(e)})

    logger.debug(f"Loaded config from {config_path}")
    return AppConfig.from_dict(data or {})


def resolve_config(
    app_config: AppConfig,
    flags: CliFlags | None = None,
    environ: Mapping[str, str] | None = None,
    command: str | None = None,
    args: list[str] | None = None,
) -> FoConfig:
    """
    Merge file settings, the command's preset, environment and flags.

    CI mode implies monochrome output and no timer. An unknown theme falls
    back to the default theme.
    """
    flags = flags or CliFlags()
    env = os.environ if environ is None else environ

    label = app_config.label
    stream = app_config.stream
    if command:
        preset = app_config.find_tool(command, args)
        if preset is not None:
            label = preset.label or label
            if preset.stream is not None:
                stream = preset.stream

    no_color = app_config.no_color or any(_truthy(env.get(v)) for v in NO_COLOR_VARS)
    ci = app_config.ci or any(_truthy(env.get(v)) for v in CI_VARS)
    no_timer = app_config.no_timer

    if flags.label is not None:
        label = flags.label
    if flags.stream is not None:
        stream = flags.stream
    if flags.no_color is not None:
        no_color = flags.no_color
    if flags.ci is not None:
        ci = flags.ci
    if flags.no_timer is not None:
        no_timer = flags.no_timer

    if ci:
        no_color = True
        no_timer = True

    theme_name = flags.theme or app_config.active_theme
    try:
        theme = app_config.get_theme(theme_name)
    except ThemeNotFoundError:
        logger.warning(f"Theme '{theme_name}' not found, using {DEFAULT_THEME}")
        theme = app_config.themes.get(DEFAULT_THEME) or get_builtin_themes()[DEFAULT_THEME]
    if no_color:
        theme = theme.as_monochrome()

    return FoConfig(
        theme=theme,
        label=label,
        stream=stream,
        show_output=flags.show_output or app_config.show_output,
        no_timer=no_timer,
        no_color=no_color,
        ci=ci,
        debug=flags.debug if flags.debug is not None else app_config.debug,
        max_buffer_size=flags.max_buffer_size or app_config.max_buffer_size,
        max_line_length=flags.max_line_length or app_config.max_line_length,
        summarize=flags.summarize if flags.summarize is not None else app_config.summarize,
        sample_size=app_config.sample_size,
        use_inline_progress=app_config.use_inline_progress,
        no_spinner=app_config.no_spinner,
        spinner_interval_ms=app_config.spinner_interval,
        cognitive_load=app_config.cognitive_load,
        patterns=app_config.patterns,
        tools=dict(app_config.tools),
    )
