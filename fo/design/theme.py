"""
fo - Themes

A Theme maps symbolic element names (H1, Task_Status_Failed_Block, ...)
to icons, colors and text treatment. Colors are rich style strings; raw
ANSI escape sequences in theme files are decoded into rich styles on load.

Two themes are built in:
- unicode_vibrant: boxed task output, emoji icons, color
- ascii_minimal: line oriented, bracketed ASCII icons, no color
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any

from rich.style import Style
from rich.text import Text

from fo.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_THEME = "unicode_vibrant"
DEFAULT_SPINNER_CHARS = "-\\|/"

# ASCII icons used whenever a theme is forced into monochrome mode
ASCII_ICONS = {
    "start": "[START]",
    "success": "[SUCCESS]",
    "warning": "[WARNING]",
    "error": "[FAILED]",
    "info": "[INFO]",
    "bullet": "*",
}


@dataclass(frozen=True)
class ElementStyle:
    """Visual treatment for one symbolic element."""

    color: str = ""  # key into Theme.colors
    background: str = ""  # key into Theme.colors
    bold: bool = False
    italic: bool = False
    dim: bool = False
    icon_key: str = ""
    text_content: str = ""
    text_case: str = ""  # "upper", "lower" or ""
    prefix: str = ""
    suffix: str = ""
    bullet_char: str = ""
    additional_chars: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ElementStyle":
        """Create from a theme file element entry."""
        text_style = [str(s).lower() for s in data.get("text_style") or []]
        return cls(
            color=data.get("color_fg", ""),
            background=data.get("color_bg", ""),
            bold="bold" in text_style,
            italic="italic" in text_style,
            dim="dim" in text_style or "muted" in text_style,
            icon_key=str(data.get("icon_key", "")).lower(),
            text_content=data.get("text_content", ""),
            text_case=data.get("text_case", ""),
            prefix=data.get("prefix", ""),
            suffix=data.get("suffix", ""),
            bullet_char=data.get("bullet_char", ""),
            additional_chars=data.get("additional_chars", ""),
        )


def _parse_color(value: str) -> str:
    """Turn a theme color value into a rich style string."""
    if not value:
        return ""
    if "\x1b[" not in value:
        return value
    decoded = Text.from_ansi(value + "x")
    if not decoded.spans:
        return ""
    style = decoded.spans[0].style
    return str(style) if style else ""


@dataclass(frozen=True)
class Theme:
    """A complete, immutable visual theme."""

    name: str
    description: str = ""
    monochrome: bool = False
    use_boxes: bool = False
    indentation: str = "  "
    icons: dict[str, str] = field(default_factory=dict)
    colors: dict[str, str] = field(default_factory=dict)
    border: dict[str, str] = field(default_factory=dict)
    elements: dict[str, ElementStyle] = field(default_factory=dict)
    spinner_interval_ms: int | None = None

    @property
    def spinner_chars(self) -> str:
        element = self.elements.get("Task_Progress_Line")
        if element and element.additional_chars:
            return element.additional_chars
        return DEFAULT_SPINNER_CHARS

    def element(self, name: str) -> ElementStyle:
        return self.elements.get(name, ElementStyle())

    def icon(self, key: str) -> str:
        """Resolve an icon key; monochrome themes fall back to ASCII icons."""
        key = key.lower()
        if key in self.icons:
            return self.icons[key]
        if self.monochrome:
            return ASCII_ICONS.get(key, "")
        return ""

    def color(self, key: str) -> str:
        if self.monochrome or not key:
            return ""
        return self.colors.get(key, "")

    def style(self, element_name: str, fallback_color: str = "") -> Style:
        """
        Resolve an element to a rich Style.

        Monochrome themes always resolve to the null style so no color or
        emphasis escapes reach the terminal.
        """
        if self.monochrome:
            return Style.null()

        element = self.element(element_name)
        parts = []
        color = self.color(element.color or fallback_color)
        if color:
            parts.append(color)
        background = self.color(element.background)
        if background:
            parts.append(f"on {background}" if " " not in background else background)
        style = Style.parse(" ".join(parts)) if parts else Style()
        return style + Style(
            bold=element.bold or None,
            italic=element.italic or None,
            dim=element.dim or None,
        )

    def apply_case(self, element_name: str, text: str) -> str:
        case = self.element(element_name).text_case
        if case == "upper":
            return text.upper()
        if case == "lower":
            return text.lower()
        return text

    def as_monochrome(self) -> "Theme":
        """Copy of this theme with color disabled and ASCII icons."""
        if self.monochrome:
            return self
        # Element glyphs (bullets, prefix characters) would bypass the ASCII icons
        elements = {
            name: dataclasses.replace(element, bullet_char="", additional_chars="")
            for name, element in self.elements.items()
        }
        return dataclasses.replace(
            self, monochrome=True, icons=dict(ASCII_ICONS), colors={}, elements=elements
        )

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "Theme":
        """
        Create a Theme from a theme file entry.

        Raises:
            ConfigError: If a section has the wrong shape
        """
        for section in ("style", "icons", "colors", "border", "elements"):
            value = data.get(section)
            if value is not None and not isinstance(value, dict):
                raise ConfigError(
                    f"Theme '{name}' section '{section}' must be a mapping",
                    {"theme": name, "got": type(value).__name__},
                )

        style = data.get("style") or {}
        colors = {k: _parse_color(str(v)) for k, v in (data.get("colors") or {}).items()}
        elements = {
            k: ElementStyle.from_dict(v or {}) for k, v in (data.get("elements") or {}).items()
        }

        return cls(
            name=name,
            description=data.get("description", ""),
            # A theme without colors is monochrome by construction
            monochrome=bool(style.get("monochrome", not colors)),
            use_boxes=bool(style.get("use_boxes", False)),
            indentation=style.get("indentation", "  "),
            icons={str(k).lower(): str(v) for k, v in (data.get("icons") or {}).items()},
            colors=colors,
            border={k: str(v) for k, v in (data.get("border") or {}).items()},
            elements=elements,
            spinner_interval_ms=style.get("spinner_interval"),
        )


def unicode_vibrant() -> Theme:
    """Boxed, colored theme with emoji icons."""
    return Theme(
        name="unicode_vibrant",
        description="Boxed task output with color and emoji icons",
        use_boxes=True,
        icons={
            "start": "▶️",
            "success": "✅",
            "warning": "⚠️",
            "error": "❌",
            "info": "ℹ️",
            "bullet": "•",
        },
        colors={
            "Process": "bright_white",
            "Success": "green",
            "Warning": "yellow",
            "Error": "red",
            "Detail": "",
            "Muted": "dim",
            "White": "bright_white",
            "BlueBg": "blue",
            "Spinner": "cyan",
        },
        border={
            "header_char": "═",
            "vertical_char": "│",
            "top_corner_char": "╒",
            "bottom_corner_char": "└",
            "footer_continuation_char": "─",
        },
        elements={
            "H1": ElementStyle(color="White", background="BlueBg", bold=True, icon_key="start"),
            "H2": ElementStyle(color="Process", bold=True, icon_key="info"),
            "H3": ElementStyle(color="Process", icon_key="bullet"),
            "Header": ElementStyle(color="Process", bold=True),
            "Success": ElementStyle(color="Success", icon_key="success"),
            "Warning": ElementStyle(color="Warning", icon_key="warning"),
            "Error": ElementStyle(color="Error", icon_key="error"),
            "Info": ElementStyle(color="Process", icon_key="info"),
            "Task_Label_Header": ElementStyle(color="Process", bold=True, text_case="upper"),
            "Task_StartIndicator_Line": ElementStyle(color="Process", icon_key="start"),
            "Task_Status_Success_Block": ElementStyle(
                color="Success", icon_key="success", text_content="Complete"
            ),
            "Task_Status_Failed_Block": ElementStyle(
                color="Error", icon_key="error", text_content="Failed"
            ),
            "Task_Status_Warning_Block": ElementStyle(
                color="Warning", icon_key="warning", text_content="Completed with warnings"
            ),
            "Task_Status_Duration": ElementStyle(color="Muted", prefix="(", suffix=")"),
            "Task_Progress_Line": ElementStyle(color="Spinner", additional_chars=DEFAULT_SPINNER_CHARS),
            "Stdout_Line_Prefix": ElementStyle(additional_chars="  "),
            "Stderr_Warning_Line_Prefix": ElementStyle(
                color="Warning", icon_key="warning", additional_chars="  "
            ),
            "Stderr_Error_Line_Prefix": ElementStyle(
                color="Error", icon_key="error", additional_chars="  "
            ),
            "Task_Content_Stderr_Warning_Text": ElementStyle(color="Warning"),
            "Task_Content_Stderr_Error_Text": ElementStyle(color="Error"),
            "Task_Content_Summary_Heading": ElementStyle(
                color="Process", bold=True, text_content="SUMMARY:"
            ),
            "Task_Content_Summary_Item_Error": ElementStyle(color="Error", bullet_char="•"),
            "Task_Content_Summary_Item_Warning": ElementStyle(color="Warning", bullet_char="•"),
        },
    )


def ascii_minimal() -> Theme:
    """Monochrome, line oriented theme for CI logs."""
    return Theme(
        name="ascii_minimal",
        description="Plain ASCII output without color, suited to CI logs",
        monochrome=True,
        use_boxes=False,
        icons=dict(ASCII_ICONS),
        elements={
            "H1": ElementStyle(bold=True, icon_key="start"),
            "H2": ElementStyle(bold=True, icon_key="info"),
            "H3": ElementStyle(icon_key="bullet"),
            "Success": ElementStyle(icon_key="success"),
            "Warning": ElementStyle(icon_key="warning"),
            "Error": ElementStyle(icon_key="error"),
            "Info": ElementStyle(icon_key="info"),
            "Task_Status_Success_Block": ElementStyle(text_content="SUCCESS"),
            "Task_Status_Failed_Block": ElementStyle(text_content="FAILED"),
            "Task_Status_Warning_Block": ElementStyle(text_content="WARNING"),
            "Task_Status_Duration": ElementStyle(prefix="(", suffix=")"),
            "Task_Progress_Line": ElementStyle(additional_chars=DEFAULT_SPINNER_CHARS),
            "Task_Content_Summary_Heading": ElementStyle(text_content="SUMMARY:"),
            "Task_Content_Summary_Item_Error": ElementStyle(bullet_char="*"),
            "Task_Content_Summary_Item_Warning": ElementStyle(bullet_char="*"),
        },
    )


def get_builtin_themes() -> dict[str, Theme]:
    """Built-in themes keyed by name."""
    return {theme.name: theme for theme in (unicode_vibrant(), ascii_minimal())}
