"""Tests for themes."""

import pytest
from rich.style import Style

from fo.design.theme import (
    ASCII_ICONS,
    DEFAULT_SPINNER_CHARS,
    ElementStyle,
    Theme,
    ascii_minimal,
    get_builtin_themes,
    unicode_vibrant,
)
from fo.exceptions import ConfigError


class TestBuiltinThemes:
    """Tests for the two built-in themes."""

    def test_names(self):
        """Both built-in themes are registered by name."""
        assert set(get_builtin_themes()) == {"unicode_vibrant", "ascii_minimal"}

    def test_unicode_vibrant(self):
        """unicode_vibrant is boxed and colored."""
        theme = unicode_vibrant()
        assert theme.use_boxes
        assert not theme.monochrome
        assert theme.icon("success") == "✅"
        assert theme.style("Error").color is not None

    def test_ascii_minimal(self):
        """ascii_minimal is line oriented with bracketed icons."""
        theme = ascii_minimal()
        assert not theme.use_boxes
        assert theme.monochrome
        assert theme.icon("error") == "[FAILED]"
        assert theme.icon("start") == "[START]"

    def test_monochrome_style_is_null(self):
        """Monochrome themes never produce a style."""
        assert ascii_minimal().style("H1") == Style.null()

    def test_spinner_chars(self):
        """The progress element carries the spinner frames."""
        assert unicode_vibrant().spinner_chars == DEFAULT_SPINNER_CHARS
        assert Theme(name="bare").spinner_chars == DEFAULT_SPINNER_CHARS


class TestThemeLookups:
    """Tests for element, icon and color resolution."""

    def test_unknown_element_is_empty(self):
        """Unknown elements resolve to an empty ElementStyle."""
        assert unicode_vibrant().element("Nope") == ElementStyle()

    def test_icon_case_insensitive(self):
        """Icon keys are matched case-insensitively."""
        assert unicode_vibrant().icon("SUCCESS") == "✅"

    def test_unknown_icon(self):
        """A missing icon is empty for color themes and ASCII for monochrome."""
        assert Theme(name="bare").icon("success") == ""
        assert Theme(name="bare", monochrome=True).icon("success") == "[SUCCESS]"

    def test_apply_case(self):
        """text_case upper-cases the task label header."""
        assert unicode_vibrant().apply_case("Task_Label_Header", "build") == "BUILD"
        assert unicode_vibrant().apply_case("H1", "build") == "build"

    def test_as_monochrome(self):
        """as_monochrome drops colors and switches to ASCII icons."""
        theme = unicode_vibrant().as_monochrome()
        assert theme.monochrome
        assert theme.colors == {}
        assert theme.icons == ASCII_ICONS
        assert theme.style("Error") == Style.null()
        assert theme.use_boxes

    def test_as_monochrome_clears_element_glyphs(self):
        """Element bullets and prefix characters do not survive monochrome."""
        theme = unicode_vibrant().as_monochrome()
        assert theme.element("Task_Content_Summary_Item_Error").bullet_char == ""
        assert theme.element("Stderr_Error_Line_Prefix").additional_chars == ""
        assert theme.element("Task_Content_Summary_Item_Error").color == "Error"


class TestThemeFromDict:
    """Tests for loading a theme from a config file entry."""

    def test_full_theme(self):
        """Styles, icons, colors and elements are all read."""
        theme = Theme.from_dict(
            "neon",
            {
                "description": "Bright",
                "style": {"use_boxes": True, "spinner_interval": 50},
                "icons": {"Success": "+"},
                "colors": {"Hot": "magenta"},
                "elements": {
                    "Error": {"color_fg": "Hot", "text_style": ["BOLD", "italic"], "icon_key": "Error"},
                },
            },
        )
        assert theme.use_boxes
        assert not theme.monochrome
        assert theme.spinner_interval_ms == 50
        assert theme.icon("success") == "+"
        element = theme.element("Error")
        assert element.bold and element.italic
        assert element.icon_key == "error"
        style = theme.style("Error")
        assert style.bold
        assert style.color.name == "magenta"

    def test_no_colors_is_monochrome(self):
        """A theme that defines no colors is monochrome."""
        assert Theme.from_dict("plain", {"icons": {"success": "ok"}}).monochrome

    def test_ansi_color_decoded(self):
        """Raw ANSI escapes become rich styles."""
        theme = Theme.from_dict("ansi", {"colors": {"Error": "\x1b[0;31m"}})
        assert Style.parse(theme.colors["Error"]).color.number == 1

    def test_bad_section_shape(self):
        """A section that is not a mapping raises ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            Theme.from_dict("broken", {"icons": ["a", "b"]})
        assert exc_info.value.details["theme"] == "broken"
