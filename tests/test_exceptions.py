"""Tests for exception hierarchy."""

import pytest

from fo.exceptions import (
    CommandError,
    CommandNotFoundError,
    CommandStartError,
    ConfigError,
    FoError,
    PatternError,
    ThemeNotFoundError,
)


class TestFoError:
    """Tests for base FoError."""

    def test_basic_error(self):
        """Test basic error creation."""
        err = FoError("Something went wrong")
        assert err.message == "Something went wrong"
        assert err.details == {}
        assert str(err) == "Something went wrong"

    def test_error_with_details(self):
        """Test error with details dict."""
        err = FoError("Error occurred", {"path": ".fo.yaml", "line": 3})
        assert err.details == {"path": ".fo.yaml", "line": 3}
        assert str(err).startswith("Error occurred | Details:")
        assert ".fo.yaml" in str(err)


class TestConfigErrors:
    """Tests for configuration errors."""

    def test_config_error(self):
        """ConfigError inherits from FoError."""
        assert isinstance(ConfigError("Bad config"), FoError)

    def test_theme_not_found_error(self):
        """ThemeNotFoundError inherits from ConfigError."""
        err = ThemeNotFoundError("Theme 'neon' not found", {"available": ["ascii_minimal"]})
        assert isinstance(err, ConfigError)
        assert "ascii_minimal" in str(err)

    def test_pattern_error_carries_pattern(self):
        """PatternError records the offending pattern and category."""
        err = PatternError("Invalid pattern", pattern="([", category="error", table="output")
        assert isinstance(err, ConfigError)
        assert err.pattern == "(["
        assert err.category == "error"
        assert err.details["table"] == "output"

    def test_can_catch_as_fo_error(self):
        """Config errors can be caught by the base class."""
        with pytest.raises(FoError):
            raise PatternError("bad", pattern="(", category="warning")


class TestCommandErrors:
    """Tests for command start errors."""

    def test_start_error_exit_code(self):
        """CommandStartError keeps the exit code to report."""
        err = CommandStartError("Permission denied", "./script.sh", exit_code=126)
        assert isinstance(err, CommandError)
        assert err.exit_code == 126
        assert err.command == "./script.sh"

    def test_not_found_uses_127(self):
        """CommandNotFoundError always reports exit code 127."""
        err = CommandNotFoundError("No such file or directory", "nosuchtool")
        assert isinstance(err, CommandStartError)
        assert err.exit_code == 127
        assert err.details == {"command": "nosuchtool", "exit_code": 127}
