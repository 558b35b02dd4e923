"""Shared fixtures for fo tests."""

import io

import pytest
from rich.console import Console

from fo.config import AppConfig, CliFlags, FoConfig, resolve_config


def build_config(app_config: AppConfig | None = None, **flag_values) -> FoConfig:
    """Resolve a config without reading the real environment."""
    return resolve_config(app_config or AppConfig(), CliFlags(**flag_values), environ={})


@pytest.fixture
def fo_config() -> FoConfig:
    """Default configuration with the unicode_vibrant theme."""
    return build_config()


@pytest.fixture
def plain_config() -> FoConfig:
    """Monochrome configuration (ascii_minimal)."""
    return build_config(theme="ascii_minimal")


@pytest.fixture
def capture_console():
    """Factory for a Console writing to a StringIO buffer."""

    def _make(is_terminal: bool = False, width: int = 120) -> tuple[Console, io.StringIO]:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=is_terminal,
            color_system=None,
            width=width,
            legacy_windows=False,
        )
        return console, buffer

    return _make
