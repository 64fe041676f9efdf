"""
Pytest configuration and shared fixtures for the .lang conversion tests.
"""
import os

import pytest

LANG_ENV_VARS = (
    "LANG_FALLBACK_BASE",
    "LANG_OUTPUT_DIR",
    "LANG_META_LANGUAGE",
    "LANG_FETCH_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_lang_env(monkeypatch):
    """Keep LANG_* settings out of the tests, before and after each one"""
    for name in LANG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_env_file writes os.environ directly, outside monkeypatch
    for name in LANG_ENV_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def client_template():
    """Small client.lang with comments, blanks and a continued entry"""
    return (
        "# Hytale client strings\n"
        "\n"
        "menu.play = Play\n"
        "menu.quit = Quit\n"
        "tooltip.long = First part \\\n"
        "  second part\n"
        "# end\n"
    )
