"""
Shared fixtures for the bicep-docs test suite.
"""

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def basic_dir():
    """Directory holding the basic main.bicep / main.json pair."""
    return FIXTURES_DIR / "basic"


@pytest.fixture
def extended_dir():
    """Directory holding the template with types, functions and loops."""
    return FIXTURES_DIR / "extended"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep BICEP_DOCS_* variables from the developer's shell out of the tests."""
    for name in (
        "BICEP_DOCS_SECTIONS",
        "BICEP_DOCS_SHOW_ALL_DECORATORS",
        "BICEP_DOCS_VERBOSE",
        "BICEP_DOCS_TRIGGER_FILENAME",
        "BICEP_DOCS_OUTPUT_FILENAME",
        "BICEP_DOCS_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
