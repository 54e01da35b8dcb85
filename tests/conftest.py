"""
Pytest configuration and fixtures for tallman tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing tallman
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from tallman.config import DEFAULT_LIST_ENV, LISTS_DIR_ENV, LOG_LEVEL_ENV
from tallman.converter import TallmanConverter, reset_defaults
from tallman.registry import TermRegistry


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Run every test without TALLMAN_* variables and with fresh shared defaults."""
    for name in (LISTS_DIR_ENV, DEFAULT_LIST_ENV, LOG_LEVEL_ENV):
        # setenv first so the variable is removed again on teardown, even if
        # a .env file loaded during the test sets it.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def registry() -> TermRegistry:
    """Registry with a small ISMP-style list and an AU-style list."""
    r = TermRegistry()
    r.load("ISMP", [
        "predniSONE",
        "prednisoLONE",
        "SOLU-MEDROL",
        "MEDROL",
        "DEPO-Medrol",
        "NovoLOG",
        "NovoLOG Mix",
        "MS Contin",
        "carBAMazepine",
    ])
    r.load("AU", [
        "CARBAMazepine",
        "predniSONE",
        "quiNINE",
    ])
    return r


@pytest.fixture
def converter(registry: TermRegistry) -> TallmanConverter:
    return TallmanConverter(registry)
