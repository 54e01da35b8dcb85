"""
tallman - convert medication names in free text to Tall Man lettering.

Tall Man lettering renders part of a drug name in upper case
("predniSONE" / "prednisoLONE") so look-alike, sound-alike names are easier
to tell apart.
"""

from .converter import MatchSpan, TallmanConverter, convert, get_default_converter, scan
from .models import DEFAULT_LIST_ID, TermEntry, TermListFile
from .registry import (
    DuplicateKeyError,
    TallmanError,
    TermList,
    TermRegistry,
    UnknownListError,
)
from .sources import ListSourceError, get_default_registry, load_bundled_lists, load_directory

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("tallman")
except Exception:
    __version__ = "1.0.0"  # Fallback if metadata unavailable

__all__ = [
    "convert",
    "scan",
    "get_default_converter",
    "get_default_registry",
    "load_bundled_lists",
    "load_directory",
    "DEFAULT_LIST_ID",
    "MatchSpan",
    "TallmanConverter",
    "TermEntry",
    "TermList",
    "TermListFile",
    "TermRegistry",
    "TallmanError",
    "DuplicateKeyError",
    "UnknownListError",
    "ListSourceError",
]
