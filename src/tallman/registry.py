"""
Term registry: named, immutable Tall Man term lists.

The registry is built once at startup and then only read. Lists are keyed by
an upper-case identifier ("AU", "FDA", "ISMP", "NZ", ...). The DEFAULT list
is either a list loaded under that id or, when none was, the union of every
loaded list.
"""

import logging
from threading import RLock
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .models import DEFAULT_LIST_ID, TermEntry

logger = logging.getLogger("tallman")


class TallmanError(Exception):
    """Base class for errors raised by the tallman package."""
    pass


class UnknownListError(TallmanError):
    """Raised when a requested term list has not been loaded."""

    def __init__(self, list_id: str, available: Iterable[str] = ()):
        self.list_id = list_id
        self.available = sorted(available)
        message = f"Unknown Tallman list: {list_id}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class DuplicateKeyError(TallmanError):
    """Raised when two entries of one list fold to the same key."""

    def __init__(self, list_id: str, key: str, existing: str, duplicate: str):
        self.list_id = list_id
        self.key = key
        self.existing = existing
        self.duplicate = duplicate
        super().__init__(
            f"Duplicate key '{key}' in list '{list_id}': "
            f"'{duplicate}' collides with '{existing}'"
        )


class TermList:
    """Read-only mapping of case-folded keys to Tall Man display forms."""

    def __init__(
        self,
        list_id: str,
        entries: Mapping[str, TermEntry],
        version: str | None = None,
        description: str | None = None,
    ) -> None:
        self.list_id = list_id
        self.version = version
        self.description = description
        self._entries = MappingProxyType(dict(entries))
        self.max_words = max((e.word_count for e in self._entries.values()), default=0)

    def lookup(self, key: str) -> str | None:
        """Return the display form for `key`, or None if the key is not a term."""
        entry = self._entries.get(key)
        return entry.display if entry is not None else None

    @property
    def entries(self) -> Mapping[str, TermEntry]:
        return self._entries

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TermEntry]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return f"TermList({self.list_id!r}, {len(self)} entries)"


def build_term_list(
    list_id: str,
    raw_entries: Iterable[str],
    version: str | None = None,
    description: str | None = None,
) -> TermList:
    """Build a TermList from display-form strings.

    Args:
        list_id: Identifier of the list being built
        raw_entries: Tall Man display forms, e.g. ["predniSONE", "prednisoLONE"]
        version: Optional list version
        description: Optional description

    Returns:
        The immutable TermList

    Raises:
        ValueError: If an entry is empty or whitespace only
        DuplicateKeyError: If two entries fold to the same key
    """
    entries: dict[str, TermEntry] = {}
    for position, raw in enumerate(raw_entries):
        display = raw.strip()
        if not display:
            raise ValueError(f"Empty entry at position {position} in list '{list_id}'")
        entry = TermEntry.from_display(display)
        existing = entries.get(entry.key)
        if existing is not None:
            raise DuplicateKeyError(list_id, entry.key, existing.display, display)
        entries[entry.key] = entry
    return TermList(list_id, entries, version=version, description=description)


class TermRegistry:
    """Holds every loaded term list and resolves list identifiers.

    Loading takes a lock; lookups do not, since lists never change once
    registered.

    Example:
        >>> registry = TermRegistry()
        >>> registry.load("ISMP", ["predniSONE", "prednisoLONE"])
        TermList('ISMP', 2 entries)
        >>> registry.get().lookup("prednisone")
        'predniSONE'
        >>> registry.get("FDA")
        Traceback (most recent call last):
        ...
        tallman.registry.UnknownListError: Unknown Tallman list: FDA (available: DEFAULT, ISMP)
    """

    def __init__(self) -> None:
        self._lists: dict[str, TermList] = {}
        self._default: TermList = TermList(DEFAULT_LIST_ID, {})
        self._lock = RLock()

    @staticmethod
    def _normalize_id(list_id: str) -> str:
        return list_id.strip().upper()

    def load(
        self,
        list_id: str,
        raw_entries: Iterable[str],
        *,
        version: str | None = None,
        description: str | None = None,
    ) -> TermList:
        """Build a list from display forms and register it under `list_id`.

        Raises:
            ValueError: If the id is blank or already loaded, or an entry is empty
            DuplicateKeyError: If two entries fold to the same key
        """
        list_id = self._normalize_id(list_id)
        if not list_id:
            raise ValueError("List identifier must not be empty")

        term_list = build_term_list(list_id, raw_entries, version=version, description=description)

        with self._lock:
            if list_id in self._lists:
                raise ValueError(f"Term list '{list_id}' is already loaded")
            self._lists[list_id] = term_list
            self._default = self._build_default()

        logger.info(f"Loaded term list '{list_id}' ({len(term_list)} entries)")
        return term_list

    def _build_default(self) -> TermList:
        explicit = self._lists.get(DEFAULT_LIST_ID)
        if explicit is not None:
            return explicit

        merged: dict[str, TermEntry] = {}
        for term_list in self._lists.values():
            for entry in term_list:
                existing = merged.get(entry.key)
                if existing is None:
                    merged[entry.key] = entry
                elif existing.display != entry.display:
                    logger.debug(
                        f"Aggregate list keeps '{existing.display}' over "
                        f"'{entry.display}' from '{term_list.list_id}'"
                    )
        return TermList(
            DEFAULT_LIST_ID,
            merged,
            description="Aggregate of all loaded lists",
        )

    def get(self, list_id: str | None = None) -> TermList:
        """Return the list named `list_id`, or the default list when omitted.

        Raises:
            UnknownListError: If no list with that identifier is loaded
        """
        if list_id is None:
            return self._default
        normalized = self._normalize_id(list_id)
        if normalized == DEFAULT_LIST_ID:
            return self._default
        term_list = self._lists.get(normalized)
        if term_list is None:
            raise UnknownListError(list_id, self.list_ids())
        return term_list

    def list_ids(self) -> list[str]:
        """Identifiers that `get` accepts, DEFAULT included."""
        ids = set(self._lists)
        ids.add(DEFAULT_LIST_ID)
        return sorted(ids)

    def __contains__(self, list_id: object) -> bool:
        if not isinstance(list_id, str):
            return False
        normalized = self._normalize_id(list_id)
        return normalized == DEFAULT_LIST_ID or normalized in self._lists

    def __len__(self) -> int:
        return len(self._lists)
