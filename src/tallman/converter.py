"""
Tall Man conversion engine.

Walks the token stream of the input and replaces every word, or run of words
joined by single spaces or hyphens, that matches a term of the active list
with its Tall Man form. Everything else is copied through unchanged.
"""

from dataclasses import dataclass
from threading import RLock
from typing import Iterator

from .config import load_config
from .models import DEFAULT_LIST_ID
from .registry import TermList, TermRegistry
from .sources import get_default_registry, reset_default_registry
from .tokenizer import Token, tokenize
from .unicode import normalize

# Literal tokens that may join the words of a multi-word term.
SEPARATORS = frozenset({" ", "-"})


@dataclass(frozen=True)
class MatchSpan:
    """A replaced range of the normalized input.

    Attributes:
        start: Offset of the first replaced character
        end: Offset one past the last replaced character
        original: The text that was replaced
        replacement: The Tall Man form written in its place
    """
    start: int
    end: int
    original: str
    replacement: str


def _walk(text: str, term_list: TermList) -> Iterator[Token | MatchSpan]:
    """Yield unmatched tokens and match spans in input order.

    The token list is materialized so the multi-word lookahead can index
    forward; a chain is only extended through single-character space/hyphen
    literals that sit directly between two words.
    """
    tokens = list(tokenize(text))
    count = len(tokens)
    i = 0

    while i < count:
        token = tokens[i]
        if not token.is_word:
            yield token
            i += 1
            continue

        best = term_list.lookup(token.key)
        best_end = i

        composite = token.key
        words = 1
        j = i
        while (
            words < term_list.max_words
            and j + 2 < count
            and tokens[j + 1].text in SEPARATORS
            and tokens[j + 2].is_word
        ):
            composite = f"{composite}{tokens[j + 1].text}{tokens[j + 2].key}"
            j += 2
            words += 1
            replacement = term_list.lookup(composite)
            if replacement is not None:
                best = replacement
                best_end = j

        if best is None:
            yield token
            i += 1
            continue

        start = token.start
        end = tokens[best_end].end
        yield MatchSpan(start, end, text[start:end], best)
        i = best_end + 1


class TallmanConverter:
    """Converts medication names in free text to Tall Man lettering.

    The converter holds no per-call state, so one instance can be shared by
    any number of threads.

    Example:
        >>> registry = TermRegistry()
        >>> registry.load("ISMP", ["predniSONE", "prednisoLONE", "SOLU-MEDROL"])
        TermList('ISMP', 3 entries)
        >>> converter = TallmanConverter(registry)
        >>> converter.convert("Take prednisone, not prednisolone!")
        'Take predniSONE, not prednisoLONE!'
        >>> converter.convert("Administer solu-medrol intravenously", "ISMP")
        'Administer SOLU-MEDROL intravenously'
    """

    def __init__(self, registry: TermRegistry, default_list: str = DEFAULT_LIST_ID) -> None:
        self.registry = registry
        self.default_list = default_list

    def _resolve(self, list_id: str | None) -> TermList:
        return self.registry.get(list_id if list_id is not None else self.default_list)

    def convert(self, text: str | None, list_id: str | None = None) -> str:
        """Convert every known medication name in `text` to Tall Man form.

        Args:
            text: Free text; None is treated as empty
            list_id: Term list to use, defaults to the converter's default list

        Returns:
            The NFC-normalized text with matched terms replaced

        Raises:
            UnknownListError: If `list_id` names no loaded list
        """
        if not text:
            return ""

        term_list = self._resolve(list_id)
        normalized = normalize(text)

        parts: list[str] = []
        for item in _walk(normalized, term_list):
            if isinstance(item, MatchSpan):
                parts.append(item.replacement)
            else:
                parts.append(item.text)
        return "".join(parts)

    def scan(self, text: str | None, list_id: str | None = None) -> list[MatchSpan]:
        """Return the spans `convert` would replace, without rewriting.

        Offsets refer to the NFC-normalized form of `text`.

        Raises:
            UnknownListError: If `list_id` names no loaded list
        """
        if not text:
            return []

        term_list = self._resolve(list_id)
        return [item for item in _walk(normalize(text), term_list) if isinstance(item, MatchSpan)]


_default_converter: TallmanConverter | None = None
_default_lock = RLock()


def get_default_converter() -> TallmanConverter:
    """Return the shared converter over the process-wide registry."""
    global _default_converter
    if _default_converter is not None:
        return _default_converter

    with _default_lock:
        if _default_converter is None:
            registry = get_default_registry()
            _default_converter = TallmanConverter(registry, load_config().default_list)
    return _default_converter


def reset_defaults() -> None:
    """Forget the shared converter and registry; the next call reloads them."""
    global _default_converter
    with _default_lock:
        _default_converter = None
        reset_default_registry()


def convert(text: str | None, list_id: str | None = None) -> str:
    """Convert `text` with the shared converter.

    Example:
        >>> convert("Patient prescribed prednisone")
        'Patient prescribed predniSONE'
    """
    return get_default_converter().convert(text, list_id)


def scan(text: str | None, list_id: str | None = None) -> list[MatchSpan]:
    """Return the spans the shared converter would replace in `text`."""
    return get_default_converter().scan(text, list_id)
