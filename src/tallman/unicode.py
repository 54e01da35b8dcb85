"""
Unicode classification, normalization and case-folding for term matching.
"""

import unicodedata

# General categories that make up a word: all letters and all combining marks.
_WORD_CATEGORIES = frozenset({
    "Lu", "Ll", "Lt", "Lm", "Lo",
    "Mn", "Mc", "Me",
})


def _is_high_surrogate(char: str) -> bool:
    return "\ud800" <= char <= "\udbff"


def _is_low_surrogate(char: str) -> bool:
    return "\udc00" <= char <= "\udfff"


def code_unit_length(text: str, index: int) -> int:
    """Return how many string positions the code point at `index` occupies.

    Python strings are indexed by code point, so this is 1 for anything in
    range. The exception is a surrogate pair stored as two separate code
    units (text decoded with ``surrogatepass``), which counts as 2.

    Args:
        text: Text to examine
        index: Position of the code point

    Returns:
        2 for a surrogate pair, 1 for any other code point, 0 if out of range

    Example:
        >>> code_unit_length("a\\ud83d\\ude00", 1)
        2
        >>> code_unit_length("abc", 3)
        0
    """
    if index < 0 or index >= len(text):
        return 0
    if (
        _is_high_surrogate(text[index])
        and index + 1 < len(text)
        and _is_low_surrogate(text[index + 1])
    ):
        return 2
    return 1


def _code_point_at(text: str, index: int) -> str:
    """Return the single code point starting at `index`, joining surrogate pairs."""
    if code_unit_length(text, index) == 2:
        high = ord(text[index]) - 0xD800
        low = ord(text[index + 1]) - 0xDC00
        return chr(0x10000 + (high << 10) + low)
    return text[index]


def is_letter_or_mark(text: str, index: int) -> bool:
    """Check whether the code point at `index` is a letter or combining mark.

    Letters are the Lu, Ll, Lt, Lm and Lo categories; marks are Mn, Mc and
    Me. Digits, punctuation, whitespace and symbols are not word characters.

    Args:
        text: Text to examine
        index: Position of the code point

    Returns:
        True for letters and marks, False otherwise (including out of range)

    Example:
        >>> is_letter_or_mark("é1", 0)
        True
        >>> is_letter_or_mark("é1", 1)
        False
    """
    if index < 0 or index >= len(text):
        return False
    return unicodedata.category(_code_point_at(text, index)) in _WORD_CATEGORIES


def normalize(text: str) -> str:
    """Compose `text` to NFC so decomposed diacritics compare equal to precomposed ones."""
    return unicodedata.normalize("NFC", text)


def case_fold(text: str) -> str:
    """Return the case-insensitive canonical form of `text`.

    An upper-case pass, a lower-case pass, then full Unicode case folding.
    Dotless ``ı`` folds to ``i`` the way the upper-case round trip maps it,
    ``ß`` folds to ``ss`` and final sigma to sigma. Folding is idempotent.

    Example:
        >>> case_fold("PredniSONE")
        'prednisone'
        >>> case_fold("Straße") == case_fold("STRASSE")
        True
    """
    return text.upper().lower().casefold()


def make_key(text: str) -> str:
    """Build the lookup key for a term or a candidate word sequence."""
    return case_fold(normalize(text))
