"""
Lossless word/literal tokenizer.

Splits text into maximal runs of letters and combining marks (words) and
maximal runs of everything else (literals). Joining the token texts in order
gives back the input exactly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .unicode import code_unit_length, is_letter_or_mark, make_key


class TokenKind(Enum):
    """Kind of token produced by the tokenizer."""
    WORD = "word"
    LITERAL = "literal"


@dataclass(frozen=True)
class Token:
    """A span of the input text.

    Attributes:
        kind: WORD or LITERAL
        text: The exact substring of the input
        start: Offset of the first character in the input
        key: Case-folded lookup key (words only, empty for literals)
    """
    kind: TokenKind
    text: str
    start: int
    key: str = ""

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD


def tokenize(text: str) -> Iterator[Token]:
    """Yield the tokens of `text` from left to right.

    Classification is checked once per code point; a surrogate pair stored as
    two code units is consumed as one unit so it never gets split across
    tokens.

    Args:
        text: Text to tokenize, already NFC-normalized by the caller

    Yields:
        Token objects covering the whole input with no gaps or overlaps

    Example:
        >>> [t.text for t in tokenize("Take prednisone, now")]
        ['Take', ' ', 'prednisone', ', ', 'now']
    """
    start = 0
    i = 0
    length = len(text)
    current_is_word: bool | None = None

    while i < length:
        is_word = is_letter_or_mark(text, i)
        if current_is_word is not None and is_word != current_is_word:
            yield _make_token(text, start, i, current_is_word)
            start = i
        current_is_word = is_word
        i += code_unit_length(text, i)

    if current_is_word is not None:
        yield _make_token(text, start, length, current_is_word)


def _make_token(text: str, start: int, end: int, is_word: bool) -> Token:
    chunk = text[start:end]
    if is_word:
        return Token(TokenKind.WORD, chunk, start, make_key(chunk))
    return Token(TokenKind.LITERAL, chunk, start)


class TokenStream:
    """Restartable token sequence over a fixed text.

    Each iteration starts a fresh scan, so the same stream can be walked
    more than once.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[Token]:
        return tokenize(self.text)

    def __bool__(self) -> bool:
        return bool(self.text)
