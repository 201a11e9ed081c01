"""
Letter and roman numeral sequences for fancy list markers.

This module provides:
- Conversions between integers and single letters (A=1 ... Z=26)
- Conversions between integers and roman numerals (1-3999)
- "Next in sequence" helpers used when continuing a list
- Position-to-token formatting for a given `SequenceKind`

Key concepts:
- Letter sequences are single letters only: there is no `Z` -> `AA` rollover,
  so `next_letter("Z")` returns `None` and callers stop continuing the list
- Output case always follows the case of the input token (or the `upper` flag)
- Roman numerals use standard subtractive notation (IV, IX, XL, ...)
"""

from __future__ import annotations

import re
from enum import Enum


class SequenceKind(str, Enum):
    """How a list marker token counts. Resolved per occurrence, never per token."""

    roman = "roman"  # i, ii, iii / I, II, III
    alpha = "alpha"  # a, b, c / A, B, C
    hash = "hash"  # #. (auto-numbered, fixed marker text)
    unclassified = "unclassified"


ALPHABET_SIZE = 26
ROMAN_MAX = 3999

ROMAN_CHARS_UPPER = frozenset("IVXLCDM")
ROMAN_CHARS_LOWER = frozenset("ivxlcdm")

_ROMAN_VALUES: list[tuple[int, str]] = [
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
]

_VALID_ROMAN = re.compile(r"^M{0,3}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})$")


# === Letters ===


def letter_to_number(letter: str) -> int:
    """Convert a single letter to its 1-based position (A=1, b=2, z=26)."""
    if len(letter) != 1 or not letter.isascii() or not letter.isalpha():
        raise ValueError(f"Not a single letter: {letter!r}")
    return ord(letter.upper()) - ord("A") + 1


def number_to_letter(n: int, upper: bool = True) -> str:
    """Convert a 1-based position to a letter (1=A). Only 1-26 are defined."""
    if not 1 <= n <= ALPHABET_SIZE:
        raise ValueError(f"Letter positions must be 1-{ALPHABET_SIZE}, got {n}")
    letter = chr(ord("A") + n - 1)
    return letter if upper else letter.lower()


def next_letter(letter: str) -> str | None:
    """
    Return the letter after `letter`, preserving case.

    Returns `None` at `Z`/`z`: single-letter sequences terminate there.
    """
    if letter in ("Z", "z"):
        return None
    return chr(ord(letter) + 1)


# === Roman numerals ===


def is_roman_chars(token: str) -> bool:
    """Whether a token consists only of roman numeral characters of a single case."""
    if not token:
        return False
    return all(c in ROMAN_CHARS_UPPER for c in token) or all(
        c in ROMAN_CHARS_LOWER for c in token
    )


def is_valid_roman(token: str) -> bool:
    """
    Whether a token is a well-formed roman numeral (strict subtractive grammar).

    "iv" and "XIV" are valid, "IIII" and "IL" are not. Mixed case is rejected.
    """
    if not token or not is_roman_chars(token):
        return False
    return _VALID_ROMAN.match(token.upper()) is not None


def int_to_roman(n: int, upper: bool = True) -> str:
    """Convert an integer (1-3999) to a roman numeral string."""
    if not 1 <= n <= ROMAN_MAX:
        raise ValueError(f"Roman numerals must be 1-{ROMAN_MAX}, got {n}")
    result: list[str] = []
    for value, numeral in _ROMAN_VALUES:
        while n >= value:
            result.append(numeral)
            n -= value
    roman = "".join(result)
    return roman if upper else roman.lower()


def roman_to_int(s: str) -> int:
    """Convert a roman numeral string (either case) to an integer."""
    values = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}
    result = 0
    prev = 0
    for char in reversed(s.upper()):
        curr = values.get(char, 0)
        if curr < prev:
            result -= curr
        else:
            result += curr
        prev = curr
    return result


def next_roman(roman: str) -> str:
    """Return the roman numeral after `roman`, in the same case."""
    return int_to_roman(roman_to_int(roman) + 1, upper=is_upper_token(roman))


# === Tokens ===


def is_upper_token(token: str) -> bool:
    """Case of a marker token, judged by its first character."""
    return bool(token) and token[0].isupper()


def sequence_token(kind: SequenceKind, n: int, upper: bool = True) -> str | None:
    """
    Format a 1-based position as a marker token of the given kind.

    Returns `None` when the kind has no token for this position (a letter past
    `Z`, a roman numeral past the practical range) or when the kind has no
    positional token at all (hash, unclassified).
    """
    if kind == SequenceKind.alpha:
        if not 1 <= n <= ALPHABET_SIZE:
            return None
        return number_to_letter(n, upper)
    elif kind == SequenceKind.roman:
        if not 1 <= n <= ROMAN_MAX:
            return None
        return int_to_roman(n, upper)
    else:
        return None


def token_value(kind: SequenceKind, token: str) -> int | None:
    """The 1-based position a token stands for, or `None` if not countable."""
    if kind == SequenceKind.roman:
        return roman_to_int(token)
    elif kind == SequenceKind.alpha and len(token) == 1:
        return letter_to_number(token)
    else:
        return None
