"""
Roman-versus-letter disambiguation for fancy list markers.

A marker like `i.` or `C)` could begin (or continue) either a roman numeral list
or an alphabetic one. The source format itself is ambiguous here, so we use the
surrounding lines: a marker continues whatever sequence its earlier siblings
already established.

Rules, in order:
1. Multi-character tokens are unambiguous: roman iff they are valid roman
   numerals (`iv`, `XII`), otherwise alpha (`ab`).
2. A single letter that is not a roman numeral character is alpha.
3. `I`/`i` defaults to roman, unless the nearest prior sibling is `H`/`h`, or a
   sibling with an unambiguous kind says otherwise.
4. Any other single roman letter (`V`, `x`, `C`, ...) inherits the kind of its
   nearest prior sibling. With no prior context it is alpha.

Siblings are earlier non-blank fancy markers at the same indent and punctuation.
The backward scan stops at a line that is not a list marker and at a marker with
less indentation (the parent item). Lines indented deeper than the marker are
nested content and are passed over.
"""

from __future__ import annotations

from collections.abc import Iterator

from listmark.markers.marker_grammar import FancyMarker, HashMarker, classify, is_blank
from listmark.markers.sequences import SequenceKind, is_valid_roman

_ROMAN_LETTERS = frozenset("IVXLCDMivxlcdm")


def token_kind_hint(token: str) -> SequenceKind | None:
    """
    The kind of a token when it can be decided from the token alone.

    Returns `None` for single roman letters (`i`, `V`, `c`, ...), whose kind
    depends on context.
    """
    if len(token) > 1:
        return SequenceKind.roman if is_valid_roman(token) else SequenceKind.alpha
    if token not in _ROMAN_LETTERS:
        return SequenceKind.alpha
    return None


def prior_siblings(lines: list[str], index: int) -> Iterator[FancyMarker]:
    """
    Yield earlier fancy markers at the same level as `lines[index]`, nearest first.
    """
    marker = classify(lines[index])
    if not isinstance(marker, FancyMarker):
        return
    indent_width = len(marker.indent)

    for j in range(index - 1, -1, -1):
        line = lines[j]
        if is_blank(line):
            continue
        prior = classify(line)
        if not isinstance(prior, FancyMarker):
            # Deeper-indented lines are nested items or continuation text.
            if len(line) - len(line.lstrip()) > indent_width:
                continue
            return
        if len(prior.indent) < indent_width:
            return
        if prior.indent != marker.indent or prior.punctuation != marker.punctuation:
            continue
        yield prior


def resolve_sequence_kind(lines: list[str], index: int) -> SequenceKind:
    """
    Resolve the sequence kind of the marker on `lines[index]`.

    Returns `SequenceKind.roman` or `SequenceKind.alpha` for fancy markers,
    `SequenceKind.hash` for `#.` items, and `SequenceKind.unclassified` for
    anything else (including an out-of-range index).
    """
    if not 0 <= index < len(lines):
        return SequenceKind.unclassified
    marker = classify(lines[index])
    if isinstance(marker, HashMarker):
        return SequenceKind.hash
    if not isinstance(marker, FancyMarker):
        return SequenceKind.unclassified

    hint = token_kind_hint(marker.token)
    if hint is not None:
        return hint

    if marker.token in ("I", "i"):
        return _resolve_single_i(lines, index)
    return _inherit_from_siblings(lines, index)


def _resolve_single_i(lines: list[str], index: int) -> SequenceKind:
    for prior in prior_siblings(lines, index):
        if prior.token in ("H", "h"):
            return SequenceKind.alpha
        hint = token_kind_hint(prior.token)
        if hint is not None:
            return hint
    return SequenceKind.roman


def _inherit_from_siblings(lines: list[str], index: int) -> SequenceKind:
    # Walk back through ambiguous siblings: the whole run takes the kind of the
    # first sibling that can be decided, or of the run's first item.
    earliest: str | None = None
    for prior in prior_siblings(lines, index):
        hint = token_kind_hint(prior.token)
        if hint is not None:
            return hint
        earliest = prior.token
    if earliest in ("I", "i"):
        return SequenceKind.roman
    return SequenceKind.alpha
