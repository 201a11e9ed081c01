"""
Inline cross-reference detection and resolution.

This module provides:
- Detection of example references `(@label)` and custom label references `{::label}`
- Resolution of references to their display form using scanned numbering state

Key concepts:
- Resolution only reads numbering state: it never advances a counter or
  defines a label, so resolving text any number of times changes nothing
- `(@good)` resolves to `(3)` when example `good` is number 3
- `{::P(#a)}` resolves to the processed label, e.g. `P1`
- Unknown references are left exactly as written and reported separately
- Inline code spans (`like this`) are never rewritten
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from listmark.markers.marker_grammar import (
    CUSTOM_LABEL_REFERENCE,
    EXAMPLE_REFERENCE,
    MarkerKind,
)
from listmark.numbering.document_state import DocumentNumberingState

# Backtick code span: a run of N backticks, content, then the same run.
INLINE_CODE_SPAN = re.compile(r"(`+)(?:(?!\1).)+?\1")


@dataclass(frozen=True)
class Reference:
    """An inline reference found in text."""

    kind: MarkerKind
    """`MarkerKind.example` or `MarkerKind.custom_label`."""

    label: str
    """The label as written: `good` for `(@good)`, `P(#a)` for `{::P(#a)}`."""

    start: int
    end: int

    @property
    def text(self) -> str:
        if self.kind == MarkerKind.example:
            return f"(@{self.label})"
        return f"{{::{self.label}}}"


@dataclass
class ResolveResult:
    """
    Result of resolving the references in a piece of text.

    Unresolved references are reported here rather than raised, so a document
    that is still being written resolves as far as it can.
    """

    text: str
    """The text with every resolvable reference replaced."""

    resolved: list[Reference] = field(default_factory=list)

    unresolved: list[Reference] = field(default_factory=list)
    """References whose label is not defined. These are left verbatim."""


def _code_spans(text: str) -> list[tuple[int, int]]:
    return [m.span() for m in INLINE_CODE_SPAN.finditer(text)]


def _in_spans(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


def find_references(text: str, *, custom_labels: bool = True) -> list[Reference]:
    """
    Find all example and custom label references in text, in order of position.

    References inside inline code spans are not included.
    """
    spans = _code_spans(text)
    refs: list[Reference] = []
    for match in EXAMPLE_REFERENCE.finditer(text):
        if not _in_spans(match.start(), spans):
            refs.append(Reference(MarkerKind.example, match.group(1), *match.span()))
    if custom_labels:
        for match in CUSTOM_LABEL_REFERENCE.finditer(text):
            if not _in_spans(match.start(), spans):
                refs.append(Reference(MarkerKind.custom_label, match.group(1), *match.span()))
    refs.sort(key=lambda ref: ref.start)
    return refs


def resolve_reference(ref: Reference, state: DocumentNumberingState) -> str | None:
    """The display form of one reference, or `None` if its label is unknown."""
    if ref.kind == MarkerKind.example:
        number = state.get_example_number(ref.label)
        return f"({number})" if number is not None else None
    return state.resolve_custom_label_reference(ref.label)


def resolve_references(
    text: str, state: DocumentNumberingState, *, custom_labels: bool = True
) -> ResolveResult:
    """
    Replace every resolvable reference in `text` with its display form.

    Args:
        text: Any text: a line, a paragraph, or a whole document.
        state: Numbering state from a scan of the document the text belongs to.
        custom_labels: Also resolve `{::label}` references.

    Returns:
        ResolveResult with the rewritten text and the resolved/unresolved references.
    """
    result = ResolveResult(text=text)
    parts: list[str] = []
    pos = 0
    for ref in find_references(text, custom_labels=custom_labels):
        if ref.start < pos:
            continue  # Overlaps a reference already handled.
        display = resolve_reference(ref, state)
        if display is None:
            result.unresolved.append(ref)
            continue
        parts.append(text[pos : ref.start])
        parts.append(display)
        pos = ref.end
        result.resolved.append(ref)
    parts.append(text[pos:])
    result.text = "".join(parts)
    return result


def resolve(text: str, state: DocumentNumberingState, *, custom_labels: bool = True) -> str:
    """Resolve references in `text`, leaving unknown ones as written."""
    return resolve_references(text, state, custom_labels=custom_labels).text
