"""
Pandoc extended list syntax for Markdown: hash lists, fancy (letter and roman)
lists, example lists, custom labels and definition lists.

Usage::

    from listmark import DocumentNumberingState, resolve

    lines = text.splitlines()
    state = DocumentNumberingState()
    state.scan(lines)
    print(resolve("See (@good).", state))
"""

from listmark.config import ListSettings
from listmark.markers.disambiguation import resolve_sequence_kind
from listmark.markers.marker_grammar import (
    CustomLabelMarker,
    DefinitionMarker,
    ExampleMarker,
    FancyMarker,
    HashMarker,
    ListMarker,
    MarkerKind,
    classify,
)
from listmark.markers.sequences import SequenceKind
from listmark.numbering.document_state import DocumentNumberingState, ScanReport
from listmark.numbering.registry import DocumentStateRegistry
from listmark.transforms.cross_references import resolve, resolve_references
from listmark.transforms.document_resolution import resolve_document
from listmark.transforms.label_index import build_label_index
from listmark.transforms.list_continuation import continue_list, next_list_marker
from listmark.transforms.list_renumbering import (
    LineReplacement,
    apply_replacements,
    renumber_after_insertion,
)

__all__ = [
    "CustomLabelMarker",
    "DefinitionMarker",
    "DocumentNumberingState",
    "DocumentStateRegistry",
    "ExampleMarker",
    "FancyMarker",
    "HashMarker",
    "LineReplacement",
    "ListMarker",
    "ListSettings",
    "MarkerKind",
    "ScanReport",
    "SequenceKind",
    "apply_replacements",
    "build_label_index",
    "classify",
    "continue_list",
    "next_list_marker",
    "renumber_after_insertion",
    "resolve",
    "resolve_document",
    "resolve_references",
    "resolve_sequence_kind",
]
