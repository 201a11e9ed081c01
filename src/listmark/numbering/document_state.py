"""
Per-document numbering state for extended lists.

This module provides:
- `DocumentNumberingState`: counters and label maps derived from a full scan
- `ScanReport`: what one scan found, with warnings for duplicate labels
- Read-only lookups used by reference resolution and rendering

Key concepts:
- State is always recomputed by a full top-to-bottom scan, never patched. The
  same text always produces the same numbers.
- List markers write (they advance counters and define labels); inline
  references only read. Nothing in this module is called for references.
- The first definition of a label wins. Later definitions with the same label
  are recorded as duplicates and shown with the first definition's number.
- Lines in fenced code blocks are ignored. In strict mode, so are lines of list
  blocks Pandoc would not recognize.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from listmark.markers.block_validation import find_invalid_list_lines
from listmark.markers.marker_grammar import (
    CustomLabelMarker,
    ExampleMarker,
    HashMarker,
    ListMarker,
    classify,
    find_code_block_lines,
)
from listmark.numbering.placeholders import PlaceholderContext, ordered_placeholders


@dataclass(frozen=True)
class LabeledExample:
    """A labeled example item: its number, trimmed text, and 0-based line."""

    number: int
    content: str
    line: int


@dataclass(frozen=True)
class CustomLabelEntry:
    """The first definition of a processed custom label."""

    raw_label: str
    processed_label: str
    content: str
    line: int


@dataclass
class ScanReport:
    """
    Result of scanning a document.

    `placeholders_reassigned` is True when placeholder numbers from an earlier
    scan were discarded because placeholders now appear in a different order.
    """

    hash_count: int
    example_count: int
    placeholders_reassigned: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class NumberingSnapshot:
    """A copy of all derived state, comparable with `==`."""

    hash_counter: int
    example_counter: int
    labeled_examples: dict[str, LabeledExample]
    example_line_numbers: dict[int, int]
    hash_line_numbers: dict[int, int]
    placeholder_mappings: dict[str, int]
    raw_to_processed_label: dict[str, str]
    custom_labels: dict[str, CustomLabelEntry]
    duplicate_labels: set[str]
    duplicate_custom_labels: set[str]


class DocumentNumberingState:
    """
    Numbers and labels for one document.

    Create one per document (see `DocumentStateRegistry`), call `scan()` with the
    document's lines whenever fresh numbers are needed, then query it. Before the
    first scan every lookup returns `None` or an empty result.
    """

    def __init__(self) -> None:
        self.placeholders = PlaceholderContext()
        self._clear_results()

    def _clear_results(self) -> None:
        self.hash_counter = 0
        self.example_counter = 0
        self.labeled_examples: dict[str, LabeledExample] = {}
        self.example_line_numbers: dict[int, int] = {}
        self.hash_line_numbers: dict[int, int] = {}
        self.raw_to_processed_label: dict[str, str] = {}
        self.custom_labels: dict[str, CustomLabelEntry] = {}
        self.duplicate_labels: set[str] = set()
        self.duplicate_custom_labels: set[str] = set()

    # === Scanning ===

    def scan(
        self, lines: list[str], *, custom_labels: bool = True, strict: bool = False
    ) -> ScanReport:
        """
        Recompute all numbers from the document's lines.

        Args:
            lines: The full document, one entry per line, without newlines.
            custom_labels: Recognize `{::label}` markers.
            strict: Skip list blocks that Pandoc would not treat as lists.

        Returns:
            ScanReport with final counter values and duplicate-label warnings.
        """
        self._clear_results()

        skipped = find_code_block_lines(lines)
        if strict:
            skipped |= find_invalid_list_lines(lines)

        markers: list[tuple[int, ListMarker]] = []
        for i, line in enumerate(lines):
            if i in skipped:
                continue
            marker = classify(line, custom_labels=custom_labels)
            if marker is not None:
                markers.append((i, marker))

        # Placeholder numbers carry over between scans only while their order holds.
        raw_labels = [m.raw_label for _, m in markers if isinstance(m, CustomLabelMarker)]
        had_numbers = bool(self.placeholders.placeholder_mappings())
        reset = self.placeholders.sync_order(ordered_placeholders(raw_labels))
        self.placeholders.clear_labels()

        warnings: list[str] = []
        for i, marker in markers:
            if isinstance(marker, HashMarker):
                self.hash_counter += 1
                self.hash_line_numbers[i] = self.hash_counter
            elif isinstance(marker, ExampleMarker):
                self._scan_example(i, marker, warnings)
            elif isinstance(marker, CustomLabelMarker):
                self._scan_custom_label(i, marker, warnings)

        return ScanReport(
            hash_count=self.hash_counter,
            example_count=self.example_counter,
            placeholders_reassigned=reset and had_numbers,
            warnings=warnings,
        )

    def _scan_example(self, i: int, marker: ExampleMarker, warnings: list[str]) -> None:
        label = marker.label
        if label is None:
            self.example_counter += 1
            self.example_line_numbers[i] = self.example_counter
            return

        first = self.labeled_examples.get(label)
        if first is not None:
            self.duplicate_labels.add(label)
            self.example_line_numbers[i] = first.number
            warnings.append(
                f"Duplicate example label (@{label}) on line {i + 1}"
                f" (first defined on line {first.line + 1})"
            )
            return

        self.example_counter += 1
        self.labeled_examples[label] = LabeledExample(
            number=self.example_counter, content=marker.content.strip(), line=i
        )
        self.example_line_numbers[i] = self.example_counter

    def _scan_custom_label(self, i: int, marker: CustomLabelMarker, warnings: list[str]) -> None:
        processed = self.placeholders.process_label(marker.raw_label)
        self.raw_to_processed_label[marker.raw_label] = processed

        first = self.custom_labels.get(processed)
        if first is not None:
            self.duplicate_custom_labels.add(processed)
            warnings.append(
                f"Duplicate custom label {{::{marker.raw_label}}} ({processed}) on line {i + 1}"
                f" (first defined on line {first.line + 1})"
            )
            return

        self.custom_labels[processed] = CustomLabelEntry(
            raw_label=marker.raw_label,
            processed_label=processed,
            content=marker.content.strip(),
            line=i,
        )

    # === Lookups ===

    def get_example_number(self, label: str) -> int | None:
        entry = self.labeled_examples.get(label)
        return entry.number if entry else None

    def get_example_content(self, label: str) -> str | None:
        entry = self.labeled_examples.get(label)
        return entry.content if entry else None

    def get_processed_label(self, raw_label: str) -> str | None:
        """The display form of a custom label as defined by a list marker."""
        return self.raw_to_processed_label.get(raw_label)

    def resolve_custom_label_reference(self, raw_label: str) -> str | None:
        """
        The display form of a custom label reference, or `None` if undefined.

        Accepts more than `get_processed_label()`: expressions over known
        placeholders and primed variants of defined labels also resolve.
        """
        return self.placeholders.get_processed_label(raw_label)

    @property
    def placeholder_mappings(self) -> dict[str, int]:
        return self.placeholders.placeholder_mappings()

    def snapshot(self) -> NumberingSnapshot:
        return NumberingSnapshot(
            hash_counter=self.hash_counter,
            example_counter=self.example_counter,
            labeled_examples=dict(self.labeled_examples),
            example_line_numbers=dict(self.example_line_numbers),
            hash_line_numbers=dict(self.hash_line_numbers),
            placeholder_mappings=self.placeholder_mappings,
            raw_to_processed_label=dict(self.raw_to_processed_label),
            custom_labels=dict(self.custom_labels),
            duplicate_labels=set(self.duplicate_labels),
            duplicate_custom_labels=set(self.duplicate_custom_labels),
        )

    # === Lifecycle ===

    def reset_placeholders(self) -> None:
        """Discard placeholder numbers. The next scan assigns them from scratch."""
        self.placeholders.reset()

    def reset(self) -> None:
        """Discard everything, as if the document had never been scanned."""
        self._clear_results()
        self.placeholders.reset()
