"""
An index of the labels and terms a document defines.

Lists every labeled example, every custom label and every definition list term,
with a short plain-text summary of the item's content. This is what a label
picker or a sidebar panel would show.

Summaries are plain text: inline Markdown (emphasis, links, code spans) is
parsed with Marko and reduced to its text.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import marko
from marko import inline
from marko.element import Element

from listmark.config import ListSettings
from listmark.markers.marker_grammar import (
    DEFINITION_ITEM,
    find_code_block_lines,
    get_indent,
    is_blank,
    is_list_item,
)
from listmark.numbering.document_state import DocumentNumberingState

SUMMARY_MAX_LEN = 80

# Indented this far, a line continues the previous definition.
CONTINUATION_INDENT = 4


def plain_text(markdown: str) -> str:
    """
    Reduce a fragment of inline Markdown to its text, on one line.

    `**Bold** and [a link](x) with `code`` -> `Bold and a link with code`.
    """
    parts: list[str] = []

    def collect(element: object) -> None:
        if isinstance(element, (inline.RawText, inline.CodeSpan, inline.Literal)):
            assert isinstance(element.children, str)
            parts.append(element.children)
        elif isinstance(element, inline.LineBreak):
            parts.append(" ")
        elif isinstance(element, Element):
            children = getattr(element, "children", None)
            if isinstance(children, list):
                for child in children:  # pyright: ignore[reportUnknownVariableType]
                    collect(child)  # pyright: ignore[reportUnknownArgumentType]
            elif isinstance(children, str):
                parts.append(children)

    collect(marko.parse(markdown))
    return " ".join("".join(parts).split())


def summarize(markdown: str, max_len: int = SUMMARY_MAX_LEN) -> str:
    """Plain text of `markdown`, shortened with an ellipsis past `max_len`."""
    text = plain_text(markdown)
    if len(text) <= max_len:
        return text
    return text[: max_len - 1].rstrip() + "…"


@dataclass(frozen=True)
class ExampleEntry:
    label: str
    number: int
    line: int
    summary: str


@dataclass(frozen=True)
class CustomLabelSummary:
    raw_label: str
    processed_label: str
    line: int
    summary: str


@dataclass(frozen=True)
class DefinitionEntry:
    term: str
    definitions: list[str]
    line: int


@dataclass
class LabelIndex:
    """Everything a document defines, in document order. Lines are 0-based."""

    examples: list[ExampleEntry] = field(default_factory=list)
    custom_labels: list[CustomLabelSummary] = field(default_factory=list)
    definitions: list[DefinitionEntry] = field(default_factory=list)
    duplicate_labels: list[str] = field(default_factory=list)
    duplicate_custom_labels: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def extract_definitions(lines: list[str]) -> list[DefinitionEntry]:
    """
    Find definition list terms and their definitions.

    A term is an unindented, non-list line directly followed (possibly after
    other definitions of the same term) by `:` or `~` lines. Lines indented
    four or more spaces after a definition continue it.
    """
    code_lines = find_code_block_lines(lines)
    entries: list[DefinitionEntry] = []
    term: str | None = None
    term_line = -1
    definitions: list[str] = []
    in_definition = False

    def save() -> None:
        if term is not None and definitions:
            entries.append(DefinitionEntry(term=term, definitions=list(definitions), line=term_line))

    for i, line in enumerate(lines):
        if i in code_lines:
            continue
        match = DEFINITION_ITEM.regex.match(line)
        if match:
            if term is not None:
                in_definition = True
                if match.group(4):
                    definitions.append(match.group(4))
            continue

        if in_definition and not is_blank(line) and definitions:
            if len(get_indent(line).expandtabs(CONTINUATION_INDENT)) >= CONTINUATION_INDENT:
                definitions[-1] += " " + line.strip()
                continue

        if (
            not is_blank(line)
            and len(get_indent(line)) < CONTINUATION_INDENT
            and not is_list_item(line)
        ):
            save()
            term = line.strip()
            term_line = i
            definitions = []
            in_definition = False

    save()
    return entries


def build_label_index(
    text: str,
    settings: ListSettings | None = None,
    state: DocumentNumberingState | None = None,
) -> LabelIndex:
    """
    Scan a document and index its example labels, custom labels and definition terms.
    """
    settings = settings or ListSettings()
    state = state or DocumentNumberingState()
    lines = text.splitlines()
    state.scan(lines, custom_labels=settings.custom_labels, strict=settings.strict)

    index = LabelIndex(
        duplicate_labels=sorted(state.duplicate_labels),
        duplicate_custom_labels=sorted(state.duplicate_custom_labels),
    )
    for label, example in state.labeled_examples.items():
        index.examples.append(
            ExampleEntry(
                label=label,
                number=example.number,
                line=example.line,
                summary=summarize(example.content),
            )
        )
    for entry in state.custom_labels.values():
        index.custom_labels.append(
            CustomLabelSummary(
                raw_label=entry.raw_label,
                processed_label=entry.processed_label,
                line=entry.line,
                summary=summarize(entry.content),
            )
        )
    index.definitions = extract_definitions(lines)
    return index
