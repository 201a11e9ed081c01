"""
List continuation: what pressing Enter, Tab or Shift-Tab does on a list line.

These are pure text transforms over a document's lines. An editor integration
applies the returned edit and places the cursor.

Enter on a list item:
- with content: a new line with the next marker is inserted below (`B.` after
  `A.`, `iv)` after `iii)`, `#.` after `#.`, `(@)` after any example, `{::}`
  after any custom label, the same `:`/`~` after a definition)
- empty (`B. ` with no text): if nested two or more levels deep, the item moves
  up one level and takes the next marker of the item above it at that level,
  looking back no further than a blank line; otherwise the marker is removed
- on an indented continuation line of an item: a new item is inserted below,
  continuing the item the text belongs to

A letter list ends at `Z`: Enter on a `Z.` item inserts nothing. Standard
Markdown lists (`1.`, `-`) are left to the editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from listmark.config import ListSettings
from listmark.markers.disambiguation import resolve_sequence_kind, token_kind_hint
from listmark.markers.marker_grammar import (
    CustomLabelMarker,
    DefinitionMarker,
    ExampleMarker,
    FancyMarker,
    HashMarker,
    ListMarker,
    MarkerKind,
    classify,
    classify_empty_item,
    get_indent,
    is_blank,
    is_empty_list_item,
    is_list_item,
)
from listmark.markers.sequences import ROMAN_MAX, SequenceKind, next_letter, next_roman, roman_to_int
from listmark.transforms.list_renumbering import (
    LineReplacement,
    apply_replacements,
    renumber_after_insertion,
)

INDENT_WIDTH = 4
INDENT_UNIT = " " * INDENT_WIDTH


@dataclass(frozen=True)
class NextMarker:
    """The marker that continues a list, with the indent and spacing to use."""

    kind: MarkerKind
    indent: str
    marker: str
    spaces: str = " "

    @property
    def line(self) -> str:
        return f"{self.indent}{self.marker}{self.spaces}"

    @property
    def cursor_column(self) -> int:
        """Where typing resumes: inside `(@)` and `{::}`, else after the spaces."""
        if self.kind in (MarkerKind.example, MarkerKind.custom_label):
            return len(self.indent) + len(self.marker) - 1
        return len(self.line)


@dataclass
class ListEdit:
    """
    The document after a list edit, and where the cursor goes.

    `replacements` lists the renumbering changes that were applied, if any.
    """

    lines: list[str]
    cursor_line: int
    cursor_column: int
    replacements: list[LineReplacement] = field(default_factory=list)
    overflowed: bool = False


def _marker_at(line: str, custom_labels: bool) -> ListMarker | None:
    return classify(line, custom_labels=custom_labels) or classify_empty_item(
        line, custom_labels=custom_labels
    )


def _fancy_kind(lines: list[str], index: int, marker: FancyMarker) -> SequenceKind:
    kind = resolve_sequence_kind(lines, index)
    if kind in (SequenceKind.roman, SequenceKind.alpha):
        return kind
    # Marker-only lines are not classified by the full grammar.
    hint = token_kind_hint(marker.token)
    if hint is not None:
        return hint
    return SequenceKind.roman if marker.token in ("I", "i") else SequenceKind.alpha


def next_list_marker(
    lines: list[str], index: int, settings: ListSettings | None = None
) -> NextMarker | None:
    """
    The marker for a new item after `lines[index]`, or `None` if there is none.

    `None` means the line is not an extended list item, or its sequence has no
    next value (a letter list at `Z`, a multi-letter alphabetic token).
    """
    settings = settings or ListSettings()
    if not 0 <= index < len(lines):
        return None
    marker = _marker_at(lines[index], settings.custom_labels)
    if marker is None:
        return None
    spaces = marker.trailing_space or " "

    if isinstance(marker, HashMarker):
        return NextMarker(MarkerKind.hash, marker.indent, "#.", spaces)
    elif isinstance(marker, CustomLabelMarker):
        return NextMarker(MarkerKind.custom_label, marker.indent, "{::}", spaces)
    elif isinstance(marker, ExampleMarker):
        return NextMarker(MarkerKind.example, marker.indent, "(@)", spaces)
    elif isinstance(marker, DefinitionMarker):
        return NextMarker(MarkerKind.definition, marker.indent, marker.marker_char, spaces)

    token = marker.token
    if _fancy_kind(lines, index, marker) == SequenceKind.roman:
        if roman_to_int(token) >= ROMAN_MAX:
            return None
        next_token: str | None = next_roman(token)
    else:
        next_token = next_letter(token) if len(token) == 1 else None
    if next_token is None:
        return None
    return NextMarker(MarkerKind.fancy, marker.indent, f"{next_token}{marker.punctuation}", spaces)


def remove_indent_level(indent: str) -> str:
    """Drop one indent level: four spaces, a tab, or whatever spaces remain."""
    if indent.startswith(INDENT_UNIT):
        return indent[INDENT_WIDTH:]
    elif indent.startswith("\t"):
        return indent[1:]
    else:
        return indent[min(INDENT_WIDTH, len(indent)) :]


def _indent_columns(indent: str) -> int:
    return len(indent.expandtabs(INDENT_WIDTH))


def _continued_item(lines: list[str], index: int, custom_labels: bool) -> int | None:
    """For an indented continuation line, the index of the item it belongs to."""
    for i in range(index - 1, -1, -1):
        line = lines[i]
        if is_blank(line):
            continue
        marker = classify(line, custom_labels=custom_labels)
        if marker is not None and not isinstance(marker, DefinitionMarker):
            return i
        if not get_indent(line):
            return None
    return None


def _is_continuation_line(line: str) -> bool:
    indent = get_indent(line)
    return not is_blank(line) and (len(indent) >= 2 or "\t" in indent)


def _dedent_empty_item(lines: list[str], index: int, settings: ListSettings) -> ListEdit:
    line = lines[index]
    indent = get_indent(line)
    new_lines = list(lines)

    new_indent = remove_indent_level(indent)
    if new_indent:
        # The parent item must be in the same list: a blank line or shallower
        # text ends the search.
        width = _indent_columns(new_indent)
        for i in range(index - 1, -1, -1):
            prev = lines[i]
            if is_blank(prev):
                break
            prev_width = _indent_columns(get_indent(prev))
            if prev_width < width:
                break
            if prev_width != width:
                continue
            next_marker = next_list_marker(lines, i, settings)
            if next_marker is not None:
                new_lines[index] = next_marker.line
                return ListEdit(new_lines, index, len(next_marker.line))

    new_lines[index] = ""
    return ListEdit(new_lines, index, 0)


def continue_list(
    lines: list[str], index: int, settings: ListSettings | None = None
) -> ListEdit | None:
    """
    Apply Enter at the end of `lines[index]`.

    Args:
        lines: The document's lines.
        index: 0-based index of the line the cursor is on.
        settings: Engine flags. `custom_labels` gates `{::label}` items and
            `auto_renumber` renumbers a fancy block after an item is inserted.
            Defaults to `ListSettings()`.

    Returns:
        The resulting edit, or `None` when the line is not an extended list item
        (or continuation of one) and the editor should handle Enter itself.
    """
    settings = settings or ListSettings()
    if not 0 <= index < len(lines):
        return None
    line = lines[index]

    if is_empty_list_item(line):
        return _dedent_empty_item(lines, index, settings)

    source = index
    if _marker_at(line, settings.custom_labels) is None:
        if is_list_item(line) or not _is_continuation_line(line):
            return None
        item = _continued_item(lines, index, settings.custom_labels)
        if item is None:
            return None
        source = item

    next_marker = next_list_marker(lines, source, settings)
    if next_marker is None:
        return None

    new_lines = list(lines)
    new_lines.insert(index + 1, next_marker.line)
    edit = ListEdit(new_lines, index + 1, next_marker.cursor_column)

    if settings.auto_renumber and next_marker.kind == MarkerKind.fancy:
        result = renumber_after_insertion(new_lines, index + 1)
        edit.lines = apply_replacements(new_lines, result.replacements)
        edit.replacements = result.replacements
        edit.overflowed = result.overflowed
    return edit


def indent_list_item(line: str) -> str | None:
    """Tab on a list item: nest it one level deeper. `None` for non-list lines."""
    if not is_list_item(line) and classify_empty_item(line) is None:
        return None
    return INDENT_UNIT + line


def dedent_list_item(line: str) -> str | None:
    """Shift-Tab on a list item: move it up one level. `None` if it can't move."""
    if not is_list_item(line) and classify_empty_item(line) is None:
        return None
    indent = get_indent(line)
    if not indent:
        return None
    return remove_indent_level(indent) + line[len(indent) :]
