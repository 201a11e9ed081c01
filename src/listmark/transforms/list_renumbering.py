"""
Renumbering of fancy list blocks.

When an item is inserted into the middle of a letter or roman numeral list, the
items after it need new markers:

    A. first              A. first
    B. inserted    ->     B. inserted
    B. second             C. second
    C. third              D. third

BLOCKS
------
A block is the run of non-blank list lines around a given line. Scanning in each
direction from that line:
- a `#.` or fancy item at the same indent belongs to the block
- a line indented deeper is nested content and is passed over
- a line at lesser indent (the parent item), a blank line, or any other line
  ends the block

SEQUENCE KIND
-------------
All items in a block share one kind, anchored at the start of the block:
- the first item's own kind, when its token decides it (`B`, `ii`, `xiv`)
- otherwise the kind of the first later item whose token decides it, so
  `v. / vi.` is roman and `c. / d.` is alpha
- otherwise roman for `I`/`i` and alpha for any other letter

Later items whose tokens decide their own kind keep it.

OUTPUT
------
Each item's new token is its 1-based position in the block, in its kind and in
the case of its own current token. `#.` items keep their marker. Only lines
whose text actually changes produce a `LineReplacement`; indent, punctuation,
spacing and content are kept verbatim.

Renumbering stops at the first position that has no token (a letter list past
`Z`): earlier replacements are kept and the result is flagged `overflowed`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from listmark.markers.disambiguation import token_kind_hint
from listmark.markers.marker_grammar import (
    FancyMarker,
    HashMarker,
    classify,
    classify_empty_item,
    find_code_block_lines,
    get_indent,
    is_blank,
    is_list_item,
    render_marker_line,
)
from listmark.markers.sequences import SequenceKind, is_upper_token, sequence_token


@dataclass(frozen=True)
class LineReplacement:
    """Replace lines `start_line..end_line` (0-based, inclusive) with `text`."""

    start_line: int
    end_line: int
    text: str


@dataclass
class RenumberResult:
    replacements: list[LineReplacement] = field(default_factory=list)
    overflowed: bool = False
    """True if a position had no token (e.g. a 27th letter) and renumbering stopped."""


@dataclass(frozen=True)
class ListBlock:
    """Bounds of a block and its equal-indent items, in document order."""

    start: int
    end: int
    indent: str
    items: list[int]


def _block_marker(line: str) -> HashMarker | FancyMarker | None:
    """A `#.` or fancy marker on a line, including marker-only lines."""
    marker = classify(line, custom_labels=False) or classify_empty_item(
        line, custom_labels=False
    )
    if isinstance(marker, (HashMarker, FancyMarker)):
        return marker
    return None


def find_list_block(lines: list[str], index: int) -> ListBlock | None:
    """
    Find the block containing `lines[index]`, or `None` if it is not a list item.
    """
    if not 0 <= index < len(lines):
        return None
    marker = _block_marker(lines[index])
    if marker is None:
        return None
    indent = marker.indent

    def walk(step: int) -> list[int]:
        found: list[int] = []
        i = index + step
        while 0 <= i < len(lines):
            line = lines[i]
            if is_blank(line):
                break
            other = _block_marker(line)
            width = len(other.indent) if other else len(get_indent(line))
            if width < len(indent):
                break
            if other is None:
                if width == len(indent):
                    break
            elif other.indent == indent:
                found.append(i)
            i += step
        return found

    before = walk(-1)
    after = walk(1)
    items = list(reversed(before)) + [index] + after
    return ListBlock(start=items[0], end=items[-1], indent=indent, items=items)


def _anchor_kind(markers: list[FancyMarker]) -> SequenceKind:
    for marker in markers:
        hint = token_kind_hint(marker.token)
        if hint is not None:
            return hint
    return SequenceKind.roman if markers[0].token in ("I", "i") else SequenceKind.alpha


def renumber_block(lines: list[str], block: ListBlock) -> RenumberResult:
    """Compute replacements that renumber one block's items from 1."""
    result = RenumberResult()
    if len(block.items) <= 1:
        return result

    items = [(i, _block_marker(lines[i])) for i in block.items]
    fancy = [m for _, m in items if isinstance(m, FancyMarker)]
    if not fancy:
        return result
    anchor = _anchor_kind(fancy)

    for position, (line_index, marker) in enumerate(items, start=1):
        if not isinstance(marker, FancyMarker):
            continue
        kind = token_kind_hint(marker.token) or anchor
        token = sequence_token(kind, position, upper=is_upper_token(marker.token))
        if token is None:
            result.overflowed = True
            break
        if token == marker.token:
            continue
        text = render_marker_line(marker, f"{token}{marker.punctuation}")
        if text != lines[line_index]:
            result.replacements.append(LineReplacement(line_index, line_index, text))
    return result


def renumber_after_insertion(lines: list[str], inserted_index: int) -> RenumberResult:
    """
    Renumber the block around a newly inserted item.

    Args:
        lines: The document after the insertion.
        inserted_index: 0-based index of the inserted item's line.

    Returns:
        RenumberResult with the minimal line replacements. Empty when the line is
        not a list item or its block has a single item.
    """
    block = find_list_block(lines, inserted_index)
    if block is None:
        return RenumberResult()
    return renumber_block(lines, block)


def _interrupts_paragraph(lines: list[str], block: ListBlock) -> bool:
    """Whether the block starts right after a paragraph line at its own level or shallower."""
    if block.start == 0:
        return False
    prev = lines[block.start - 1]
    if is_blank(prev) or is_list_item(prev):
        return False
    return len(get_indent(prev)) <= len(block.indent)


def _has_word_token(lines: list[str], block: ListBlock) -> bool:
    """Whether any item token is a multi-letter word rather than a roman numeral."""
    for i in block.items:
        marker = _block_marker(lines[i])
        if (
            isinstance(marker, FancyMarker)
            and len(marker.token) > 1
            and token_kind_hint(marker.token) == SequenceKind.alpha
        ):
            return True
    return False


def renumber_document(lines: list[str]) -> RenumberResult:
    """
    Renumber every fancy list block in a document.

    Fenced code is left alone, and so are blocks Pandoc would read as paragraph
    text: those directly after a paragraph line, and those with a word such as
    `etc.` in marker position.
    """
    result = RenumberResult()
    code_lines = find_code_block_lines(lines)
    done: set[int] = set()
    for i, line in enumerate(lines):
        if i in done or i in code_lines:
            continue
        if not isinstance(_block_marker(line), FancyMarker):
            continue
        block = find_list_block(lines, i)
        if block is None or any(j in code_lines for j in range(block.start, block.end + 1)):
            continue
        done.update(block.items)
        if _interrupts_paragraph(lines, block) or _has_word_token(lines, block):
            continue
        block_result = renumber_block(lines, block)
        result.replacements.extend(block_result.replacements)
        result.overflowed = result.overflowed or block_result.overflowed
    result.replacements.sort(key=lambda r: r.start_line)
    return result


def apply_replacements(lines: list[str], replacements: list[LineReplacement]) -> list[str]:
    """Return a copy of `lines` with replacements applied. Replacements must not overlap."""
    new_lines = list(lines)
    for rep in sorted(replacements, key=lambda r: r.start_line, reverse=True):
        if not 0 <= rep.start_line <= rep.end_line < len(new_lines):
            raise ValueError(
                f"Replacement lines {rep.start_line}-{rep.end_line} out of range"
                f" for {len(new_lines)} lines"
            )
        new_lines[rep.start_line : rep.end_line + 1] = rep.text.split("\n")
    return new_lines
