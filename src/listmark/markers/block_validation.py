"""
Strict Pandoc list block validation.

Pandoc only recognizes a list when it is separated from surrounding paragraphs:
- a blank line before the first item (a definition term directly before a `:`
  or `~` marker is allowed, since that is how definition lists are written)
- a blank line (or the end of the document) after the last item
- two spaces after a capital letter followed by a period (`A.  item`), since
  `A. Lincoln` is read as a paragraph starting with an initial

In strict mode, every line of a block that breaks one of these rules is
treated as plain text.
"""

from __future__ import annotations

import re

from listmark.markers.marker_grammar import DEFINITION_ITEM, is_blank, is_list_item

# Single capital letter and period: needs at least two spaces before content.
CAPITAL_LETTER_ITEM = re.compile(r"^(\s*)([A-Z])(\.)(\s+)")

# Lazy continuation of an item's text: indented by two spaces or a tab.
_CONTINUATION = re.compile(r"^( {2,}|\t)\S")

# A term line: not indented into code, not itself a definition marker.
_INDENTED_CODE = re.compile(r"^( {4}|\t)")


def _is_definition_term(prev: str, line: str) -> bool:
    return (
        not is_blank(prev)
        and DEFINITION_ITEM.regex.match(prev) is None
        and _INDENTED_CODE.match(prev) is None
        and DEFINITION_ITEM.regex.match(line) is not None
    )


def find_invalid_list_lines(lines: list[str]) -> set[int]:
    """
    Return the indices of list lines that Pandoc would not treat as a list.

    A block is a run of list item lines, together with indented continuation
    lines between items. When a block is invalid, all of its item lines are
    returned.
    """
    invalid: set[int] = set()
    block: list[int] = []
    block_ok = True

    def close_block(ok: bool) -> None:
        if block and not ok:
            invalid.update(i for i in block if is_list_item(lines[i]))
        block.clear()

    for i, line in enumerate(lines):
        if is_list_item(line):
            if not block:
                block_ok = True
                if i > 0 and not is_blank(lines[i - 1]) and not _is_definition_term(
                    lines[i - 1], line
                ):
                    block_ok = False
            block.append(i)

            match = CAPITAL_LETTER_ITEM.match(line)
            if match and len(match.group(4)) < 2:
                block_ok = False
        elif block and not is_blank(line) and _CONTINUATION.match(line):
            block.append(i)
        elif block:
            # A paragraph line directly after the block means no blank separator.
            close_block(block_ok and is_blank(line))

    close_block(block_ok)
    return invalid
