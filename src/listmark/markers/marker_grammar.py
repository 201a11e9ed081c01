"""
Line classification for Pandoc-style extended list markers.

Each line of a document maps to zero or one `ListMarker`:

- `#. item`           -> `HashMarker`
- `{::P(#a)} item`    -> `CustomLabelMarker` (only when custom labels are enabled)
- `A. item`, `iv) item` -> `FancyMarker` (token not yet classified as letter/roman)
- `(@good) item`, `(@) item` -> `ExampleMarker`
- `:   definition`    -> `DefinitionMarker`

Precedence when more than one pattern could match a line is exactly the order
above. A marker must be followed by whitespace: `Z.Z.` is plain text. Lines made
of a marker and nothing else (`B.`, `#.  `) are "empty items" and are recognized
by `classify_empty_item()` instead, for dedent and marker removal when continuing
lists.

Classification is a pure function of a single line. Deciding whether an
ambiguous single letter (`i.`, `v.`) counts as a roman numeral or a letter needs
the surrounding lines and lives in `listmark.markers.disambiguation`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class MarkerKind(str, Enum):
    """The kind of an extended list marker."""

    hash = "hash"
    fancy = "fancy"
    example = "example"
    custom_label = "custom_label"
    definition = "definition"


@dataclass(frozen=True)
class ListPattern:
    """A named, anchored line pattern for one marker kind."""

    name: str
    pattern: str

    @property
    def regex(self) -> re.Pattern[str]:
        return _compiled(self.pattern)


_COMPILED: dict[str, re.Pattern[str]] = {}


def _compiled(pattern: str) -> re.Pattern[str]:
    if pattern not in _COMPILED:
        _COMPILED[pattern] = re.compile(pattern)
    return _COMPILED[pattern]


# Fancy tokens: letters of a single case, or roman numeral characters.
_FANCY_TOKEN = r"[A-Z]+|[a-z]+|[IVXLCDM]+|[ivxlcdm]+"

# Label characters allowed in example markers and references: (@my_label-2)
EXAMPLE_LABEL_CHARS = r"[A-Za-z0-9_-]"

# Marker patterns. Groups: indent, marker parts..., trailing whitespace, content.
HASH_ITEM = ListPattern(
    name="hash_item",
    pattern=r"^(\s*)(#\.)(\s+)(.*)$",
)

CUSTOM_LABEL_ITEM = ListPattern(
    name="custom_label_item",
    pattern=r"^(\s*)\{::([^}]+)\}(\s+)(.*)$",
)

FANCY_ITEM = ListPattern(
    name="fancy_item",
    pattern=rf"^(\s*)({_FANCY_TOKEN})([.)])(\s+)(.*)$",
)

EXAMPLE_ITEM = ListPattern(
    name="example_item",
    pattern=rf"^(\s*)\(@({EXAMPLE_LABEL_CHARS}*)\)(\s+)(.*)$",
)

DEFINITION_ITEM = ListPattern(
    name="definition_item",
    pattern=r"^(\s*)([:~])(\s+)(.*)$",
)

# Empty items: the marker alone, or the marker followed only by whitespace.
EMPTY_HASH_ITEM = ListPattern(name="empty_hash_item", pattern=r"^(\s*)(#\.)(\s*)$")
EMPTY_CUSTOM_LABEL_ITEM = ListPattern(
    name="empty_custom_label_item", pattern=r"^(\s*)\{::([^}]*)\}(\s*)$"
)
EMPTY_FANCY_ITEM = ListPattern(
    name="empty_fancy_item", pattern=rf"^(\s*)({_FANCY_TOKEN})([.)])(\s*)$"
)
EMPTY_EXAMPLE_ITEM = ListPattern(
    name="empty_example_item", pattern=rf"^(\s*)\(@({EXAMPLE_LABEL_CHARS}*)\)(\s*)$"
)
EMPTY_DEFINITION_ITEM = ListPattern(name="empty_definition_item", pattern=r"^(\s*)([:~])(\s*)$")

# Standard Markdown lists, recognized only so they can be excluded or skipped.
DECIMAL_ITEM = ListPattern(name="decimal_item", pattern=r"^(\s*)([0-9]+[.)])")
BULLET_ITEM = ListPattern(name="bullet_item", pattern=r"^(\s*)[-*+]\s+")

# Inline references (searched anywhere in text, not anchored).
EXAMPLE_REFERENCE: re.Pattern[str] = re.compile(rf"\(@({EXAMPLE_LABEL_CHARS}+)\)")
CUSTOM_LABEL_REFERENCE: re.Pattern[str] = re.compile(r"\{::([^}]+)\}")

# Placeholders inside custom labels: {::P(#first)} -> "P1"
PLACEHOLDER: re.Pattern[str] = re.compile(r"\(#([^)]+)\)")

# Fenced code block delimiters (``` or ~~~, three or more).
_CODE_FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")

_INDENT = re.compile(r"^(\s*)")


# === Marker variants ===


@dataclass(frozen=True)
class HashMarker:
    """`#.` auto-numbered item."""

    indent: str
    trailing_space: str
    content: str = ""

    kind = MarkerKind.hash

    @property
    def marker_text(self) -> str:
        return "#."


@dataclass(frozen=True)
class FancyMarker:
    """
    Letter or roman numeral item, e.g. `B)` or `iv.`.

    `token` is the raw marker string. Whether it counts as a letter or a roman
    numeral depends on context and is decided per occurrence.
    """

    indent: str
    token: str
    punctuation: str  # "." or ")"
    trailing_space: str
    content: str = ""

    kind = MarkerKind.fancy

    @property
    def marker_text(self) -> str:
        return f"{self.token}{self.punctuation}"


@dataclass(frozen=True)
class ExampleMarker:
    """`(@label)` example item. `label` is `None` for the unlabeled form `(@)`."""

    indent: str
    label: str | None
    trailing_space: str
    content: str = ""

    kind = MarkerKind.example

    @property
    def marker_text(self) -> str:
        return f"(@{self.label or ''})"


@dataclass(frozen=True)
class CustomLabelMarker:
    """`{::label}` item. `raw_label` may contain `(#name)` placeholders."""

    indent: str
    raw_label: str
    trailing_space: str
    content: str = ""

    kind = MarkerKind.custom_label

    @property
    def marker_text(self) -> str:
        return f"{{::{self.raw_label}}}"


@dataclass(frozen=True)
class DefinitionMarker:
    """`:` or `~` definition line following a term."""

    indent: str
    marker_char: str  # ":" or "~"
    trailing_space: str
    content: str = ""

    kind = MarkerKind.definition

    @property
    def marker_text(self) -> str:
        return self.marker_char


ListMarker = Union[HashMarker, FancyMarker, ExampleMarker, CustomLabelMarker, DefinitionMarker]


def render_marker_line(marker: ListMarker, marker_text: str | None = None) -> str:
    """
    Rebuild a full line from a marker, optionally with different marker text.

    `indent`, `trailing_space` and `content` are reproduced verbatim, so
    `render_marker_line(classify(line)) == line` for every classified line.
    """
    text = marker.marker_text if marker_text is None else marker_text
    return f"{marker.indent}{text}{marker.trailing_space}{marker.content}"


# === Classification ===


def classify(line: str, *, custom_labels: bool = True) -> ListMarker | None:
    """
    Classify a single line, returning its list marker or `None` for plain text.

    Precedence: hash, custom label, fancy, example, definition. Custom label
    markers are only recognized when `custom_labels` is enabled.
    """
    match = HASH_ITEM.regex.match(line)
    if match:
        return HashMarker(
            indent=match.group(1), trailing_space=match.group(3), content=match.group(4)
        )

    if custom_labels:
        match = CUSTOM_LABEL_ITEM.regex.match(line)
        if match:
            return CustomLabelMarker(
                indent=match.group(1),
                raw_label=match.group(2),
                trailing_space=match.group(3),
                content=match.group(4),
            )

    match = FANCY_ITEM.regex.match(line)
    if match and not is_decimal_list_item(line):
        return FancyMarker(
            indent=match.group(1),
            token=match.group(2),
            punctuation=match.group(3),
            trailing_space=match.group(4),
            content=match.group(5),
        )

    match = EXAMPLE_ITEM.regex.match(line)
    if match:
        return ExampleMarker(
            indent=match.group(1),
            label=match.group(2) or None,
            trailing_space=match.group(3),
            content=match.group(4),
        )

    match = DEFINITION_ITEM.regex.match(line)
    if match:
        return DefinitionMarker(
            indent=match.group(1),
            marker_char=match.group(2),
            trailing_space=match.group(3),
            content=match.group(4),
        )

    return None


def classify_empty_item(line: str, *, custom_labels: bool = True) -> ListMarker | None:
    """
    Classify a line that holds only a list marker (optionally followed by spaces).

    Uses the same precedence as `classify()`. The returned marker always has
    empty `content`. An empty custom label `{::}` gives `raw_label == ""`.
    """
    match = EMPTY_HASH_ITEM.regex.match(line)
    if match:
        return HashMarker(indent=match.group(1), trailing_space=match.group(3))

    if custom_labels:
        match = EMPTY_CUSTOM_LABEL_ITEM.regex.match(line)
        if match:
            return CustomLabelMarker(
                indent=match.group(1), raw_label=match.group(2), trailing_space=match.group(3)
            )

    match = EMPTY_FANCY_ITEM.regex.match(line)
    if match:
        return FancyMarker(
            indent=match.group(1),
            token=match.group(2),
            punctuation=match.group(3),
            trailing_space=match.group(4),
        )

    match = EMPTY_EXAMPLE_ITEM.regex.match(line)
    if match:
        return ExampleMarker(
            indent=match.group(1), label=match.group(2) or None, trailing_space=match.group(3)
        )

    match = EMPTY_DEFINITION_ITEM.regex.match(line)
    if match:
        return DefinitionMarker(
            indent=match.group(1), marker_char=match.group(2), trailing_space=match.group(3)
        )

    return None


def is_empty_list_item(line: str) -> bool:
    """
    Whether pressing Enter on this line should end the list rather than continue it.

    Example markers are not included: `(@)` is a complete unlabeled item and
    continues to the next example. Custom labels count only in the bare `{::}`
    form.
    """
    marker = classify_empty_item(line)
    if marker is None:
        return False
    if isinstance(marker, ExampleMarker):
        return False
    if isinstance(marker, CustomLabelMarker):
        return marker.raw_label == ""
    return True


# === Line helpers ===


def get_indent(line: str) -> str:
    """The exact leading whitespace of a line."""
    match = _INDENT.match(line)
    return match.group(1) if match else ""


def is_blank(line: str) -> bool:
    return not line.strip()


def is_decimal_list_item(line: str) -> bool:
    """Whether a line starts a standard numbered list item (`1.`, `2)`)."""
    return DECIMAL_ITEM.regex.match(line) is not None


def is_bullet_list_item(line: str) -> bool:
    return BULLET_ITEM.regex.match(line) is not None


def is_extended_list_item(line: str, *, custom_labels: bool = True) -> bool:
    """Whether a line is a hash, fancy, example or custom label item."""
    marker = classify(line, custom_labels=custom_labels)
    return marker is not None and not isinstance(marker, DefinitionMarker)


def is_list_item(line: str, *, custom_labels: bool = True) -> bool:
    """Whether a line starts any kind of list item, extended or standard."""
    return (
        classify(line, custom_labels=custom_labels) is not None
        or is_bullet_list_item(line)
        or is_decimal_list_item(line)
    )


def find_code_block_lines(lines: list[str]) -> set[int]:
    """
    Return indices of lines inside fenced code blocks, fences included.

    A fence opened with N backticks (or tildes) is closed by a fence of the same
    character at least N long. An unclosed fence runs to the end of the document.
    """
    inside: set[int] = set()
    fence: str | None = None
    for i, line in enumerate(lines):
        match = _CODE_FENCE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                inside.add(i)
        else:
            inside.add(i)
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                if not line.strip()[len(match.group(1)) :].strip():
                    fence = None
    return inside
