"""
Static resolution of extended list syntax, for export.

Rewrites a document so every number is spelled out:

    #. first            1. first
    #. second           2. second
    (@good) Example     (1) Example
    {::P(#a)} Claim     (P1) Claim
    See (@good).        See (1).

Fancy list markers and definition markers are kept, since plain Markdown
renderers understand neither and Pandoc understands both. Fenced code blocks
are left untouched. In strict mode, list blocks Pandoc would not recognize keep
their markers as written, but references inside them are still resolved.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from listmark.config import ListSettings
from listmark.markers.block_validation import find_invalid_list_lines
from listmark.markers.marker_grammar import (
    CustomLabelMarker,
    ExampleMarker,
    HashMarker,
    ListMarker,
    classify,
    find_code_block_lines,
    render_marker_line,
)
from listmark.numbering.document_state import DocumentNumberingState, ScanReport
from listmark.transforms.cross_references import resolve_references


@dataclass
class ResolutionResult:
    text: str
    report: ScanReport
    warnings: list[str] = field(default_factory=list)


def _numbered_marker(
    i: int, line: str, state: DocumentNumberingState, settings: ListSettings
) -> tuple[ListMarker, str] | None:
    """A marker to rewrite on this line and its resolved marker text, if any."""
    marker = classify(line, custom_labels=settings.custom_labels)
    if isinstance(marker, HashMarker) and i in state.hash_line_numbers:
        return marker, f"{state.hash_line_numbers[i]}."
    elif isinstance(marker, ExampleMarker) and i in state.example_line_numbers:
        return marker, f"({state.example_line_numbers[i]})"
    elif isinstance(marker, CustomLabelMarker):
        processed = state.get_processed_label(marker.raw_label)
        if processed is not None:
            return marker, f"({processed})"
    return None


def resolve_document(
    text: str,
    settings: ListSettings | None = None,
    state: DocumentNumberingState | None = None,
) -> ResolutionResult:
    """
    Scan a document and rewrite its list markers and references as plain numbers.

    Args:
        text: The full Markdown document.
        settings: Engine flags. Defaults to `ListSettings()`.
        state: State to scan into, e.g. from a `DocumentStateRegistry`. A fresh
            one is used if not given.

    Returns:
        ResolutionResult with the resolved text, the scan report, and warnings
        for duplicate labels and unresolved references.
    """
    settings = settings or ListSettings()
    state = state or DocumentNumberingState()
    lines = text.splitlines()

    report = state.scan(lines, custom_labels=settings.custom_labels, strict=settings.strict)
    warnings = list(report.warnings)

    code_lines = find_code_block_lines(lines)
    invalid = find_invalid_list_lines(lines) if settings.strict else set()

    out: list[str] = []
    for i, line in enumerate(lines):
        if i in code_lines:
            out.append(line)
            continue

        numbered = None if i in invalid else _numbered_marker(i, line, state, settings)
        to_resolve = numbered[0].content if numbered else line
        result = resolve_references(to_resolve, state, custom_labels=settings.custom_labels)
        for ref in result.unresolved:
            warnings.append(f"Unresolved reference {ref.text} on line {i + 1}")

        if numbered:
            marker, marker_text = numbered
            out.append(render_marker_line(replace(marker, content=result.text), marker_text))
        else:
            out.append(result.text)

    resolved = "\n".join(out)
    if text.endswith("\n"):
        resolved += "\n"
    return ResolutionResult(text=resolved, report=report, warnings=warnings)
