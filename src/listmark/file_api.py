"""
Applying listmark to text and files.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from listmark.config import ListSettings
from listmark.markers.block_validation import find_invalid_list_lines
from listmark.numbering.registry import DocumentStateRegistry
from listmark.transforms.document_resolution import resolve_document
from listmark.transforms.label_index import build_label_index
from listmark.transforms.list_renumbering import apply_replacements, renumber_document


class Action(str, Enum):
    """What to do with each document."""

    resolve = "resolve"  # Spell out numbers and references for export
    renumber = "renumber"  # Fix fancy list markers, keep extended syntax
    labels = "labels"  # Print the label index as JSON
    check = "check"  # Only report problems


@dataclass
class ProcessResult:
    text: str
    warnings: list[str] = field(default_factory=list)


def process_text(
    text: str,
    action: Action,
    settings: ListSettings | None = None,
    registry: DocumentStateRegistry | None = None,
    doc_id: str = "-",
) -> ProcessResult:
    """
    Run one action over a document's text.

    For `Action.check`, the returned text is the input unchanged. For
    `Action.labels`, it is the JSON label index.
    """
    settings = settings or ListSettings()
    registry = registry or DocumentStateRegistry()
    state = registry.get(doc_id)

    if action == Action.resolve:
        result = resolve_document(text, settings, state)
        return ProcessResult(result.text, result.warnings)

    if action == Action.renumber:
        lines = text.splitlines()
        renumbered = renumber_document(lines)
        warnings: list[str] = []
        if renumbered.overflowed:
            warnings.append(
                "A letter list has more than 26 items; items past Z were not renumbered"
            )
        new_text = "\n".join(apply_replacements(lines, renumbered.replacements))
        if text.endswith("\n"):
            new_text += "\n"
        return ProcessResult(new_text, warnings)

    if action == Action.labels:
        index = build_label_index(text, settings, state)
        return ProcessResult(json.dumps(index.to_dict(), indent=2, ensure_ascii=False) + "\n")

    result = resolve_document(text, settings, state)
    warnings = list(result.warnings)
    if settings.strict:
        lines = text.splitlines()
        for i in sorted(find_invalid_list_lines(lines)):
            warnings.append(f"List item on line {i + 1} is not in a valid Pandoc list block")
    return ProcessResult(text, warnings)


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def process_files(
    files: list[str],
    action: Action,
    settings: ListSettings | None = None,
    *,
    output: str = "-",
    inplace: bool = False,
) -> list[str]:
    """
    Process each file and write results to `output`, or back to each file with
    `inplace`. Returns all warnings, prefixed with the file name.

    Raises `ValueError` for `inplace` with stdin, or `output` with several files.
    """
    if inplace and "-" in files:
        raise ValueError("Cannot use --inplace with stdin")
    if not inplace and output != "-" and len(files) > 1:
        raise ValueError("Cannot write several files to one --output file")

    registry = DocumentStateRegistry()
    warnings: list[str] = []
    for path in files:
        result = process_text(_read(path), action, settings, registry, doc_id=path)
        registry.close(path)
        warnings.extend(f"{path}: {w}" for w in result.warnings)

        if action == Action.check:
            continue
        if inplace and action != Action.labels:
            Path(path).write_text(result.text, encoding="utf-8")
        elif output == "-":
            sys.stdout.write(result.text)
        else:
            out = Path(output)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(result.text, encoding="utf-8")
    return warnings
