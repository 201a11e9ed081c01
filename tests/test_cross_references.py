"""Tests for inline reference detection and resolution."""

from __future__ import annotations

from listmark.markers.marker_grammar import MarkerKind
from listmark.numbering.document_state import DocumentNumberingState
from listmark.transforms.cross_references import (
    Reference,
    find_references,
    resolve,
    resolve_reference,
    resolve_references,
)


def _state(*lines: str) -> DocumentNumberingState:
    state = DocumentNumberingState()
    state.scan(list(lines))
    return state


class TestFindReferences:
    """Tests for `find_references()`."""

    def test_finds_both_kinds_in_order(self) -> None:
        text = "See {::T1} and (@good)."
        refs = find_references(text)
        assert [(r.kind, r.label) for r in refs] == [
            (MarkerKind.custom_label, "T1"),
            (MarkerKind.example, "good"),
        ]
        assert text[refs[1].start : refs[1].end] == "(@good)"

    def test_reference_text(self) -> None:
        assert Reference(MarkerKind.example, "a", 0, 4).text == "(@a)"
        assert Reference(MarkerKind.custom_label, "P(#a)", 0, 9).text == "{::P(#a)}"

    def test_skips_code_spans(self) -> None:
        refs = find_references("Write `(@good)` to get (@good).")
        assert len(refs) == 1
        assert refs[0].start == 23

    def test_skips_double_backtick_spans(self) -> None:
        assert find_references("``a ` (@x) b``") == []

    def test_custom_labels_disabled(self) -> None:
        refs = find_references("{::T1} (@a)", custom_labels=False)
        assert [r.kind for r in refs] == [MarkerKind.example]

    def test_unlabeled_marker_is_not_a_reference(self) -> None:
        assert find_references("Type (@) for a new example.") == []


class TestResolve:
    """Tests for resolving references against scanned state."""

    def test_example_reference(self) -> None:
        state = _state("(@) first", "(@good) second")
        assert resolve("As (@good) shows.", state) == "As (2) shows."

    def test_custom_label_reference(self) -> None:
        state = _state("{::P(#a)} claim", "{::P(#b)} claim")
        assert resolve("By {::P(#b)} and {::(#a),(#b)}.", state) == "By P2 and 1,2."

    def test_unresolved_left_verbatim(self) -> None:
        state = _state("(@a) x")
        result = resolve_references("(@a), (@nope), {::Q(#z)}", state)
        assert result.text == "(1), (@nope), {::Q(#z)}"
        assert [r.label for r in result.resolved] == ["a"]
        assert [r.label for r in result.unresolved] == ["nope", "Q(#z)"]

    def test_resolve_reference(self) -> None:
        state = _state("(@a) x")
        assert resolve_reference(Reference(MarkerKind.example, "a", 0, 4), state) == "(1)"
        assert resolve_reference(Reference(MarkerKind.example, "b", 0, 4), state) is None

    def test_code_span_untouched(self) -> None:
        state = _state("(@a) x")
        assert resolve("`(@a)` is (@a)", state) == "`(@a)` is (1)"

    def test_resolution_never_advances_counters(self) -> None:
        state = _state("(@a) x", "{::P(#a)} y")
        before = state.snapshot()
        resolve("(@b) (@c) {::P(#new)} (@a) {::P(#a)}", state)
        resolve("(@b) (@c) {::P(#new)} (@a) {::P(#a)}", state)
        assert state.snapshot() == before
        assert state.example_counter == 1

    def test_resolving_twice_is_stable(self) -> None:
        state = _state("(@a) x")
        once = resolve("See (@a).", state)
        assert resolve(once, state) == once

    def test_before_any_scan(self) -> None:
        state = DocumentNumberingState()
        assert resolve("(@a) {::T}", state) == "(@a) {::T}"
