"""Tests for document scanning, counters and label maps."""

from __future__ import annotations

from listmark.numbering.document_state import DocumentNumberingState
from listmark.numbering.registry import DocumentStateRegistry
from listmark.transforms.cross_references import resolve

EXAMPLE_DOC = """\
Some examples:

(@a) First labeled example.
(@) An unlabeled one.
(@b) Second labeled example.

See (@a) and (@b).
"""


def _scan(text: str, **kwargs: bool) -> DocumentNumberingState:
    state = DocumentNumberingState()
    state.scan(text.splitlines(), **kwargs)
    return state


# === Examples and hash lists ===


def test_example_numbering() -> None:
    state = _scan(EXAMPLE_DOC)
    assert state.example_counter == 3
    assert state.get_example_number("a") == 1
    assert state.get_example_number("b") == 3
    assert state.get_example_content("a") == "First labeled example."
    assert state.example_line_numbers == {2: 1, 3: 2, 4: 3}
    assert resolve("See (@a) and (@b).", state) == "See (1) and (3)."


def test_end_to_end_without_blank_lines() -> None:
    lines = ["(@a) First", "(@) Second", "(@b) Third", "See (@a) and (@b)."]
    state = DocumentNumberingState()
    state.scan(lines)
    assert state.example_counter == 3
    assert state.get_example_number("a") == 1
    assert state.get_example_number("b") == 3
    assert resolve(lines[3], state) == "See (1) and (3)."


def test_unknown_label() -> None:
    state = _scan(EXAMPLE_DOC)
    assert state.get_example_number("zzz") is None
    assert state.get_example_content("zzz") is None


def test_hash_counter_is_document_wide() -> None:
    state = _scan("#. one\n#. two\n\nText.\n\n#. three\n")
    assert state.hash_counter == 3
    assert state.hash_line_numbers == {0: 1, 1: 2, 5: 3}


def test_hash_and_example_counters_are_independent() -> None:
    state = _scan("#. one\n(@) ex\n#. two\n")
    assert state.hash_counter == 2
    assert state.example_counter == 1


def test_first_occurrence_wins() -> None:
    state = DocumentNumberingState()
    report = state.scan(["(@a) first", "(@) other", "(@a) again"])
    assert state.get_example_number("a") == 1
    assert state.get_example_content("a") == "first"
    assert state.example_counter == 2
    assert state.example_line_numbers[2] == 1
    assert state.duplicate_labels == {"a"}
    assert report.warnings == [
        "Duplicate example label (@a) on line 3 (first defined on line 1)"
    ]


def test_code_blocks_are_ignored() -> None:
    state = _scan("(@a) real\n\n```\n(@b) in code\n#. in code\n```\n")
    assert state.example_counter == 1
    assert state.hash_counter == 0
    assert state.get_example_number("b") is None


def test_strict_skips_invalid_blocks() -> None:
    text = "Paragraph.\n(@a) glued to the paragraph\n\n(@b) valid\n"
    assert _scan(text).example_counter == 2
    strict = _scan(text, strict=True)
    assert strict.example_counter == 1
    assert strict.get_example_number("b") == 1


def test_empty_document() -> None:
    state = DocumentNumberingState()
    report = state.scan([])
    assert report.hash_count == 0
    assert report.example_count == 0
    assert report.warnings == []


# === Custom labels ===


def test_custom_labels_and_placeholders() -> None:
    state = _scan("{::P(#a)} First claim\n{::P(#b)} Second claim\n{::T1} A theorem\n")
    assert state.placeholder_mappings == {"a": 1, "b": 2}
    assert state.get_processed_label("P(#b)") == "P2"
    assert state.get_processed_label("T1") == "T1"
    assert state.custom_labels["P1"].content == "First claim"
    assert state.resolve_custom_label_reference("(#a)+(#b)") == "1+2"


def test_repeated_placeholder_reuses_number() -> None:
    state = _scan("{::P(#a)} one\n{::Q(#b)} two\n{::R(#a)} three\n")
    assert state.placeholder_mappings == {"a": 1, "b": 2}
    assert state.get_processed_label("R(#a)") == "R1"


def test_custom_labels_disabled() -> None:
    state = _scan("{::P(#a)} claim\n", custom_labels=False)
    assert state.custom_labels == {}
    assert state.placeholder_mappings == {}


def test_duplicate_custom_label() -> None:
    state = DocumentNumberingState()
    report = state.scan(["{::T1} one", "{::T1} two"])
    assert state.duplicate_custom_labels == {"T1"}
    assert state.custom_labels["T1"].line == 0
    assert len(report.warnings) == 1


def test_placeholders_follow_document_order() -> None:
    state = DocumentNumberingState()
    first = state.scan(["{::P(#a)} one", "{::P(#b)} two"])
    assert state.placeholder_mappings == {"a": 1, "b": 2}
    assert first.placeholders_reassigned is False

    moved = state.scan(["{::P(#b)} two", "{::P(#a)} one"])
    assert state.placeholder_mappings == {"b": 1, "a": 2}
    assert state.get_processed_label("P(#b)") == "P1"
    assert moved.placeholders_reassigned is True


def test_stable_order_keeps_numbers() -> None:
    state = DocumentNumberingState()
    state.scan(["{::P(#a)} one", "{::P(#b)} two"])
    report = state.scan(["{::P(#a)} one", "", "{::P(#b)} two"])
    assert report.placeholders_reassigned is False
    assert state.placeholder_mappings == {"a": 1, "b": 2}


# === Lifecycle ===


def test_scan_is_idempotent() -> None:
    lines = (EXAMPLE_DOC + "#. x\n{::P(#a)} claim\n").splitlines()
    state = DocumentNumberingState()
    state.scan(lines)
    before = state.snapshot()
    state.scan(lines)
    assert state.snapshot() == before


def test_references_do_not_change_state() -> None:
    state = _scan(EXAMPLE_DOC + "{::P(#a)} claim\n")
    before = state.snapshot()
    for _ in range(3):
        resolve("(@a) (@b) (@missing) {::P(#a)} {::P(#zzz)} {::(#a)+(#q)}", state)
    assert state.snapshot() == before


def test_same_content_gives_same_numbers() -> None:
    assert _scan(EXAMPLE_DOC).snapshot() == _scan(EXAMPLE_DOC).snapshot()


def test_reset() -> None:
    state = _scan(EXAMPLE_DOC + "{::P(#a)} claim\n")
    state.reset()
    assert state.example_counter == 0
    assert state.labeled_examples == {}
    assert state.placeholder_mappings == {}


def test_reset_placeholders() -> None:
    state = _scan("{::P(#a)} claim\n")
    state.reset_placeholders()
    assert state.placeholder_mappings == {}
    report = state.scan(["{::P(#a)} claim"])
    assert report.placeholders_reassigned is False
    assert state.placeholder_mappings == {"a": 1}


# === Registry ===


class TestDocumentStateRegistry:
    """Tests for per-document state isolation."""

    def test_get_creates_state(self) -> None:
        registry = DocumentStateRegistry()
        assert "doc" not in registry
        state = registry.get("doc")
        assert "doc" in registry
        assert registry.get("doc") is state

    def test_documents_are_isolated(self) -> None:
        registry = DocumentStateRegistry()
        registry.scan("one.md", "(@a) x\n(@b) y\n")
        registry.scan("two.md", "(@b) only\n")
        assert registry.get("one.md").get_example_number("b") == 2
        assert registry.get("two.md").get_example_number("b") == 1
        assert registry.get("two.md").get_example_number("a") is None

    def test_reset_and_close(self) -> None:
        registry = DocumentStateRegistry()
        registry.scan("doc", "(@a) x\n")
        registry.reset("doc")
        assert registry.get("doc").example_counter == 0
        registry.reset("unknown")
        registry.close("doc")
        assert "doc" not in registry
        assert len(registry) == 0

    def test_iter_and_clear(self) -> None:
        registry = DocumentStateRegistry()
        registry.get("a")
        registry.get("b")
        assert sorted(registry) == ["a", "b"]
        registry.clear()
        assert len(registry) == 0
