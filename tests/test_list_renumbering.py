"""Tests for fancy list block renumbering."""

from __future__ import annotations

import pytest

from listmark.transforms.list_renumbering import (
    LineReplacement,
    apply_replacements,
    find_list_block,
    renumber_after_insertion,
    renumber_document,
)


def _renumber(lines: list[str], index: int) -> list[str]:
    result = renumber_after_insertion(lines, index)
    return apply_replacements(lines, result.replacements)


class TestFindListBlock:
    """Tests for block boundaries."""

    def test_block_bounds(self) -> None:
        lines = ["Intro.", "", "A. one", "B. two", "C. three", "", "After."]
        block = find_list_block(lines, 3)
        assert block is not None
        assert (block.start, block.end, block.items) == (2, 4, [2, 3, 4])

    def test_nested_items_are_passed_over(self) -> None:
        lines = ["A. one", "    i. sub", "    ii. sub", "   continued", "B. two"]
        block = find_list_block(lines, 0)
        assert block is not None
        assert block.items == [0, 4]
        nested = find_list_block(lines, 2)
        assert nested is not None
        assert nested.items == [1, 2]

    def test_not_a_list_item(self) -> None:
        assert find_list_block(["plain"], 0) is None
        assert find_list_block(["(@) ex"], 0) is None
        assert find_list_block(["A. x"], 3) is None


class TestRenumberAfterInsertion:
    """Tests for renumbering after a new item is inserted."""

    def test_letter_insertion(self) -> None:
        lines = ["A. first", "B. inserted", "B. second", "C. third"]
        assert _renumber(lines, 1) == ["A. first", "B. inserted", "C. second", "D. third"]

    def test_minimal_replacements(self) -> None:
        lines = ["A. first", "B. inserted", "B. second", "C. third"]
        result = renumber_after_insertion(lines, 1)
        assert result.replacements == [
            LineReplacement(2, 2, "C. second"),
            LineReplacement(3, 3, "D. third"),
        ]
        assert not result.overflowed

    def test_roman_insertion_keeps_case_and_spacing(self) -> None:
        lines = ["  i)  one", "  ii)  new", "  ii)  two", "  iii)  three"]
        assert _renumber(lines, 1) == [
            "  i)  one",
            "  ii)  new",
            "  iii)  two",
            "  iv)  three",
        ]

    def test_ambiguous_first_item_uses_later_tokens(self) -> None:
        lines = ["v. five", "vi. six", "x. new"]
        assert _renumber(lines, 2) == ["i. five", "ii. six", "iii. new"]

    def test_alpha_run_through_h_i(self) -> None:
        letters = "abcdefghi"
        lines = [f"{c}. item" for c in letters]
        assert renumber_after_insertion(lines, 8).replacements == []

    def test_hash_items_keep_marker(self) -> None:
        lines = ["#. one", "B. two", "#. three", "A. four"]
        assert _renumber(lines, 3) == ["#. one", "B. two", "#. three", "D. four"]

    def test_single_item_block(self) -> None:
        assert renumber_after_insertion(["C. alone"], 0).replacements == []

    def test_blank_line_ends_block(self) -> None:
        lines = ["A. one", "A. two", "", "A. other list"]
        assert _renumber(lines, 1) == ["A. one", "B. two", "", "A. other list"]

    def test_overflow_past_z(self) -> None:
        lines = ["A. item"] * 27
        result = renumber_after_insertion(lines, 0)
        assert result.overflowed
        renumbered = apply_replacements(lines, result.replacements)
        assert renumbered[25] == "Z. item"
        assert renumbered[26] == "A. item"

    def test_round_trip_is_idempotent(self) -> None:
        lines = ["i. a", "i. b", "i. c", "i. d", "i. e"]
        once = _renumber(lines, 0)
        assert once == ["i. a", "ii. b", "iii. c", "iv. d", "v. e"]
        assert renumber_after_insertion(once, 2).replacements == []


class TestRenumberDocument:
    """Tests for whole-document renumbering."""

    def test_all_blocks(self) -> None:
        lines = ["A. one", "C. two", "", "Text.", "", "ii. one", "ii. two", "    a. x", "    c. y"]
        result = renumber_document(lines)
        assert apply_replacements(lines, result.replacements) == [
            "A. one",
            "B. two",
            "",
            "Text.",
            "",
            "i. one",
            "ii. two",
            "    a. x",
            "    b. y",
        ]

    def test_code_blocks_untouched(self) -> None:
        lines = ["```", "A. x", "A. y", "```"]
        assert renumber_document(lines).replacements == []

    def test_wrapped_prose_untouched(self) -> None:
        lines = [
            "This paragraph is hard-wrapped and lists some things, with",
            "etc. and the next line begins with",
            "more. words after it.",
        ]
        assert renumber_document(lines).replacements == []

    def test_block_after_paragraph_line_untouched(self) -> None:
        lines = ["Some text right above:", "a. one", "a. two"]
        assert renumber_document(lines).replacements == []

    def test_nested_block_under_item_is_renumbered(self) -> None:
        lines = ["", "A. parent", "    a. x", "    a. y"]
        result = renumber_document(lines)
        assert apply_replacements(lines, result.replacements)[3] == "    b. y"

    def test_word_tokens_mark_prose(self) -> None:
        lines = ["", "a. one", "etc. two"]
        assert renumber_document(lines).replacements == []

    def test_idempotent(self) -> None:
        lines = ["a) x", "a) y", "a) z"]
        once = apply_replacements(lines, renumber_document(lines).replacements)
        assert renumber_document(once).replacements == []


def test_apply_replacements_out_of_range() -> None:
    with pytest.raises(ValueError):
        apply_replacements(["a"], [LineReplacement(3, 3, "x")])


def test_apply_replacements_multiline() -> None:
    lines = ["a", "b", "c"]
    assert apply_replacements(lines, [LineReplacement(1, 1, "x\ny")]) == ["a", "x", "y", "c"]
