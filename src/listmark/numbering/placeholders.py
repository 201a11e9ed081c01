"""
Placeholder numbering for custom labels.

A custom label like `{::P(#first)}` contains the placeholder `(#first)`. Each
distinct placeholder name is assigned the next integer, in the order names first
appear in the document, so `{::P(#first)}` displays as `P1`. References use the
same syntax (`{::P(#first)}` in running text) and resolve to the same number.

Numbers are only stable while the document order of placeholders is stable.
`PlaceholderContext.sync_order()` compares the current order against the
assigned numbers and starts over when they disagree, so moving a labeled item
renumbers everything consistently instead of leaving stale numbers behind.
"""

from __future__ import annotations

import re

from listmark.markers.marker_grammar import PLACEHOLDER

# What may remain of a label once placeholders are removed for it to count as an
# expression over placeholders (`(#a)+(#b)`, `P(#a),(#b)`) rather than a name.
PURE_EXPRESSION = re.compile(r"^[A-Za-z]?[\s+\-*/,()'\d]*$")

TRAILING_PRIMES = re.compile(r"'+$")


def placeholder_names(raw_label: str) -> list[str]:
    """All placeholder names in a label, in order, repeats included."""
    return [m.group(1) for m in PLACEHOLDER.finditer(raw_label)]


def ordered_placeholders(raw_labels: list[str]) -> list[str]:
    """Distinct placeholder names across labels, in first-seen order."""
    seen: dict[str, None] = {}
    for raw_label in raw_labels:
        for name in placeholder_names(raw_label):
            seen.setdefault(name, None)
    return list(seen)


def is_pure_expression(raw_label: str) -> bool:
    """Whether a label is only placeholders joined by operators and punctuation."""
    return PURE_EXPRESSION.match(PLACEHOLDER.sub("", raw_label)) is not None


def strip_primes(label: str) -> str:
    """`P1'''` -> `P1`."""
    return TRAILING_PRIMES.sub("", label)


class PlaceholderContext:
    """
    Placeholder numbers and processed labels for one document.

    `process_label()` is used for label definitions (list markers) and may assign
    new numbers. `get_processed_label()` is used for references and never does.
    """

    def __init__(self) -> None:
        self._numbers: dict[str, int] = {}
        self._processed: dict[str, str] = {}
        self._defined: set[str] = set()

    def process_label(self, raw_label: str) -> str:
        """Substitute placeholders in a defined label, numbering unseen names."""
        if raw_label in self._processed:
            return self._processed[raw_label]

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in self._numbers:
                self._numbers[name] = len(self._numbers) + 1
            return str(self._numbers[name])

        processed = PLACEHOLDER.sub(substitute, raw_label)
        self._processed[raw_label] = processed
        self._defined.add(processed)
        return processed

    def get_processed_label(self, raw_label: str) -> str | None:
        """
        Resolve a label reference without assigning anything.

        Valid references are:
        - a label exactly as it was defined
        - an expression over known placeholders, like `(#a)+(#b)`
        - a label whose processed form is defined, or is a primed variant of a
          defined label (`P1'` when `P1'''` is defined)

        Returns `None` for anything else, including references to placeholders
        that no definition has introduced.
        """
        if raw_label in self._processed:
            return self._processed[raw_label]

        names = placeholder_names(raw_label)
        if any(name not in self._numbers for name in names):
            return None

        processed = PLACEHOLDER.sub(lambda m: str(self._numbers[m.group(1)]), raw_label)

        if names and is_pure_expression(raw_label):
            return processed

        base = strip_primes(processed)
        if base and base != processed:
            if any(strip_primes(defined) == base for defined in self._defined):
                return processed

        return processed if processed in self._defined else None

    def placeholder_number(self, name: str) -> int | None:
        return self._numbers.get(name)

    def placeholder_mappings(self) -> dict[str, int]:
        """A copy of the current name -> number assignments."""
        return dict(self._numbers)

    def is_label_defined(self, processed_label: str) -> bool:
        return processed_label in self._defined

    def sync_order(self, ordered: list[str]) -> bool:
        """
        Keep placeholder numbers only if they still match document order.

        `ordered` is the list of distinct placeholder names in the order they now
        appear. The existing numbers survive only if there are exactly as many
        of them and the i-th name has number i + 1. Otherwise the context is
        reset. Returns True if it was reset.
        """
        in_order = len(ordered) == len(self._numbers) and all(
            self._numbers.get(name) == i + 1 for i, name in enumerate(ordered)
        )
        if not in_order:
            self.reset()
        return not in_order

    def clear_labels(self) -> None:
        """Forget defined labels but keep placeholder numbers."""
        self._processed.clear()
        self._defined.clear()

    def reset(self) -> None:
        self._numbers.clear()
        self.clear_labels()
