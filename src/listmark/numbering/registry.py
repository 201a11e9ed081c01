"""
Numbering state keyed by document identity.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator

from listmark.numbering.document_state import DocumentNumberingState, ScanReport


class DocumentStateRegistry:
    """
    Holds one `DocumentNumberingState` per open document.

    State is created on first access, reset explicitly (for example when the
    user asks to restart numbering), and dropped when the document closes.
    States of different documents never share anything.
    """

    def __init__(self) -> None:
        self._states: dict[Hashable, DocumentNumberingState] = {}

    def get(self, doc_id: Hashable) -> DocumentNumberingState:
        """Return the state for a document, creating an empty one if needed."""
        if doc_id not in self._states:
            self._states[doc_id] = DocumentNumberingState()
        return self._states[doc_id]

    def scan(
        self, doc_id: Hashable, text: str, *, custom_labels: bool = True, strict: bool = False
    ) -> ScanReport:
        """Rescan a document's full text and return the scan report."""
        return self.get(doc_id).scan(text.splitlines(), custom_labels=custom_labels, strict=strict)

    def reset(self, doc_id: Hashable) -> None:
        """Reset a document's counters and placeholders. Unknown documents are ignored."""
        state = self._states.get(doc_id)
        if state is not None:
            state.reset()

    def close(self, doc_id: Hashable) -> None:
        """Forget a document entirely."""
        self._states.pop(doc_id, None)

    def clear(self) -> None:
        self._states.clear()

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._states)
