from __future__ import annotations

"""
Comment Deduplication Map.

Keyed collection of comment nodes preserving first-seen order. Keys are
normalised comment texts, so the same license header indented differently
in two documents still collapses to a single entry.
"""

import re
from typing import Dict, Iterator, List, Optional

from bs4 import Comment

_LINE_INDENT = re.compile(r"^[ \t]+", re.MULTILINE)


class CommentMap:
    """
    Mapping from comment text to the first comment node carrying it.

    Invariant: at most one entry per distinct (normalised) text; later
    duplicates are discarded, never stored.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Comment] = {}

    @staticmethod
    def normalize(text: str) -> str:
        return _LINE_INDENT.sub("", text).strip()

    def has(self, text: str) -> bool:
        return self.normalize(text) in self._entries

    def set(self, text: str, node: Comment) -> bool:
        """
        Record a comment unless its text was already seen.

        Returns:
            bool: True if the node was stored, False for a duplicate.
        """
        key = self.normalize(text)
        if key in self._entries:
            return False
        self._entries[key] = node
        return True

    def get(self, text: str) -> Optional[Comment]:
        return self._entries.get(self.normalize(text))

    def keys(self) -> List[str]:
        """Normalised texts in first-insertion order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
