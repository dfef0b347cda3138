from __future__ import annotations

"""
Unit tests for the CommentMap deduplicator.
"""

from bs4 import Comment

from htmlfuse.core.dom.comments import CommentMap


def test_set_keeps_first_node_only() -> None:
    """TC-01: Later duplicates are rejected and the first node kept."""
    cmap = CommentMap()
    first = Comment(" @license MIT ")
    second = Comment(" @license MIT ")

    assert cmap.set(str(first), first) is True
    assert cmap.set(str(second), second) is False
    assert cmap.get(" @license MIT ") is first
    assert len(cmap) == 1


def test_keys_preserve_insertion_order() -> None:
    """TC-02: Keys come back in first-seen order."""
    cmap = CommentMap()
    for text in ["b", "a", "c", "a"]:
        cmap.set(text, Comment(text))

    assert cmap.keys() == ["b", "a", "c"]
    assert list(cmap) == ["b", "a", "c"]


def test_indentation_differences_collapse() -> None:
    """TC-03: The same text indented differently is one entry."""
    cmap = CommentMap()
    cmap.set("\n  @license BSD\n  Copyright X\n", Comment("x"))

    assert cmap.has("@license BSD\nCopyright X")
    assert cmap.set("\n\t@license BSD\n\tCopyright X", Comment("y")) is False


def test_get_unknown_returns_none() -> None:
    """TC-04: Unknown keys are reported as missing."""
    assert CommentMap().get("nothing") is None
