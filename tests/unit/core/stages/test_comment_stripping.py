from __future__ import annotations

"""
Unit tests for the comment stripping stage.
"""

from bs4 import Comment

from htmlfuse.core.pipeline.stages.comments import strip_comments
from htmlfuse.core.services.analyzer import parse_document


def _comments(doc):
    return doc.find_all(string=lambda text: isinstance(text, Comment))


def test_license_comments_are_deduplicated_to_head_top() -> None:
    """TC-01: One copy of each license survives, first in <head>."""
    doc = parse_document(
        "<html><head><title>t</title><!-- /* @license MIT */ --></head>"
        "<body><!-- plain note --><p>x</p><!-- /* @license MIT */ --></body></html>"
    )

    out, removed, kept = strip_comments(doc)

    assert removed == 3
    assert kept == 1
    remaining = _comments(out)
    assert len(remaining) == 1
    assert "@license MIT" in remaining[0]
    assert out.head.contents[0] is remaining[0]


def test_license_order_is_first_seen() -> None:
    """TC-02: Distinct licenses keep the order in which they were met."""
    doc = parse_document(
        "<html><head></head><body>"
        "<!-- @license A --><p>1</p><!-- @license B --><p>2</p><!-- @license A -->"
        "</body></html>"
    )

    strip_comments(doc)

    texts = [str(c).strip() for c in doc.head.contents if isinstance(c, Comment)]
    assert texts == ["@license A", "@license B"]


def test_templated_comments_are_stripped() -> None:
    """TC-03: Comments inside <template> content are stripped too."""
    doc = parse_document(
        "<html><body><template><!-- binding hint --><p>x</p></template><!-- drop me --></body></html>"
    )

    _, removed, kept = strip_comments(doc)

    assert removed == 2
    assert kept == 0
    assert _comments(doc) == []
    assert doc.find("template").find("p") is not None
