from __future__ import annotations

"""
Unit tests for the Flattener.

Import trees are assembled by hand from parsed documents so every policy
branch can be exercised without touching the filesystem.
"""

import os
from typing import List, Optional

import pytest
from bs4 import BeautifulSoup, Comment

from htmlfuse.core.pipeline.stages.flattener import (
    Flattener,
    collect_import_content,
    fix_fake_external_scripts,
)
from htmlfuse.core.policy.matchers import ImportPolicy
from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.core.services.analyzer import parse_document
from htmlfuse.domain.errors import LegacyMarkupError
from htmlfuse.domain.import_models import ImportEdge, ImportTree
from htmlfuse.domain.pipeline_models import BundleStats


def _tree(href: str, markup: str, children: Optional[List[ImportEdge]] = None) -> ImportTree:
    """Build a tree whose import sites are the document's import links."""
    doc = parse_document(markup)
    sites = doc.find_all("link", rel="import")
    return ImportTree(href=href, document=doc, imports=children or [], import_sites=sites)


def _flattener(policy: Optional[ImportPolicy] = None, stats: Optional[BundleStats] = None) -> Flattener:
    return Flattener(policy or ImportPolicy(), PathResolver(), stats)


def _hidden_containers(doc: BeautifulSoup):
    return doc.find_all("div", attrs={"by-htmlfuse": True})


def test_root_head_scripts_move_into_hidden_container() -> None:
    """TC-01: Head scripts of the root end up in a hidden container at the top of <body>."""
    root = _tree(
        "/index.html",
        '<html><head><script src="r.js"></script><title>t</title></head><body><p>x</p></body></html>',
    )

    doc = _flattener().flatten(root, is_root=True)

    container = doc.body.contents[0]
    assert container.name == "div" and container.has_attr("hidden")
    assert container.find("script")["src"] == "r.js"
    assert doc.head.find("script") is None
    assert doc.head.find("title") is not None


def test_imported_content_replaces_site_in_order() -> None:
    """TC-02: Imports are merged depth-first, in document order."""
    b = _tree("/b.html", '<html><head><script src="b.js"></script></head><body><p id="b">B</p></body></html>')
    a = _tree("/a.html", '<html><head><script src="a.js"></script></head><body><p id="a">A</p></body></html>')
    root = _tree(
        "/index.html",
        '<html><head><link rel="import" href="a.html"><link rel="import" href="b.html"></head>'
        '<body><p id="root">R</p></body></html>',
        [ImportEdge("/a.html", a), ImportEdge("/b.html", b)],
    )
    stats = BundleStats()

    html = str(_flattener(stats=stats).flatten(root, is_root=True))

    assert html.index('src="a.js"') < html.index('id="a"') < html.index('src="b.js"') < html.index('id="b"')
    assert 'rel="import"' not in html
    assert len(_hidden_containers(BeautifulSoup(html, "lxml"))) == 1
    assert stats.documents == 3
    assert stats.imports_merged == 2


def test_nested_import_urls_are_rewritten_for_the_importer() -> None:
    """TC-03: References of an import are relative to the importing document."""
    imp = _tree("/els/x.html", '<html><body><img src="img/x.png"></body></html>')
    root = _tree(
        "/index.html",
        '<html><head><link rel="import" href="els/x.html"></head><body></body></html>',
        [ImportEdge("/els/x.html", imp)],
    )

    doc = _flattener().flatten(root, is_root=True)

    assert doc.find("img")["src"] == "els/img/x.png"


def test_duplicate_edges_are_removed() -> None:
    """TC-04: A duplicate edge contributes nothing."""
    a = _tree("/a.html", '<html><body><p id="a">A</p></body></html>')
    root = _tree(
        "/index.html",
        '<html><head><link rel="import" href="a.html"><link rel="import" href="a.html"></head><body></body></html>',
        [ImportEdge("/a.html", a), ImportEdge(None)],
    )
    stats = BundleStats()

    doc = _flattener(stats=stats).flatten(root, is_root=True)

    assert len(doc.find_all(id="a")) == 1
    assert doc.find("link") is None
    assert stats.duplicates_removed == 1


def test_stripped_and_excluded_edges() -> None:
    """TC-05: Stripped imports vanish; excluded imports stay untouched."""
    root = _tree(
        "/index.html",
        '<html><head>'
        '<link rel="import" href="strip.html">'
        '<link rel="import" href="vendor/lib.html">'
        '</head><body></body></html>',
        [ImportEdge("/strip.html"), ImportEdge("/vendor/lib.html")],
    )
    policy = ImportPolicy(excludes=["vendor/"], strip_excludes=["strip"])
    stats = BundleStats()

    doc = _flattener(policy, stats).flatten(root, is_root=True)

    hrefs = [link["href"] for link in doc.find_all("link")]
    assert hrefs == ["vendor/lib.html"]
    assert stats.imports_stripped == 1
    assert stats.imports_excluded == 1


def test_templated_imports_stay_in_place() -> None:
    """TC-06: Imports inside <template> are never merged."""
    root = _tree(
        "/index.html",
        '<html><body><template><link rel="import" href="t.html"></template></body></html>',
        [ImportEdge("/t.html")],
    )
    stats = BundleStats()

    doc = _flattener(stats=stats).flatten(root, is_root=True)

    assert doc.find("template").find("link")["href"] == "t.html"
    assert stats.imports_templated == 1


def test_body_import_sites_are_hidden_in_place() -> None:
    """TC-07: Body-level imports of the root are wrapped in a hidden placeholder."""
    b = _tree("/b.html", '<html><body><span id="b">B</span></body></html>')
    root = _tree(
        "/index.html",
        '<html><head></head><body><p>before</p><link rel="import" href="b.html"><p>after</p></body></html>',
        [ImportEdge("/b.html", b)],
    )

    doc = _flattener().flatten(root, is_root=True)

    span = doc.find(id="b")
    assert span.parent.name == "div"
    assert span.parent.has_attr("by-htmlfuse")
    assert span.parent.has_attr("hidden")


def test_nested_head_nodes_go_to_top_of_body() -> None:
    """TC-08: Non-root documents relocate head scripts before their body content."""
    imp = _tree("/a.html", '<html><head><script src="s.js"></script></head><body><p id="p">P</p></body></html>')
    doc = _flattener().flatten(imp)

    names = [n.name for n in doc.body.contents if n.name]
    assert names == ["script", "p"]
    assert not _hidden_containers(doc)


def test_empty_relocation_container_is_removed() -> None:
    """TC-09: No empty hidden wrapper is left behind."""
    root = _tree("/index.html", "<html><head><title>t</title></head><body><p>x</p></body></html>")
    doc = _flattener().flatten(root, is_root=True)
    assert not _hidden_containers(doc)


def test_legacy_markup_is_fatal() -> None:
    """TC-10: The legacy component dialect aborts with the file path."""
    legacy = _tree("/x/old.html", '<html><body><polymer-element name="x-old"></polymer-element></body></html>')
    root = _tree(
        "/index.html",
        '<html><head><link rel="import" href="x/old.html"></head></html>',
        [ImportEdge("/x/old.html", legacy)],
    )

    with pytest.raises(LegacyMarkupError) as exc_info:
        _flattener().flatten(root, is_root=True)

    assert exc_info.value.path == os.path.normpath("/x/old.html")
    assert "old.html" in str(exc_info.value)


def test_fix_fake_external_scripts() -> None:
    """TC-11: Scripts remembering their source become external again."""
    doc = parse_document('<script data-inlined-src="orig.js">var inlined;</script><script>keep</script>')

    fix_fake_external_scripts(doc)

    fake, real = doc.find_all("script")
    assert fake["src"] == "orig.js"
    assert not fake.has_attr("data-inlined-src")
    assert fake.get_text() == ""
    assert real.get_text() == "keep"


def test_collect_import_content_keeps_outer_license_comments() -> None:
    """TC-12: License comments outside head/body lead the fragment."""
    doc = parse_document("<html><head><script>a</script></head><body><p>b</p></body></html>")
    doc.html.insert(0, Comment(" @license MIT "))
    doc.html.insert(1, Comment(" not a license "))

    nodes = collect_import_content(doc)

    assert isinstance(nodes[0], Comment) and "@license" in nodes[0]
    assert [n.name for n in nodes[1:] if n.name] == ["script", "p"]
    assert not any("not a license" in str(n) for n in nodes)
