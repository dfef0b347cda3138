from __future__ import annotations

"""
Import Dependency Analyzer.

Builds the ordered import tree consumed by the flattening engine and lists
the transitive dependencies of a document. Every document is parsed into
a fresh working copy, so the engine is free to mutate what it is handed.
"""

import logging
from typing import Callable, List, Optional, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from htmlfuse.core.dom.selectors import is_any_css_link, is_external_script, is_import_link
from htmlfuse.core.dom.surgery import ensure_document_structure, is_templated
from htmlfuse.core.services.loader import ResourceLoader
from htmlfuse.domain.import_models import ImportEdge, ImportTree

logger = logging.getLogger(__name__)

HTML_PARSER = "lxml"


def parse_document(text: str) -> BeautifulSoup:
    """Parse markup into a document with a guaranteed html/head/body skeleton."""
    soup = BeautifulSoup(text or "", HTML_PARSER)
    ensure_document_structure(soup)
    return soup


def serialize_document(doc: BeautifulSoup) -> str:
    """
    Serialize a document to markup.

    No output encoding is passed, so `<meta charset>` values are written as
    they are instead of being rewritten to the encoding name.
    """
    return doc.decode(eventual_encoding=None)


class ImportAnalyzer:
    """
    Resolves `<link rel="import">` graphs.

    Args:
        loader: Loader used to read documents.
        skip_href: Predicate for imports that must not be loaded
                   (excluded or stripped by policy).
    """

    def __init__(self, loader: ResourceLoader, skip_href: Optional[Callable[[str], bool]] = None):
        self._loader = loader
        self._skip_href = skip_href or (lambda href: False)

    # -------------------------------------------------------------------------
    # IMPORT TREE
    # -------------------------------------------------------------------------

    def metadata_tree(self, root_url: str) -> ImportTree:
        """
        Load `root_url` and, recursively, every document it imports.

        Documents are visited in pre-order; an href seen before (including
        the documents currently being resolved, so cycles terminate) is
        reported as a duplicate edge with no href.
        """
        visited: Set[str] = {root_url}
        return self._build_tree(root_url, visited)

    def _build_tree(self, url: str, visited: Set[str]) -> ImportTree:
        doc = parse_document(self._loader.request(url) or "")
        tree = ImportTree(href=url, document=doc)

        for site in doc.find_all(is_import_link):
            raw = (site.get("href") or "").strip()
            href = urljoin(url, raw) if raw else ""
            tree.import_sites.append(site)

            # Inert template content is never resolved
            if href and is_templated(site):
                tree.imports.append(ImportEdge(href=href))
                continue

            if not href or href in visited:
                logger.debug(f"Analyzer: duplicate import {raw!r} in {url}")
                tree.imports.append(ImportEdge(href=None))
                continue

            if self._skip_href(href):
                tree.imports.append(ImportEdge(href=href))
                continue

            visited.add(href)
            tree.imports.append(ImportEdge(href=href, tree=self._build_tree(href, visited)))

        logger.debug(f"Analyzer: {url} has {len(tree.imports)} import(s)")
        return tree

    # -------------------------------------------------------------------------
    # DEPENDENCY LISTING
    # -------------------------------------------------------------------------

    def get_dependencies(self, url: str) -> List[str]:
        """
        List every import, external script and stylesheet reachable from `url`.

        Returns:
            List[str]: De-duplicated absolute URLs in document order,
                       `url` itself excluded.
        """
        seen: Set[str] = {url}
        deps: List[str] = []
        self._collect_dependencies(url, seen, deps)
        return deps

    def _collect_dependencies(self, url: str, seen: Set[str], deps: List[str]) -> None:
        doc = parse_document(self._loader.request(url) or "")

        def _tracks(node) -> bool:
            return is_import_link(node) or is_external_script(node) or is_any_css_link(node)

        for node in doc.find_all(_tracks):
            attr = "src" if node.name == "script" else "href"
            raw = (node.get(attr) or "").strip()
            if not raw:
                continue
            href = urljoin(url, raw)
            if href in seen:
                continue
            seen.add(href)
            deps.append(href)
            if is_import_link(node) and not self._skip_href(href):
                self._collect_dependencies(href, seen, deps)
