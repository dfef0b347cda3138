from __future__ import annotations

"""
Document Flattening Engine.

Merges an import tree into its root document, depth-first and pre-order,
so that the resulting script/style order is exactly the traversal order of
the original import graph. Flattening is synchronous and works purely on
the in-memory trees produced by the analyzer.

Per document:
1. Reject the unsupported legacy component dialect.
2. Restore "fake external" scripts to external references.
3. Resolve the document's references against its own `<base>`.
4. Move head-level scripts and links into the relocation target
   (a hidden container in the root, the top of `<body>` otherwise).
5. Replace every import site with the flattened imported document,
   unless the import is a duplicate, stripped, excluded or templated.
"""

import logging
from typing import List, Optional

from bs4 import BeautifulSoup, PageElement, Tag

from htmlfuse.core.dom.selectors import (
    is_inline_script,
    is_license_comment,
    is_relocatable_head_node,
)
from htmlfuse.core.dom.surgery import (
    create_hidden_container,
    hide,
    insert_all,
    is_descendant_of,
    is_templated,
    prepend,
    remove_element_and_newline,
)
from htmlfuse.core.policy.matchers import ImportPolicy
from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.domain.constants import FAKE_EXTERNAL_ATTR, LEGACY_ELEMENT, LEGACY_MARKUP_MESSAGE
from htmlfuse.domain.errors import LegacyMarkupError
from htmlfuse.domain.import_models import ImportTree
from htmlfuse.domain.pipeline_models import BundleStats

logger = logging.getLogger(__name__)


class Flattener:
    """
    Recursive import merger.

    Args:
        policy: Exclusion / strip-exclusion predicates of the run.
        resolver: URL rewriting capability.
        stats: Counters updated while flattening.
    """

    def __init__(
            self,
            policy: ImportPolicy,
            resolver: PathResolver,
            stats: Optional[BundleStats] = None,
    ):
        self.policy = policy
        self.resolver = resolver
        self.stats = stats if stats is not None else BundleStats()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def flatten(self, tree: ImportTree, is_root: bool = False) -> BeautifulSoup:
        """
        Flatten `tree` and return its (mutated) document.

        Raises:
            LegacyMarkupError: If the document uses the legacy dialect.
        """
        doc = tree.document

        if doc.find(LEGACY_ELEMENT) is not None:
            raise LegacyMarkupError(LEGACY_MARKUP_MESSAGE, self.resolver.url_to_path(tree.href))

        self.stats.documents += 1
        fix_fake_external_scripts(doc)
        self.resolver.acid(doc, tree.href)

        head = doc.head
        body = doc.body

        # Root imports are hidden in a container, nested ones go to the top of <body>
        move_target: Optional[Tag] = create_hidden_container(doc) if is_root else None
        relocated: List[PageElement] = []

        for node in [n for n in head.contents if is_relocatable_head_node(n)]:
            remove_element_and_newline(node)
            if move_target is not None:
                move_target.append(node)
            else:
                relocated.append(node)

        if move_target is not None:
            prepend(body, move_target)
        else:
            insert_all(body, 0, relocated)

        for edge, site in zip(tree.imports, tree.import_sites):
            if self.policy.is_duplicate_import(edge) or self.policy.is_stripped_import(edge):
                if edge.is_duplicate:
                    self.stats.duplicates_removed += 1
                else:
                    self.stats.imports_stripped += 1
                remove_element_and_newline(site)
                continue

            if self.policy.is_excluded_import(edge):
                logger.debug(f"Flatten: leaving excluded import {edge.href}")
                self.stats.imports_excluded += 1
                continue

            if is_templated(site) or edge.tree is None:
                self.stats.imports_templated += 1
                continue

            import_doc = self.flatten(edge.tree)
            self.resolver.resolve_paths(import_doc, edge.href, tree.href)
            fragment = collect_import_content(import_doc)

            # Keep the import's original position as an invisible anchor
            if move_target is not None and not is_descendant_of(site, move_target):
                hide(site, doc)

            remove_element_and_newline(site, fragment)
            self.stats.imports_merged += 1
            logger.debug(f"Flatten: merged {edge.href} into {tree.href}")

        if move_target is not None and not move_target.contents:
            move_target.extract()

        if is_root:
            logger.info(
                f"Flattened {self.stats.documents} document(s) into {tree.href} "
                f"({self.stats.duplicates_removed} duplicate(s) removed)."
            )
        return doc


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def fix_fake_external_scripts(doc: BeautifulSoup) -> None:
    """Turn inline scripts that record their source back into external ones."""
    for script in doc.find_all(is_inline_script):
        original_src = script.get(FAKE_EXTERNAL_ATTR)
        if not original_src:
            continue
        script["src"] = original_src
        del script[FAKE_EXTERNAL_ATTR]
        script.clear()


def collect_import_content(import_doc: BeautifulSoup) -> List[PageElement]:
    """
    Gather the nodes an import contributes to its importer.

    License comments sitting outside `<head>`/`<body>` would be lost with
    the discarded wrappers, so they lead the fragment.

    Returns:
        List[PageElement]: License comments, then head children, then body children.
    """
    html = import_doc.find("html")
    outer = list(import_doc.contents) + (list(html.contents) if html is not None else [])
    licenses = [n for n in outer if is_license_comment(n)]
    return licenses + list(import_doc.head.contents) + list(import_doc.body.contents)
