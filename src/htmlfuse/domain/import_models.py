from __future__ import annotations

"""
Import Graph Domain Models.

Defines the structures produced by the dependency analyzer and consumed,
top-down and exactly once, by the flattening engine.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup, Tag


# -----------------------------------------------------------------------------
# IMPORT GRAPH
# -----------------------------------------------------------------------------

@dataclass
class ImportEdge:
    """
    One reference from a document to another document to be merged.

    Attributes:
        href: Absolute URL of the imported document. None marks a duplicate
              that was already resolved earlier in the walk.
        tree: The resolved import, or None when the document was not loaded
              (duplicate, excluded, stripped or templated import).
    """
    href: Optional[str]
    tree: Optional[ImportTree] = None

    @property
    def is_duplicate(self) -> bool:
        return not self.href


@dataclass
class ImportTree:
    """
    A resolved document together with its direct import edges.

    Attributes:
        href: Absolute URL of the document.
        document: Parsed working copy of the document.
        imports: Import edges in document order.
        import_sites: The `<link rel="import">` elements, aligned with `imports`.
    """
    href: str
    document: BeautifulSoup
    imports: List[ImportEdge] = field(default_factory=list)
    import_sites: List[Tag] = field(default_factory=list)
