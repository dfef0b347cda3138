from __future__ import annotations

"""
Import Policy Matching Engine.

Implements the regex-based exclusion and strip-exclusion predicates that
decide, per URL, whether a reference is resolved, left untouched or
removed. Patterns are tested with search semantics (substring match),
never full match.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence

from htmlfuse.domain.constants import EXTERNAL_URL
from htmlfuse.domain.import_models import ImportEdge

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded (with a warning) instead of
    aborting the run.

    Args:
        patterns: Raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Ignoring invalid pattern '{p}': {e}")
    return compiled


def matches_any(value: str, compiled_patterns: Sequence[re.Pattern]) -> bool:
    """
    Verify if a string matches at least one compiled regex pattern.

    Args:
        value: URL or href to evaluate.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any pattern is found anywhere in the value.
    """
    return any(rx.search(value) for rx in compiled_patterns)

# -----------------------------------------------------------------------------
# POLICY
# -----------------------------------------------------------------------------

class ImportPolicy:
    """
    Pure predicates over the exclusion configuration of one run.

    Holds no mutable state: the same href always yields the same answer.
    """

    def __init__(self, excludes: Iterable[str] = (), strip_excludes: Iterable[str] = ()):
        self._excludes = compile_patterns(excludes)
        self._strip_excludes = compile_patterns(strip_excludes)

    def is_excluded_href(self, href: Optional[str]) -> bool:
        """True for external URLs and hrefs matching any exclude pattern."""
        if not href:
            return False
        if EXTERNAL_URL.search(href):
            return True
        return matches_any(href, self._excludes)

    def is_stripped_href(self, href: Optional[str]) -> bool:
        """True for hrefs matching any strip-exclude pattern."""
        if not href or not self._strip_excludes:
            return False
        return matches_any(href, self._strip_excludes)

    def is_excluded_import(self, edge: ImportEdge) -> bool:
        return self.is_excluded_href(edge.href)

    def is_stripped_import(self, edge: ImportEdge) -> bool:
        return self.is_stripped_href(edge.href)

    @staticmethod
    def is_duplicate_import(edge: ImportEdge) -> bool:
        return edge.is_duplicate

    def skips_href(self, href: str) -> bool:
        """True when an import is never loaded: excluded or stripped."""
        return self.is_excluded_href(href) or self.is_stripped_href(href)
