from __future__ import annotations

"""
Implicit Exclude Resolution.

An excluded document stays in the bundle as an unresolved import, so any
document it depends on is loaded by the browser through it. Those
transitive dependencies must not be inlined a second time: they are
listed here and turned into strip-excludes before the main run starts.
"""

import logging
import re
from typing import List

from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.core.services.analyzer import ImportAnalyzer
from htmlfuse.core.services.loader import ResourceLoader
from htmlfuse.domain.config import BundleOptions
from htmlfuse.domain.constants import EXTERNAL_URL, IMPLICIT_EXCLUDE_SKIP
from htmlfuse.domain.errors import BundleError, DependencyResolutionError

logger = logging.getLogger(__name__)


def compute_implicit_excludes(options: BundleOptions, resolver: PathResolver) -> List[str]:
    """
    List the dependencies of every excluded document as literal patterns.

    Excludes naming a script, a stylesheet or a directory are not analyzed.
    Dependencies are read by a dedicated loader that ignores the exclude
    list; it honours redirects only when configured to.

    Args:
        options: Run options.
        resolver: Path resolver of the run.

    Returns:
        List[str]: De-duplicated, escaped patterns in discovery order.

    Raises:
        DependencyResolutionError: If an excluded document cannot be analyzed.
    """
    redirects = options.redirects if options.implicit_excludes_use_redirects else ()
    loader = ResourceLoader(resolver, redirects=redirects, timeout=options.request_timeout)
    analyzer = ImportAnalyzer(loader, skip_href=lambda href: EXTERNAL_URL.search(href) is not None)

    patterns: List[str] = []
    for exclude in options.excludes:
        if IMPLICIT_EXCLUDE_SKIP.search(exclude):
            logger.debug(f"Implicit excludes: skipping '{exclude}'")
            continue

        url = exclude if EXTERNAL_URL.search(exclude) else resolver.document_url(exclude)
        try:
            dependencies = analyzer.get_dependencies(url)
        except BundleError as e:
            raise DependencyResolutionError(str(e), exclude) from e

        for dep in dependencies:
            pattern = re.escape(dep)
            if pattern not in patterns:
                patterns.append(pattern)

    logger.info(f"Resolved {len(patterns)} implicit strip-exclude(s).")
    return patterns
