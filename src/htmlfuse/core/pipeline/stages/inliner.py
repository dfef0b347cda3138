from __future__ import annotations

"""
Resource Inlining Stages.

Two independent passes replacing external references with their content:
scripts (`<script src>`) and stylesheets (`<link rel="stylesheet">` and
component external styles). Each pass fetches every body concurrently on
a thread pool and joins all of them before touching the tree; a single
failed fetch fails the whole stage. Replacements are then applied on the
calling thread in document order, each one local to its own element.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from htmlfuse.core.dom.selectors import is_any_css_link, is_component_external_style, is_external_script
from htmlfuse.core.dom.surgery import prepend
from htmlfuse.core.policy.matchers import ImportPolicy
from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.domain.constants import SCRIPT_CLOSE

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

Fetcher = Callable[[str], Optional[str]]


# ==============================================================================
# PUBLIC API
# ==============================================================================

def inline_scripts(
        doc: BeautifulSoup,
        href: str,
        fetch: Fetcher,
        policy: ImportPolicy,
        max_workers: int = DEFAULT_MAX_WORKERS,
) -> Tuple[BeautifulSoup, str, int]:
    """
    Replace external scripts by inline scripts carrying their body.

    Args:
        doc: The flattened document.
        href: URL of the document, base for relative `src` values.
        fetch: Loader callable returning a body (falsy means keep the reference).
        policy: Exclusion predicates; excluded sources are left external.
        max_workers: Concurrent fetches.

    Returns:
        Tuple[BeautifulSoup, str, int]: The document, its href and the
        number of scripts inlined.
    """
    targets: List[Tuple[Tag, str]] = []
    for script in doc.find_all(is_external_script):
        src = script.get("src") or ""
        if policy.is_excluded_href(src):
            logger.debug(f"Inline scripts: leaving excluded {src}")
            continue
        targets.append((script, urljoin(href, src)))

    bodies = _fetch_all([uri for _, uri in targets], fetch, max_workers, "ScriptInliner")

    inlined = 0
    for (script, uri), content in zip(targets, bodies):
        if not content:
            logger.warning(f"Inline scripts: empty body for {uri}, keeping reference.")
            continue
        del script["src"]
        script.string = escape_script(content)
        inlined += 1

    logger.info(f"Inlined {inlined} of {len(targets)} external script(s).")
    return doc, href, inlined


def inline_css(
        doc: BeautifulSoup,
        href: str,
        fetch: Fetcher,
        policy: ImportPolicy,
        resolver: PathResolver,
        max_workers: int = DEFAULT_MAX_WORKERS,
) -> Tuple[BeautifulSoup, str, int]:
    """
    Replace stylesheet links by `<style>` elements.

    Stylesheet URLs are rewritten for the document's location and wrapped
    in `@media` when the link declared a media query. Component external
    styles are moved to the top of their `<dom-module>`'s template instead
    of replacing the link in place.

    Returns:
        Tuple[BeautifulSoup, str, int]: The document, its href and the
        number of stylesheets inlined.
    """
    targets: List[Tuple[Tag, str]] = []
    for link in doc.find_all(is_any_css_link):
        src = link.get("href") or ""
        if policy.is_excluded_href(src):
            logger.debug(f"Inline css: leaving excluded {src}")
            continue
        targets.append((link, urljoin(href, src)))

    bodies = _fetch_all([uri for _, uri in targets], fetch, max_workers, "CssInliner")

    inlined = 0
    for (link, uri), content in zip(targets, bodies):
        if not content:
            logger.warning(f"Inline css: empty body for {uri}, keeping reference.")
            continue
        content = resolver.rewrite_url(uri, href, content)
        media = link.get("media")
        if media:
            content = f"@media {media} {{{content}}}"
        style = doc.new_tag("style")
        style.string = f"\n{content}\n"

        if is_component_external_style(link):
            if not _move_to_owner_template(doc, link, style):
                logger.warning(f"Inline css: no <dom-module> owns {uri}, keeping reference.")
                continue
        else:
            link.replace_with(style)
        inlined += 1

    logger.info(f"Inlined {inlined} of {len(targets)} stylesheet(s).")
    return doc, href, inlined


def escape_script(content: str) -> str:
    """Keep a script body from closing its own element early."""
    return SCRIPT_CLOSE.sub(r"<\\/\1", content)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _fetch_all(
        uris: Sequence[str],
        fetch: Fetcher,
        max_workers: int,
        thread_name_prefix: str,
) -> List[Optional[str]]:
    """Fetch every URI concurrently; results are aligned with `uris`."""
    if not uris:
        return []
    workers = max(1, min(max_workers, len(uris)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=thread_name_prefix) as executor:
        futures = [executor.submit(fetch, uri) for uri in uris]
        # All fetches settle before the stage continues; the first failure is re-raised
        return [future.result() for future in futures]


def _move_to_owner_template(doc: BeautifulSoup, link: Tag, style: Tag) -> bool:
    """
    Put `style` at the top of the template of the `<dom-module>` owning `link`.

    The owner is the nearest `<dom-module>` preceding the link (ancestors
    included). A missing `<template>` is created inside it.

    Returns:
        bool: False if no owning `<dom-module>` exists.
    """
    owner = link.find_previous("dom-module")
    if owner is None:
        return False

    template = owner.find("template")
    if template is None:
        template = doc.new_tag("template")
        owner.append(template)

    link.extract()
    prepend(template, style)
    return True
