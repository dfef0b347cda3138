from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the entire bundling workflow:
1. Validates configuration and resolves the root document URL.
2. Turns the dependencies of excluded documents into strip-excludes.
3. Builds the import tree of the root document.
4. Flattens the tree into a single document.
5. Adds the requested import links and the `<meta charset>`.
6. Inlines external scripts and stylesheets (optional).
7. Strips and deduplicates comments (optional).
8. Serializes the document and writes it to its destination.

Stages run strictly one after another; any failure aborts the run and no
partial document is ever returned.
"""

import logging
import os
import time
from dataclasses import asdict, replace
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from htmlfuse.core.dom.selectors import is_meta_charset
from htmlfuse.core.dom.surgery import prepend
from htmlfuse.core.pipeline.stages.comments import strip_comments
from htmlfuse.core.pipeline.stages.excludes import compute_implicit_excludes
from htmlfuse.core.pipeline.stages.flattener import Flattener
from htmlfuse.core.pipeline.stages.inliner import inline_css, inline_scripts
from htmlfuse.core.pipeline.stages.validator import validate_config
from htmlfuse.core.policy.matchers import ImportPolicy
from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.core.services.analyzer import ImportAnalyzer, serialize_document
from htmlfuse.core.services.loader import ResourceLoader
from htmlfuse.domain.config import BundleOptions
from htmlfuse.domain.errors import BundleError
from htmlfuse.domain.pipeline_models import (
    BundleResult,
    BundleStats,
    create_error_result,
    create_success_result,
)
from htmlfuse.infra.fs import normalize_path, write_text_atomic

logger = logging.getLogger(__name__)

ProcessCallback = Callable[[Optional[BaseException], Optional[str]], None]


class Bundler:
    """
    Stateless bundling engine bound to one immutable set of options.

    Every call to `bundle` or `process` builds its own loader, policy and
    statistics, so a Bundler can be reused for several targets.

    Args:
        options: Frozen run options.
        session: Optional `requests.Session` shared by remote fetches.
    """

    def __init__(self, options: BundleOptions, session: Optional[requests.Session] = None):
        self.options = options
        self.resolver = PathResolver(options.abspath or None)
        self._session = session

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def resolve_target(self, target: str) -> str:
        """URL of the root document: `input_url` wins over `target`."""
        if self.options.input_url:
            return self.options.input_url
        return self.resolver.document_url(target)

    def bundle(self, target: str) -> BundleResult:
        """
        Bundle `target` into a single document.

        Returns:
            BundleResult: Success with the serialized html, or failure with
                          the error message and no html.
        """
        url = self.resolve_target(target)
        stats = BundleStats()
        started = time.perf_counter()

        try:
            html, options = self._run(url, stats)
        except (BundleError, OSError) as e:
            logger.error(f"Bundling of {url} failed: {e}")
            return create_error_result(str(e), url, summary_extra={"stats": asdict(stats)})

        summary = {
            "stats": asdict(stats),
            "excludes": list(options.excludes),
            "strip_excludes": list(options.strip_excludes),
            "implicit_excludes": len(options.strip_excludes) - len(self.options.strip_excludes),
            "elapsed_seconds": round(time.perf_counter() - started, 3),
        }
        return create_success_result(url, html, summary_extra=summary)

    def process(self, target: str, callback: ProcessCallback) -> None:
        """
        Bundle `target` and report through `callback(error, html)`.

        The callback is invoked exactly once, with either an error and no
        html or no error and the serialized document.
        """
        url = self.resolve_target(target)
        try:
            html, _ = self._run(url, BundleStats())
        except (BundleError, OSError) as e:
            logger.error(f"Bundling of {url} failed: {e}")
            callback(e, None)
            return
        callback(None, html)

    # -------------------------------------------------------------------------
    # STAGES
    # -------------------------------------------------------------------------

    def _run(self, url: str, stats: BundleStats) -> Tuple[str, BundleOptions]:
        options = self.options
        logger.info(f"Bundling {url}")

        if options.implicit_strip and options.excludes:
            options = options.with_strip_excludes(compute_implicit_excludes(options, self.resolver))

        policy = ImportPolicy(options.excludes, options.strip_excludes)
        loader = ResourceLoader(
            self.resolver,
            redirects=options.redirects,
            timeout=options.request_timeout,
            session=self._session,
        )

        tree = ImportAnalyzer(loader, skip_href=policy.skips_href).metadata_tree(url)
        doc = Flattener(policy, self.resolver, stats).flatten(tree, is_root=True)
        self._finalize_head(doc, options)
        href = tree.href

        if options.inline_scripts:
            doc, href, stats.scripts_inlined = inline_scripts(
                doc, href, loader.request, policy, options.max_workers
            )
        if options.inline_css:
            doc, href, stats.styles_inlined = inline_css(
                doc, href, loader.request, policy, self.resolver, options.max_workers
            )
        if options.strip_comments:
            doc, stats.comments_removed, stats.license_comments = strip_comments(doc)

        return serialize_document(doc), options

    @staticmethod
    def _finalize_head(doc: BeautifulSoup, options: BundleOptions) -> None:
        """Prepend the requested import links, then make sure UTF-8 is declared."""
        head = doc.head
        for href in options.added_imports:
            prepend(head, doc.new_tag("link", attrs={"rel": "import", "href": href}))

        if doc.find(is_meta_charset) is None:
            prepend(head, doc.new_tag("meta", attrs={"charset": "UTF-8"}))


# -----------------------------------------------------------------------------
# DICT-CONFIGURED ENTRY POINT
# -----------------------------------------------------------------------------

def run_pipeline(
        config: Optional[Dict[str, Any]],
        *,
        target: Optional[str] = None,
) -> BundleResult:
    """
    Execute the full bundling pipeline from a configuration dictionary.

    Args:
        config: The configuration dictionary (raw or partial).
        target: Root document; defaults to the configured `input_path`.

    Returns:
        BundleResult: Object containing status, html and summary.
    """
    logger.info("Pipeline execution started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    target = target or cfg["input_path"]
    if not target and not cfg["input_url"]:
        msg = "No input document given."
        logger.error(msg)
        return create_error_result(msg, "")

    options = BundleOptions.from_config(cfg)
    result = Bundler(options).bundle(target)
    if not result.ok:
        return result

    output_path = cfg["output_path"]
    if output_path:
        destination = normalize_path(output_path, os.getcwd())
        try:
            written = write_text_atomic(destination, result.html or "")
        except OSError as e:
            msg = f"Failed to write output file {destination}: {e}"
            logger.critical(msg)
            return create_error_result(msg, result.target, summary_extra=result.summary)
        logger.info(f"Bundle written to {written}")
        result = replace(result, output_path=written)

    logger.info("Pipeline completed successfully.")
    return result
