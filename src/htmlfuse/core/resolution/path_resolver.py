from __future__ import annotations

"""
URL Resolution and Rewriting Service.

Documents are addressed by URLs: root-relative paths under `abspath`,
absolute filesystem paths expressed with forward slashes, or http(s) URLs.
When markup moves from an imported document into its importer, every
relative reference it carries must be re-expressed relative to the
importer; this module owns those rewriting rules.
"""

import logging
import os
import posixpath
import re
from typing import Optional
from urllib.parse import unquote, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from htmlfuse.core.dom.selectors import has_url_attr, is_css_style, needs_base_target
from htmlfuse.core.dom.surgery import remove_element_and_newline
from htmlfuse.domain.constants import ABS_URL, CSS_URL, URL_ATTRS, URL_TEMPLATE

logger = logging.getLogger(__name__)

_WINDOWS_DRIVE_URL = re.compile(r"^/[A-Za-z]:")


class PathResolver:
    """
    Translates between filesystem paths and document URLs and rewrites
    references across document boundaries.
    """

    def __init__(self, abspath: Optional[str] = None):
        self.abspath = os.path.abspath(abspath) if abspath else ""

    # -------------------------------------------------------------------------
    # PATH <-> URL
    # -------------------------------------------------------------------------

    def path_to_url(self, path: str) -> str:
        """Convert a filesystem path into a forward-slash document URL."""
        absolute = os.path.abspath(path)
        if self.abspath:
            rel = os.path.relpath(absolute, self.abspath)
            return posixpath.join("/", rel.replace(os.sep, "/"))
        url = absolute.replace(os.sep, "/")
        if not url.startswith("/"):
            url = "/" + url
        return url

    def document_url(self, target: str) -> str:
        """
        URL under which a document given on the command line is loaded.

        With a site root the target is a root-relative path; otherwise it
        is a filesystem path relative to the working directory.
        """
        if self.abspath:
            return posixpath.normpath(posixpath.join("/", target.replace(os.sep, "/")))
        return self.path_to_url(target)

    def url_to_path(self, url: str) -> str:
        """Map a document URL back to the filesystem."""
        pathname = unquote(urlsplit(url).path)
        if self.abspath:
            return os.path.normpath(os.path.join(self.abspath, pathname.lstrip("/")))
        if _WINDOWS_DRIVE_URL.match(pathname):
            pathname = pathname[1:]
        return os.path.normpath(pathname)

    # -------------------------------------------------------------------------
    # REWRITING
    # -------------------------------------------------------------------------

    @staticmethod
    def is_absolute_url(href: str) -> bool:
        return ABS_URL.search(href) is not None

    @staticmethod
    def is_templated_url(href: str) -> bool:
        return URL_TEMPLATE.search(href) is not None

    def rewrite_rel_path(self, import_url: str, main_url: str, rel_url: str) -> str:
        """
        Re-express a reference found in `import_url` relative to `main_url`.

        Absolute references are returned untouched; references that end up
        on another origin are returned as absolute URLs.
        """
        if self.is_absolute_url(rel_url):
            return rel_url

        abs_url = urljoin(import_url, rel_url)
        parsed_from = urlsplit(main_url)
        parsed_to = urlsplit(abs_url)

        if parsed_from.scheme == parsed_to.scheme and parsed_from.netloc == parsed_to.netloc:
            start = posixpath.dirname(parsed_from.path) or "/"
            pathname = posixpath.relpath(parsed_to.path or "/", start)
            return urlunsplit(("", "", pathname, parsed_to.query, parsed_to.fragment))
        return abs_url

    def rewrite_url(self, import_url: str, main_url: str, css_text: str) -> str:
        """Rewrite every `url(...)` of a CSS text for its new location."""
        def _replace(match: re.Match) -> str:
            path = match.group(0).replace('"', "").replace("'", "")[4:-1].strip()
            return f'url("{self.rewrite_rel_path(import_url, main_url, path)}")'

        return CSS_URL.sub(_replace, css_text)

    def resolve_paths(self, doc: BeautifulSoup, import_url: str, main_url: str) -> None:
        """
        Rewrite all references of `doc` (located at `import_url`) so they
        stay valid once its markup lives in `main_url`.

        `<template>` content is rewritten as well; only data-binding
        expressions are left untouched.
        """
        for node in doc.find_all(has_url_attr):
            for attr in URL_ATTRS:
                value = node.get(attr)
                if isinstance(value, list):
                    value = " ".join(value)
                if not value or self.is_templated_url(value):
                    continue
                if attr == "style":
                    rewritten = self.rewrite_url(import_url, main_url, value)
                else:
                    rewritten = self.rewrite_rel_path(import_url, main_url, value)
                    if attr == "assetpath" and not rewritten.endswith("/"):
                        rewritten += "/"
                node[attr] = rewritten

        for style in doc.find_all(is_css_style):
            style.string = self.rewrite_url(import_url, main_url, style.get_text())

        for module in doc.find_all("dom-module"):
            if module.get("assetpath"):
                continue
            asset_url = self.rewrite_rel_path(import_url, main_url, "")
            module["assetpath"] = (posixpath.dirname(asset_url) or ".") + "/"

    def acid(self, doc: BeautifulSoup, doc_url: str) -> None:
        """
        Resolve a document's references against its own `<base>`.

        The `<base>` element is removed; its href is folded into every
        reference and its target copied onto links and forms lacking one.
        """
        base = doc.find("base")
        if base is None:
            return

        base_url = base.get("href")
        base_target = base.get("target")
        remove_element_and_newline(base)

        if base_url:
            if base_url.endswith("/"):
                base_url = base_url[:-1]
            resolved_base = urljoin(doc_url, base_url + "/")
            logger.debug(f"Resolving {doc_url} against <base href='{resolved_base}'>")
            self.resolve_paths(doc, resolved_base, doc_url)

        if base_target:
            for el in doc.find_all(needs_base_target):
                el["target"] = base_target
