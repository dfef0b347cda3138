from __future__ import annotations

"""
Resource Loader Service.

Returns the text of documents, scripts and stylesheets addressed by URL.
Remote http(s) resources are fetched with `requests`; every other URL is
mapped onto the filesystem, honouring redirect prefixes first. Bodies are
cached in memory for the lifetime of the loader and the cache is safe to
share between the inliner's worker threads.
"""

import logging
import os
import threading
from typing import Dict, Iterable, List, Optional, Tuple

import requests

from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.domain.constants import EXTERNAL_URL, REDIRECT_SEPARATOR, USER_AGENT
from htmlfuse.domain.errors import ResourceLoadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def parse_redirects(redirects: Iterable[str]) -> List[Tuple[str, str]]:
    """
    Split `"<url prefix>|<filesystem path>"` entries into pairs.

    Malformed entries are skipped with a warning.
    """
    pairs: List[Tuple[str, str]] = []
    for entry in redirects:
        prefix, sep, path = entry.partition(REDIRECT_SEPARATOR)
        if not sep or not prefix or not path:
            logger.warning(f"Ignoring malformed redirect '{entry}' (expected 'uri|path').")
            continue
        pairs.append((prefix, path))
    return pairs


class ResourceLoader:
    """
    Loads resource bodies by URL.

    Args:
        resolver: Path resolver mapping URLs to filesystem paths.
        redirects: `"<url prefix>|<filesystem path>"` pairs.
        timeout: HTTP timeout in seconds.
        session: Optional `requests.Session` to reuse connections.
    """

    def __init__(
            self,
            resolver: PathResolver,
            redirects: Iterable[str] = (),
            timeout: int = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ):
        self._resolver = resolver
        self._redirects = parse_redirects(redirects)
        self._timeout = timeout
        self._session = session
        self._cache: Dict[str, str] = {}
        self._lock = threading.Lock()

    def request(self, url: str) -> Optional[str]:
        """
        Return the body of `url` (possibly empty).

        Raises:
            ResourceLoadError: If the resource cannot be read.
        """
        with self._lock:
            if url in self._cache:
                return self._cache[url]

        if EXTERNAL_URL.search(url):
            content = self._fetch_remote(url)
        else:
            content = self._read_local(url)

        with self._lock:
            self._cache.setdefault(url, content)
        return content

    def resolve_local_path(self, url: str) -> str:
        """Filesystem path a non-remote URL is read from."""
        for prefix, path in self._redirects:
            if url.startswith(prefix):
                rest = url[len(prefix):].lstrip("/")
                return os.path.normpath(os.path.join(path, rest))
        return self._resolver.url_to_path(url)

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _read_local(self, url: str) -> str:
        path = self.resolve_local_path(url)
        logger.debug(f"Loader: reading {url} from {path}")
        try:
            # Undecodable bytes become U+FFFD instead of aborting the run
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as e:
            raise ResourceLoadError(url, str(e)) from e

    def _fetch_remote(self, url: str) -> str:
        if url.startswith("//"):
            url = "https:" + url
        headers = {"User-Agent": USER_AGENT}
        logger.debug(f"Loader: fetching {url}")
        getter = self._session.get if self._session else requests.get
        try:
            response = getter(url, headers=headers, timeout=self._timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise ResourceLoadError(url, f"timed out after {self._timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise ResourceLoadError(url, str(e)) from e

        size_kb = len(response.content) / 1024
        logger.debug(f"Loader: received {url} ({size_kb:.1f} KB)")
        return response.text
