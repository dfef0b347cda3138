from __future__ import annotations

"""
Unit tests for the ResourceLoader.

Verifies filesystem reads, redirect prefixes, caching and the HTTP path
(with `requests` mocked out).
"""

import logging
from pathlib import Path
from typing import Callable, Dict
from unittest.mock import MagicMock, patch

import pytest
import requests

from htmlfuse.core.resolution.path_resolver import PathResolver
from htmlfuse.core.services.loader import ResourceLoader, parse_redirects
from htmlfuse.domain.constants import USER_AGENT
from htmlfuse.domain.errors import ResourceLoadError

SiteBuilder = Callable[[Dict[str, str]], Path]


def test_reads_local_file_under_abspath(make_site: SiteBuilder) -> None:
    """TC-01: Root-relative URLs are read from the site root."""
    root = make_site({"a/b.html": "<p>b</p>"})
    loader = ResourceLoader(PathResolver(str(root)))

    assert loader.request("/a/b.html") == "<p>b</p>"


def test_missing_file_raises(make_site: SiteBuilder) -> None:
    """TC-02: Unreadable files surface as ResourceLoadError."""
    root = make_site({})
    loader = ResourceLoader(PathResolver(str(root)))

    with pytest.raises(ResourceLoadError) as exc_info:
        loader.request("/missing.html")
    assert exc_info.value.url == "/missing.html"


def test_empty_file_is_returned_as_empty_string(make_site: SiteBuilder) -> None:
    """TC-03: Empty bodies are not errors."""
    root = make_site({"empty.js": ""})
    assert ResourceLoader(PathResolver(str(root))).request("/empty.js") == ""


def test_redirect_prefix_wins(make_site: SiteBuilder) -> None:
    """TC-04: A matching redirect maps the URL onto its directory."""
    root = make_site({"real/lib/x.html": "redirected"})
    redirects = [f"/vendor/|{root / 'real' / 'lib'}"]
    loader = ResourceLoader(PathResolver(str(root)), redirects=redirects)

    assert loader.request("/vendor/x.html") == "redirected"


def test_parse_redirects_skips_malformed(caplog: pytest.LogCaptureFixture) -> None:
    """TC-05: Entries without a separator are ignored with a warning."""
    with caplog.at_level(logging.WARNING):
        pairs = parse_redirects(["/a/|/tmp/a", "broken", "|/tmp/x"])

    assert pairs == [("/a/", "/tmp/a")]
    assert "malformed redirect" in caplog.text


def test_local_reads_are_cached(make_site: SiteBuilder) -> None:
    """TC-06: A URL is read from disk once per loader."""
    root = make_site({"a.html": "first"})
    loader = ResourceLoader(PathResolver(str(root)))

    assert loader.request("/a.html") == "first"
    (root / "a.html").write_text("second", encoding="utf-8")
    assert loader.request("/a.html") == "first"


@patch("htmlfuse.core.services.loader.requests.get")
def test_remote_fetch(mock_get: MagicMock) -> None:
    """TC-07: http(s) URLs go through requests with a User-Agent and timeout."""
    response = MagicMock()
    response.text = "console.log(1)"
    response.content = b"console.log(1)"
    mock_get.return_value = response

    loader = ResourceLoader(PathResolver(), timeout=3)
    assert loader.request("https://cdn.example.com/x.js") == "console.log(1)"

    args, kwargs = mock_get.call_args
    assert args[0] == "https://cdn.example.com/x.js"
    assert kwargs["timeout"] == 3
    assert kwargs["headers"]["User-Agent"] == USER_AGENT
    response.raise_for_status.assert_called_once()


@patch("htmlfuse.core.services.loader.requests.get")
def test_protocol_relative_urls_use_https(mock_get: MagicMock) -> None:
    """TC-08: '//host/path' is fetched over https."""
    mock_get.return_value = MagicMock(text="x", content=b"x")

    ResourceLoader(PathResolver()).request("//cdn.example.com/x.js")

    assert mock_get.call_args[0][0] == "https://cdn.example.com/x.js"


@patch("htmlfuse.core.services.loader.requests.get")
def test_remote_timeout_raises(mock_get: MagicMock) -> None:
    """TC-09: Timeouts are reported as ResourceLoadError."""
    mock_get.side_effect = requests.exceptions.Timeout("slow")

    with pytest.raises(ResourceLoadError, match="timed out"):
        ResourceLoader(PathResolver(), timeout=1).request("http://slow.example.com/a.js")


@patch("htmlfuse.core.services.loader.requests.get")
def test_remote_http_error_raises(mock_get: MagicMock) -> None:
    """TC-10: HTTP error statuses are reported as ResourceLoadError."""
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
    mock_get.return_value = response

    with pytest.raises(ResourceLoadError, match="404"):
        ResourceLoader(PathResolver()).request("http://example.com/missing.js")


def test_session_is_used_when_given() -> None:
    """TC-11: A provided session replaces the module-level requests.get."""
    session = MagicMock()
    session.get.return_value = MagicMock(text="body", content=b"body")

    loader = ResourceLoader(PathResolver(), session=session)
    assert loader.request("https://example.com/a.css") == "body"
    session.get.assert_called_once()


def test_undecodable_bytes_are_replaced(tmp_path: Path) -> None:
    """TC-12: Files that are not valid UTF-8 are read with replacement characters."""
    (tmp_path / "latin.html").write_bytes(b"<p>caf\xe9</p>")
    loader = ResourceLoader(PathResolver(str(tmp_path)))

    assert loader.request("/latin.html") == "<p>caf\ufffd</p>"
