from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A site builder writing small HTML projects into a temporary directory.
3. Shared fixtures for configuration dictionaries used across unit tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_site(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """
    Return a builder writing `{relative path: content}` files under tmp_path.

    Returns:
        Callable: Builder returning the site root.
    """
    def _build(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _build


@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'htmlfuse.domain.config',
    ensuring all keys expected by the pipeline are present.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        # IO
        "input_path": "index.html",
        "input_url": "",
        "abspath": "",
        "output_path": "",

        # Import Policy
        "excludes": [],
        "strip_excludes": [],
        "added_imports": [],
        "implicit_strip": True,
        "redirects": [],
        "implicit_excludes_use_redirects": True,

        # Optional Stages
        "strip_comments": False,
        "inline_scripts": False,
        "inline_css": False,

        # Loader
        "request_timeout": 10,
        "max_workers": 4,
    }
