from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, per-user data directory
resolution and safe artifact writing. Acts as an abstraction over the 'os'
module to ensure uniform behavior across Windows and Unix-like systems.
"""

import os
import tempfile
from typing import Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "htmlfuse"
UNIX_APP_DIR_NAME = ".htmlfuse"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/htmlfuse
    - Linux/Mac: ~/.htmlfuse

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)

# -----------------------------------------------------------------------------
# ARTIFACT WRITING
# -----------------------------------------------------------------------------

def write_text_atomic(path: str, content: str) -> str:
    """
    Write a text artifact through a temporary sibling file and rename it.

    A failed write never leaves a truncated bundle at the destination.

    Args:
        path: Destination file path.
        content: Text to persist (UTF-8).

    Returns:
        str: Absolute path of the written file.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    target = os.path.abspath(path)
    parent = os.path.dirname(target)
    ok, err = safe_mkdir(parent)
    if not ok:
        raise OSError(f"Cannot create output directory {parent}: {err}")

    fd, tmp_path = tempfile.mkstemp(prefix=".htmlfuse-", suffix=".tmp", dir=parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, target)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return target
