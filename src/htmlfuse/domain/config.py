from __future__ import annotations

"""
Configuration Domain Management.

Handles the dict-based configuration used at the edges (CLI, JSON files),
its persistence in the per-user data directory, and the immutable
BundleOptions consumed by the pipeline for the lifetime of one run.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from htmlfuse.domain.constants import CURRENT_CONFIG_VERSION
from htmlfuse.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")
DEFAULT_REQUEST_TIMEOUT = 10
DEFAULT_MAX_WORKERS = 8


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the Pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO
        "input_path": "",
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
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "max_workers": DEFAULT_MAX_WORKERS,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a configuration file and merge it over the defaults.

    Unknown keys are ignored; a missing or corrupted file yields defaults.

    Args:
        path: JSON file to read. Defaults to the per-user config file.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config_path = path or CONFIG_FILE
    defaults = get_default_config()

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Using defaults.")
        return defaults

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}. Using defaults.")
        return defaults

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return defaults

    # Saved files wrap options with a version stamp
    options = data.get("options", data)
    if not isinstance(options, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return defaults

    for key, value in options.items():
        if key in defaults:
            defaults[key] = value
        else:
            logger.debug(f"Ignoring unknown config key '{key}'.")
    return defaults


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Destination file. Defaults to the per-user config file.
    """
    config_path = path or CONFIG_FILE
    defaults = get_default_config()
    payload = {
        "version": CURRENT_CONFIG_VERSION,
        "options": {k: v for k, v in config.items() if k in defaults},
    }
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Immutable Run Options
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class BundleOptions:
    """
    Immutable configuration of one bundling run.

    Attributes:
        abspath: Site root directory; empty means URLs are filesystem paths.
        input_url: Explicit root URL overriding the processed target.
        excludes: Regex patterns of URLs that are left unresolved.
        strip_excludes: Regex patterns of imports that are removed entirely.
        strip_comments: Remove comments, keeping one copy of each license.
        inline_css: Replace stylesheet links with their content.
        inline_scripts: Replace external scripts with their content.
        added_imports: Hrefs prepended to `<head>` as import links.
        implicit_strip: Strip the transitive dependencies of excluded documents.
        redirects: `"<url prefix>|<path>"` pairs consulted by the loader.
        implicit_excludes_use_redirects: Honour redirects while computing
            implicit excludes.
        request_timeout: HTTP timeout in seconds.
        max_workers: Concurrent fetches per inlining stage.
    """
    abspath: str = ""
    input_url: str = ""
    excludes: Tuple[str, ...] = field(default_factory=tuple)
    strip_excludes: Tuple[str, ...] = field(default_factory=tuple)
    strip_comments: bool = False
    inline_css: bool = False
    inline_scripts: bool = False
    added_imports: Tuple[str, ...] = field(default_factory=tuple)
    implicit_strip: bool = True
    redirects: Tuple[str, ...] = field(default_factory=tuple)
    implicit_excludes_use_redirects: bool = True
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> BundleOptions:
        """
        Build options from a validated configuration dictionary.

        Args:
            cfg: Output of the configuration validator.

        Returns:
            BundleOptions: The frozen options.
        """
        abspath = (cfg.get("abspath") or "").strip()
        return cls(
            abspath=os.path.abspath(abspath) if abspath else "",
            input_url=cfg.get("input_url") or "",
            excludes=tuple(cfg.get("excludes") or ()),
            strip_excludes=tuple(cfg.get("strip_excludes") or ()),
            strip_comments=bool(cfg.get("strip_comments")),
            inline_css=bool(cfg.get("inline_css")),
            inline_scripts=bool(cfg.get("inline_scripts")),
            added_imports=tuple(cfg.get("added_imports") or ()),
            implicit_strip=bool(cfg.get("implicit_strip", True)),
            redirects=tuple(cfg.get("redirects") or ()),
            implicit_excludes_use_redirects=bool(cfg.get("implicit_excludes_use_redirects", True)),
            request_timeout=int(cfg.get("request_timeout") or DEFAULT_REQUEST_TIMEOUT),
            max_workers=int(cfg.get("max_workers") or DEFAULT_MAX_WORKERS),
        )

    def with_strip_excludes(self, extra: Iterable[str]) -> BundleOptions:
        """Return a copy whose strip-excludes are extended with `extra`."""
        merged = list(self.strip_excludes)
        for pattern in extra:
            if pattern not in merged:
                merged.append(pattern)
        return replace(self, strip_excludes=tuple(merged))
