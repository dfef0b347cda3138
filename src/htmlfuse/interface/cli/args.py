from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the htmlfuse CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="htmlfuse",
        description="Flatten an HTML import graph into a single self-contained document.",
    )

    # --- Input / Output ---
    p.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Root HTML document to bundle.",
    )
    p.add_argument(
        "-o", "--out-html",
        dest="output_path",
        default=None,
        help="Write the bundle to this file instead of stdout.",
    )
    p.add_argument(
        "-p", "--abspath",
        dest="abspath",
        default=None,
        help="Site root; the target and imports are resolved as root-relative URLs.",
    )
    p.add_argument(
        "--input-url",
        dest="input_url",
        default=None,
        help="Load the root document from this URL instead of TARGET.",
    )

    # --- Import Policy ---
    p.add_argument(
        "--exclude",
        dest="excludes",
        action="append",
        default=None,
        help="Regex of URLs left unresolved (repeatable or comma-separated).",
    )
    p.add_argument(
        "--strip-exclude",
        dest="strip_excludes",
        action="append",
        default=None,
        help="Regex of imports removed from the output (repeatable or comma-separated).",
    )
    p.add_argument(
        "--add-import",
        dest="added_imports",
        action="append",
        default=None,
        help="Href prepended to <head> as an import link (repeatable).",
    )
    p.add_argument(
        "--redirect",
        dest="redirects",
        action="append",
        default=None,
        help="Map a URL prefix onto a directory: 'URI|PATH' (repeatable).",
    )
    p.add_argument(
        "--no-implicit-strip",
        action="store_true",
        help="Keep the dependencies of excluded documents.",
    )

    # --- Optional Stages ---
    p.add_argument("--strip-comments", action="store_true", help="Remove comments, keeping one copy of each license.")
    p.add_argument("--inline-scripts", action="store_true", help="Inline external scripts.")
    p.add_argument("--inline-css", action="store_true", help="Inline external stylesheets.")
    p.add_argument("--inline", action="store_true", help="Shorthand for --inline-scripts --inline-css.")

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="Read options from this JSON file instead of the user configuration.",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore any saved configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective options as the user configuration.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this (rotating) file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["input_path"] = args.target
    overrides["output_path"] = args.output_path
    overrides["abspath"] = args.abspath
    overrides["input_url"] = args.input_url

    overrides["excludes"] = _flatten_csv(args.excludes)
    overrides["strip_excludes"] = _flatten_csv(args.strip_excludes)
    overrides["added_imports"] = _flatten_csv(args.added_imports)
    # Redirect paths may legitimately contain commas
    overrides["redirects"] = list(args.redirects) if args.redirects else None

    if args.no_implicit_strip:
        overrides["implicit_strip"] = False
    if args.strip_comments:
        overrides["strip_comments"] = True
    if args.inline_scripts or args.inline:
        overrides["inline_scripts"] = True
    if args.inline_css or args.inline:
        overrides["inline_css"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]


def _flatten_csv(values: Optional[List[str]]) -> Optional[List[str]]:
    """Merge repeated options, each of which may itself be comma-separated."""
    if not values:
        return None
    out: List[str] = []
    for value in values:
        out.extend(_split_csv(value) or [])
    return out
