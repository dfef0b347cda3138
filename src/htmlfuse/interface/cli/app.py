from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and
merging of configuration sources (defaults, persistent storage, and CLI
overrides), pipeline execution, and result rendering. The bundled HTML is
the only thing written to stdout (unless an output file is given); logs
and the human summary go to stderr so the tool composes in shell pipes.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from htmlfuse.core.pipeline.engine import run_pipeline
from htmlfuse.core.pipeline.stages.validator import validate_config
from htmlfuse.domain.config import get_default_config, load_config, save_config
from htmlfuse.domain.pipeline_models import BundleResult
from htmlfuse.infra.logging import LoggingConfig, configure_logging, get_logger
from htmlfuse.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 missing input,
             130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else "INFO"
    logging_conf = LoggingConfig(level=log_level, console=True, log_file=args.log_file)
    configure_logging(logging_conf)

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults, explicit file or persistent state)
    if args.use_defaults:
        base_conf = get_default_config()
    else:
        base_conf = load_config(args.config_file)

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.save_config:
        save_config(_persistable(clean_conf))

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 6. Pre-flight input verification
    if not clean_conf["input_url"]:
        missing = _missing_input(clean_conf)
        if missing is not None:
            logger.error(missing)
            print(f"ERROR: {missing}", file=sys.stderr)
            return 2

    # 7. Pipeline execution phase
    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        msg = "Operation interrupted by user."
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except Exception as e:
        msg = f"Pipeline failure: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        if result.ok and not result.output_path:
            sys.stdout.write(result.html or "")
            sys.stdout.flush()
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only keys known to the default configuration are merged; `None` means
    "not given on the command line".

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in get_default_config():
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


def _persistable(config: Dict[str, Any]) -> Dict[str, Any]:
    """Options worth keeping between runs (per-run IO fields are dropped)."""
    return {k: v for k, v in config.items() if k not in ("input_path", "input_url", "output_path")}


def _missing_input(config: Dict[str, Any]) -> Optional[str]:
    """Return an error message if the target document cannot be found."""
    target = config["input_path"]
    if not target:
        return "No input document given."

    abspath = config["abspath"]
    path = os.path.join(abspath, target.lstrip("/\\")) if abspath else target
    if not os.path.isfile(path):
        return f"Input document does not exist: {path}"
    return None

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: BundleResult) -> None:
    """
    Print the execution report to stderr.

    Args:
        result: The pipeline result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary
    print(f"Bundled {result.target}", file=sys.stderr)
    if result.output_path:
        print(f"Output written to: {result.output_path}", file=sys.stderr)

    stats_labels = {
        "documents": "Documents flattened",
        "imports_merged": "Imports merged",
        "duplicates_removed": "Duplicate imports removed",
        "imports_stripped": "Imports stripped",
        "imports_excluded": "Imports excluded",
        "imports_templated": "Templated imports skipped",
        "scripts_inlined": "Scripts inlined",
        "styles_inlined": "Stylesheets inlined",
        "comments_removed": "Comments removed",
        "license_comments": "License comments kept",
    }
    stats = summary.get("stats", {})
    for key, label in stats_labels.items():
        if stats.get(key):
            print(f"  {label}: {stats[key]}", file=sys.stderr)

    if summary.get("implicit_excludes"):
        print(f"  Implicit strip-excludes: {summary['implicit_excludes']}", file=sys.stderr)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
