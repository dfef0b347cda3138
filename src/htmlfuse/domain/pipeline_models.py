from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the data structures and factory functions used to communicate
bundling results between the pipeline engine and interface layers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass
class BundleStats:
    """
    Counters collected while a document tree is bundled.

    Attributes:
        documents: Documents flattened (root included).
        imports_merged: Import sites replaced by their document's content.
        duplicates_removed: Import sites removed as already-resolved duplicates.
        imports_stripped: Import sites removed by strip-exclude policy.
        imports_excluded: Import sites left untouched by exclude policy.
        imports_templated: Import sites left untouched inside templates.
        scripts_inlined: External scripts replaced by their body.
        styles_inlined: Stylesheet links replaced by `<style>` elements.
        comments_removed: Comments dropped by the strip stage.
        license_comments: Distinct license comments kept in `<head>`.
    """
    documents: int = 0
    imports_merged: int = 0
    duplicates_removed: int = 0
    imports_stripped: int = 0
    imports_excluded: int = 0
    imports_templated: int = 0
    scripts_inlined: int = 0
    styles_inlined: int = 0
    comments_removed: int = 0
    license_comments: int = 0


@dataclass(frozen=True)
class BundleResult:
    """
    Unified result object of a complete bundling run.

    The result is all-or-nothing: a failed run never carries html.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        target: Root document URL that was bundled.
        html: Serialized single-file document.
        output_path: File the document was written to (empty if none).
        summary: Execution statistics and the effective policy.
    """
    ok: bool
    error: str
    target: str
    html: Optional[str] = None
    output_path: str = ""
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        target: str,
        summary_extra: Optional[Dict[str, Any]] = None
) -> BundleResult:
    """
    Create a failed bundling result instance.

    Args:
        error: Detailed error description.
        target: The root document that was being bundled.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        BundleResult: An immutable error result object.
    """
    return BundleResult(
        ok=False,
        error=error,
        target=target,
        html=None,
        summary=summary_extra or {},
    )


def create_success_result(
        target: str,
        html: str,
        output_path: str = "",
        summary_extra: Optional[Dict[str, Any]] = None
) -> BundleResult:
    """
    Create a successful bundling result instance.

    Args:
        target: The bundled root document URL.
        html: Serialized bundle.
        output_path: Destination file, if the bundle was written to disk.
        summary_extra: Final execution metrics.

    Returns:
        BundleResult: An immutable success result object.
    """
    return BundleResult(
        ok=True,
        error="",
        target=target,
        html=html,
        output_path=output_path,
        summary=summary_extra or {},
    )
