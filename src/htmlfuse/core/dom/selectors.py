from __future__ import annotations

"""
Element Predicates.

Named predicates over BeautifulSoup nodes. Each one can be handed to
`find_all` directly, which keeps the stage modules free of ad-hoc
attribute juggling.
"""

from typing import Any, List

from bs4 import Comment, NavigableString, Tag
from bs4.element import PreformattedString

from htmlfuse.domain.constants import LICENSE_MARKER, URL_ATTRS

_JS_TYPES = ("text/javascript", "application/javascript")


def _rel_values(tag: Tag) -> List[str]:
    """Normalise the (possibly multi-valued) rel attribute."""
    rel = tag.get("rel")
    if rel is None:
        return []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]


def _attr_lower(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip().lower()


# -----------------------------------------------------------------------------
# LINKS
# -----------------------------------------------------------------------------

def is_component_external_style(node: Any) -> bool:
    """`<link rel="import" type="css">`: a style owned by a `<dom-module>`."""
    return (
        isinstance(node, Tag)
        and node.name == "link"
        and "import" in _rel_values(node)
        and _attr_lower(node, "type") == "css"
    )


def is_import_link(node: Any) -> bool:
    """`<link rel="import">` pointing at another document."""
    return (
        isinstance(node, Tag)
        and node.name == "link"
        and "import" in _rel_values(node)
        and not is_component_external_style(node)
    )


def is_css_link(node: Any) -> bool:
    return isinstance(node, Tag) and node.name == "link" and "stylesheet" in _rel_values(node)


def is_any_css_link(node: Any) -> bool:
    return is_css_link(node) or is_component_external_style(node)


# -----------------------------------------------------------------------------
# SCRIPTS & STYLES
# -----------------------------------------------------------------------------

def is_javascript(node: Any) -> bool:
    if not isinstance(node, Tag) or node.name != "script":
        return False
    if not node.has_attr("type"):
        return True
    return _attr_lower(node, "type") in _JS_TYPES


def is_external_script(node: Any) -> bool:
    return is_javascript(node) and node.has_attr("src")


def is_inline_script(node: Any) -> bool:
    return is_javascript(node) and not node.has_attr("src")


def is_css_style(node: Any) -> bool:
    if not isinstance(node, Tag) or node.name != "style":
        return False
    return not node.has_attr("type") or _attr_lower(node, "type") == "text/css"


def is_relocatable_head_node(node: Any) -> bool:
    """Scripts and links in `<head>` that move out of the rendering flow."""
    return (
        isinstance(node, Tag)
        and node.name in ("script", "link")
        and not is_component_external_style(node)
    )


# -----------------------------------------------------------------------------
# MISC
# -----------------------------------------------------------------------------

def is_meta_charset(node: Any) -> bool:
    return isinstance(node, Tag) and node.name == "meta" and node.has_attr("charset")


def has_url_attr(node: Any) -> bool:
    return isinstance(node, Tag) and any(node.has_attr(a) for a in URL_ATTRS)


def needs_base_target(node: Any) -> bool:
    return isinstance(node, Tag) and node.name in ("a", "form") and not node.has_attr("target")


def is_comment(node: Any) -> bool:
    return isinstance(node, Comment)


def is_license_comment(node: Any) -> bool:
    return isinstance(node, Comment) and LICENSE_MARKER in str(node)


def is_blank_text(node: Any) -> bool:
    """Plain text made only of whitespace (comments and doctypes excluded)."""
    return (
        isinstance(node, NavigableString)
        and not isinstance(node, PreformattedString)
        and not str(node).strip()
    )
