from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Provides centralized access to the markers, regular expressions and
attribute lists shared by the flattening, inlining and path resolution
stages.
"""

import re
from typing import List, Pattern

CURRENT_CONFIG_VERSION = "1.0.0"
USER_AGENT = "htmlfuse/1.0.0"

# -----------------------------------------------------------------------------
# MARKERS
# -----------------------------------------------------------------------------

# Comments carrying this marker are deduplicated but never discarded
LICENSE_MARKER = "@license"

# Attribute stamped on every hidden container created by the bundler
AUTHORSHIP_ATTR = "by-htmlfuse"
HIDDEN_ATTR = "hidden"

# Inline scripts that remember their original external source
FAKE_EXTERNAL_ATTR = "data-inlined-src"

# Legacy component dialect that cannot be flattened
LEGACY_ELEMENT = "polymer-element"
LEGACY_MARKUP_MESSAGE = (
    "Legacy <polymer-element> markup (Polymer < 0.8) is not supported by htmlfuse."
)

# -----------------------------------------------------------------------------
# URL HANDLING
# -----------------------------------------------------------------------------

# Root-relative, fragment-only and scheme-qualified URLs are never rewritten
ABS_URL: Pattern[str] = re.compile(r"(^/)|(^#)|(^[\w\-\d]*:)")

# Protocol-relative and http(s) URLs are always left to the browser
EXTERNAL_URL: Pattern[str] = re.compile(r"^(?:https?:)?//")

CSS_URL: Pattern[str] = re.compile(r"url\([^)]*\)")

# Data-binding expressions must survive untouched
URL_TEMPLATE: Pattern[str] = re.compile(r"\{\{.*\}\}|\[\[.*\]\]")

URL_ATTRS: List[str] = ["href", "src", "action", "style", "assetpath"]

# Excludes with these endings are never analyzed for implicit strips
IMPLICIT_EXCLUDE_SKIP: Pattern[str] = re.compile(r"(\.js|\.css|/)$")

SCRIPT_CLOSE: Pattern[str] = re.compile(r"</(script)", re.IGNORECASE)

REDIRECT_SEPARATOR = "|"
