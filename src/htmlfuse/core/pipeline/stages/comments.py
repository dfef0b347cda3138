from __future__ import annotations

"""
Comment Stripping Stage.

Removes every comment of the bundled document. Comments carrying a
license marker are deduplicated and a single copy of each is put back at
the top of `<head>`, in the order they were first met.
"""

import logging
from typing import Tuple

from bs4 import BeautifulSoup

from htmlfuse.core.dom.comments import CommentMap
from htmlfuse.core.dom.selectors import is_comment
from htmlfuse.core.dom.surgery import insert_all, remove_element_and_newline
from htmlfuse.domain.constants import LICENSE_MARKER

logger = logging.getLogger(__name__)


def strip_comments(doc: BeautifulSoup) -> Tuple[BeautifulSoup, int, int]:
    """
    Strip comments, keeping one copy of each license comment.

    Args:
        doc: The bundled document.

    Returns:
        Tuple[BeautifulSoup, int, int]: The document, the number of comments
        removed and the number of license comments re-inserted.
    """
    comments = CommentMap()
    removed = 0

    for node in doc.find_all(string=is_comment):
        comments.set(str(node), node)
        remove_element_and_newline(node)
        removed += 1

    licenses = [comments.get(key) for key in comments.keys() if LICENSE_MARKER in key]
    insert_all(doc.head, 0, licenses)

    logger.info(f"Stripped {removed} comment(s), kept {len(licenses)} license comment(s).")
    return doc, removed, len(licenses)
