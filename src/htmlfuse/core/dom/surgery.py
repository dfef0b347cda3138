from __future__ import annotations

"""
Tree Surgery Helpers.

Primitive mutations built on top of BeautifulSoup: removal that keeps the
serialized output clean, prepending, hiding nodes inside placeholder
containers and ancestor walks.
"""

from typing import Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup, PageElement, Tag

from htmlfuse.core.dom.selectors import is_blank_text
from htmlfuse.domain.constants import AUTHORSHIP_ATTR, HIDDEN_ATTR

Replacement = Union[PageElement, Sequence[PageElement], None]


def remove_element_and_newline(node: PageElement, replacement: Replacement = None) -> None:
    """
    Remove (or replace) a node together with the blank text right after it.

    Args:
        node: Node to remove.
        replacement: Node or ordered nodes to put in its place.
    """
    following = node.next_sibling
    if is_blank_text(following):
        following.extract()

    if replacement is None:
        node.extract()
        return

    nodes = [replacement] if isinstance(replacement, PageElement) else list(replacement)
    if nodes:
        node.replace_with(*nodes)
    else:
        node.extract()


def prepend(parent: Tag, node: PageElement) -> None:
    parent.insert(0, node)


def insert_all(parent: Tag, index: int, nodes: Iterable[PageElement]) -> None:
    """Insert nodes at `index`, keeping their relative order."""
    for offset, node in enumerate(list(nodes)):
        parent.insert(index + offset, node)


def create_hidden_container(soup: BeautifulSoup) -> Tag:
    """A `<div hidden by-htmlfuse>` used to keep markup out of rendering."""
    return soup.new_tag("div", attrs={HIDDEN_ATTR: "", AUTHORSHIP_ATTR: ""})


def hide(node: PageElement, soup: BeautifulSoup) -> Tag:
    """
    Wrap a node in a hidden container at its current position.

    Returns:
        Tag: The new container.
    """
    hidden = create_hidden_container(soup)
    remove_element_and_newline(node, hidden)
    hidden.append(node)
    return hidden


def is_descendant_of(node: Optional[PageElement], target: PageElement) -> bool:
    """Ancestor walk from `node` (inclusive) looking for `target`."""
    while node is not None:
        if node is target:
            return True
        node = node.parent
    return False


def is_templated(node: PageElement) -> bool:
    """True when the node lives inside a `<template>`'s inert content."""
    return any(parent.name == "template" for parent in node.parents)


def ensure_document_structure(soup: BeautifulSoup) -> Tag:
    """
    Guarantee the `<html>`, `<head>` and `<body>` skeleton of a document.

    Parsers omit elements that had no content (a document holding only an
    import link has no `<body>`); later stages rely on both being present.

    Returns:
        Tag: The `<html>` element.
    """
    html = soup.find("html")
    if html is None:
        html = soup.new_tag("html")
        stray: List[PageElement] = [n for n in soup.contents if isinstance(n, Tag)]
        soup.append(html)
        body = soup.new_tag("body")
        html.append(body)
        for node in stray:
            body.append(node)

    if html.find("head", recursive=False) is None:
        html.insert(0, soup.new_tag("head"))
    if html.find("body", recursive=False) is None:
        html.append(soup.new_tag("body"))
    return html
