"""Heading extraction and anchor resolution for a single page."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from bs4.element import Tag

from .models import HeadingNode

LOG = logging.getLogger("xhtml2toc")

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_WS_RE = re.compile(r"\s+")


def normalize_title(text: str) -> str:
    return _WS_RE.sub(" ", (text or "").strip())


def heading_level(element: Tag) -> int:
    return int(element.name[1:]) - 1


def _preceding_text(element: Tag) -> str:
    # element siblings only; loose text nodes between tags are not counted
    return "".join(sibling.get_text() for sibling in element.find_previous_siblings())


def find_heading_id(element: Tag) -> Optional[str]:
    """Return the id the heading can be linked to, walking up through its ancestors.

    An ancestor id is only usable while no text precedes the heading inside
    that ancestor; otherwise jumping to the ancestor would land on unrelated
    content.
    """
    node = element
    while isinstance(node, Tag):
        anchor_id = node.get("id")
        if anchor_id:
            return str(anchor_id)
        if _preceding_text(node):
            return None
        node = node.parent
    return None


def resolve_anchor(element: Tag, page_href: str, is_first_heading: bool) -> Optional[str]:
    anchor_id = find_heading_id(element)
    if anchor_id:
        return f"{page_href}#{anchor_id}"
    if is_first_heading:
        return page_href
    return None


def extract_headings(soup: Tag, page_href: str, keep_all_headings: bool = False) -> Tuple[HeadingNode, ...]:
    headings: List[HeadingNode] = []
    for index, element in enumerate(soup.find_all(HEADING_TAGS)):
        title = normalize_title(element.get_text())
        link = resolve_anchor(element, page_href, is_first_heading=index == 0)
        if link is None and not keep_all_headings:
            LOG.debug("Dropping unlinkable heading in %s: %s", page_href, title)
            continue
        headings.append(HeadingNode(level=heading_level(element), title=title, link=link))
    return tuple(headings)
