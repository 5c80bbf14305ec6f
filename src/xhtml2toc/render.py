"""Output views of a built ToC tree.

Every view folds the same tree with :func:`xhtml2toc.tree.fold_toc`; they only
differ in how a single entry and its already rendered children are formatted.
"""

from __future__ import annotations

import json
from html import escape
from typing import Any, Callable, Dict, List

from .models import TocConfig, TocEntry, TocTree, UnsupportedFormatError
from .tree import fold_toc, walk_toc

TXT_INDENT = "  "
NAV_STYLE = "nav ol { list-style-type: none; }"


def _indent(lines: List[str], prefix: str) -> List[str]:
    return [prefix + line for line in lines]


def render_txt(tree: TocTree, config: TocConfig | None = None) -> str:
    def visit(entry: TocEntry, depth: int, children: List[List[str]]) -> List[str]:
        lines = [] if entry.is_placeholder else [TXT_INDENT * depth + (entry.title or "")]
        for child in children:
            lines.extend(child)
        return lines

    lines: List[str] = []
    for item in fold_toc(tree.entries, visit):
        lines.extend(item)
    return "\n".join(lines)


def toc_to_data(tree: TocTree) -> List[Dict[str, Any]]:
    def visit(entry: TocEntry, depth: int, children: List[Dict[str, Any]]) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if entry.title is not None:
            data["title"] = entry.title
        if entry.link:
            data["link"] = entry.link
        if children:
            data["children"] = children
        return data

    return fold_toc(tree.entries, visit)


def render_json(tree: TocTree, config: TocConfig | None = None) -> str:
    return json.dumps(toc_to_data(tree), ensure_ascii=False, indent=2)


def _nav_label(entry: TocEntry) -> str:
    title = escape(entry.title or "")
    if entry.link:
        return f'<a href="{escape(entry.link)}">{title}</a>'
    return f"<span>{title}</span>"


def render_xhtml_nav(tree: TocTree) -> str:
    def visit(entry: TocEntry, depth: int, children: List[List[str]]) -> List[str]:
        label = _nav_label(entry)
        if not children:
            return [f"<li>{label}</li>"]
        lines = [f"<li>{label}", "  <ol>"]
        for child in children:
            lines.extend(_indent(child, "    "))
        lines.extend(["  </ol>", "</li>"])
        return lines

    lines = ['<nav epub:type="toc">', "  <ol>"]
    for item in fold_toc(tree.entries, visit):
        lines.extend(_indent(item, "    "))
    lines.extend(["  </ol>", "</nav>"])
    return "\n".join(lines)


def render_ncx_navmap(tree: TocTree) -> str:
    play_order = {id(entry): index for index, (_, entry) in enumerate(walk_toc(tree.entries), start=1)}

    def visit(entry: TocEntry, depth: int, children: List[List[str]]) -> List[str]:
        order = play_order[id(entry)]
        lines = [
            f'<navPoint id="nav_{order}" playOrder="{order}">',
            f"  <navLabel><text>{escape(entry.title or '')}</text></navLabel>",
        ]
        if entry.link:
            lines.append(f'  <content src="{escape(entry.link)}" />')
        for child in children:
            lines.extend(_indent(child, "  "))
        lines.append("</navPoint>")
        return lines

    lines = ["<navMap>"]
    for item in fold_toc(tree.entries, visit):
        lines.extend(_indent(item, "  "))
    lines.append("</navMap>")
    return "\n".join(lines)


def render_xhtml(tree: TocTree, config: TocConfig) -> str:
    charset = escape(config.charset)
    lines = [
        f'<?xml version="1.0" encoding="{charset}"?>',
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">',
        "<head>",
        f'  <meta charset="{charset}" />',
        f"  <title>{escape(config.title)}</title>",
        f'  <style type="text/css"> {NAV_STYLE} </style>',
        "</head>",
        "<body>",
    ]
    lines.extend(_indent(render_xhtml_nav(tree).split("\n"), "  "))
    lines.extend(["</body>", "</html>"])
    return "\n".join(lines)


def render_ncx(tree: TocTree, config: TocConfig) -> str:
    lines = [
        f'<?xml version="1.0" encoding="{escape(config.charset)}"?>',
        '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">',
        "  <head>",
        f'    <meta name="dtb:uid" content="{escape(config.identifier)}" />',
        f'    <meta name="dtb:depth" content="{config.depth}" />',
        "  </head>",
        "  <docTitle>",
        f"    <text>{escape(config.title)}</text>",
        "  </docTitle>",
    ]
    lines.extend(_indent(render_ncx_navmap(tree).split("\n"), "  "))
    lines.append("</ncx>")
    return "\n".join(lines)


RENDERERS: Dict[str, Callable[[TocTree, TocConfig], str]] = {
    "txt": render_txt,
    "json": render_json,
    "xhtml": render_xhtml,
    "ncx": render_ncx,
}


def render_toc(tree: TocTree, fmt: str, config: TocConfig) -> str:
    renderer = RENDERERS.get(fmt)
    if renderer is None:
        raise UnsupportedFormatError(fmt)
    return renderer(tree, config)
