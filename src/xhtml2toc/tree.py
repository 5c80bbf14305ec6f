from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Tuple, TypeVar

from .models import DEFAULT_DEPTH, HeadingNode, TocDiagnostic, TocEntry, TocTree

LOG = logging.getLogger("xhtml2toc")

T = TypeVar("T")


def _open_children(stack: List[TocEntry], roots: List[TocEntry]) -> List[TocEntry]:
    return stack[-1].children if stack else roots


def build_toc_tree(
    headings: Iterable[HeadingNode],
    depth: int = DEFAULT_DEPTH,
    strict: bool = False,
) -> TocTree:
    """Nest a flat heading stream into ToC entries.

    ``stack[i]`` is the last entry opened at level ``i``; placing an entry at
    level ``n`` closes every branch at ``n`` and deeper. Headings that skip
    levels are reported once per occurrence, then either dropped (``strict``)
    or nested under titleless placeholder entries.
    """
    roots: List[TocEntry] = []
    stack: List[TocEntry] = []
    diagnostics: List[TocDiagnostic] = []
    current_level = 0

    for heading in headings or []:
        level = heading.level
        if level >= depth:
            continue

        if level > current_level + 1:
            diagnostic = TocDiagnostic(
                level=level,
                previous_level=current_level,
                title=heading.title,
                dropped=strict,
            )
            diagnostics.append(diagnostic)
            LOG.warning(diagnostic.message())
            if strict:
                continue

        del stack[level:]
        while len(stack) < level:
            placeholder = TocEntry()
            _open_children(stack, roots).append(placeholder)
            stack.append(placeholder)

        entry = TocEntry(title=heading.title, link=heading.link)
        _open_children(stack, roots).append(entry)
        stack.append(entry)
        current_level = level

    return TocTree(entries=roots, diagnostics=diagnostics)


def fold_toc(
    entries: List[TocEntry],
    visit: Callable[[TocEntry, int, List[T]], T],
    depth: int = 0,
) -> List[T]:
    """Depth-first, order-preserving fold: ``visit`` gets each entry with its already folded children."""
    return [visit(entry, depth, fold_toc(entry.children, visit, depth + 1)) for entry in entries]


def walk_toc(entries: List[TocEntry], depth: int = 0) -> Iterator[Tuple[int, TocEntry]]:
    for entry in entries:
        yield depth, entry
        yield from walk_toc(entry.children, depth + 1)


def iter_titles(tree: TocTree) -> List[str]:
    return [entry.title for _, entry in walk_toc(tree.entries) if not entry.is_placeholder]
