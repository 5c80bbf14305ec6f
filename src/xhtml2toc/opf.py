"""OPF package document (metadata, manifest, spine, guide) for a set of pages."""

from __future__ import annotations

import logging
import mimetypes
import re
from html import escape
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Tuple

from .core import find_files
from .models import TocConfig

LOG = logging.getLogger("xhtml2toc")

NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
OPF_MEDIA_TYPE = "application/oebps-package+xml"
NAV_DOCUMENT = "toc.xhtml"

EPUB_MEDIA_TYPES = {
    ".ncx": NCX_MEDIA_TYPE,
    ".opf": OPF_MEDIA_TYPE,
    ".xhtml": "application/xhtml+xml",
}

DC_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


def guess_media_type(href: str) -> str:
    media_type = EPUB_MEDIA_TYPES.get(PurePosixPath(href).suffix.lower())
    if media_type:
        return media_type
    media_type, _ = mimetypes.guess_type(href)
    return media_type or "application/octet-stream"


def zero_padded_id(prefix: str, index: int, digits: int) -> str:
    return f"{prefix}{str(index + 1).zfill(digits)}"


def build_manifest_items(config: TocConfig, files: List[str], digits: int) -> Tuple[List[str], int]:
    items: List[str] = []
    ncx_count = 0

    for index, href in enumerate(files):
        media_type = guess_media_type(href)
        if href in config.spine:
            item_id = zero_padded_id("page_", config.spine.index(href), digits)
        elif media_type == NCX_MEDIA_TYPE:
            item_id = "ncx"
            ncx_count += 1
        elif media_type == OPF_MEDIA_TYPE:
            continue
        else:
            item_id = zero_padded_id("res_", index, digits)

        properties = ' properties="nav"' if href == NAV_DOCUMENT else ""
        items.append(
            f'<item id="{item_id}" media-type="{media_type}" href="{escape(href)}"{properties} />'
        )

    if ncx_count > 1:
        LOG.error("several NCX files have been found.")
    return sorted(items), ncx_count


def build_manifest_spine(config: TocConfig, generated_files: Optional[List[str]] = None) -> str:
    files = find_files(config.basedir) + list(generated_files or [])
    digits = len(str(len(files)))
    items, ncx_count = build_manifest_items(config, files, digits)

    lines = ["  <manifest>"]
    lines.extend(f"    {item}" for item in items)
    lines.append("  </manifest>")
    lines.append('  <spine toc="ncx">' if ncx_count == 1 else "  <spine>")
    for index, _ in enumerate(config.spine):
        lines.append(f'    <itemref idref="{zero_padded_id("page_", index, digits)}" />')
    lines.append("  </spine>")
    return "\n".join(lines)


def build_guide(guide: List[Dict[str, Any]]) -> str:
    if not guide:
        return ""
    lines = ["  <guide>"]
    for item in guide:
        lines.append(
            "    <reference"
            f' href="{escape(str(item.get("href", "")))}"'
            f' type="{escape(str(item.get("type", "")))}"'
            f' title="{escape(str(item.get("title", "")))}" />'
        )
    lines.append("  </guide>")
    return "\n".join(lines)


def build_opf(config: TocConfig, generated_files: Optional[List[str]] = None) -> str:
    lines = [
        f'<?xml version="1.0" encoding="{escape(config.charset)}"?>',
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uuid">',
        '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">',
        f'    <dc:identifier id="uuid">{escape(config.identifier)}</dc:identifier>',
        f"    <dc:title>{escape(config.title)}</dc:title>",
        f"    <dc:language>{escape(config.language)}</dc:language>",
    ]
    for key, value in config.dc.items():
        if not DC_NAME_RE.match(str(key)):
            LOG.warning("Skipping invalid dc metadata name: %r", key)
            continue
        lines.append(f"    <dc:{key}>{escape(str(value))}</dc:{key}>")
    lines.append("  </metadata>")
    lines.append(build_manifest_spine(config, generated_files))
    guide = build_guide(config.guide)
    if guide:
        lines.append(guide)
    lines.append("</package>")
    return "\n".join(lines)
