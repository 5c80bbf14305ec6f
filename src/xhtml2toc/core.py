from __future__ import annotations

import json
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from bs4 import BeautifulSoup

from .anchors import extract_headings
from .models import (
    DEFAULT_CHARSET,
    DEFAULT_DEPTH,
    DEFAULT_FORMAT,
    DEFAULT_LANGUAGE,
    ConfigError,
    HeadingNode,
    Page,
    PageLoadError,
    TocConfig,
    TocTree,
    UnsupportedFormatError,
)
from .render import RENDERERS, render_toc
from .tree import build_toc_tree

LOG = logging.getLogger("xhtml2toc")

EXIT_INVALID_ARGS = 6
EXIT_OUTPUT = 7
EXIT_PAGE_LOAD = 8

PAGE_FILE_RE = re.compile(r"\.x?html?$", re.IGNORECASE)
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

CONFIG_FIELDS = {
    "basedir",
    "spine",
    "identifier",
    "charset",
    "language",
    "format",
    "depth",
    "keep_all_headings",
    "strict",
    "title",
    "dc",
    "guide",
}


def new_identifier() -> str:
    return str(uuid.uuid4())


def _resolve_log_level(verbose: bool, debug: bool) -> int:
    return logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)


def _configure_xhtml2toc_logger(level: int) -> None:
    LOG.setLevel(level)
    LOG.propagate = False
    if not LOG.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        handler.setLevel(level)
        LOG.addHandler(handler)
    else:
        for handler in LOG.handlers:
            handler.setLevel(level)
            if handler.formatter is None:
                handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))


def setup_logging(verbose: bool, debug: bool) -> None:
    level = _resolve_log_level(verbose, debug)
    _configure_xhtml2toc_logger(level)


def safe_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")


def find_files(basedir: str, pattern: Optional[re.Pattern] = None) -> List[str]:
    base = Path(basedir)
    files: List[str] = []
    for path in sorted(base.rglob("*")):
        if path.is_dir():
            continue
        if pattern is not None and not pattern.search(path.name):
            continue
        files.append(path.relative_to(base).as_posix())
    return files


def default_spine(basedir: str) -> List[str]:
    return find_files(basedir, PAGE_FILE_RE)


def _config_key(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower().replace("-", "_")


def read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data_raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    if not isinstance(data_raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data_raw


def _coerce_depth(value: Any) -> int:
    try:
        depth = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid ToC depth: {value!r}") from None
    if depth <= 0:
        raise ConfigError(f"Invalid ToC depth: {depth} (must be > 0)")
    return depth


def load_config(
    path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    identifier_factory: Callable[[], str] = new_identifier,
) -> TocConfig:
    params: Dict[str, Any] = {}
    sources: List[Mapping[str, Any]] = []
    if path is not None:
        sources.append(read_config_file(path))
    if overrides:
        sources.append(overrides)

    for source in sources:
        for key, value in source.items():
            name = _config_key(key)
            if name not in CONFIG_FIELDS:
                LOG.warning("Ignoring unknown config key: %s", key)
                continue
            if value is None:
                continue
            params[name] = value

    basedir = str(params.get("basedir") or os.getcwd())
    if not Path(basedir).is_dir():
        raise ConfigError(f"Base directory not found: {basedir}")

    dc = params.get("dc") or {}
    guide = params.get("guide") or []
    if not isinstance(dc, dict):
        raise ConfigError("Config key 'dc' must be an object")
    if not isinstance(guide, list):
        raise ConfigError("Config key 'guide' must be a list")

    spine = [str(href) for href in params.get("spine") or []]
    if not spine:
        spine = default_spine(basedir)
        LOG.debug("Spine defaults to %d page(s) found in %s", len(spine), basedir)

    return TocConfig(
        basedir=basedir,
        identifier=str(params.get("identifier") or identifier_factory()),
        spine=spine,
        charset=str(params.get("charset") or DEFAULT_CHARSET),
        language=str(params.get("language") or DEFAULT_LANGUAGE),
        format=str(params.get("format") or DEFAULT_FORMAT),
        depth=_coerce_depth(params.get("depth", DEFAULT_DEPTH)),
        keep_all_headings=bool(params.get("keep_all_headings", False)),
        strict=bool(params.get("strict", False)),
        title=str(params.get("title") or ""),
        dc={str(k): str(v) for k, v in dc.items()},
        guide=list(guide),
    )


def load_page(basedir: str, href: str, keep_all_headings: bool = False) -> Page:
    page_path = Path(basedir) / href
    try:
        raw = page_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PageLoadError(href, str(exc)) from exc

    soup = BeautifulSoup(raw, "html.parser")
    headings = extract_headings(soup, href, keep_all_headings)
    LOG.info("Parsed %s: %d heading(s)", href, len(headings))
    return Page(href=href, headings=headings)


def parse_headings(basedir: str, spine: Iterable[str], keep_all_headings: bool = False) -> List[Page]:
    return [load_page(basedir, href, keep_all_headings) for href in spine]


def iter_headings(pages: Iterable[Page]) -> Iterator[HeadingNode]:
    for page in pages:
        yield from page.headings


def build_toc_tree_from_pages(pages: Iterable[Page], config: TocConfig) -> TocTree:
    tree = build_toc_tree(iter_headings(pages), depth=config.depth, strict=config.strict)
    if tree.diagnostics:
        LOG.info("%d non-contiguous heading(s) found", len(tree.diagnostics))
    return tree


def build_toc(config: TocConfig, fmt: Optional[str] = None, pages: Optional[List[Page]] = None) -> str:
    fmt = fmt or config.format
    if fmt not in RENDERERS:
        raise UnsupportedFormatError(fmt)
    if pages is None:
        pages = parse_headings(config.basedir, config.spine, config.keep_all_headings)
    tree = build_toc_tree_from_pages(pages, config)
    return render_toc(tree, fmt, config)
