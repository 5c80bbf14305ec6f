from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_CHARSET = "UTF-8"
DEFAULT_LANGUAGE = "en"
DEFAULT_FORMAT = "txt"
DEFAULT_DEPTH = 6


class Xhtml2TocError(RuntimeError):
    pass


class PageLoadError(Xhtml2TocError):
    def __init__(self, href: str, reason: str) -> None:
        super().__init__(f"Unable to read page {href}: {reason}")
        self.href = href


class ConfigError(ValueError, Xhtml2TocError):
    pass


class UnsupportedFormatError(ValueError, Xhtml2TocError):
    def __init__(self, fmt: Optional[str]) -> None:
        super().__init__(f'unsupported output format: "{fmt}"')
        self.format = fmt


@dataclass(frozen=True)
class HeadingNode:
    level: int
    title: str
    link: Optional[str] = None


@dataclass(frozen=True)
class Page:
    href: str
    headings: Tuple[HeadingNode, ...] = ()


@dataclass
class TocEntry:
    title: Optional[str] = None
    link: Optional[str] = None
    children: List["TocEntry"] = field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        return self.title is None and self.link is None


@dataclass(frozen=True)
class TocDiagnostic:
    """A heading whose level skips one or more levels below the previous one."""

    level: int
    previous_level: int
    title: str
    dropped: bool

    def message(self) -> str:
        return f"non-contiguous heading (h{self.level + 1}): {self.title}"


@dataclass
class TocTree:
    entries: List[TocEntry]
    diagnostics: List[TocDiagnostic] = field(default_factory=list)


@dataclass
class TocConfig:
    basedir: str
    identifier: str
    spine: List[str] = field(default_factory=list)
    charset: str = DEFAULT_CHARSET
    language: str = DEFAULT_LANGUAGE
    format: str = DEFAULT_FORMAT
    depth: int = DEFAULT_DEPTH
    keep_all_headings: bool = False
    strict: bool = False
    title: str = ""
    dc: Dict[str, str] = field(default_factory=dict)
    guide: List[Dict[str, Any]] = field(default_factory=list)
