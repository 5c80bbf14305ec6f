"""Build EPUB tables of contents from the headings of (X)HTML pages."""

from .version import __version__

__all__ = ["__version__"]
