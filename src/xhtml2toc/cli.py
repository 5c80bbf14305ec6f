"""Command-line interface for xhtml2toc."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

from .version import __version__

OUTPUT_FORMATS = ("txt", "json", "xhtml", "ncx", "opf")


def _get_usage() -> str:
    return (
        f"xhtml2toc {__version__}\n"
        "Usage:\n"
        "  xhtml2toc [--help] [--version|--ver]\n"
        "  xhtml2toc [--basedir DIR] [--config FILE] [--format FORMAT] [options]\n\n"
        "Options:\n"
        "  --basedir DIR                Directory holding the (X)HTML pages (default: cwd)\n"
        "  --config FILE                JSON config (spine, title, dc, guide, ...)\n"
        "  --format FORMAT              txt (default), json, xhtml, ncx or opf\n"
        "  --depth N                    Maximum ToC depth (default: 6)\n"
        "  --keep-all-headings          Keep headings that have no usable anchor\n"
        "  --strict                     Drop headings that skip levels\n"
        "  --title TITLE                Document title\n"
        "  --identifier ID              Unique identifier (default: random UUID)\n"
        "  --language LANG              Document language (default: en)\n"
        "  --charset CHARSET            Output charset (default: UTF-8)\n"
        "  --output FILE                Write to FILE instead of stdout\n"
        "  --verbose                    Verbose progress logs\n"
        "  --debug                      Debug logs"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--ver", action="store_true")
    parser.add_argument("--basedir", help="Directory holding the (X)HTML pages")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--format", help="Output format: " + ", ".join(OUTPUT_FORMATS))
    parser.add_argument("--depth", type=int, default=None, help="Maximum ToC depth (default: 6)")
    parser.add_argument(
        "--keep-all-headings",
        action="store_true",
        help="Keep headings without a usable ID/anchor as unlinked entries",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Drop non-contiguous headings instead of nesting them under placeholders",
    )
    parser.add_argument("--title", help="Document title")
    parser.add_argument("--identifier", help="Unique identifier used in NCX and OPF output")
    parser.add_argument("--language", help="Document language")
    parser.add_argument("--charset", help="Output charset")
    parser.add_argument("--output", help="Output file (default: stdout)")
    parser.add_argument("--verbose", action="store_true", help="Verbose progress logs")
    parser.add_argument("--debug", action="store_true", help="Debug logs")
    return parser


def _build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "basedir": str(Path(args.basedir).expanduser().resolve()) if args.basedir else None,
        "format": args.format,
        "depth": args.depth,
        "keep_all_headings": True if args.keep_all_headings else None,
        "strict": True if args.strict else None,
        "title": args.title,
        "identifier": args.identifier,
        "language": args.language,
        "charset": args.charset,
    }


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        print(_get_usage())
        return 2

    if args.help:
        print(_get_usage())
        return 0

    if args.version or args.ver:
        print(__version__)
        return 0

    if args.depth is not None and args.depth <= 0:
        print("Invalid value for --depth: must be > 0", file=sys.stderr)
        return 6

    try:
        from xhtml2toc import core, opf
    except Exception as exc:
        print(f"Unable to import xhtml2toc core: {exc}", file=sys.stderr)
        return 6

    core.setup_logging(args.verbose, args.debug)

    config_path = None
    if args.config:
        config_path = Path(args.config).expanduser().resolve()
        if not config_path.exists() or not config_path.is_file():
            print(f"Config file not found: {config_path}", file=sys.stderr)
            return core.EXIT_INVALID_ARGS

    try:
        config = core.load_config(config_path, _build_overrides(args))
    except core.ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return core.EXIT_INVALID_ARGS

    try:
        if config.format == "opf":
            output = opf.build_opf(config)
        else:
            output = core.build_toc(config)
    except core.UnsupportedFormatError as exc:
        core.LOG.error(str(exc))
        return core.EXIT_INVALID_ARGS
    except core.PageLoadError as exc:
        core.LOG.error(str(exc))
        return core.EXIT_PAGE_LOAD

    if not args.output:
        print(output)
        return 0

    target = Path(args.output).expanduser().resolve()
    try:
        core.safe_write_text(target, output + "\n")
    except OSError as exc:
        print(f"Unable to write output file {target}: {exc}", file=sys.stderr)
        return core.EXIT_OUTPUT
    core.LOG.info("ToC written to %s", target)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
