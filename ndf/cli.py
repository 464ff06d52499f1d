"""CLI for parsing and normalizing NDF files."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from ndf.formatter import NDFFormatter
from ndf.parser import ParserConfig, parse
from ndf.preprocessor import PreprocessorError

DEFAULT_SUFFIX = ".ndf"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ndf-format",
        description="Parse NDF files, expand their macros and write them back in a normalized layout.",
    )
    parser.add_argument("input", help=f"Path to an NDF file or a directory of {DEFAULT_SUFFIX} files.")
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        help="Directory where normalized files should be written (default: print to stdout).",
    )
    parser.add_argument(
        "--indent",
        default="\t",
        help="Indentation characters to use in pretty mode (default: tab).",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Write everything on a single line without decorative whitespace.",
    )
    parser.add_argument(
        "--preprocess",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Expand @PP.Expand and @PP.Replace directives (default: enabled).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser progress.")
    return parser.parse_args(argv)


def collect_inputs(path: Path) -> list[Path]:
    if path.is_dir():
        files = sorted(p for p in path.glob(f"*{DEFAULT_SUFFIX}") if p.is_file())
        if not files:
            raise FileNotFoundError(f"No {DEFAULT_SUFFIX} files found in directory: {path}")
        return files
    if path.is_file():
        return [path]
    raise FileNotFoundError(f"Input path does not exist: {path}")


def format_document(text: str, formatter: NDFFormatter, config: ParserConfig | None = None) -> str:
    root = parse(text, config)
    return formatter.format_node(root)


def generate(
    files: Iterable[Path],
    output_dir: Path | None,
    formatter: NDFFormatter,
    config: ParserConfig,
) -> None:
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
    for source in files:
        text = source.read_text(encoding="utf-8")
        try:
            normalized = format_document(text, formatter, config)
        except PreprocessorError as exc:
            raise PreprocessorError(f"Failed to preprocess {source}: {exc}") from exc
        if output_dir is None:
            print(normalized)
            continue
        destination = output_dir / source.name
        destination.write_text(normalized + "\n", encoding="utf-8")
        try:
            display_path = destination.relative_to(Path.cwd())
        except ValueError:
            display_path = destination
        print(f"Wrote {display_path}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config: ParserConfig = {
        "preprocess": args.preprocess,
        "log_level": logging.DEBUG if args.verbose else logging.WARNING,
    }
    formatter = NDFFormatter(indent=args.indent, pretty=not args.compact)
    output_dir = Path(args.output_dir) if args.output_dir else None
    try:
        files = collect_inputs(Path(args.input))
        generate(files, output_dir, formatter, config)
    except (FileNotFoundError, PreprocessorError) as exc:
        print(f"ndf-format: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
