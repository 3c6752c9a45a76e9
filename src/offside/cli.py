"""Command-line interface: print the layout-resolved token stream of a file."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from offside.config import HASKELL_LAYOUT, LayoutConfig
from offside.errors import ConfigError, LexError

OUTPUT_FORMATS = ("tokens", "braces", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    output_format: str
    keywords: tuple[str, ...] | None
    close_top_level: bool
    watch: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="offside",
        description="Insert virtual layout delimiters into an indentation-sensitive source file",
    )
    p.add_argument("input", help="Input source file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: tokens)",
    )
    p.add_argument(
        "-k",
        "--keyword",
        action="append",
        default=[],
        metavar="KEYWORD",
        help="Layout-creating keyword (repeatable, replaces the default set)",
    )
    p.add_argument(
        "--no-close-top-level",
        action="store_true",
        help="Do not emit a closing token for the implicit top-level block",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover offside.toml)",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-run")
    p.add_argument("--debug", action="store_true", help="Dump raw tokens to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log layout decisions to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "offside.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML: {exc}", path) from exc


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    config_file = config_path if config_path is not None else input_dir / "offside.toml"

    cfg_layout = config.get("layout", {})
    if not isinstance(cfg_layout, dict):
        raise ConfigError("[layout] must be a table", config_file)
    cfg_output = config.get("output", {})
    if not isinstance(cfg_output, dict):
        raise ConfigError("[output] must be a table", config_file)

    # Layout keywords: config < CLI
    keywords: tuple[str, ...] | None = None
    cfg_keywords = cfg_layout.get("keywords")
    if cfg_keywords is not None:
        if not isinstance(cfg_keywords, list) or not all(
            isinstance(k, str) for k in cfg_keywords
        ):
            raise ConfigError("layout.keywords must be a list of strings", config_file)
        keywords = tuple(cfg_keywords)
    if args.keyword:
        keywords = tuple(args.keyword)

    # Top-level close: config < CLI
    close_top_level = True
    cfg_close = cfg_layout.get("close_top_level")
    if cfg_close is not None:
        if not isinstance(cfg_close, bool):
            raise ConfigError("layout.close_top_level must be a boolean", config_file)
        close_top_level = cfg_close
    if args.no_close_top_level:
        close_top_level = False

    # Output format: config < CLI
    output_format = "tokens"
    cfg_format = cfg_output.get("format")
    if cfg_format is not None:
        if cfg_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"output.format must be one of {', '.join(OUTPUT_FORMATS)}, got {cfg_format!r}",
                config_file,
            )
        output_format = cfg_format
    if args.format is not None:
        output_format = args.format

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        output_format=output_format,
        keywords=keywords,
        close_top_level=close_top_level,
        watch=args.watch,
        debug=args.debug,
        verbose=args.verbose,
    )


def layout_config(options: CliOptions) -> LayoutConfig:
    """Build the LayoutConfig selected by *options*."""
    config = HASKELL_LAYOUT
    if options.keywords is not None:
        config = config.with_keywords(options.keywords)
    return config.with_close_top_level(options.close_top_level)


def process_file(options: CliOptions) -> str:
    """Read, lex, and layout-resolve a file, returning the formatted output."""
    from offside import resolve
    from offside.debug import dump_raw_tokens, format_tokens, render_braces, tokens_to_json
    from offside.lexer import tokenize

    source = options.input_file.read_text(encoding="utf-8")
    filename = str(options.input_file)

    if options.debug:
        dump_raw_tokens(tokenize(source, filename), file=sys.stderr)

    tokens = resolve(source, filename, layout_config(options))

    if options.output_format == "braces":
        return render_braces(tokens, source)
    if options.output_format == "json":
        return tokens_to_json(tokens) + "\n"
    return format_tokens(tokens)


def _write(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-run on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    _write(options, process_file(options))
                    print(f"Processed {options.input_file}", file=sys.stderr)
                except LexError as exc:
                    print(exc.format(str(options.input_file)), file=sys.stderr)
                except (OSError, UnicodeDecodeError) as exc:
                    print(f"error: {exc}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
        layout_config(options)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(message)s", stream=sys.stderr
        )

    if options.watch:
        watch_loop(options)
        return 0

    try:
        output = process_file(options)
    except LexError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    _write(options, output)
    return 0
