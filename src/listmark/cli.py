#!/usr/bin/env python3
"""
listmark: Pandoc extended lists for Markdown

Resolves hash lists (`#.`), example lists (`(@label)`), custom labels
(`{::label}`) and their references into plain numbers, and renumbers
letter and roman numeral lists.

Common usage:
  listmark notes.md                 # resolved Markdown to stdout
  listmark --renumber --inplace docs/
  listmark --labels notes.md        # JSON index of labels and terms
  listmark --check --strict .
  listmark --list-files .
"""

from __future__ import annotations

import argparse
import importlib.metadata
import sys
from dataclasses import dataclass
from pathlib import Path

from listmark.config import find_config_file, load_config, merge_cli_with_config, settings_from
from listmark.file_api import Action, process_files
from listmark.file_discovery import DiscoveryConfig, FileDiscovery


@dataclass
class Options:
    """Command-line options for the listmark tool."""

    files: list[str]
    output: str
    inplace: bool
    action: Action
    version: bool
    # Syntax options
    custom_labels: bool
    auto_renumber: bool
    strict: bool
    # File discovery options
    extend_include: list[str]
    exclude: list[str] | None
    extend_exclude: list[str]
    respect_gitignore: bool
    list_files: bool


def _build_parser() -> argparse.ArgumentParser:
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    parser = argparse.ArgumentParser(
        description=doc_parts[0],
        epilog="\n\n".join(doc_parts[1:]),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=str,
        default=[],
        help="Input files or directories (use '-' for stdin, '.' for current directory)",
    )
    parser.add_argument(
        "-o", "--output", type=str, default="-", help="Output file (use '-' for stdout)"
    )
    parser.add_argument(
        "-i", "--inplace", action="store_true", help="Edit files in place (ignores --output)"
    )

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--renumber",
        action="store_true",
        help="Renumber letter and roman numeral lists, keeping extended syntax",
    )
    actions.add_argument(
        "--labels",
        action="store_true",
        help="Print a JSON index of example labels, custom labels and definition terms",
    )
    actions.add_argument(
        "--check",
        action="store_true",
        help="Only report duplicate labels, unresolved references and (with --strict) "
        "invalid list blocks; exit 1 if any are found",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Only treat list blocks Pandoc would recognize as lists",
    )
    parser.add_argument(
        "--no-custom-labels",
        action="store_true",
        dest="no_custom_labels",
        help="Do not recognize {::label} items and references",
    )
    # File discovery options
    parser.add_argument(
        "--extend-include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Additional file patterns to include (e.g., '*.mdx'). Can be repeated",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Replace all default exclusion patterns. Can be repeated",
    )
    parser.add_argument(
        "--extend-exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Add to default exclusion patterns (e.g., 'drafts/'). Can be repeated",
    )
    parser.add_argument(
        "--no-respect-gitignore",
        action="store_true",
        dest="no_respect_gitignore",
        help="Disable .gitignore integration",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print resolved file paths without processing them",
    )
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    return parser


def _explicit_flags(args: list[str] | None) -> set[str]:
    """
    Which config-backed options were actually given on the command line.

    Re-parses with sentinel defaults, since comparing against default values
    fails when the user passes the default explicitly.
    """
    sentinel = object()
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--strict", action="store_true", default=sentinel)
    parser.add_argument(
        "--no-custom-labels", dest="no_custom_labels", action="store_true", default=sentinel
    )
    parser.add_argument(
        "--no-respect-gitignore", dest="no_respect_gitignore", action="store_true", default=sentinel
    )
    # append actions: None means not supplied
    parser.add_argument("--extend-include", action="append", default=None)
    parser.add_argument("--exclude", action="append", default=None)
    parser.add_argument("--extend-exclude", action="append", default=None)
    opts, _ = parser.parse_known_args(args if args is not None else sys.argv[1:])

    tracked = {
        "strict": "strict",
        "no_custom_labels": "custom_labels",
        "no_respect_gitignore": "respect_gitignore",
        "extend_include": "extend_include",
        "exclude": "exclude",
        "extend_exclude": "extend_exclude",
    }
    explicit: set[str] = set()
    for dest_name, field_name in tracked.items():
        val = getattr(opts, dest_name)
        if val is not sentinel and val is not None:
            explicit.add(field_name)
    return explicit


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)`, where `explicit_flags` names the options
    the user passed explicitly (these take precedence over the config file).
    """
    opts = _build_parser().parse_args(args)

    if opts.renumber:
        action = Action.renumber
    elif opts.labels:
        action = Action.labels
    elif opts.check:
        action = Action.check
    else:
        action = Action.resolve

    options = Options(
        files=opts.files,
        output=opts.output,
        inplace=opts.inplace,
        action=action,
        version=opts.version,
        custom_labels=not opts.no_custom_labels,
        auto_renumber=False,
        strict=opts.strict,
        extend_include=opts.extend_include,
        exclude=opts.exclude,
        extend_exclude=opts.extend_exclude,
        respect_gitignore=not opts.no_respect_gitignore,
        list_files=opts.list_files,
    )
    return options, _explicit_flags(args)


def _needs_file_resolution(files: list[str]) -> bool:
    """Check if any input paths are directories or globs."""
    for f in files:
        if f == "-":
            continue
        if Path(f).is_dir() or any(c in f for c in "*?["):
            return True
    return False


def _resolve_files(options: Options) -> list[str]:
    """Expand directories and globs. Plain file paths and '-' pass through."""
    if not _needs_file_resolution(options.files) and not options.list_files:
        return options.files

    resolvable = [f for f in options.files if f != "-"]
    discovery = FileDiscovery(
        DiscoveryConfig(
            extend_include=options.extend_include,
            exclude=options.exclude,
            extend_exclude=options.extend_exclude,
            respect_gitignore=options.respect_gitignore,
        )
    )
    result = [str(p) for p in discovery.resolve(resolvable)]
    if len(resolvable) < len(options.files):
        result.insert(0, "-")
    return result


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the listmark CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code: 0 for success, 1 for usage errors or problems found by
        `--check`, 2 for other errors.
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            print(f"v{importlib.metadata.version('listmark')}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if not options.files:
        print(
            "Error: No input specified. Provide files, directories (use '.' for current"
            " directory), or '-' for stdin. Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    config_path = find_config_file(Path.cwd())
    if config_path:
        merge_cli_with_config(options, load_config(config_path), explicit_flags)

    try:
        resolved_files = _resolve_files(options)
        if options.list_files:
            for f in resolved_files:
                print(f)
            return 0

        warnings = process_files(
            resolved_files,
            options.action,
            settings_from(options),
            output=options.output,
            inplace=options.inplace,
        )
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for warning in warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if options.action == Action.check and warnings:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
