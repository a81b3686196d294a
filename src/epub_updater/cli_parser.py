#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation from the CLI entry point refactoring
# - Extracted command-line parsing logic
# - One sub-command per package edit, plus list, convert and validate
# - Moved help text to cli_help_text.py to reduce file size
#

"""
cli_parser.py - Command-line argument parsing for epub-updater
==============================================================

Handles parsing and validation of command-line arguments. Defaults shown
in the help come from the loaded configuration.
"""

from __future__ import annotations

import argparse
from typing import Any

from .cli_help_text import get_epilog_text
from .config_manager import DEFAULT_CONFIG_PATH

LAYOUT_CHOICES = ["auto", "OEBPS", "EPUB"]


def _add_global_args(parser: argparse.ArgumentParser, config: dict[str, Any]) -> None:
    """Add options shared by every sub-command.

    Args:
        parser: ArgumentParser instance to add arguments to
        config: Configuration dictionary for default values
    """
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--layout",
        type=str,
        choices=LAYOUT_CHOICES,
        help=f"Directory layout of the input book (default: {config['epub']['layout']})",
    )

    parser.add_argument(
        "--cover-marker",
        type=str,
        help=f"Files whose name contains this marker are not chapters (default: {config['epub']['cover_marker']})",
    )

    parser.add_argument(
        "--compression-level",
        type=int,
        choices=range(10),
        metavar="0-9",
        help="Deflate level for written books (default: zlib default)",
    )

    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not keep a backup copy of the book before overwriting it",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=f"Logging level (default: {config['logging']['level']})",
    )


def _add_output_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", "-o", type=str, help="Write the result here instead of replacing the book")


def _add_chapter_selector(parser: argparse.ArgumentParser) -> None:
    """Add the mutually exclusive ways of naming one chapter."""
    selector = parser.add_mutually_exclusive_group(required=True)
    selector.add_argument("--path", type=str, help="Zip path of the chapter, e.g. OEBPS/Text/0003.xhtml")
    selector.add_argument("--index", type=int, help="0-based chapter index in file-name order, cover excluded")
    selector.add_argument("--source-url", type=str, help="Source URL recorded for the chapter")


def _add_commands(subparsers: Any) -> None:
    """Add one sub-parser per command."""
    list_parser = subparsers.add_parser("list", help="List the chapters of a book")
    list_parser.add_argument("book", type=str, help="EPUB file")
    list_parser.add_argument("--book-id", type=str, help="Identifier used in library:// source URLs (default: file name)")

    insert_parser = subparsers.add_parser("insert", help="Insert a chapter")
    insert_parser.add_argument("book", type=str, help="EPUB file")
    insert_parser.add_argument("content", type=str, help="XHTML file with the chapter content")
    insert_parser.add_argument("--at", type=int, dest="spine_index", help="Spine index to insert before (default: append)")
    insert_parser.add_argument("--title", type=str, help="Chapter title (default: read from the content)")
    insert_parser.add_argument("--source-url", type=str, help="Source URL to record for the chapter")
    _add_output_arg(insert_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete a chapter")
    delete_parser.add_argument("book", type=str, help="EPUB file")
    _add_chapter_selector(delete_parser)
    _add_output_arg(delete_parser)

    refresh_parser = subparsers.add_parser("refresh", help="Replace the content of a chapter")
    refresh_parser.add_argument("book", type=str, help="EPUB file")
    refresh_parser.add_argument("content", type=str, help="XHTML file with the new content")
    _add_chapter_selector(refresh_parser)
    refresh_parser.add_argument("--title", type=str, help="New chapter title for the navigation")
    _add_output_arg(refresh_parser)

    reorder_parser = subparsers.add_parser("reorder", help="Put chapters in a new order")
    reorder_parser.add_argument("book", type=str, help="EPUB file")
    order = reorder_parser.add_mutually_exclusive_group(required=True)
    order.add_argument("--order", nargs="+", metavar="PATH", help="Chapter zip paths in the new order")
    order.add_argument("--order-file", type=str, help="YAML file listing the chapter paths under 'order:'")
    _add_output_arg(reorder_parser)

    merge_parser = subparsers.add_parser("merge", help="Append the chapters of another book")
    merge_parser.add_argument("book", type=str, help="EPUB file receiving the chapters")
    merge_parser.add_argument("addition", type=str, help="EPUB file whose chapters are appended")
    _add_output_arg(merge_parser)

    convert_parser = subparsers.add_parser("convert", help="Move a book to another directory layout")
    convert_parser.add_argument("book", type=str, help="EPUB file")
    convert_parser.add_argument("--to", type=str, required=True, choices=["OEBPS", "EPUB"], dest="target", help="Target layout")
    _add_output_arg(convert_parser)

    validate_parser = subparsers.add_parser("validate", help="Check a book for inconsistencies")
    validate_parser.add_argument("book", type=str, help="EPUB file")


def create_parser(config: dict[str, Any]) -> argparse.ArgumentParser:
    """Create the argument parser.

    Args:
        config: Configuration dictionary for default values

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="epub-updater",
        description="Insert, delete, reorder, refresh and merge chapters of EPUB books in place.",
        epilog=get_epilog_text(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_args(parser, config)
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True
    _add_commands(subparsers)
    return parser
