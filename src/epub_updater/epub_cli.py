#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, command-line front end of the package updater
# - Sub-commands: list, insert, delete, refresh, reorder, merge, convert, validate
# - Chapters can be named by zip path, index or recorded source URL
#

# Copyright 2025 Emasoft
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
epub_cli.py - Command-line interface for the EPUB updater
=========================================================

Entry point of the ``epub-updater`` console script. Each sub-command loads
a book, runs one engine operation on its bytes and stores the result
through package_store, which replaces the file atomically.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

from rich.markup import escape

from .chapter_locator import extract_title, find_chapter_by_source_url, find_chapter_files, resolve_index
from .cli_parser import create_parser
from .cli_setup import setup_configuration, setup_logging, setup_signal_handler
from .common_file_utils import read_file_bytes, read_text_file
from .common_print_utils import print_table, safe_print
from .common_yaml_utils import load_yaml_list
from .epub_errors import EpubUpdateError, UnresolvedReferenceError
from .epub_reader import EpubPackage
from .epub_updater import (
    UpdateOptions,
    convert_package_layout,
    delete_chapter,
    insert_chapter,
    merge_packages,
    read_chapters,
    refresh_chapter,
    reorder_chapters,
)
from .epub_validation import check_consistency, validate_package
from .models import ChapterRecord
from .package_store import apply_edit

tolog = logging.getLogger(__name__)


def _resolve_chapter(data: bytes, args: argparse.Namespace, options: UpdateOptions) -> str:
    """Turn --path, --index or --source-url into a chapter zip path."""
    if args.path:
        return str(args.path)
    package = EpubPackage(data, options.layout)
    if args.source_url:
        path = find_chapter_by_source_url(package, args.source_url)
        if path is None:
            raise UnresolvedReferenceError(args.source_url, "no chapter has that source URL")
        return path
    path = resolve_index(args.index, find_chapter_files(package.names(), package.layout, options.cover_marker))
    if path is None:
        raise UnresolvedReferenceError(str(args.index), "no chapter at that index")
    return path


def _store(args: argparse.Namespace, config: dict[str, Any], edit: Callable[[bytes], bytes]) -> Path:
    """Apply an edit to the book named on the command line."""
    book = Path(args.book)
    output = Path(args.output) if getattr(args, "output", None) else None
    apply_edit(
        book,
        edit,
        backup=bool(config["library"]["backup_before_write"]),
        backup_suffix=config["library"]["backup_suffix"],
        output=output,
    )
    return output or book


def cmd_list(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    book = Path(args.book)
    chapters = read_chapters(read_file_bytes(book), args.book_id or book.stem, options)
    print_table(
        book.name,
        ["#", "Spine", "Title", "File", "Source"],
        [(i, c.spine_index, c.title, c.path, c.source_url) for i, c in enumerate(chapters)],
    )
    return 0


def cmd_insert(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    content_path = Path(args.content)
    content = read_text_file(content_path)
    title = args.title or extract_title(content) or content_path.stem
    record = ChapterRecord(title=title, content=content, source_url=args.source_url)
    target = _store(args, config, lambda data: insert_chapter(data, args.spine_index, record, options))
    safe_print(f"[green]Inserted[/green] '{escape(title)}' into {escape(str(target))}")
    return 0


def cmd_delete(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    deleted: list[str] = []

    def edit(data: bytes) -> bytes:
        path = _resolve_chapter(data, args, options)
        deleted.append(path)
        return delete_chapter(data, path, options)

    target = _store(args, config, edit)
    safe_print(f"[green]Deleted[/green] {escape(deleted[0])} from {escape(str(target))}")
    return 0


def cmd_refresh(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    content = read_text_file(Path(args.content))
    refreshed: list[str] = []

    def edit(data: bytes) -> bytes:
        path = _resolve_chapter(data, args, options)
        refreshed.append(path)
        return refresh_chapter(data, path, content, args.title, options)

    target = _store(args, config, edit)
    safe_print(f"[green]Refreshed[/green] {escape(refreshed[0])} in {escape(str(target))}")
    return 0


def cmd_reorder(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    order = list(args.order) if args.order else load_yaml_list(args.order_file, "order")
    target = _store(args, config, lambda data: reorder_chapters(data, order, options))
    safe_print(f"[green]Reordered[/green] {len(order)} chapters in {escape(str(target))}")
    return 0


def cmd_merge(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    addition = read_file_bytes(Path(args.addition))
    results = []

    def edit(data: bytes) -> bytes:
        result = merge_packages(data, addition, options)
        results.append(result)
        return result.data

    target = _store(args, config, edit)
    safe_print(f"[green]Merged[/green] {results[0].chapters_added} chapters and {results[0].images_added} images into {escape(str(target))}")
    return 0


def cmd_convert(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    target = _store(args, config, lambda data: convert_package_layout(data, args.target, options))
    safe_print(f"[green]Converted[/green] {escape(str(target))} to the {args.target} layout")
    return 0


def cmd_validate(args: argparse.Namespace, config: dict[str, Any], options: UpdateOptions) -> int:
    package = EpubPackage(read_file_bytes(Path(args.book)), options.layout)
    validate_package(package)
    issues = check_consistency(package)
    if not issues:
        safe_print(f"[green]{args.book}: no issues found[/green]")
        return 0
    safe_print(f"[bold red]{args.book}: {len(issues)} issue(s) found[/bold red]")
    for issue in issues:
        safe_print(f"  - {issue}", markup=False)
    return 1


COMMANDS: dict[str, Callable[[argparse.Namespace, dict[str, Any], UpdateOptions], int]] = {
    "list": cmd_list,
    "insert": cmd_insert,
    "delete": cmd_delete,
    "refresh": cmd_refresh,
    "reorder": cmd_reorder,
    "merge": cmd_merge,
    "convert": cmd_convert,
    "validate": cmd_validate,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the epub-updater CLI application."""
    global tolog

    argv = list(sys.argv[1:] if argv is None else argv)

    # Set up configuration first
    config_manager, config = setup_configuration(argv)

    # Create and configure argument parser
    parser = create_parser(config)
    args = parser.parse_args(argv)

    # Command-line arguments override the configuration file
    config = config_manager.update_with_args(args)

    tolog = setup_logging(config)
    setup_signal_handler(tolog)

    try:
        options = UpdateOptions.from_config(config)
        exit_code = COMMANDS[args.command](args, config, options)
    except (EpubUpdateError, ValueError) as e:
        tolog.error(f"{args.command} failed: {e}")
        safe_print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except OSError as e:
        tolog.error(f"{args.command} failed: {e}")
        safe_print(f"[bold red]File error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
