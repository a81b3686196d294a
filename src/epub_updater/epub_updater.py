#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, public entry points of the package edit engine
# - Every edit runs read -> locate -> edit -> write -> validate on bytes
# - Added delete and refresh by chapter index, layout conversion
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
epub_updater.py - Incremental edits of packaged EPUB books
==========================================================

The functions here are the engine's public interface. Each takes the bytes
of a package and returns the bytes of the edited package; the input is
never modified and no state is kept between calls, so a failed edit can
simply be retried. Persisting the result is the caller's business (see
package_store.py).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from .chapter_locator import DEFAULT_COVER_MARKER, find_chapter_files, list_chapters, resolve_index
from . import epub_editors
from .epub_editors import PackageEdit
from .epub_errors import StructuralMismatchError
from .epub_merger import PackageMerger
from .epub_reader import EpubPackage
from .epub_structure import EpubLayout, convert_entries, get_layout
from .epub_validation import check_consistency, validate_package
from .epub_writer import PackageWriter
from .models import BookMetadata, ChapterInfo, ChapterRecord, MergeResult
from .opf_document import PackageDocument

logger = logging.getLogger(__name__)


@dataclass
class UpdateOptions:
    """Settings shared by all edits."""

    layout: EpubLayout | None = None
    """Layout of the input package; detected from its entries when None."""
    cover_marker: str = DEFAULT_COVER_MARKER
    validate_after_edit: bool = True
    compression_level: int | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> UpdateOptions:
        """
        Build options from the ``epub`` section of the configuration.

        Args:
            config: Full configuration dictionary

        Returns:
            UpdateOptions
        """
        epub = config.get("epub", {})
        layout_name = str(epub.get("layout", "auto"))
        return cls(
            layout=None if layout_name.lower() == "auto" else get_layout(layout_name),
            cover_marker=epub.get("cover_marker", DEFAULT_COVER_MARKER),
            validate_after_edit=bool(epub.get("validate_after_edit", True)),
            compression_level=epub.get("compression_level"),
        )


def _open(data: bytes, options: UpdateOptions) -> EpubPackage:
    package = EpubPackage(data, options.layout)
    validate_package(package)
    return package


def _finish(data: bytes, layout: EpubLayout, operation: str, options: UpdateOptions) -> bytes:
    """Validate the written package before handing it back."""
    result = EpubPackage(data, layout)
    validate_package(result)
    if options.validate_after_edit:
        for issue in check_consistency(result):
            logger.warning(f"{operation}: {issue}")
    logger.info(f"{operation} complete ({len(data)} bytes)")
    return data


def insert_chapter(data: bytes, spine_index: int | None, chapter: ChapterRecord, options: UpdateOptions | None = None) -> bytes:
    """
    Insert a chapter before the spine item at ``spine_index``.

    Args:
        data: Package bytes
        spine_index: Spine position of the new chapter; None or past the end appends
        chapter: Chapter to insert
        options: Edit settings

    Returns:
        Edited package bytes

    Raises:
        EpubUpdateError: If the edit cannot be applied
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    edit = PackageEdit(package, options.compression_level)
    epub_editors.insert_chapter(edit, spine_index, chapter, options.cover_marker)
    return _finish(edit.commit(), package.layout, "insert", options)


def delete_chapter(data: bytes, chapter_path: str, options: UpdateOptions | None = None) -> bytes:
    """
    Delete the chapter stored at ``chapter_path``.

    Args:
        data: Package bytes
        chapter_path: Absolute zip path of the chapter file
        options: Edit settings

    Returns:
        Edited package bytes
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    edit = PackageEdit(package, options.compression_level)
    epub_editors.delete_chapter(edit, chapter_path)
    return _finish(edit.commit(), package.layout, "delete", options)


def delete_chapter_at(data: bytes, index: int, options: UpdateOptions | None = None) -> bytes:
    """
    Delete the chapter at ``index`` in file-name order.

    Raises:
        ChapterIndexError: If no chapter has that index
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    path = resolve_index(index, find_chapter_files(package.names(), package.layout, options.cover_marker))
    if path is None:
        raise StructuralMismatchError(f"No chapter at index {index}")
    return delete_chapter(data, path, options)


def refresh_chapter(data: bytes, chapter_path: str, content: str, title: str | None = None, options: UpdateOptions | None = None) -> bytes:
    """
    Replace the content of a chapter in place.

    Args:
        data: Package bytes
        chapter_path: Absolute zip path of the chapter file
        content: New chapter XHTML
        title: New title for the nav map and navigation document, if any
        options: Edit settings

    Returns:
        Edited package bytes
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    edit = PackageEdit(package, options.compression_level)
    epub_editors.refresh_chapter(edit, chapter_path, content, title)
    return _finish(edit.commit(), package.layout, "refresh", options)


def refresh_chapter_at(data: bytes, index: int, content: str, title: str | None = None, options: UpdateOptions | None = None) -> bytes:
    """Replace the content of the chapter at ``index`` in file-name order."""
    options = options or UpdateOptions()
    package = _open(data, options)
    path = resolve_index(index, find_chapter_files(package.names(), package.layout, options.cover_marker))
    if path is None:
        raise StructuralMismatchError(f"No chapter at index {index}")
    return refresh_chapter(data, path, content, title, options)


def reorder_chapters(data: bytes, new_order: Sequence[str], options: UpdateOptions | None = None) -> bytes:
    """
    Put the given chapters in a new reading order.

    Args:
        data: Package bytes
        new_order: Absolute zip paths of the chapters, in the wanted order
        options: Edit settings

    Returns:
        Edited package bytes

    Raises:
        UnresolvedReferenceError: If a chapter cannot be resolved
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    edit = PackageEdit(package, options.compression_level)
    epub_editors.reorder_chapters(edit, new_order)
    return _finish(edit.commit(), package.layout, "reorder", options)


def merge_packages(base: bytes, addition: bytes, options: UpdateOptions | None = None) -> MergeResult:
    """
    Append every chapter of ``addition`` to ``base``.

    Args:
        base: Bytes of the package that receives the chapters
        addition: Bytes of the package whose chapters are appended; its
            layout is always detected
        options: Edit settings, applied to the base package

    Returns:
        MergeResult with the merged bytes and the number of chapters added
    """
    options = options or UpdateOptions()
    base_package = _open(base, options)
    addition_package = EpubPackage(addition)
    validate_package(addition_package)

    edit = PackageEdit(base_package, options.compression_level)
    chapters, images = PackageMerger(edit, addition_package).merge()
    merged = _finish(edit.commit(), base_package.layout, "merge", options)
    return MergeResult(data=merged, chapters_added=chapters, images_added=images)


def convert_package_layout(data: bytes, target: EpubLayout | str, options: UpdateOptions | None = None) -> bytes:
    """
    Move a package to another directory layout.

    Args:
        data: Package bytes
        target: Layout to convert to
        options: Edit settings

    Returns:
        Converted package bytes (the input bytes when already in ``target``)
    """
    options = options or UpdateOptions()
    package = _open(data, options)
    target_layout = get_layout(target)
    if package.layout == target_layout:
        logger.info(f"Package already uses the {target_layout.name} layout")
        return data
    entries = convert_entries(package.entries, package.layout, target_layout)
    writer = PackageWriter(entries, compression_level=options.compression_level)
    return _finish(writer.build(), target_layout, "convert", options)


def read_chapters(data: bytes, book_id: str = "book", options: UpdateOptions | None = None) -> list[ChapterInfo]:
    """List the chapters of a package in reading order."""
    options = options or UpdateOptions()
    return list_chapters(_open(data, options), book_id)


def read_metadata(data: bytes, options: UpdateOptions | None = None) -> BookMetadata:
    """Read the descriptive metadata of a package."""
    options = options or UpdateOptions()
    package = _open(data, options)
    return PackageDocument.from_text(package.content_opf(), package.layout.content_opf).book_metadata()
