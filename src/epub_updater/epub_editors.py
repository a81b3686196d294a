#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, replaces extend_epub's append-only chapter handling
# - Insert at any spine position, delete, reorder and refresh of chapters
# - All lookups happen before the first mutation so a failed edit leaves
#   nothing half-applied
#

"""
epub_editors.py - Structural chapter edits
==========================================

Each editor changes the four views of the chapter list together: the
manifest and spine of the package document, the NCX nav map, and the
navigation document when the package has one. Editors work on a
PackageEdit, which holds the parsed documents and the pending entry
changes of a single edit; nothing is written until ``PackageEdit.commit``.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .chapter_locator import DEFAULT_COVER_MARKER, locate_chapter, next_sequence_number
from .epub_constants import XHTML_MEDIA_TYPE, chapter_manifest_id, nav_point_id, source_id
from .epub_errors import ChapterIndexError, StructuralMismatchError, UnresolvedReferenceError
from .epub_reader import EpubPackage
from .epub_structure import normalize_href
from .epub_writer import PackageWriter
from .models import ChapterRecord, ChapterRef
from .nav_document import NavDocument
from .ncx_document import NavMapDocument
from .opf_document import PackageDocument

logger = logging.getLogger(__name__)


class PackageEdit:
    """The parsed metadata documents and pending entries of one edit."""

    def __init__(self, package: EpubPackage, compression_level: int | None = None):
        """
        Open a package for editing.

        Args:
            package: Snapshot to edit; it is never modified
            compression_level: Deflate level for the written archive

        Raises:
            MissingRequiredEntryError: If the package or nav map document is absent
            StructuralMismatchError: If a document lacks manifest, spine or navMap
        """
        self.package = package
        self.layout = package.layout
        self.opf = PackageDocument.from_text(package.content_opf(), self.layout.content_opf)
        self.ncx = NavMapDocument.from_text(package.toc_ncx(), self.layout.toc_ncx)
        nav_text = package.nav_xhtml()
        self.nav = NavDocument.from_text(nav_text, self.layout.nav_xhtml) if nav_text is not None else None
        self.writer = PackageWriter.from_package(package, compression_level)

    def ncx_src(self, path: str) -> str:
        """Reference to ``path`` as written in the nav map."""
        return self.layout.relative_from(self.layout.toc_ncx, path)

    def nav_href(self, path: str) -> str:
        """Reference to ``path`` as written in the navigation document."""
        return self.layout.relative_from(self.layout.nav_xhtml, path)

    def _spine_positions(self) -> dict[str, int]:
        id_to_href = {item.get("id"): normalize_href(item.get("href", "")) for item in self.opf.items()}
        return {id_to_href[idref]: index for index, idref in enumerate(self.opf.spine_ids()) if idref in id_to_href}

    def _position_for(self, hrefs: list[str | None], spine_index: int) -> int:
        """
        Index in a list of chapter references that matches a spine position.

        Counts the entries whose chapter sits before ``spine_index`` in the
        spine. When an entry cannot be placed in the spine the spine index
        itself is used, capped at the list length.
        """
        spine_positions = self._spine_positions()
        positions = []
        for href in hrefs:
            position = spine_positions.get(normalize_href(href)) if href else None
            if position is None:
                return min(spine_index, len(hrefs))
            positions.append(position)
        return sum(1 for position in positions if position < spine_index)

    def nav_map_position(self, spine_index: int) -> int:
        return self._position_for([self.ncx.content_src(np) for np in self.ncx.nav_points()], spine_index)

    def nav_doc_position(self, spine_index: int) -> int:
        if self.nav is None:
            return 0
        return self._position_for([self.nav.href_of(entry) for entry in self.nav.entries()], spine_index)

    def commit(self) -> bytes:
        """
        Serialize the documents and build the new archive.

        Returns:
            Bytes of the edited package
        """
        self.writer.put(self.layout.content_opf, self.opf.to_text())
        self.writer.put(self.layout.toc_ncx, self.ncx.to_text())
        if self.nav is not None:
            self.writer.put(self.layout.nav_xhtml, self.nav.to_text())
        return self.writer.build()


def insert_chapter(edit: PackageEdit, spine_index: int | None, chapter: ChapterRecord, cover_marker: str = DEFAULT_COVER_MARKER) -> ChapterRef:
    """
    Insert a chapter before the spine item at ``spine_index``.

    Args:
        edit: Open edit
        spine_index: Spine position of the new chapter; None or past the end appends
        chapter: Chapter to insert
        cover_marker: Marker of the cover file, not counted as a chapter

    Returns:
        ChapterRef of the new chapter

    Raises:
        ChapterIndexError: If ``spine_index`` is negative
        StructuralMismatchError: If the new identifiers are already taken
    """
    layout = edit.layout
    spine_length = len(edit.opf.itemrefs())
    if spine_index is None:
        spine_index = spine_length
    if spine_index < 0:
        raise ChapterIndexError(spine_index, spine_length)
    spine_index = min(spine_index, spine_length)

    sequence = chapter.sequence or next_sequence_number(edit.writer.entries, layout, cover_marker)
    path = f"{layout.text_dir}/{sequence}.xhtml"
    if edit.writer.has(path):
        raise StructuralMismatchError(f"Chapter file '{path}' already exists")
    manifest_id = chapter_manifest_id(sequence)

    nav_position = edit.nav_map_position(spine_index)
    nav_points = edit.ncx.nav_points()
    if nav_position < len(nav_points):
        play_order = edit.ncx.play_order(nav_points[nav_position])
    else:
        play_order = max(edit.ncx.play_orders(), default=0) + 1
    doc_position = edit.nav_doc_position(spine_index)

    edit.opf.add_item(manifest_id, layout.to_href(path), XHTML_MEDIA_TYPE)
    edit.opf.insert_itemref(manifest_id, spine_index)
    edit.ncx.insert_nav_point(edit.ncx.new_nav_point(nav_point_id(sequence), play_order, chapter.title, edit.ncx_src(path)), nav_position)
    if edit.nav is not None:
        edit.nav.insert_entry(edit.nav.new_entry(chapter.title, edit.nav_href(path)), doc_position)
    if chapter.source_url:
        edit.opf.add_source(source_id(manifest_id), chapter.source_url)
    edit.writer.put(path, chapter.content)

    logger.info(f"Inserted '{chapter.title}' as {path} at spine index {spine_index} (playOrder {play_order})")
    return ChapterRef(path=path, href=layout.to_href(path), manifest_id=manifest_id, spine_index=spine_index, nav_point_id=nav_point_id(sequence))


def delete_chapter(edit: PackageEdit, path: str) -> ChapterRef:
    """
    Delete a chapter from every view and drop its file.

    The nav map entry is found by its content ``src``. Only the playOrder
    values after the removed entry change, and no other chapter is renamed.

    Args:
        edit: Open edit
        path: Absolute zip path of the chapter file

    Returns:
        ChapterRef of the deleted chapter

    Raises:
        StructuralMismatchError: If the manifest item, spine itemref or nav
            map entry of the chapter cannot be found
    """
    layout = edit.layout
    ref = locate_chapter(edit.opf, edit.ncx, layout, path)
    itemref = edit.opf.itemref_for(ref.manifest_id)
    if itemref is None:
        raise StructuralMismatchError(f"Spine has no itemref for '{ref.manifest_id}'")
    nav_point = edit.ncx.nav_point_for(ref.href)
    if nav_point is None:
        raise StructuralMismatchError(f"Nav map has no entry pointing at '{ref.href}'")
    item = edit.opf.item_by_id(ref.manifest_id)
    if item is None:
        raise StructuralMismatchError(f"Manifest has no item '{ref.manifest_id}'")
    nav_entry = edit.nav.entry_for(ref.href) if edit.nav is not None else None
    if edit.nav is not None and nav_entry is None:
        logger.warning(f"Navigation document has no entry for '{ref.href}'")

    edit.opf.remove_item(item)
    edit.opf.remove_itemref(itemref)
    removed_order = edit.ncx.remove_nav_point(nav_point)
    if edit.nav is not None and nav_entry is not None:
        edit.nav.remove_entry(nav_entry)
    edit.opf.remove_source(source_id(ref.manifest_id))
    if edit.writer.has(path):
        edit.writer.remove(path)
    else:
        logger.warning(f"Chapter file '{path}' was already missing from the archive")

    logger.info(f"Deleted {path} (spine index {ref.spine_index}, playOrder {removed_order})")
    return ref


def refresh_chapter(edit: PackageEdit, path: str, content: str, title: str | None = None) -> ChapterRef:
    """
    Replace the content of a chapter, keeping its place and identifiers.

    Args:
        edit: Open edit
        path: Absolute zip path of the chapter file
        content: New chapter XHTML
        title: New title for the nav map and navigation document, if any

    Returns:
        ChapterRef of the refreshed chapter

    Raises:
        StructuralMismatchError: If the manifest has no item for the file
    """
    ref = locate_chapter(edit.opf, edit.ncx, edit.layout, path)
    edit.writer.put(path, content)
    if title:
        nav_point = edit.ncx.nav_point_for(ref.href)
        if nav_point is not None:
            edit.ncx.set_label(nav_point, title)
        entry = edit.nav.entry_for(ref.href) if edit.nav is not None else None
        if entry is not None and edit.nav is not None:
            edit.nav.set_title(entry, title)
    logger.info(f"Refreshed {path}")
    return ref


def reorder_chapters(edit: PackageEdit, new_order: Sequence[str]) -> list[str]:
    """
    Put a set of chapters in a new reading order.

    The whole new sequence takes the spine place of the first reordered
    chapter; spine items not listed (cover, information page, chapters left
    out) keep their relative positions. The nav map and navigation document
    follow the same order and playOrder is renumbered from 1.

    Args:
        edit: Open edit
        new_order: Absolute zip paths of the chapters, in the wanted order

    Returns:
        Manifest ids in the new order

    Raises:
        UnresolvedReferenceError: If a path has no manifest item or spine
            itemref, or is listed twice
        StructuralMismatchError: If a chapter has no top-level nav map entry
    """
    layout = edit.layout
    href_to_id = edit.opf.href_to_id()
    top_level = {id(np) for np in edit.ncx.nav_points()}

    ids: list[str] = []
    nav_points = []
    nav_entries = []
    seen: set[str] = set()
    for path in new_order:
        href = normalize_href(layout.to_href(path))
        if href in seen:
            raise UnresolvedReferenceError(path, "listed more than once")
        seen.add(href)
        idref = href_to_id.get(href)
        if idref is None:
            raise UnresolvedReferenceError(path)
        if edit.opf.itemref_for(idref) is None:
            raise UnresolvedReferenceError(path, "not in the spine")
        nav_point = edit.ncx.nav_point_for(href)
        if nav_point is None or id(nav_point) not in top_level:
            raise StructuralMismatchError(f"Nav map has no top-level entry pointing at '{href}'")
        ids.append(idref)
        nav_points.append(nav_point)
        if edit.nav is not None:
            entry = edit.nav.entry_for(href)
            if entry is None:
                logger.warning(f"Navigation document has no entry for '{href}'")
            else:
                nav_entries.append(entry)

    edit.opf.reorder_spine(ids)
    edit.ncx.reorder(nav_points)
    if edit.nav is not None:
        edit.nav.reorder(nav_entries)

    logger.info(f"Reordered {len(ids)} chapters")
    return ids
