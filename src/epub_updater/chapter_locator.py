#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, chapter discovery and index validation
# - Resolves a chapter file to its manifest, spine and nav map identifiers
# - Sequence numbers are recomputed from the archive on every call
# - Added chapter listing with titles read through BeautifulSoup
#

"""
chapter_locator.py - Finding chapters inside a package
======================================================

Chapter files live in the layout's text directory and are named with a
4-digit sequence number. This module turns user-facing references (an
index, a file path, a source URL) into a ChapterRef carrying every
identifier the structural editors need.
"""

from __future__ import annotations

import logging
import posixpath
import warnings
from typing import Iterable

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from .epub_constants import HEADING_TAGS, format_sequence, sequence_of, source_id
from .epub_errors import ChapterIndexError, StructuralMismatchError
from .epub_reader import EpubPackage
from .epub_structure import EpubLayout, normalize_href
from .models import ChapterInfo, ChapterRef
from .ncx_document import NavMapDocument
from .opf_document import PackageDocument

logger = logging.getLogger(__name__)

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

DEFAULT_COVER_MARKER = "Cover"
NON_CHAPTER_MARKERS = ("nav.xhtml", "toc")


def find_chapter_files(names: Iterable[str], layout: EpubLayout, cover_marker: str = DEFAULT_COVER_MARKER) -> list[str]:
    """
    List the chapter files of a package.

    Args:
        names: Entry names of the archive
        layout: Layout of the package
        cover_marker: Files whose name contains this are not chapters

    Returns:
        Chapter paths under the text directory, sorted by file name
    """
    prefix = layout.text_dir + "/"
    files = [
        name
        for name in names
        if name.startswith(prefix) and name.endswith(".xhtml") and "/" not in name[len(prefix) :] and cover_marker not in posixpath.basename(name)
    ]
    return sorted(files, key=posixpath.basename)


def resolve_index(index: int, chapter_files: list[str], allow_append: bool = False) -> str | None:
    """
    Validate a chapter index against the chapter files.

    Args:
        index: 0-based index
        chapter_files: Result of find_chapter_files
        allow_append: Whether ``index == len(chapter_files)`` is valid

    Returns:
        The chapter path at ``index``, or None for the append position

    Raises:
        ChapterIndexError: If the index is out of range
    """
    max_index = len(chapter_files) if allow_append else len(chapter_files) - 1
    if index < 0 or index > max_index:
        raise ChapterIndexError(index, max_index)
    if index == len(chapter_files):
        return None
    return chapter_files[index]


def highest_sequence(names: Iterable[str], directory: str) -> int | None:
    """Highest sequence number among the files directly in ``directory``."""
    prefix = directory + "/"
    numbers = [sequence_of(name) for name in names if name.startswith(prefix) and "/" not in name[len(prefix) :]]
    valid = [n for n in numbers if n is not None]
    return max(valid) if valid else None


def next_sequence_number(names: Iterable[str], layout: EpubLayout, cover_marker: str = DEFAULT_COVER_MARKER) -> str:
    """
    Pick the sequence number for a chapter about to be inserted.

    The candidate is the chapter count plus one. When a file already
    carries that number (a lower-numbered chapter was deleted earlier) the
    next free number is taken, so two chapters never share one.

    Args:
        names: Entry names of the archive
        layout: Layout of the package

    Returns:
        4-digit sequence number
    """
    names = list(names)
    chapter_files = find_chapter_files(names, layout, cover_marker)
    prefix = layout.text_dir + "/"
    used = {sequence_of(name) for name in names if name.startswith(prefix)}
    candidate = len(chapter_files) + 1
    while candidate in used:
        candidate += 1
    logger.debug(f"Next chapter sequence number: {candidate} ({len(chapter_files)} chapters)")
    return format_sequence(candidate)


def locate_chapter(opf: PackageDocument, ncx: NavMapDocument | None, layout: EpubLayout, path: str) -> ChapterRef:
    """
    Resolve a chapter file to the identifiers that refer to it.

    Args:
        opf: Package document
        ncx: Nav map, when the nav map id is wanted
        layout: Layout of the package
        path: Absolute zip path of the chapter file

    Returns:
        ChapterRef for the chapter

    Raises:
        StructuralMismatchError: If the manifest has no item for the file
    """
    href = layout.to_href(path)
    item = opf.item_by_href(href)
    if item is None or not item.get("id"):
        raise StructuralMismatchError(f"Manifest has no item for '{href}'")
    manifest_id = item.get("id", "")
    nav_point = ncx.nav_point_for(href) if ncx is not None else None
    ref = ChapterRef(
        path=path,
        href=item.get("href", href),
        manifest_id=manifest_id,
        spine_index=opf.spine_index_of(manifest_id),
        nav_point_id=nav_point.get("id") if nav_point is not None else None,
    )
    logger.debug(f"Resolved {path} -> {ref}")
    return ref


def find_chapter_by_source_url(package: EpubPackage, source_url: str) -> str | None:
    """
    Find the chapter file whose recorded source URL is ``source_url``.

    Args:
        package: Package to search
        source_url: URL recorded in the chapter's ``dc:source``

    Returns:
        Absolute path of the chapter, or None when no chapter has that URL
    """
    opf = PackageDocument.from_text(package.content_opf(), package.layout.content_opf)
    for item in opf.items():
        item_id = item.get("id")
        if item_id and opf.sources().get(source_id(item_id)) == source_url.strip():
            return package.layout.to_path(normalize_href(item.get("href", "")))
    return None


def extract_title(markup: str) -> str | None:
    """
    Read a chapter title from XHTML markup.

    The ``<title>`` element wins; the first heading is used otherwise.

    Args:
        markup: Chapter XHTML

    Returns:
        Title text, or None when neither is present
    """
    soup = BeautifulSoup(markup, "html.parser")
    if soup.title is not None and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    heading = soup.find(HEADING_TAGS)
    if heading is not None and heading.get_text(strip=True):
        return heading.get_text(strip=True)
    return None


def _is_listed_chapter(path: str) -> bool:
    name = posixpath.basename(path)
    return DEFAULT_COVER_MARKER not in name and not any(marker in name for marker in NON_CHAPTER_MARKERS)


def list_chapters(package: EpubPackage, book_id: str = "book") -> list[ChapterInfo]:
    """
    List the chapters of a package in reading order.

    Every spine item whose file exists is considered; cover and navigation
    pages are left out of the result but the spine indexes stay the real
    positions in the spine.

    Args:
        package: Package to list
        book_id: Identifier used in the fallback ``library://`` source URL

    Returns:
        ChapterInfo per chapter, in spine order
    """
    opf = PackageDocument.from_text(package.content_opf(), package.layout.content_opf)
    sources = opf.sources()
    id_to_href = {item.get("id"): item.get("href") for item in opf.items()}

    chapters: list[ChapterInfo] = []
    for spine_index, idref in enumerate(opf.spine_ids()):
        href = id_to_href.get(idref)
        if not href:
            continue
        path = package.layout.to_path(normalize_href(href))
        if not package.has(path) or not _is_listed_chapter(path):
            continue
        title = extract_title(package.read_text(path)) or href
        chapters.append(
            ChapterInfo(
                title=title,
                path=path,
                source_url=sources.get(source_id(idref)) or f"library://{book_id}/{spine_index}",
                spine_index=spine_index,
                manifest_id=idref,
            )
        )
    return chapters


def read_chapter_body(package: EpubPackage, spine_index: int) -> str:
    """
    Return the inner markup of the body of the chapter at a spine position.

    Args:
        package: Package to read
        spine_index: Real spine position of the chapter

    Returns:
        Body content without the ``<body>`` tag itself

    Raises:
        ChapterIndexError: If no listed chapter sits at that spine position
        StructuralMismatchError: If the chapter has no body
    """
    chapters = list_chapters(package)
    chapter = next((c for c in chapters if c.spine_index == spine_index), None)
    if chapter is None:
        raise ChapterIndexError(spine_index, max((c.spine_index for c in chapters), default=-1))
    soup = BeautifulSoup(package.read_text(chapter.path), "html.parser")
    if soup.body is None:
        raise StructuralMismatchError(f"No body content found in {chapter.path}")
    return soup.body.decode_contents()
