#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Reworked for package edits: required entry checks on packages
# - Added consistency report across manifest, spine, nav map and nav document
# - Validation failures raise the edit error taxonomy instead of ValidationError
#

"""
epub_validation.py - Package validation
=======================================

Two levels of checking. ``validate_package`` is the cheap gate every edit
passes through: the entries without which no edit can work must exist.
``check_consistency`` cross-checks the four chapter views and returns the
issues it finds as readable strings; it is what the ``validate`` command
and the test-suite use.
"""

from __future__ import annotations

import logging
import posixpath

from .epub_constants import MIMETYPE, MIMETYPE_ENTRY, XHTML_MEDIA_TYPE, sequence_of
from .epub_errors import EpubUpdateError, MissingRequiredEntryError
from .epub_reader import EpubPackage
from .epub_structure import normalize_href
from .nav_document import NavDocument
from .ncx_document import NavMapDocument
from .opf_document import PackageDocument

logger = logging.getLogger(__name__)


def required_entries(package: EpubPackage) -> list[str]:
    """Entries every editable package must contain."""
    layout = package.layout
    return [MIMETYPE_ENTRY, layout.content_opf, layout.toc_ncx]


def validate_package(package: EpubPackage) -> None:
    """
    Check that a package has the entries edits depend on.

    Args:
        package: Package to check

    Raises:
        MissingRequiredEntryError: Listing every missing entry
    """
    missing = [name for name in required_entries(package) if not package.has(name)]
    if missing:
        raise MissingRequiredEntryError(missing)
    if package.mimetype != MIMETYPE:
        logger.warning(f"Unexpected mimetype '{package.mimetype}', expected '{MIMETYPE}'")


def is_valid_package(package: EpubPackage) -> bool:
    """True when validate_package passes."""
    try:
        validate_package(package)
    except MissingRequiredEntryError as e:
        logger.info(f"Package is not valid: {e}")
        return False
    return True


def _check_play_order(ncx: NavMapDocument, issues: list[str]) -> None:
    orders = ncx.play_orders()
    if sorted(orders) != list(range(1, len(orders) + 1)):
        issues.append(f"playOrder values are not contiguous from 1: {orders}")
    elif orders != sorted(orders):
        issues.append(f"playOrder values do not increase in document order: {orders}")


def check_consistency(package: EpubPackage) -> list[str]:
    """
    Cross-check manifest, spine, nav map and nav document.

    Checks made:
        - every spine idref has a manifest item
        - no chapter appears twice in the manifest, spine or nav map
        - every chapter in the spine has a nav map entry (and a nav
          document entry when that document exists), and vice versa
        - nav map playOrder is exactly 1..N and follows the spine order
        - manifest items point at existing entries

    Args:
        package: Package to check

    Returns:
        List of issues, empty when the package is consistent
    """
    issues: list[str] = []
    try:
        validate_package(package)
        layout = package.layout
        opf = PackageDocument.from_text(package.content_opf(), layout.content_opf)
        ncx = NavMapDocument.from_text(package.toc_ncx(), layout.toc_ncx)
        nav_text = package.nav_xhtml()
        nav = NavDocument.from_text(nav_text, layout.nav_xhtml) if nav_text is not None else None
    except EpubUpdateError as e:
        return [str(e)]

    layout = package.layout
    id_to_href = {}
    seen_hrefs: set[str] = set()
    for item in opf.items():
        item_id, href = item.get("id", ""), normalize_href(item.get("href", ""))
        if item_id in id_to_href:
            issues.append(f"Manifest id '{item_id}' is used more than once")
        if href in seen_hrefs:
            issues.append(f"Manifest lists '{href}' more than once")
        seen_hrefs.add(href)
        id_to_href[item_id] = href
        if not package.has(layout.to_path(href)):
            issues.append(f"Manifest item '{item_id}' points at missing entry '{href}'")

    spine_ids = opf.spine_ids()
    if len(spine_ids) != len(set(spine_ids)):
        issues.append("Spine references an item more than once")

    chapter_hrefs: list[str] = []
    for idref in spine_ids:
        if idref not in id_to_href:
            issues.append(f"Spine idref '{idref}' has no manifest item")
            continue
        item = opf.item_by_id(idref)
        if item is not None and item.get("media-type") == XHTML_MEDIA_TYPE:
            chapter_hrefs.append(id_to_href[idref])

    nav_srcs = [normalize_href(ncx.content_src(np) or "") for np in ncx.all_nav_points()]
    for href in set(nav_srcs):
        if nav_srcs.count(href) > 1:
            issues.append(f"Nav map points at '{href}' more than once")
        if href not in id_to_href.values():
            issues.append(f"Nav map entry points at '{href}', which is not in the manifest")

    for href in chapter_hrefs:
        if href not in nav_srcs and not _is_front_matter(href):
            issues.append(f"Chapter '{href}' has no nav map entry")
        if nav is not None and nav.entry_for(href) is None and not _is_front_matter(href):
            issues.append(f"Chapter '{href}' has no nav document entry")

    _check_play_order(ncx, issues)

    spine_position = {href: index for index, href in enumerate(chapter_hrefs)}
    positions = [spine_position[src] for src in nav_srcs if src in spine_position]
    if positions != sorted(positions):
        issues.append("Nav map order does not follow the spine order")

    for issue in issues:
        logger.debug(issue)
    return issues


def _is_front_matter(href: str) -> bool:
    name = posixpath.basename(href)
    return "Cover" in name or sequence_of(name) == 0 or name.endswith(("nav.xhtml", "toc.xhtml"))
