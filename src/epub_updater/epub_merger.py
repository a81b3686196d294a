#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, appends the chapters of one package to another
# - Chapters and referenced images are renumbered after the base package's
#   highest numbers so no identifier collides
# - Each chapter is planned completely before the base package is touched
# - Image references are rewritten in one pass over img and image tags only
#

"""
epub_merger.py - Merging one package into another
=================================================

The addition package's chapters are appended to the base package in the
addition's reading order. Every chapter gets a fresh sequence number, and
every image it references is copied under a fresh image number with the
chapter markup rewritten to match. The addition's information page
(sequence 0000) and anything outside its text directory are not merged.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from .chapter_locator import extract_title, highest_sequence
from .epub_constants import (
    IMAGE_ID_PREFIX,
    XHTML_MEDIA_TYPE,
    chapter_manifest_id,
    format_sequence,
    image_manifest_id,
    image_media_type,
    nav_point_id,
    renumber_filename,
    sequence_of,
    source_id,
)
from .epub_editors import PackageEdit
from .epub_errors import StructuralMismatchError
from .epub_reader import EpubPackage
from .epub_structure import normalize_href, rewrite_content_paths
from .ncx_document import NavMapDocument
from .opf_document import PackageDocument

logger = logging.getLogger(__name__)


@dataclass
class _ImagePlan:
    source_path: str
    target_path: str
    manifest_id: str
    media_type: str
    source_url: str | None


@dataclass
class _ChapterPlan:
    source_path: str
    target_path: str
    manifest_id: str
    nav_id: str
    media_type: str
    title: str
    markup: str
    source_url: str | None
    images: list[_ImagePlan] = field(default_factory=list)


def image_references(markup: str) -> list[str]:
    """
    Collect the image references of a chapter, in document order.

    Looks at ``img/@src`` and the ``href`` of SVG ``image`` elements.
    Data URIs and absolute URLs are skipped.

    Args:
        markup: Chapter XHTML

    Returns:
        Distinct references exactly as written in the markup
    """
    soup = BeautifulSoup(markup, "html.parser")
    refs: list[str] = []
    for tag in soup.find_all(["img", "image"]):
        for attr in ("src", "xlink:href", "href"):
            value = tag.get(attr)
            if not isinstance(value, str) or not value or value.startswith("data:") or "://" in value:
                continue
            if value not in refs:
                refs.append(value)
    return refs


_IMAGE_TAG_RE = re.compile(r"<(?:img|image)\b[^>]*>")
_IMAGE_ATTR_RE = re.compile(r"(\s(?:src|xlink:href|href)\s*=\s*)([\"'])(.*?)\2")


def rewrite_image_references(markup: str, mapping: dict[str, str]) -> str:
    """
    Point image references at new files in a single pass.

    Only the ``src`` and ``href`` attributes of ``img`` and SVG ``image``
    elements are rewritten. Each value is looked up once, so a new value
    that equals another old reference is never rewritten again.

    Args:
        markup: Chapter XHTML
        mapping: Reference as written -> new reference

    Returns:
        Rewritten markup
    """

    def attribute(match: re.Match[str]) -> str:
        value = mapping.get(match.group(3))
        if value is None:
            return match.group(0)
        return f"{match.group(1)}{match.group(2)}{value}{match.group(2)}"

    def tag(match: re.Match[str]) -> str:
        return _IMAGE_ATTR_RE.sub(attribute, match.group(0))

    return _IMAGE_TAG_RE.sub(tag, markup)


class PackageMerger:
    """Appends the chapters of an addition package to an open base edit."""

    def __init__(self, edit: PackageEdit, addition: EpubPackage):
        self.edit = edit
        self.addition = addition
        self.source_layout = addition.layout
        self.target_layout = edit.layout
        self.source_opf = PackageDocument.from_text(addition.content_opf(), self.source_layout.content_opf)
        self.source_ncx = NavMapDocument.from_text(addition.toc_ncx(), self.source_layout.toc_ncx)
        self.source_urls = self.source_opf.sources()

        names = list(edit.writer.entries)
        self.next_image = max(highest_sequence(names, self.target_layout.images_dir) or 0, self._highest_image_id()) + 1
        self.next_chapter = (highest_sequence(names, self.target_layout.text_dir) or 0) + 1
        self.relocated: dict[str, str] = {}
        logger.debug(f"Merge counters start at chapter {self.next_chapter}, image {self.next_image}")

    def _highest_image_id(self) -> int:
        """Highest number among the base manifest's ``imageNNNN`` ids."""
        numbers = [0]
        for item in self.edit.opf.items():
            suffix = item.get("id", "")[len(IMAGE_ID_PREFIX) :]
            if item.get("id", "").startswith(IMAGE_ID_PREFIX) and suffix.isdigit():
                numbers.append(int(suffix))
        return max(numbers)

    def chapter_paths(self) -> list[tuple[str, str]]:
        """
        Chapters of the addition package, in its spine order.

        Returns:
            (manifest id, absolute path) pairs

        Raises:
            StructuralMismatchError: If a spine idref has no manifest item
        """
        text_prefix = self.source_layout.text_dir + "/"
        result = []
        for idref in self.source_opf.spine_ids():
            item = self.source_opf.item_by_id(idref)
            if item is None:
                raise StructuralMismatchError(f"Addition spine idref '{idref}' has no manifest item")
            path = self.source_layout.to_path(normalize_href(item.get("href", "")))
            number = sequence_of(path)
            if not path.startswith(text_prefix) or number is None or number == 0:
                continue
            result.append((idref, path))
        return result

    def _plan_image(self, chapter_path: str, ref: str) -> _ImagePlan | None:
        image_path = posixpath.normpath(posixpath.join(posixpath.dirname(chapter_path), ref))
        if not image_path.startswith(self.source_layout.images_dir + "/"):
            return None
        if not self.addition.has(image_path):
            logger.warning(f"{chapter_path} references missing image {image_path}")
            return None
        item = self.source_opf.item_by_href(self.source_layout.to_href(image_path))
        if item is None:
            raise StructuralMismatchError(f"Addition manifest has no item for image '{image_path}'")
        sequence = format_sequence(self.next_image)
        self.next_image += 1
        target = f"{self.target_layout.images_dir}/{renumber_filename(posixpath.basename(image_path), sequence)}"
        return _ImagePlan(
            source_path=image_path,
            target_path=target,
            manifest_id=image_manifest_id(sequence),
            media_type=item.get("media-type") or image_media_type(image_path),
            source_url=self.source_urls.get(source_id(item.get("id", ""))),
        )

    def plan_chapter(self, idref: str, path: str) -> _ChapterPlan:
        """
        Work out everything needed to move one chapter, without touching the base.

        Raises:
            StructuralMismatchError: If the chapter file, its manifest item,
                its nav map entry or a referenced image's manifest item is missing
        """
        if not self.addition.has(path):
            raise StructuralMismatchError(f"Addition chapter file '{path}' is missing")
        item = self.source_opf.item_by_id(idref)
        nav_point = self.source_ncx.nav_point_for(self.source_layout.to_href(path))
        if item is None or nav_point is None:
            raise StructuralMismatchError(f"Addition chapter '{path}' has no manifest item or nav map entry")

        sequence = format_sequence(self.next_chapter)
        target = f"{self.target_layout.text_dir}/{renumber_filename(posixpath.basename(path), sequence)}"
        markup = self.addition.read_text(path)
        title = self.source_ncx.label(nav_point) or extract_title(markup) or posixpath.basename(path)

        images: list[_ImagePlan] = []
        pending: dict[str, str] = {}
        new_refs: dict[str, str] = {}
        for ref in image_references(markup):
            image_path = posixpath.normpath(posixpath.join(posixpath.dirname(path), ref))
            if image_path not in self.relocated and image_path not in pending:
                plan = self._plan_image(path, ref)
                if plan is None:
                    continue
                images.append(plan)
                pending[image_path] = plan.target_path
            new_target = self.relocated.get(image_path) or pending[image_path]
            new_refs[ref] = self.target_layout.relative_from(target, new_target)
        markup = rewrite_image_references(markup, new_refs)

        if self.source_layout != self.target_layout:
            markup = rewrite_content_paths(markup, self.source_layout, self.target_layout)

        self.next_chapter += 1
        return _ChapterPlan(
            source_path=path,
            target_path=target,
            manifest_id=chapter_manifest_id(sequence),
            nav_id=nav_point_id(sequence),
            media_type=item.get("media-type") or XHTML_MEDIA_TYPE,
            title=title,
            markup=markup,
            source_url=self.source_urls.get(source_id(idref)),
            images=images,
        )

    def apply(self, plan: _ChapterPlan) -> None:
        """Add a planned chapter and its images to every view of the base."""
        edit = self.edit
        layout = self.target_layout
        for image in plan.images:
            edit.opf.add_item(image.manifest_id, layout.to_href(image.target_path), image.media_type)
            if image.source_url:
                edit.opf.add_source(source_id(image.manifest_id), image.source_url)
            edit.writer.put(image.target_path, self.addition.read_bytes(image.source_path))
            self.relocated[image.source_path] = image.target_path

        edit.opf.add_item(plan.manifest_id, layout.to_href(plan.target_path), plan.media_type)
        edit.opf.insert_itemref(plan.manifest_id, len(edit.opf.itemrefs()))
        if plan.source_url:
            edit.opf.add_source(source_id(plan.manifest_id), plan.source_url)
        play_order = max(edit.ncx.play_orders(), default=0) + 1
        nav_point = edit.ncx.new_nav_point(plan.nav_id, play_order, plan.title, edit.ncx_src(plan.target_path))
        edit.ncx.insert_nav_point(nav_point, len(edit.ncx.nav_points()))
        if edit.nav is not None:
            edit.nav.insert_entry(edit.nav.new_entry(plan.title, edit.nav_href(plan.target_path)), len(edit.nav.entries()))
        edit.writer.put(plan.target_path, plan.markup)
        logger.debug(f"Merged {plan.source_path} as {plan.target_path} with {len(plan.images)} images")

    def merge(self) -> tuple[int, int]:
        """
        Move every chapter of the addition package into the base.

        Returns:
            (chapters added, images added)
        """
        chapters = 0
        images = 0
        for idref, path in self.chapter_paths():
            plan = self.plan_chapter(idref, path)
            self.apply(plan)
            chapters += 1
            images += len(plan.images)
        logger.info(f"Merged {chapters} chapters and {images} images")
        return chapters, images
