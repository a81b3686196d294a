#!/usr/bin/env python3
# -*- coding: utf-8 -*-

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
opf_document.py - Manifest, spine and metadata of the package document
======================================================================

Wraps the parsed ``content.opf`` and exposes the operations the structural
editors need: manifest items keyed by href and id, the spine as an ordered
list of idrefs, and the ``dc:source`` entries that record where each
chapter and image came from.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from .epub_constants import DC_NS
from .epub_errors import StructuralMismatchError
from .epub_structure import normalize_href
from .epub_xml import (
    XmlDocument,
    append_child,
    find_child,
    find_children,
    insert_before,
    local_name,
    qualified,
    remove_child,
    replace_children,
)
from .models import BookMetadata

logger = logging.getLogger(__name__)


class PackageDocument:
    """Editable view of a package document (``content.opf``)."""

    def __init__(self, document: XmlDocument, name: str = "content.opf"):
        self.document = document
        self.name = name
        root = document.root
        if local_name(root.tag) != "package":
            raise StructuralMismatchError(f"{name}: root element is <{local_name(root.tag)}>, expected <package>")
        manifest = find_child(root, "manifest")
        spine = find_child(root, "spine")
        if manifest is None or spine is None:
            raise StructuralMismatchError(f"Invalid EPUB structure: {name} is missing manifest or spine")
        self.manifest = manifest
        self.spine = spine
        self.metadata = find_child(root, "metadata")

    @classmethod
    def from_text(cls, text: str, name: str = "content.opf") -> PackageDocument:
        return cls(XmlDocument.parse(text, name), name)

    def to_text(self) -> str:
        return self.document.to_text()

    # ───────────── manifest ───────────── #

    def items(self) -> list[ET.Element]:
        return find_children(self.manifest, "item")

    def item_by_id(self, item_id: str) -> ET.Element | None:
        for item in self.items():
            if item.get("id") == item_id:
                return item
        return None

    def item_by_href(self, href: str) -> ET.Element | None:
        """Manifest item whose href matches ``href`` (quoting and fragment ignored)."""
        wanted = normalize_href(href)
        for item in self.items():
            if normalize_href(item.get("href", "")) == wanted:
                return item
        return None

    def href_to_id(self) -> dict[str, str]:
        """Map of normalized manifest href to item id."""
        mapping: dict[str, str] = {}
        for item in self.items():
            href, item_id = item.get("href"), item.get("id")
            if href and item_id:
                mapping[normalize_href(href)] = item_id
        return mapping

    def add_item(self, item_id: str, href: str, media_type: str) -> ET.Element:
        """
        Append a manifest item.

        Raises:
            StructuralMismatchError: If the id or href is already in the manifest
        """
        if self.item_by_id(item_id) is not None:
            raise StructuralMismatchError(f"Manifest already contains an item with id '{item_id}'")
        if self.item_by_href(href) is not None:
            raise StructuralMismatchError(f"Manifest already contains an item for '{href}'")
        item = ET.Element(qualified(self.manifest, "item"), {"href": href, "id": item_id, "media-type": media_type})
        append_child(self.manifest, item)
        return item

    def remove_item(self, item: ET.Element) -> None:
        remove_child(self.manifest, item)

    # ───────────── spine ───────────── #

    def itemrefs(self) -> list[ET.Element]:
        return find_children(self.spine, "itemref")

    def spine_ids(self) -> list[str]:
        return [ref.get("idref", "") for ref in self.itemrefs()]

    def itemref_for(self, idref: str) -> ET.Element | None:
        for ref in self.itemrefs():
            if ref.get("idref") == idref:
                return ref
        return None

    def spine_index_of(self, idref: str) -> int | None:
        ids = self.spine_ids()
        return ids.index(idref) if idref in ids else None

    def insert_itemref(self, idref: str, spine_index: int) -> ET.Element:
        """
        Splice an itemref before the one at ``spine_index``.

        An index at or past the end of the spine appends.

        Args:
            idref: Manifest id to reference
            spine_index: Position of the new itemref

        Returns:
            The new itemref element
        """
        itemref = ET.Element(qualified(self.spine, "itemref"), {"idref": idref})
        refs = self.itemrefs()
        if spine_index < len(refs):
            insert_before(self.spine, refs[spine_index], itemref)
        else:
            append_child(self.spine, itemref)
        return itemref

    def remove_itemref(self, itemref: ET.Element) -> None:
        remove_child(self.spine, itemref)

    def reorder_spine(self, new_order: list[str]) -> None:
        """
        Put the itemrefs of ``new_order`` in that order.

        The whole new sequence is placed where the first reordered itemref
        was. Itemrefs not listed keep their relative positions.

        Args:
            new_order: Manifest ids in the wanted reading order

        Raises:
            StructuralMismatchError: If an id is not in the spine
        """
        by_id = {ref.get("idref"): ref for ref in self.itemrefs()}
        missing = [idref for idref in new_order if idref not in by_id]
        if missing:
            raise StructuralMismatchError(f"Spine has no itemref for: {', '.join(missing)}")
        wanted = set(new_order)
        old = [ref for ref in self.itemrefs() if ref.get("idref") in wanted]
        replace_children(self.spine, old, [by_id[idref] for idref in new_order])

    # ───────────── metadata ───────────── #

    def _require_metadata(self) -> ET.Element:
        if self.metadata is None:
            raise StructuralMismatchError(f"Invalid EPUB structure: {self.name} is missing metadata")
        return self.metadata

    def sources(self) -> dict[str, str]:
        """Map of ``dc:source`` id to the recorded URL."""
        if self.metadata is None:
            return {}
        result: dict[str, str] = {}
        for elem in find_children(self.metadata, "source"):
            source_id = elem.get("id")
            if source_id and elem.text:
                result[source_id] = elem.text.strip()
        return result

    def source_element(self, source_id: str) -> ET.Element | None:
        if self.metadata is None:
            return None
        for elem in find_children(self.metadata, "source"):
            if elem.get("id") == source_id:
                return elem
        return None

    def add_source(self, source_id: str, url: str) -> ET.Element:
        """Append a ``dc:source`` entry recording where a resource came from."""
        metadata = self._require_metadata()
        elem = ET.Element(f"{{{DC_NS}}}source", {"id": source_id})
        elem.text = url
        append_child(metadata, elem)
        return elem

    def remove_source(self, source_id: str) -> bool:
        """Remove the ``dc:source`` with the given id. Returns False if absent."""
        elem = self.source_element(source_id)
        if elem is None:
            return False
        remove_child(self._require_metadata(), elem)
        return True

    def _dc_text(self, name: str) -> str:
        if self.metadata is None:
            return ""
        elem = find_child(self.metadata, name)
        return (elem.text or "").strip() if elem is not None else ""

    def _meta_content(self, name: str) -> str:
        if self.metadata is None:
            return ""
        for elem in find_children(self.metadata, "meta"):
            if elem.get("name") == name:
                return elem.get("content", "")
        return ""

    def book_id_url(self) -> str:
        """URL recorded in the ``dc:identifier`` with id ``BookId``."""
        if self.metadata is None:
            return ""
        for elem in find_children(self.metadata, "identifier"):
            if elem.get("id") == "BookId":
                return (elem.text or "").strip()
        return ""

    def book_metadata(self) -> BookMetadata:
        """
        Read the descriptive metadata of the book.

        Returns:
            BookMetadata with empty strings for anything not recorded
        """
        subjects = []
        if self.metadata is not None:
            subjects = [(elem.text or "").strip() for elem in find_children(self.metadata, "subject") if elem.text]
        return BookMetadata(
            title=self._dc_text("title"),
            author=self._dc_text("creator"),
            language=self._dc_text("language"),
            description=self._dc_text("description"),
            subjects=subjects,
            series_name=self._meta_content("calibre:series"),
            series_index=self._meta_content("calibre:series_index"),
            source_url=self.book_id_url(),
        )
