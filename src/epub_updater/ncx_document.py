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
ncx_document.py - The legacy NCX nav map

Nav map entries are matched by the ``src`` of their ``content`` element,
never by id, because ids of entries written by other tools follow no fixed
scheme. The playOrder values are kept contiguous from 1.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from .epub_errors import StructuralMismatchError
from .epub_structure import normalize_href
from .epub_xml import XmlDocument, append_child, find_child, find_children, insert_before, iter_named, local_name, qualified, remove_child, replace_children

logger = logging.getLogger(__name__)


class NavMapDocument:
    """Editable view of ``toc.ncx``."""

    def __init__(self, document: XmlDocument, name: str = "toc.ncx"):
        self.document = document
        self.name = name
        if local_name(document.root.tag) != "ncx":
            raise StructuralMismatchError(f"{name}: root element is <{local_name(document.root.tag)}>, expected <ncx>")
        nav_map = find_child(document.root, "navMap")
        if nav_map is None:
            raise StructuralMismatchError(f"Invalid EPUB structure: {name} is missing navMap")
        self.nav_map = nav_map

    @classmethod
    def from_text(cls, text: str, name: str = "toc.ncx") -> NavMapDocument:
        return cls(XmlDocument.parse(text, name), name)

    def to_text(self) -> str:
        return self.document.to_text()

    def nav_points(self) -> list[ET.Element]:
        """Top-level nav map entries, in document order."""
        return find_children(self.nav_map, "navPoint")

    def all_nav_points(self) -> list[ET.Element]:
        """Every nav map entry including nested ones, in document order."""
        return list(iter_named(self.nav_map, "navPoint"))

    @staticmethod
    def content_src(nav_point: ET.Element) -> str | None:
        content = find_child(nav_point, "content")
        return content.get("src") if content is not None else None

    @staticmethod
    def play_order(nav_point: ET.Element) -> int:
        try:
            return int(nav_point.get("playOrder", "0"))
        except ValueError:
            return 0

    @staticmethod
    def label(nav_point: ET.Element) -> str:
        nav_label = find_child(nav_point, "navLabel")
        text = find_child(nav_label, "text") if nav_label is not None else None
        return (text.text or "").strip() if text is not None else ""

    @staticmethod
    def set_label(nav_point: ET.Element, title: str) -> None:
        nav_label = find_child(nav_point, "navLabel")
        if nav_label is None:
            nav_label = ET.Element(qualified(nav_point, "navLabel"))
            nav_point.insert(0, nav_label)
        text = find_child(nav_label, "text")
        if text is None:
            text = ET.SubElement(nav_label, qualified(nav_point, "text"))
        text.text = title

    def nav_point_for(self, href: str) -> ET.Element | None:
        """First entry whose ``content/@src`` points at ``href``."""
        wanted = normalize_href(href)
        for nav_point in self.all_nav_points():
            src = self.content_src(nav_point)
            if src is not None and normalize_href(src) == wanted:
                return nav_point
        return None

    def play_orders(self) -> list[int]:
        return [self.play_order(np) for np in self.all_nav_points()]

    def new_nav_point(self, nav_id: str, play_order: int, title: str, src: str) -> ET.Element:
        """Build a detached entry in the nav map's namespace."""
        nav_point = ET.Element(qualified(self.nav_map, "navPoint"), {"id": nav_id, "playOrder": str(play_order)})
        nav_label = ET.SubElement(nav_point, qualified(self.nav_map, "navLabel"))
        ET.SubElement(nav_label, qualified(self.nav_map, "text")).text = title
        ET.SubElement(nav_point, qualified(self.nav_map, "content"), {"src": src})
        return nav_point

    def insert_nav_point(self, nav_point: ET.Element, position: int) -> None:
        """
        Splice an entry at a top-level position, shifting later playOrders.

        Every existing entry whose playOrder is at or after the new entry's
        is moved up by one, so the sequence stays contiguous.

        Args:
            nav_point: Entry built with new_nav_point
            position: Index among the top-level entries; past the end appends
        """
        new_order = self.play_order(nav_point)
        for existing in self.all_nav_points():
            current = self.play_order(existing)
            if current >= new_order:
                existing.set("playOrder", str(current + 1))

        siblings = self.nav_points()
        if position < len(siblings):
            insert_before(self.nav_map, siblings[position], nav_point)
        else:
            append_child(self.nav_map, nav_point)

    def remove_nav_point(self, nav_point: ET.Element) -> int:
        """
        Remove an entry and close the gap it leaves in the playOrder.

        Only entries after the removed one are renumbered.

        Args:
            nav_point: Entry to remove (top-level or nested)

        Returns:
            The playOrder the removed entry had
        """
        parents = {child: parent for parent in self.nav_map.iter() for child in parent}
        parent = parents.get(nav_point)
        if parent is None:
            raise StructuralMismatchError(f"{self.name}: entry '{nav_point.get('id')}' is not in the nav map")

        removed = list(iter_named(nav_point, "navPoint"))
        removed_orders = sorted((self.play_order(np) for np in removed), reverse=True)
        remove_child(parent, nav_point)

        for order in removed_orders:
            for existing in self.all_nav_points():
                current = self.play_order(existing)
                if current > order:
                    existing.set("playOrder", str(current - 1))
        return self.play_order(nav_point)

    def reorder(self, new_order: list[ET.Element]) -> None:
        """
        Rebuild the top-level entries of ``new_order`` in that order.

        The reordered run takes the place of its first member; entries not
        listed keep their relative positions. playOrder is renumbered from 1.

        Args:
            new_order: Top-level entries in the wanted order
        """
        wanted = {id(np) for np in new_order}
        old = [np for np in self.nav_points() if id(np) in wanted]
        replace_children(self.nav_map, old, new_order)
        self.renumber()

    def renumber(self) -> None:
        """Assign playOrder 1..N in document order."""
        for order, nav_point in enumerate(self.all_nav_points(), start=1):
            nav_point.set("playOrder", str(order))
