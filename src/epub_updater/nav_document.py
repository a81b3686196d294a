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
nav_document.py - The EPUB 3 navigation document

Only the table of contents list (``nav epub:type="toc"``) is edited. Its
list items are matched to chapters by the ``href`` of their anchor.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from .epub_constants import OPS_NS
from .epub_errors import StructuralMismatchError
from .epub_structure import normalize_href
from .epub_xml import XmlDocument, append_child, find_child, find_children, insert_before, iter_named, qualified, remove_child, replace_children


class NavDocument:
    """Editable view of the table of contents in ``nav.xhtml``/``toc.xhtml``."""

    def __init__(self, document: XmlDocument, name: str = "nav.xhtml"):
        self.document = document
        self.name = name
        nav = self._find_toc_nav(document.root)
        if nav is None:
            raise StructuralMismatchError(f"{name} has no <nav> element")
        toc_list = find_child(nav, "ol")
        if toc_list is None:
            raise StructuralMismatchError(f"{name}: table of contents has no <ol> list")
        self.nav = nav
        self.toc_list = toc_list

    @staticmethod
    def _find_toc_nav(root: ET.Element) -> ET.Element | None:
        navs = list(iter_named(root, "nav"))
        for nav in navs:
            nav_type = nav.get(f"{{{OPS_NS}}}type") or nav.get("epub:type") or ""
            if "toc" in nav_type.split():
                return nav
        return navs[0] if navs else None

    @classmethod
    def from_text(cls, text: str, name: str = "nav.xhtml") -> NavDocument:
        return cls(XmlDocument.parse(text, name), name)

    def to_text(self) -> str:
        return self.document.to_text()

    def entries(self) -> list[ET.Element]:
        """Top-level list items, in document order."""
        return find_children(self.toc_list, "li")

    @staticmethod
    def anchor(entry: ET.Element) -> ET.Element | None:
        return find_child(entry, "a")

    def href_of(self, entry: ET.Element) -> str | None:
        a = self.anchor(entry)
        return a.get("href") if a is not None else None

    def entry_for(self, href: str) -> ET.Element | None:
        """Top-level list item whose anchor points at ``href``."""
        wanted = normalize_href(href)
        for entry in self.entries():
            entry_href = self.href_of(entry)
            if entry_href is not None and normalize_href(entry_href) == wanted:
                return entry
        return None

    def new_entry(self, title: str, href: str) -> ET.Element:
        """Build a detached ``<li><a href=...>title</a></li>``."""
        entry = ET.Element(qualified(self.toc_list, "li"))
        ET.SubElement(entry, qualified(self.toc_list, "a"), {"href": href}).text = title
        return entry

    def insert_entry(self, entry: ET.Element, position: int) -> None:
        """Splice a list item at ``position``; past the end appends."""
        siblings = self.entries()
        if position < len(siblings):
            insert_before(self.toc_list, siblings[position], entry)
        else:
            append_child(self.toc_list, entry)

    def remove_entry(self, entry: ET.Element) -> None:
        remove_child(self.toc_list, entry)

    def set_title(self, entry: ET.Element, title: str) -> None:
        a = self.anchor(entry)
        if a is not None:
            a.text = title

    def reorder(self, new_order: list[ET.Element]) -> None:
        """Rebuild the listed items in the given order at the first one's place."""
        wanted = {id(entry) for entry in new_order}
        old = [entry for entry in self.entries() if id(entry) in wanted]
        replace_children(self.toc_list, old, new_order)
