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
epub_structure.py - Directory layouts of library packages
========================================================

Packages come in two directory conventions. The legacy one keeps everything
under ``OEBPS/`` with capitalised sub-directories, the modern one under
``EPUB/`` with lower-case ones. A layout is resolved once per edit and every
path the editors touch is derived from it, never hard-coded.

Also provides the path rewriting needed to move a package from one layout
to the other.
"""

from __future__ import annotations

import enum
import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import unquote

from .common_file_utils import decode_content, encode_content
from .epub_constants import CONTAINER_XML

logger = logging.getLogger(__name__)


class LayoutKind(enum.Enum):
    """Known package directory conventions."""

    LEGACY = "OEBPS"
    MODERN = "EPUB"


@dataclass(frozen=True)
class EpubLayout:
    """Absolute and content-relative paths of one directory convention."""

    kind: LayoutKind
    content_dir: str
    text_dir_rel: str
    images_dir_rel: str
    styles_dir_rel: str
    nav_file_name: str

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def text_dir(self) -> str:
        return f"{self.content_dir}/{self.text_dir_rel}"

    @property
    def images_dir(self) -> str:
        return f"{self.content_dir}/{self.images_dir_rel}"

    @property
    def styles_dir(self) -> str:
        return f"{self.content_dir}/{self.styles_dir_rel}"

    @property
    def content_opf(self) -> str:
        return f"{self.content_dir}/content.opf"

    @property
    def toc_ncx(self) -> str:
        return f"{self.content_dir}/toc.ncx"

    @property
    def nav_xhtml(self) -> str:
        return f"{self.content_dir}/{self.nav_file_name}"

    @property
    def cover_xhtml(self) -> str:
        return f"{self.text_dir}/Cover.xhtml"

    @property
    def information_xhtml(self) -> str:
        return f"{self.text_dir}/0000_Information.xhtml"

    @property
    def stylesheet(self) -> str:
        return f"{self.styles_dir}/stylesheet.css"

    def to_href(self, path: str) -> str:
        """
        Convert an absolute zip path to an href relative to the content dir.

        Args:
            path: Absolute path inside the archive

        Returns:
            Href as written in the package document and nav map
        """
        return posixpath.relpath(path, self.content_dir)

    def to_path(self, href: str) -> str:
        """Convert a content-relative href back to an absolute zip path."""
        return posixpath.normpath(posixpath.join(self.content_dir, href))

    def relative_from(self, source_path: str, target_path: str) -> str:
        """
        Href of ``target_path`` as written inside the file at ``source_path``.

        Args:
            source_path: Absolute path of the referencing file
            target_path: Absolute path of the referenced file

        Returns:
            Relative reference, e.g. ``../Images/0001.jpg``
        """
        return posixpath.relpath(target_path, posixpath.dirname(source_path))


LEGACY_LAYOUT = EpubLayout(
    kind=LayoutKind.LEGACY,
    content_dir="OEBPS",
    text_dir_rel="Text",
    images_dir_rel="Images",
    styles_dir_rel="Styles",
    nav_file_name="toc.xhtml",
)

MODERN_LAYOUT = EpubLayout(
    kind=LayoutKind.MODERN,
    content_dir="EPUB",
    text_dir_rel="text",
    images_dir_rel="images",
    styles_dir_rel="styles",
    nav_file_name="nav.xhtml",
)

_LAYOUTS = {LayoutKind.LEGACY: LEGACY_LAYOUT, LayoutKind.MODERN: MODERN_LAYOUT}

_LAYOUT_ALIASES = {
    "oebps": LayoutKind.LEGACY,
    "legacy": LayoutKind.LEGACY,
    "epub": LayoutKind.MODERN,
    "modern": LayoutKind.MODERN,
}


def get_layout(name: str | LayoutKind | EpubLayout) -> EpubLayout:
    """
    Resolve a layout from its name, kind or the layout itself.

    Args:
        name: "OEBPS"/"legacy", "EPUB"/"modern", a LayoutKind or an EpubLayout

    Returns:
        The matching EpubLayout

    Raises:
        ValueError: If the name is not a known layout
    """
    if isinstance(name, EpubLayout):
        return name
    if isinstance(name, LayoutKind):
        return _LAYOUTS[name]
    kind = _LAYOUT_ALIASES.get(str(name).strip().lower())
    if kind is None:
        raise ValueError(f"Unknown EPUB layout: {name!r} (expected OEBPS or EPUB)")
    return _LAYOUTS[kind]


def detect_layout(entry_names: Iterable[str]) -> EpubLayout | None:
    """
    Pick the layout whose package document is present in the archive.

    Args:
        entry_names: Names of the entries in the archive

    Returns:
        The detected layout, or None when neither package document exists
    """
    names = set(entry_names)
    for layout in (LEGACY_LAYOUT, MODERN_LAYOUT):
        if layout.content_opf in names:
            return layout
    return None


# ──────────────────────────── layout conversion ──────────────────────────── #


def convert_entry_path(path: str, source: EpubLayout, target: EpubLayout) -> str:
    """
    Map an entry path from one layout to the other.

    Files outside the content directory keep their path. The navigation
    document takes the target layout's file name.

    Args:
        path: Entry path in the source layout
        source: Layout the package currently uses
        target: Layout to convert to

    Returns:
        Entry path in the target layout
    """
    if path == source.nav_xhtml:
        return target.nav_xhtml
    prefix = source.content_dir + "/"
    if not path.startswith(prefix):
        return path

    relative = path[len(prefix) :]
    for src_rel, dst_dir in (
        (source.text_dir_rel, target.text_dir),
        (source.images_dir_rel, target.images_dir),
        (source.styles_dir_rel, target.styles_dir),
    ):
        if relative.startswith(src_rel + "/"):
            return f"{dst_dir}/{relative[len(src_rel) + 1:]}"
    return f"{target.content_dir}/{relative}"


def rewrite_content_paths(content: str, source: EpubLayout, target: EpubLayout) -> str:
    """
    Rewrite relative references in package, nav map, XHTML and CSS text.

    Only references that start right after a quote, a slash or the opening
    parenthesis of a CSS ``url(...)`` are touched, so prose that happens to
    contain a directory name is left alone.

    Args:
        content: Text of an OPF, NCX, XHTML or CSS entry
        source: Layout the references are written for
        target: Layout to rewrite them to

    Returns:
        Rewritten text
    """
    for src_rel, dst_rel in (
        (source.text_dir_rel, target.text_dir_rel),
        (source.images_dir_rel, target.images_dir_rel),
        (source.styles_dir_rel, target.styles_dir_rel),
    ):
        if src_rel == dst_rel:
            continue
        content = re.sub(r"(?<=[\"'/(])" + re.escape(src_rel) + "/", dst_rel + "/", content)
    if source.nav_file_name != target.nav_file_name:
        content = re.sub(
            r"(?<=[\"'/])" + re.escape(source.nav_file_name) + r"(?=[\"'#])",
            target.nav_file_name,
            content,
        )
    return content


def rewrite_container_xml(content: str, source: EpubLayout, target: EpubLayout) -> str:
    """Point the container's rootfile at the target layout's package document."""
    return content.replace(f'full-path="{source.content_opf}"', f'full-path="{target.content_opf}"')


def convert_entries(entries: dict[str, bytes], source: EpubLayout, target: EpubLayout) -> dict[str, bytes]:
    """
    Move every entry of a package from one layout to another.

    Args:
        entries: Entry name to content, in archive order
        source: Layout the entries use now
        target: Layout to convert to

    Returns:
        New entry mapping, in the same order
    """
    if source == target:
        return dict(entries)

    logger.info(f"Converting package layout {source.name} -> {target.name}")
    converted: dict[str, bytes] = {}
    for name, data in entries.items():
        new_name = convert_entry_path(name, source, target)
        if name == CONTAINER_XML:
            data = encode_content(rewrite_container_xml(decode_content(data), source, target))
        elif name.endswith((".opf", ".ncx", ".xhtml", ".html", ".css")):
            data = encode_content(rewrite_content_paths(decode_content(data), source, target))
        converted[new_name] = data
    return converted


def normalize_href(href: str) -> str:
    """
    Reduce an href to a comparable form.

    The fragment and URL quoting are dropped, as is any leading ``./`` or
    ``../``, so that a nav document written one directory deeper still
    matches the manifest.

    Args:
        href: Href as found in a document

    Returns:
        Normalized href
    """
    href = unquote(href.split("#", 1)[0].strip())
    while href.startswith(("./", "../")):
        href = href.split("/", 1)[1]
    return href
