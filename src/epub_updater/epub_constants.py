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
Shared constants and identifier helpers for the EPUB updater modules.

Every chapter of a package is keyed by a 4-digit sequence number. All the
identifiers that tie a chapter's manifest item, spine itemref, nav map entry
and source metadata together are derived from that number here, so that
every editor builds them the same way.
"""

from __future__ import annotations

import posixpath
import re

# Constants
ENCODING = "utf-8"
MIMETYPE = "application/epub+zip"
MIMETYPE_ENTRY = "mimetype"
CONTAINER_XML = "META-INF/container.xml"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
SEQUENCE_WIDTH = 4

# XML namespaces
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"
NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
XHTML_NS = "http://www.w3.org/1999/xhtml"
OPS_NS = "http://www.idpf.org/2007/ops"
CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"

# Identifier prefixes
CHAPTER_ID_PREFIX = "xhtml"
IMAGE_ID_PREFIX = "image"
NAV_POINT_ID_PREFIX = "body"
SOURCE_ID_PREFIX = "id."

# Regex patterns
SEQUENCE_RE = re.compile(r"^(?P<seq>\d{4})(?P<rest>.*)$")
XML_ENCODING_RE = re.compile(r"""encoding\s*=\s*(["'])[^"']*\1""")
ROOT_START_RE = re.compile(r"<(?![?!])")
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

IMAGE_MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def format_sequence(number: int) -> str:
    """Format a sequence number as the zero padded 4-digit key."""
    return f"{number:0{SEQUENCE_WIDTH}d}"


def chapter_manifest_id(sequence: str) -> str:
    """Manifest item id and spine idref of a chapter (``xhtmlNNNN``)."""
    return f"{CHAPTER_ID_PREFIX}{sequence}"


def image_manifest_id(sequence: str) -> str:
    """Manifest item id of an image (``imageNNNN``)."""
    return f"{IMAGE_ID_PREFIX}{sequence}"


def nav_point_id(sequence: str) -> str:
    """Nav map entry id of a chapter (``bodyNNNN``)."""
    return f"{NAV_POINT_ID_PREFIX}{sequence}"


def source_id(manifest_id: str) -> str:
    """Metadata ``dc:source`` id for a manifest item (``id.xhtmlNNNN``)."""
    return f"{SOURCE_ID_PREFIX}{manifest_id}"


def split_sequence(filename: str) -> tuple[str, str] | None:
    """
    Split a file name into its sequence number and the rest of the name.

    Args:
        filename: Base name or path of a content file

    Returns:
        (sequence, rest) tuple, or None when the name does not start with a
        4-digit sequence number
    """
    m = SEQUENCE_RE.match(posixpath.basename(filename))
    if m is None:
        return None
    return m.group("seq"), m.group("rest")


def sequence_of(filename: str) -> int | None:
    """Return the numeric sequence of a content file, if it has one."""
    parts = split_sequence(filename)
    return int(parts[0]) if parts else None


def renumber_filename(filename: str, sequence: str) -> str:
    """
    Give a content file a new sequence number, keeping the rest of its name.

    Files without a leading number keep their whole name after the new number.

    Args:
        filename: Base name of the file
        sequence: New 4-digit sequence number

    Returns:
        Renumbered base name
    """
    parts = split_sequence(filename)
    if parts is None:
        return f"{sequence}_{posixpath.basename(filename)}"
    return f"{sequence}{parts[1]}"


def image_media_type(filename: str) -> str:
    """Guess an image media type from its extension."""
    ext = posixpath.splitext(filename)[1].lower()
    return IMAGE_MEDIA_TYPES.get(ext, "application/octet-stream")
