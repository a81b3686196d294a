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
epub_reader.py - Read-only snapshot of a packaged EPUB

The whole archive is read into memory once. Editors never touch the
snapshot; they hand their output to the writer.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

from .common_file_utils import decode_content
from .epub_constants import MIMETYPE_ENTRY
from .epub_errors import InvalidPackageError, MissingRequiredEntryError
from .epub_structure import EpubLayout, detect_layout, get_layout

logger = logging.getLogger(__name__)


class EpubPackage:
    """Entries of a zip archive, in archive order, plus its layout."""

    def __init__(self, data: bytes, layout: EpubLayout | str | None = None):
        """
        Read an archive from bytes.

        Args:
            data: Zip archive bytes
            layout: Layout to use; detected from the entries when None

        Raises:
            InvalidPackageError: If the bytes are not a zip archive
            MissingRequiredEntryError: If no layout is given and no package
                document can be found
        """
        self.data = data
        self.entries: dict[str, bytes] = {}
        self.infos: dict[str, zipfile.ZipInfo] = {}
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as z:
                for info in z.infolist():
                    if info.is_dir():
                        continue
                    self.entries[info.filename] = z.read(info)
                    self.infos[info.filename] = info
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise InvalidPackageError(f"Not a readable EPUB archive: {e}") from e

        if layout is None:
            detected = detect_layout(self.entries)
            if detected is None:
                raise MissingRequiredEntryError(["content.opf"])
            self.layout = detected
        else:
            self.layout = get_layout(layout)
        logger.debug(f"Read package with {len(self.entries)} entries ({self.layout.name} layout)")

    @classmethod
    def from_path(cls, path: Path, layout: EpubLayout | str | None = None) -> EpubPackage:
        """Read a package from a file on disk."""
        with Path(path).open("rb") as f:
            return cls(f.read(), layout)

    def names(self) -> list[str]:
        return list(self.entries)

    def has(self, name: str) -> bool:
        return name in self.entries

    def read_bytes(self, name: str) -> bytes:
        """
        Return the content of an entry.

        Raises:
            MissingRequiredEntryError: If the entry does not exist
        """
        try:
            return self.entries[name]
        except KeyError:
            raise MissingRequiredEntryError([name]) from None

    def read_text(self, name: str) -> str:
        """Return an entry decoded as text."""
        return decode_content(self.read_bytes(name))

    @property
    def mimetype(self) -> str | None:
        if MIMETYPE_ENTRY not in self.entries:
            return None
        return self.entries[MIMETYPE_ENTRY].decode("ascii", errors="replace").strip()

    def content_opf(self) -> str:
        return self.read_text(self.layout.content_opf)

    def toc_ncx(self) -> str:
        return self.read_text(self.layout.toc_ncx)

    def nav_xhtml(self) -> str | None:
        """Navigation document text, or None when the package has none."""
        if not self.has(self.layout.nav_xhtml):
            return None
        return self.read_text(self.layout.nav_xhtml)
