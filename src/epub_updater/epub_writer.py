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
epub_writer.py - Re-assembling an edited package

The writer starts from the entries of the input package, takes the entries
an editor replaced, added or removed, and writes a new archive. The
``mimetype`` entry always goes first and uncompressed; everything else is
deflated. Untouched entries keep their content and timestamps.
"""

from __future__ import annotations

import io
import logging
import time
import zipfile

from .common_file_utils import encode_content
from .epub_constants import MIMETYPE, MIMETYPE_ENTRY
from .epub_reader import EpubPackage

logger = logging.getLogger(__name__)


class PackageWriter:
    """Collects entry changes and builds the new archive bytes."""

    def __init__(self, entries: dict[str, bytes] | None = None, infos: dict[str, zipfile.ZipInfo] | None = None, compression_level: int | None = None):
        self.entries: dict[str, bytes] = dict(entries or {})
        self.infos: dict[str, zipfile.ZipInfo] = dict(infos or {})
        self.compression_level = compression_level

    @classmethod
    def from_package(cls, package: EpubPackage, compression_level: int | None = None) -> PackageWriter:
        """Start from every entry of ``package``, in archive order."""
        return cls(package.entries, package.infos, compression_level)

    def put(self, name: str, data: bytes | str) -> None:
        """Replace an entry in place, or add it at the end."""
        if isinstance(data, str):
            data = encode_content(data)
        if name in self.entries and self.entries[name] != data:
            # Content changed, let the archive record a fresh timestamp
            self.infos.pop(name, None)
        self.entries[name] = data

    def remove(self, name: str) -> None:
        self.entries.pop(name, None)
        self.infos.pop(name, None)

    def has(self, name: str) -> bool:
        return name in self.entries

    def build(self) -> bytes:
        """
        Write the archive.

        Returns:
            Zip bytes with ``mimetype`` stored first
        """
        buffer = io.BytesIO()
        now = time.localtime(time.time())[:6]
        with zipfile.ZipFile(buffer, "w") as z:
            mimetype = self.entries.get(MIMETYPE_ENTRY, MIMETYPE.encode("ascii"))
            z.writestr(self._info(MIMETYPE_ENTRY, now, zipfile.ZIP_STORED), mimetype)
            for name, data in self.entries.items():
                if name == MIMETYPE_ENTRY:
                    continue
                z.writestr(self._info(name, now, zipfile.ZIP_DEFLATED), data, compresslevel=self.compression_level)
        result = buffer.getvalue()
        logger.debug(f"Wrote package with {len(self.entries)} entries ({len(result)} bytes)")
        return result

    def _info(self, name: str, now: tuple[int, ...], compress_type: int) -> zipfile.ZipInfo:
        original = self.infos.get(name)
        info = zipfile.ZipInfo(name, date_time=original.date_time if original else now)
        info.compress_type = compress_type
        info.external_attr = original.external_attr if original else 0o644 << 16
        return info
