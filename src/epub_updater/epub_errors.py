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
epub_errors.py - Exceptions raised by package edits

Every error is fatal to the single edit that raised it. The input package
bytes are never modified, so the caller can fix the input and retry.
"""


class EpubUpdateError(Exception):
    """Base class for all package edit failures."""

    pass


class InvalidPackageError(EpubUpdateError):
    """Raised when the input bytes are not a readable zip archive."""

    pass


class MissingRequiredEntryError(EpubUpdateError):
    """Raised when mimetype, the package document or the nav map is absent."""

    def __init__(self, entries: list[str] | str):
        if isinstance(entries, str):
            entries = [entries]
        self.entries = list(entries)
        super().__init__(f"Missing required EPUB entries: {', '.join(self.entries)}")


class StructuralMismatchError(EpubUpdateError):
    """Raised when an expected manifest, spine or nav map fragment is absent."""

    pass


class ChapterIndexError(EpubUpdateError, IndexError):
    """Raised when a chapter index falls outside the valid range."""

    def __init__(self, index: int, max_index: int):
        self.index = index
        self.max_index = max_index
        super().__init__(f"Chapter index {index} out of range (0-{max_index})")


class UnresolvedReferenceError(EpubUpdateError):
    """Raised when a chapter in a new reading order has no manifest item."""

    def __init__(self, reference: str, reason: str = "no manifest item"):
        self.reference = reference
        super().__init__(f"Cannot resolve chapter '{reference}': {reason}")
