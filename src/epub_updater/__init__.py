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
EPUB Updater - incremental edits of packaged EPUB books

Insert, delete, reorder, refresh and merge chapters while keeping the
manifest, spine, NCX nav map and navigation document consistent.
"""

__version__ = "1.0.0"
__author__ = "Emasoft"
__email__ = "713559+Emasoft@users.noreply.github.com"
__license__ = "Apache-2.0"

from .epub_errors import (
    ChapterIndexError,
    EpubUpdateError,
    InvalidPackageError,
    MissingRequiredEntryError,
    StructuralMismatchError,
    UnresolvedReferenceError,
)
from .epub_structure import LEGACY_LAYOUT, MODERN_LAYOUT, EpubLayout, detect_layout, get_layout
from .epub_updater import (
    UpdateOptions,
    convert_package_layout,
    delete_chapter,
    delete_chapter_at,
    insert_chapter,
    merge_packages,
    read_chapters,
    read_metadata,
    refresh_chapter,
    refresh_chapter_at,
    reorder_chapters,
)
from .models import BookMetadata, ChapterInfo, ChapterRecord, MergeResult

__all__ = [
    "BookMetadata",
    "ChapterIndexError",
    "ChapterInfo",
    "ChapterRecord",
    "EpubLayout",
    "EpubUpdateError",
    "InvalidPackageError",
    "LEGACY_LAYOUT",
    "MODERN_LAYOUT",
    "MergeResult",
    "MissingRequiredEntryError",
    "StructuralMismatchError",
    "UnresolvedReferenceError",
    "UpdateOptions",
    "convert_package_layout",
    "delete_chapter",
    "delete_chapter_at",
    "detect_layout",
    "get_layout",
    "insert_chapter",
    "merge_packages",
    "read_chapters",
    "read_metadata",
    "refresh_chapter",
    "refresh_chapter_at",
    "reorder_chapters",
]
