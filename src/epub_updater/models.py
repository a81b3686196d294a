#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2025 Emasoft
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
#
# CHANGELOG:
# - Added ChapterRecord for chapters handed to insert
# - Added ChapterRef for chapters resolved inside a package
# - Added ChapterInfo and BookMetadata for listings
# - Added MergeResult
#

"""Data models for the EPUB package updater."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ChapterRecord:
    """A chapter to be added to a package.

    The sequence number is a key, not a reading position. When it is left
    empty the next unused number is assigned at insert time.
    """

    title: str
    content: str
    source_url: str | None = None
    sequence: str | None = None


@dataclass(frozen=True)
class ChapterRef:
    """A chapter resolved to every identifier that refers to it."""

    path: str
    """Absolute zip path of the chapter file."""
    href: str
    """Path relative to the content directory, as written in the manifest."""
    manifest_id: str
    """Manifest item id, also the spine idref."""
    spine_index: int | None = None
    """Position of the itemref in the spine, None when not in the spine."""
    nav_point_id: str | None = None
    """Id of the nav map entry pointing at the chapter, if any."""


@dataclass
class ChapterInfo:
    """One row of a chapter listing."""

    title: str
    path: str
    source_url: str
    spine_index: int
    manifest_id: str


@dataclass
class BookMetadata:
    """Descriptive metadata read from the package document."""

    title: str = ""
    author: str = ""
    language: str = ""
    description: str = ""
    subjects: list[str] = field(default_factory=list)
    series_name: str = ""
    series_index: str = ""
    source_url: str = ""


@dataclass
class MergeResult:
    """Outcome of a merge: the merged package and how many chapters moved."""

    data: bytes
    chapters_added: int
    images_added: int = 0
