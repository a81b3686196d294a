#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for models module.
"""

import dataclasses

import pytest

from epub_updater.models import BookMetadata, ChapterInfo, ChapterRecord, ChapterRef, MergeResult


class TestChapterRecord:
    """Test the ChapterRecord dataclass."""

    def test_defaults(self):
        """Test optional fields default to None."""
        record = ChapterRecord(title="One", content="<p/>")
        assert record.source_url is None
        assert record.sequence is None

    def test_all_fields(self):
        """Test every field is stored."""
        record = ChapterRecord("One", "<p/>", "https://example.com/1", "0007")
        assert record.sequence == "0007"
        assert record.source_url == "https://example.com/1"


class TestChapterRef:
    """Test the ChapterRef dataclass."""

    def test_frozen(self):
        """Test references cannot be changed."""
        ref = ChapterRef(path="OEBPS/Text/0001.xhtml", href="Text/0001.xhtml", manifest_id="xhtml0001")
        with pytest.raises(dataclasses.FrozenInstanceError):
            ref.spine_index = 3

    def test_equality(self):
        """Test references compare by value."""
        a = ChapterRef("OEBPS/Text/0001.xhtml", "Text/0001.xhtml", "xhtml0001", 2, "body0001")
        b = ChapterRef("OEBPS/Text/0001.xhtml", "Text/0001.xhtml", "xhtml0001", 2, "body0001")
        assert a == b
        assert hash(a) == hash(b)


class TestListingModels:
    """Test the models returned by read operations."""

    def test_chapter_info(self):
        """Test ChapterInfo fields."""
        info = ChapterInfo("Chapter 1", "EPUB/text/0001.xhtml", "library://book/1", 2, "xhtml0001")
        assert info.spine_index == 2
        assert info.manifest_id == "xhtml0001"

    def test_book_metadata_defaults(self):
        """Test metadata defaults are empty and lists are not shared."""
        first, second = BookMetadata(), BookMetadata()
        first.subjects.append("Fantasy")
        assert second.subjects == []
        assert first.title == ""

    def test_merge_result(self):
        """Test images_added defaults to zero."""
        result = MergeResult(data=b"zip", chapters_added=3)
        assert result.images_added == 0
