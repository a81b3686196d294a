#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for opf_document module.
"""

import pytest
from epub_samples import BOOK_URL, chapter_url

from epub_updater.epub_errors import StructuralMismatchError
from epub_updater.epub_reader import EpubPackage
from epub_updater.opf_document import PackageDocument


@pytest.fixture
def opf(legacy_epub):
    return PackageDocument.from_text(EpubPackage(legacy_epub).content_opf())


class TestStructure:
    """Test opening package documents."""

    def test_missing_spine(self):
        """Test a package document without a spine is rejected."""
        text = '<package xmlns="http://www.idpf.org/2007/opf"><metadata/><manifest/></package>'
        with pytest.raises(StructuralMismatchError, match="missing manifest or spine"):
            PackageDocument.from_text(text)

    def test_wrong_root(self):
        """Test a document that is not a package document."""
        with pytest.raises(StructuralMismatchError, match="expected <package>"):
            PackageDocument.from_text("<ncx><navMap/></ncx>")


class TestManifest:
    """Test manifest queries and edits."""

    def test_lookup(self, opf):
        """Test items are found by id and by href."""
        assert opf.item_by_id("xhtml0002").get("href") == "Text/0002.xhtml"
        assert opf.item_by_href("Text/0002.xhtml#top").get("id") == "xhtml0002"
        assert opf.item_by_href("Text/0099.xhtml") is None
        assert opf.href_to_id()["Text/0001.xhtml"] == "xhtml0001"

    def test_add_item(self, opf):
        """Test a new item is appended."""
        opf.add_item("xhtml0004", "Text/0004.xhtml", "application/xhtml+xml")
        assert opf.items()[-1].get("id") == "xhtml0004"
        assert opf.items()[-1].get("media-type") == "application/xhtml+xml"

    def test_add_duplicate_id(self, opf):
        """Test ids stay unique."""
        with pytest.raises(StructuralMismatchError, match="id 'xhtml0001'"):
            opf.add_item("xhtml0001", "Text/0009.xhtml", "application/xhtml+xml")

    def test_add_duplicate_href(self, opf):
        """Test a file is listed only once."""
        with pytest.raises(StructuralMismatchError, match="Text/0001.xhtml"):
            opf.add_item("xhtml0009", "Text/0001.xhtml", "application/xhtml+xml")

    def test_remove_item(self, opf):
        """Test removing an item."""
        opf.remove_item(opf.item_by_id("xhtml0002"))
        assert opf.item_by_id("xhtml0002") is None


class TestSpine:
    """Test spine queries and edits."""

    def test_spine_ids(self, opf):
        """Test the spine order."""
        assert opf.spine_ids() == ["cover", "xhtml0000", "xhtml0001", "xhtml0002", "xhtml0003"]
        assert opf.spine_index_of("xhtml0001") == 2
        assert opf.spine_index_of("missing") is None

    def test_insert_itemref(self, opf):
        """Test splicing into the middle and appending."""
        opf.insert_itemref("xhtml0004", 3)
        opf.insert_itemref("xhtml0005", 99)
        assert opf.spine_ids() == ["cover", "xhtml0000", "xhtml0001", "xhtml0004", "xhtml0002", "xhtml0003", "xhtml0005"]

    def test_remove_itemref(self, opf):
        """Test removing an itemref."""
        opf.remove_itemref(opf.itemref_for("xhtml0002"))
        assert opf.spine_ids() == ["cover", "xhtml0000", "xhtml0001", "xhtml0003"]

    def test_reorder_spine(self, opf):
        """Test a reordered run takes the place of its first member."""
        opf.reorder_spine(["xhtml0003", "xhtml0001"])
        assert opf.spine_ids() == ["cover", "xhtml0000", "xhtml0003", "xhtml0001", "xhtml0002"]

    def test_reorder_unknown_idref(self, opf):
        """Test ids missing from the spine are rejected."""
        with pytest.raises(StructuralMismatchError, match="xhtml0009"):
            opf.reorder_spine(["xhtml0009", "xhtml0001"])


class TestMetadata:
    """Test metadata queries and source records."""

    def test_sources(self, opf):
        """Test the recorded source URLs."""
        sources = opf.sources()
        assert sources["id.xhtml0002"] == chapter_url(2)
        assert "id.xhtml0000" not in sources

    def test_add_and_remove_source(self, opf):
        """Test source records can be added and removed."""
        opf.add_source("id.xhtml0004", "https://example.com/new")
        assert opf.sources()["id.xhtml0004"] == "https://example.com/new"
        assert opf.remove_source("id.xhtml0004") is True
        assert opf.remove_source("id.xhtml0004") is False

    def test_book_metadata(self, opf):
        """Test the descriptive metadata."""
        metadata = opf.book_metadata()
        assert metadata.title == "Sample Book"
        assert metadata.author == "Sample Author"
        assert metadata.language == "en"
        assert metadata.subjects == ["Testing"]
        assert metadata.series_name == "Samples"
        assert metadata.series_index == "2"
        assert metadata.source_url == BOOK_URL

    def test_without_metadata(self):
        """Test a package document without metadata."""
        opf = PackageDocument.from_text('<package xmlns="http://www.idpf.org/2007/opf"><manifest/><spine/></package>')
        assert opf.sources() == {}
        assert opf.book_metadata().title == ""
        with pytest.raises(StructuralMismatchError, match="missing metadata"):
            opf.add_source("id.x", "https://example.com")

    def test_serialized_edit_parses_back(self, opf):
        """Test an edited document serializes to an equivalent one."""
        opf.add_item("xhtml0004", "Text/0004.xhtml", "application/xhtml+xml")
        opf.insert_itemref("xhtml0004", 2)
        opf.add_source("id.xhtml0004", "https://example.com/4")
        again = PackageDocument.from_text(opf.to_text())
        assert again.spine_ids()[2] == "xhtml0004"
        assert again.sources()["id.xhtml0004"] == "https://example.com/4"
        assert again.book_metadata().author == "Sample Author"
