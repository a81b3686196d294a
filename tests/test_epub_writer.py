#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for epub_writer module.
"""

import io
import zipfile

from epub_samples import read_entries, replace_entries

from epub_updater.epub_reader import EpubPackage
from epub_updater.epub_writer import PackageWriter


def _infos(data):
    with zipfile.ZipFile(io.BytesIO(data)) as z:
        return z.infolist()


class TestPackageWriter:
    """Test re-assembling packages."""

    def test_mimetype_first_and_stored(self, legacy_epub):
        """Test mimetype is the first entry and uncompressed."""
        infos = _infos(PackageWriter.from_package(EpubPackage(legacy_epub)).build())
        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in infos[1:])

    def test_mimetype_moved_to_front(self, legacy_epub):
        """Test a package with mimetype elsewhere is fixed on write."""
        entries = read_entries(legacy_epub)
        mimetype = entries.pop("mimetype")
        writer = PackageWriter(entries)
        writer.put("mimetype", mimetype)
        assert _infos(writer.build())[0].filename == "mimetype"

    def test_missing_mimetype_is_written(self, legacy_epub):
        """Test the mimetype entry is always present."""
        entries = read_entries(legacy_epub)
        entries.pop("mimetype")
        data = PackageWriter(entries).build()
        assert read_entries(data)["mimetype"] == b"application/epub+zip"

    def test_untouched_entries_survive(self, legacy_epub):
        """Test entries not edited keep content and timestamps."""
        package = EpubPackage(legacy_epub)
        data = PackageWriter.from_package(package).build()
        assert read_entries(data) == package.entries
        original = {info.filename: info.date_time for info in _infos(legacy_epub)}
        for info in _infos(data):
            assert info.date_time == original[info.filename]

    def test_put_replaces_in_place(self, legacy_epub):
        """Test a replaced entry keeps its position."""
        writer = PackageWriter.from_package(EpubPackage(legacy_epub))
        names = list(writer.entries)
        writer.put("OEBPS/Text/0002.xhtml", "<html/>")
        data = writer.build()
        assert list(read_entries(data)) == names
        assert read_entries(data)["OEBPS/Text/0002.xhtml"] == b"<html/>"

    def test_put_adds_at_end(self, legacy_epub):
        """Test a new entry is appended."""
        writer = PackageWriter.from_package(EpubPackage(legacy_epub))
        writer.put("OEBPS/Text/0004.xhtml", b"<html/>")
        assert list(read_entries(writer.build()))[-1] == "OEBPS/Text/0004.xhtml"

    def test_remove(self, legacy_epub):
        """Test removing an entry."""
        writer = PackageWriter.from_package(EpubPackage(legacy_epub))
        writer.remove("OEBPS/Text/0002.xhtml")
        writer.remove("OEBPS/Text/0099.xhtml")
        assert "OEBPS/Text/0002.xhtml" not in read_entries(writer.build())

    def test_compression_level(self, legacy_epub):
        """Test a compression level gives a readable archive."""
        data = replace_entries(legacy_epub, {"OEBPS/Text/0001.xhtml": "x" * 5000})
        writer = PackageWriter.from_package(EpubPackage(data), compression_level=9)
        assert read_entries(writer.build())["OEBPS/Text/0001.xhtml"] == b"x" * 5000
