#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for epub_constants module.
"""

import pytest

from epub_updater.epub_constants import (
    MIMETYPE,
    chapter_manifest_id,
    format_sequence,
    image_manifest_id,
    image_media_type,
    nav_point_id,
    renumber_filename,
    sequence_of,
    source_id,
    split_sequence,
)


class TestIdentifiers:
    """Test the identifier builders."""

    def test_format_sequence_pads_to_four_digits(self):
        """Test sequence numbers are zero padded."""
        assert format_sequence(4) == "0004"
        assert format_sequence(123) == "0123"
        assert format_sequence(0) == "0000"

    def test_all_identifiers_derive_from_the_sequence(self):
        """Test manifest, nav map and source ids share the sequence."""
        assert chapter_manifest_id("0007") == "xhtml0007"
        assert nav_point_id("0007") == "body0007"
        assert image_manifest_id("0002") == "image0002"
        assert source_id(chapter_manifest_id("0007")) == "id.xhtml0007"

    def test_mimetype(self):
        """Test the package mimetype value."""
        assert MIMETYPE == "application/epub+zip"


class TestSequenceParsing:
    """Test splitting and reading sequence numbers from file names."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("0001.xhtml", ("0001", ".xhtml")),
            ("OEBPS/Text/0042.xhtml", ("0042", ".xhtml")),
            ("0000_Information.xhtml", ("0000", "_Information.xhtml")),
            ("0003_map.png", ("0003", "_map.png")),
        ],
    )
    def test_split_sequence(self, filename, expected):
        """Test names starting with four digits are split."""
        assert split_sequence(filename) == expected

    @pytest.mark.parametrize("filename", ["Cover.xhtml", "toc.xhtml", "12.xhtml", "cover.jpg"])
    def test_split_sequence_without_number(self, filename):
        """Test names without a 4-digit prefix give None."""
        assert split_sequence(filename) is None
        assert sequence_of(filename) is None

    def test_sequence_of(self):
        """Test the numeric value of the sequence."""
        assert sequence_of("EPUB/text/0015.xhtml") == 15
        assert sequence_of("0000_Information.xhtml") == 0


class TestRenumberFilename:
    """Test the renumber_filename function."""

    def test_keeps_the_rest_of_the_name(self):
        """Test the suffix after the number survives."""
        assert renumber_filename("0001.xhtml", "0004") == "0004.xhtml"
        assert renumber_filename("0002_map.png", "0010") == "0010_map.png"

    def test_unnumbered_name_is_prefixed(self):
        """Test a name without a number gets one in front."""
        assert renumber_filename("pic.jpg", "0001") == "0001_pic.jpg"

    def test_directory_is_dropped(self):
        """Test only the base name is returned."""
        assert renumber_filename("OEBPS/Images/pic.jpg", "0003") == "0003_pic.jpg"


class TestImageMediaType:
    """Test the image_media_type function."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("a.jpg", "image/jpeg"),
            ("a.JPEG", "image/jpeg"),
            ("a.png", "image/png"),
            ("a.svg", "image/svg+xml"),
            ("a.bin", "application/octet-stream"),
        ],
    )
    def test_guess(self, filename, expected):
        """Test the media type is guessed from the extension."""
        assert image_media_type(filename) == expected
