#!/usr/bin/env python3

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
common_file_utils.py - Shared content decoding utilities for the updater modules

Package entries are expected to be UTF-8, but packages produced by other
tools occasionally are not. Text entries are decoded here with encoding
detection as a fallback, and always written back as UTF-8.
"""

import logging
from pathlib import Path

import chardet

from .epub_constants import ENCODING, XML_ENCODING_RE

# Default logger
logger = logging.getLogger(__name__)


def detect_encoding(raw_data: bytes, sample_size: int = 32 * 1024, logger: logging.Logger | None = None) -> tuple[str, float]:
    """
    Detect the encoding of raw bytes with chardet.

    Args:
        raw_data: Bytes to analyse
        sample_size: Number of leading bytes handed to the detector
        logger: Logger instance (uses module logger if None)

    Returns:
        (encoding, confidence) tuple, "utf-8" when detection gives nothing
    """
    if logger is None:
        logger = globals()["logger"]

    result = chardet.detect(raw_data[:sample_size])
    encoding = result.get("encoding") or ENCODING
    confidence = result.get("confidence") or 0.0
    logger.debug(f"chardet.detect: {encoding} (confidence: {confidence})")
    return encoding, confidence


def decode_content(raw_data: bytes, logger: logging.Logger | None = None) -> str:
    """
    Decode a text entry, trying UTF-8 first.

    A byte order mark is stripped. When the bytes are not valid UTF-8 the
    encoding is detected and undecodable bytes are replaced.

    Args:
        raw_data: Entry content
        logger: Logger instance (uses module logger if None)

    Returns:
        Decoded text
    """
    if logger is None:
        logger = globals()["logger"]

    try:
        return raw_data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    encoding, confidence = detect_encoding(raw_data, logger=logger)
    logger.warning(f"Content is not UTF-8, decoding as {encoding} (confidence: {confidence:.2f})")
    try:
        return raw_data.decode(encoding, errors="replace")
    except LookupError:
        return raw_data.decode(ENCODING, errors="replace")


def encode_content(text: str) -> bytes:
    """
    Encode text as UTF-8, fixing up an XML declaration that says otherwise.

    Args:
        text: Entry text

    Returns:
        UTF-8 bytes
    """
    head, sep, rest = text.partition("?>")
    if sep and head.lstrip().startswith("<?xml"):
        text = XML_ENCODING_RE.sub('encoding="utf-8"', head, count=1) + sep + rest
    return text.encode(ENCODING)


def read_file_bytes(file_path: Path) -> bytes:
    """Read a whole file as bytes."""
    with file_path.open("rb") as f:
        return f.read()


def read_text_file(file_path: Path, logger: logging.Logger | None = None) -> str:
    """
    Read and decode a text file from disk (e.g. chapter XHTML given on the CLI).

    Args:
        file_path: Path to the file
        logger: Logger instance (uses module logger if None)

    Returns:
        Decoded content
    """
    return decode_content(read_file_bytes(file_path), logger=logger)
