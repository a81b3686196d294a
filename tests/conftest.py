#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest configuration and shared fixtures for all tests
"""

import os
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path so we can import our modules
src_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
sys.path.insert(0, src_dir)

from epub_samples import build_epub  # noqa: E402
from epub_updater.epub_structure import LEGACY_LAYOUT, MODERN_LAYOUT  # noqa: E402


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = Mock()
    logger.info = Mock()
    logger.debug = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.exception = Mock()
    return logger


@pytest.fixture
def legacy_epub():
    """Three chapters, cover, information page and nav document, OEBPS layout"""
    return build_epub(LEGACY_LAYOUT)


@pytest.fixture
def modern_epub():
    """Three chapters, cover, information page and nav document, EPUB layout"""
    return build_epub(MODERN_LAYOUT)


@pytest.fixture(params=[LEGACY_LAYOUT, MODERN_LAYOUT], ids=["OEBPS", "EPUB"])
def layout(request):
    """Run a test once per directory layout"""
    return request.param


@pytest.fixture
def epub_file(temp_dir, legacy_epub):
    """The legacy sample package written to disk"""
    path = temp_dir / "sample.epub"
    path.write_bytes(legacy_epub)
    return path


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
