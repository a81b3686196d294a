#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module to hold configuration schema and default template
# - Sections reduced to epub, library and logging for the package updater
# - Added VALUE_TYPES and ALLOWED_VALUES used by the validator
#

"""
config_schema.py - Configuration schema and default template for the EPUB updater
"""

# Default configuration template with extensive comments
DEFAULT_CONFIG_TEMPLATE = """# EPUB Updater Configuration File
# ===============================
# This file contains default settings for the EPUB package updater.
# Any command-line arguments will override these settings.

# EPUB Package Settings
# --------------------
epub:
  # Directory layout of the packages being edited (default: auto)
  # auto  - detect from the package (OEBPS/content.opf or EPUB/content.opf)
  # OEBPS - legacy layout: OEBPS/Text, OEBPS/Images, OEBPS/Styles
  # EPUB  - modern layout: EPUB/text, EPUB/images, EPUB/styles
  layout: auto

  # Files whose name contains this marker are not counted as chapters (default: Cover)
  cover_marker: "Cover"

  # Cross-check manifest, spine and navigation after every edit (default: true)
  # Problems found are logged as warnings
  validate_after_edit: true

  # Deflate compression level 0-9 for written packages (default: null = zlib default)
  compression_level: null

# Library Settings
# ---------------
library:
  # Keep a copy of the previous package before overwriting it (default: true)
  backup_before_write: true

  # Suffix appended to the package file name for the backup copy (default: .bak)
  backup_suffix: ".bak"

# Logging Settings
# ---------------
logging:
  # Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
  level: INFO

  # Log to file (default: false)
  file_enabled: false
  file_path: "epub_updater.log"

  # Log format
  format: "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
"""

# Expected Python type of every known key
VALUE_TYPES: dict[str, tuple[type, ...]] = {
    "epub.layout": (str,),
    "epub.cover_marker": (str,),
    "epub.validate_after_edit": (bool,),
    "epub.compression_level": (int, type(None)),
    "library.backup_before_write": (bool,),
    "library.backup_suffix": (str,),
    "logging.level": (str,),
    "logging.file_enabled": (bool,),
    "logging.file_path": (str,),
    "logging.format": (str,),
}

# Keys restricted to a fixed set of values (compared case-insensitively)
ALLOWED_VALUES: dict[str, list[str]] = {
    "epub.layout": ["auto", "OEBPS", "EPUB"],
    "logging.level": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
}
