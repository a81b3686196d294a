#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module to hold CLI help text
# - Extracted from cli_parser.py to reduce file size
#

"""
cli_help_text.py - Help text and usage examples for the epub-updater CLI
=======================================================================
"""


def get_epilog_text() -> str:
    """Get the epilog help text for the argument parser.

    Returns:
        The formatted epilog text with usage examples
    """
    return """
====================================================================================
USAGE EXAMPLES:
====================================================================================

  List the chapters of a book:
    $ epub-updater list "My Novel.epub"

  Insert a chapter before the third spine item:
    $ epub-updater insert "My Novel.epub" chapter.xhtml --at 2 --title "Chapter 2.5"

  Append a chapter, recording where it came from:
    $ epub-updater insert "My Novel.epub" chapter.xhtml --source-url https://example.com/c42

  Delete the chapter at index 4 (0-based, cover excluded):
    $ epub-updater delete "My Novel.epub" --index 4

  Replace the text of a chapter:
    $ epub-updater refresh "My Novel.epub" fixed.xhtml --path OEBPS/Text/0003.xhtml

  Reorder chapters (paths listed under 'order:' in a YAML file):
    $ epub-updater reorder "My Novel.epub" --order-file order.yml

  Append every chapter of another book:
    $ epub-updater merge "Volume 1.epub" "Volume 2.epub" --output "Complete.epub"

  Move a book to the EPUB/text layout:
    $ epub-updater convert "My Novel.epub" --to EPUB

  Check manifest, spine and navigation for inconsistencies:
    $ epub-updater validate "My Novel.epub"

====================================================================================
NOTES:
====================================================================================

  Every edit replaces the book file atomically. With library.backup_before_write
  enabled (the default) the previous version is kept next to it with the
  library.backup_suffix appended. Use --output to write somewhere else.

  Settings are read from epub_updater_config.yml, created with defaults on first
  run. Command-line options override the file.
"""
