#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Initial creation, reads and writes package files for the CLI
# - Edits of the same file are serialized with a lock file next to it, so
#   separate processes editing one package never lose an update
# - Writes go to a temporary file that replaces the package atomically
#

"""
package_store.py - Package files on disk
========================================

The edit engine works on bytes. This module is the thin layer that loads
a package file, runs an edit on its bytes and stores the result, so that a
failed edit never leaves a truncated package behind and two edits of the
same file, from any process, never interleave.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable

import filelock

from .common_file_utils import read_file_bytes

logger = logging.getLogger(__name__)


def lock_path(path: Path) -> Path:
    """Lock file guarding edits of ``path``."""
    return path.with_name(path.name + ".lock")


def backup_path(path: Path, suffix: str = ".bak") -> Path:
    return path.with_name(path.name + suffix)


def write_package(path: Path, data: bytes, backup: bool = False, backup_suffix: str = ".bak") -> None:
    """
    Replace a package file atomically.

    Args:
        path: Package file
        data: New package bytes
        backup: Copy the current file aside first
        backup_suffix: Suffix of the backup copy

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if backup and path.exists():
        shutil.copy2(path, backup_path(path, backup_suffix))
        logger.debug(f"Backed up {path} to {backup_path(path, backup_suffix)}")

    tmp_handle = tempfile.NamedTemporaryFile("wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False)
    try:
        with tmp_handle as handle:
            handle.write(data)
            handle.flush()
        Path(tmp_handle.name).replace(path)
    except Exception:
        Path(tmp_handle.name).unlink(missing_ok=True)
        raise
    logger.info(f"Wrote {path} ({len(data)} bytes)")


def apply_edit(path: Path, edit: Callable[[bytes], bytes], backup: bool = False, backup_suffix: str = ".bak", output: Path | None = None) -> bytes:
    """
    Run an edit on a package file and store the result.

    The file is read, edited and written while holding the lock file of the
    destination, so concurrent edits of one file happen one after the other
    and each sees the previous result, also across processes.

    Args:
        path: Package file to edit
        edit: Function mapping package bytes to edited package bytes
        backup: Copy the current destination aside before replacing it
        backup_suffix: Suffix of the backup copy
        output: Write here instead of replacing ``path``

    Returns:
        The edited package bytes

    Raises:
        EpubUpdateError: When the edit fails; nothing is written then
    """
    path = Path(path)
    destination = Path(output) if output is not None else path
    destination.parent.mkdir(parents=True, exist_ok=True)
    with filelock.FileLock(str(lock_path(destination))):
        data = read_file_bytes(path)
        result = edit(data)
        write_package(destination, result, backup=backup, backup_suffix=backup_suffix)
    return result
