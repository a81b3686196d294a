#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for package_store module.
"""

import multiprocessing
import threading
import time
from unittest.mock import patch

import filelock
import pytest

from epub_updater.epub_errors import StructuralMismatchError
from epub_updater.package_store import apply_edit, backup_path, lock_path, write_package


def _append_byte(data):
    return data + b"x"


def _edit_in_process(path):
    apply_edit(path, _append_byte)


class TestLockPath:
    """Test the lock_path function."""

    def test_lock_next_to_package(self, temp_dir):
        """Test the lock file sits beside the package it guards."""
        assert lock_path(temp_dir / "book.epub") == temp_dir / "book.epub.lock"


class TestWritePackage:
    """Test the write_package function."""

    def test_backup_path(self, temp_dir):
        """Test the backup name keeps the original extension."""
        assert backup_path(temp_dir / "book.epub", ".bak") == temp_dir / "book.epub.bak"

    def test_writes_new_file(self, temp_dir):
        """Test writing a file that does not exist yet."""
        path = temp_dir / "out" / "book.epub"
        write_package(path, b"data", backup=True)
        assert path.read_bytes() == b"data"
        assert not backup_path(path).exists()

    def test_backup_of_previous_version(self, temp_dir):
        """Test the previous content is copied aside."""
        path = temp_dir / "book.epub"
        path.write_bytes(b"old")
        write_package(path, b"new", backup=True, backup_suffix=".orig")
        assert path.read_bytes() == b"new"
        assert (temp_dir / "book.epub.orig").read_bytes() == b"old"

    def test_no_temporary_files_left(self, temp_dir):
        """Test only the package remains in the directory."""
        path = temp_dir / "book.epub"
        write_package(path, b"data")
        assert [p.name for p in temp_dir.iterdir()] == ["book.epub"]

    def test_failed_replace_keeps_original(self, temp_dir):
        """Test a failed write leaves the old file and no temporary file."""
        path = temp_dir / "book.epub"
        path.write_bytes(b"old")
        with patch("epub_updater.package_store.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                write_package(path, b"new")
        assert path.read_bytes() == b"old"
        assert [p.name for p in temp_dir.iterdir()] == ["book.epub"]


class TestApplyEdit:
    """Test the apply_edit function."""

    def test_replaces_file(self, epub_file):
        """Test the edit result replaces the package."""
        result = apply_edit(epub_file, lambda data: data + b"!")
        assert epub_file.read_bytes() == result
        assert result.endswith(b"!")

    def test_output_leaves_input(self, epub_file, temp_dir):
        """Test writing to another file keeps the input untouched."""
        original = epub_file.read_bytes()
        output = temp_dir / "copy.epub"
        apply_edit(epub_file, lambda data: b"edited", output=output)
        assert epub_file.read_bytes() == original
        assert output.read_bytes() == b"edited"

    def test_failed_edit_writes_nothing(self, epub_file):
        """Test a failing edit leaves the file as it was."""
        original = epub_file.read_bytes()

        def edit(data):
            raise StructuralMismatchError("broken")

        with pytest.raises(StructuralMismatchError):
            apply_edit(epub_file, edit, backup=True)
        assert epub_file.read_bytes() == original
        assert not backup_path(epub_file).exists()

    def test_concurrent_edits_are_serialized(self, temp_dir):
        """Test concurrent edits of one file all take effect."""
        path = temp_dir / "counter.bin"
        path.write_bytes(b"")

        def append(data):
            return data + b"x"

        threads = [threading.Thread(target=apply_edit, args=(path, append)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert path.read_bytes() == b"x" * 8

    def test_waits_for_lock_held_elsewhere(self, temp_dir):
        """Test an edit waits while another holder has the package's lock file."""
        path = temp_dir / "book.epub"
        path.write_bytes(b"old")
        holder = filelock.FileLock(str(lock_path(path)))

        with holder:
            thread = threading.Thread(target=apply_edit, args=(path, lambda data: data + b"!"))
            thread.start()
            time.sleep(0.3)
            assert path.read_bytes() == b"old"
        thread.join(timeout=10)
        assert not thread.is_alive()
        assert path.read_bytes() == b"old!"

    def test_output_in_new_directory(self, epub_file, temp_dir):
        """Test the lock file can be taken for an output path that does not exist yet."""
        output = temp_dir / "out" / "copy.epub"
        apply_edit(epub_file, lambda data: b"edited", output=output)
        assert output.read_bytes() == b"edited"

    def test_edits_from_separate_processes(self, temp_dir):
        """Test edits of one file from several processes all take effect."""
        path = temp_dir / "counter.bin"
        path.write_bytes(b"")
        context = multiprocessing.get_context("spawn")
        processes = [context.Process(target=_edit_in_process, args=(path,)) for _ in range(4)]
        for process in processes:
            process.start()
        for process in processes:
            process.join(timeout=60)
        assert [process.exitcode for process in processes] == [0, 0, 0, 0]
        assert path.read_bytes() == b"x" * 4
