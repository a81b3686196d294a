#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for config_manager module.
"""

import argparse

import pytest

from epub_updater.config_manager import ConfigManager


def _args(**kwargs):
    values = {"layout": None, "cover_marker": None, "compression_level": None, "no_backup": False, "log_level": None}
    values.update(kwargs)
    return argparse.Namespace(**values)


class TestConfigManager:
    """Test loading and querying the configuration."""

    def test_defaults_when_file_missing(self, temp_dir, mock_logger):
        """Test a fresh configuration is created and completed."""
        manager = ConfigManager(temp_dir / "config.yml", mock_logger)
        assert (temp_dir / "config.yml").exists()
        assert manager.get("epub.layout") == "auto"
        assert manager.get("epub.validate_after_edit") is True

    def test_partial_file_is_completed(self, temp_dir, mock_logger):
        """Test keys missing from the file come from the defaults."""
        path = temp_dir / "config.yml"
        path.write_text("library:\n  backup_suffix: .orig\n", encoding="utf-8")
        manager = ConfigManager(path, mock_logger)
        assert manager.get("library.backup_suffix") == ".orig"
        assert manager.get("library.backup_before_write") is True
        assert manager.get("logging.level") == "INFO"

    def test_get_default(self, temp_dir, mock_logger):
        """Test the default of get for absent keys."""
        manager = ConfigManager(temp_dir / "config.yml", mock_logger)
        assert manager.get("epub.nothing", "fallback") == "fallback"
        assert manager.get("nothing.at.all") is None

    def test_invalid_file_raises(self, temp_dir, mock_logger, capsys):
        """Test the first validation error is reported and raised."""
        path = temp_dir / "config.yml"
        path.write_text("epub:\n  layout: OPS\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid value 'OPS' for epub.layout"):
            ConfigManager(path, mock_logger)
        output = capsys.readouterr().out
        assert "line 2:" in output
        assert "layout: OPS" in output


class TestUpdateWithArgs:
    """Test the update_with_args method."""

    def test_unset_args_change_nothing(self, temp_dir, mock_logger):
        """Test arguments left at None keep the file values."""
        manager = ConfigManager(temp_dir / "config.yml", mock_logger)
        config = manager.update_with_args(_args())
        assert config["epub"]["layout"] == "auto"
        assert config["library"]["backup_before_write"] is True

    def test_args_override_config(self, temp_dir, mock_logger):
        """Test command-line values take precedence."""
        manager = ConfigManager(temp_dir / "config.yml", mock_logger)
        config = manager.update_with_args(_args(layout="EPUB", cover_marker="Front", compression_level=0, log_level="DEBUG"))
        assert config["epub"]["layout"] == "EPUB"
        assert config["epub"]["cover_marker"] == "Front"
        assert config["epub"]["compression_level"] == 0
        assert config["logging"]["level"] == "DEBUG"

    def test_no_backup(self, temp_dir, mock_logger):
        """Test --no-backup turns the backup off."""
        manager = ConfigManager(temp_dir / "config.yml", mock_logger)
        config = manager.update_with_args(_args(no_backup=True))
        assert config["library"]["backup_before_write"] is False
