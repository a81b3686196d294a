#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module to handle configuration loading and merging
# - Extracted loading logic from config_manager.py
# - YAML syntax errors are reported and raised as ValueError instead of exiting
#

"""
config_loader.py - Configuration loading and merging utilities
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from .common_yaml_utils import load_safe_yaml, merge_yaml_configs
from .config_error_reporter import ConfigErrorReporter
from .config_schema import DEFAULT_CONFIG_TEMPLATE
from .config_utils import find_line_number


class ConfigLoader:
    """Handles loading and merging of configuration files."""

    def __init__(self, config_path: Path, logger: logging.Logger | None = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to configuration file
            logger: Logger instance
        """
        self.config_path = config_path
        self.logger = logger or logging.getLogger(__name__)
        self._config_lines: list[str] = []
        self.error_reporter = ConfigErrorReporter()

    def load_config(self) -> dict[str, Any]:
        """
        Load configuration from file or create default.

        Returns:
            Configuration dictionary

        Raises:
            ValueError: If the file cannot be read or is not valid YAML
        """
        if not self.config_path.exists():
            self.logger.info(f"Configuration file not found. Creating default at: {self.config_path}")
            self._create_default_config()

        try:
            file_content = self.config_path.read_text(encoding="utf-8")
            # Parse once here so syntax errors can be shown with their line
            yaml.safe_load(file_content)
        except yaml.YAMLError as e:
            self.error_reporter.report_yaml_error(e, self.config_path)
            raise ValueError(f"Invalid YAML in {self.config_path}") from e
        except OSError as e:
            self.logger.error(f"Error loading configuration: {e}")
            raise ValueError(f"Cannot read configuration file {self.config_path}: {e}") from e

        self._config_lines = file_content.split("\n")
        config = load_safe_yaml(self.config_path)
        if not config:
            self.logger.warning("Configuration file is empty. Using defaults.")
            return self.get_default_config()
        return config

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
            self.logger.info("Default configuration file created successfully.")
        except OSError as e:
            self.logger.error(f"Failed to create configuration file: {e}")
            raise

    def get_default_config(self) -> dict[str, Any]:
        """
        Get default configuration as dictionary.

        Returns:
            Default configuration dictionary
        """
        result = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
        return result if isinstance(result, dict) else {}

    def merge_with_defaults(self, config: dict[str, Any]) -> dict[str, Any]:
        """
        Merge user config with defaults to ensure all keys exist.

        Args:
            config: User configuration

        Returns:
            Merged configuration
        """
        return merge_yaml_configs(self.get_default_config(), config)

    def get_config_lines(self) -> list[str]:
        """Configuration file lines, for error reporting."""
        return self._config_lines

    def find_line_number(self, key_path: str) -> int | None:
        """
        Find the line number of a configuration key in the YAML file.

        Args:
            key_path: Dot-separated path to key

        Returns:
            Line number or None if not found
        """
        return find_line_number(key_path, self._config_lines)
