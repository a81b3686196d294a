#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Refactored into smaller modules
# - Created config_schema.py for configuration template
# - Created config_loader.py for loading and merging logic
# - Created config_validator.py for validation logic
# - Main config_manager.py now acts as orchestrator
# - Validation errors raise ValueError so callers decide how to exit
#

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
config_manager.py - Configuration management for the EPUB updater
"""

import logging
from pathlib import Path
from typing import Any

from .config_loader import ConfigLoader
from .config_utils import get_by_path
from .config_validator import ConfigValidator

DEFAULT_CONFIG_PATH = Path("epub_updater_config.yml")

# Command-line argument name -> configuration key
ARG_KEYS = {
    "layout": "epub.layout",
    "cover_marker": "epub.cover_marker",
    "compression_level": "epub.compression_level",
    "no_backup": "library.backup_before_write",
    "log_level": "logging.level",
}


class ConfigManager:
    """Manages configuration for the EPUB updater."""

    def __init__(
        self,
        config_path: Path | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file (default: epub_updater_config.yml)
            logger: Logger instance

        Raises:
            ValueError: If the configuration file is invalid
        """
        self.logger = logger or logging.getLogger(__name__)
        self.config_path = config_path or DEFAULT_CONFIG_PATH

        self.loader = ConfigLoader(self.config_path, self.logger)
        self.validator = ConfigValidator(self.logger)

        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load, validate and complete the configuration."""
        config = self.loader.load_config()
        defaults = self.loader.get_default_config()

        first_error = self.validator.validate_config_first_error(config, defaults, self.loader.get_config_lines())
        if first_error:
            self.validator.report_single_error(first_error, self.loader.get_config_lines())
            raise ValueError(first_error["message"])

        return self.loader.merge_with_defaults(config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., 'epub.layout')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return get_by_path(self.config, key_path, default)

    def update_with_args(self, args: Any) -> dict[str, Any]:
        """
        Update configuration with command-line arguments.
        Command-line args take precedence over the config file.

        Args:
            args: Parsed command-line arguments

        Returns:
            Updated configuration dictionary
        """
        for arg_name, key_path in ARG_KEYS.items():
            value = getattr(args, arg_name, None)
            if value is None or value is False:
                continue
            if arg_name == "no_backup":
                value = False
            section, key = key_path.split(".")
            self.config.setdefault(section, {})[key] = value
            self.logger.debug(f"Command line sets {key_path} = {value!r}")
        return self.config
