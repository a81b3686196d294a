#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module to handle configuration validation
# - Extracted validation logic from config_manager.py
# - Checks unknown keys at every level, value types and allowed values
#

"""
config_validator.py - Configuration validation utilities
"""

import logging
from typing import Any

from .config_error_reporter import ConfigErrorReporter
from .config_schema import ALLOWED_VALUES, VALUE_TYPES
from .config_utils import find_line_number, get_by_path


class ConfigValidator:
    """Validates configuration structure and values."""

    def __init__(self, logger: logging.Logger | None = None):
        """
        Initialize configuration validator.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_reporter = ConfigErrorReporter()

    def _unknown_key(self, config: dict[str, Any], defaults: dict[str, Any], config_lines: list[str], prefix: str = "") -> dict[str, Any] | None:
        for key, value in config.items():
            path = f"{prefix}{key}"
            if key not in defaults:
                return {
                    "type": "unknown_key",
                    "key": path,
                    "line": find_line_number(path, config_lines),
                    "message": f"Unknown or malformed key '{path}' found.",
                }
            if isinstance(defaults[key], dict):
                if not isinstance(value, dict):
                    return {
                        "type": "invalid_type",
                        "key": path,
                        "line": find_line_number(path, config_lines),
                        "message": f"Section '{path}' must be a mapping, got {type(value).__name__}",
                    }
                error = self._unknown_key(value, defaults[key], config_lines, f"{path}.")
                if error:
                    return error
        return None

    def validate_config_first_error(self, config: dict[str, Any], defaults: dict[str, Any], config_lines: list[str]) -> dict[str, Any] | None:
        """
        Validate configuration and return only the FIRST error found.

        Missing sections and keys are not errors; they are filled from the
        defaults afterwards.

        Args:
            config: Configuration to validate
            defaults: Default configuration for reference
            config_lines: Configuration file lines for error reporting

        Returns:
            First error found or None if valid
        """
        error = self._unknown_key(config, defaults, config_lines)
        if error:
            return error

        for key_path, expected in VALUE_TYPES.items():
            value = get_by_path(config, key_path, None)
            if value is None and key_path.split(".")[-1] not in _nested_keys(config, key_path):
                continue
            # bool is a subclass of int; a level of "true" is still wrong
            if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
                names = " or ".join("null" if t is type(None) else t.__name__ for t in expected)
                return {
                    "type": "invalid_type",
                    "key": key_path,
                    "line": find_line_number(key_path, config_lines),
                    "message": f"Invalid type for {key_path}: expected {names}, got {type(value).__name__}",
                }

        for key_path, valid_values in ALLOWED_VALUES.items():
            value = get_by_path(config, key_path, None)
            if value is None:
                continue
            if str(value).upper() not in [v.upper() for v in valid_values]:
                return {
                    "type": "invalid_value",
                    "key": key_path,
                    "value": value,
                    "valid_values": valid_values,
                    "line": find_line_number(key_path, config_lines),
                    "message": f"Invalid value '{value}' for {key_path}. Must be one of: {', '.join(valid_values)}",
                }

        level = get_by_path(config, "epub.compression_level", None)
        if isinstance(level, int) and not isinstance(level, bool) and not 0 <= level <= 9:
            return {
                "type": "invalid_value",
                "key": "epub.compression_level",
                "value": level,
                "line": find_line_number("epub.compression_level", config_lines),
                "message": f"Invalid value '{level}' for epub.compression_level. Must be between 0 and 9",
            }

        return None

    def report_single_error(self, error: dict[str, Any], config_lines: list[str]) -> None:
        """
        Report a single validation error.

        Args:
            error: Error information
            config_lines: Configuration file lines
        """
        self.error_reporter.report_single_error(error, config_lines)


def _nested_keys(config: dict[str, Any], key_path: str) -> list[str]:
    """Keys present in the section that holds ``key_path``."""
    section = get_by_path(config, key_path.rsplit(".", 1)[0], None)
    return list(section.keys()) if isinstance(section, dict) else []
