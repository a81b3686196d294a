#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module for common configuration utilities
# - Extracted find_line_number method used by multiple modules
# - Added get_by_path for dot-notation lookups shared by manager and validator
#

"""
config_utils.py - Common utilities for the configuration modules
"""

from typing import Any

_MISSING = object()


def find_line_number(key_path: str, config_lines: list[str]) -> int | None:
    """
    Find the line number of a configuration key in the YAML file.

    The parent keys must appear, in order, before the last key; each level
    is expected two spaces deeper than the previous one.

    Args:
        key_path: Dot-separated path to key
        config_lines: Configuration file lines

    Returns:
        Line number (1-based) or None if not found
    """
    if not config_lines:
        return None

    keys = key_path.split(".")
    depth = 0

    for i, line in enumerate(config_lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        current_indent = len(line) - len(line.lstrip())
        if current_indent == depth * 2 and stripped.startswith(f"{keys[depth]}:"):
            if depth == len(keys) - 1:
                return i
            depth += 1
        elif current_indent < depth * 2:
            # Left the parent section without finding the key
            return None

    return None


def get_by_path(config: dict[str, Any], key_path: str, default: Any = _MISSING) -> Any:
    """
    Look up a dot-separated key in a nested dictionary.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., 'epub.layout')
        default: Value returned when the key is absent

    Returns:
        The value, or ``default``

    Raises:
        KeyError: If the key is absent and no default was given
    """
    value: Any = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        elif default is _MISSING:
            raise KeyError(key_path)
        else:
            return default
    return value
