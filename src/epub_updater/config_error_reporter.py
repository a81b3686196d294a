#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module to handle error reporting
# - Extracted error reporting logic from config_validator.py
# - Output goes through safe_print so it shares the CLI's rich console
#

"""
config_error_reporter.py - Configuration error reporting utilities
"""

from pathlib import Path
from typing import Any

import yaml

from .common_print_utils import safe_print


class ConfigErrorReporter:
    """Reports configuration validation errors."""

    def report_single_error(self, error: dict[str, Any], config_lines: list[str]) -> None:
        """
        Report a single validation error.

        Args:
            error: Error information
            config_lines: Configuration file lines
        """
        line = error.get("line")
        if line is None:
            line = "unknown"

        safe_print(f"\n[bold red]line {line}:[/bold red] {error['message']}")
        if error["type"] in ("unknown_key", "invalid_value", "invalid_type") and line != "unknown" and config_lines:
            line_idx = int(line) - 1
            if 0 <= line_idx < len(config_lines):
                safe_print(f"  {config_lines[line_idx].strip()}", markup=False)

    def report_yaml_error(self, error: yaml.YAMLError, config_path: Path) -> None:
        """
        Report YAML parsing errors with line information.

        Args:
            error: YAML parsing error
            config_path: Path to configuration file
        """
        safe_print("\n" + "=" * 80)
        safe_print("[bold red]YAML PARSING ERROR[/bold red]")
        safe_print("=" * 80)
        safe_print(f"Failed to parse {config_path}")

        mark = getattr(error, "problem_mark", None)
        if mark is not None:
            safe_print(f"Error at line {mark.line + 1}, column {mark.column + 1}:")
            lines = config_path.read_text(encoding="utf-8").splitlines()
            if mark.line < len(lines):
                safe_print(f"  {mark.line + 1}: {lines[mark.line].rstrip()}", markup=False)
                safe_print(f"  {' ' * (len(str(mark.line + 1)) + 2)}{' ' * mark.column}^")

        safe_print(f"\nProblem: {getattr(error, 'problem', None) or error}", markup=False)
        safe_print("\nFix the syntax error or delete the config file to regenerate defaults.")
        safe_print("=" * 80)
