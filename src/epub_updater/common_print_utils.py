#!/usr/bin/env python3
# -*- coding: utf-8 -*-

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
Common print utilities for console output with rich formatting support.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from rich.console import Console
from rich.table import Table

console = Console(highlight=False)


def safe_print(*args: Any, markup: bool = True, **kwargs: Any) -> None:
    """Print through the shared rich console.

    Args:
        *args: Objects to print
        markup: Interpret rich markup tags such as ``[bold]``; turn off
            for text taken from packages or files
        **kwargs: Keyword arguments for ``Console.print``
    """
    console.print(*args, markup=markup, **kwargs)


def print_table(title: str, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """Print rows as a rich table.

    Args:
        title: Table title
        columns: Column headers
        rows: Row values, converted with ``str``
    """
    table = Table(title=title)
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*(str(value) for value in row))
    console.print(table)
