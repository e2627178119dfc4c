# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader package: delimited USER_ARGUMENTS export -> FlatArgument stream.

Public API:
  - FlatArgument: one immutable export row
  - read_rows: lazy row generator with delimiter detection
  - ReaderConfig: peek size and file label for locations
"""

from .rows import FlatArgument
from .csv_reader import REQUIRED_COLUMNS, OPTIONAL_COLUMNS, ReaderConfig, read_rows

__all__ = [
	"FlatArgument",
	"REQUIRED_COLUMNS",
	"OPTIONAL_COLUMNS",
	"ReaderConfig",
	"read_rows",
]
