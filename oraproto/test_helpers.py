# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need export rows.

These keep test data close to what a real USER_ARGUMENTS export looks like
without spelling out all eighteen columns in every test.
"""

from __future__ import annotations

import csv
import io
from dataclasses import replace
from typing import Iterable, List, Sequence, Tuple, Union

from oraproto.reader.csv_reader import REQUIRED_COLUMNS
from oraproto.reader.rows import FlatArgument

# (level, argument name, data type) or (level, name, data type, in_out)
RowShape = Union[Tuple[int, str, str], Tuple[int, str, str, str]]


def make_row(
	level: int,
	name: str,
	data_type: str,
	*,
	in_out: str = "IN",
	package: str = "P",
	object_name: str = "F",
	object_id: int = 1,
	subprogram_id: int = 1,
	position: int = 1,
	**extra: object,
) -> FlatArgument:
	ua = FlatArgument(
		object_id=object_id,
		subprogram_id=subprogram_id,
		package_name=package,
		object_name=object_name,
		data_level=level,
		position=position,
		argument_name=name,
		in_out=in_out,
		data_type=data_type,
		row=position + 1,
	)
	if extra:
		ua = replace(ua, **extra)
	return ua


def make_batch(shapes: Sequence[RowShape], **common: object) -> List[FlatArgument]:
	"""Rows of one subprogram, positions assigned in order."""
	rows: List[FlatArgument] = []
	for i, shape in enumerate(shapes, start=1):
		level, name, data_type = shape[0], shape[1], shape[2]
		in_out = shape[3] if len(shape) > 3 else "IN"
		rows.append(make_row(level, name, data_type, in_out=in_out, position=i, **common))
	return rows


def _field_value(ua: FlatArgument, column: str) -> str:
	column = column.upper()
	if column == "LAST_DDL_TIME":
		return ua.last_ddl.isoformat() if ua.last_ddl is not None else ""
	attr = "position" if column == "SEQUENCE" else column.lower()
	value = getattr(ua, attr)
	if isinstance(value, int):
		return "" if value == 0 and column in ("DATA_PRECISION", "DATA_SCALE", "CHAR_LENGTH") else str(value)
	return value or ""


def csv_text(
	rows: Iterable[FlatArgument],
	*,
	delimiter: str = ",",
	columns: Sequence[str] = REQUIRED_COLUMNS,
) -> str:
	"""Render rows as an export with a header line."""
	buf = io.StringIO()
	w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
	w.writerow(columns)
	for ua in rows:
		w.writerow([_field_value(ua, c) for c in columns])
	return buf.getvalue()


__all__ = ["RowShape", "make_row", "make_batch", "csv_text"]
