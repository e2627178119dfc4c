# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Streaming reader for USER_ARGUMENTS exports.

The export is expected to come from

    SELECT object_id, subprogram_id, package_name, sequence, object_name,
           data_level, argument_name, in_out,
           data_type, data_precision, data_scale, character_set_name,
           pls_type, char_length, type_owner, type_name, type_subname, type_link
      FROM user_arguments
     ORDER BY object_id, subprogram_id, sequence;

with an optional LAST_DDL_TIME column. Rows are produced lazily; nothing is
buffered beyond the current record.
"""

from __future__ import annotations

import csv
import io
import itertools
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, List, Optional, TextIO

from oraproto.core.diagnostics import DiagnosticSink, report
from oraproto.core.errors import ParseError
from oraproto.core.span import Span

from .rows import FlatArgument

REQUIRED_COLUMNS: tuple[str, ...] = (
	"OBJECT_ID",
	"SUBPROGRAM_ID",
	"PACKAGE_NAME",
	"OBJECT_NAME",
	"DATA_LEVEL",
	"SEQUENCE",
	"ARGUMENT_NAME",
	"IN_OUT",
	"DATA_TYPE",
	"DATA_PRECISION",
	"DATA_SCALE",
	"CHARACTER_SET_NAME",
	"PLS_TYPE",
	"CHAR_LENGTH",
	"TYPE_LINK",
	"TYPE_OWNER",
	"TYPE_NAME",
	"TYPE_SUBNAME",
)
OPTIONAL_COLUMNS: tuple[str, ...] = ("LAST_DDL_TIME",)
# Older exports name the sequence column POSITION.
COLUMN_ALIASES: Dict[str, str] = {"POSITION": "SEQUENCE"}

UNSET = -1
UINT_LIMIT = 1 << 32
BYTE_LIMIT = 256


@dataclass(frozen=True)
class ReaderConfig:
	peek_size: int = 100
	file_name: Optional[str] = None


def detect_delimiter(prefix: str) -> str:
	return ";" if ";" in prefix else ","


def map_columns(header: List[str]) -> Dict[str, int]:
	"""
	Resolve column name -> index, case-insensitively; first occurrence wins.

	Columns absent from the header map to UNSET.
	"""
	fields: Dict[str, int] = {name: UNSET for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}
	aliased: Dict[str, int] = {}
	for i, raw in enumerate(header):
		name = raw.strip().upper()
		if fields.get(name) == UNSET:
			fields[name] = i
		elif name in COLUMN_ALIASES and name not in aliased:
			aliased[name] = i
	for alias, idx in aliased.items():
		target = COLUMN_ALIASES[alias]
		if fields[target] == UNSET:
			fields[target] = idx
	return fields


def parse_uint(text: str, *, limit: int, column: str, span: Span) -> int:
	"""Parse a non-negative integer below `limit`; blank is zero."""
	text = text.strip()
	if text == "":
		return 0
	# int() would also take "1_0", signs and non-ASCII digits.
	if not (text.isascii() and text.isdigit()):
		raise ParseError(f"{column}: {text!r} is not an integer", span=span, column=column)
	value = int(text)
	if value >= limit:
		raise ParseError(f"{column}: {value} out of range [0, {limit})", span=span, column=column)
	return value


def parse_timestamp(text: str, *, column: str, span: Span) -> Optional[datetime]:
	text = text.strip()
	if text == "":
		return None
	try:
		return datetime.fromisoformat(text)
	except ValueError:
		raise ParseError(f"{column}: {text!r} is not an ISO 8601 timestamp", span=span, column=column) from None


class _RecordView:
	"""Name-based access into one CSV record; missing columns fail on first use."""

	def __init__(self, rec: List[str], fields: Dict[str, int], span: Span) -> None:
		self.rec = rec
		self.fields = fields
		self.span = span

	def text(self, column: str) -> str:
		idx = self.fields.get(column, UNSET)
		if idx == UNSET:
			raise ParseError(f"missing column {column}", span=self.span, column=column)
		return self.rec[idx]

	def optional_text(self, column: str) -> str:
		idx = self.fields.get(column, UNSET)
		return "" if idx == UNSET else self.rec[idx]

	def uint(self, column: str) -> int:
		return parse_uint(self.text(column), limit=UINT_LIMIT, column=column, span=self.span)

	def byte(self, column: str) -> int:
		return parse_uint(self.text(column), limit=BYTE_LIMIT, column=column, span=self.span)


def _decode_error(exc: UnicodeDecodeError, span: Span) -> ParseError:
	return ParseError(
		f"cannot decode input: {exc.reason} (byte 0x{exc.object[exc.start]:02x} in {exc.encoding})",
		span=span,
	)


def _to_flat_argument(view: _RecordView, row: int) -> FlatArgument:
	return FlatArgument(
		object_id=view.uint("OBJECT_ID"),
		subprogram_id=view.uint("SUBPROGRAM_ID"),
		package_name=view.text("PACKAGE_NAME"),
		object_name=view.text("OBJECT_NAME"),
		data_level=view.byte("DATA_LEVEL"),
		position=view.uint("SEQUENCE"),
		argument_name=view.text("ARGUMENT_NAME"),
		in_out=view.text("IN_OUT"),
		data_type=view.text("DATA_TYPE"),
		data_precision=view.byte("DATA_PRECISION"),
		data_scale=view.byte("DATA_SCALE"),
		character_set_name=view.text("CHARACTER_SET_NAME"),
		pls_type=view.text("PLS_TYPE"),
		char_length=view.uint("CHAR_LENGTH"),
		type_link=view.text("TYPE_LINK"),
		type_owner=view.text("TYPE_OWNER"),
		type_name=view.text("TYPE_NAME"),
		type_subname=view.text("TYPE_SUBNAME"),
		last_ddl=parse_timestamp(view.optional_text("LAST_DDL_TIME"), column="LAST_DDL_TIME", span=view.span),
		row=row,
	)


def read_rows(
	stream: TextIO,
	*,
	config: ReaderConfig | None = None,
	sink: DiagnosticSink | None = None,
) -> Iterator[FlatArgument]:
	"""
	Yield one FlatArgument per data record of `stream`.

	The delimiter is a semicolon if one occurs in the first `peek_size`
	characters, a comma otherwise. Any ParseError ends the sequence.
	"""
	config = config or ReaderConfig()
	try:
		head = stream.read(config.peek_size)
	except UnicodeDecodeError as exc:
		raise _decode_error(exc, Span(file=config.file_name, line=1)) from exc
	if head == "":
		raise ParseError("cannot read head: empty input", span=Span(file=config.file_name))
	delimiter = detect_delimiter(head)
	# Complete the partially peeked line so the csv module sees whole records.
	if not head.endswith("\n"):
		try:
			head += stream.readline()
		except UnicodeDecodeError as exc:
			raise _decode_error(exc, Span(file=config.file_name, line=1)) from exc
	# Split the peeked text on "\n" only; csv handles "\r\n" itself.
	lines = itertools.chain(io.StringIO(head), stream)
	reader = csv.reader(lines, delimiter=delimiter, skipinitialspace=True, strict=False)

	try:
		header = next(reader)
	except StopIteration:
		raise ParseError("cannot read head", span=Span(file=config.file_name)) from None
	except UnicodeDecodeError as exc:
		raise _decode_error(exc, Span(file=config.file_name, line=1)) from exc
	except csv.Error as exc:
		raise ParseError(f"cannot read head: {exc}", span=Span(file=config.file_name, line=1)) from exc
	fields = map_columns(header)
	missing = [name for name in REQUIRED_COLUMNS if fields[name] == UNSET]
	report(
		sink,
		"field order: " + ", ".join(f"{k}={v}" for k, v in fields.items()),
		phase="reader",
		code="FIELD_ORDER",
		span=Span(file=config.file_name, line=1),
		notes=[f"missing={','.join(missing)}"] if missing else None,
	)

	width = len(header)
	row = 1
	while True:
		try:
			rec = next(reader)
		except StopIteration:
			return
		except csv.Error as exc:
			raise ParseError(str(exc), span=Span(file=config.file_name, line=row + 1)) from exc
		except UnicodeDecodeError as exc:
			raise _decode_error(exc, Span(file=config.file_name, line=row + 1)) from exc
		row += 1
		span = Span(file=config.file_name, line=row)
		if not rec:
			continue
		if len(rec) != width:
			raise ParseError(f"record has {len(rec)} fields, header has {width}", span=span)
		yield _to_flat_argument(_RecordView(rec, fields, span), row)


__all__ = [
	"REQUIRED_COLUMNS",
	"OPTIONAL_COLUMNS",
	"ReaderConfig",
	"detect_delimiter",
	"map_columns",
	"parse_uint",
	"read_rows",
]
