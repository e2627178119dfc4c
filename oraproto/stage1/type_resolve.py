# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolve an Argument to its target type name.

Scalars resolve to one of a small set of neutral names (`string`, `bool`,
`int32`, `float64`, `number`, `date`, `time`, `lob`, `bytes`); composites
resolve to a message name derived from the declared type; collections get a
`[]` prefix. The proto emitter maps these names to proto types.
"""

from __future__ import annotations

import re
from typing import Dict

from .ir_nodes import Argument, Flavor

_SCALARS: Dict[str, str] = {
	"VARCHAR2": "string",
	"NVARCHAR2": "string",
	"VARCHAR": "string",
	"CHAR": "string",
	"NCHAR": "string",
	"LONG": "string",
	"ROWID": "string",
	"UROWID": "string",
	"PL/SQL BOOLEAN": "bool",
	"BOOLEAN": "bool",
	"BINARY_INTEGER": "int32",
	"PLS_INTEGER": "int32",
	"PL/SQL PLS INTEGER": "int32",
	"PL/SQL BINARY INTEGER": "int32",
	"INTEGER": "int32",
	"SMALLINT": "int32",
	"NATURAL": "int32",
	"POSITIVE": "int32",
	"SIMPLE_INTEGER": "int32",
	"BINARY_FLOAT": "float64",
	"BINARY_DOUBLE": "float64",
	"FLOAT": "float64",
	"DOUBLE PRECISION": "float64",
	"REAL": "float64",
	"NUMBER": "number",
	"DATE": "date",
	"BLOB": "lob",
	"CLOB": "lob",
	"NCLOB": "lob",
	"BFILE": "lob",
	"LONG RAW": "lob",
	"RAW": "bytes",
}

_NON_IDENT = re.compile(r"[^0-9A-Za-z_]+")


def scalar_type_name(arg: Argument) -> str:
	typ = arg.data_type.strip().upper()
	if typ.startswith("TIMESTAMP"):
		return "time"
	if typ == "NUMBER":
		# PLS_TYPE carries the declared subtype (INTEGER, PLS_INTEGER...).
		pls = _SCALARS.get(arg.pls_type.strip().upper())
		if pls == "int32":
			return pls
		if arg.scale == 0 and 0 < arg.precision <= 9:
			return "int32"
		return "number"
	if typ in _SCALARS:
		return _SCALARS[typ]
	return _NON_IDENT.sub("_", typ.lower()).strip("_")


def composite_type_name(arg: Argument, fallback: str) -> str:
	"""
	Message name of a RECORD/TABLE element.

	OWNER.NAME.SUBNAME becomes owner__name__subname; a type without a
	declared name (e.g. %ROWTYPE) uses `fallback`.
	"""
	base, _, link = arg.type_name.partition("@")
	parts = [p for p in base.split(".") if p]
	if link:
		parts.append(link)
	if not parts:
		return fallback.lower()
	return "__".join(_NON_IDENT.sub("_", p).lower() for p in parts)


def resolve_type_name(arg: Argument, fallback: str) -> str:
	"""
	Target type name for `arg`.

	`fallback` names anonymous composites; TABLE resolves through its element.
	A TABLE without element resolves to the bare collection marker `[]`.
	"""
	if arg.flavor is Flavor.TABLE:
		elem = arg.table_of
		if elem is None:
			return "[]"
		if elem.flavor is Flavor.SIMPLE:
			return "[]" + scalar_type_name(elem)
		return "[]" + composite_type_name(elem, fallback)
	if arg.flavor is Flavor.RECORD:
		return composite_type_name(arg, fallback)
	return scalar_type_name(arg)


__all__ = ["scalar_type_name", "composite_type_name", "resolve_type_name"]
