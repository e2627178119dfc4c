# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Function/argument IR built from the flat catalog rows.

Pipeline placement:
  FlatArgument rows -> grouping -> tree builder (this IR) -> annotations -> proto

Guiding rules:
- An Argument is SIMPLE (a scalar leaf), RECORD (ordered, uniquely named
  fields in `record_of`) or TABLE (a single element in `table_of`).
- Only RECORD and TABLE nodes have children.
- A Function owns its argument trees; nothing is shared between functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntFlag, auto
from typing import Iterator, List, Optional, Tuple


class Flavor(Enum):
	"""Shape of an argument node."""
	SIMPLE = auto()
	RECORD = auto()
	TABLE = auto()


class Direction(IntFlag):
	NONE = 0
	IN = 1
	OUT = 2
	INOUT = IN | OUT


RECORD_TYPES = frozenset({"PL/SQL RECORD", "RECORD", "OBJECT"})
TABLE_TYPES = frozenset({"PL/SQL TABLE", "TABLE", "VARRAY", "REF CURSOR"})
CURSOR_TYPE = "REF CURSOR"


def flavor_of(data_type: str) -> Flavor:
	typ = data_type.strip().upper()
	if typ in RECORD_TYPES:
		return Flavor.RECORD
	if typ in TABLE_TYPES:
		return Flavor.TABLE
	return Flavor.SIMPLE


def direction_of(in_out: str) -> Direction:
	text = in_out.strip().upper().replace("/", " ")
	if text == "IN":
		return Direction.IN
	if text == "OUT":
		return Direction.OUT
	if text == "IN OUT":
		return Direction.INOUT
	return Direction.NONE


@dataclass
class Argument:
	name: str
	flavor: Flavor = Flavor.SIMPLE
	direction: Direction = Direction.NONE
	data_type: str = ""
	pls_type: str = ""
	# OWNER.NAME.SUBNAME@LINK of the declared type, empty for plain scalars.
	type_name: str = ""
	charset: str = ""
	precision: int = 0
	scale: int = 0
	char_length: int = 0
	record_of: List["Argument"] = field(default_factory=list)
	table_of: Optional["Argument"] = None

	@property
	def is_cursor(self) -> bool:
		return self.data_type.strip().upper() == CURSOR_TYPE

	def get_field(self, name: str) -> Optional["Argument"]:
		for child in self.record_of:
			if child.name == name:
				return child
		return None

	def children(self) -> List["Argument"]:
		if self.flavor is Flavor.TABLE:
			return [self.table_of] if self.table_of is not None else []
		return list(self.record_of)


@dataclass
class Function:
	package: str
	name: str
	args: List[Argument] = field(default_factory=list)
	returns: Optional[Argument] = None
	last_ddl: Optional[datetime] = None
	# Set by the annotation rewriter.
	alias: str = ""
	replacement: Optional[str] = None  # catalog key of the replacing function
	replacement_is_json: bool = False
	handle: List[str] = field(default_factory=list)
	max_table_size: int = 0
	# 0 for the first declaration of a name, 1.. for later overloads.
	overload: int = 0

	@property
	def real_name(self) -> str:
		"""Declared PACKAGE.NAME, ignoring any alias."""
		if not self.package:
			return self.name
		return f"{self.package}.{self.name}"

	@property
	def full_name(self) -> str:
		"""PACKAGE.NAME with the alias applied."""
		name = self.alias or self.name
		if not self.package:
			return name
		return f"{self.package}.{name}"

	@property
	def emit_name(self) -> str:
		"""full_name, with `__<n>` appended for the n-th overload."""
		if not self.overload:
			return self.full_name
		return f"{self.full_name}__{self.overload}"

	def output_args(self) -> List[Argument]:
		out = [a for a in self.args if a.direction & Direction.OUT]
		if self.returns is not None:
			out.append(self.returns)
		return out

	def input_args(self) -> List[Argument]:
		return [a for a in self.args if a.direction & Direction.IN]

	def returns_cursor(self) -> bool:
		return any(a.is_cursor for a in self.output_args())


def iter_preorder(fn: Function) -> Iterator[Tuple[int, Argument]]:
	"""Re-flatten a function into (level, argument) pairs, return value first."""
	stack: List[Tuple[int, Argument]] = []
	tops = ([fn.returns] if fn.returns is not None else []) + list(fn.args)
	for arg in reversed(tops):
		stack.append((0, arg))
	while stack:
		level, arg = stack.pop()
		yield level, arg
		for child in reversed(arg.children()):
			stack.append((level + 1, child))


__all__ = [
	"Flavor",
	"Direction",
	"Argument",
	"Function",
	"flavor_of",
	"direction_of",
	"iter_preorder",
]
