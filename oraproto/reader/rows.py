# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class FlatArgument:
	"""
	One row of a USER_ARGUMENTS export: an argument, or a field of one.

	`argument_name` is empty for a function's return value. `data_level` is
	the nesting depth (0 = top level) and `position` the SEQUENCE value.
	`row` is the 1-based record number in the source (header is 1).
	"""

	object_id: int
	subprogram_id: int
	package_name: str
	object_name: str
	data_level: int
	position: int
	argument_name: str
	in_out: str
	data_type: str
	data_precision: int = 0
	data_scale: int = 0
	character_set_name: str = ""
	pls_type: str = ""
	char_length: int = 0
	type_link: str = ""
	type_owner: str = ""
	type_name: str = ""
	type_subname: str = ""
	last_ddl: Optional[datetime] = None
	row: int = 0

	@property
	def qualified_name(self) -> str:
		if not self.package_name:
			return self.object_name
		return f"{self.package_name}.{self.object_name}"

	@property
	def program_key(self) -> tuple[int, int]:
		return (self.object_id, self.subprogram_id)

	@property
	def qualified_type_name(self) -> str:
		"""OWNER.NAME.SUBNAME@LINK, empty parts kept so positions stay stable."""
		name = f"{self.type_owner}.{self.type_name}.{self.type_subname}"
		if name == "..":
			name = ""
		if self.type_link:
			return f"{name}@{self.type_link}"
		return name


__all__ = ["FlatArgument"]
