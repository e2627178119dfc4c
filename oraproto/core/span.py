# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source location used by diagnostics and errors.

For catalog exports a location is a file plus a 1-based record number (the
header is record 1). Annotation files also carry a column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source location (best-effort file/line/column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser token/meta object.

		If `loc` is already a Span it is returned unchanged; otherwise the
		common `line`/`column` attributes are picked up when present.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file or getattr(loc, "file", None),
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
		)

	def render(self) -> str:
		line = "?" if self.line is None else str(self.line)
		column = "?" if self.column is None else str(self.column)
		return f"{self.file or '<input>'}:{line}:{column}"


__all__ = ["Span"]
