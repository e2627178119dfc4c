# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised by the compiler stages.

Every error carries a stable reason code plus a best-effort location so the
driver can turn it into a pinned diagnostic instead of a raw traceback.
Callers pick the policy: the reader aborts on `ParseError`, the tree builder
and emitter can skip the offending function and continue.
"""

from __future__ import annotations

from typing import Iterable

from .diagnostics import Diagnostic
from .span import Span


class CompileError(Exception):
	"""Base class for all oraproto errors."""

	reason_code = "COMPILE_ERROR"
	phase = "driver"

	def __init__(self, message: str, *, span: Span | None = None, notes: Iterable[str] = ()) -> None:
		super().__init__(message)
		self.message = message
		self.span = span or Span()
		self.notes = list(notes)

	def __str__(self) -> str:
		return self.format_human()

	def format_human(self) -> str:
		parts = [f"[{self.reason_code}] {self.message}"]
		if self.span.file or self.span.line is not None:
			parts.append(f"at={self.span.render()}")
		return " ".join(parts)

	def to_diagnostic(self, *, severity: str = "error") -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.reason_code,
			phase=self.phase,
			severity=severity,
			span=self.span,
			notes=list(self.notes),
		)


class ParseError(CompileError, ValueError):
	"""
	Malformed input text: unreadable header, missing column, bad numeric field.

	Aborts the read; there is no partial recovery.
	"""

	reason_code = "PARSE_ERROR"
	phase = "reader"

	def __init__(
		self,
		message: str,
		*,
		span: Span | None = None,
		column: str | None = None,
		notes: Iterable[str] = (),
	) -> None:
		super().__init__(message, span=span, notes=notes)
		self.column = column


class InvalidHierarchy(CompileError):
	"""The level sequence of a function's rows is not a pre-order flattening."""

	reason_code = "INVALID_HIERARCHY"
	phase = "tree"

	def __init__(
		self,
		message: str,
		*,
		function: str,
		level: int,
		row: int | None = None,
		parents: dict[int, str] | None = None,
		span: Span | None = None,
	) -> None:
		notes = [f"function={function}", f"level={level}"]
		if row is not None:
			notes.append(f"row={row}")
		if parents is not None:
			notes.append("parents=" + ", ".join(f"{lvl}:{name}" for lvl, name in sorted(parents.items())))
		super().__init__(message, span=span, notes=notes)
		self.function = function
		self.level = level
		self.row = row
		self.parents = dict(parents or {})


class MissingElementType(CompileError):
	"""A TABLE argument reached emission without an element type."""

	reason_code = "MISSING_ELEMENT_TYPE"
	phase = "emit"

	def __init__(self, message: str, *, message_name: str, argument: str) -> None:
		super().__init__(message, notes=[f"message={message_name}", f"argument={argument}"])
		self.message_name = message_name
		self.argument = argument


class AnnotationError(CompileError, ValueError):
	"""Unknown directive kind or unparsable annotation text."""

	reason_code = "ANNOTATION_ERROR"
	phase = "annotations"


__all__ = [
	"CompileError",
	"ParseError",
	"InvalidHierarchy",
	"MissingElementType",
	"AnnotationError",
]
