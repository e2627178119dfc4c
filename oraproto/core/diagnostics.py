# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostics shared by every compiler stage.

Stages never print or log on their own. They report into a sink passed in by
the caller. A `None` sink, the default everywhere, drops everything so
library use stays silent; the driver uses `CollectingSink` to render or
serialize what was reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	# Stage that reported it: reader, grouping, tree, annotations, emit, driver.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self) -> str:
		text = f"{self.span.render()}: {self.severity}: {self.message}"
		if self.code:
			text += f" [{self.code}]"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_dict(self) -> Dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


class DiagnosticSink(Protocol):
	def report(self, diag: Diagnostic) -> None:
		...


class CollectingSink:
	"""Sink that keeps diagnostics in arrival order."""

	def __init__(self) -> None:
		self.diagnostics: List[Diagnostic] = []

	def report(self, diag: Diagnostic) -> None:
		self.diagnostics.append(diag)

	def by_code(self, code: str) -> List[Diagnostic]:
		return [d for d in self.diagnostics if d.code == code]

	def summary_lines(self) -> List[str]:
		counts: Dict[tuple[str, str], int] = {}
		for d in self.diagnostics:
			key = (d.phase or "-", d.severity)
			counts[key] = counts.get(key, 0) + 1
		return [f"{phase}: {severity}={n}" for (phase, severity), n in sorted(counts.items())]


def report(
	sink: DiagnosticSink | None,
	message: str,
	*,
	phase: str,
	code: str | None = None,
	severity: str = "note",
	span: Span | None = None,
	notes: list[str] | None = None,
) -> None:
	"""Build and report a diagnostic; a `None` sink drops it."""
	if sink is None:
		return
	sink.report(
		Diagnostic(
			message=message,
			code=code,
			phase=phase,
			severity=severity,
			span=span or Span(),
			notes=list(notes or []),
		)
	)


__all__ = ["Diagnostic", "DiagnosticSink", "CollectingSink", "report"]
