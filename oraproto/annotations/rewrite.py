# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Apply annotation directives to the compiled function set.

Directives run strictly in input order and each one sees the effects of the
ones before it (`rename a => b` followed by `private b` removes the function).
A directive naming an overloaded function applies to every overload.
Incomplete directives are no-ops; they are reported as notes, never raised.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from oraproto.core.diagnostics import DiagnosticSink, report
from oraproto.stage1.ir_nodes import Function

from .annotation import Annotation, AnnotationKind

OVERLOAD_SEPARATOR = "/"


def catalog_key(name: str, overload: int = 0) -> str:
	key = name.lower()
	if overload:
		return f"{key}{OVERLOAD_SEPARATOR}{overload}"
	return key


def _split_key(key: str) -> Tuple[str, int]:
	base, _, overload = key.partition(OVERLOAD_SEPARATOR)
	return base, int(overload or 0)


class Catalog:
	"""
	Functions keyed case-insensitively by PACKAGE.NAME.

	Overloads share a name; the first declaration is keyed by the name alone,
	later ones get `/<n>` appended and `Function.overload` set to n.
	`entries` holds the functions that get their own service. Functions that
	only stand in for another one (`replace`) move to `replacements`, keyed
	the same way; `Function.replacement` holds the key of the first one.
	"""

	def __init__(self, functions: Iterable[Function] = (), *, sink: DiagnosticSink | None = None) -> None:
		self.entries: Dict[str, Function] = {}
		self.replacements: Dict[str, Function] = {}
		counts: Dict[str, int] = {}
		for f in functions:
			base = catalog_key(f.full_name)
			f.overload = counts.get(base, 0)
			counts[base] = f.overload + 1
			if f.overload:
				report(
					sink,
					f"overloaded {f.full_name}: declaration {f.overload + 1} is emitted as {f.emit_name}",
					phase="annotations",
					code="OVERLOAD",
				)
			self.entries[catalog_key(f.full_name, f.overload)] = f

	def __len__(self) -> int:
		return len(self.entries)

	def __contains__(self, name: str) -> bool:
		return bool(self.keys_of(name))

	def __iter__(self) -> Iterator[Function]:
		return iter(self.functions())

	def keys_of(self, name: str, *, table: Optional[Dict[str, Function]] = None) -> List[str]:
		"""Keys of every overload of `name`, first declaration first."""
		base = catalog_key(name)
		table = self.entries if table is None else table
		return sorted((k for k in table if _split_key(k)[0] == base), key=lambda k: _split_key(k)[1])

	def get(self, name: str) -> Optional[Function]:
		return self.entries.get(catalog_key(name))

	def overloads(self, name: str) -> List[Function]:
		return [self.entries[k] for k in self.keys_of(name)]

	def functions(self) -> List[Function]:
		"""Live functions ordered by name, overloads in declaration order."""
		return [self.entries[k] for k in sorted(self.entries, key=_split_key)]

	def resolve_replacement(self, fn: Function) -> Optional[Function]:
		if fn.replacement is None:
			return None
		return self.replacements.get(fn.replacement) or self.entries.get(fn.replacement)


class AnnotationRewriter:
	def __init__(self, catalog: Catalog, *, sink: DiagnosticSink | None = None) -> None:
		self.catalog = catalog
		self.sink = sink

	def _note(self, a: Annotation, message: str, code: str) -> None:
		report(self.sink, f"{a.kind.value}: {message}", phase="annotations", code=code, span=a.span)

	def apply(self, annotations: Iterable[Annotation]) -> Catalog:
		handlers = {
			AnnotationKind.PRIVATE: self._private,
			AnnotationKind.RENAME: self._rename,
			AnnotationKind.REPLACE: self._replace,
			AnnotationKind.REPLACE_JSON: self._replace,
			AnnotationKind.HANDLE: self._handle,
			AnnotationKind.MAX_TABLE_SIZE: self._max_table_size,
		}
		for a in annotations:
			reason = a.ignore_reason()
			if reason is not None:
				self._note(a, f"ignored ({reason})", "ANNOTATION_IGNORED")
				continue
			handlers[a.kind](a)
		return self.catalog

	def _targets(self, a: Annotation) -> List[str]:
		keys = self.catalog.keys_of(a.full_name)
		if not keys:
			self._note(a, f"{a.full_name} not found", "ANNOTATION_NO_TARGET")
		return keys

	def _private(self, a: Annotation) -> None:
		for key in self._targets(a):
			del self.catalog.entries[key]

	def _rename(self, a: Annotation) -> None:
		entries = self.catalog.entries
		keys = self._targets(a)
		if not keys:
			return
		overwritten = []
		if catalog_key(a.full_other) != catalog_key(a.full_name):
			overwritten = self.catalog.keys_of(a.full_other)
		if overwritten:
			for key in overwritten:
				del entries[key]
			report(
				self.sink,
				f"rename: {a.full_other} already exists and is replaced by {a.full_name}",
				phase="annotations",
				code="RENAME_OVERWRITES",
				severity="warning",
				span=a.span,
			)
		moved = [entries.pop(key) for key in keys]
		for fn in moved:
			fn.alias = a.other
			entries[catalog_key(fn.full_name, fn.overload)] = fn

	def _replace(self, a: Annotation) -> None:
		catalog = self.catalog
		keys = self._targets(a)
		if not keys:
			return
		other_key = catalog_key(a.full_other)
		if other_key == catalog_key(a.full_name):
			self._note(a, f"{a.full_name} cannot replace itself", "ANNOTATION_IGNORED")
			return
		for key in catalog.keys_of(a.full_other):
			catalog.replacements[key] = catalog.entries.pop(key)
		# Already standing in for another function is fine too.
		if not catalog.keys_of(a.full_other, table=catalog.replacements):
			self._note(a, f"replacement {a.full_other} not found", "ANNOTATION_NO_TARGET")
			return
		for key in keys:
			fn = catalog.entries[key]
			fn.replacement = other_key
			fn.replacement_is_json = a.kind is AnnotationKind.REPLACE_JSON

	def _handle(self, a: Annotation) -> None:
		exc = a.name.upper()
		pkg = a.package.lower()
		for fn in self.catalog.entries.values():
			if fn.package.lower() == pkg:
				fn.handle.append(exc)

	def _max_table_size(self, a: Annotation) -> None:
		for key in self._targets(a):
			fn = self.catalog.entries[key]
			if a.size >= fn.max_table_size:
				fn.max_table_size = a.size


def apply_annotations(
	functions: Iterable[Function],
	annotations: Iterable[Annotation],
	*,
	sink: DiagnosticSink | None = None,
) -> Catalog:
	"""Build a Catalog from `functions` and rewrite it with `annotations`."""
	catalog = Catalog(functions, sink=sink)
	return AnnotationRewriter(catalog, sink=sink).apply(annotations)


__all__ = ["Catalog", "AnnotationRewriter", "apply_annotations", "catalog_key"]
