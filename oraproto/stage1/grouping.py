# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Split the row stream into per-subprogram batches.

A batch ends when (object_id, subprogram_id) changes. Rows of one subprogram
must arrive contiguously (the export is ordered by object_id, subprogram_id,
sequence); this is not checked.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional

from oraproto.core.diagnostics import DiagnosticSink, report
from oraproto.core.span import Span
from oraproto.reader.rows import FlatArgument

NameFilter = Callable[[str], bool]


def group_batches(
	rows: Iterable[FlatArgument],
	name_filter: Optional[NameFilter] = None,
	*,
	sink: DiagnosticSink | None = None,
) -> Iterator[List[FlatArgument]]:
	"""
	Yield contiguous runs of rows sharing a program key.

	Rows rejected by `name_filter(PACKAGE.OBJECT)` are dropped before
	grouping and never start a new batch.
	"""
	batch: List[FlatArgument] = []
	last_key: Optional[tuple[int, int]] = None
	dropped: set[str] = set()
	for ua in rows:
		if name_filter is not None and not name_filter(ua.qualified_name):
			if ua.qualified_name not in dropped:
				dropped.add(ua.qualified_name)
				report(
					sink,
					f"filtered out {ua.qualified_name}",
					phase="grouping",
					code="FILTERED",
					span=Span(line=ua.row),
				)
			continue
		key = ua.program_key
		if last_key is not None and key != last_key and batch:
			yield batch
			batch = []
		batch.append(ua)
		last_key = key
	if batch:
		yield batch


__all__ = ["NameFilter", "group_batches"]
