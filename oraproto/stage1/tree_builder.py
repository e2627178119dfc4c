# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rebuild argument trees from a batch of level-annotated rows.

The DATA_LEVEL column is a pre-order flattening of each argument tree, so a
row's parent is the last composite seen one level up. Shapes seen in real
exports:
  1. SIMPLE at level 0
  2. RECORD at level 0 with fields at level 1
  3. TABLE of simple: TABLE at level 0, unnamed element at level 1
  4. TABLE of RECORD: TABLE at 0, unnamed RECORD at 1, fields at 2
The first unnamed level-0 row is the return value of a function.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Literal, Optional

from oraproto.core.diagnostics import DiagnosticSink, report
from oraproto.core.errors import InvalidHierarchy
from oraproto.core.span import Span
from oraproto.reader.rows import FlatArgument

from .grouping import NameFilter
from .ir_nodes import Argument, Flavor, Function, direction_of, flavor_of

RETURN_NAME = "ret"
HIDDEN_MARKER = "#"


@dataclass(frozen=True)
class CompileConfig:
	# "abort" re-raises InvalidHierarchy, "skip" drops the function and goes on.
	on_error: Literal["abort", "skip"] = "abort"
	name_filter: Optional[NameFilter] = None
	object_filter: Optional[NameFilter] = None


def new_argument(ua: FlatArgument) -> Argument:
	return Argument(
		name=ua.argument_name,
		flavor=flavor_of(ua.data_type),
		direction=direction_of(ua.in_out),
		data_type=ua.data_type,
		pls_type=ua.pls_type,
		type_name=ua.qualified_type_name,
		charset=ua.character_set_name,
		precision=ua.data_precision,
		scale=ua.data_scale,
		char_length=ua.char_length,
	)


def _parent_names(last_args: Dict[int, Argument]) -> Dict[int, str]:
	return {lvl: (a.name or ("<root>" if lvl < 0 else "<anon>")) for lvl, a in last_args.items()}


def build_function(
	batch: List[FlatArgument],
	*,
	object_filter: Optional[NameFilter] = None,
	sink: DiagnosticSink | None = None,
) -> Optional[Function]:
	"""
	Build one Function from the rows of a single subprogram.

	Returns None for hidden (system generated, name ending in `#`) objects and
	for objects rejected by `object_filter(OBJECT_NAME)`.
	"""
	if not batch:
		return None
	first = batch[0]
	if first.object_name.endswith(HIDDEN_MARKER):
		report(sink, f"skip hidden {first.qualified_name}", phase="tree", code="HIDDEN", span=Span(line=first.row))
		return None
	if object_filter is not None and not object_filter(first.object_name):
		report(sink, f"filtered out {first.qualified_name}", phase="tree", code="FILTERED", span=Span(line=first.row))
		return None

	fun = Function(package=first.package_name, name=first.object_name, last_ddl=first.last_ddl)
	root = Argument(name="", flavor=Flavor.RECORD)
	last_args: Dict[int, Argument] = {-1: root}
	prev_level = -1
	for ua in batch:
		level = ua.data_level
		span = Span(line=ua.row)
		if level > prev_level + 1:
			raise InvalidHierarchy(
				f"level jumps from {prev_level} to {level} in {fun.real_name}",
				function=fun.real_name,
				level=level,
				row=ua.row,
				parents=_parent_names(last_args),
				span=span,
			)
		prev_level = level
		# A row at `level` closes every open composite at that depth or deeper.
		for stale in [lvl for lvl in last_args if lvl >= level]:
			del last_args[stale]

		if level == 0 and ua.argument_name == "" and ua.data_type == "":
			# Placeholder row of a subprogram without arguments.
			continue
		arg = new_argument(ua)
		if arg.flavor is not Flavor.SIMPLE:
			last_args[level] = arg
		if level == 0 and fun.returns is None and arg.name == "":
			arg.name = RETURN_NAME
			fun.returns = arg
			continue

		parent = last_args.get(level - 1)
		if parent is None:
			raise InvalidHierarchy(
				f"no parent for {arg.name or '<anon>'} at level {level} in {fun.real_name}",
				function=fun.real_name,
				level=level,
				row=ua.row,
				parents=_parent_names(last_args),
				span=span,
			)
		if parent.flavor is Flavor.TABLE:
			parent.table_of = arg
		else:
			if arg.name and parent.get_field(arg.name) is not None:
				raise InvalidHierarchy(
					f"duplicate field {arg.name} under {parent.name or '<root>'} in {fun.real_name}",
					function=fun.real_name,
					level=level,
					row=ua.row,
					parents=_parent_names(last_args),
					span=span,
				)
			parent.record_of.append(arg)

	fun.args = list(root.record_of)
	return fun


def build_functions(
	batches: Iterable[List[FlatArgument]],
	*,
	config: CompileConfig | None = None,
	sink: DiagnosticSink | None = None,
) -> Iterator[Function]:
	"""Build functions batch by batch, applying the configured error policy."""
	config = config or CompileConfig()
	for batch in batches:
		try:
			fun = build_function(batch, object_filter=config.object_filter, sink=sink)
		except InvalidHierarchy as err:
			if config.on_error != "skip":
				raise
			if sink is not None:
				sink.report(err.to_diagnostic())
			continue
		if fun is not None:
			yield fun


__all__ = ["CompileConfig", "RETURN_NAME", "new_argument", "build_function", "build_functions"]
