# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Function IR -> proto3 schema (textual emitter).

Each function yields an `<name>__input` and an `<name>__output` message plus
a service with one rpc. Composite arguments become their own messages, named
after the declared PL/SQL type and emitted once per run: a message's nested
types are collected in a side buffer and written right after it, so the text
reads parent first with children trailing.

A TABLE without element type cannot be emitted; `add_function` raises
MissingElementType and leaves the builder as it was, so the caller can skip
the function and go on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List

from oraproto.core.diagnostics import DiagnosticSink, report
from oraproto.core.errors import MissingElementType
from oraproto.stage1.ir_nodes import Argument, Flavor, Function
from oraproto.stage1.type_resolve import resolve_type_name

from .proto_types import DEFAULT_CUSTOM_PACKAGE, GOGO_IMPORT, proto_type, strip_type_prefixes

_NON_IDENT = re.compile(r"[^0-9a-z_]+")


@dataclass(frozen=True)
class EmitConfig:
	package: str = ""
	custom_package: str = DEFAULT_CUSTOM_PACKAGE
	gogo_import: str = GOGO_IMPORT


def flatten_name(name: str) -> str:
	"""PKG.FUNC -> pkg__func"""
	return name.lower().replace(".", "__")


def field_name(name: str) -> str:
	if not name:
		return "elem"
	# Hidden (system generated) names end with '#'.
	name = name.lower().replace("#", "__")
	return _NON_IDENT.sub("_", name)


def message_name(fn: Function, out: bool) -> str:
	return flatten_name(fn.emit_name) + ("__output" if out else "__input")


def _sub_args(arg: Argument) -> List[Argument]:
	if arg.flavor is Flavor.TABLE:
		elem = arg.table_of
		if elem is None:
			return []
		if elem.flavor is Flavor.RECORD:
			return list(elem.record_of)
		return [elem]
	return list(arg.record_of)


def _fingerprint(args: List[Argument], fallback: str) -> str:
	parts = []
	for a in args:
		parts.append(f"{a.name}:{a.flavor.name}:{resolve_type_name(a, fallback + '__' + field_name(a.name))}")
	return ";".join(parts)


def _check_elements(msg_name: str, args: List[Argument]) -> None:
	"""Raise MissingElementType for any element-less TABLE under `args`."""
	for arg in args:
		if arg.flavor is Flavor.TABLE and arg.table_of is None:
			raise MissingElementType(
				f"no element type for {msg_name}.{arg.name}",
				message_name=msg_name,
				argument=arg.name,
			)
		if arg.flavor is Flavor.SIMPLE or (arg.table_of is not None and arg.table_of.flavor is Flavor.SIMPLE):
			continue
		fallback = f"{msg_name}__{field_name(arg.name)}"
		sub_name, _ = strip_type_prefixes(resolve_type_name(arg, fallback))
		_check_elements(sub_name.lower(), _sub_args(arg))


class ProtoSchemaBuilder:
	"""Accumulates message/service blocks; one instance per emission run."""

	def __init__(self, config: EmitConfig | None = None, *, sink: DiagnosticSink | None = None) -> None:
		self.config = config or EmitConfig()
		self.sink = sink
		# Emitted composite type name -> structural fingerprint.
		self.seen: Dict[str, str] = {}
		self.blocks: List[str] = []

	def header(self) -> str:
		lines = ['syntax = "proto3";', ""]
		if self.config.package:
			lines.append(f"package {self.config.package};")
			lines.append("")
		lines.append(f'import "{self.config.gogo_import}";')
		return "\n".join(lines) + "\n"

	def add_function(self, fn: Function) -> None:
		seen = dict(self.seen)
		out: List[str] = []
		try:
			self._write_message(out, message_name(fn, False), fn.input_args())
			self._write_message(out, message_name(fn, True), fn.output_args())
		except MissingElementType:
			self.seen = seen
			raise
		name = flatten_name(fn.emit_name)
		stream = "stream " if fn.returns_cursor() else ""
		out.append(
			f"\nservice {name} {{\n"
			f"\trpc {name} ({message_name(fn, False)}) returns ({stream}{message_name(fn, True)}) {{}}\n"
			"}\n"
		)
		self.blocks.append("".join(out))

	def render(self) -> str:
		return self.header() + "".join(self.blocks)

	def _write_message(self, dst: List[str], msg_name: str, args: List[Argument]) -> None:
		for arg in args:
			if arg.flavor is Flavor.TABLE and arg.table_of is None:
				raise MissingElementType(
					f"no element type for {msg_name}.{arg.name}",
					message_name=msg_name,
					argument=arg.name,
				)

		lines = [f"\nmessage {msg_name} {{\n"]
		nested: List[str] = []
		for i, arg in enumerate(args, start=1):
			name = field_name(arg.name)
			fallback = f"{msg_name}__{name}"
			got, repeated = strip_type_prefixes(resolve_type_name(arg, fallback))
			rule = "repeated " if repeated or arg.flavor is Flavor.TABLE else ""
			typ, opts = proto_type(got, custom_package=self.config.custom_package)
			opt_s = opts.render()
			if opt_s:
				opt_s = " " + opt_s
			field_line = f"\t{rule}{typ} {name} = {i}{opt_s};\n"
			if arg.flavor is Flavor.SIMPLE or (arg.flavor is Flavor.TABLE and arg.table_of.flavor is Flavor.SIMPLE):
				lines.append(field_line)
				continue

			sub_args = _sub_args(arg)
			fingerprint = _fingerprint(sub_args, typ)
			if typ not in self.seen:
				self._write_message(nested, typ, sub_args)
				self.seen[typ] = fingerprint
				lines.append(field_line)
				continue
			# Already emitted, but this instance must still be complete.
			_check_elements(typ, sub_args)
			if self.seen[typ] != fingerprint:
				report(
					self.sink,
					f"type {typ} of {msg_name}.{name} differs from the already emitted {typ}; keeping the first",
					phase="emit",
					code="TYPE_NAME_COLLISION",
					severity="warning",
				)
			lines.append(field_line)
		lines.append("}\n")
		dst.extend(lines)
		dst.extend(nested)


def emit_schema(
	functions: Iterable[Function],
	*,
	config: EmitConfig | None = None,
	sink: DiagnosticSink | None = None,
) -> str:
	"""
	Render the proto3 schema for `functions`.

	Functions with a TABLE lacking its element type are skipped with a
	warning; everything else is emitted in iteration order.
	"""
	builder = ProtoSchemaBuilder(config, sink=sink)
	for fn in functions:
		try:
			builder.add_function(fn)
		except MissingElementType as err:
			if sink is not None:
				diag = err.to_diagnostic(severity="warning")
				diag.message = f"skip {fn.emit_name}: {err.message}"
				sink.report(diag)
			continue
	return builder.render()


__all__ = ["EmitConfig", "ProtoSchemaBuilder", "emit_schema", "flatten_name", "field_name", "message_name"]
