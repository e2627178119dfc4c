# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
oraproto driver: USER_ARGUMENTS export -> proto3 schema.

Orchestration:

CSV rows (reader, worker thread)
   -> per-subprogram batches (grouping, worker thread)
   -> Function IR (tree builder)
   -> annotation rewrite (Catalog)
   -> proto3 text (codegen)

`compile_catalog` is the library entry point; `main` wraps it in a CLI that
reports diagnostics on stderr, or as JSON with --json.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO

from oraproto.annotations import Annotation, apply_annotations, extract_source_annotations, read_annotations
from oraproto.codegen import EmitConfig, emit_schema
from oraproto.core.diagnostics import CollectingSink, Diagnostic, DiagnosticSink
from oraproto.core.errors import CompileError
from oraproto.pipeline import compile_stream
from oraproto.reader import ReaderConfig
from oraproto.stage1 import CompileConfig


def compile_catalog(
	stream: TextIO,
	*,
	annotations: Iterable[Annotation] = (),
	config: CompileConfig | None = None,
	reader_config: ReaderConfig | None = None,
	emit_config: EmitConfig | None = None,
	sink: DiagnosticSink | None = None,
) -> str:
	"""Compile an export read from `stream` into proto3 text."""
	functions = compile_stream(stream, config=config, reader_config=reader_config, sink=sink)
	catalog = apply_annotations(functions, annotations, sink=sink)
	return emit_schema(catalog.functions(), config=emit_config, sink=sink)


def package_filter(packages: Sequence[str]):
	wanted = {p.lower() for p in packages}

	def accept(qualified_name: str) -> bool:
		pkg, _, _ = qualified_name.rpartition(".")
		return pkg.lower() in wanted

	return accept


def write_text(path: Path, content: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(content, encoding="utf-8")


def _load_annotations(args: argparse.Namespace) -> List[Annotation]:
	out: List[Annotation] = []
	for path in args.annotations or []:
		out.extend(read_annotations(path))
	for path in args.package_source or []:
		out.extend(extract_source_annotations(path.read_text(encoding="utf-8"), file=str(path)))
	return out


def _emit_diagnostics(sink: CollectingSink, *, as_json: bool, exit_code: int, verbose: bool) -> None:
	if as_json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": [d.to_dict() for d in sink.diagnostics]}))
		return
	for d in sink.diagnostics:
		if d.severity == "note" and not verbose:
			continue
		print(d.format_human(), file=sys.stderr)
	if verbose and sink.diagnostics:
		for line in sink.summary_lines():
			print(f"summary: {line}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	CLI: compile a CSV export (and optional annotations) into a .proto file.

	Exit code is 0 on success and 1 when any stage fails; skipped functions
	are warnings and do not change the exit code.
	"""
	parser = argparse.ArgumentParser(description="Compile a USER_ARGUMENTS export into a proto3 schema")
	parser.add_argument("source", help="CSV export (comma or semicolon separated); '-' reads stdin")
	parser.add_argument("-o", "--output", type=Path, help="Write the schema here instead of stdout")
	parser.add_argument(
		"-a",
		"--annotations",
		action="append",
		type=Path,
		help="Annotation file (repeatable, applied in order)",
	)
	parser.add_argument(
		"--package-source",
		action="append",
		type=Path,
		help="PL/SQL package source to scan for --oraproto: directives (repeatable)",
	)
	parser.add_argument("--proto-package", default="", help="proto package name")
	parser.add_argument("--custom-package", default=EmitConfig.custom_package, help="Go package of the custom field types")
	parser.add_argument(
		"-p",
		"--package-filter",
		action="append",
		default=[],
		help="Only compile functions of this PL/SQL package (repeatable)",
	)
	parser.add_argument("--skip-invalid", action="store_true", help="Skip functions with an invalid argument hierarchy")
	parser.add_argument("--json", action="store_true", help="Print diagnostics as JSON on stdout")
	parser.add_argument("-v", "--verbose", action="store_true", help="Also print notes")
	args = parser.parse_args(argv)

	sink = CollectingSink()
	config = CompileConfig(
		on_error="skip" if args.skip_invalid else "abort",
		name_filter=package_filter(args.package_filter) if args.package_filter else None,
	)
	emit_config = EmitConfig(package=args.proto_package, custom_package=args.custom_package)
	file_label = "<stdin>" if args.source == "-" else args.source
	reader_config = ReaderConfig(file_name=file_label)

	exit_code = 0
	schema: Optional[str] = None
	try:
		annotations = _load_annotations(args)
		if args.source == "-":
			schema = compile_catalog(
				sys.stdin,
				annotations=annotations,
				config=config,
				reader_config=reader_config,
				emit_config=emit_config,
				sink=sink,
			)
		else:
			with open(args.source, "r", encoding="utf-8", newline="") as fh:
				schema = compile_catalog(
					fh,
					annotations=annotations,
					config=config,
					reader_config=reader_config,
					emit_config=emit_config,
					sink=sink,
				)
	except CompileError as err:
		sink.report(err.to_diagnostic())
		exit_code = 1
	except OSError as err:
		sink.report(Diagnostic(message=str(err), code="IO_ERROR", phase="driver"))
		exit_code = 1

	if schema is not None:
		if args.output is not None:
			write_text(args.output, schema)
		elif not args.json:
			sys.stdout.write(schema)
	_emit_diagnostics(sink, as_json=args.json, exit_code=exit_code, verbose=args.verbose)
	return exit_code


__all__ = ["compile_catalog", "package_filter", "main"]
