# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import List

import pytest

from oraproto.codegen import EmitConfig, ProtoSchemaBuilder, emit_schema, field_name, flatten_name
from oraproto.core.errors import MissingElementType
from oraproto.reader.rows import FlatArgument
from oraproto.stage1 import Function, build_function
from oraproto.test_helpers import make_batch, make_row

NUMBER_OPTS = '[(gogoproto.nullable)=false, (gogoproto.customtype)="github.com/oraproto/custom.Number"]'


def _fn(rows: List[FlatArgument]) -> Function:
	fn = build_function(rows)
	assert fn is not None
	return fn


def _record_arg(name: str, fields: List[str], *, object_name: str = "F", in_out: str = "IN") -> List[FlatArgument]:
	"""A RECORD argument of declared type OWN.PKG.REC_T with VARCHAR2 fields."""
	rows = [
		make_row(
			0,
			name,
			"PL/SQL RECORD",
			in_out=in_out,
			object_name=object_name,
			position=1,
			type_owner="OWN",
			type_name="PKG",
			type_subname="REC_T",
		)
	]
	for i, field in enumerate(fields, start=2):
		rows.append(make_row(1, field, "VARCHAR2", in_out=in_out, object_name=object_name, position=i))
	return rows


def test_simple_function_schema() -> None:
	fn = _fn(make_batch([(0, "", "NUMBER", "OUT"), (0, "A", "VARCHAR2")]))
	assert emit_schema([fn]) == (
		'syntax = "proto3";\n'
		"\n"
		'import "github.com/gogo/protobuf/gogoproto/gogo.proto";\n'
		"\n"
		"message p__f__input {\n"
		"\tstring a = 1;\n"
		"}\n"
		"\n"
		"message p__f__output {\n"
		f"\tstring ret = 1 {NUMBER_OPTS};\n"
		"}\n"
		"\n"
		"service p__f {\n"
		"\trpc p__f (p__f__input) returns (p__f__output) {}\n"
		"}\n"
	)


def test_package_line() -> None:
	text = emit_schema([], config=EmitConfig(package="db_web"))
	assert text == 'syntax = "proto3";\n\npackage db_web;\n\nimport "github.com/gogo/protobuf/gogoproto/gogo.proto";\n'


def test_inout_argument_appears_in_both_messages() -> None:
	fn = _fn(make_batch([(0, "N", "NUMBER", "IN/OUT")], data_precision=5))
	text = emit_schema([fn])
	assert "message p__f__input {\n\tsint32 n = 1;\n}\n" in text
	assert "message p__f__output {\n\tsint32 n = 1;\n}\n" in text


def test_table_of_scalar_is_repeated_field() -> None:
	fn = _fn(make_batch([(0, "T", "PL/SQL TABLE"), (1, "", "VARCHAR2")]))
	text = emit_schema([fn])
	assert "\trepeated string t = 1;\n" in text
	assert text.count("message ") == 2


def test_anonymous_table_of_record_follows_parent() -> None:
	fn = _fn(make_batch([(0, "T", "PL/SQL TABLE"), (1, "", "PL/SQL RECORD"), (2, "X", "TIMESTAMP(6)"), (2, "Y", "BINARY_DOUBLE")]))
	text = emit_schema([fn])
	assert "\trepeated p__f__input__t t = 1;\n" in text
	assert "message p__f__input__t {\n\tstring x = 1;\n\tdouble y = 2;\n}\n" in text
	assert text.index("message p__f__input {") < text.index("message p__f__input__t {")
	assert text.index("message p__f__input__t {") < text.index("message p__f__output {")


def test_shared_composite_is_emitted_once() -> None:
	f = _fn(_record_arg("R", ["A", "B"], object_name="F"))
	g = _fn(_record_arg("R", ["A", "B"], object_name="G"))
	text = emit_schema([f, g])
	assert text.count("message own__pkg__rec_t {") == 1
	assert "\town__pkg__rec_t r = 1;\n" in text
	assert "service p__g {" in text


def test_cursor_output_streams() -> None:
	fn = _fn(
		make_batch(
			[
				(0, "ID", "NUMBER", "IN"),
				(0, "C", "REF CURSOR", "OUT"),
				(1, "", "PL/SQL RECORD", "OUT"),
				(2, "NAME", "VARCHAR2", "OUT"),
			]
		)
	)
	text = emit_schema([fn])
	assert "\trpc p__f (p__f__input) returns (stream p__f__output) {}\n" in text
	assert "\trepeated p__f__output__c c = 1;\n" in text


def test_alias_names_messages_and_service() -> None:
	fn = _fn(make_batch([(0, "A", "VARCHAR2")]))
	fn.alias = "G"
	text = emit_schema([fn])
	assert "message p__g__input {" in text
	assert "service p__g {" in text


def test_table_without_element_skips_function(sink) -> None:
	broken = _fn(make_batch([(0, "C", "REF CURSOR", "OUT")], object_name="BROKEN"))
	ok = _fn(make_batch([(0, "A", "VARCHAR2")], object_name="OK", subprogram_id=2))
	text = emit_schema([broken, ok], sink=sink)
	assert "p__broken" not in text
	assert "service p__ok {" in text
	(diag,) = sink.by_code("MISSING_ELEMENT_TYPE")
	assert diag.severity == "warning"
	assert diag.message.startswith("skip P.BROKEN:")
	assert "argument=C" in diag.notes


def test_failed_function_leaves_no_seen_types() -> None:
	rows = _record_arg("R", ["A"]) + [make_row(0, "C", "REF CURSOR", in_out="OUT", position=3)]
	builder = ProtoSchemaBuilder()
	with pytest.raises(MissingElementType) as info:
		builder.add_function(_fn(rows))
	assert info.value.message_name == "p__f__output"
	assert builder.seen == {}
	assert builder.blocks == []

	builder.add_function(_fn(_record_arg("R", ["A"], object_name="G")))
	assert "message own__pkg__rec_t {" in builder.render()


def test_type_name_collision_keeps_first_and_warns(sink) -> None:
	f = _fn(_record_arg("R", ["A", "B"], object_name="F"))
	g = _fn(_record_arg("R", ["A", "C"], object_name="G"))
	text = emit_schema([f, g], sink=sink)
	assert text.count("message own__pkg__rec_t {") == 1
	assert "message own__pkg__rec_t {\n\tstring a = 1;\n\tstring b = 2;\n}\n" in text
	(diag,) = sink.by_code("TYPE_NAME_COLLISION")
	assert "p__g__input.r" in diag.message


def test_colliding_type_with_element_less_table_is_skipped(sink) -> None:
	f = _fn(_record_arg("R", ["A"], object_name="F"))
	rows = _record_arg("R", ["A"], object_name="G")
	rows.append(make_row(1, "C", "PL/SQL TABLE", object_name="G", position=3))
	g = _fn(rows)
	text = emit_schema([f, g], sink=sink)
	assert "service p__f {" in text
	assert "p__g" not in text
	(diag,) = sink.by_code("MISSING_ELEMENT_TYPE")
	assert "message=own__pkg__rec_t" in diag.notes
	assert "argument=C" in diag.notes


def _nested_record_rows(object_name: str, *, broken: bool) -> List[FlatArgument]:
	"""R: OWN.PKG.REC_T { INNER: table of OWN.PKG.IN_T { X[, N: table without element] } }"""
	rows = [
		make_row(0, "R", "PL/SQL RECORD", object_name=object_name, position=1, type_owner="OWN", type_name="PKG", type_subname="REC_T"),
		make_row(1, "INNER", "PL/SQL TABLE", object_name=object_name, position=2),
		make_row(2, "", "PL/SQL RECORD", object_name=object_name, position=3, type_owner="OWN", type_name="PKG", type_subname="IN_T"),
		make_row(3, "X", "VARCHAR2", object_name=object_name, position=4),
	]
	if broken:
		rows.append(make_row(3, "N", "PL/SQL TABLE", object_name=object_name, position=5))
	return rows


def test_seen_type_is_still_checked_below_the_top_level() -> None:
	builder = ProtoSchemaBuilder()
	builder.add_function(_fn(_nested_record_rows("F", broken=False)))
	with pytest.raises(MissingElementType) as info:
		builder.add_function(_fn(_nested_record_rows("G", broken=True)))
	assert info.value.message_name == "own__pkg__in_t"
	assert info.value.argument == "N"
	assert len(builder.blocks) == 1


def test_name_helpers() -> None:
	assert flatten_name("DB_WEB.Get_X") == "db_web__get_x"
	assert field_name("") == "elem"
	assert field_name("SYS_X#") == "sys_x__"
	assert field_name("A$B") == "a_b"
