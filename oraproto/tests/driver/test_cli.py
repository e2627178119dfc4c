# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import json
from pathlib import Path

from oraproto.annotations import parse_annotations
from oraproto.driver import compile_catalog, main, package_filter
from oraproto.test_helpers import csv_text, make_batch


def _export(tmp_path: Path) -> Path:
	rows = make_batch([(0, "", "NUMBER", "OUT"), (0, "A", "VARCHAR2")], package="DB_WEB", object_name="GET_X", subprogram_id=1)
	rows += make_batch([(0, "B", "DATE")], package="DB_WEB", object_name="HELPER", subprogram_id=2)
	rows += make_batch([(0, "C", "CHAR")], package="OTHER", object_name="F", object_id=2)
	path = tmp_path / "args.csv"
	path.write_text(csv_text(rows, delimiter=";"), encoding="utf-8")
	return path


def test_compile_catalog_applies_annotations() -> None:
	rows = make_batch([(0, "A", "VARCHAR2")], object_name="F", subprogram_id=1)
	rows += make_batch([(0, "B", "VARCHAR2")], object_name="G", subprogram_id=2)
	text = compile_catalog(io.StringIO(csv_text(rows)), annotations=parse_annotations("private g\nrename f => h", package="P"))
	assert "service p__h {" in text
	assert "p__g" not in text
	assert "p__f" not in text


def test_overloads_get_their_own_services() -> None:
	rows = make_batch([(0, "A", "VARCHAR2")], object_name="F", subprogram_id=1)
	rows += make_batch([(0, "A", "NUMBER"), (0, "B", "VARCHAR2")], object_name="F", subprogram_id=2)
	text = compile_catalog(io.StringIO(csv_text(rows)), annotations=[])
	assert "service p__f {" in text
	assert "service p__f__1 {" in text
	assert "message p__f__1__input {" in text
	assert "\trpc p__f__1 (p__f__1__input) returns (p__f__1__output) {}\n" in text


def test_package_filter() -> None:
	accept = package_filter(["db_web"])
	assert accept("DB_WEB.GET_X")
	assert not accept("OTHER.F")


def test_writes_schema_to_output_file(tmp_path, capsys) -> None:
	out = tmp_path / "gen" / "db.proto"
	assert main([str(_export(tmp_path)), "-o", str(out), "--proto-package", "db"]) == 0
	text = out.read_text(encoding="utf-8")
	assert "package db;" in text
	assert "service db_web__get_x {" in text
	assert "service other__f {" in text
	assert capsys.readouterr().out == ""


def test_schema_goes_to_stdout_by_default(tmp_path, capsys) -> None:
	assert main([str(_export(tmp_path)), "-p", "DB_WEB"]) == 0
	out = capsys.readouterr().out
	assert out.startswith('syntax = "proto3";')
	assert "service db_web__helper {" in out
	assert "other__f" not in out


def test_annotation_files_and_package_source(tmp_path, capsys) -> None:
	ann = tmp_path / "db_web.ann"
	ann.write_text("package DB_WEB\nrename get_x => get_y\n", encoding="utf-8")
	src = tmp_path / "db_web.pks"
	src.write_text("CREATE OR REPLACE PACKAGE db_web AS\n  --oraproto: private helper\nEND;\n", encoding="utf-8")
	assert main([str(_export(tmp_path)), "-a", str(ann), "--package-source", str(src)]) == 0
	out = capsys.readouterr().out
	assert "service db_web__get_y {" in out
	assert "helper" not in out


def test_json_diagnostics_on_failure(tmp_path, capsys) -> None:
	path = tmp_path / "bad.csv"
	path.write_text("OBJECT_ID,SUBPROGRAM_ID\nx,1\n", encoding="utf-8")
	assert main([str(path), "--json"]) == 1
	report = json.loads(capsys.readouterr().out)
	assert report["exit_code"] == 1
	(diag,) = [d for d in report["diagnostics"] if d["severity"] == "error"]
	assert diag["code"] == "PARSE_ERROR"
	assert diag["phase"] == "reader"
	assert diag["line"] == 2


def test_missing_input_file(tmp_path, capsys) -> None:
	assert main([str(tmp_path / "nope.csv")]) == 1
	err = capsys.readouterr().err
	assert "IO_ERROR" in err


def test_notes_only_with_verbose(tmp_path, capsys) -> None:
	path = _export(tmp_path)
	main([str(path)])
	assert "FIELD_ORDER" not in capsys.readouterr().err
	main([str(path), "-v"])
	assert "FIELD_ORDER" in capsys.readouterr().err


def test_verbose_ends_with_a_summary(tmp_path, capsys) -> None:
	path = _export(tmp_path)
	main([str(path)])
	assert "summary:" not in capsys.readouterr().err
	main([str(path), "-v"])
	err = capsys.readouterr().err
	assert "summary: reader: note=" in err
	assert err.rstrip().splitlines()[-1].startswith("summary: ")


def test_latin1_input_is_a_diagnostic(tmp_path, capsys) -> None:
	path = tmp_path / "latin1.csv"
	path.write_bytes(csv_text(make_batch([(0, "CAFÉ", "VARCHAR2")])).encode("latin-1"))
	assert main([str(path), "--json"]) == 1
	report = json.loads(capsys.readouterr().out)
	(diag,) = report["diagnostics"]
	assert diag["code"] == "PARSE_ERROR"
	assert "cannot decode input" in diag["message"]
	assert diag["file"] == str(path)
