# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from oraproto.stage1 import group_batches
from oraproto.test_helpers import make_batch, make_row


def test_one_batch_per_program_key() -> None:
	rows = (
		make_batch([(0, "A", "NUMBER"), (0, "B", "NUMBER")], object_name="F", subprogram_id=1)
		+ make_batch([(0, "C", "NUMBER")], object_name="G", subprogram_id=2)
		+ make_batch([(0, "D", "NUMBER")], object_name="H", object_id=2, subprogram_id=1)
	)
	batches = list(group_batches(rows))
	assert [[r.argument_name for r in b] for b in batches] == [["A", "B"], ["C"], ["D"]]


def test_empty_input_yields_nothing() -> None:
	assert list(group_batches([])) == []


def test_filtered_rows_do_not_split_a_batch(sink) -> None:
	rows = [
		make_row(0, "A", "NUMBER", object_name="F", position=1),
		make_row(0, "X", "NUMBER", object_name="SECRET", subprogram_id=9, position=1),
		make_row(0, "B", "NUMBER", object_name="F", position=2),
	]
	batches = list(group_batches(rows, lambda name: name != "P.SECRET", sink=sink))
	assert [[r.argument_name for r in b] for b in batches] == [["A", "B"]]
	(diag,) = sink.by_code("FILTERED")
	assert "P.SECRET" in diag.message


def test_filter_sees_qualified_name() -> None:
	seen: list[str] = []

	def accept(name: str) -> bool:
		seen.append(name)
		return True

	list(group_batches([make_row(0, "A", "NUMBER", package="PKG", object_name="FN")], accept))
	assert seen == ["PKG.FN"]


def test_row_order_is_preserved() -> None:
	rows = make_batch([(0, "R", "PL/SQL RECORD"), (1, "X", "NUMBER"), (1, "Y", "DATE"), (0, "Z", "CHAR")])
	(batch,) = list(group_batches(rows))
	assert [r.position for r in batch] == [1, 2, 3, 4]
