# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader -> grouper -> tree builder, connected by bounded channels.

The reader and the grouper each run on a worker thread; the tree builder runs
on the caller. Both channels hold at most `capacity` items, so a slow consumer
blocks its producer instead of letting rows pile up. A stage that fails
closes its output channel with the error; the next stage re-raises it when it
reaches that point of the stream, so the caller sees the root cause. If the
caller stops early (error or abandoned iteration) the cancel event releases
producers blocked on a full channel and every thread is joined.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TextIO, TypeVar

from oraproto.core.diagnostics import DiagnosticSink
from oraproto.reader.csv_reader import ReaderConfig, read_rows
from oraproto.reader.rows import FlatArgument
from oraproto.stage1.grouping import group_batches
from oraproto.stage1.ir_nodes import Function
from oraproto.stage1.tree_builder import CompileConfig, build_functions

T = TypeVar("T")

DEFAULT_CAPACITY = 16
_POLL_SECONDS = 0.05


class Cancelled(Exception):
	"""Raised inside a producer when the consumer has gone away."""


@dataclass(frozen=True)
class _Closed:
	error: Optional[BaseException] = None


class Channel(Generic[T]):
	"""Bounded single-producer/single-consumer channel with close/error markers."""

	def __init__(self, capacity: int = DEFAULT_CAPACITY, *, cancel: threading.Event | None = None) -> None:
		self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=capacity)
		self.cancel = cancel or threading.Event()

	def _put(self, item: Any) -> None:
		while True:
			if self.cancel.is_set():
				raise Cancelled()
			try:
				self._queue.put(item, timeout=_POLL_SECONDS)
				return
			except queue.Full:
				continue

	def send(self, item: T) -> None:
		self._put(item)

	def close(self, error: BaseException | None = None) -> None:
		try:
			self._put(_Closed(error))
		except Cancelled:
			pass

	def __iter__(self) -> Iterator[T]:
		while True:
			try:
				item = self._queue.get(timeout=_POLL_SECONDS)
			except queue.Empty:
				if self.cancel.is_set():
					return
				continue
			if isinstance(item, _Closed):
				if item.error is not None:
					raise item.error
				return
			yield item


def _run_stage(produce: Callable[[], Iterable[T]], out: Channel[T]) -> None:
	try:
		for item in produce():
			out.send(item)
	except Cancelled:
		return
	except Exception as exc:
		out.close(exc)
		return
	out.close()


def iter_batches(
	stream: TextIO,
	*,
	reader_config: ReaderConfig | None = None,
	name_filter: Callable[[str], bool] | None = None,
	capacity: int = DEFAULT_CAPACITY,
	sink: DiagnosticSink | None = None,
) -> Iterator[List[FlatArgument]]:
	"""Run reader and grouper on worker threads and yield their batches."""
	cancel = threading.Event()
	rows: Channel[FlatArgument] = Channel(capacity, cancel=cancel)
	batches: Channel[List[FlatArgument]] = Channel(capacity, cancel=cancel)
	workers = [
		threading.Thread(
			target=_run_stage,
			args=(lambda: read_rows(stream, config=reader_config, sink=sink), rows),
			name="oraproto-reader",
			daemon=True,
		),
		threading.Thread(
			target=_run_stage,
			args=(lambda: group_batches(rows, name_filter, sink=sink), batches),
			name="oraproto-grouper",
			daemon=True,
		),
	]
	for t in workers:
		t.start()
	try:
		yield from batches
	finally:
		cancel.set()
		for t in workers:
			t.join()


def compile_stream(
	stream: TextIO,
	*,
	config: CompileConfig | None = None,
	reader_config: ReaderConfig | None = None,
	capacity: int = DEFAULT_CAPACITY,
	sink: DiagnosticSink | None = None,
) -> List[Function]:
	"""Parse a USER_ARGUMENTS export into functions, in arrival order."""
	config = config or CompileConfig()
	batches = iter_batches(
		stream,
		reader_config=reader_config,
		name_filter=config.name_filter,
		capacity=capacity,
		sink=sink,
	)
	try:
		return list(build_functions(batches, config=config, sink=sink))
	finally:
		batches.close()


__all__ = ["Channel", "Cancelled", "DEFAULT_CAPACITY", "iter_batches", "compile_stream"]
