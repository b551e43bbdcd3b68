# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import threading

import pytest

from gmlfront.core import metadata

THREADS = 8


def test_identifier_table_loads_once_across_threads(monkeypatch: pytest.MonkeyPatch) -> None:
	loads: list[int] = []
	real_load = metadata._load

	def counting_load() -> metadata.IdentifierTable:
		loads.append(1)
		return real_load()

	monkeypatch.setattr(metadata, "_load", counting_load)
	metadata.clear_identifier_cache()
	barrier = threading.Barrier(THREADS)
	results: list[metadata.IdentifierTable | None] = [None] * THREADS

	def worker(slot: int) -> None:
		barrier.wait()
		results[slot] = metadata.identifier_table()

	threads = [threading.Thread(target=worker, args=(i,)) for i in range(THREADS)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()

	assert len(loads) == 1
	assert results[0] is not None
	assert all(table is results[0] for table in results)
	metadata.clear_identifier_cache()


def test_clearing_the_cache_reloads_the_table() -> None:
	first = metadata.identifier_table()
	assert metadata.identifier_table() is first
	metadata.clear_identifier_cache()
	second = metadata.identifier_table()
	assert second is not first
	assert dict(second.keyword_kinds) == dict(first.keyword_kinds)


def test_table_contents() -> None:
	table = metadata.identifier_table()
	assert table.keyword_kind("begin") == "LBRACE"
	assert table.keyword_kind("div") == "MUL_OP"
	assert table.keyword_kind("player") is None
	assert table.is_builtin("abs")
	assert not table.is_builtin("if")
	with pytest.raises(TypeError):
		table.identifiers["abs"] = None  # type: ignore[index]
