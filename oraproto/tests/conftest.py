# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from oraproto.core.diagnostics import CollectingSink


@pytest.fixture
def sink() -> CollectingSink:
	return CollectingSink()
