# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
oraproto: compile Oracle USER_ARGUMENTS exports into proto3 schemas.

Packages:
  - reader: CSV export -> FlatArgument rows
  - stage1: grouping and argument tree reconstruction (Function IR)
  - annotations: directive language and IR rewriter
  - codegen: proto3 emitter

The CLI entrypoint is `oraproto.driver:main`.
"""

__all__ = []
