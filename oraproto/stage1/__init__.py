# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stage 1 package: flat rows -> Function IR.

Pipeline placement:
  reader (rows) -> stage1 (grouping, tree builder) -> annotations -> codegen

Public API:
  - group_batches: contiguous per-subprogram batches
  - build_function / build_functions: level-stack tree reconstruction
  - Argument, Function, Flavor, Direction: the IR
  - resolve_type_name: target type names used by code generators
"""

from .ir_nodes import Argument, Direction, Flavor, Function, iter_preorder
from .grouping import NameFilter, group_batches
from .tree_builder import CompileConfig, build_function, build_functions
from .type_resolve import composite_type_name, resolve_type_name, scalar_type_name

__all__ = [
	"Argument",
	"Direction",
	"Flavor",
	"Function",
	"iter_preorder",
	"NameFilter",
	"group_batches",
	"CompileConfig",
	"build_function",
	"build_functions",
	"composite_type_name",
	"resolve_type_name",
	"scalar_type_name",
]
