# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolved type name -> proto3 field type.

Names arrive from `stage1.type_resolve`; pointer (`*`) and collection (`[]`)
prefixes are stripped before lookup. Unknown names pass through unchanged
and are assumed to be message names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

GOGO_IMPORT = "github.com/gogo/protobuf/gogoproto/gogo.proto"
DEFAULT_CUSTOM_PACKAGE = "github.com/oraproto/custom"


@dataclass(frozen=True)
class ProtoOptions:
	"""Field options; rendered as `[(gogoproto.nullable)=false, ...]`."""

	nullable: bool = True
	customtype: str = ""

	def render(self) -> str:
		opts: list[str] = []
		if not self.nullable:
			opts.append("(gogoproto.nullable)=false")
		if self.customtype:
			opts.append(f'(gogoproto.customtype)="{self.customtype}"')
		if not opts:
			return ""
		return "[" + ", ".join(opts) + "]"


NO_OPTIONS = ProtoOptions()


def strip_type_prefixes(name: str) -> Tuple[str, bool]:
	"""Drop `*` and `[]` prefixes; report whether a collection prefix was seen."""
	repeated = False
	while True:
		if name.startswith("*"):
			name = name[1:]
		elif name.startswith("[]"):
			name = name[2:]
			repeated = True
		else:
			return name, repeated


def proto_type(name: str, *, custom_package: str = DEFAULT_CUSTOM_PACKAGE) -> Tuple[str, ProtoOptions]:
	trimmed, _ = strip_type_prefixes(name)
	trimmed = trimmed.lower()
	if trimmed in ("time", "string"):
		return "string", NO_OPTIONS
	if trimmed == "date":
		return "string", ProtoOptions(nullable=False, customtype=f"{custom_package}.Date")
	if trimmed == "int32":
		return "sint32", NO_OPTIONS
	if trimmed == "float64":
		return "double", NO_OPTIONS
	if trimmed == "number":
		return "string", ProtoOptions(nullable=False, customtype=f"{custom_package}.Number")
	if trimmed == "lob":
		return "bytes", ProtoOptions(nullable=False, customtype=f"{custom_package}.Lob")
	return trimmed, NO_OPTIONS


__all__ = ["GOGO_IMPORT", "DEFAULT_CUSTOM_PACKAGE", "ProtoOptions", "strip_type_prefixes", "proto_type"]
