# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Code generators consuming the Function IR.

Public API:
  - emit_schema: proto3 messages + services for a function set
  - ProtoSchemaBuilder / EmitConfig: incremental emission and its settings
  - proto_type: resolved type name -> proto type and field options
"""

from .proto_emitter import EmitConfig, ProtoSchemaBuilder, emit_schema, field_name, flatten_name, message_name
from .proto_types import ProtoOptions, proto_type, strip_type_prefixes

__all__ = [
	"EmitConfig",
	"ProtoSchemaBuilder",
	"emit_schema",
	"field_name",
	"flatten_name",
	"message_name",
	"ProtoOptions",
	"proto_type",
	"strip_type_prefixes",
]
