# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from oraproto.core.errors import AnnotationError
from oraproto.core.span import Span


class AnnotationKind(str, Enum):
	PRIVATE = "private"
	RENAME = "rename"
	REPLACE = "replace"
	REPLACE_JSON = "replace_json"
	HANDLE = "handle"
	MAX_TABLE_SIZE = "max-table-size"

	@classmethod
	def from_tag(cls, tag: str, *, span: Span | None = None) -> "AnnotationKind":
		try:
			return cls(tag.strip().lower())
		except ValueError:
			known = ", ".join(k.value for k in cls)
			raise AnnotationError(f"unknown annotation kind {tag!r} (expected one of: {known})", span=span) from None

	@property
	def needs_other(self) -> bool:
		return self in (AnnotationKind.RENAME, AnnotationKind.REPLACE, AnnotationKind.REPLACE_JSON)


@dataclass(frozen=True)
class Annotation:
	"""
	One rewrite directive.

	`name` is the target function (for `handle`: the exception name), `other`
	the new name (`rename`) or the replacing function (`replace*`), `size` the
	`max-table-size` value. Names are unqualified; `package` scopes them.
	"""

	kind: AnnotationKind
	name: str
	package: str = ""
	other: str = ""
	size: int = 0
	span: Span = field(default_factory=Span, compare=False)

	@classmethod
	def from_fields(
		cls,
		kind: str,
		name: str,
		*,
		package: str = "",
		other: str = "",
		size: int = 0,
		span: Span | None = None,
	) -> "Annotation":
		return cls(
			kind=AnnotationKind.from_tag(kind, span=span),
			name=name,
			package=package,
			other=other,
			size=size,
			span=span or Span(),
		)

	@property
	def full_name(self) -> str:
		if not self.package or not self.name:
			return self.name
		return f"{self.package}.{self.name}"

	@property
	def full_other(self) -> str:
		if not self.package or not self.other:
			return self.other
		return f"{self.package}.{self.other}"

	def ignore_reason(self) -> Optional[str]:
		"""Why this directive is a no-op, or None when it applies."""
		if not self.name:
			return "empty name"
		if self.kind.needs_other and not self.other:
			return f"{self.kind.value} needs a target"
		if self.kind is AnnotationKind.MAX_TABLE_SIZE and self.size <= 0:
			return f"non-positive size {self.size}"
		return None

	def __str__(self) -> str:
		if not self.name:
			return ""
		if self.kind is AnnotationKind.PRIVATE or self.kind is AnnotationKind.HANDLE:
			return f"{self.kind.value} {self.full_name}"
		if self.kind is AnnotationKind.MAX_TABLE_SIZE:
			return f"{self.kind.value} {self.full_name} = {self.size}"
		return f"{self.kind.value} {self.full_name} => {self.full_other}"


__all__ = ["AnnotationKind", "Annotation"]
