# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for the annotation language (see `annotations.lark`).

Directives apply to the package named by the closest preceding
`package NAME` line, or to the caller supplied default package. A qualified
target (`PKG.NAME`) overrides that package for one directive.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from oraproto.core.errors import AnnotationError
from oraproto.core.span import Span

from .annotation import Annotation, AnnotationKind

_GRAMMAR_PATH = Path(__file__).with_name("annotations.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

# Rule name -> directive kind; rule names cannot contain '-'.
_KIND_BY_RULE = {
	"private": AnnotationKind.PRIVATE,
	"rename": AnnotationKind.RENAME,
	"replace": AnnotationKind.REPLACE,
	"replace_json": AnnotationKind.REPLACE_JSON,
	"handle": AnnotationKind.HANDLE,
	"max_table_size": AnnotationKind.MAX_TABLE_SIZE,
}

SOURCE_MARKER = "--oraproto:"
_MARKER_RE = re.compile(re.escape(SOURCE_MARKER) + r"(.*)$", re.IGNORECASE)
_PACKAGE_HEADER_RE = re.compile(
	r'^\s*CREATE\s+(?:OR\s+REPLACE\s+)?(?:EDITIONABLE\s+|NONEDITIONABLE\s+)?PACKAGE\s+(?:BODY\s+)?'
	r'(?:"?[\w$#]+"?\s*\.\s*)?"?([\w$#]+)"?',
	re.IGNORECASE,
)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _unquote(tok: Token) -> str:
	text = str(tok)
	if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
		return text[1:-1]
	return text


def _qname(node: Tree) -> Tuple[Optional[str], str]:
	parts = [_unquote(t) for t in node.children if isinstance(t, Token)]
	if len(parts) == 2:
		return parts[0], parts[1]
	return None, parts[0]


def _build_directive(node: Tree, package: str, file: Optional[str]) -> Annotation:
	kind = _KIND_BY_RULE[_name(node)]
	span = Span.from_loc(node.meta, file=file)
	qnames = [c for c in node.children if isinstance(c, Tree) and _name(c) == "qname"]
	pkg, name = _qname(qnames[0])
	if pkg is None:
		pkg = package
	other = ""
	if len(qnames) > 1:
		other_pkg, other = _qname(qnames[1])
		if other_pkg is not None and other_pkg.lower() != pkg.lower():
			raise AnnotationError(
				f"{kind.value}: {other_pkg}.{other} is not in package {pkg or '<none>'}",
				span=span,
			)
	size = 0
	if kind is AnnotationKind.MAX_TABLE_SIZE:
		size = int(next(t for t in node.children if isinstance(t, Token) and t.type == "INT"))
	return Annotation(kind=kind, name=name, package=pkg, other=other, size=size, span=span)


def parse_annotations(text: str, *, package: str = "", file: Optional[str] = None) -> List[Annotation]:
	"""Parse annotation text into directives, in source order."""
	try:
		tree = _PARSER.parse(text)
	except UnexpectedInput as exc:
		raise AnnotationError(
			f"cannot parse annotations: {exc.__class__.__name__}",
			span=Span.from_loc(exc, file=file),
			notes=[exc.get_context(text).rstrip()],
		) from exc

	current = package
	out: List[Annotation] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		if _name(child) == "package_decl":
			_, current = _qname(child.children[0])
			continue
		out.append(_build_directive(child, current, file))
	return out


def read_annotations(path: Path, *, package: str = "") -> List[Annotation]:
	return parse_annotations(path.read_text(encoding="utf-8"), package=package, file=str(path))


def extract_source_annotations(source: str, *, package: str = "", file: Optional[str] = None) -> List[Annotation]:
	"""
	Collect `--oraproto:` directives from PL/SQL package source.

	The package defaults to the one named by the CREATE PACKAGE header. Each
	directive keeps its source line.
	"""
	out: List[Annotation] = []
	current = package
	for lineno, line in enumerate(source.splitlines(), start=1):
		header = _PACKAGE_HEADER_RE.match(line)
		if header and not package:
			current = header.group(1)
		marker = _MARKER_RE.search(line)
		if marker is None:
			continue
		for a in parse_annotations(marker.group(1), package=current, file=file):
			out.append(
				Annotation(
					kind=a.kind,
					name=a.name,
					package=a.package,
					other=a.other,
					size=a.size,
					span=Span(file=file, line=lineno, column=marker.start(1) + 1),
				)
			)
	return out


__all__ = ["parse_annotations", "read_annotations", "extract_source_annotations", "SOURCE_MARKER"]
