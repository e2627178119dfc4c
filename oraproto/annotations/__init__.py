# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Annotation package: directive model, parser and IR rewriter.

Public API:
  - Annotation / AnnotationKind: one directive and its closed set of kinds
  - parse_annotations / read_annotations / extract_source_annotations
  - apply_annotations -> Catalog
"""

from .annotation import Annotation, AnnotationKind
from .parser import extract_source_annotations, parse_annotations, read_annotations
from .rewrite import AnnotationRewriter, Catalog, apply_annotations, catalog_key

__all__ = [
	"Annotation",
	"AnnotationKind",
	"extract_source_annotations",
	"parse_annotations",
	"read_annotations",
	"AnnotationRewriter",
	"Catalog",
	"apply_annotations",
	"catalog_key",
]
