"""
oraproto.core: shared diagnostics, locations and error types used across stages.

Modules:
  - span: Span (file/line/column)
  - diagnostics: Diagnostic plus the sink protocol and its two implementations
  - errors: CompileError and the per-stage error types
"""

__all__ = [
    "span",
    "diagnostics",
    "errors",
]
