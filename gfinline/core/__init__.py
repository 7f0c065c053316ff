"""
gfinline.core: shared primitives used by every resolution phase.

Modules:
  - span: best-effort source locations for declarations
  - diagnostics: Diagnostic record shared by the loader, resolver and CLI
  - types_core: TypeId/TypeTable host type model (subtype, disjointness, literals)
"""

__all__ = [
	"span",
	"diagnostics",
	"types_core",
]
