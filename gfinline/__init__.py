# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
gfinline: static multiple-dispatch resolution for generic functions.

Given the methods registered on a generic function and the static types known
at a call site, decide whether the call can be replaced by a direct call (or a
short guarded cascade of direct calls) that selects exactly the method dynamic
dispatch would select.

Entry points:
  - method_registry.MethodRegistry: declare generic functions and methods
  - method_resolver.resolve_call / DispatchInliner: resolve a call site
  - codegen.python_codegen: render a resolution as a Python callable

The CLI entrypoint is `gfinline.driver:main`.
"""

__all__ = [
	"core",
	"specializers",
	"params",
	"method_registry",
	"precedence",
	"applicability",
	"cascade",
	"config",
	"method_resolver",
]
