# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolution entry point: one call site in, Inline or Abstain out.

The host compiler supplies the generic function name and the static types of
the required arguments in precedence order. The resolver never raises for a
call site it cannot improve; it returns Abstain with the reason, and the call
is left to dynamic dispatch.

Checks run in this order:
  1. the generic function is enabled by the InlineConfig
  2. the generic function exists and the static type count matches its arity
  3. there is some information to exploit (`should_attempt`)
  4. at least one candidate survives classification
  5. no overlapping candidates are ordered by registration order alone
     (unless the config allows it)
  6. the cascade emitter accepts the candidates under the safety policy

`on_resolved` is called exactly once per Inline result, before it is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from gfinline.applicability import (
	Candidate,
	collect_candidates,
	should_attempt,
	sort_candidates,
	unordered_overlaps,
)
from gfinline.cascade import Cascade, emit_cascade, method_label
from gfinline.codegen.python_codegen import RenderedCascade, render_source
from gfinline.config import InlineConfig
from gfinline.core.diagnostics import Diagnostic
from gfinline.core.types_core import TypeId, TypeTable
from gfinline.method_registry import GenericFunction, MethodRegistry, RegistrySnapshot
from gfinline.precedence import PrecedenceResolver
from gfinline.specializers import Specializer


@dataclass(frozen=True)
class Inline:
	generic: GenericFunction
	cascade: Cascade
	candidates: Tuple[Candidate, ...]

	@property
	def unconditional(self) -> bool:
		return self.cascade.unconditional


@dataclass(frozen=True)
class Abstain:
	code: str
	reason: str
	candidates: Tuple[Candidate, ...] = ()
	diagnostic: Diagnostic = field(default_factory=lambda: Diagnostic(message="", severity="note"), compare=False)


Resolution = Union[Inline, Abstain]

Registry = Union[MethodRegistry, RegistrySnapshot]


def _abstain(code: str, reason: str, candidates: Sequence[Candidate] = ()) -> Abstain:
	diag = Diagnostic(message=f"not inlined: {reason}", code=code, phase="inline", severity="note")
	return Abstain(code=code, reason=reason, candidates=tuple(candidates), diagnostic=diag)


def resolve_call(
	registry: Registry,
	table: TypeTable,
	name: str,
	static_types: Sequence[TypeId],
	*,
	config: InlineConfig,
	checks_required: Optional[bool] = None,
	on_resolved: Optional[Callable[[], None]] = None,
	resolver: Optional[PrecedenceResolver] = None,
) -> Resolution:
	"""Resolve one call site of `name`; `static_types` are in precedence order."""
	if not config.is_enabled(name):
		return _abstain("disabled", f"inlining is not enabled for '{name}'")
	gf = registry.get(name)
	if gf is None:
		return _abstain("unknown-generic", f"no generic function named '{name}'")
	if len(static_types) != gf.arity:
		return _abstain(
			"arity",
			f"'{name}' takes {gf.arity} required argument(s), call site supplies {len(static_types)}",
		)
	if not gf.methods or not any(should_attempt(m.specializers, static_types, table) for m in gf.methods):
		return _abstain("no-information", f"neither the methods of '{name}' nor the static types carry information")
	if checks_required is None:
		checks_required = config.checks_required
	resolver = resolver or PrecedenceResolver()

	candidates = sort_candidates(collect_candidates(gf, static_types, table, resolver), table)
	if not candidates:
		return _abstain("no-candidates", f"no method of '{name}' is applicable to the static types")
	if config.abstain_on_unordered:
		unordered = unordered_overlaps(candidates, table)
		if unordered:
			a, b = unordered[0]
			return _abstain(
				"unordered",
				f"{method_label(gf, a.method, table)} and {method_label(gf, b.method, table)} overlap but have no specificity order",
				candidates,
			)
	cascade = emit_cascade(gf, candidates, checks_required=checks_required, resolver=resolver)
	if cascade is None:
		return _abstain(
			"ambiguous-top",
			f"most specific candidate {method_label(gf, candidates[0].method, table)} needs a runtime check",
			candidates,
		)
	if on_resolved is not None:
		on_resolved()
	return Inline(generic=gf, cascade=cascade, candidates=tuple(candidates))


class DispatchInliner:
	"""
	Bundles the inputs that stay fixed across call sites of one compilation:
	registry (or snapshot), type table, configuration, observation hook and
	the dynamic dispatchers used as cascade fallbacks.
	"""

	def __init__(
		self,
		registry: Registry,
		table: TypeTable,
		config: InlineConfig | None = None,
		*,
		on_resolved: Optional[Callable[[], None]] = None,
		dispatchers: Optional[Mapping[str, Callable[..., Any]]] = None,
	) -> None:
		self.registry = registry
		self.table = table
		self.config = config or InlineConfig()
		self.on_resolved = on_resolved
		self.dispatchers = dict(dispatchers or {})
		self._precedence = PrecedenceResolver()

	def with_config(self, config: InlineConfig) -> "DispatchInliner":
		out = DispatchInliner(
			self.registry,
			self.table,
			config,
			on_resolved=self.on_resolved,
			dispatchers=self.dispatchers,
		)
		out._precedence = self._precedence
		return out

	def should_attempt(self, specializers: Sequence[Specializer], static_types: Sequence[TypeId]) -> bool:
		return should_attempt(specializers, static_types, self.table)

	def resolve(self, name: str, static_types: Sequence[TypeId], *, checks_required: Optional[bool] = None) -> Resolution:
		return resolve_call(
			self.registry,
			self.table,
			name,
			static_types,
			config=self.config,
			checks_required=checks_required,
			on_resolved=self.on_resolved,
			resolver=self._precedence,
		)

	def render(self, result: Inline) -> RenderedCascade:
		return render_source(result.generic, result.cascade, self.table, dispatcher=self.dispatchers.get(result.generic.name))

	def compile(
		self,
		name: str,
		static_types: Sequence[TypeId],
		*,
		checks_required: Optional[bool] = None,
	) -> Optional[Callable[..., Any]]:
		"""Resolve and compile a call site; None means keep the dynamic call."""
		result = self.resolve(name, static_types, checks_required=checks_required)
		if isinstance(result, Abstain):
			return None
		return self.render(result).compile()


__all__ = ["Inline", "Abstain", "Resolution", "resolve_call", "DispatchInliner"]
