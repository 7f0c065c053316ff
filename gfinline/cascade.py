# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Guarded cascade: the code shape a resolved call site is rewritten into.

This is a small, target-independent tree. A Cascade is a sequence of guarded
branches tried in order, each ending in a direct MethodCall, followed by a
final unconditional call: either a MethodCall (when some candidate is known to
match) or a DynamicCall back into the full dispatch mechanism.

  Cascade
    Branch(guards=(TypeGuard | ValueGuard, ...), call=MethodCall)
    ...
    final: MethodCall | DynamicCall

Guards name arguments by declaration position; they only test positions the
static types could not decide. Rendering into real code lives in
`gfinline.codegen`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from gfinline.applicability import Candidate
from gfinline.core.types_core import TypeId, TypeTable
from gfinline.method_registry import GenericFunction, Method
from gfinline.precedence import PrecedenceResolver
from gfinline.specializers import ExactValue, TypeMatch


class CNode:
	"""Base class for cascade nodes."""
	pass


@dataclass(frozen=True)
class TypeGuard(CNode):
	"""arg is an instance of type_id"""
	arg: str
	arg_index: int
	type_id: TypeId


@dataclass(frozen=True)
class ValueGuard(CNode):
	"""arg is eql to value"""
	arg: str
	arg_index: int
	value: object


Guard = Union[TypeGuard, ValueGuard]


@dataclass(frozen=True)
class MethodCall(CNode):
	"""Direct call of one method body with the original arguments."""
	method: Method


@dataclass(frozen=True)
class DynamicCall(CNode):
	"""Unoptimized dispatch of the generic function with the original arguments."""
	generic: str


@dataclass(frozen=True)
class Branch(CNode):
	guards: Tuple[Guard, ...]
	call: MethodCall


@dataclass(frozen=True)
class Cascade(CNode):
	generic: str
	branches: Tuple[Branch, ...]
	final: Union[MethodCall, DynamicCall]

	@property
	def unconditional(self) -> bool:
		"""True when the call site becomes a single direct call."""
		return not self.branches and isinstance(self.final, MethodCall)

	def methods(self) -> List[Method]:
		"""Methods reachable from this cascade, in test order."""
		out = [b.call.method for b in self.branches]
		if isinstance(self.final, MethodCall):
			out.append(self.final.method)
		return out


def _guard_for(gf: GenericFunction, cand: Candidate, prec_pos: int, perm: Sequence[int]) -> Guard:
	decl_pos = perm[prec_pos]
	arg = gf.params.required[decl_pos]
	spec = cand.specializers[prec_pos]
	if isinstance(spec, TypeMatch):
		return TypeGuard(arg=arg, arg_index=decl_pos, type_id=spec.type_id)
	if isinstance(spec, ExactValue):
		return ValueGuard(arg=arg, arg_index=decl_pos, value=spec.value)
	raise AssertionError(f"Any specializer cannot be ambiguous (position {prec_pos} of {gf.name})")


def emit_cascade(
	gf: GenericFunction,
	candidates: Sequence[Candidate],
	*,
	checks_required: bool,
	resolver: PrecedenceResolver,
) -> Optional[Cascade]:
	"""
	Turn sorted candidates into a cascade, or None to abstain.

	Without checks only a definite top candidate may be inlined. With checks,
	every candidate up to the first definite one gets a branch guarded on its
	ambiguous positions; candidates after a definite one are unreachable and
	pruned. With no definite candidate the cascade ends in dynamic dispatch.
	"""
	if not candidates:
		return None
	if not checks_required:
		top = candidates[0]
		if not top.definite:
			return None
		return Cascade(generic=gf.name, branches=(), final=MethodCall(top.method))

	perm = resolver.permutation(gf)
	branches: List[Branch] = []
	for cand in candidates:
		if cand.definite:
			return Cascade(generic=gf.name, branches=tuple(branches), final=MethodCall(cand.method))
		guards = tuple(_guard_for(gf, cand, pos, perm) for pos in cand.ambiguous_positions)
		branches.append(Branch(guards=guards, call=MethodCall(cand.method)))
	return Cascade(generic=gf.name, branches=tuple(branches), final=DynamicCall(gf.name))


def method_label(gf: GenericFunction, method: Method, table: TypeTable | None = None) -> str:
	return f"{gf.name}({', '.join(s.label(table) for s in method.specializers)})"


def _guard_text(guard: Guard, table: TypeTable | None) -> str:
	if isinstance(guard, TypeGuard):
		name = table.name(guard.type_id) if table is not None else f"type#{guard.type_id}"
		return f"{guard.arg} is {name}"
	return f"{guard.arg} == {guard.value!r}"


def describe(gf: GenericFunction, cascade: Cascade, table: TypeTable | None = None) -> List[str]:
	"""Pseudo-code lines for diagnostics and the CLI."""
	args = ", ".join(gf.params.required)
	lines: List[str] = []
	for idx, branch in enumerate(cascade.branches):
		kw = "if" if idx == 0 else "elif"
		cond = " and ".join(_guard_text(g, table) for g in branch.guards)
		lines.append(f"{kw} {cond}:")
		lines.append(f"\tcall {method_label(gf, branch.call.method, table)}")
	if isinstance(cascade.final, MethodCall):
		target = f"call {method_label(gf, cascade.final.method, table)}"
	else:
		target = f"dispatch {cascade.final.generic}({args})"
	if cascade.branches:
		lines.append("else:")
		lines.append(f"\t{target}")
	else:
		lines.append(target)
	return lines


__all__ = [
	"CNode",
	"TypeGuard",
	"ValueGuard",
	"Guard",
	"MethodCall",
	"DynamicCall",
	"Branch",
	"Cascade",
	"emit_cascade",
	"method_label",
	"describe",
]
