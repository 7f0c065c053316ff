# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candidate selection and specificity ordering for one call site.

Given a generic function and the static types of its required arguments (in
precedence order), every registered method is classified position by
position. A method with any INAPPLICABLE position can never be selected and
is dropped; the survivors become candidates, `definite` when every position
is APPLICABLE and ambiguous otherwise.

Candidates are then ordered most specific first. Two candidates are compared
left to right in precedence order: at the first position where one
specializer outranks the other (ExactValue > TypeMatch > Any, then strict
subtype among TypeMatch) that candidate wins; positions that cannot decide
are skipped, and pairs that never decide keep registration order.

That lexicographic relation is not transitive in general (skipped positions
let three candidates form a cycle). Only pairs that can match the same
argument tuple constrain the emitted cascade, so those pairs are ordered
first and the remaining comparisons only break ties.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from gfinline.core.types_core import TypeId, TypeTable
from gfinline.method_registry import GenericFunction, Method
from gfinline.precedence import PrecedenceResolver
from gfinline.specializers import (
	AnySpec,
	Applicability,
	Specializer,
	Specificity,
	classify,
	compare_at,
	may_overlap,
)


@dataclass(frozen=True)
class Candidate:
	"""A method classified against one call site; positions are in precedence order."""

	method: Method
	specializers: Tuple[Specializer, ...]
	classes: Tuple[Applicability, ...]

	@property
	def definite(self) -> bool:
		return all(c is Applicability.APPLICABLE for c in self.classes)

	@property
	def ambiguous_positions(self) -> Tuple[int, ...]:
		return tuple(pos for pos, c in enumerate(self.classes) if c is Applicability.AMBIGUOUS)

	@property
	def ordinal(self) -> int:
		return self.method.ordinal


def should_attempt(specializers: Sequence[Specializer], static_types: Sequence[TypeId], table: TypeTable) -> bool:
	"""False when neither the specializers nor the static types carry any information."""
	no_specializers = all(isinstance(s, AnySpec) for s in specializers)
	no_types = all(table.is_top(t) for t in static_types)
	return not (no_specializers and no_types)


def collect_candidates(
	gf: GenericFunction,
	static_types: Sequence[TypeId],
	table: TypeTable,
	resolver: PrecedenceResolver,
) -> List[Candidate]:
	"""Classify every method of `gf`; drop the statically impossible ones."""
	if len(static_types) != gf.arity:
		raise ValueError(f"'{gf.name}' takes {gf.arity} required argument(s), got {len(static_types)} static type(s)")
	out: List[Candidate] = []
	for method in gf.methods:
		specs = resolver.to_precedence(gf, method.specializers)
		classes = tuple(classify(spec, ty, table) for spec, ty in zip(specs, static_types))
		if Applicability.INAPPLICABLE in classes:
			continue
		out.append(Candidate(method=method, specializers=specs, classes=classes))
	return out


def is_more_specific(a: Candidate, b: Candidate, table: TypeTable) -> bool:
	for sa, sb in zip(a.specializers, b.specializers):
		cmp = compare_at(sa, sb, table)
		if cmp is Specificity.MORE:
			return True
		if cmp is Specificity.LESS:
			return False
	return False


def co_applicable(a: Candidate, b: Candidate, table: TypeTable) -> bool:
	"""True when some argument tuple could satisfy both candidates."""
	return all(may_overlap(sa, sb, table) for sa, sb in zip(a.specializers, b.specializers))


def sort_candidates(candidates: Sequence[Candidate], table: TypeTable) -> List[Candidate]:
	"""Order candidates most specific first (stable on registration order)."""
	remaining = sorted(candidates, key=lambda c: c.ordinal)
	out: List[Candidate] = []
	while remaining:
		pool = [
			c
			for c in remaining
			if not any(o is not c and co_applicable(o, c, table) and is_more_specific(o, c, table) for o in remaining)
		]
		if not pool:
			# Cycle among competing candidates; only reachable with unordered overlaps.
			pool = remaining
		unbeaten = [c for c in pool if not any(o is not c and is_more_specific(o, c, table) for o in remaining)]
		pick = (unbeaten or pool)[0]
		out.append(pick)
		remaining.remove(pick)
	return out


def unordered_overlaps(candidates: Sequence[Candidate], table: TypeTable) -> List[Tuple[Candidate, Candidate]]:
	"""
	Pairs whose relative order rests on registration order alone.

	A pair qualifies when both candidates can match one argument tuple and,
	before any position decides between them, some position holds two
	unrelated, overlapping specializers. Dynamic dispatch orders such a pair
	by the runtime class of the argument, which no static order can mirror.
	"""
	out: List[Tuple[Candidate, Candidate]] = []
	for i, a in enumerate(candidates):
		for b in candidates[i + 1:]:
			if not co_applicable(a, b, table):
				continue
			for sa, sb in zip(a.specializers, b.specializers):
				cmp = compare_at(sa, sb, table)
				if cmp in (Specificity.MORE, Specificity.LESS):
					break
				if cmp is Specificity.INCOMPARABLE:
					out.append((a, b))
					break
	return out


__all__ = [
	"Candidate",
	"should_attempt",
	"collect_candidates",
	"is_more_specific",
	"co_applicable",
	"sort_candidates",
	"unordered_overlaps",
]
