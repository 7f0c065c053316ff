# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Argument precedence order.

Specializer lists are stored in declaration order, while static types arrive
(and specificity is compared) in precedence order. A precedence order is a
permutation of the required parameter names; it is turned into an index
vector `perm` with `perm[precedence_pos] == declaration_pos`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Sequence, Tuple, TypeVar

if TYPE_CHECKING:
	from gfinline.method_registry import GenericFunction

T = TypeVar("T")


class PrecedenceError(ValueError):
	"""Raised when a declared precedence order is not a permutation of the required parameters."""


def precedence_permutation(required: Sequence[str], declared: Sequence[str] | None = None) -> Tuple[int, ...]:
	if declared is None:
		return tuple(range(len(required)))
	if len(declared) != len(required) or set(declared) != set(required) or len(set(declared)) != len(declared):
		raise PrecedenceError(
			f"precedence order ({', '.join(declared)}) is not a permutation of ({', '.join(required)})"
		)
	position = {name: idx for idx, name in enumerate(required)}
	return tuple(position[name] for name in declared)


class PrecedenceResolver:
	"""
	Per-generic-function cache of precedence permutations.

	Entries are keyed by name and revalidated against the generic function's
	current parameter/precedence declaration, so a redeclared function never
	reuses a stale permutation.
	"""

	def __init__(self) -> None:
		self._cache: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[int, ...]]] = {}

	def permutation(self, gf: "GenericFunction") -> Tuple[int, ...]:
		required = gf.params.required
		order = gf.precedence_order
		hit = self._cache.get(gf.name)
		if hit is not None and hit[0] == required and hit[1] == order:
			return hit[2]
		perm = precedence_permutation(required, order)
		self._cache[gf.name] = (required, order, perm)
		return perm

	def to_precedence(self, gf: "GenericFunction", items: Sequence[T]) -> Tuple[T, ...]:
		"""Reorder a declaration-ordered sequence into precedence order."""
		return tuple(items[idx] for idx in self.permutation(gf))

	def to_declaration(self, gf: "GenericFunction", items: Sequence[T]) -> Tuple[T, ...]:
		"""Reorder a precedence-ordered sequence back into declaration order."""
		perm = self.permutation(gf)
		out: list = [None] * len(perm)
		for prec_pos, decl_pos in enumerate(perm):
			out[decl_pos] = items[prec_pos]
		return tuple(out)


__all__ = ["PrecedenceError", "PrecedenceResolver", "precedence_permutation"]
