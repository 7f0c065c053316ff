# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-parameter specializers and the comparison primitives built on them.

A method is qualified by one specializer per required parameter:

  - AnySpec          matches every value (rank 0)
  - TypeMatch(t)     matches instances of `t` or a subtype (rank 1)
  - ExactValue(v)    matches only values eql to `v` (rank 2)

`classify` answers, for one parameter position, whether a specializer is
statically known to match, known not to match, or undecided given the static
type of the argument. Only TypeMatch can ever be proven inapplicable: equality
with a value cannot be disproved from a type alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from gfinline.core.types_core import TypeId, TypeTable, values_eql


class Applicability(str, Enum):
	APPLICABLE = "applicable"
	INAPPLICABLE = "inapplicable"
	AMBIGUOUS = "ambiguous"


class Specificity(Enum):
	"""Outcome of comparing two specializers at one position."""

	MORE = "more"
	LESS = "less"
	EQUAL = "equal"
	INCOMPARABLE = "incomparable"


@dataclass(frozen=True)
class AnySpec:
	def label(self, table: TypeTable | None = None) -> str:
		return "_"


@dataclass(frozen=True)
class TypeMatch:
	type_id: TypeId

	def label(self, table: TypeTable | None = None) -> str:
		return table.name(self.type_id) if table is not None else f"type#{self.type_id}"


@dataclass(frozen=True)
class ExactValue:
	value: Any

	def __eq__(self, other: object) -> bool:
		# Registry keys compare specializers; 1 and True must stay distinct.
		return isinstance(other, ExactValue) and values_eql(self.value, other.value)

	def __hash__(self) -> int:
		return hash((ExactValue, type(self.value), self.value))

	def label(self, table: TypeTable | None = None) -> str:
		return repr(self.value)


Specializer = Union[AnySpec, TypeMatch, ExactValue]

ANY = AnySpec()


def rank(spec: Specializer) -> int:
	if isinstance(spec, ExactValue):
		return 2
	if isinstance(spec, TypeMatch):
		return 1
	return 0


def classify(spec: Specializer, static_type: TypeId, table: TypeTable) -> Applicability:
	"""Classify `spec` against the static type known for one argument."""
	if isinstance(spec, AnySpec):
		return Applicability.APPLICABLE
	if isinstance(spec, TypeMatch):
		if table.is_top(static_type):
			return Applicability.AMBIGUOUS
		if table.is_subtype(static_type, spec.type_id):
			return Applicability.APPLICABLE
		if table.is_disjoint(static_type, spec.type_id):
			return Applicability.INAPPLICABLE
		return Applicability.AMBIGUOUS
	pinned, value = table.literal_value(static_type)
	if pinned and values_eql(value, spec.value):
		return Applicability.APPLICABLE
	return Applicability.AMBIGUOUS


def compare_at(a: Specializer, b: Specializer, table: TypeTable) -> Specificity:
	"""
	Compare two specializers occupying the same parameter position.

	Higher rank wins. Two TypeMatch specializers are ordered by strict
	subtyping and are INCOMPARABLE when unrelated. Two distinct ExactValue
	specializers never match the same value, so they are INCOMPARABLE too.
	"""
	ra, rb = rank(a), rank(b)
	if ra != rb:
		return Specificity.MORE if ra > rb else Specificity.LESS
	if a == b:
		return Specificity.EQUAL
	if isinstance(a, TypeMatch) and isinstance(b, TypeMatch):
		if table.is_subtype(a.type_id, b.type_id):
			return Specificity.MORE
		if table.is_subtype(b.type_id, a.type_id):
			return Specificity.LESS
	return Specificity.INCOMPARABLE


def may_overlap(a: Specializer, b: Specializer, table: TypeTable) -> bool:
	"""True unless no single value can satisfy both specializers."""
	if isinstance(a, AnySpec) or isinstance(b, AnySpec):
		return True
	if isinstance(a, ExactValue) and isinstance(b, ExactValue):
		return values_eql(a.value, b.value)
	if isinstance(a, TypeMatch) and isinstance(b, TypeMatch):
		return not table.is_disjoint(a.type_id, b.type_id)
	value_spec, type_spec = (a, b) if isinstance(a, ExactValue) else (b, a)
	runtime = table.runtime_class(type_spec.type_id)
	if runtime is None:
		return True
	return isinstance(value_spec.value, runtime)


def matches(spec: Specializer, value: object, table: TypeTable) -> bool:
	"""Runtime test of `value` against `spec`."""
	if isinstance(spec, AnySpec):
		return True
	if isinstance(spec, ExactValue):
		return values_eql(value, spec.value)
	return table.is_instance(value, spec.type_id)


__all__ = [
	"Applicability",
	"Specificity",
	"AnySpec",
	"TypeMatch",
	"ExactValue",
	"Specializer",
	"ANY",
	"rank",
	"classify",
	"compare_at",
	"may_overlap",
	"matches",
]
