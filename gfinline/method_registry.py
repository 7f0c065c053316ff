# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-generic-function store of methods keyed by specializer list.

Registration has redefinition semantics: registering a method whose
specializer list is already present replaces that entry's body in place (its
position and ordinal are kept), so the registry never holds two methods with
the same key. There is no deletion.

GenericFunction values are immutable; every registration swaps in an updated
copy. A snapshot is therefore just a frozen view of the current name ->
GenericFunction mapping, safe to hand to resolutions running on other
threads once registration has finished.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from gfinline.params import ParamList
from gfinline.precedence import PrecedenceError, precedence_permutation
from gfinline.specializers import AnySpec, ExactValue, Specializer, TypeMatch


class RegistrationError(ValueError):
	"""Raised for method/generic declarations that violate registry invariants."""


@dataclass(frozen=True)
class Method:
	"""Registry entry: one body per specializer list (declaration order)."""

	specializers: Tuple[Specializer, ...]
	body: Callable[..., Any]
	ordinal: int  # registration position; only a stable tie-break

	@property
	def key(self) -> Tuple[Specializer, ...]:
		return self.specializers


@dataclass(frozen=True)
class GenericFunction:
	name: str
	params: ParamList
	precedence_order: Tuple[str, ...]
	methods: Tuple[Method, ...] = ()

	@property
	def arity(self) -> int:
		return self.params.arity

	def find(self, specializers: Sequence[Specializer]) -> Method | None:
		key = tuple(specializers)
		for method in self.methods:
			if method.key == key:
				return method
		return None


class _RegistryReader:
	"""Read API shared by the live registry and its snapshots."""

	_gfs: Mapping[str, GenericFunction]

	def exists(self, name: str) -> bool:
		return name in self._gfs

	def get(self, name: str) -> GenericFunction | None:
		return self._gfs.get(name)

	def lookup_all(self, name: str) -> Tuple[Method, ...]:
		"""Methods of `name` in registration order (empty when undeclared)."""
		gf = self._gfs.get(name)
		return gf.methods if gf is not None else ()

	def names(self) -> Iterator[str]:
		return iter(self._gfs)


class RegistrySnapshot(_RegistryReader):
	"""Immutable view of a registry at one point in time."""

	def __init__(self, gfs: Mapping[str, GenericFunction]) -> None:
		self._gfs = MappingProxyType(dict(gfs))


class MethodRegistry(_RegistryReader):
	"""
	Process-wide (per compilation session) method store.

	Generic functions are created by `declare` or implicitly by the first
	`register`; an implicit declaration names its parameters arg0..argN-1.
	"""

	def __init__(self) -> None:
		self._gfs: Dict[str, GenericFunction] = {}
		self._next_ordinal = 0

	def declare(
		self,
		name: str,
		params: ParamList,
		precedence_order: Optional[Sequence[str]] = None,
	) -> GenericFunction:
		"""Declare a generic function; redeclaring with the same shape is a no-op."""
		order = tuple(precedence_order) if precedence_order is not None else params.required
		try:
			precedence_permutation(params.required, order)
		except PrecedenceError as err:
			raise RegistrationError(f"generic function '{name}': {err}") from err
		existing = self._gfs.get(name)
		if existing is not None:
			if existing.params != params:
				raise RegistrationError(f"generic function '{name}' redeclared with a different parameter list")
			if existing.precedence_order != order:
				raise RegistrationError(f"generic function '{name}' redeclared with a different precedence order")
			return existing
		gf = GenericFunction(name=name, params=params, precedence_order=order)
		self._gfs[name] = gf
		return gf

	def register(
		self,
		name: str,
		specializers: Sequence[Specializer],
		body: Callable[..., Any],
		*,
		params: Optional[ParamList] = None,
		precedence_order: Optional[Sequence[str]] = None,
	) -> Method:
		"""Insert a method, or replace the body of the method with the same specializers."""
		specs = tuple(specializers)
		for spec in specs:
			if not isinstance(spec, (AnySpec, TypeMatch, ExactValue)):
				raise RegistrationError(f"method on '{name}': {spec!r} is not a specializer")
			if isinstance(spec, ExactValue) and not isinstance(spec.value, Hashable):
				raise RegistrationError(f"method on '{name}': exact value {spec.value!r} is not hashable")
		gf = self._gfs.get(name)
		if gf is None:
			if params is None:
				params = ParamList(required=tuple(f"arg{i}" for i in range(len(specs))))
			gf = self.declare(name, params, precedence_order)
		elif params is not None or precedence_order is not None:
			gf = self.declare(
				name,
				params if params is not None else gf.params,
				precedence_order if precedence_order is not None else gf.precedence_order,
			)
		if len(specs) != gf.arity:
			raise RegistrationError(
				f"method on '{name}' has {len(specs)} specializer(s); generic function takes {gf.arity} required parameter(s)"
			)
		methods = list(gf.methods)
		for idx, existing in enumerate(methods):
			if existing.key == specs:
				method = replace(existing, body=body)
				methods[idx] = method
				break
		else:
			method = Method(specializers=specs, body=body, ordinal=self._next_ordinal)
			self._next_ordinal += 1
			methods.append(method)
		self._gfs[name] = replace(gf, methods=tuple(methods))
		return method

	def snapshot(self) -> RegistrySnapshot:
		return RegistrySnapshot(self._gfs)


__all__ = [
	"RegistrationError",
	"Method",
	"GenericFunction",
	"MethodRegistry",
	"RegistrySnapshot",
]
