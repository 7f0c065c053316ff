# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host type model consumed by the resolver.

TypeIds are opaque ints indexing into a TypeTable. The resolver only asks the
table three questions: is `a` a subtype of `b`, are `a` and `b` provably
disjoint, and does a type pin a single literal value. Everything else (how the
types came to be, which Python classes back them) stays in this module.

Disjointness is decided closed-world by default: two unrelated classes are
disjoint only when no type registered in the same table sits below both of
them. An open-world table also assumes unregistered subclasses may exist, so
unrelated classes stay disjoint only when Python refuses to derive a class from
both (layout or metaclass conflicts, final classes).
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Iterable, Optional, Tuple


TypeId = int  # opaque handle into the TypeTable


class TypeKind(Enum):
	"""Kinds of static types."""

	TOP = auto()
	CLASS = auto()
	LITERAL = auto()


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	supertypes: Tuple[TypeId, ...] = ()
	runtime: Optional[type] = None  # Python class backing a CLASS type
	value: Any = None  # only meaningful for TypeKind.LITERAL


def values_eql(a: object, b: object) -> bool:
	"""Identity-flavoured equality used for literal values (1 is not True, nan is nan)."""
	return type(a) is type(b) and (a is b or a == b)


def _no_common_subclass(ra: type | None, rb: type | None) -> bool:
	if ra is None or rb is None:
		return False
	try:
		type("_Common", (ra, rb), {})
	except TypeError:
		return True
	return False


class TypeTable:
	"""
	Owns TypeIds for Top, named classes and singleton literal types.

	Classes form a partial order through their declared supertypes; literal
	types sit directly below their base class.
	"""

	def __init__(self, open_world: bool = False) -> None:
		self.open_world = open_world
		self._defs: Dict[TypeId, TypeDef] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"
		self._by_name: Dict[str, TypeId] = {}
		self._by_runtime: Dict[type, TypeId] = {}
		self._literal_cache: Dict[Tuple[type, Any, TypeId], TypeId] = {}
		self._top_type: TypeId | None = None

	def ensure_top(self) -> TypeId:
		"""Return the canonical Top ("no information") TypeId, creating it once."""
		if self._top_type is None:
			self._top_type = self._add(TypeDef(kind=TypeKind.TOP, name="Top"))
		return self._top_type

	def new_class(self, name: str, supertypes: Iterable[TypeId] = (), runtime: type | None = None) -> TypeId:
		"""Register a named class below `supertypes` (directly below Top if empty)."""
		if name in self._by_name:
			raise ValueError(f"type '{name}' is already defined")
		supers = tuple(supertypes)
		for sup in supers:
			if self.get(sup).kind is TypeKind.LITERAL:
				raise ValueError(f"type '{name}' cannot derive from literal type {self.name(sup)}")
		ty = self._add(TypeDef(kind=TypeKind.CLASS, name=name, supertypes=supers, runtime=runtime))
		self._by_name[name] = ty
		if runtime is not None:
			self._by_runtime.setdefault(runtime, ty)
		return ty

	def ensure_class(self, py_cls: type) -> TypeId:
		"""
		Return the TypeId mirroring a Python class, registering it (and its
		bases) on first use. `object` maps to Top.
		"""
		if py_cls is object:
			return self.ensure_top()
		existing = self._by_runtime.get(py_cls)
		if existing is not None:
			return existing
		supers = tuple(self.ensure_class(base) for base in py_cls.__bases__ if base is not object)
		name = py_cls.__name__
		if name in self._by_name:
			name = f"{py_cls.__module__}.{py_cls.__qualname__}"
		return self.new_class(name, supers, runtime=py_cls)

	def new_literal(self, value: object, base: TypeId | None = None) -> TypeId:
		"""Register (or reuse) the singleton type whose only inhabitant is `value`."""
		if base is None:
			base = self.ensure_class(type(value))
		key = (type(value), value, base) if isinstance(value, Hashable) else None
		if key is not None and key in self._literal_cache:
			return self._literal_cache[key]
		ty = self._add(TypeDef(kind=TypeKind.LITERAL, name=repr(value), supertypes=(base,), value=value))
		if key is not None:
			self._literal_cache[key] = ty
		return ty

	def lookup(self, name: str) -> TypeId | None:
		"""Find a class by name (Top is spelled "Top")."""
		if name == "Top":
			return self.ensure_top()
		return self._by_name.get(name)

	def get(self, ty: TypeId) -> TypeDef:
		"""Fetch the TypeDef for a given TypeId."""
		return self._defs[ty]

	def name(self, ty: TypeId) -> str:
		return self._defs[ty].name

	def is_top(self, ty: TypeId) -> bool:
		return self._defs[ty].kind is TypeKind.TOP

	def literal_value(self, ty: TypeId) -> Tuple[bool, Any]:
		"""Return (True, value) when `ty` pins a single value, else (False, None)."""
		td = self._defs[ty]
		if td.kind is TypeKind.LITERAL:
			return True, td.value
		return False, None

	def ancestors(self, ty: TypeId) -> set[TypeId]:
		"""All registered supertypes of `ty`, including `ty` itself (Top excluded)."""
		seen: set[TypeId] = set()
		stack = [ty]
		while stack:
			cur = stack.pop()
			if cur in seen or self.is_top(cur):
				continue
			seen.add(cur)
			stack.extend(self._defs[cur].supertypes)
		return seen

	def is_subtype(self, a: TypeId, b: TypeId) -> bool:
		"""Reflexive-transitive subtype test; everything is a subtype of Top."""
		if a == b or self.is_top(b):
			return True
		if self.is_top(a):
			return False
		da, db = self._defs[a], self._defs[b]
		if da.kind is TypeKind.LITERAL and db.kind is TypeKind.LITERAL:
			return values_eql(da.value, db.value) and self.is_subtype(da.supertypes[0], db.supertypes[0])
		if db.kind is TypeKind.LITERAL:
			return False
		return b in self.ancestors(a)

	def is_disjoint(self, a: TypeId, b: TypeId) -> bool:
		"""
		True when no value can inhabit both `a` and `b`.

		Top overlaps everything. Literal types are checked by value; two classes
		overlap when one is below the other or some registered type is below
		both. Open-world tables additionally require that no Python class can
		derive from both runtime classes.
		"""
		if self.is_top(a) or self.is_top(b):
			return False
		if self.is_subtype(a, b) or self.is_subtype(b, a):
			return False
		da, db = self._defs[a], self._defs[b]
		if da.kind is TypeKind.LITERAL and db.kind is TypeKind.LITERAL:
			return not values_eql(da.value, db.value)
		if da.kind is TypeKind.LITERAL:
			return self._literal_outside(da, b)
		if db.kind is TypeKind.LITERAL:
			return self._literal_outside(db, a)
		for ty, td in self._defs.items():
			if td.kind is TypeKind.CLASS and self.is_subtype(ty, a) and self.is_subtype(ty, b):
				return False
		if self.open_world:
			return _no_common_subclass(da.runtime, db.runtime)
		return True

	def _literal_outside(self, lit: TypeDef, cls: TypeId) -> bool:
		base = lit.supertypes[0]
		if self.is_subtype(base, cls):
			return False
		runtime = self._defs[cls].runtime
		if runtime is not None:
			return not isinstance(lit.value, runtime)
		# Without a runtime class the value may still land in a subclass of its base.
		return not self.is_subtype(cls, base)

	def runtime_class(self, ty: TypeId) -> type | None:
		return self._defs[ty].runtime

	def is_instance(self, value: object, ty: TypeId) -> bool:
		"""Runtime membership test used by guards."""
		td = self._defs[ty]
		if td.kind is TypeKind.TOP:
			return True
		if td.kind is TypeKind.LITERAL:
			return values_eql(value, td.value)
		if td.runtime is None:
			raise ValueError(f"type '{td.name}' has no runtime class to test against")
		return isinstance(value, td.runtime)

	def _add(self, td: TypeDef) -> TypeId:
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = td
		return ty_id


__all__ = ["TypeId", "TypeKind", "TypeDef", "TypeTable", "values_eql"]
