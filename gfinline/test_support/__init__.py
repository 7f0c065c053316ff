# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need a populated type table and registry.

Besides small builders, this module holds the reference dynamic dispatcher
inlined cascades are checked against. It selects among the methods applicable
to the actual arguments, comparing them position by position in precedence
order: an exact value beats a class, a class nearer in the argument's MRO
beats one further away, and any class beats an unspecialized position. Ties
keep registration order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple

from gfinline.core.types_core import TypeId, TypeTable
from gfinline.method_registry import GenericFunction, Method, MethodRegistry, RegistrySnapshot
from gfinline.parser import make_stub_body
from gfinline.precedence import PrecedenceResolver
from gfinline.specializers import ExactValue, Specializer, TypeMatch, matches


class NoApplicableMethodError(LookupError):
	"""Raised by the reference dispatcher when no method accepts the arguments."""


@dataclass
class World:
	"""A type table plus registry, with declared types reachable by name."""

	table: TypeTable = field(default_factory=TypeTable)
	registry: MethodRegistry = field(default_factory=MethodRegistry)
	types: Dict[str, TypeId] = field(default_factory=dict)
	classes: Dict[str, type] = field(default_factory=dict)

	def __post_init__(self) -> None:
		self.types.setdefault("Top", self.table.ensure_top())

	def declare_class(self, name: str, *supers: str) -> TypeId:
		"""Declare `name` below `supers` with a synthesized runtime class."""
		bases = tuple(self.classes[s] for s in supers) or (object,)
		runtime = type(name, bases, {"__module__": "gfinline.test_support"})
		ty = self.table.new_class(name, [self.types[s] for s in supers], runtime=runtime)
		self.types[name] = ty
		self.classes[name] = runtime
		return ty

	def instance(self, name: str) -> object:
		return self.classes[name]()

	def ty(self, name: str) -> TypeId:
		return self.types[name]

	def tm(self, name: str) -> TypeMatch:
		return TypeMatch(self.types[name])


def labelled(label: str) -> Callable[..., str]:
	return make_stub_body(label)


def shapes_world() -> World:
	"""
	Shape
	  Circle
	  Polygon
	    Rect
	      Square
	    Triangle
	"""
	world = World()
	world.declare_class("Shape")
	world.declare_class("Circle", "Shape")
	world.declare_class("Polygon", "Shape")
	world.declare_class("Rect", "Polygon")
	world.declare_class("Square", "Rect")
	world.declare_class("Triangle", "Polygon")
	return world


def _position_key(spec: Specializer, arg: object, table: TypeTable) -> Tuple[int, int]:
	if isinstance(spec, ExactValue):
		return (0, 0)
	if isinstance(spec, TypeMatch):
		runtime = table.runtime_class(spec.type_id)
		if runtime is None:
			return (1, 0)
		return (1, type(arg).__mro__.index(runtime))
	return (2, 0)


def applicable_methods(
	gf: GenericFunction,
	table: TypeTable,
	args: Sequence[object],
	resolver: PrecedenceResolver | None = None,
) -> List[Method]:
	"""Methods of `gf` accepting `args` (declaration order), most specific first."""
	resolver = resolver or PrecedenceResolver()
	required = tuple(args[: gf.arity])
	if len(required) != gf.arity:
		raise TypeError(f"'{gf.name}' takes {gf.arity} required argument(s), got {len(required)}")
	ranked: List[Tuple[Tuple[Tuple[int, int], ...], int, Method]] = []
	for method in gf.methods:
		if not all(matches(s, a, table) for s, a in zip(method.specializers, required)):
			continue
		specs = resolver.to_precedence(gf, method.specializers)
		prec_args = resolver.to_precedence(gf, required)
		key = tuple(_position_key(s, a, table) for s, a in zip(specs, prec_args))
		ranked.append((key, method.ordinal, method))
	ranked.sort(key=lambda item: (item[0], item[1]))
	return [item[2] for item in ranked]


def reference_dispatch(
	registry: MethodRegistry | RegistrySnapshot,
	table: TypeTable,
	name: str,
) -> Callable[..., Any]:
	"""
	Build a dynamic dispatcher for `name`.

	The registry is consulted on every call, so redefinitions made after the
	dispatcher was built are observed.
	"""
	resolver = PrecedenceResolver()

	def dispatch(*args: Any, **kwargs: Any) -> Any:
		gf = registry.get(name)
		if gf is None:
			raise NoApplicableMethodError(f"no generic function named '{name}'")
		found = applicable_methods(gf, table, args, resolver)
		if not found:
			raise NoApplicableMethodError(f"no applicable method of '{name}' for {args[: gf.arity]!r}")
		return found[0].body(*args, **kwargs)

	dispatch.__name__ = f"dispatch_{name}"
	return dispatch


def dispatchers_for(registry: MethodRegistry | RegistrySnapshot, table: TypeTable) -> Mapping[str, Callable[..., Any]]:
	return {name: reference_dispatch(registry, table, name) for name in registry.names()}


__all__ = [
	"NoApplicableMethodError",
	"World",
	"labelled",
	"shapes_world",
	"applicable_methods",
	"reference_dispatch",
	"dispatchers_for",
]
