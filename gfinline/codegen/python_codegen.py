# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render a Cascade as a Python function.

The generated source only refers to its parameters and to names bound in a
private namespace: method bodies, runtime classes, literal values, parameter
defaults and the dynamic dispatcher. Keeping every object out of the source
text means any value can be referenced, and identical cascades render to
identical source.

Example (two guarded branches falling back to dynamic dispatch):

	def inline_area(shape):
	    if _isinstance(shape, _t2):
	        return _m0(shape)
	    elif _isinstance(shape, _t3):
	        return _m1(shape)
	    return _dispatch(shape)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from gfinline.cascade import Cascade, DynamicCall, Guard, MethodCall, TypeGuard
from gfinline.core.types_core import TypeId, TypeTable, values_eql
from gfinline.method_registry import GenericFunction, Method


@dataclass(frozen=True)
class RenderedCascade:
	func_name: str
	source: str
	namespace: Dict[str, Any] = field(compare=False)

	def compile(self) -> Callable[..., Any]:
		code = compile(self.source, f"<gfinline {self.func_name}>", "exec")
		ns = dict(self.namespace)
		exec(code, ns)
		fn = ns[self.func_name]
		fn.__gfinline_source__ = self.source
		return fn


def _func_name(generic: str) -> str:
	return "inline_" + re.sub(r"\W", "_", generic)


def _type_predicate(table: TypeTable, ty: TypeId) -> Callable[[object], bool]:
	def check(value: object) -> bool:
		return table.is_instance(value, ty)
	return check


class _Namer:
	"""Binds referenced objects to stable private names."""

	def __init__(self, gf: GenericFunction, table: TypeTable) -> None:
		self.table = table
		self.namespace: Dict[str, Any] = dict(gf.params.default_names())
		self._values: List[object] = []

	def method(self, method: Method) -> str:
		name = f"_m{method.ordinal}"
		self.namespace[name] = method.body
		return name

	def guard(self, guard: Guard) -> str:
		if isinstance(guard, TypeGuard):
			runtime = self.table.runtime_class(guard.type_id)
			if runtime is not None:
				name = f"_t{guard.type_id}"
				self.namespace[name] = runtime
				# Parameters may shadow builtins; guards only use bound names.
				self.namespace["_isinstance"] = isinstance
				return f"_isinstance({guard.arg}, {name})"
			name = f"_is_t{guard.type_id}"
			self.namespace[name] = _type_predicate(self.table, guard.type_id)
			return f"{name}({guard.arg})"
		for idx, seen in enumerate(self._values):
			if values_eql(seen, guard.value):
				break
		else:
			idx = len(self._values)
			self._values.append(guard.value)
		name = f"_v{idx}"
		self.namespace[name] = guard.value
		self.namespace["_eql"] = values_eql
		return f"_eql({guard.arg}, {name})"


def render_source(
	gf: GenericFunction,
	cascade: Cascade,
	table: TypeTable,
	*,
	dispatcher: Optional[Callable[..., Any]] = None,
	func_name: Optional[str] = None,
) -> RenderedCascade:
	"""Render `cascade` into Python source plus the namespace it executes in."""
	if cascade.generic != gf.name:
		raise ValueError(f"cascade for '{cascade.generic}' rendered against generic function '{gf.name}'")
	name = func_name or _func_name(gf.name)
	namer = _Namer(gf, table)
	call_args = gf.params.call_args()

	lines = [f"def {name}({gf.params.formal_params()}):"]
	for idx, branch in enumerate(cascade.branches):
		kw = "if" if idx == 0 else "elif"
		cond = " and ".join(namer.guard(g) for g in branch.guards)
		lines.append(f"    {kw} {cond}:")
		lines.append(f"        return {namer.method(branch.call.method)}({call_args})")
	if isinstance(cascade.final, MethodCall):
		lines.append(f"    return {namer.method(cascade.final.method)}({call_args})")
	else:
		assert isinstance(cascade.final, DynamicCall)
		if dispatcher is None:
			raise ValueError(f"cascade for '{gf.name}' falls back to dynamic dispatch but no dispatcher was given")
		namer.namespace["_dispatch"] = dispatcher
		lines.append(f"    return _dispatch({call_args})")
	lines.append("")
	return RenderedCascade(func_name=name, source="\n".join(lines), namespace=namer.namespace)


def compile_cascade(
	gf: GenericFunction,
	cascade: Cascade,
	table: TypeTable,
	*,
	dispatcher: Optional[Callable[..., Any]] = None,
) -> Callable[..., Any]:
	"""Render and compile `cascade`; the callable takes the generic function's lambda list."""
	return render_source(gf, cascade, table, dispatcher=dispatcher).compile()


__all__ = ["RenderedCascade", "render_source", "compile_cascade"]
