# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured parameter lists for generic functions.

A generic function's parameters come in four groups: required (the only ones
dispatched on), optional with a default, a rest collector, and keyword
parameters with defaults. Code generation needs two renderings of the same
list: the formal parameters of the wrapper that replaces the call, and the
argument forms that forward everything unchanged to a method body or to the
dynamic dispatcher. Both are derived from this value, never from host syntax.

Defaults are not rendered as literals; the renderer binds them into the
generated function's namespace under the names returned by `default_names`.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class OptionalParam:
	name: str
	default: Any = None


@dataclass(frozen=True)
class KeywordParam:
	name: str
	default: Any = None


@dataclass(frozen=True)
class ParamList:
	required: Tuple[str, ...]
	optional: Tuple[OptionalParam, ...] = ()
	rest: str | None = None
	keywords: Tuple[KeywordParam, ...] = ()
	# Accept (and forward) keyword arguments not named in `keywords`.
	allow_other_keys: bool = False
	other_keys: str = field(default="other_keys", compare=False)

	def __post_init__(self) -> None:
		names = self.all_names()
		seen: set[str] = set()
		for name in names:
			if not name.isidentifier() or keyword.iskeyword(name):
				raise ValueError(f"invalid parameter name '{name}'")
			if name.startswith("_"):
				# Leading underscores are reserved for names bound by generated code.
				raise ValueError(f"parameter name '{name}' must not start with '_'")
			if name in seen:
				raise ValueError(f"duplicate parameter name '{name}'")
			seen.add(name)

	@classmethod
	def of_required(cls, *names: str) -> "ParamList":
		return cls(required=tuple(names))

	@property
	def arity(self) -> int:
		return len(self.required)

	def all_names(self) -> List[str]:
		names = list(self.required)
		names.extend(p.name for p in self.optional)
		if self.rest is not None:
			names.append(self.rest)
		names.extend(p.name for p in self.keywords)
		if self.allow_other_keys:
			names.append(self.other_keys)
		return names

	def default_names(self) -> Dict[str, Any]:
		"""Namespace entries holding the default value of each optional/keyword parameter."""
		out: Dict[str, Any] = {}
		for p in self.optional:
			out[f"_default_{p.name}"] = p.default
		for p in self.keywords:
			out[f"_default_{p.name}"] = p.default
		return out

	def formal_params(self) -> str:
		"""Formal parameter list of a wrapper accepting exactly this lambda list."""
		parts: List[str] = list(self.required)
		parts.extend(f"{p.name}=_default_{p.name}" for p in self.optional)
		if self.rest is not None:
			parts.append(f"*{self.rest}")
		elif self.keywords:
			parts.append("*")
		parts.extend(f"{p.name}=_default_{p.name}" for p in self.keywords)
		if self.allow_other_keys:
			parts.append(f"**{self.other_keys}")
		return ", ".join(parts)

	def call_args(self) -> str:
		"""Argument forms forwarding every parameter of the wrapper unchanged."""
		parts: List[str] = list(self.required)
		parts.extend(p.name for p in self.optional)
		if self.rest is not None:
			parts.append(f"*{self.rest}")
		parts.extend(f"{p.name}={p.name}" for p in self.keywords)
		if self.allow_other_keys:
			parts.append(f"**{self.other_keys}")
		return ", ".join(parts)


__all__ = ["ParamList", "OptionalParam", "KeywordParam"]
