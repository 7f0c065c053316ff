"""
Declaration loader.

Parses the declaration language (see grammar.lark) and builds a TypeTable
plus a MethodRegistry from it. Declared types get synthesized Python classes
so cascades compiled from a loaded world can run; method bodies are stubs
that return their own label, which is enough to observe which method a
cascade selected.

User errors never raise out of `load_declarations`: grammar errors become
parser-phase diagnostics and semantic errors (unknown or duplicate types,
arity mismatches, bad precedence orders) become declare-phase diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from . import parser as _parser
from . import ast as decl_ast
from gfinline.core.diagnostics import Diagnostic, has_errors
from gfinline.core.span import Span
from gfinline.core.types_core import TypeId, TypeTable
from gfinline.method_registry import MethodRegistry, RegistrationError
from gfinline.params import KeywordParam, OptionalParam, ParamList
from gfinline.specializers import ANY, ExactValue, Specializer, TypeMatch


class DeclarationError(ValueError):
	"""User-facing error in a declaration or call-site expression."""

	def __init__(self, message: str, *, span: Span | None = None) -> None:
		super().__init__(message)
		self.span = span or Span()


@dataclass
class DeclaredWorld:
	table: TypeTable
	registry: MethodRegistry
	diagnostics: List[Diagnostic] = field(default_factory=list)
	file: Optional[str] = None

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


def make_stub_body(label: str) -> Callable[..., str]:
	"""Method body that ignores its arguments and returns `label`."""
	def body(*args: Any, **kwargs: Any) -> str:
		return label
	body.__name__ = body.__qualname__ = label
	return body


def _span(loc: decl_ast.Located | None, file: Optional[str]) -> Span:
	if loc is None:
		return Span(file=file)
	return Span(file=file, line=loc.line, column=loc.column)


def _declare_type(world: DeclaredWorld, decl: decl_ast.TypeDecl) -> None:
	table = world.table
	if table.lookup(decl.name) is not None:
		raise DeclarationError(f"type '{decl.name}' is already defined", span=_span(decl.loc, world.file))
	supers: List[TypeId] = []
	for sup_name in decl.supertypes:
		sup = table.lookup(sup_name)
		if sup is None:
			raise DeclarationError(
				f"unknown supertype '{sup_name}' of '{decl.name}' (types must be declared before use)",
				span=_span(decl.loc, world.file),
			)
		if sup in supers:
			raise DeclarationError(f"duplicate supertype '{sup_name}' of '{decl.name}'", span=_span(decl.loc, world.file))
		supers.append(sup)
	bases = tuple(table.runtime_class(s) or object for s in supers if not table.is_top(s)) or (object,)
	try:
		runtime = type(decl.name, bases, {"__module__": "gfinline.declared"})
	except TypeError as err:
		raise DeclarationError(f"cannot linearize supertypes of '{decl.name}': {err}", span=_span(decl.loc, world.file)) from err
	table.new_class(decl.name, [s for s in supers if not table.is_top(s)], runtime=runtime)


def _param_list(world: DeclaredWorld, decl: decl_ast.GenericDecl) -> ParamList:
	required: List[str] = []
	optional: List[OptionalParam] = []
	keywords: List[KeywordParam] = []
	rest: Optional[str] = None
	seen_star = False
	other_keys: Optional[str] = None
	for p in decl.params:
		span = _span(p.loc, world.file)
		if other_keys is not None:
			raise DeclarationError(f"parameter after '**{other_keys}' in '{decl.name}'", span=span)
		if p.kind == "star":
			if seen_star:
				raise DeclarationError(f"more than one '*' parameter in '{decl.name}'", span=span)
			seen_star = True
			rest = p.name
		elif p.kind == "kwstar":
			other_keys = p.name
		elif seen_star:
			# Keyword-only: a default is optional in the declaration, None otherwise.
			keywords.append(KeywordParam(name=p.name or "", default=p.default))
		elif p.kind == "default":
			optional.append(OptionalParam(name=p.name or "", default=p.default))
		else:
			if optional:
				raise DeclarationError(
					f"required parameter '{p.name}' follows an optional one in '{decl.name}'",
					span=span,
				)
			required.append(p.name or "")
	try:
		if other_keys is not None:
			return ParamList(
				required=tuple(required),
				optional=tuple(optional),
				rest=rest,
				keywords=tuple(keywords),
				allow_other_keys=True,
				other_keys=other_keys,
			)
		return ParamList(required=tuple(required), optional=tuple(optional), rest=rest, keywords=tuple(keywords))
	except ValueError as err:
		raise DeclarationError(f"generic function '{decl.name}': {err}", span=_span(decl.loc, world.file)) from err


def _specializer(world: DeclaredWorld, spec: decl_ast.SpecDecl) -> Specializer:
	if spec.kind == "any":
		return ANY
	if spec.kind == "value":
		return ExactValue(spec.value)
	ty = world.table.lookup(spec.name or "")
	if ty is None:
		raise DeclarationError(f"unknown type '{spec.name}'", span=_span(spec.loc, world.file))
	if world.table.is_top(ty):
		return ANY
	return TypeMatch(ty)


def _method_label(decl: decl_ast.MethodDecl) -> str:
	parts = []
	for spec in decl.specs:
		if spec.kind == "any":
			parts.append("_")
		elif spec.kind == "type":
			parts.append(spec.name or "")
		else:
			parts.append(repr(spec.value))
	return f"{decl.generic}({', '.join(parts)})"


def _run(world: DeclaredWorld, step: Callable[[], None]) -> None:
	try:
		step()
	except DeclarationError as err:
		world.diagnostics.append(Diagnostic(message=str(err), phase="declare", severity="error", span=err.span))


def load_declarations(source: str, *, file: Optional[str] = None) -> DeclaredWorld:
	"""Parse and load declarations; check `world.diagnostics` before use."""
	world = DeclaredWorld(table=TypeTable(), registry=MethodRegistry(), file=file)
	world.table.ensure_top()
	try:
		prog = _parser.parse_program(source)
	except UnexpectedInput as err:
		span = Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None), raw=err)
		world.diagnostics.append(Diagnostic(message=str(err).strip(), phase="parser", severity="error", span=span))
		return world

	for tdecl in prog.types:
		_run(world, lambda d=tdecl: _declare_type(world, d))

	for gdecl in prog.generics:
		def declare_generic(d: decl_ast.GenericDecl = gdecl) -> None:
			params = _param_list(world, d)
			try:
				world.registry.declare(d.name, params, d.precedence)
			except RegistrationError as err:
				raise DeclarationError(str(err), span=_span(d.loc, file)) from err
		_run(world, declare_generic)

	for mdecl in prog.methods:
		def declare_method(d: decl_ast.MethodDecl = mdecl) -> None:
			if not world.registry.exists(d.generic):
				raise DeclarationError(f"method on undeclared generic function '{d.generic}'", span=_span(d.loc, file))
			specs = [_specializer(world, s) for s in d.specs]
			try:
				world.registry.register(d.generic, specs, make_stub_body(_method_label(d)))
			except RegistrationError as err:
				raise DeclarationError(str(err), span=_span(d.loc, file)) from err
		_run(world, declare_method)
	return world


def load_declarations_file(path: Path) -> DeclaredWorld:
	return load_declarations(path.read_text(encoding="utf-8"), file=str(path))


def parse_call_site(world: DeclaredWorld, source: str) -> Tuple[str, List[TypeId]]:
	"""
	Parse `name(arg, ...)` into a generic function name and static types.

	Arguments are `?` (no information), a declared type name, or a literal,
	which becomes the singleton type of that value.
	"""
	try:
		call = _parser.parse_call(source)
	except UnexpectedInput as err:
		raise DeclarationError(
			f"invalid call site '{source}': {str(err).strip()}",
			span=Span(line=getattr(err, "line", None), column=getattr(err, "column", None), raw=err),
		) from err
	table = world.table
	static_types: List[TypeId] = []
	for arg in call.args:
		span = _span(arg.loc, None)
		if arg.kind == "top":
			static_types.append(table.ensure_top())
		elif arg.kind == "literal":
			static_types.append(table.new_literal(arg.value))
		else:
			ty = table.lookup(arg.name or "")
			if ty is None:
				raise DeclarationError(f"unknown type '{arg.name}' in call site", span=span)
			static_types.append(ty)
	return call.name, static_types


__all__ = [
	"DeclarationError",
	"DeclaredWorld",
	"load_declarations",
	"load_declarations_file",
	"make_stub_body",
	"parse_call_site",
]
