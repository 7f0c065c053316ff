from __future__ import annotations

import ast as py_ast
from pathlib import Path
from typing import Any, List

from lark import Lark, Token, Tree

from .ast import (
	CallArg,
	CallExpr,
	GenericDecl,
	Located,
	MethodDecl,
	ParamDecl,
	Program,
	SpecDecl,
	TypeDecl,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


_PROGRAM_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)

_CALL_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="call",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_program(source: str) -> Program:
	tree = _PROGRAM_PARSER.parse(source)
	return _build_program(tree)


def parse_call(source: str) -> CallExpr:
	tree = _CALL_PARSER.parse(source)
	return _build_call(tree)


def _loc(node: Tree | Token) -> Located:
	if isinstance(node, Token):
		return Located(line=node.line or 0, column=node.column or 0)
	meta = node.meta
	return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _names(children: List[Any]) -> List[str]:
	return [str(c) for c in children if isinstance(c, Token) and c.type == "NAME"]


def _build_program(tree: Tree) -> Program:
	prog = Program()
	for child in tree.children:
		if child.data == "type_decl":
			prog.types.append(_build_type_decl(child))
		elif child.data == "generic_decl":
			prog.generics.append(_build_generic_decl(child))
		elif child.data == "method_decl":
			prog.methods.append(_build_method_decl(child))
		else:
			raise TypeError(f"unexpected declaration node {child.data}")
	return prog


def _build_type_decl(tree: Tree) -> TypeDecl:
	names = _names(tree.children)
	return TypeDecl(name=names[0], supertypes=names[1:], loc=_loc(tree))


def _build_generic_decl(tree: Tree) -> GenericDecl:
	name_tok = tree.children[0]
	params: List[ParamDecl] = []
	precedence: List[str] | None = None
	for child in tree.children[1:]:
		if isinstance(child, Tree) and child.data == "precedence":
			precedence = _names(child.children)
		elif isinstance(child, Tree):
			params.append(_build_param(child))
	return GenericDecl(name=str(name_tok), params=params, loc=_loc(tree), precedence=precedence)


def _build_param(tree: Tree) -> ParamDecl:
	names = _names(tree.children)
	name = names[0] if names else None
	if tree.data == "plain_param":
		return ParamDecl(kind="plain", name=name, loc=_loc(tree))
	if tree.data == "default_param":
		lit = next(c for c in tree.children if isinstance(c, Tree))
		return ParamDecl(kind="default", name=name, loc=_loc(tree), default=_build_literal(lit))
	if tree.data == "star_param":
		return ParamDecl(kind="star", name=name, loc=_loc(tree))
	if tree.data == "kwstar_param":
		return ParamDecl(kind="kwstar", name=name, loc=_loc(tree))
	raise TypeError(f"unexpected parameter node {tree.data}")


def _build_method_decl(tree: Tree) -> MethodDecl:
	name_tok = tree.children[0]
	specs = [_build_spec(c) for c in tree.children[1:] if isinstance(c, Tree)]
	return MethodDecl(generic=str(name_tok), specs=specs, loc=_loc(tree))


def _build_spec(tree: Tree) -> SpecDecl:
	if tree.data == "any_spec":
		return SpecDecl(kind="any", loc=_loc(tree))
	if tree.data == "type_spec":
		return SpecDecl(kind="type", loc=_loc(tree), name=_names(tree.children)[0])
	if tree.data == "value_spec":
		return SpecDecl(kind="value", loc=_loc(tree), value=_build_literal(tree.children[0]))
	raise TypeError(f"unexpected specializer node {tree.data}")


def _build_call(tree: Tree) -> CallExpr:
	name_tok = tree.children[0]
	args: List[CallArg] = []
	for child in tree.children[1:]:
		if child.data == "top_arg":
			args.append(CallArg(kind="top", loc=_loc(child)))
		elif child.data == "type_arg":
			args.append(CallArg(kind="type", loc=_loc(child), name=_names(child.children)[0]))
		elif child.data == "literal_arg":
			args.append(CallArg(kind="literal", loc=_loc(child), value=_build_literal(child.children[0])))
		else:
			raise TypeError(f"unexpected call argument node {child.data}")
	return CallExpr(name=str(name_tok), args=args, loc=_loc(tree))


def _build_literal(tree: Tree) -> Any:
	if tree.data == "int_lit":
		return int(tree.children[0])
	if tree.data == "str_lit":
		# ESCAPED_STRING follows Python string escape rules.
		return py_ast.literal_eval(str(tree.children[0]))
	if tree.data == "true_lit":
		return True
	if tree.data == "false_lit":
		return False
	if tree.data == "nil_lit":
		return None
	raise TypeError(f"unexpected literal node {tree.data}")


__all__ = ["parse_program", "parse_call"]
