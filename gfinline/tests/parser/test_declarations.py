# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Declaration language: parsing, loading and diagnostics."""

import pytest

from gfinline.params import KeywordParam, OptionalParam
from gfinline.parser import DeclarationError, load_declarations, load_declarations_file, parse_call_site
from gfinline.parser.parser import parse_call, parse_program
from gfinline.specializers import ANY, ExactValue, TypeMatch

SHAPES = """
# shapes
type Shape
type Circle : Shape
type Rect : Shape
type Square : Rect

generic area(shape)
method area(Circle)
method area(Square)
method area(_)
"""


def test_parse_program_structure() -> None:
	prog = parse_program(SHAPES)
	assert [t.name for t in prog.types] == ["Shape", "Circle", "Rect", "Square"]
	assert prog.types[3].supertypes == ["Rect"]
	assert prog.generics[0].name == "area"
	assert [p.name for p in prog.generics[0].params] == ["shape"]
	assert [[s.kind for s in m.specs] for m in prog.methods] == [["type"], ["type"], ["any"]]
	assert prog.methods[0].loc.line == 9


def test_parse_literals_and_params() -> None:
	prog = parse_program(
		'generic fmt(value, width = 8, *rest, pad = "x", **opts) precedence (value)\n'
		'method fmt(-3)\nmethod fmt("a\\tb")\nmethod fmt(true)\nmethod fmt(nil)\n'
	)
	gdecl = prog.generics[0]
	assert [p.kind for p in gdecl.params] == ["plain", "default", "star", "default", "kwstar"]
	assert gdecl.params[1].default == 8
	assert gdecl.precedence == ["value"]
	assert [m.specs[0].value for m in prog.methods] == [-3, "a\tb", True, None]


def test_parse_call() -> None:
	call = parse_call('collide(?, Circle, 3, "s")')
	assert call.name == "collide"
	assert [a.kind for a in call.args] == ["top", "type", "literal", "literal"]
	assert call.args[2].value == 3


def test_load_builds_table_and_registry() -> None:
	world = load_declarations(SHAPES, file="shapes.gf")
	assert world.ok
	table = world.table
	square = table.lookup("Square")
	assert table.is_subtype(square, table.lookup("Shape"))
	gf = world.registry.get("area")
	assert gf.params.required == ("shape",)
	assert [m.specializers for m in gf.methods] == [
		(TypeMatch(table.lookup("Circle")),),
		(TypeMatch(square),),
		(ANY,),
	]
	assert gf.methods[0].body() == "area(Circle)"
	circle_cls = table.runtime_class(table.lookup("Circle"))
	assert issubclass(circle_cls, table.runtime_class(table.lookup("Shape")))


def test_load_param_groups() -> None:
	world = load_declarations('generic fmt(value, width = 8, *rest, pad = "x", flag, **opts)\nmethod fmt(1)\n')
	assert world.ok, [d.render() for d in world.diagnostics]
	params = world.registry.get("fmt").params
	assert params.required == ("value",)
	assert params.optional == (OptionalParam("width", 8),)
	assert params.rest == "rest"
	assert params.keywords == (KeywordParam("pad", "x"), KeywordParam("flag", None))
	assert params.allow_other_keys and params.other_keys == "opts"
	assert world.registry.get("fmt").methods[0].specializers == (ExactValue(1),)


def test_bare_star_makes_keyword_only() -> None:
	world = load_declarations("generic f(a, *, k = 1)\n")
	params = world.registry.get("f").params
	assert params.rest is None
	assert params.formal_params() == "a, *, k=_default_k"


def test_top_specializer_is_any() -> None:
	world = load_declarations("generic f(a)\nmethod f(Top)\n")
	assert world.registry.get("f").methods[0].specializers == (ANY,)


def test_redefinition_in_source_keeps_one_method() -> None:
	world = load_declarations("type A\ngeneric f(a)\nmethod f(A)\nmethod f(A)\n")
	assert world.ok
	assert len(world.registry.lookup_all("f")) == 1


def test_syntax_error_is_a_parser_diagnostic() -> None:
	world = load_declarations("type\n", file="bad.gf")
	assert not world.ok
	diag = world.diagnostics[0]
	assert diag.phase == "parser"
	assert diag.span.file == "bad.gf"


@pytest.mark.parametrize(
	"source, fragment",
	[
		("type A : B\n", "unknown supertype 'B'"),
		("type A\ntype A\n", "already defined"),
		("type A\ntype B : A, A\n", "duplicate supertype"),
		("generic f(a)\nmethod f(Nope)\n", "unknown type 'Nope'"),
		("method g(_)\n", "undeclared generic function 'g'"),
		("generic f(a)\nmethod f(_, _)\n", "generic function takes 1"),
		("generic f(a, b) precedence (a, c)\n", "not a permutation"),
		("generic f(a = 1, b)\n", "follows an optional one"),
		("generic f(a, a)\n", "duplicate parameter name"),
		("generic f(**k, a)\n", "parameter after '**k'"),
		("generic f(*a, *b)\n", "more than one '*'"),
		("generic f(a)\ngeneric f(a, b)\n", "different parameter list"),
	],
)
def test_semantic_errors_become_diagnostics(source: str, fragment: str) -> None:
	world = load_declarations(source, file="x.gf")
	assert not world.ok
	messages = [d.message for d in world.diagnostics]
	assert any(fragment in m for m in messages), messages
	assert world.diagnostics[0].phase == "declare"
	assert world.diagnostics[0].span.line is not None


def test_loading_continues_after_an_error() -> None:
	world = load_declarations("type A : Missing\ntype B\ngeneric f(a)\nmethod f(B)\n")
	assert len(world.diagnostics) == 1
	assert world.registry.get("f").methods[0].body() == "f(B)"


def test_cannot_linearize_diamond_with_conflicting_order() -> None:
	world = load_declarations("type A\ntype B\ntype C : A, B\ntype D : B, A\ntype E : C, D\n")
	assert any("cannot linearize" in d.message for d in world.diagnostics)


def test_parse_call_site_against_world() -> None:
	world = load_declarations(SHAPES)
	name, static = parse_call_site(world, "area(Circle)")
	assert name == "area"
	assert static == [world.table.lookup("Circle")]
	_, static = parse_call_site(world, "area(?)")
	assert world.table.is_top(static[0])
	_, static = parse_call_site(world, "area(7)")
	assert world.table.literal_value(static[0]) == (True, 7)
	with pytest.raises(DeclarationError):
		parse_call_site(world, "area(Hexagon)")
	with pytest.raises(DeclarationError):
		parse_call_site(world, "area(")


def test_load_from_file(tmp_path) -> None:
	path = tmp_path / "shapes.gf"
	path.write_text(SHAPES, encoding="utf-8")
	world = load_declarations_file(path)
	assert world.ok
	assert world.file == str(path)
