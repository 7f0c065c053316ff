# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Cascade emission under both safety policies."""

from gfinline.applicability import collect_candidates, sort_candidates
from gfinline.cascade import (
	Cascade,
	DynamicCall,
	MethodCall,
	TypeGuard,
	ValueGuard,
	describe,
	emit_cascade,
	method_label,
)
from gfinline.precedence import PrecedenceResolver
from gfinline.specializers import ANY, ExactValue
from gfinline.test_support import labelled, shapes_world


def _area_world():
	world = shapes_world()
	reg = world.registry
	reg.register("area", [world.tm("Circle")], labelled("circle"))
	reg.register("area", [world.tm("Square")], labelled("square"))
	reg.register("area", [ANY], labelled("any"))
	return world


def _emit(world, name, static_names, *, checks_required):
	gf = world.registry.get(name)
	resolver = PrecedenceResolver()
	static_types = [world.ty(n) for n in static_names]
	cands = sort_candidates(collect_candidates(gf, static_types, world.table, resolver), world.table)
	return gf, emit_cascade(gf, cands, checks_required=checks_required, resolver=resolver)


def test_exact_static_type_inlines_unconditionally() -> None:
	world = _area_world()
	for checks in (False, True):
		gf, cascade = _emit(world, "area", ["Circle"], checks_required=checks)
		assert cascade is not None
		assert cascade.unconditional
		assert cascade.final.method.body() == "circle"
		assert describe(gf, cascade, world.table) == ["call area(Circle)"]


def test_supertype_emits_guarded_chain() -> None:
	world = _area_world()
	gf, cascade = _emit(world, "area", ["Shape"], checks_required=True)
	assert cascade is not None
	assert not cascade.unconditional
	assert [b.guards for b in cascade.branches] == [
		(TypeGuard(arg="arg0", arg_index=0, type_id=world.ty("Circle")),),
		(TypeGuard(arg="arg0", arg_index=0, type_id=world.ty("Square")),),
	]
	assert [m.body() for m in cascade.methods()] == ["circle", "square", "any"]
	assert describe(gf, cascade, world.table) == [
		"if arg0 is Circle:",
		"\tcall area(Circle)",
		"elif arg0 is Square:",
		"\tcall area(Square)",
		"else:",
		"\tcall area(_)",
	]


def test_unguarded_mode_never_inlines_an_ambiguous_top_candidate() -> None:
	world = _area_world()
	for static in ("Shape", "Polygon", "Top"):
		_, cascade = _emit(world, "area", [static], checks_required=False)
		assert cascade is None


def test_unguarded_inlining_only_for_definite_candidates() -> None:
	world = _area_world()
	for static in ("Top", "Shape", "Circle", "Polygon", "Rect", "Square", "Triangle"):
		gf = world.registry.get("area")
		resolver = PrecedenceResolver()
		cands = sort_candidates(collect_candidates(gf, [world.ty(static)], world.table, resolver), world.table)
		cascade = emit_cascade(gf, cands, checks_required=False, resolver=resolver)
		if cascade is not None:
			assert cands[0].definite
			assert cascade.unconditional


def test_no_definite_candidate_falls_back_to_dynamic_dispatch() -> None:
	world = shapes_world()
	reg = world.registry
	reg.register("area", [world.tm("Circle")], labelled("circle"))
	reg.register("area", [world.tm("Rect")], labelled("rect"))
	gf, cascade = _emit(world, "area", ["Shape"], checks_required=True)
	assert cascade is not None
	assert cascade.final == DynamicCall("area")
	assert len(cascade.branches) == 2
	assert describe(gf, cascade, world.table)[-1] == "\tdispatch area(arg0)"


def test_candidates_after_definite_one_are_pruned() -> None:
	world = shapes_world()
	reg = world.registry
	reg.register("area", [world.tm("Square")], labelled("square"))
	reg.register("area", [world.tm("Polygon")], labelled("polygon"))
	reg.register("area", [world.tm("Shape")], labelled("shape"))
	reg.register("area", [ANY], labelled("any"))
	_, cascade = _emit(world, "area", ["Rect"], checks_required=True)
	assert cascade is not None
	assert [m.body() for m in cascade.methods()] == ["square", "polygon"]
	assert isinstance(cascade.final, MethodCall)


def test_guards_only_test_ambiguous_positions_by_declaration_index() -> None:
	world = shapes_world()
	reg = world.registry
	reg.register(
		"collide",
		[world.tm("Circle"), ExactValue(0)],
		labelled("circle-zero"),
		precedence_order=["arg1", "arg0"],
	)
	reg.register("collide", [ANY, ANY], labelled("any"))
	gf = reg.get("collide")
	table = world.table
	resolver = PrecedenceResolver()
	# Static types arrive in precedence order: (arg1, arg0).
	static_types = [world.ty("Top"), world.ty("Circle")]
	cands = sort_candidates(collect_candidates(gf, static_types, table, resolver), table)
	cascade = emit_cascade(gf, cands, checks_required=True, resolver=resolver)
	assert isinstance(cascade, Cascade)
	assert cascade.branches[0].guards == (ValueGuard(arg="arg1", arg_index=1, value=0),)
	assert method_label(gf, cascade.branches[0].call.method, table) == "collide(Circle, 0)"


def test_no_candidates_yields_no_cascade() -> None:
	world = shapes_world()
	world.registry.register("area", [world.tm("Circle")], labelled("circle"))
	_, cascade = _emit(world, "area", ["Square"], checks_required=True)
	assert cascade is None
