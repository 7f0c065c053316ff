# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""TypeTable subtyping, disjointness and literal types."""

import pytest

from gfinline.core.types_core import TypeKind, TypeTable, values_eql
from gfinline.test_support import World, shapes_world


def test_top_is_canonical_and_above_everything() -> None:
	world = shapes_world()
	table = world.table
	top = table.ensure_top()
	assert table.ensure_top() == top
	assert table.lookup("Top") == top
	for name in ("Shape", "Circle", "Square"):
		assert table.is_subtype(world.ty(name), top)
		assert not table.is_subtype(top, world.ty(name))


def test_subtyping_is_reflexive_and_transitive() -> None:
	world = shapes_world()
	table = world.table
	assert table.is_subtype(world.ty("Square"), world.ty("Square"))
	assert table.is_subtype(world.ty("Square"), world.ty("Rect"))
	assert table.is_subtype(world.ty("Square"), world.ty("Shape"))
	assert not table.is_subtype(world.ty("Rect"), world.ty("Square"))
	assert not table.is_subtype(world.ty("Circle"), world.ty("Polygon"))


def test_disjointness_is_closed_world() -> None:
	world = shapes_world()
	table = world.table
	assert table.is_disjoint(world.ty("Circle"), world.ty("Square"))
	assert not table.is_disjoint(world.ty("Shape"), world.ty("Square"))
	assert not table.is_disjoint(world.ty("Top"), world.ty("Circle"))
	# A common subclass makes two otherwise unrelated classes overlap.
	world.declare_class("Colored")
	assert table.is_disjoint(world.ty("Colored"), world.ty("Circle"))
	world.declare_class("RedCircle", "Circle", "Colored")
	assert not table.is_disjoint(world.ty("Colored"), world.ty("Circle"))


def test_open_world_disjointness_needs_a_layout_conflict() -> None:
	world = World(table=TypeTable(open_world=True))
	world.declare_class("A")
	world.declare_class("B")
	table = world.table
	# An unregistered class may derive from both.
	assert not table.is_disjoint(world.ty("A"), world.ty("B"))
	assert table.is_disjoint(table.ensure_class(int), table.ensure_class(str))
	assert table.is_disjoint(table.ensure_class(bool), table.ensure_class(float))
	no_runtime = table.new_class("Abstract")
	assert not table.is_disjoint(no_runtime, table.ensure_class(int))
	assert table.is_disjoint(table.new_literal(1), table.ensure_class(str))


def test_duplicate_class_name_rejected() -> None:
	table = TypeTable()
	table.new_class("A")
	with pytest.raises(ValueError):
		table.new_class("A")


def test_literal_types_sit_below_their_base() -> None:
	table = TypeTable()
	one = table.new_literal(1)
	int_ty = table.ensure_class(int)
	assert table.get(one).kind is TypeKind.LITERAL
	assert table.literal_value(one) == (True, 1)
	assert table.literal_value(int_ty) == (False, None)
	assert table.is_subtype(one, int_ty)
	assert not table.is_subtype(int_ty, one)
	assert table.new_literal(1) == one


def test_literal_values_use_eql() -> None:
	table = TypeTable()
	one = table.new_literal(1)
	true = table.new_literal(True)
	assert one != true
	assert table.is_disjoint(one, true)
	assert table.is_disjoint(one, table.new_literal(2))
	assert not values_eql(1, True)
	assert values_eql("a", "a")


def test_literal_against_class_uses_runtime_class() -> None:
	table = TypeTable()
	bool_ty = table.ensure_class(bool)
	int_ty = table.ensure_class(int)
	assert table.is_subtype(bool_ty, int_ty)
	zero = table.new_literal(0)
	assert table.is_disjoint(zero, bool_ty)
	assert table.is_subtype(table.new_literal(True), int_ty)
	assert table.is_disjoint(table.new_literal("x"), int_ty)


def test_literal_cannot_be_a_supertype() -> None:
	table = TypeTable()
	lit = table.new_literal(3)
	with pytest.raises(ValueError):
		table.new_class("Bad", [lit])


def test_ensure_class_mirrors_python_bases() -> None:
	class Base:
		pass

	class Derived(Base):
		pass

	table = TypeTable()
	derived = table.ensure_class(Derived)
	base = table.ensure_class(Base)
	assert table.is_subtype(derived, base)
	assert table.ensure_class(object) == table.ensure_top()
	assert table.runtime_class(derived) is Derived


def test_is_instance_requires_runtime_class() -> None:
	world = shapes_world()
	table = world.table
	assert table.is_instance(world.instance("Square"), world.ty("Polygon"))
	assert not table.is_instance(world.instance("Circle"), world.ty("Polygon"))
	assert table.is_instance(object(), world.ty("Top"))
	abstract = table.new_class("Abstract")
	with pytest.raises(ValueError):
		table.is_instance(object(), abstract)


def test_values_eql_is_reflexive_for_nan() -> None:
	nan = float("nan")
	assert values_eql(nan, nan)
	assert not values_eql(nan, float("nan"))
	table = TypeTable()
	assert table.is_instance(nan, table.new_literal(nan))
