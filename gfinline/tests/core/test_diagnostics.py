# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Span labels and Diagnostic rendering."""

from gfinline.core.diagnostics import Diagnostic, has_errors
from gfinline.core.span import Span


def test_span_label() -> None:
	assert Span().label() == "<input>"
	assert Span(file="shapes.gf", line=3).label() == "shapes.gf:3"
	assert Span(file="shapes.gf", line=3, column=7).label() == "shapes.gf:3:7"
	# A column without a line is not shown.
	assert Span(column=7).label() == "<input>"


def test_diagnostic_render_and_errors() -> None:
	note = Diagnostic(message="kept dynamic call", severity="note", span=Span(file="a.gf", line=1, column=1))
	err = Diagnostic(message="unknown type 'Hex'", notes=["declare it with `type Hex`"])
	assert note.render() == "a.gf:1:1: note: kept dynamic call"
	assert err.render() == "<input>: error: unknown type 'Hex'\n  note: declare it with `type Hex`"
	assert not has_errors([note])
	assert has_errors([note, err])
	assert Diagnostic(message="x", span=None).span == Span()  # type: ignore[arg-type]
