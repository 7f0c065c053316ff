"""
Common diagnostic structure for the declaration loader, resolver and driver.

The resolver never fails: when it abstains it still records why, as a
note-severity Diagnostic, so tooling can show the decision.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	# Phase label: "parser" and "declare" for the loader, "inline" for the
	# resolver, "config" for configuration loading.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable single line (`file:line:col: severity: message`)."""
		text = f"{self.span.label()}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
