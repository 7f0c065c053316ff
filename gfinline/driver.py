# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: load a declaration file and resolve call sites.

	gfinline shapes.gf --call "area(Circle)" --call "area(?)" [--no-checks] [--json]

Each call site lists static types in precedence order: a declared type name,
a literal (singleton type), or `?` for no information. Without --config or
--enable flags every generic function is enabled.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List

from gfinline.cascade import describe, method_label
from gfinline.config import ConfigError, InlineConfig, load_config_json
from gfinline.core.diagnostics import Diagnostic, has_errors
from gfinline.core.span import Span
from gfinline.method_resolver import DispatchInliner, Inline, Resolution
from gfinline.parser import DeclarationError, DeclaredWorld, load_declarations_file, make_stub_body, parse_call_site


def _diag_to_json(diag: Diagnostic, phase: str, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return {
		"phase": diag.phase or phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": diag.span.file or str(source),
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def _fail(diags: List[Diagnostic], phase: str, source: Path, as_json: bool) -> int:
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [_diag_to_json(d, phase, source) for d in diags]}))
	else:
		for d in diags:
			print(d.render(), file=sys.stderr)
	return 1


def _result_to_json(world: DeclaredWorld, call: str, name: str, result: Resolution, source: str | None) -> Dict[str, Any]:
	out: Dict[str, Any] = {"call": call}
	gf = world.registry.get(name)
	cands = result.candidates
	if gf is not None:
		out["candidates"] = [
			{"method": method_label(gf, c.method, world.table), "definite": c.definite} for c in cands
		]
	if isinstance(result, Inline):
		out["status"] = "inline"
		out["unconditional"] = result.unconditional
		out["cascade"] = describe(result.generic, result.cascade, world.table)
		if source is not None:
			out["source"] = source
	else:
		out["status"] = "abstain"
		out["code"] = result.code
		out["reason"] = result.reason
	return out


def _print_result(world: DeclaredWorld, call: str, name: str, result: Resolution, source: str | None) -> None:
	print(f"call {call}:")
	gf = world.registry.get(name)
	if gf is not None and result.candidates:
		print("  candidates:")
		for c in result.candidates:
			kind = "definite" if c.definite else "ambiguous"
			print(f"    {method_label(gf, c.method, world.table)}  {kind}")
	if isinstance(result, Inline):
		mode = "unconditional" if result.unconditional else "guarded"
		print(f"  inline ({mode}):")
		for line in describe(result.generic, result.cascade, world.table):
			print("    " + line.replace("\t", "    "))
		if source is not None:
			print("  source:")
			for line in source.rstrip("\n").splitlines():
				print("    " + line)
	else:
		print(f"  abstain [{result.code}]: {result.reason}")


def main(argv: list[str] | None = None) -> int:
	"""
	Load declarations, resolve each --call, print the outcome.

	Exit code 0 when every call site was resolved (inlined or abstained),
	1 on declaration, configuration or call-site errors.
	"""
	parser = argparse.ArgumentParser(description="Resolve generic function call sites statically")
	parser.add_argument("source", type=Path, help="Path to a declaration file")
	parser.add_argument(
		"--call",
		dest="calls",
		action="append",
		default=[],
		help="Call site as name(Type, ?, literal, ...) with static types in precedence order (repeatable)",
	)
	parser.add_argument("--no-checks", dest="checks", action="store_false", default=None, help="Only inline a single definite method")
	parser.add_argument("--checks", dest="checks", action="store_true", help="Allow guarded cascades (default)")
	parser.add_argument("--config", type=Path, help="Path to an inlining config JSON file")
	parser.add_argument("--enable", dest="enable", action="append", default=[], help="Enable inlining for a generic function (repeatable)")
	parser.add_argument("--enable-all", action="store_true", help="Enable inlining for every generic function")
	parser.add_argument("--disable", dest="disable", action="append", default=[], help="Never inline a generic function, even under --enable-all (repeatable)")
	parser.add_argument(
		"--allow-unordered",
		action="store_true",
		help="Inline even when overlapping candidates are ordered by registration order only",
	)
	parser.add_argument("--emit-source", action="store_true", help="Also print the generated Python source")
	parser.add_argument("--json", action="store_true", help="Emit results and diagnostics as JSON")
	args = parser.parse_args(argv)

	source_path: Path = args.source
	if args.config is not None:
		try:
			config = load_config_json(args.config)
		except (ConfigError, OSError) as err:
			diag = Diagnostic(message=str(err), phase="config", span=Span(file=str(args.config)))
			return _fail([diag], "config", args.config, args.json)
	elif not args.enable:
		config = InlineConfig(enable_all=True)
	else:
		config = InlineConfig()
	for name in args.enable:
		config = config.set_enabled(name, True)
	if args.enable_all:
		config = replace(config, enable_all=True)
	for name in args.disable:
		config = config.set_enabled(name, False)
	if args.allow_unordered:
		config = replace(config, abstain_on_unordered=False)

	try:
		world = load_declarations_file(source_path)
	except OSError as err:
		return _fail([Diagnostic(message=str(err), phase="parser", span=Span(file=str(source_path)))], "parser", source_path, args.json)
	if has_errors(world.diagnostics):
		return _fail(world.diagnostics, "declare", source_path, args.json)

	dispatchers = {name: make_stub_body(f"dispatch {name}") for name in world.registry.names()}
	inlined = 0

	def count() -> None:
		nonlocal inlined
		inlined += 1

	inliner = DispatchInliner(world.registry, world.table, config, on_resolved=count, dispatchers=dispatchers)
	results: List[Dict[str, Any]] = []
	for call in args.calls:
		try:
			name, static_types = parse_call_site(world, call)
		except DeclarationError as err:
			return _fail([Diagnostic(message=str(err), phase="call", span=err.span)], "call", source_path, args.json)
		result = inliner.resolve(name, static_types, checks_required=args.checks)
		source = inliner.render(result).source if args.emit_source and isinstance(result, Inline) else None
		if args.json:
			results.append(_result_to_json(world, call, name, result, source))
		else:
			_print_result(world, call, name, result, source)

	if args.json:
		payload = {
			"exit_code": 0,
			"diagnostics": [_diag_to_json(d, "declare", source_path) for d in world.diagnostics],
			"inlined": inlined,
			"results": results,
		}
		print(json.dumps(payload))
	return 0


if __name__ == "__main__":
	sys.exit(main())
