# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Inlining configuration.

Enablement is a value, not ambient state: each resolution receives the
InlineConfig it should honour, and `set_enabled` returns a new config rather
than mutating a shared one.

File format (JSON, v0):
{
  "format": "gfinline-config",
  "version": 0,
  "enabled": ["area", "..."],      // optional
  "disabled": ["..."],             // optional, wins over enabled/enable_all
  "enable_all": false,             // optional
  "checks_required": true,         // optional
  "abstain_on_unordered": true     // optional
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable


class ConfigError(ValueError):
	"""Raised for malformed configuration files or values."""


@dataclass(frozen=True)
class InlineConfig:
	enabled: frozenset[str] = field(default_factory=frozenset)
	enable_all: bool = False
	# Names that always abstain, even under enable_all.
	disabled: frozenset[str] = field(default_factory=frozenset)
	# Default safety policy for callers that do not pass one per call site.
	checks_required: bool = True
	# Abstain when two overlapping candidates are ordered by registration order only.
	abstain_on_unordered: bool = True

	def is_enabled(self, name: str) -> bool:
		return name not in self.disabled and (self.enable_all or name in self.enabled)

	def set_enabled(self, name: str, flag: bool) -> "InlineConfig":
		if flag:
			return replace(self, enabled=self.enabled | {name}, disabled=self.disabled - {name})
		return replace(self, enabled=self.enabled - {name}, disabled=self.disabled | {name})

	@classmethod
	def enabling(cls, names: Iterable[str], **kwargs: Any) -> "InlineConfig":
		return cls(enabled=frozenset(names), **kwargs)


def _bool_field(obj: dict, key: str, default: bool) -> bool:
	value = obj.get(key, default)
	if not isinstance(value, bool):
		raise ConfigError(f"config field '{key}' must be a boolean")
	return value


def _names_field(obj: dict, key: str) -> frozenset[str]:
	value = obj.get(key) or []
	if not isinstance(value, list) or not all(isinstance(n, str) for n in value):
		raise ConfigError(f"config field '{key}' must be a list of generic function names")
	return frozenset(value)


def config_from_json_obj(obj: Any) -> InlineConfig:
	if not isinstance(obj, dict):
		raise ConfigError("config must be a JSON object")
	if obj.get("format") != "gfinline-config" or obj.get("version") != 0:
		raise ConfigError("unsupported config format/version")
	return InlineConfig(
		enabled=_names_field(obj, "enabled"),
		disabled=_names_field(obj, "disabled"),
		enable_all=_bool_field(obj, "enable_all", False),
		checks_required=_bool_field(obj, "checks_required", True),
		abstain_on_unordered=_bool_field(obj, "abstain_on_unordered", True),
	)


def load_config_json(path: Path) -> InlineConfig:
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ConfigError(f"{path}: invalid JSON: {err}") from err
	return config_from_json_obj(obj)


def merge_configs(primary: InlineConfig, secondary: InlineConfig) -> InlineConfig:
	"""Union enabled and disabled names; scalar policy fields come from `primary`."""
	return replace(
		primary,
		enabled=primary.enabled | secondary.enabled,
		disabled=primary.disabled | secondary.disabled,
		enable_all=primary.enable_all or secondary.enable_all,
	)


__all__ = ["ConfigError", "InlineConfig", "config_from_json_obj", "load_config_json", "merge_configs"]
