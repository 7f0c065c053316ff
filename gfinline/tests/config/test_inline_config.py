# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""InlineConfig values and JSON loading."""

import json

import pytest

from gfinline.config import ConfigError, InlineConfig, config_from_json_obj, load_config_json, merge_configs
from gfinline.method_resolver import Abstain, resolve_call
from gfinline.test_support import labelled, shapes_world


def test_default_enables_nothing() -> None:
	cfg = InlineConfig()
	assert not cfg.is_enabled("area")
	assert cfg.checks_required
	assert cfg.abstain_on_unordered


def test_set_enabled_returns_new_value() -> None:
	base = InlineConfig()
	on = base.set_enabled("area", True)
	assert on.is_enabled("area")
	assert not base.is_enabled("area")
	assert not on.set_enabled("area", False).is_enabled("area")


def test_disable_under_enable_all_abstains() -> None:
	world = shapes_world()
	world.registry.register("area", [world.tm("Circle")], labelled("circle"))
	cfg = InlineConfig(enable_all=True).set_enabled("area", False)
	assert cfg.is_enabled("anything")
	assert not cfg.is_enabled("area")
	res = resolve_call(world.registry, world.table, "area", [world.ty("Circle")], config=cfg)
	assert isinstance(res, Abstain)
	assert res.code == "disabled"
	assert cfg.set_enabled("area", True).is_enabled("area")


def test_enabling_helper() -> None:
	cfg = InlineConfig.enabling(["a", "b"], checks_required=False)
	assert cfg.is_enabled("a") and cfg.is_enabled("b")
	assert not cfg.checks_required


def test_load_config_json(tmp_path) -> None:
	path = tmp_path / "cfg.json"
	path.write_text(
		json.dumps(
			{
				"format": "gfinline-config",
				"version": 0,
				"enabled": ["area"],
				"disabled": ["perimeter"],
				"checks_required": False,
				"abstain_on_unordered": False,
			}
		),
		encoding="utf-8",
	)
	cfg = load_config_json(path)
	assert cfg == InlineConfig(
		enabled=frozenset({"area"}),
		disabled=frozenset({"perimeter"}),
		checks_required=False,
		abstain_on_unordered=False,
	)


@pytest.mark.parametrize(
	"obj",
	[
		[],
		{"format": "other", "version": 0},
		{"format": "gfinline-config", "version": 1},
		{"format": "gfinline-config", "version": 0, "enabled": "area"},
		{"format": "gfinline-config", "version": 0, "enabled": [1]},
		{"format": "gfinline-config", "version": 0, "enable_all": "yes"},
		{"format": "gfinline-config", "version": 0, "disabled": "area"},
	],
)
def test_malformed_config_rejected(obj) -> None:
	with pytest.raises(ConfigError):
		config_from_json_obj(obj)


def test_invalid_json_rejected(tmp_path) -> None:
	path = tmp_path / "cfg.json"
	path.write_text("{", encoding="utf-8")
	with pytest.raises(ConfigError):
		load_config_json(path)


def test_merge_configs() -> None:
	primary = InlineConfig(enabled=frozenset({"a"}), checks_required=False)
	secondary = InlineConfig(enabled=frozenset({"b"}), enable_all=True, disabled=frozenset({"c"}))
	merged = merge_configs(primary, secondary)
	assert merged.enabled == frozenset({"a", "b"})
	assert merged.enable_all
	assert not merged.is_enabled("c")
	assert not merged.checks_required
