from __future__ import annotations

import os
from pathlib import Path

import pytest

from roadtrip_bingo.config import options_from_resolved, resolve_parameters
from roadtrip_bingo.errors import InvalidOptionsError
from roadtrip_bingo.models import IconRef


def test_env_precedence_over_config(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("grid_size: 4\nset_count: 2\n", encoding="utf-8")
    monkeypatch.setenv("ROADTRIP_BINGO_GRID_SIZE", "6")
    monkeypatch.setenv("ROADTRIP_BINGO_MULTI_HIT_MODE", "yes")

    resolved, params_hash, _ = resolve_parameters(
        config_path_str=str(cfg), cli_overrides={}, env=os.environ
    )
    assert resolved["grid_size"] == 6
    assert resolved["set_count"] == 2
    assert resolved["multi_hit_mode"] is True
    assert params_hash.startswith("sha256:")


def test_cli_precedence_over_env(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "config.json"
    cfg.write_text('{"difficulty": "LIGHT"}', encoding="utf-8")
    monkeypatch.setenv("ROADTRIP_BINGO_DIFFICULTY", "MEDIUM")

    resolved, _hash, _ = resolve_parameters(
        config_path_str=str(cfg), cli_overrides={"difficulty": "HARD"}, env=os.environ
    )
    assert resolved["difficulty"] == "HARD"


def test_defaults_without_any_source():
    resolved, _hash, cfg_path = resolve_parameters(config_path_str=None, cli_overrides={}, env={})
    assert cfg_path is None
    assert resolved["grid_size"] == 5
    assert resolved["seed"] == {"engine": "py_random", "value": None}


def test_seed_env_sets_nested_keys():
    env = {"ROADTRIP_BINGO_SEED_VALUE": "77", "ROADTRIP_BINGO_SEED_ENGINE": "numpy_pcg64"}
    resolved, _hash, _ = resolve_parameters(config_path_str=None, cli_overrides={}, env=env)
    assert resolved["seed"] == {"engine": "numpy_pcg64", "value": 77}


def test_path_normalization_cli_vs_config(tmp_path: Path, monkeypatch):
    cfg_dir = tmp_path / "cfg"
    cfg_dir.mkdir()
    cfg = cfg_dir / "conf.yaml"
    cfg.write_text("out_cards: cards.json\nicons: pool.yaml\n", encoding="utf-8")

    monkeypatch.chdir(tmp_path)
    resolved, _hash, _ = resolve_parameters(
        config_path_str=str(cfg),
        cli_overrides={"out_report": "rep.json"},
        env={},
    )
    assert Path(resolved["out_cards"]).parent == cfg_dir.resolve()
    assert Path(resolved["icons"]).parent == cfg_dir.resolve()
    assert Path(resolved["out_report"]).parent == tmp_path.resolve()


def test_params_hash_contract_stability():
    base = {
        "grid_size": 5,
        "set_count": 3,
        "cards_per_set": 2,
        "leave_center_blank": True,
        "multi_hit_mode": True,
        "difficulty": "hard",
        "seed.value": 20250824,
        "out_cards": "cards.json",
        "log_level": "INFO",
    }
    _, h1, _ = resolve_parameters(config_path_str=None, cli_overrides=base, env={})

    altered = dict(base, log_level="DEBUG", out_cards="elsewhere.json", difficulty="HARD")
    _, h2, _ = resolve_parameters(config_path_str=None, cli_overrides=altered, env={})
    assert h1 == h2

    changed = dict(base, grid_size=6)
    _, h3, _ = resolve_parameters(config_path_str=None, cli_overrides=changed, env={})
    assert h3 != h1


def test_options_from_resolved():
    icons = [IconRef(id=str(i), name=str(i)) for i in range(9)]
    resolved, _hash, _ = resolve_parameters(
        config_path_str=None,
        cli_overrides={"grid_size": 3, "seed.value": 5, "same_card_per_set": True},
        env={},
    )
    opts = options_from_resolved(resolved, icons)
    assert opts.grid_size == 3
    assert opts.seed == 5
    assert opts.rng_engine == "py_random"
    assert opts.same_card_per_set is True
    assert list(opts.icons) == icons


def test_string_booleans_from_config_file(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        'leave_center_blank: "false"\nmulti_hit_mode: "yes"\nsame_card_per_set: "off"\n',
        encoding="utf-8",
    )
    icons = [IconRef(id=str(i), name=str(i)) for i in range(25)]
    resolved, _hash, _ = resolve_parameters(config_path_str=str(cfg), cli_overrides={}, env={})
    opts = options_from_resolved(resolved, icons)
    assert opts.leave_center_blank is False
    assert opts.multi_hit_mode is True
    assert opts.same_card_per_set is False


def test_scalar_seed_in_config_file_keeps_default_engine(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("grid_size: 3\nseed: 7\n", encoding="utf-8")
    icons = [IconRef(id=str(i), name=str(i)) for i in range(9)]
    resolved, _hash, _ = resolve_parameters(config_path_str=str(cfg), cli_overrides={}, env={})
    opts = options_from_resolved(resolved, icons)
    assert opts.seed == 7
    assert opts.rng_engine == "py_random"


def test_partial_seed_mapping_in_config_file(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("seed:\n  engine: numpy_pcg64\n", encoding="utf-8")
    monkeypatch.setenv("ROADTRIP_BINGO_SEED_VALUE", "11")
    resolved, _hash, _ = resolve_parameters(
        config_path_str=str(cfg), cli_overrides={}, env=os.environ
    )
    assert resolved["seed"] == {"engine": "numpy_pcg64", "value": 11}


def test_non_numeric_int_value_raises_typed_error():
    icons = [IconRef(id=str(i), name=str(i)) for i in range(9)]
    resolved, _hash, _ = resolve_parameters(
        config_path_str=None, cli_overrides={}, env={"ROADTRIP_BINGO_GRID_SIZE": "five"}
    )
    with pytest.raises(InvalidOptionsError, match="grid_size must be an integer"):
        options_from_resolved(resolved, icons)
