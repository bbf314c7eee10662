from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence, Tuple

import yaml

from .errors import InvalidOptionsError
from .models import DEFAULT_TITLE, GenerationOptions, IconRef

ENV_PREFIX = "ROADTRIP_BINGO_"

PATH_KEYS = ("icons", "out_cards", "out_report", "log_file", "summary_csv")

INT_KEYS = {"grid_size", "set_count", "cards_per_set", "seed.value"}
BOOL_KEYS = {
    "leave_center_blank",
    "same_card_per_set",
    "multi_hit_mode",
    "avoid_multi_hit_clustering",
}


def _read_config_file(config_path: Path | None) -> Dict[str, Any]:
    if not config_path:
        return {}
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("Top-level YAML config must be a mapping")
        return data
    if suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON config must be a mapping")
        return data
    raise ValueError(f"Unsupported config extension: {suffix}")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _collect_env_vars(env: Mapping[str, str]) -> Dict[str, Any]:
    """Map ENV variables with ROADTRIP_BINGO_ prefix to config keys.

    We use an explicit map to avoid ambiguity. Keys not present are ignored.
    """
    mapping: Dict[str, str] = {
        # Card layout
        f"{ENV_PREFIX}GRID_SIZE": "grid_size",
        f"{ENV_PREFIX}SET_COUNT": "set_count",
        f"{ENV_PREFIX}CARDS_PER_SET": "cards_per_set",
        f"{ENV_PREFIX}TITLE": "title",
        f"{ENV_PREFIX}LEAVE_CENTER_BLANK": "leave_center_blank",
        f"{ENV_PREFIX}SAME_CARD_PER_SET": "same_card_per_set",
        # Multi-hit
        f"{ENV_PREFIX}MULTI_HIT_MODE": "multi_hit_mode",
        f"{ENV_PREFIX}DIFFICULTY": "difficulty",
        f"{ENV_PREFIX}AVOID_MULTI_HIT_CLUSTERING": "avoid_multi_hit_clustering",
        # Inputs
        f"{ENV_PREFIX}ICONS": "icons",
        # Seed
        f"{ENV_PREFIX}SEED_VALUE": "seed.value",
        f"{ENV_PREFIX}SEED_ENGINE": "seed.engine",
        # Output & UX
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FORMAT": "log_format",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
        f"{ENV_PREFIX}OUT_CARDS": "out_cards",
        f"{ENV_PREFIX}OUT_REPORT": "out_report",
        f"{ENV_PREFIX}SUMMARY_CSV": "summary_csv",
    }

    result: Dict[str, Any] = {}
    for env_key, cfg_key in mapping.items():
        if env_key not in env:
            continue
        raw = env[env_key]
        if cfg_key in INT_KEYS:
            try:
                result[cfg_key] = int(raw)
            except ValueError:
                result[cfg_key] = raw
        elif cfg_key in BOOL_KEYS:
            result[cfg_key] = _parse_bool(raw)
        else:
            result[cfg_key] = raw

    return result


def _set_nested(config: Dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = dotted_key.split(".")
    cursor = config
    for part in parts[:-1]:
        if part not in cursor or not isinstance(cursor[part], dict):
            cursor[part] = {}
        cursor = cursor[part]
    cursor[parts[-1]] = value


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = json.loads(json.dumps(base))  # deep copy via JSON
    for key, value in overrides.items():
        if "." in key:
            _set_nested(merged, key, value)
        else:
            merged[key] = value
    return merged


def _flatten_seed(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Turn `seed: 7` or a partial `seed:` mapping into dotted keys.

    A plain top-level `seed` would otherwise replace the whole default mapping.
    """
    if "seed" not in cfg:
        return cfg
    out = dict(cfg)
    seed = out.pop("seed")
    if isinstance(seed, Mapping):
        for key, value in seed.items():
            out[f"seed.{key}"] = value
    elif seed is not None:
        out["seed.value"] = seed
    return out


def canonical_json_dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=True, sort_keys=True, separators=(",", ":"))


def _extract(path: str, source: Mapping[str, Any]) -> Any:
    cur: Any = source
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return None
        cur = cur[part]
    return cur


def compute_params_hash(resolved: Mapping[str, Any]) -> str:
    include = {
        "grid_size",
        "set_count",
        "cards_per_set",
        "title",
        "leave_center_blank",
        "same_card_per_set",
        "multi_hit_mode",
        "difficulty",
        "avoid_multi_hit_clustering",
        # seed
        "seed.engine",
        "seed.value",
    }

    contract: Dict[str, Any] = {}
    for item in include:
        value = _extract(item, resolved)
        if value is not None:
            contract[item] = value

    # difficulty names are case-insensitive
    if isinstance(contract.get("difficulty"), str):
        contract["difficulty"] = contract["difficulty"].strip().upper()

    digest = hashlib.sha256(canonical_json_dumps(contract).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def resolve_paths(
    resolved: Dict[str, Any],
    config_file: Path | None,
    cli_overrides: Dict[str, Any],
) -> Dict[str, Any]:
    """Normalize paths per policy.

    - Paths from config file: resolve relative to config directory
    - Paths from CLI: resolve relative to CWD
    """
    cwd = Path.cwd()
    cfg_dir = config_file.parent if config_file else None

    def normalize(path_value: str | None, is_cli: bool) -> str | None:
        if path_value is None or path_value == "":
            return None
        p = Path(path_value)
        if p.is_absolute():
            return str(p)
        base = cwd if is_cli else (cfg_dir or cwd)
        return str((base / p).resolve())

    result = dict(resolved)
    cli_keys = {k for k in cli_overrides.keys() if k in PATH_KEYS}

    for key in PATH_KEYS:
        value = resolved.get(key)
        if value is None:
            continue
        result[key] = normalize(str(value), key in cli_keys)

    return result


def resolve_parameters(
    *,
    config_path_str: str | None,
    cli_overrides: Dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, Any], str, Path | None]:
    """Resolve parameters with precedence CLI > ENV > config > defaults.

    Returns (resolved_params, params_hash, config_path)
    """
    config_path = Path(config_path_str).resolve() if config_path_str else None
    file_cfg = _flatten_seed(_read_config_file(config_path)) if config_path else {}
    env_map = _collect_env_vars(os.environ if env is None else env)

    defaults: Dict[str, Any] = {
        "grid_size": 5,
        "set_count": 1,
        "cards_per_set": 1,
        "title": DEFAULT_TITLE,
        "leave_center_blank": False,
        "same_card_per_set": False,
        "multi_hit_mode": False,
        "difficulty": "MEDIUM",
        "avoid_multi_hit_clustering": False,
        "seed": {"engine": "py_random", "value": None},
        "log_level": "INFO",
        "log_format": "text",
        "out_cards": "cards.json",
        "out_report": "report.json",
    }

    # Merge: config > defaults, then ENV, then CLI
    merged = _apply_overrides(defaults, file_cfg)
    merged = _apply_overrides(merged, env_map)
    merged = _apply_overrides(merged, cli_overrides)

    merged = resolve_paths(merged, config_path, cli_overrides)

    params_hash = compute_params_hash(merged)
    return merged, params_hash, config_path


def _as_int(resolved: Mapping[str, Any], key: str, default: int) -> int:
    raw = _extract(key, resolved)
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise InvalidOptionsError(f"{key} must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidOptionsError(f"{key} must be an integer, got {raw!r}") from None


def _as_bool(resolved: Mapping[str, Any], key: str) -> bool:
    raw = resolved.get(key, False)
    if isinstance(raw, str):
        return _parse_bool(raw)
    return bool(raw)


def options_from_resolved(resolved: Mapping[str, Any], icons: Sequence[IconRef]) -> GenerationOptions:
    """Build engine options; malformed values raise ``InvalidOptionsError``."""
    seed_value = _extract("seed.value", resolved)
    return GenerationOptions(
        icons=list(icons),
        grid_size=_as_int(resolved, "grid_size", 5),
        set_count=_as_int(resolved, "set_count", 1),
        cards_per_set=_as_int(resolved, "cards_per_set", 1),
        title=str(resolved.get("title") or DEFAULT_TITLE),
        leave_center_blank=_as_bool(resolved, "leave_center_blank"),
        same_card_per_set=_as_bool(resolved, "same_card_per_set"),
        multi_hit_mode=_as_bool(resolved, "multi_hit_mode"),
        difficulty=str(resolved.get("difficulty", "MEDIUM")),
        avoid_multi_hit_clustering=_as_bool(resolved, "avoid_multi_hit_clustering"),
        seed=None if seed_value is None else _as_int(resolved, "seed.value", 0),
        rng_engine=str(_extract("seed.engine", resolved) or "py_random"),
    )
