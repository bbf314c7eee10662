from __future__ import annotations

import csv
import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from .models import (
    Card,
    CardSet,
    Cell,
    Difficulty,
    FilledCell,
    FreeSpaceCell,
    GenerationOptions,
    GenerationResult,
    IconRef,
)
from .uniqueness import card_fingerprint, cards_hash, result_hash

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"}


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def check_outputs_writable(paths: Iterable[Path], *, overwrite: bool) -> None:
    """Raise before anything is written if one of the targets already exists."""
    if overwrite:
        return
    existing = [str(p) for p in paths if p.exists()]
    if existing:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {', '.join(existing)}"
        )


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def icon_from_dict(data: Mapping[str, Any]) -> IconRef:
    if "id" not in data:
        raise ValueError(f"Icon entry is missing 'id': {dict(data)!r}")
    icon_id = str(data["id"])
    return IconRef(
        id=icon_id,
        name=str(data.get("name") or icon_id),
        image=data.get("image"),
        exclude_from_multi_hit=bool(data.get("exclude_from_multi_hit", False)),
    )


def icon_to_dict(icon: IconRef) -> Dict[str, object]:
    return {
        "id": icon.id,
        "name": icon.name,
        "image": icon.image,
        "exclude_from_multi_hit": icon.exclude_from_multi_hit,
    }


def _icons_from_directory(directory: Path) -> List[IconRef]:
    icons: List[IconRef] = []
    for p in sorted(directory.iterdir()):
        if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES:
            name = p.stem.replace("_", " ").replace("-", " ").strip().title()
            icons.append(IconRef(id=p.stem, name=name or p.stem, image=str(p)))
    return icons


def load_icon_pool(path: Path) -> List[IconRef]:
    """Read an icon pool from a JSON/YAML list or a directory of images."""
    if not path.exists():
        raise FileNotFoundError(f"Icon pool not found: {path}")
    if path.is_dir():
        return _icons_from_directory(path)

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or []
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported icon pool extension: {suffix}")

    if isinstance(data, dict):
        data = data.get("icons", [])
    if not isinstance(data, list):
        raise ValueError("Icon pool must be a list or a mapping with an 'icons' list")
    return [icon_from_dict(entry) for entry in data]


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: Optional[int],
    rng_engine: str,
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "rng_engine": rng_engine,
        "hash_algorithm": "sha256",
    }


def cell_to_dict(cell: Cell) -> Dict[str, object]:
    if isinstance(cell, FreeSpaceCell):
        return {"row": cell.row, "col": cell.col, "free_space": True}
    return {
        "row": cell.row,
        "col": cell.col,
        "icon": icon_to_dict(cell.icon),
        "hit_count": cell.hit_count,
        "multi_hit": cell.is_multi_hit,
    }


def cell_from_dict(data: Mapping[str, Any]) -> Cell:
    row, col = int(data["row"]), int(data["col"])
    if data.get("free_space"):
        return FreeSpaceCell(row=row, col=col)
    return FilledCell(
        row=row,
        col=col,
        icon=icon_from_dict(data["icon"]),
        hit_count=int(data.get("hit_count", 1)),
        is_multi_hit=bool(data.get("multi_hit", False)),
    )


def card_to_dict(card: Card) -> Dict[str, object]:
    return {
        "title": card.title,
        "grid": [[cell_to_dict(cell) for cell in row] for row in card.grid],
        "fingerprint": card_fingerprint(card),
    }


def card_from_dict(data: Mapping[str, Any]) -> Card:
    grid = tuple(tuple(cell_from_dict(cell) for cell in row) for row in data["grid"])
    return Card(title=str(data.get("title", "")), grid=grid)


def result_to_dict(result: GenerationResult) -> Dict[str, object]:
    return {
        "card_sets": [
            {
                "identifier": card_set.identifier,
                "cards": [card_to_dict(card) for card in card_set.cards],
            }
            for card_set in result.card_sets
        ],
        "cards_hash": cards_hash(result.all_cards()),
        "result_hash": result_hash(result),
    }


def result_from_dict(data: Mapping[str, Any]) -> GenerationResult:
    sets = tuple(
        CardSet(
            identifier=str(entry["identifier"]),
            cards=tuple(card_from_dict(card) for card in entry["cards"]),
        )
        for entry in data.get("card_sets", [])
    )
    return GenerationResult(card_sets=sets)


def options_to_dict(options: GenerationOptions) -> Dict[str, object]:
    """Generation settings that a later ``verify`` run needs; icons excluded."""
    difficulty = options.difficulty
    return {
        "grid_size": options.grid_size,
        "set_count": options.set_count,
        "cards_per_set": options.cards_per_set,
        "title": options.title,
        "leave_center_blank": options.leave_center_blank,
        "same_card_per_set": options.same_card_per_set,
        "multi_hit_mode": options.multi_hit_mode,
        "difficulty": difficulty.value if isinstance(difficulty, Difficulty) else str(difficulty),
        "avoid_multi_hit_clustering": options.avoid_multi_hit_clustering,
    }


def options_from_dict(data: Mapping[str, Any], icons: List[IconRef]) -> GenerationOptions:
    return GenerationOptions(
        icons=icons,
        grid_size=int(data["grid_size"]),
        set_count=int(data.get("set_count", 1)),
        cards_per_set=int(data.get("cards_per_set", 1)),
        title=str(data.get("title", "")),
        leave_center_blank=bool(data.get("leave_center_blank", False)),
        same_card_per_set=bool(data.get("same_card_per_set", False)),
        multi_hit_mode=bool(data.get("multi_hit_mode", False)),
        difficulty=str(data.get("difficulty", Difficulty.MEDIUM.value)),
        avoid_multi_hit_clustering=bool(data.get("avoid_multi_hit_clustering", False)),
    )


def icons_in_result(result: GenerationResult) -> List[IconRef]:
    seen: Dict[str, IconRef] = {}
    for card in result.all_cards():
        for cell in card.filled_cells():
            seen.setdefault(cell.icon.id, cell.icon)
    return list(seen.values())


def emit_cards_json(
    path: Path,
    *,
    result: GenerationResult,
    options: GenerationOptions,
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = dict(result_to_dict(result))
    data["options"] = options_to_dict(options)
    data["run_meta"] = run_meta
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def emit_report_json(
    path: Path, *, report: Dict[str, object], mkdirs: bool, overwrite: bool
) -> None:
    write_json(path, report, mkdirs=mkdirs, overwrite=overwrite)


def emit_summary_csv(
    path: Path,
    *,
    freqs: Dict[str, int],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["icon_id", "total"])
        for icon_id in sorted(freqs.keys()):
            writer.writerow([icon_id, freqs[icon_id]])
