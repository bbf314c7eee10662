"""Multi-hit annotation: mark a share of cells as needing several sightings."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Tuple, Union

from .difficulty import get_difficulty_settings, round_half_up
from .models import Cell, Difficulty, FilledCell, Grid
from .rng import RandomSource

logger = logging.getLogger(__name__)

# Anti-clustering only kicks in where a grid has room to spread out.
MIN_GRID_FOR_SPREAD = 5

Position = Tuple[int, int]


def eligible_positions(grid: Grid) -> List[Position]:
    return [
        (cell.row, cell.col)
        for row in grid
        for cell in row
        if isinstance(cell, FilledCell) and not cell.icon.exclude_from_multi_hit
    ]


def _is_adjacent(a: Position, b: Position) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) <= 1


def select_positions(
    candidates: List[Position],
    count: int,
    rng: RandomSource,
    *,
    avoid_clustering: bool = False,
    grid_size: int = 0,
) -> List[Position]:
    shuffled = list(candidates)
    rng.shuffle(shuffled)
    if count >= len(shuffled):
        return shuffled
    if not avoid_clustering or grid_size < MIN_GRID_FOR_SPREAD:
        return shuffled[:count]

    selected: List[Position] = []
    for pos in shuffled:
        if len(selected) >= count:
            break
        if not any(_is_adjacent(pos, other) for other in selected):
            selected.append(pos)
    # Top up from the same shuffled order when spreading ran out of room.
    for pos in shuffled:
        if len(selected) >= count:
            break
        if pos not in selected:
            selected.append(pos)
    return selected


def apply_multi_hit(
    grid: Grid,
    difficulty: Union[Difficulty, str],
    rng: RandomSource,
    *,
    avoid_clustering: bool = False,
) -> Grid:
    """Return a copy of ``grid`` with a random subset of cells marked multi-hit."""
    settings = get_difficulty_settings(difficulty)
    candidates = eligible_positions(grid)
    target_percentage = rng.uniform(settings.min_percentage, settings.max_percentage)
    target_count = round_half_up(len(candidates) * target_percentage / 100)

    chosen = select_positions(
        candidates,
        target_count,
        rng,
        avoid_clustering=avoid_clustering,
        grid_size=len(grid),
    )
    hits: Dict[Position, int] = {
        pos: rng.randint(settings.min_hits, settings.max_hits) for pos in chosen
    }
    logger.debug(
        "multi-hit: %.1f%% of %d eligible cells -> %d marked",
        target_percentage,
        len(candidates),
        len(hits),
    )

    def annotate(cell: Cell) -> Cell:
        if isinstance(cell, FilledCell) and (cell.row, cell.col) in hits:
            return replace(cell, hit_count=hits[(cell.row, cell.col)], is_multi_hit=True)
        return cell

    return tuple(tuple(annotate(cell) for cell in row) for row in grid)
