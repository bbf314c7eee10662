from __future__ import annotations

from typing import List, Sequence

from .feasibility import center_blank_applies
from .models import Cell, FilledCell, FreeSpaceCell, Grid, IconRef
from .rng import RandomSource


def sample_card_icons(pool: Sequence[IconRef], count: int, rng: RandomSource) -> List[IconRef]:
    """Sample ``count`` distinct icons in random order; the caller's pool is never reordered."""
    return rng.sample(pool, count)


def free_space_position(grid_size: int, leave_center_blank: bool) -> tuple[int, int] | None:
    if leave_center_blank and center_blank_applies(grid_size):
        center = grid_size // 2
        return center, center
    return None


def place_icons(icons: Sequence[IconRef], grid_size: int, leave_center_blank: bool) -> Grid:
    """Lay icons out row-major, skipping the free space if there is one."""
    free = free_space_position(grid_size, leave_center_blank)
    needed = grid_size * grid_size - (1 if free else 0)
    if len(icons) != needed:
        raise ValueError(f"Expected {needed} icons for a {grid_size}x{grid_size} grid, got {len(icons)}")

    stream = iter(icons)
    rows: List[tuple[Cell, ...]] = []
    for r in range(grid_size):
        row: List[Cell] = []
        for c in range(grid_size):
            if free == (r, c):
                row.append(FreeSpaceCell(row=r, col=c))
            else:
                row.append(FilledCell(row=r, col=c, icon=next(stream)))
        rows.append(tuple(row))
    return tuple(rows)
