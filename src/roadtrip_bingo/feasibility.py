from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .difficulty import parse_difficulty
from .errors import (
    DuplicateIconIdError,
    EmptyIconPoolError,
    InsufficientIconsError,
    InvalidGridSizeError,
    InvalidOptionsError,
)
from .models import MAX_GRID_SIZE, MIN_GRID_SIZE, GenerationOptions, IconRef
from .rng import ENGINES


@dataclass
class Feasibility:
    feasible: bool
    reasons: List[str]
    required: int


def center_blank_applies(grid_size: int) -> bool:
    # 3x3 grids never get a free center, even when one is requested.
    return grid_size % 2 == 1 and grid_size >= 5


def required_icon_count(grid_size: int, leave_center_blank: bool) -> int:
    blank = 1 if (leave_center_blank and center_blank_applies(grid_size)) else 0
    return grid_size * grid_size - blank


def check_icon_pool(
    *, icon_count: int, grid_size: int, leave_center_blank: bool
) -> Feasibility:
    required = required_icon_count(grid_size, leave_center_blank)
    reasons: List[str] = []
    if icon_count == 0:
        reasons.append("icon pool is empty")
    elif icon_count < required:
        reasons.append(f"Need at least {required} icons")
    return Feasibility(feasible=not reasons, reasons=reasons, required=required)


def _check_unique_ids(icons: Sequence[IconRef]) -> None:
    seen = set()
    for icon in icons:
        if icon.id in seen:
            raise DuplicateIconIdError(icon.id)
        seen.add(icon.id)


def validate_grid_size(grid_size: object) -> int:
    if (
        isinstance(grid_size, bool)
        or not isinstance(grid_size, int)
        or not MIN_GRID_SIZE <= grid_size <= MAX_GRID_SIZE
    ):
        raise InvalidGridSizeError(grid_size, MIN_GRID_SIZE, MAX_GRID_SIZE)
    return grid_size


def validate_rng_settings(engine: str, seed: Optional[int]) -> None:
    if (engine or "").strip().lower() not in ENGINES:
        raise InvalidOptionsError(
            f"Unsupported RNG engine: {engine!r} (expected one of {', '.join(ENGINES)})"
        )
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise InvalidOptionsError(f"seed must be a non-negative integer, got {seed!r}")


def validate_options(options: GenerationOptions) -> int:
    """Fail fast on unusable input; returns the per-card icon requirement."""
    icons = options.icons
    if not icons:
        raise EmptyIconPoolError()
    grid_size = validate_grid_size(options.grid_size)
    if options.set_count < 1:
        raise InvalidOptionsError(f"set_count must be >= 1, got {options.set_count}")
    if options.cards_per_set < 1:
        raise InvalidOptionsError(f"cards_per_set must be >= 1, got {options.cards_per_set}")
    validate_rng_settings(options.rng_engine, options.seed)
    _check_unique_ids(icons)
    if options.multi_hit_mode:
        parse_difficulty(options.difficulty)

    report = check_icon_pool(
        icon_count=len(icons),
        grid_size=grid_size,
        leave_center_blank=options.leave_center_blank,
    )
    if not report.feasible:
        raise InsufficientIconsError(report.required, len(icons))
    return report.required
