"""Multi-hit difficulty presets."""

from __future__ import annotations

import math
from typing import Dict, Union

from .errors import UnknownDifficultyError
from .models import Difficulty, DifficultySettings

DIFFICULTY_SETTINGS: Dict[Difficulty, DifficultySettings] = {
    Difficulty.LIGHT: DifficultySettings(min_percentage=20, max_percentage=30, min_hits=2, max_hits=3),
    Difficulty.MEDIUM: DifficultySettings(min_percentage=40, max_percentage=50, min_hits=2, max_hits=4),
    Difficulty.HARD: DifficultySettings(min_percentage=60, max_percentage=70, min_hits=3, max_hits=5),
}


def parse_difficulty(value: Union[Difficulty, str]) -> Difficulty:
    """Accept an enum member or a case-insensitive name."""
    if isinstance(value, Difficulty):
        return value
    if isinstance(value, str):
        try:
            return Difficulty[value.strip().upper()]
        except KeyError:
            pass
    raise UnknownDifficultyError(value)


def get_difficulty_settings(value: Union[Difficulty, str]) -> DifficultySettings:
    return DIFFICULTY_SETTINGS[parse_difficulty(value)]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def expected_multi_hit_count(
    grid_size: int, center_blank_applied: bool, difficulty: Union[Difficulty, str]
) -> int:
    """Average number of multi-hit cells for preview text.

    Generation never uses this value; each card draws its own percentage.
    """
    settings = get_difficulty_settings(difficulty)
    eligible = grid_size * grid_size - (1 if center_blank_applied else 0)
    avg_percentage = (settings.min_percentage + settings.max_percentage) / 2
    return round_half_up(eligible * avg_percentage / 100)
