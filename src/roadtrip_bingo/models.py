"""Value types shared by the engine, the verifier and the serializers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

DEFAULT_TITLE = "Road Trip Bingo"
MIN_GRID_SIZE = 3
MAX_GRID_SIZE = 8


@dataclass(frozen=True)
class IconRef:
    id: str
    name: str
    image: Optional[str] = None
    exclude_from_multi_hit: bool = False


class Difficulty(str, Enum):
    LIGHT = "LIGHT"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


@dataclass(frozen=True)
class DifficultySettings:
    min_percentage: int
    max_percentage: int
    min_hits: int
    max_hits: int


@dataclass(frozen=True)
class FilledCell:
    row: int
    col: int
    icon: IconRef
    hit_count: int = 1
    is_multi_hit: bool = False

    is_free_space = False


@dataclass(frozen=True)
class FreeSpaceCell:
    row: int
    col: int

    is_free_space = True
    is_multi_hit = False
    icon = None


Cell = Union[FilledCell, FreeSpaceCell]
Grid = Tuple[Tuple[Cell, ...], ...]


@dataclass(frozen=True)
class Card:
    title: str
    grid: Grid

    @property
    def grid_size(self) -> int:
        return len(self.grid)

    def cells(self) -> Iterator[Cell]:
        for row in self.grid:
            yield from row

    def filled_cells(self) -> List[FilledCell]:
        return [c for c in self.cells() if isinstance(c, FilledCell)]

    def free_space_cells(self) -> List[FreeSpaceCell]:
        return [c for c in self.cells() if isinstance(c, FreeSpaceCell)]

    def multi_hit_cells(self) -> List[FilledCell]:
        return [c for c in self.filled_cells() if c.is_multi_hit]

    def icon_ids(self) -> List[str]:
        return [c.icon.id for c in self.filled_cells()]


@dataclass(frozen=True)
class CardSet:
    identifier: str
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class GenerationResult:
    card_sets: Tuple[CardSet, ...]

    def all_cards(self) -> List[Card]:
        return [card for card_set in self.card_sets for card in card_set.cards]


@dataclass
class GenerationOptions:
    """User request for one generation call.

    ``difficulty`` may be a :class:`Difficulty` or its name; it is only
    resolved when ``multi_hit_mode`` is enabled.
    """

    icons: Sequence[IconRef] = field(default_factory=tuple)
    grid_size: int = 5
    set_count: int = 1
    cards_per_set: int = 1
    title: str = DEFAULT_TITLE
    leave_center_blank: bool = False
    same_card_per_set: bool = False
    multi_hit_mode: bool = False
    difficulty: Union[Difficulty, str] = Difficulty.MEDIUM
    avoid_multi_hit_clustering: bool = False
    seed: Optional[int] = None
    rng_engine: str = "py_random"
