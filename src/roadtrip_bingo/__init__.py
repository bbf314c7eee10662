"""Road-trip bingo card generation."""

from .core import BingoCardBuilder, generate_bingo_cards
from .difficulty import expected_multi_hit_count, get_difficulty_settings
from .errors import (
    BingoGenerationError,
    DuplicateIconIdError,
    EmptyIconPoolError,
    InsufficientIconsError,
    InvalidGridSizeError,
    InvalidOptionsError,
    UnknownDifficultyError,
)
from .models import (
    Card,
    CardSet,
    Difficulty,
    DifficultySettings,
    FilledCell,
    FreeSpaceCell,
    GenerationOptions,
    GenerationResult,
    IconRef,
)
from .version import __version__

__all__ = [
    "BingoCardBuilder",
    "BingoGenerationError",
    "Card",
    "CardSet",
    "Difficulty",
    "DifficultySettings",
    "DuplicateIconIdError",
    "EmptyIconPoolError",
    "FilledCell",
    "FreeSpaceCell",
    "GenerationOptions",
    "GenerationResult",
    "IconRef",
    "InsufficientIconsError",
    "InvalidGridSizeError",
    "InvalidOptionsError",
    "UnknownDifficultyError",
    "__version__",
    "expected_multi_hit_count",
    "generate_bingo_cards",
    "get_difficulty_settings",
]
