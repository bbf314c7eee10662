"""Typed failures raised by the card generation engine.

Every error here is detected before any sampling starts, so callers never
receive a partial result.
"""

from __future__ import annotations


class BingoGenerationError(ValueError):
    """Base class for input-validation failures of the engine."""


class EmptyIconPoolError(BingoGenerationError):
    def __init__(self) -> None:
        super().__init__("No icons available")


class InsufficientIconsError(BingoGenerationError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Need at least {required} icons (got {available})")


class InvalidGridSizeError(BingoGenerationError):
    def __init__(self, grid_size: object, min_size: int, max_size: int) -> None:
        self.grid_size = grid_size
        super().__init__(f"Grid size must be between {min_size} and {max_size}, got {grid_size!r}")


class UnknownDifficultyError(BingoGenerationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown difficulty: {value!r} (expected LIGHT, MEDIUM or HARD)")


class InvalidOptionsError(BingoGenerationError):
    pass


class DuplicateIconIdError(BingoGenerationError):
    def __init__(self, icon_id: str) -> None:
        self.icon_id = icon_id
        super().__init__(f"Icon id appears more than once in the pool: {icon_id!r}")
