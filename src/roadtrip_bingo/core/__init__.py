"""Core module for bingo card generation."""

from .builder import BingoCardBuilder, generate_bingo_cards

__all__ = ["BingoCardBuilder", "generate_bingo_cards"]
