from __future__ import annotations

import hashlib
import json
from typing import Dict, Iterable, List, Union

from .models import Card, Cell, FilledCell, GenerationResult


def cell_signature(cell: Cell) -> Union[None, List[object]]:
    if isinstance(cell, FilledCell):
        return [cell.icon.id, cell.hit_count]
    return None


def card_structure(card: Card) -> List[List[object]]:
    """Icon id and hit count per position; free spaces become ``None``."""
    return [[cell_signature(cell) for cell in row] for row in card.grid]


def card_fingerprint(card: Card) -> str:
    payload = json.dumps(card_structure(card), ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def cards_hash(cards: Iterable[Card]) -> str:
    hashes = [card_fingerprint(c) for c in cards]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def result_hash(result: GenerationResult) -> str:
    tagged: List[Dict[str, object]] = [
        {"identifier": s.identifier, "cards": [card_fingerprint(c) for c in s.cards]}
        for s in result.card_sets
    ]
    payload = json.dumps(tagged, ensure_ascii=True, sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
