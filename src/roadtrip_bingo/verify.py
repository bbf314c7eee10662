from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .difficulty import get_difficulty_settings, round_half_up
from .feasibility import required_icon_count
from .identifier import IDENTIFIER_PATTERN
from .layout import free_space_position
from .models import Card, GenerationOptions, GenerationResult
from .multihit import eligible_positions
from .uniqueness import card_fingerprint


@dataclass
class MultiHitReport:
    checked: bool
    cards_out_of_range: int
    cells_out_of_range: int


def compute_icon_frequencies(cards: Sequence[Card], pool_ids: Sequence[str] = ()) -> Dict[str, int]:
    counts: Counter[str] = Counter()
    for card in cards:
        counts.update(card.icon_ids())
    # ensure all pool icons present with 0
    for icon_id in pool_ids:
        counts.setdefault(icon_id, 0)
    return dict(counts)


def check_no_duplicates_within_cards(cards: Sequence[Card]) -> bool:
    for card in cards:
        ids = card.icon_ids()
        if len(ids) != len(set(ids)):
            return False
    return True


def check_free_space(cards: Sequence[Card], *, grid_size: int, leave_center_blank: bool) -> bool:
    expected = free_space_position(grid_size, leave_center_blank)
    needed = required_icon_count(grid_size, leave_center_blank)
    for card in cards:
        if card.grid_size != grid_size or any(len(row) != grid_size for row in card.grid):
            return False
        free = [(c.row, c.col) for c in card.free_space_cells()]
        if free != ([expected] if expected else []):
            return False
        if len(card.filled_cells()) != needed:
            return False
    return True


def check_multi_hit(cards: Sequence[Card], options: GenerationOptions) -> MultiHitReport:
    if not options.multi_hit_mode:
        bad_cards = sum(1 for card in cards if card.multi_hit_cells())
        bad_cells = sum(
            1 for card in cards for cell in card.filled_cells() if cell.hit_count != 1
        )
        return MultiHitReport(checked=False, cards_out_of_range=bad_cards, cells_out_of_range=bad_cells)

    settings = get_difficulty_settings(options.difficulty)
    bad_cards = 0
    bad_cells = 0
    for card in cards:
        eligible = len(eligible_positions(card.grid))
        low = round_half_up(eligible * settings.min_percentage / 100)
        high = round_half_up(eligible * settings.max_percentage / 100)
        marked = card.multi_hit_cells()
        # one cell of slack for rounding at the range edges
        if not (low - 1 <= len(marked) <= high + 1):
            bad_cards += 1
        for cell in card.filled_cells():
            if cell.is_multi_hit:
                ok = settings.min_hits <= cell.hit_count <= settings.max_hits
                ok = ok and not cell.icon.exclude_from_multi_hit
            else:
                ok = cell.hit_count == 1
            if not ok:
                bad_cells += 1
    return MultiHitReport(checked=True, cards_out_of_range=bad_cards, cells_out_of_range=bad_cells)


def check_same_card_per_set(result: GenerationResult) -> bool:
    for card_set in result.card_sets:
        if len({card_fingerprint(c) for c in card_set.cards}) > 1:
            return False
    return True


def chi2_wilson_hilferty_pvalue(stat: float, df: int) -> float:
    if df <= 0:
        return 1.0
    # Wilson-Hilferty approximation: transform chi-square to normal
    t = (stat / df) ** (1.0 / 3.0)
    mu = 1.0 - 2.0 / (9.0 * df)
    sigma = math.sqrt(2.0 / (9.0 * df))
    z = (t - mu) / sigma

    def phi(val: float) -> float:
        return 0.5 * (1.0 + math.erf(val / math.sqrt(2.0)))

    return max(0.0, min(1.0, 1.0 - phi(z)))


def usage_uniformity(freqs: Dict[str, int], alpha: float = 0.05) -> Dict[str, object]:
    """Chi-square test that every pool icon is drawn equally often."""
    total = sum(freqs.values())
    k = len(freqs)
    if total == 0 or k == 0:
        return {"max_minus_min": 0, "chi2": {"stat": 0.0, "df": 0, "p_value": 1.0}}
    expected = total / k
    stat = sum((count - expected) ** 2 / expected for count in freqs.values())
    df = max(k - 1, 1)
    p = chi2_wilson_hilferty_pvalue(stat, df)
    return {
        "max_minus_min": max(freqs.values()) - min(freqs.values()),
        "chi2": {"stat": round(stat, 6), "df": df, "p_value": round(p, 6)},
        "alpha": alpha,
        "engine": "wilson_hilferty",
    }


def verify(result: GenerationResult, options: GenerationOptions) -> Dict[str, object]:
    cards = result.all_cards()
    pool_ids: List[str] = [icon.id for icon in options.icons]
    freqs = compute_icon_frequencies(cards, pool_ids)
    identifiers = [s.identifier for s in result.card_sets]

    ok_set_count = len(result.card_sets) == options.set_count
    ok_cards_per_set = all(len(s.cards) == options.cards_per_set for s in result.card_sets)
    ok_identifiers = all(IDENTIFIER_PATTERN.match(i) for i in identifiers)
    ok_no_dupes = check_no_duplicates_within_cards(cards)
    ok_free_space = check_free_space(
        cards, grid_size=options.grid_size, leave_center_blank=options.leave_center_blank
    )
    multi = check_multi_hit(cards, options)
    ok_multi = multi.cards_out_of_range == 0 and multi.cells_out_of_range == 0
    ok_same = check_same_card_per_set(result) if options.same_card_per_set else True

    ok = all(
        [ok_set_count, ok_cards_per_set, ok_identifiers, ok_no_dupes, ok_free_space, ok_multi, ok_same]
    )
    return {
        "set_count": len(result.card_sets),
        "card_count": len(cards),
        "distinct_cards": len({card_fingerprint(c) for c in cards}),
        "identifiers": identifiers,
        "duplicate_identifiers": len(identifiers) - len(set(identifiers)),
        "frequencies": freqs,
        "multi_hit": {
            "checked": multi.checked,
            "cards_out_of_range": multi.cards_out_of_range,
            "cells_out_of_range": multi.cells_out_of_range,
            "total_marked": sum(len(c.multi_hit_cells()) for c in cards),
        },
        "tests": {"usage": usage_uniformity(freqs)},
        "ok_set_count": ok_set_count,
        "ok_cards_per_set": ok_cards_per_set,
        "ok_identifier_format": ok_identifiers,
        "ok_no_duplicates_within_cards": ok_no_dupes,
        "ok_free_space": ok_free_space,
        "ok_multi_hit": ok_multi,
        "ok_same_card_per_set": ok_same,
        "ok": ok,
    }
