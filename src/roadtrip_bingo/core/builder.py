"""Card generation engine: icon pool + options -> card sets."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..feasibility import validate_options
from ..identifier import generate_identifier
from ..layout import place_icons, sample_card_icons
from ..models import DEFAULT_TITLE, Card, CardSet, GenerationOptions, GenerationResult
from ..multihit import apply_multi_hit
from ..rng import RandomSource, create_rng

logger = logging.getLogger(__name__)


class BingoCardBuilder:
    """Builds card sets for one generation call.

    Holds no state between calls; randomness comes from the ``rng`` passed to
    :meth:`build` or, failing that, one created from the options' seed.
    """

    def build(self, options: GenerationOptions, rng: Optional[RandomSource] = None) -> GenerationResult:
        required = validate_options(options)
        if rng is None:
            rng = create_rng(options.rng_engine, options.seed)

        title = (options.title or "").strip() or DEFAULT_TITLE
        logger.debug(
            "Generating %d set(s) x %d card(s), %dx%d grid, %d icons per card",
            options.set_count,
            options.cards_per_set,
            options.grid_size,
            options.grid_size,
            required,
        )

        card_sets: List[CardSet] = []
        for _ in range(options.set_count):
            identifier = generate_identifier(rng)
            if options.same_card_per_set:
                card = self._build_card(options, title, required, rng)
                cards = [card] * options.cards_per_set
            else:
                cards = [
                    self._build_card(options, title, required, rng)
                    for _ in range(options.cards_per_set)
                ]
            card_sets.append(CardSet(identifier=identifier, cards=tuple(cards)))

        return GenerationResult(card_sets=tuple(card_sets))

    def _build_card(
        self,
        options: GenerationOptions,
        title: str,
        required: int,
        rng: RandomSource,
    ) -> Card:
        icons = sample_card_icons(options.icons, required, rng)
        grid = place_icons(icons, options.grid_size, options.leave_center_blank)
        if options.multi_hit_mode:
            grid = apply_multi_hit(
                grid,
                options.difficulty,
                rng,
                avoid_clustering=options.avoid_multi_hit_clustering,
            )
        return Card(title=title, grid=grid)


def generate_bingo_cards(
    options: GenerationOptions, rng: Optional[RandomSource] = None
) -> GenerationResult:
    return BingoCardBuilder().build(options, rng)
