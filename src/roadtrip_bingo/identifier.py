from __future__ import annotations

import re
import string

from .rng import RandomSource

IDENTIFIER_ALPHABET = string.ascii_uppercase + string.digits
IDENTIFIER_LENGTH = 3
IDENTIFIER_PREFIX = "ID:"
IDENTIFIER_PATTERN = re.compile(r"^ID:[A-Z0-9]{3}$")


def generate_identifier(rng: RandomSource) -> str:
    """Short tag players can copy by hand, e.g. ``ID:7QK``.

    Draws are independent per call; identifiers are not checked against each
    other, so two sets in one batch may collide (1 in 36**3).
    """
    chars = [rng.choice(IDENTIFIER_ALPHABET) for _ in range(IDENTIFIER_LENGTH)]
    return IDENTIFIER_PREFIX + "".join(chars)
