from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, MutableSequence, Optional, Sequence, TypeVar

import numpy as np

from .errors import InvalidOptionsError

T = TypeVar("T")

ENGINES = ("py_random", "numpy_pcg64")


@dataclass
class RandomSource:
    """Injectable randomness used by every sampling step of the engine."""

    engine: str

    def randint(self, a: int, b: int) -> int:
        raise NotImplementedError

    def random(self) -> float:
        raise NotImplementedError

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def choice(self, seq: Sequence[T]) -> T:
        raise NotImplementedError

    def shuffle(self, arr: MutableSequence[T]) -> None:
        raise NotImplementedError

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        raise NotImplementedError


class PyRandomSource(RandomSource):
    def __init__(self, seed: Optional[int] = None):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def random(self) -> float:
        return self._rng.random()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def shuffle(self, arr: MutableSequence[T]) -> None:
        self._rng.shuffle(arr)

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        return self._rng.sample(list(seq), k)


class NumpyPCG64Source(RandomSource):
    # Items may be arbitrary objects, so draws go through indices rather than
    # letting numpy coerce the sequence into an array.
    def __init__(self, seed: Optional[int] = None):
        super().__init__(engine="numpy_pcg64")
        self._rng = np.random.Generator(np.random.PCG64(seed))

    def randint(self, a: int, b: int) -> int:
        return int(self._rng.integers(low=a, high=b + 1))

    def random(self) -> float:
        return float(self._rng.random())

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self._rng.integers(len(seq)))]

    def shuffle(self, arr: MutableSequence[T]) -> None:
        order = self._rng.permutation(len(arr))
        arr[:] = [arr[int(i)] for i in order]

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        idxs = self._rng.choice(len(seq), size=k, replace=False)
        return [seq[int(i)] for i in idxs]


def create_rng(engine: str, seed: Optional[int] = None) -> RandomSource:
    """Build a random source; ``seed=None`` draws fresh OS entropy."""
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise InvalidOptionsError(f"Unsupported RNG engine: {engine}")
