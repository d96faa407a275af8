"""Injectable random sources for tie-breaking.

Randomness is consumed in exactly two ways: choosing among tied candidates and
shuffling / jittering in the level-priority search. Both go through a
``RandomSource`` so tests can substitute a seeded or fixed sequence.
"""

# Court Rotation
# Copyright (C) 2025  Court Rotation developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import random
from typing import List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that yields floats in ``[0, 1)``."""

    def next(self) -> float: ...


class SeededRandom:
    """RandomSource backed by ``random.Random``.

    With ``seed=None`` the generator is seeded from the system, which is what
    a live session uses.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def next(self) -> float:
        return self._random.random()


class SequenceRandom:
    """RandomSource that cycles through a fixed list of values."""

    def __init__(self, values: Sequence[float]) -> None:
        if not values:
            raise ValueError("SequenceRandom needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Random values must lie in [0, 1): {value}")
        self._values = list(values)
        self._index = 0

    def next(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def choose(rng: RandomSource, items: Sequence[T]) -> T:
    """Pick one item uniformly at random."""
    if not items:
        raise ValueError("Cannot choose from an empty sequence")
    index = min(int(rng.next() * len(items)), len(items) - 1)
    return items[index]


def shuffled(rng: RandomSource, items: Sequence[T]) -> List[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = min(int(rng.next() * (i + 1)), i)
        result[i], result[j] = result[j], result[i]
    return result
