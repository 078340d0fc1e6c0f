"""
Reproducible pseudo-randomness for cipher derivation.

The cipher for a puzzle must come out identical on every reload without a
server round-trip, so it is driven by a tiny sine-based generator instead of
the random module. The arithmetic is fixed: changing it re-ciphers every
existing puzzle.
"""
from __future__ import annotations

import math
from typing import List, Sequence, TypeVar

T = TypeVar("T")


# PUBLIC_INTERFACE
def seed_from_id(puzzle_id: str) -> int:
    """Sum of the UTF-16 code units of the id.

    For ids made of BMP characters this is simply sum(ord(c)).
    """
    data = (puzzle_id or "").encode("utf-16-le")
    return sum(int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2))


# PUBLIC_INTERFACE
def pseudo_random(x: float) -> float:
    """Return frac(sin(x) * 10000), a value in [0, 1)."""
    v = math.sin(x) * 10000
    return v - math.floor(v)


# PUBLIC_INTERFACE
def seeded_shuffle(values: Sequence[T], seed: int) -> List[T]:
    """Fisher-Yates shuffle driven by pseudo_random(seed + i).

    Returns a new list; the input is left untouched.
    """
    result = list(values)
    for i in range(len(result) - 1, 0, -1):
        j = math.floor(pseudo_random(seed + i) * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result
