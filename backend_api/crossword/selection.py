from __future__ import annotations

import random
from enum import Enum
from typing import Any, Collection, Iterable, List, Optional, Tuple

from .domain import CrosswordPuzzle, Language
from .exceptions import AllPuzzlesSolvedError, NoPuzzlesAvailableError


# PUBLIC_INTERFACE
class SizeCategory(str, Enum):
    """Puzzle size buckets by row count (inclusive ranges)."""

    SMALL = "small"
    MEDIUM = "medium"
    BIG = "big"
    ANY = "any"

    @property
    def size_range(self) -> Tuple[int, int]:
        return _SIZE_RANGES[self]

    def contains(self, rows: int) -> bool:
        low, high = self.size_range
        return low <= rows <= high

    @classmethod
    def parse(cls, value: Any) -> "SizeCategory":
        if isinstance(value, SizeCategory):
            return value
        key = (value or "any").strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Invalid size {value!r}. Must be one of: {', '.join(c.value for c in cls)}"
            ) from None


_SIZE_RANGES = {
    SizeCategory.SMALL: (5, 8),
    SizeCategory.MEDIUM: (9, 14),
    SizeCategory.BIG: (15, 20),
    SizeCategory.ANY: (1, 1000),
}


# PUBLIC_INTERFACE
def filter_puzzles(
    puzzles: Iterable[CrosswordPuzzle],
    language: Optional[Language] = None,
    size_category: SizeCategory = SizeCategory.ANY,
    solved_ids: Collection[str] = (),
) -> List[CrosswordPuzzle]:
    """Puzzles matching language (None = any) and size, minus solved ids."""
    return [
        p
        for p in puzzles
        if (language is None or p.language == language)
        and size_category.contains(p.size.rows)
        and p.id not in solved_ids
    ]


# PUBLIC_INTERFACE
def select_puzzle(
    puzzles: Iterable[CrosswordPuzzle],
    size_category: SizeCategory,
    language: Language,
    solved_ids: Optional[Collection[str]] = None,
    seed: Optional[Any] = None,
) -> CrosswordPuzzle:
    """Pick one puzzle of the requested size and language.

    Candidates are ordered by id so that a given seed always picks the same
    puzzle from the same store. Without a seed the pick is uniformly random.

    Raises:
        AllPuzzlesSolvedError: puzzles matched, but solved_ids covered them all.
        NoPuzzlesAvailableError: nothing matched language and size at all.
    """
    matching = filter_puzzles(puzzles, language, size_category)
    if not matching:
        raise NoPuzzlesAvailableError(
            f"No {size_category.value} puzzles available in {language.value}.",
            language=language.value,
            size_category=size_category.value,
        )

    candidates = sorted(
        (p for p in matching if not solved_ids or p.id not in solved_ids),
        key=lambda p: p.id,
    )
    if not candidates:
        raise AllPuzzlesSolvedError(
            f"All {size_category.value} puzzles in {language.value} have been solved.",
            language=language.value,
            size_category=size_category.value,
        )

    rng = random.Random(seed) if seed is not None else random
    return rng.choice(candidates)
