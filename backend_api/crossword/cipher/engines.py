from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..domain import BLOCKED, CrosswordPuzzle, distinct_letters
from .seeded import seed_from_id, seeded_shuffle

CellRef = Tuple[int, int]

# Share of distinct letters revealed when a puzzle does not list its own.
FALLBACK_REVEAL_RATIO = 0.25
MIN_FALLBACK_REVEALED = 2


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Cipher:
    """Letter <-> number substitution derived from a grid.

    number_grid mirrors the puzzle grid with 0 for blocked cells.
    initially_revealed keeps the order in which numbers were chosen.
    """

    number_grid: Tuple[Tuple[int, ...], ...]
    number_to_letter: Dict[int, str]
    letter_to_number: Dict[str, int]
    initially_revealed: Tuple[int, ...]

    @property
    def size(self) -> int:
        return len(self.number_to_letter)


def fallback_reveal_count(distinct: int) -> int:
    """max(2, floor(K * 0.25)), never more than K."""
    return min(distinct, max(MIN_FALLBACK_REVEALED, math.floor(distinct * FALLBACK_REVEAL_RATIO)))


# PUBLIC_INTERFACE
def derive_cipher(
    grid: Sequence[Sequence[str]],
    puzzle_id: str,
    revealed_letters: Optional[Sequence[str]] = None,
) -> Cipher:
    """Derive the substitution cipher and the initially revealed numbers.

    The i-th distinct letter (row-major first appearance) gets the i-th value
    of 1..K shuffled with the puzzle id's seed, so the same id and grid always
    produce the same cipher.

    Parameters:
        grid: validated rows of letters, BLOCKED for blocked cells
        puzzle_id: puzzle identifier, used as the shuffle seed
        revealed_letters: optional letters to reveal; letters that do not
            occur in the grid are ignored

    Returns:
        Cipher with both mapping directions, the number grid and the
        initially revealed numbers.
    """
    letters = distinct_letters(grid)
    numbers = seeded_shuffle(range(1, len(letters) + 1), seed_from_id(puzzle_id))

    letter_to_number = {letter: numbers[i] for i, letter in enumerate(letters)}
    number_to_letter = {n: letter for letter, n in letter_to_number.items()}
    number_grid = tuple(
        tuple(0 if cell == BLOCKED else letter_to_number[cell] for cell in row) for row in grid
    )

    revealed: List[int] = []
    if revealed_letters:
        for letter in revealed_letters:
            n = letter_to_number.get((letter or "").upper())
            if n is not None and n not in revealed:
                revealed.append(n)
    else:
        revealed = numbers[:fallback_reveal_count(len(letters))]

    return Cipher(
        number_grid=number_grid,
        number_to_letter=number_to_letter,
        letter_to_number=letter_to_number,
        initially_revealed=tuple(revealed),
    )


# PUBLIC_INTERFACE
def derive_for_puzzle(puzzle: CrosswordPuzzle) -> Cipher:
    """Validate the puzzle, then derive its cipher."""
    puzzle.validate()
    return derive_cipher(puzzle.grid, puzzle.id, puzzle.revealed_letters)


# Light-weight protocols so policies do not import the session module.
class _CellLike(Protocol):
    number: int
    value: str


@runtime_checkable
class _SessionLike(Protocol):
    """Minimal interface policies need from a play session."""

    answers: Dict[int, str]

    def cells_for(self, number: int) -> List[_CellLike]: ...

    def cell(self, row: int, col: int) -> Optional[_CellLike]: ...


class AnswerPolicy(Protocol):
    """Protocol for answer consistency policies."""

    name: str

    # PUBLIC_INTERFACE
    def update(self, session: _SessionLike, number: int, letter: str, cell: Optional[CellRef] = None) -> None:
        """Store letter (empty string clears) for number."""

    # PUBLIC_INTERFACE
    def decoder_letter(self, session: _SessionLike, number: int) -> Optional[str]:
        """Letter the decoder shows for number, or None when unknown."""


@dataclass
class LinkedPolicy:
    """Easy mode: one answer per number, shared by every cell bearing it."""

    name: str = "easy"

    # PUBLIC_INTERFACE
    def update(self, session: _SessionLike, number: int, letter: str, cell: Optional[CellRef] = None) -> None:
        if letter:
            session.answers[number] = letter
        else:
            session.answers.pop(number, None)
        for state in session.cells_for(number):
            state.value = letter

    # PUBLIC_INTERFACE
    def decoder_letter(self, session: _SessionLike, number: int) -> Optional[str]:
        # Shows what the player typed, right or wrong.
        return session.answers.get(number) or None


@dataclass
class IndependentPolicy:
    """Hard mode: every cell keeps its own answer.

    The decoder only shows a letter for a number once all of its cells hold
    the same non-empty value.
    """

    name: str = "hard"

    # PUBLIC_INTERFACE
    def update(self, session: _SessionLike, number: int, letter: str, cell: Optional[CellRef] = None) -> None:
        if cell is None:
            raise ValueError("Independent policy needs the cell being edited.")
        state = session.cell(*cell)
        if state is None or state.number != number:
            raise ValueError(f"Cell {cell} does not carry number {number}.")
        state.value = letter

    # PUBLIC_INTERFACE
    def decoder_letter(self, session: _SessionLike, number: int) -> Optional[str]:
        values = [state.value for state in session.cells_for(number)]
        if not values or not all(values):
            return None
        if len({v.casefold() for v in values}) != 1:
            return None
        return values[0]
