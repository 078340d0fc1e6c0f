"""
Puzzle-play state.

A PlaySession owns everything one player changes while solving one puzzle:
per-cell values, the linked answer map, the input mode and the difficulty
policy. Nothing here is global; create one session per puzzle being played.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..domain import BLOCKED, CrosswordPuzzle
from ..exceptions import PuzzleValidationError
from .engines import CellRef, Cipher, IndependentPolicy, derive_cipher
from .registry import get_policy


class InputMode(str, Enum):
    KEYBOARD = "keyboard"
    MOUSE = "mouse"


class CheckStatus(str, Enum):
    SOLVED = "solved"
    INCORRECT = "incorrect"
    INCOMPLETE = "incomplete"


@dataclass
class CellState:
    """State of one non-blocked cell.

    is_revealed and is_mouse_locked are independent reasons for a cell to be
    read-only; switching input mode never touches is_revealed.
    """

    row: int
    col: int
    letter: str
    number: int
    value: str = ""
    is_revealed: bool = False
    is_mouse_locked: bool = False

    @property
    def is_readonly(self) -> bool:
        return self.is_revealed or self.is_mouse_locked


@dataclass(frozen=True)
class DecoderEntry:
    number: int
    letter: Optional[str]
    revealed: bool


@dataclass(frozen=True)
class SolutionCheck:
    all_filled: bool
    all_correct: bool
    incorrect_cells: Tuple[CellRef, ...] = ()

    @property
    def status(self) -> CheckStatus:
        if not self.all_filled:
            return CheckStatus.INCOMPLETE
        if not self.all_correct:
            return CheckStatus.INCORRECT
        return CheckStatus.SOLVED

    @property
    def is_solved(self) -> bool:
        return self.status is CheckStatus.SOLVED


def normalize_letter(letter: Optional[str]) -> str:
    """Upper-case a typed letter; None or "" clears."""
    if not letter:
        return ""
    if len(letter) != 1 or not letter.isalpha():
        raise ValueError(f"Answer must be a single letter, got {letter!r}.")
    return letter.upper()


# PUBLIC_INTERFACE
class PlaySession:
    """Mutable answer state for one puzzle being played."""

    def __init__(
        self,
        puzzle_id: str,
        grid: Sequence[Sequence[str]],
        revealed_letters: Optional[Sequence[str]] = None,
        difficulty: str = "easy",
        input_mode: InputMode = InputMode.KEYBOARD,
    ):
        if not grid or any(len(row) != len(grid[0]) for row in grid):
            raise PuzzleValidationError("Grid must be a non-empty rectangle.")

        self.puzzle_id = puzzle_id
        self.cipher: Cipher = derive_cipher(grid, puzzle_id, revealed_letters)
        self.policy = get_policy(difficulty)
        self.input_mode = InputMode(input_mode)
        self.answers: Dict[int, str] = {}
        self.is_fully_revealed = False

        self._revealed = frozenset(self.cipher.initially_revealed)
        self._cells: List[List[Optional[CellState]]] = []
        self._by_number: Dict[int, List[CellState]] = {}
        for r, row in enumerate(grid):
            cells: List[Optional[CellState]] = []
            for c, letter in enumerate(row):
                if letter == BLOCKED:
                    cells.append(None)
                    continue
                state = CellState(row=r, col=c, letter=letter, number=self.cipher.number_grid[r][c])
                cells.append(state)
                self._by_number.setdefault(state.number, []).append(state)
            self._cells.append(cells)

        for number in self._revealed:
            letter = self.cipher.number_to_letter[number]
            self.answers[number] = letter
            for state in self._by_number[number]:
                state.value = letter
                state.is_revealed = True
        self.set_input_mode(self.input_mode)

    @classmethod
    def for_puzzle(
        cls,
        puzzle: CrosswordPuzzle,
        difficulty: str = "easy",
        input_mode: InputMode = InputMode.KEYBOARD,
    ) -> "PlaySession":
        """Validate puzzle and start a session for it."""
        puzzle.validate()
        return cls(puzzle.id, puzzle.grid, puzzle.revealed_letters, difficulty, input_mode)

    @property
    def difficulty(self) -> str:
        return self.policy.name

    @property
    def revealed_numbers(self) -> frozenset:
        return self._revealed

    def cell(self, row: int, col: int) -> Optional[CellState]:
        if 0 <= row < len(self._cells) and 0 <= col < len(self._cells[row]):
            return self._cells[row][col]
        return None

    def cells_for(self, number: int) -> List[CellState]:
        return list(self._by_number.get(number, []))

    def value_at(self, row: int, col: int) -> str:
        state = self.cell(row, col)
        return state.value if state else ""

    def values(self) -> List[List[str]]:
        """Current grid as typed, BLOCKED for blocked cells."""
        return [[state.value if state else BLOCKED for state in row] for row in self._cells]

    def _is_locked(self, number: int) -> bool:
        return self.is_fully_revealed or number in self._revealed

    # PUBLIC_INTERFACE
    def update_answer(self, number: int, letter: Optional[str], cell: Optional[CellRef] = None) -> bool:
        """Set (or clear, with an empty letter) the answer for number.

        Revealed numbers and fully revealed sessions are left untouched.

        Returns:
            True if the update was applied, False for a locked number.

        Raises:
            ValueError: unknown number, a letter that is not a single
                alphabetic character, or a missing/mismatched cell under the
                independent policy.
        """
        if number not in self.cipher.number_to_letter:
            raise ValueError(f"Unknown cipher number: {number}")
        if self._is_locked(number):
            return False
        self.policy.update(self, number, normalize_letter(letter), cell)
        return True

    # PUBLIC_INTERFACE
    def enter_letter(self, row: int, col: int, letter: Optional[str]) -> bool:
        """Keyboard entry into a cell. Ignored on blocked or read-only cells."""
        state = self.cell(row, col)
        if state is None or state.is_readonly:
            return False
        return self.update_answer(state.number, letter, (row, col))

    # PUBLIC_INTERFACE
    def pick_letter(self, row: int, col: int, letter: Optional[str]) -> bool:
        """Mouse entry: a letter chosen from the decoder for the selected cell."""
        if self.input_mode is not InputMode.MOUSE:
            return False
        state = self.cell(row, col)
        if state is None or state.is_revealed:
            return False
        return self.update_answer(state.number, letter, (row, col))

    def set_input_mode(self, mode: InputMode) -> None:
        self.input_mode = InputMode(mode)
        locked = self.input_mode is InputMode.MOUSE
        for row in self._cells:
            for state in row:
                if state is not None:
                    state.is_mouse_locked = locked and not state.is_revealed

    # PUBLIC_INTERFACE
    def set_difficulty(self, difficulty: str) -> None:
        """Switch the answer policy, carrying typed values across.

        Going to a linked policy keeps a number's value only if all of its
        cells agree on it; otherwise the number is cleared.
        """
        policy = get_policy(difficulty)
        if type(policy) is type(self.policy):
            return
        if isinstance(policy, IndependentPolicy):
            self.answers = {n: self.answers[n] for n in self.answers if self._is_locked(n)}
            self.policy = policy
            return

        agreed = {n: IndependentPolicy().decoder_letter(self, n) for n in self._by_number}
        self.policy = policy
        for number, letter in agreed.items():
            if not self._is_locked(number):
                policy.update(self, number, letter or "")

    # PUBLIC_INTERFACE
    def decoder_state(self, number: int) -> DecoderEntry:
        """What the letter decoder shows for number."""
        if number not in self.cipher.number_to_letter:
            raise ValueError(f"Unknown cipher number: {number}")
        if self._is_locked(number):
            return DecoderEntry(number, self.cipher.number_to_letter[number], True)
        return DecoderEntry(number, self.policy.decoder_letter(self, number), False)

    def decoder(self) -> Dict[int, DecoderEntry]:
        return {n: self.decoder_state(n) for n in sorted(self.cipher.number_to_letter)}

    # PUBLIC_INTERFACE
    def check_solution(self) -> SolutionCheck:
        """Compare every non-revealed cell with its solution letter.

        Empty cells make the result incomplete but are not counted as
        incorrect.
        """
        all_filled = True
        all_correct = True
        incorrect: List[CellRef] = []
        for row in self._cells:
            for state in row:
                if state is None or state.is_revealed:
                    continue
                if not state.value:
                    all_filled = False
                elif state.value.casefold() != state.letter.casefold():
                    all_correct = False
                    incorrect.append((state.row, state.col))
        return SolutionCheck(all_filled=all_filled, all_correct=all_correct, incorrect_cells=tuple(incorrect))

    # PUBLIC_INTERFACE
    def clear(self) -> None:
        """Drop every typed answer, keeping only the revealed letters."""
        if self.is_fully_revealed:
            return
        self.answers = {n: self.cipher.number_to_letter[n] for n in self._revealed}
        for row in self._cells:
            for state in row:
                if state is not None and not state.is_revealed:
                    state.value = ""

    # PUBLIC_INTERFACE
    def reveal_all(self) -> None:
        """Fill in the whole solution. There is no way back for this session."""
        self.answers = dict(self.cipher.number_to_letter)
        for row in self._cells:
            for state in row:
                if state is not None:
                    state.value = state.letter
                    state.is_revealed = True
                    state.is_mouse_locked = False
        self.is_fully_revealed = True
