from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Set, runtime_checkable

from ..domain import CrosswordPuzzle


@runtime_checkable
class PuzzleRepository(Protocol):
    """Where puzzles live. Adding an existing id replaces it."""

    def load_all(self) -> List[CrosswordPuzzle]: ...

    def get(self, puzzle_id: str) -> Optional[CrosswordPuzzle]: ...

    def add(self, puzzle: CrosswordPuzzle) -> None: ...

    def add_many(self, puzzles: Iterable[CrosswordPuzzle]) -> int: ...

    def delete(self, puzzle_id: str) -> bool: ...


@runtime_checkable
class ProgressRepository(Protocol):
    """Per-user sets of solved puzzle ids."""

    def solved_ids(self, user_id: str) -> Set[str]: ...

    def is_solved(self, user_id: str, puzzle_id: str) -> bool: ...

    def record_solved(self, user_id: str, puzzle_id: str) -> bool:
        """Record a solve; returns False if it was already recorded."""

    def forget(self, user_id: str, puzzle_ids: Iterable[str]) -> int:
        """Remove solves; returns how many were removed."""

    def users(self) -> List[str]: ...
