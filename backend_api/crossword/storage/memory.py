from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from ..domain import CrosswordPuzzle


class InMemoryPuzzleRepository:
    """Process-local puzzle store for development and tests."""

    def __init__(self, puzzles: Iterable[CrosswordPuzzle] = ()):
        self._lock = threading.Lock()
        self._puzzles: Dict[str, CrosswordPuzzle] = {p.id: p for p in puzzles}

    def load_all(self) -> List[CrosswordPuzzle]:
        with self._lock:
            return list(self._puzzles.values())

    def get(self, puzzle_id: str) -> Optional[CrosswordPuzzle]:
        with self._lock:
            return self._puzzles.get(puzzle_id)

    def add(self, puzzle: CrosswordPuzzle) -> None:
        with self._lock:
            self._puzzles[puzzle.id] = puzzle

    def add_many(self, puzzles: Iterable[CrosswordPuzzle]) -> int:
        with self._lock:
            count = 0
            for puzzle in puzzles:
                self._puzzles[puzzle.id] = puzzle
                count += 1
            return count

    def delete(self, puzzle_id: str) -> bool:
        with self._lock:
            return self._puzzles.pop(puzzle_id, None) is not None


class InMemoryProgressRepository:
    """Process-local solved-puzzle sets keyed by user."""

    def __init__(self):
        self._lock = threading.Lock()
        self._progress: Dict[str, Dict[str, datetime]] = {}

    def solved_ids(self, user_id: str) -> Set[str]:
        with self._lock:
            return set(self._progress.get(user_id, {}))

    def is_solved(self, user_id: str, puzzle_id: str) -> bool:
        with self._lock:
            return puzzle_id in self._progress.get(user_id, {})

    def record_solved(self, user_id: str, puzzle_id: str) -> bool:
        with self._lock:
            solved = self._progress.setdefault(user_id, {})
            if puzzle_id in solved:
                return False
            solved[puzzle_id] = datetime.now(timezone.utc)
            return True

    def forget(self, user_id: str, puzzle_ids: Iterable[str]) -> int:
        with self._lock:
            solved = self._progress.get(user_id)
            if not solved:
                return 0
            return sum(1 for pid in set(puzzle_ids) if solved.pop(pid, None) is not None)

    def users(self) -> List[str]:
        with self._lock:
            return sorted(self._progress)
