from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings

from .domain import CrosswordPuzzle, Language
from .exceptions import PuzzleNotFoundError
from .selection import SizeCategory, filter_puzzles, select_puzzle
from .storage import ProgressRepository, PuzzleRepository, build_repositories

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class CrosswordService:
    """Puzzle lookup and selection on top of the puzzle and progress stores."""

    def __init__(self, puzzles: PuzzleRepository, progress: ProgressRepository):
        self.puzzles = puzzles
        self.progress = progress

    def get_puzzle(self, puzzle_id: str) -> CrosswordPuzzle:
        puzzle = self.puzzles.get(puzzle_id)
        if puzzle is None:
            raise PuzzleNotFoundError(f"Puzzle with ID '{puzzle_id}' was not found.")
        return puzzle

    def list_puzzles(self, language: Optional[Language] = None) -> List[CrosswordPuzzle]:
        return filter_puzzles(self.puzzles.load_all(), language)

    def available_ids(self, language: Optional[Language] = None) -> List[str]:
        return [p.id for p in self.list_puzzles(language)]

    def select(
        self,
        size_category: SizeCategory,
        language: Language,
        user_id: Optional[str] = None,
        seed: Optional[Any] = None,
    ) -> CrosswordPuzzle:
        """Pick a puzzle the user has not solved yet.

        Raises NoPuzzlesAvailableError or AllPuzzlesSolvedError (see
        selection.select_puzzle).
        """
        solved = self.progress.solved_ids(user_id) if user_id else set()
        return select_puzzle(self.puzzles.load_all(), size_category, language, solved, seed)

    def add_puzzle(self, puzzle: CrosswordPuzzle) -> None:
        puzzle.validate()
        self.puzzles.add(puzzle)
        logger.info("Added puzzle %s", puzzle.id)

    def add_puzzles(self, puzzles: Iterable[CrosswordPuzzle]) -> int:
        """Validate every puzzle first, then store them all."""
        batch = list(puzzles)
        for puzzle in batch:
            puzzle.validate()
        count = self.puzzles.add_many(batch)
        logger.info("Imported %d puzzle(s)", count)
        return count

    def delete_puzzle(self, puzzle_id: str) -> None:
        if not self.puzzles.delete(puzzle_id):
            raise PuzzleNotFoundError(f"Puzzle with ID '{puzzle_id}' was not found.")
        logger.info("Deleted puzzle %s", puzzle_id)


# PUBLIC_INTERFACE
class UserProgressService:
    """Solved-puzzle bookkeeping per user."""

    def __init__(self, progress: ProgressRepository, crossword: CrosswordService):
        self.repository = progress
        self.crossword = crossword

    def progress(self, user_id: str) -> Dict[str, Any]:
        solved = self.repository.solved_ids(user_id)
        existing = set(self.crossword.available_ids())
        return {
            "userId": user_id,
            "solvedPuzzleIds": sorted(solved & existing),
            "totalSolved": len(solved),
        }

    def record_solved(self, user_id: str, puzzle_id: str) -> bool:
        """Record a solve for an existing puzzle; repeats are no-ops."""
        self.crossword.get_puzzle(puzzle_id)
        created = self.repository.record_solved(user_id, puzzle_id)
        if created:
            logger.info("User %s solved puzzle %s", user_id, puzzle_id)
        else:
            logger.debug("Puzzle %s already marked as solved for user %s", puzzle_id, user_id)
        return created

    def available(self, user_id: str, language: Optional[Language] = None) -> Dict[str, Any]:
        all_ids = self.crossword.available_ids(language)
        solved = self.repository.solved_ids(user_id)
        unsolved = [pid for pid in all_ids if pid not in solved]
        solved_here = [pid for pid in all_ids if pid in solved]
        return {
            "unsolvedPuzzleIds": unsolved,
            "solvedPuzzleIds": solved_here,
            "totalAvailable": len(all_ids),
            "totalSolved": len(solved_here),
        }

    def has_solved(self, user_id: str, puzzle_id: str) -> bool:
        return self.repository.is_solved(user_id, puzzle_id)

    def forget(self, user_id: str, puzzle_ids: Iterable[str]) -> int:
        removed = self.repository.forget(user_id, puzzle_ids)
        if removed:
            logger.info("Forgot %d puzzle(s) for user %s", removed, user_id)
        return removed

    def users(self) -> List[Dict[str, Any]]:
        return [
            {"userId": user_id, "totalSolved": len(self.repository.solved_ids(user_id))}
            for user_id in self.repository.users()
        ]


@lru_cache(maxsize=1)
def _services():
    options = getattr(settings, "CROSSWORD_STORAGE", {}) or {}
    puzzles, progress = build_repositories(options)
    crossword = CrosswordService(puzzles, progress)
    logger.info("Crossword storage provider: %s", options.get("PROVIDER", "database"))
    return crossword, UserProgressService(progress, crossword)


# PUBLIC_INTERFACE
def get_crossword_service() -> CrosswordService:
    return _services()[0]


# PUBLIC_INTERFACE
def get_progress_service() -> UserProgressService:
    return _services()[1]


def reset_services() -> None:
    """Forget the cached services, e.g. after changing CROSSWORD_STORAGE."""
    _services.cache_clear()
