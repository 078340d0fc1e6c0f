from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from django.db import DatabaseError, IntegrityError, transaction

from ..domain import CrosswordPuzzle
from ..exceptions import PuzzleValidationError
from ..models import Puzzle, SolvedPuzzle

logger = logging.getLogger(__name__)


class DatabasePuzzleRepository:
    """Puzzles stored through the Django ORM."""

    def load_all(self) -> List[CrosswordPuzzle]:
        puzzles: List[CrosswordPuzzle] = []
        try:
            rows = list(Puzzle.objects.all())
        except DatabaseError:
            logger.exception("Error loading puzzles from the database")
            return []
        for row in rows:
            try:
                puzzles.append(row.to_domain())
            except (PuzzleValidationError, ValueError) as e:
                logger.warning("Skipping unreadable puzzle %s: %s", row.pk, e)
        return puzzles

    def get(self, puzzle_id: str) -> Optional[CrosswordPuzzle]:
        try:
            row = Puzzle.objects.filter(pk=puzzle_id).first()
        except DatabaseError:
            logger.exception("Error loading puzzle %s from the database", puzzle_id)
            return None
        if row is None:
            return None
        try:
            return row.to_domain()
        except (PuzzleValidationError, ValueError) as e:
            logger.warning("Skipping unreadable puzzle %s: %s", row.pk, e)
            return None

    def add(self, puzzle: CrosswordPuzzle) -> None:
        Puzzle.objects.update_or_create(id=puzzle.id, defaults=Puzzle.fields_from_domain(puzzle))

    def add_many(self, puzzles: Iterable[CrosswordPuzzle]) -> int:
        count = 0
        with transaction.atomic():
            for puzzle in puzzles:
                self.add(puzzle)
                count += 1
        return count

    def delete(self, puzzle_id: str) -> bool:
        deleted, _ = Puzzle.objects.filter(pk=puzzle_id).delete()
        return deleted > 0


class DatabaseProgressRepository:
    """Solved puzzles stored through the Django ORM."""

    def solved_ids(self, user_id: str) -> Set[str]:
        try:
            return set(SolvedPuzzle.objects.filter(user_id=user_id).values_list("puzzle_id", flat=True))
        except DatabaseError:
            logger.exception("Error loading solved puzzles for user %s", user_id)
            return set()

    def is_solved(self, user_id: str, puzzle_id: str) -> bool:
        try:
            return SolvedPuzzle.objects.filter(user_id=user_id, puzzle_id=puzzle_id).exists()
        except DatabaseError:
            logger.exception("Error checking if puzzle %s is solved for user %s", puzzle_id, user_id)
            return False

    def record_solved(self, user_id: str, puzzle_id: str) -> bool:
        try:
            with transaction.atomic():
                _, created = SolvedPuzzle.objects.get_or_create(user_id=user_id, puzzle_id=puzzle_id)
        except IntegrityError:
            # Lost a race with a concurrent insert of the same pair.
            return False
        return created

    def forget(self, user_id: str, puzzle_ids: Iterable[str]) -> int:
        deleted, _ = SolvedPuzzle.objects.filter(user_id=user_id, puzzle_id__in=list(puzzle_ids)).delete()
        return deleted

    def users(self) -> List[str]:
        try:
            return list(
                SolvedPuzzle.objects.order_by("user_id").values_list("user_id", flat=True).distinct()
            )
        except DatabaseError:
            logger.exception("Error listing users with progress")
            return []
