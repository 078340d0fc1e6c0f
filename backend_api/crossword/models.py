from __future__ import annotations

from typing import Any, Dict

from django.db import models
from django.utils import timezone

from .domain import CrosswordPuzzle, Language, PuzzleSize, normalize_grid


# PUBLIC_INTERFACE
class TimeStampedModel(models.Model):
    """Abstract base model providing created/updated timestamps.

    Notes:
        Keep this abstract model free of any logic that would access the Django
        app registry or execute queries at module import time.
    """
    created_at = models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")

    class Meta:
        abstract = True


# PUBLIC_INTERFACE
class Puzzle(TimeStampedModel):
    """A stored puzzle grid.

    Fields:
    - id: puzzle identifier chosen by the author (also the cipher seed)
    - title: display title
    - language: English | Russian | Ukrainian
    - rows, cols: declared grid size, kept as columns for size filtering
    - grid: rows of one-letter strings, "#" for blocked cells
    - revealed_letters: optional letters shown from the start
    """
    id = models.CharField(max_length=128, primary_key=True, help_text="Puzzle identifier.")
    title = models.CharField(max_length=200)
    language = models.CharField(
        max_length=16,
        choices=Language.choices(),
        default=Language.ENGLISH.value,
        db_index=True,
    )
    rows = models.PositiveSmallIntegerField(db_index=True)
    cols = models.PositiveSmallIntegerField()
    grid = models.JSONField(help_text="Rows of single-character strings, '#' for blocked.")
    revealed_letters = models.JSONField(null=True, blank=True, help_text="Optional letters to reveal.")

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = "Puzzle"
        verbose_name_plural = "Puzzles"

    def to_domain(self) -> CrosswordPuzzle:
        return CrosswordPuzzle(
            id=self.id,
            title=self.title,
            language=Language.parse(self.language),
            size=PuzzleSize(rows=self.rows, cols=self.cols),
            grid=normalize_grid(self.grid or []),
            revealed_letters=tuple(self.revealed_letters) if self.revealed_letters else None,
        )

    @staticmethod
    def fields_from_domain(puzzle: CrosswordPuzzle) -> Dict[str, Any]:
        """Column values for update_or_create(id=puzzle.id, defaults=...)."""
        return {
            "title": puzzle.title,
            "language": puzzle.language.value,
            "rows": puzzle.size.rows,
            "cols": puzzle.size.cols,
            "grid": [list(row) for row in puzzle.grid],
            "revealed_letters": list(puzzle.revealed_letters) if puzzle.revealed_letters else None,
        }

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.id} ({self.language}, {self.rows}x{self.cols})"


# PUBLIC_INTERFACE
class SolvedPuzzle(models.Model):
    """One puzzle solved by one user.

    puzzle_id is a plain string, not a foreign key: progress outlives puzzles
    that get deleted and re-uploaded under the same id.
    """
    user_id = models.CharField(max_length=128, db_index=True)
    puzzle_id = models.CharField(max_length=128)
    solved_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["solved_at"]
        unique_together = (("user_id", "puzzle_id"),)
        verbose_name = "Solved puzzle"
        verbose_name_plural = "Solved puzzles"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id} solved {self.puzzle_id}"
