"""
Framework-agnostic puzzle data types.

A puzzle is a fixed, hand-authored letter grid. Cells hold one letter of the
solution or the BLOCKED marker. Records travel over the wire and through the
file store as:

    {"id", "title", "language", "size": {"rows", "cols"}, "grid",
     "revealedLetters"?}
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .exceptions import PuzzleValidationError

BLOCKED = "#"

Grid = Tuple[Tuple[str, ...], ...]


# PUBLIC_INTERFACE
class Language(str, Enum):
    """Supported puzzle languages; the wire value is the English name."""

    ENGLISH = "English"
    RUSSIAN = "Russian"
    UKRAINIAN = "Ukrainian"

    @classmethod
    def parse(cls, value: Any) -> "Language":
        """Parse a language name or ISO tag (en/ru/uk), case-insensitively."""
        if isinstance(value, Language):
            return value
        key = (value or "").strip().lower()
        for lang in cls:
            if key == lang.value.lower():
                return lang
        tag = key.replace("_", "-").split("-")[0]
        if tag in _ISO_TAGS:
            return _ISO_TAGS[tag]
        raise ValueError(f"Unknown language: {value!r}")

    @classmethod
    def choices(cls) -> List[Tuple[str, str]]:
        return [(lang.value, lang.value) for lang in cls]


_ISO_TAGS: Dict[str, Language] = {
    "en": Language.ENGLISH,
    "ru": Language.RUSSIAN,
    "uk": Language.UKRAINIAN,
}


@dataclass(frozen=True)
class PuzzleSize:
    rows: int
    cols: int


def normalize_grid(rows: Iterable[Iterable[Any]]) -> Grid:
    """Freeze a nested list into tuples, upper-casing letters."""
    return tuple(tuple(str(cell).upper() if cell is not None else "" for cell in row) for row in rows)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class CrosswordPuzzle:
    """An immutable puzzle record.

    Fields:
    - id: unique puzzle identifier (also seeds the cipher)
    - title: display title
    - language: Language of the letters in the grid
    - size: declared PuzzleSize; must match the grid shape
    - grid: rows of one-character strings, BLOCKED for blocked cells
    - revealed_letters: optional letters to show from the start
    """

    id: str
    title: str
    language: Language
    size: PuzzleSize
    grid: Grid
    revealed_letters: Optional[Tuple[str, ...]] = None

    def validate(self) -> None:
        """Raise PuzzleValidationError if the record is malformed."""
        if not self.id or not self.id.strip():
            raise PuzzleValidationError("Puzzle ID cannot be null or empty.")
        if not self.title or not self.title.strip():
            raise PuzzleValidationError("Puzzle title cannot be null or empty.")
        if self.size.rows <= 0 or self.size.cols <= 0:
            raise PuzzleValidationError("Puzzle size must have positive number of rows and columns.")
        if len(self.grid) != self.size.rows:
            raise PuzzleValidationError(
                f"Grid row count {len(self.grid)} does not match specified size rows {self.size.rows}."
            )
        for index, row in enumerate(self.grid):
            if len(row) != self.size.cols:
                raise PuzzleValidationError(
                    f"Grid row {index} has {len(row)} columns, expected {self.size.cols}."
                )
            for cell in row:
                if len(cell) != 1 or (cell != BLOCKED and not cell.isalpha()):
                    raise PuzzleValidationError(
                        f"Grid row {index} contains an invalid cell {cell!r}; expected a letter or '{BLOCKED}'."
                    )

    def letters(self) -> List[str]:
        return distinct_letters(self.grid)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrosswordPuzzle":
        """Build a puzzle from a wire record. Does not call validate()."""
        if not isinstance(data, dict):
            raise PuzzleValidationError("Puzzle record must be an object.")
        size = data.get("size") or {}
        if not isinstance(size, dict):
            raise PuzzleValidationError("Puzzle size must be an object with rows and cols.")
        revealed = data.get("revealedLetters")
        try:
            return cls(
                id=str(data.get("id") or "").strip(),
                title=str(data.get("title") or "").strip(),
                language=Language.parse(data.get("language") or Language.ENGLISH.value),
                size=PuzzleSize(rows=int(size.get("rows", 0)), cols=int(size.get("cols", 0))),
                grid=normalize_grid(data.get("grid") or []),
                revealed_letters=tuple(str(x).upper() for x in revealed) if revealed else None,
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise PuzzleValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "language": self.language.value,
            "size": {"rows": self.size.rows, "cols": self.size.cols},
            "grid": [list(row) for row in self.grid],
        }
        if self.revealed_letters:
            data["revealedLetters"] = list(self.revealed_letters)
        return data


def distinct_letters(grid: Sequence[Sequence[str]]) -> List[str]:
    """Distinct non-blocked letters in row-major first-appearance order."""
    seen: Dict[str, None] = {}
    for row in grid:
        for cell in row:
            if cell and cell != BLOCKED and cell not in seen:
                seen[cell] = None
    return list(seen)
