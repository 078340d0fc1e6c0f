from __future__ import annotations

from typing import Optional


class CrosswordError(Exception):
    """Base class for errors raised by the crossword app."""


# PUBLIC_INTERFACE
class PuzzleValidationError(CrosswordError, ValueError):
    """Raised when puzzle data is malformed (empty id/title, size mismatch...)."""


# PUBLIC_INTERFACE
class PuzzleNotFoundError(CrosswordError, LookupError):
    """Raised when a puzzle id is unknown."""


# PUBLIC_INTERFACE
class NoPuzzlesAvailableError(PuzzleNotFoundError):
    """Raised when a filtered selection has no candidates at all.

    Carries the requested language and size category so views can build a
    message without re-parsing the request.
    """

    reason = "none_available"

    def __init__(self, message: str, language: Optional[str] = None, size_category: Optional[str] = None):
        super().__init__(message)
        self.language = language
        self.size_category = size_category


# PUBLIC_INTERFACE
class AllPuzzlesSolvedError(NoPuzzlesAvailableError):
    """Raised when candidates existed but the user already solved all of them."""

    reason = "all_solved"


class StorageConfigurationError(CrosswordError):
    """Raised when CROSSWORD_STORAGE names an unknown provider or lacks paths."""
