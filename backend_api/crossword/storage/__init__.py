"""
Puzzle and user-progress storage backends.

Exports the repository protocols, the in-memory and file backends, and the
registry that builds a backend pair from settings. The ORM backend lives in
crossword.storage.database and is imported lazily by the registry.
"""

from .base import ProgressRepository, PuzzleRepository
from .files import FileProgressRepository, FilePuzzleRepository
from .memory import InMemoryProgressRepository, InMemoryPuzzleRepository
from .registry import StorageRegistry, build_repositories

__all__ = [
    "ProgressRepository",
    "PuzzleRepository",
    "FileProgressRepository",
    "FilePuzzleRepository",
    "InMemoryProgressRepository",
    "InMemoryPuzzleRepository",
    "StorageRegistry",
    "build_repositories",
]
