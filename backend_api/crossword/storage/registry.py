from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Tuple

from ..exceptions import StorageConfigurationError
from .base import ProgressRepository, PuzzleRepository

Backend = Tuple[PuzzleRepository, ProgressRepository]
BackendFactory = Callable[[Mapping[str, Any]], Backend]

def _database_backend(options: Mapping[str, Any]) -> Backend:
    # Imported lazily: the ORM models need a ready app registry.
    from .database import DatabaseProgressRepository, DatabasePuzzleRepository

    return DatabasePuzzleRepository(), DatabaseProgressRepository()

def _file_backend(options: Mapping[str, Any]) -> Backend:
    from .files import FileProgressRepository, FilePuzzleRepository

    puzzles_file = options.get("PUZZLES_FILE")
    progress_file = options.get("PROGRESS_FILE")
    if not puzzles_file or not progress_file:
        raise StorageConfigurationError("The file provider needs PUZZLES_FILE and PROGRESS_FILE.")
    return FilePuzzleRepository(puzzles_file), FileProgressRepository(progress_file)

def _memory_backend(options: Mapping[str, Any]) -> Backend:
    from .memory import InMemoryProgressRepository, InMemoryPuzzleRepository

    return InMemoryPuzzleRepository(), InMemoryProgressRepository()

# PUBLIC_INTERFACE
class StorageRegistry:
    """Registry mapping storage provider names to backend factories."""

    _registry: Dict[str, BackendFactory] = {
        "database": _database_backend,
        "file": _file_backend,
        "memory": _memory_backend,
    }

    @classmethod
    def get(cls, provider: str) -> BackendFactory:
        """Return the factory for a provider, or raise StorageConfigurationError."""
        key = (provider or "").strip().lower()
        if key not in cls._registry:
            raise StorageConfigurationError(
                f"Unknown storage provider: {provider!r}. Supported providers: {', '.join(sorted(cls._registry))}"
            )
        return cls._registry[key]


# PUBLIC_INTERFACE
def build_repositories(options: Mapping[str, Any]) -> Backend:
    """Build (puzzle repository, progress repository) from CROSSWORD_STORAGE."""
    factory = StorageRegistry.get(options.get("PROVIDER", "database"))
    return factory(options)
