"""
JSON file storage.

puzzles.json holds a list of puzzle records in the wire format;
progress.json maps user ids to {puzzle id: ISO solve time}. Each repository
serializes load/mutate/persist behind one lock; files are replaced
atomically so readers never see a half-written document.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from ..domain import CrosswordPuzzle
from ..exceptions import PuzzleValidationError

logger = logging.getLogger(__name__)


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=path.name, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


class FilePuzzleRepository:
    """Puzzles stored as a JSON list in a single file."""

    def __init__(self, path: os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, CrosswordPuzzle]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise ValueError(f"{self.path} must contain a JSON list of puzzles")

        puzzles: Dict[str, CrosswordPuzzle] = {}
        for record in records:
            try:
                puzzle = CrosswordPuzzle.from_dict(record)
                puzzle.validate()
            except PuzzleValidationError as e:
                logger.warning("Skipping invalid puzzle record in %s: %s", self.path, e)
                continue
            puzzles[puzzle.id] = puzzle
        return puzzles

    def _write(self, puzzles: Dict[str, CrosswordPuzzle]) -> None:
        _write_json(self.path, [p.to_dict() for p in puzzles.values()])

    def load_all(self) -> List[CrosswordPuzzle]:
        with self._lock:
            try:
                return list(self._read().values())
            except (OSError, ValueError):
                logger.exception("Error loading puzzles from file: %s", self.path)
                return []

    def get(self, puzzle_id: str) -> Optional[CrosswordPuzzle]:
        return next((p for p in self.load_all() if p.id == puzzle_id), None)

    def add(self, puzzle: CrosswordPuzzle) -> None:
        self.add_many([puzzle])

    def add_many(self, puzzles: Iterable[CrosswordPuzzle]) -> int:
        with self._lock:
            stored = self._read()
            count = 0
            for puzzle in puzzles:
                stored[puzzle.id] = puzzle
                count += 1
            self._write(stored)
            return count

    def delete(self, puzzle_id: str) -> bool:
        with self._lock:
            stored = self._read()
            if stored.pop(puzzle_id, None) is None:
                return False
            self._write(stored)
            return True


class FileProgressRepository:
    """User progress kept in memory and mirrored to a JSON file on change."""

    def __init__(self, path: os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._progress: Dict[str, Dict[str, str]] = self._load()

    def _load(self) -> Dict[str, Dict[str, str]]:
        if not self.path.exists():
            logger.info("No existing user progress file found at %s, starting fresh", self.path)
            return {}
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
            if not isinstance(data, dict):
                raise ValueError("progress file must contain a JSON object")
            progress = {str(user): dict(solved) for user, solved in data.items()}
        except (OSError, ValueError, TypeError):
            logger.exception("Error loading user progress from %s", self.path)
            return {}
        logger.info(
            "Loaded user progress from %s: %d users, %d total puzzles solved",
            self.path, len(progress), sum(len(s) for s in progress.values()),
        )
        return progress

    def _save(self) -> None:
        _write_json(self.path, self._progress)
        logger.debug("Saved user progress to %s", self.path)

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
            solved[puzzle_id] = datetime.now(timezone.utc).isoformat()
            self._save()
            return True

    def forget(self, user_id: str, puzzle_ids: Iterable[str]) -> int:
        with self._lock:
            solved = self._progress.get(user_id)
            if not solved:
                return 0
            removed = sum(1 for pid in set(puzzle_ids) if solved.pop(pid, None) is not None)
            if removed:
                self._save()
            return removed

    def users(self) -> List[str]:
        with self._lock:
            return sorted(self._progress)
