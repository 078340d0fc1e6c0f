from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from .domain import CrosswordPuzzle
from .exceptions import PuzzleValidationError
from .services import get_crossword_service

DEFAULT_SEED_FILE = Path(__file__).resolve().parent / "data" / "puzzles.json"


# PUBLIC_INTERFACE
def load_puzzle_file(path: Optional[Path] = None) -> List[CrosswordPuzzle]:
    """Read and validate every puzzle in a JSON file (a list of wire records).

    Raises PuzzleValidationError naming the first bad record; nothing is
    returned partially.
    """
    path = Path(path or DEFAULT_SEED_FILE)
    with path.open(encoding="utf-8") as fh:
        records = json.load(fh)
    if isinstance(records, dict):
        records = records.get("puzzles", [])
    if not isinstance(records, list):
        raise PuzzleValidationError(f"{path} must contain a list of puzzles.")

    puzzles = []
    for index, record in enumerate(records):
        record_id = record.get("id") if isinstance(record, dict) else None
        try:
            puzzle = CrosswordPuzzle.from_dict(record)
            puzzle.validate()
        except PuzzleValidationError as e:
            raise PuzzleValidationError(f"Record {index} ({record_id or 'no id'}): {e}") from e
        puzzles.append(puzzle)
    return puzzles


# PUBLIC_INTERFACE
def ensure_seed_puzzles(path: Optional[Path] = None, force: bool = False) -> int:
    """Ensure the puzzle store has at least a minimal playable set.

    Returns number of puzzles written (0 if the store already had puzzles and
    force is not set).
    """
    service = get_crossword_service()
    if service.available_ids() and not force:
        return 0
    return service.add_puzzles(load_puzzle_file(path))
