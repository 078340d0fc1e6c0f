import json
import tempfile
from pathlib import Path

from django.test import SimpleTestCase, TestCase

from crossword.domain import CrosswordPuzzle, Language, PuzzleSize, normalize_grid
from crossword.exceptions import StorageConfigurationError
from crossword.models import Puzzle, SolvedPuzzle
from crossword.storage import (
    FileProgressRepository,
    FilePuzzleRepository,
    InMemoryProgressRepository,
    InMemoryPuzzleRepository,
    ProgressRepository,
    PuzzleRepository,
    build_repositories,
)
from crossword.storage.database import DatabaseProgressRepository, DatabasePuzzleRepository


def make_puzzle(puzzle_id="cat-dog", title="Cat and Dog", revealed=None):
    return CrosswordPuzzle(
        id=puzzle_id,
        title=title,
        language=Language.ENGLISH,
        size=PuzzleSize(rows=3, cols=3),
        grid=normalize_grid([["C", "A", "T"], ["O", "#", "O"], ["D", "O", "G"]]),
        revealed_letters=revealed,
    )


class PuzzleRepositoryContract:
    """Shared checks; subclasses provide make_repository()."""

    def test_add_get_and_replace(self):
        repo = self.make_repository()
        self.assertIsInstance(repo, PuzzleRepository)
        self.assertEqual(repo.load_all(), [])
        repo.add(make_puzzle(revealed=("C",)))
        self.assertEqual(repo.get("cat-dog"), make_puzzle(revealed=("C",)))
        repo.add(make_puzzle(title="Renamed"))
        self.assertEqual([p.title for p in repo.load_all()], ["Renamed"])
        self.assertIsNone(repo.get("missing"))

    def test_add_many_and_delete(self):
        repo = self.make_repository()
        count = repo.add_many([make_puzzle("one"), make_puzzle("two")])
        self.assertEqual(count, 2)
        self.assertEqual(sorted(p.id for p in repo.load_all()), ["one", "two"])
        self.assertTrue(repo.delete("one"))
        self.assertFalse(repo.delete("one"))
        self.assertEqual([p.id for p in repo.load_all()], ["two"])


class ProgressRepositoryContract:
    def test_record_is_idempotent(self):
        repo = self.make_progress()
        self.assertIsInstance(repo, ProgressRepository)
        self.assertTrue(repo.record_solved("u1", "p1"))
        self.assertFalse(repo.record_solved("u1", "p1"))
        self.assertTrue(repo.is_solved("u1", "p1"))
        self.assertFalse(repo.is_solved("u2", "p1"))
        self.assertEqual(repo.solved_ids("u1"), {"p1"})
        self.assertEqual(repo.solved_ids("nobody"), set())

    def test_forget_and_users(self):
        repo = self.make_progress()
        repo.record_solved("u2", "p1")
        repo.record_solved("u1", "p1")
        repo.record_solved("u1", "p2")
        self.assertEqual(repo.users(), ["u1", "u2"])
        self.assertEqual(repo.forget("u1", ["p1", "p3"]), 1)
        self.assertEqual(repo.solved_ids("u1"), {"p2"})
        self.assertEqual(repo.forget("nobody", ["p1"]), 0)


class InMemoryStorageTests(PuzzleRepositoryContract, ProgressRepositoryContract, SimpleTestCase):
    def make_repository(self):
        return InMemoryPuzzleRepository()

    def make_progress(self):
        return InMemoryProgressRepository()

    def test_initial_puzzles(self):
        repo = InMemoryPuzzleRepository([make_puzzle("a"), make_puzzle("b")])
        self.assertEqual(len(repo.load_all()), 2)


class FileStorageTests(PuzzleRepositoryContract, ProgressRepositoryContract, SimpleTestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = Path(tmp.name)

    def make_repository(self):
        return FilePuzzleRepository(self.dir / "puzzles.json")

    def make_progress(self):
        return FileProgressRepository(self.dir / "progress.json")

    def test_puzzles_written_in_wire_format(self):
        self.make_repository().add(make_puzzle(revealed=("C", "A")))
        records = json.loads((self.dir / "puzzles.json").read_text(encoding="utf-8"))
        self.assertEqual(records[0]["id"], "cat-dog")
        self.assertEqual(records[0]["size"], {"rows": 3, "cols": 3})
        self.assertEqual(records[0]["revealedLetters"], ["C", "A"])

    def test_corrupt_puzzle_file_reads_as_empty(self):
        (self.dir / "puzzles.json").write_text("{not json", encoding="utf-8")
        with self.assertLogs("crossword.storage.files", level="ERROR"):
            self.assertEqual(self.make_repository().load_all(), [])

    def test_invalid_records_are_skipped(self):
        good = make_puzzle("good").to_dict()
        bad = dict(make_puzzle("bad").to_dict(), size={"rows": 4, "cols": 3})
        (self.dir / "puzzles.json").write_text(json.dumps([good, bad]), encoding="utf-8")
        with self.assertLogs("crossword.storage.files", level="WARNING"):
            puzzles = self.make_repository().load_all()
        self.assertEqual([p.id for p in puzzles], ["good"])

    def test_malformed_records_are_skipped(self):
        good = make_puzzle("good").to_dict()
        records = [
            good,
            {"id": "b", "title": "B", "size": [1, 1], "grid": [["A"]]},
            {"id": "c", "title": "C", "size": {"rows": 1, "cols": 1}, "grid": [5]},
            "not a record",
        ]
        (self.dir / "puzzles.json").write_text(json.dumps(records), encoding="utf-8")
        with self.assertLogs("crossword.storage.files", level="WARNING") as logs:
            puzzles = self.make_repository().load_all()
        self.assertEqual([p.id for p in puzzles], ["good"])
        self.assertEqual(len(logs.records), 3)

    def test_progress_survives_reload(self):
        self.make_progress().record_solved("u1", "p1")
        self.assertEqual(self.make_progress().solved_ids("u1"), {"p1"})

    def test_corrupt_progress_file_starts_fresh(self):
        (self.dir / "progress.json").write_text("[]", encoding="utf-8")
        with self.assertLogs("crossword.storage.files", level="ERROR"):
            repo = self.make_progress()
        self.assertEqual(repo.users(), [])


class DatabaseStorageTests(PuzzleRepositoryContract, ProgressRepositoryContract, TestCase):
    def make_repository(self):
        return DatabasePuzzleRepository()

    def make_progress(self):
        return DatabaseProgressRepository()

    def test_rows_are_written(self):
        self.make_repository().add(make_puzzle(revealed=("C",)))
        row = Puzzle.objects.get(pk="cat-dog")
        self.assertEqual((row.rows, row.cols), (3, 3))
        self.assertEqual(row.revealed_letters, ["C"])
        self.make_progress().record_solved("u1", "cat-dog")
        self.assertEqual(SolvedPuzzle.objects.filter(user_id="u1").count(), 1)

    def test_unreadable_row_reads_as_missing(self):
        Puzzle.objects.create(
            id="klingon", title="Bad", language="Klingon", rows=1, cols=1, grid=[["A"]]
        )
        repo = self.make_repository()
        with self.assertLogs("crossword.storage.database", level="WARNING"):
            self.assertIsNone(repo.get("klingon"))
        with self.assertLogs("crossword.storage.database", level="WARNING"):
            self.assertEqual(repo.load_all(), [])


class BuildRepositoriesTests(SimpleTestCase):
    def test_memory_provider(self):
        puzzles, progress = build_repositories({"PROVIDER": "Memory"})
        self.assertIsInstance(puzzles, InMemoryPuzzleRepository)
        self.assertIsInstance(progress, InMemoryProgressRepository)

    def test_file_provider_needs_paths(self):
        with self.assertRaises(StorageConfigurationError):
            build_repositories({"PROVIDER": "file"})

    def test_unknown_provider(self):
        with self.assertRaises(StorageConfigurationError):
            build_repositories({"PROVIDER": "redis"})
