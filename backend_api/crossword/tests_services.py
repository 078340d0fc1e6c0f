import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, override_settings

from crossword.domain import CrosswordPuzzle, Language, PuzzleSize, normalize_grid
from crossword.exceptions import PuzzleNotFoundError, PuzzleValidationError
from crossword.seed_utils import load_puzzle_file
from crossword.services import (
    CrosswordService,
    UserProgressService,
    get_crossword_service,
    reset_services,
)
from crossword.storage import InMemoryProgressRepository, InMemoryPuzzleRepository


def make_puzzle(puzzle_id, language=Language.ENGLISH):
    return CrosswordPuzzle(
        id=puzzle_id,
        title=puzzle_id,
        language=language,
        size=PuzzleSize(rows=1, cols=2),
        grid=normalize_grid([["A", "B"]]),
    )


class ServiceTests(SimpleTestCase):
    def setUp(self):
        progress = InMemoryProgressRepository()
        self.crossword = CrosswordService(
            InMemoryPuzzleRepository([make_puzzle("p1"), make_puzzle("p2", Language.RUSSIAN)]), progress
        )
        self.users = UserProgressService(progress, self.crossword)

    def test_get_puzzle(self):
        self.assertEqual(self.crossword.get_puzzle("p1").id, "p1")
        with self.assertRaises(PuzzleNotFoundError):
            self.crossword.get_puzzle("nope")

    def test_add_puzzle_validates(self):
        bad = CrosswordPuzzle(
            id="bad", title="", language=Language.ENGLISH, size=PuzzleSize(1, 2), grid=normalize_grid([["A", "B"]])
        )
        with self.assertRaises(PuzzleValidationError):
            self.crossword.add_puzzle(bad)
        with self.assertRaises(PuzzleValidationError):
            self.crossword.add_puzzles([make_puzzle("p3"), bad])
        self.assertNotIn("p3", self.crossword.available_ids())

    def test_delete_unknown_puzzle(self):
        with self.assertRaises(PuzzleNotFoundError):
            self.crossword.delete_puzzle("nope")

    def test_record_solved_needs_existing_puzzle(self):
        with self.assertRaises(PuzzleNotFoundError):
            self.users.record_solved("u1", "nope")
        self.assertTrue(self.users.record_solved("u1", "p1"))
        self.assertFalse(self.users.record_solved("u1", "p1"))

    def test_progress_lists_only_existing_puzzles(self):
        self.users.record_solved("u1", "p1")
        self.users.record_solved("u1", "p2")
        self.crossword.delete_puzzle("p2")
        progress = self.users.progress("u1")
        self.assertEqual(progress["solvedPuzzleIds"], ["p1"])
        self.assertEqual(progress["totalSolved"], 2)

    def test_available_by_language(self):
        self.users.record_solved("u1", "p2")
        data = self.users.available("u1", Language.RUSSIAN)
        self.assertEqual(data["unsolvedPuzzleIds"], [])
        self.assertEqual(data["solvedPuzzleIds"], ["p2"])
        self.assertEqual(self.users.available("u1")["totalAvailable"], 2)

    def test_users(self):
        self.users.record_solved("u2", "p1")
        self.assertEqual(self.users.users(), [{"userId": "u2", "totalSolved": 1}])
        self.assertEqual(self.users.forget("u2", ["p1"]), 1)


class PuzzleValidationTests(SimpleTestCase):
    def test_cells_must_be_letters_or_blocked(self):
        make_puzzle("ok").validate()
        for cell in ("1", " ", "*"):
            puzzle = CrosswordPuzzle(
                id="bad", title="Bad", language=Language.ENGLISH, size=PuzzleSize(1, 2),
                grid=normalize_grid([["A", cell]]),
            )
            with self.assertRaises(PuzzleValidationError):
                puzzle.validate()

    def test_cyrillic_and_blocked_cells_pass(self):
        CrosswordPuzzle(
            id="ru", title="Ru", language=Language.RUSSIAN, size=PuzzleSize(1, 3),
            grid=normalize_grid([["ж", "#", "Ё"]]),
        ).validate()

    def test_from_dict_rejects_malformed_records(self):
        for record in (
            {"id": "b", "title": "B", "size": [1, 1], "grid": [["A"]]},
            {"id": "b", "title": "B", "size": {"rows": "x", "cols": 1}, "grid": [["A"]]},
            {"id": "b", "title": "B", "size": {"rows": 1, "cols": 1}, "grid": [5]},
            {"id": "b", "title": "B", "language": 7, "size": {"rows": 1, "cols": 1}, "grid": [["A"]]},
        ):
            with self.assertRaises(PuzzleValidationError):
                CrosswordPuzzle.from_dict(record)


class SeedFileTests(SimpleTestCase):
    def test_bundled_puzzles_are_valid(self):
        puzzles = load_puzzle_file()
        self.assertEqual({p.language for p in puzzles}, set(Language))

    def test_bad_record_is_named(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            path.write_text(
                json.dumps([{"id": "x", "title": "X", "size": {"rows": 2, "cols": 2}, "grid": [["A"]]}]),
                encoding="utf-8",
            )
            with self.assertRaisesMessage(PuzzleValidationError, "Record 0 (x)"):
                load_puzzle_file(path)

    def test_malformed_record_is_named(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            path.write_text(
                json.dumps([{"id": "y", "title": "Y", "size": [1, 1], "grid": [["A"]]}]), encoding="utf-8"
            )
            with self.assertRaisesMessage(PuzzleValidationError, "Record 0 (y)"):
                load_puzzle_file(path)


@override_settings(CROSSWORD_STORAGE={"PROVIDER": "memory"})
class SeedCommandTests(SimpleTestCase):
    def setUp(self):
        reset_services()
        self.addCleanup(reset_services)

    def test_seeds_once(self):
        out = StringIO()
        call_command("seed_puzzles", stdout=out)
        self.assertIn("Seeded 4 puzzles", out.getvalue())
        self.assertEqual(len(get_crossword_service().available_ids()), 4)

        out = StringIO()
        call_command("seed_puzzles", stdout=out)
        self.assertIn("No action taken", out.getvalue())

        out = StringIO()
        call_command("seed_puzzles", "--force", stdout=out)
        self.assertIn("Seeded 4 puzzles", out.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("seed_puzzles", "--file", "/nonexistent/puzzles.json", stdout=StringIO())

    def test_malformed_file_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            good = {"id": "g", "title": "G", "size": {"rows": 1, "cols": 1}, "grid": [["A"]]}
            path.write_text(json.dumps([good, {"id": "y", "size": "1x1", "grid": [["A"]]}]), encoding="utf-8")
            with self.assertRaises(CommandError):
                call_command("seed_puzzles", "--file", str(path), stdout=StringIO())
        self.assertEqual(get_crossword_service().available_ids(), [])
