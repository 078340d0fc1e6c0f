from django.test import SimpleTestCase

from crossword.domain import CrosswordPuzzle, Language, PuzzleSize, normalize_grid
from crossword.exceptions import AllPuzzlesSolvedError, NoPuzzlesAvailableError
from crossword.selection import SizeCategory, filter_puzzles, select_puzzle


def square(puzzle_id, rows, language=Language.ENGLISH):
    return CrosswordPuzzle(
        id=puzzle_id,
        title=puzzle_id.title(),
        language=language,
        size=PuzzleSize(rows=rows, cols=rows),
        grid=normalize_grid([["A"] * rows for _ in range(rows)]),
    )


PUZZLES = [
    square("small-1", 5),
    square("small-2", 8),
    square("medium-1", 9),
    square("medium-2", 14),
    square("big-1", 15),
    square("ru-small", 6, Language.RUSSIAN),
    square("tiny", 3),
]


class SizeCategoryTests(SimpleTestCase):
    def test_ranges_are_inclusive(self):
        self.assertEqual(SizeCategory.SMALL.size_range, (5, 8))
        self.assertTrue(SizeCategory.SMALL.contains(8))
        self.assertFalse(SizeCategory.SMALL.contains(9))
        self.assertTrue(SizeCategory.MEDIUM.contains(9))
        self.assertTrue(SizeCategory.BIG.contains(20))
        self.assertFalse(SizeCategory.BIG.contains(21))
        self.assertTrue(SizeCategory.ANY.contains(1))

    def test_parse(self):
        self.assertIs(SizeCategory.parse(None), SizeCategory.ANY)
        self.assertIs(SizeCategory.parse(""), SizeCategory.ANY)
        self.assertIs(SizeCategory.parse(" BIG "), SizeCategory.BIG)
        with self.assertRaises(ValueError):
            SizeCategory.parse("huge")


class FilterPuzzlesTests(SimpleTestCase):
    def test_filters_by_size_language_and_solved(self):
        ids = [p.id for p in filter_puzzles(PUZZLES, Language.ENGLISH, SizeCategory.SMALL)]
        self.assertEqual(ids, ["small-1", "small-2"])
        ids = [p.id for p in filter_puzzles(PUZZLES, Language.ENGLISH, SizeCategory.SMALL, {"small-1"})]
        self.assertEqual(ids, ["small-2"])

    def test_no_language_means_any(self):
        ids = {p.id for p in filter_puzzles(PUZZLES, None, SizeCategory.SMALL)}
        self.assertEqual(ids, {"small-1", "small-2", "ru-small"})

    def test_any_size_keeps_small_grids(self):
        ids = {p.id for p in filter_puzzles(PUZZLES, Language.ENGLISH)}
        self.assertIn("tiny", ids)


class SelectPuzzleTests(SimpleTestCase):
    def test_picks_unsolved_match(self):
        puzzle = select_puzzle(PUZZLES, SizeCategory.MEDIUM, Language.ENGLISH, {"medium-1"})
        self.assertEqual(puzzle.id, "medium-2")

    def test_seed_is_reproducible_regardless_of_order(self):
        first = select_puzzle(PUZZLES, SizeCategory.ANY, Language.ENGLISH, seed="42")
        again = select_puzzle(list(reversed(PUZZLES)), SizeCategory.ANY, Language.ENGLISH, seed="42")
        self.assertEqual(first.id, again.id)

    def test_all_solved(self):
        with self.assertRaises(AllPuzzlesSolvedError) as ctx:
            select_puzzle(PUZZLES, SizeCategory.BIG, Language.ENGLISH, {"big-1"})
        self.assertEqual(ctx.exception.reason, "all_solved")
        self.assertEqual(ctx.exception.size_category, "big")

    def test_none_available(self):
        with self.assertRaises(NoPuzzlesAvailableError) as ctx:
            select_puzzle(PUZZLES, SizeCategory.BIG, Language.UKRAINIAN)
        self.assertNotIsInstance(ctx.exception, AllPuzzlesSolvedError)
        self.assertEqual(ctx.exception.reason, "none_available")
        self.assertEqual(ctx.exception.language, "Ukrainian")

    def test_empty_store(self):
        with self.assertRaises(NoPuzzlesAvailableError):
            select_puzzle([], SizeCategory.ANY, Language.ENGLISH)
