from django.test import SimpleTestCase

from crossword.cipher import derive_cipher, derive_for_puzzle, pseudo_random, seed_from_id, seeded_shuffle
from crossword.cipher.engines import fallback_reveal_count
from crossword.domain import CrosswordPuzzle, Language, PuzzleSize, distinct_letters, normalize_grid
from crossword.exceptions import PuzzleValidationError

CAT_GRID = normalize_grid([
    ["C", "A", "T"],
    ["O", "#", "O"],
    ["D", "O", "G"],
])


class SeededRandomTests(SimpleTestCase):
    def test_seed_is_sum_of_code_units(self):
        self.assertEqual(seed_from_id("abc"), 294)
        self.assertEqual(seed_from_id(""), 0)

    def test_seed_counts_surrogate_pairs(self):
        # U+1F600 is stored as the pair D83D DE00
        self.assertEqual(seed_from_id("\U0001F600"), 0xD83D + 0xDE00)

    def test_pseudo_random_in_unit_interval(self):
        for x in range(-50, 500):
            value = pseudo_random(x)
            self.assertGreaterEqual(value, 0.0)
            self.assertLess(value, 1.0)

    def test_shuffle_is_permutation(self):
        shuffled = seeded_shuffle(range(1, 27), 1234)
        self.assertEqual(sorted(shuffled), list(range(1, 27)))
        self.assertEqual(shuffled, seeded_shuffle(list(range(1, 27)), 1234))

    def test_pseudo_random_fixed_values(self):
        self.assertEqual(pseudo_random(1), 0.7098480789645691)
        self.assertAlmostEqual(pseudo_random(299), 0.23278381629552314, places=12)

    def test_shuffle_fixed_output(self):
        self.assertEqual(seeded_shuffle(range(1, 7), 294), [4, 1, 5, 3, 6, 2])
        self.assertEqual(seeded_shuffle(range(1, 7), 1175), [1, 3, 2, 5, 4, 6])

    def test_shuffle_short_inputs(self):
        self.assertEqual(seeded_shuffle([], 7), [])
        self.assertEqual(seeded_shuffle(["x"], 7), ["x"])


class DeriveCipherTests(SimpleTestCase):
    def test_distinct_letters_row_major(self):
        self.assertEqual(distinct_letters(CAT_GRID), ["C", "A", "T", "O", "D", "G"])

    def test_mapping_is_bijection_over_one_to_k(self):
        cipher = derive_cipher(CAT_GRID, "cat-dog")
        self.assertEqual(cipher.size, 6)
        self.assertEqual(sorted(cipher.number_to_letter), [1, 2, 3, 4, 5, 6])
        self.assertEqual(sorted(cipher.letter_to_number), ["A", "C", "D", "G", "O", "T"])
        for letter, number in cipher.letter_to_number.items():
            self.assertEqual(cipher.number_to_letter[number], letter)

    def test_number_grid_follows_letters(self):
        cipher = derive_cipher(CAT_GRID, "cat-dog")
        self.assertEqual(cipher.number_grid[1][1], 0)
        o = cipher.letter_to_number["O"]
        self.assertEqual(cipher.number_grid[1][0], o)
        self.assertEqual(cipher.number_grid[1][2], o)
        self.assertEqual(cipher.number_grid[2][1], o)
        self.assertEqual(cipher.number_grid[0][0], cipher.letter_to_number["C"])

    def test_same_id_same_cipher(self):
        first = derive_cipher(CAT_GRID, "cat-dog")
        second = derive_cipher(normalize_grid([list(row) for row in CAT_GRID]), "cat-dog")
        self.assertEqual(first, second)

    def test_numbers_come_from_seeded_shuffle(self):
        cipher = derive_cipher(CAT_GRID, "abc")
        numbers = seeded_shuffle(range(1, 7), 294)
        for i, letter in enumerate(["C", "A", "T", "O", "D", "G"]):
            self.assertEqual(cipher.letter_to_number[letter], numbers[i])

    def test_known_cipher_for_test_puzzle(self):
        cipher = derive_cipher(CAT_GRID, "test-puzzle")
        self.assertEqual(seed_from_id("test-puzzle"), 1175)
        self.assertEqual(cipher.letter_to_number, {"C": 1, "A": 3, "T": 2, "O": 5, "D": 4, "G": 6})
        self.assertEqual(cipher.number_grid, ((1, 3, 2), (5, 0, 5), (4, 5, 6)))
        self.assertEqual(cipher.initially_revealed, (1, 3))

    def test_known_cipher_for_abc(self):
        cipher = derive_cipher(CAT_GRID, "abc")
        self.assertEqual(cipher.letter_to_number, {"C": 4, "A": 1, "T": 5, "O": 3, "D": 6, "G": 2})
        self.assertEqual(cipher.initially_revealed, (4, 1))

    def test_listed_revealed_letters(self):
        cipher = derive_cipher(CAT_GRID, "cat-dog", ["C", "A"])
        self.assertEqual(
            cipher.initially_revealed,
            (cipher.letter_to_number["C"], cipher.letter_to_number["A"]),
        )

    def test_unknown_revealed_letters_are_dropped(self):
        cipher = derive_cipher(CAT_GRID, "cat-dog", ["Z", "a", "A"])
        self.assertEqual(cipher.initially_revealed, (cipher.letter_to_number["A"],))

    def test_fallback_reveals_first_shuffled_numbers(self):
        cipher = derive_cipher(CAT_GRID, "abc")
        self.assertEqual(cipher.initially_revealed, tuple(seeded_shuffle(range(1, 7), 294)[:2]))

    def test_fallback_reveal_count(self):
        self.assertEqual(fallback_reveal_count(0), 0)
        self.assertEqual(fallback_reveal_count(1), 1)
        self.assertEqual(fallback_reveal_count(6), 2)
        self.assertEqual(fallback_reveal_count(12), 3)
        self.assertEqual(fallback_reveal_count(26), 6)

    def test_all_blocked_grid(self):
        cipher = derive_cipher(normalize_grid([["#", "#"], ["#", "#"]]), "empty")
        self.assertEqual(cipher.size, 0)
        self.assertEqual(cipher.initially_revealed, ())
        self.assertEqual(cipher.number_grid, ((0, 0), (0, 0)))

    def test_cyrillic_letters(self):
        grid = normalize_grid([["к", "о", "т"], ["#", "ё", "#"]])
        cipher = derive_cipher(grid, "кот")
        self.assertEqual(sorted(cipher.letter_to_number), sorted(["К", "О", "Т", "Ё"]))

    def test_derive_for_puzzle_validates(self):
        puzzle = CrosswordPuzzle(
            id="bad",
            title="Bad",
            language=Language.ENGLISH,
            size=PuzzleSize(rows=4, cols=3),
            grid=CAT_GRID,
        )
        with self.assertRaises(PuzzleValidationError):
            derive_for_puzzle(puzzle)
