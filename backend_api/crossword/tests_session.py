from django.test import SimpleTestCase

from crossword.cipher import CheckStatus, InputMode, PlaySession, PolicyRegistry, get_policy
from crossword.cipher.engines import IndependentPolicy, LinkedPolicy
from crossword.exceptions import PuzzleValidationError

GRID = [
    ["C", "A", "T"],
    ["O", "#", "O"],
    ["D", "O", "G"],
]
O_CELLS = [(1, 0), (1, 2), (2, 1)]


def make_session(difficulty="easy"):
    return PlaySession("cat-dog", GRID, ["C", "A"], difficulty=difficulty)


def fill_solution(session, skip=()):
    for r, row in enumerate(GRID):
        for c, letter in enumerate(row):
            if letter != "#" and (r, c) not in skip:
                session.enter_letter(r, c, letter.lower())


class PolicyRegistryTests(SimpleTestCase):
    def test_aliases(self):
        self.assertIsInstance(get_policy("easy"), LinkedPolicy)
        self.assertIsInstance(get_policy("Linked"), LinkedPolicy)
        self.assertIsInstance(get_policy("hard"), IndependentPolicy)
        self.assertIsInstance(get_policy("independent"), IndependentPolicy)
        self.assertIn("hard", PolicyRegistry.names())

    def test_unknown_difficulty(self):
        with self.assertRaises(KeyError):
            get_policy("nightmare")


class SessionSetupTests(SimpleTestCase):
    def test_revealed_cells_start_filled_and_readonly(self):
        session = make_session()
        self.assertEqual(session.value_at(0, 0), "C")
        self.assertEqual(session.value_at(0, 1), "A")
        self.assertTrue(session.cell(0, 0).is_revealed)
        self.assertTrue(session.cell(0, 0).is_readonly)
        self.assertEqual(session.value_at(0, 2), "")
        self.assertIsNone(session.cell(1, 1))
        self.assertEqual(session.values()[1][1], "#")

    def test_fallback_reveal_then_solve(self):
        session = PlaySession("test-puzzle", GRID)
        self.assertEqual(session.revealed_numbers, frozenset({1, 3}))
        self.assertEqual(session.value_at(0, 0), "C")
        self.assertEqual(session.value_at(0, 1), "A")
        self.assertEqual(session.check_solution().status, CheckStatus.INCOMPLETE)
        fill_solution(session)
        self.assertEqual(session.check_solution().status, CheckStatus.SOLVED)

    def test_rejects_ragged_grid(self):
        with self.assertRaises(PuzzleValidationError):
            PlaySession("ragged", [["A", "B"], ["C"]])
        with self.assertRaises(PuzzleValidationError):
            PlaySession("empty", [])

    def test_revealed_numbers_are_locked(self):
        session = make_session()
        c = session.cipher.letter_to_number["C"]
        self.assertFalse(session.update_answer(c, "X"))
        self.assertEqual(session.value_at(0, 0), "C")
        self.assertFalse(session.enter_letter(0, 0, "X"))

    def test_invalid_input(self):
        session = make_session()
        with self.assertRaises(ValueError):
            session.update_answer(99, "A")
        with self.assertRaises(ValueError):
            session.enter_letter(0, 2, "1")
        self.assertFalse(session.enter_letter(1, 1, "A"))


class LinkedPolicyTests(SimpleTestCase):
    def test_entry_fills_every_cell_with_the_number(self):
        session = make_session()
        self.assertTrue(session.enter_letter(1, 0, "o"))
        for r, c in O_CELLS:
            self.assertEqual(session.value_at(r, c), "O")
        o = session.cipher.letter_to_number["O"]
        self.assertEqual(session.decoder_state(o).letter, "O")
        self.assertFalse(session.decoder_state(o).revealed)

    def test_decoder_shows_wrong_letters_too(self):
        session = make_session()
        session.enter_letter(2, 1, "Q")
        o = session.cipher.letter_to_number["O"]
        self.assertEqual(session.decoder_state(o).letter, "Q")

    def test_clearing_a_letter(self):
        session = make_session()
        session.enter_letter(1, 0, "O")
        session.enter_letter(1, 2, "")
        for r, c in O_CELLS:
            self.assertEqual(session.value_at(r, c), "")
        o = session.cipher.letter_to_number["O"]
        self.assertIsNone(session.decoder_state(o).letter)

    def test_revealed_decoder_entries(self):
        session = make_session()
        a = session.cipher.letter_to_number["A"]
        entry = session.decoder()[a]
        self.assertEqual(entry.letter, "A")
        self.assertTrue(entry.revealed)
        self.assertEqual(sorted(session.decoder()), [1, 2, 3, 4, 5, 6])


class IndependentPolicyTests(SimpleTestCase):
    def test_entry_touches_one_cell(self):
        session = make_session("hard")
        session.enter_letter(1, 0, "O")
        self.assertEqual(session.value_at(1, 0), "O")
        self.assertEqual(session.value_at(1, 2), "")
        self.assertEqual(session.value_at(2, 1), "")

    def test_decoder_needs_all_cells_to_agree(self):
        session = make_session("hard")
        o = session.cipher.letter_to_number["O"]
        session.enter_letter(1, 0, "O")
        session.enter_letter(1, 2, "O")
        self.assertIsNone(session.decoder_state(o).letter)
        session.enter_letter(2, 1, "Q")
        self.assertIsNone(session.decoder_state(o).letter)
        session.enter_letter(2, 1, "o")
        self.assertEqual(session.decoder_state(o).letter, "O")

    def test_update_without_cell(self):
        session = make_session("hard")
        o = session.cipher.letter_to_number["O"]
        with self.assertRaises(ValueError):
            session.update_answer(o, "O")
        t = session.cipher.letter_to_number["T"]
        with self.assertRaises(ValueError):
            session.update_answer(t, "T", (1, 0))


class CheckSolutionTests(SimpleTestCase):
    def test_incomplete(self):
        session = make_session()
        result = session.check_solution()
        self.assertFalse(result.all_filled)
        self.assertTrue(result.all_correct)
        self.assertEqual(result.status, CheckStatus.INCOMPLETE)

    def test_solved(self):
        session = make_session("hard")
        fill_solution(session)
        result = session.check_solution()
        self.assertTrue(result.is_solved)
        self.assertEqual(result.incorrect_cells, ())

    def test_incorrect_cells_reported(self):
        session = make_session("hard")
        fill_solution(session)
        session.enter_letter(2, 2, "X")
        result = session.check_solution()
        self.assertEqual(result.status, CheckStatus.INCORRECT)
        self.assertEqual(result.incorrect_cells, ((2, 2),))

    def test_wrong_and_empty_is_incomplete(self):
        session = make_session("hard")
        fill_solution(session, skip=[(2, 0)])
        session.enter_letter(2, 2, "X")
        result = session.check_solution()
        self.assertEqual(result.status, CheckStatus.INCOMPLETE)
        self.assertFalse(result.all_correct)


class SessionActionsTests(SimpleTestCase):
    def test_clear_keeps_revealed(self):
        session = make_session()
        fill_solution(session)
        session.clear()
        self.assertEqual(session.value_at(0, 0), "C")
        self.assertEqual(session.value_at(0, 2), "")
        self.assertEqual(set(session.answers), set(session.revealed_numbers))

    def test_reveal_all(self):
        session = make_session()
        session.reveal_all()
        self.assertEqual(session.values(), GRID)
        self.assertTrue(session.check_solution().is_solved)
        self.assertFalse(session.enter_letter(2, 2, "X"))
        session.clear()
        self.assertEqual(session.value_at(2, 2), "G")

    def test_mouse_mode_locks_cells(self):
        session = make_session()
        session.set_input_mode(InputMode.MOUSE)
        self.assertTrue(session.cell(0, 2).is_mouse_locked)
        self.assertFalse(session.cell(0, 0).is_mouse_locked)
        self.assertFalse(session.enter_letter(0, 2, "T"))
        self.assertTrue(session.pick_letter(0, 2, "T"))
        self.assertEqual(session.value_at(0, 2), "T")
        self.assertFalse(session.pick_letter(0, 0, "X"))

        session.set_input_mode(InputMode.KEYBOARD)
        self.assertFalse(session.cell(0, 2).is_mouse_locked)
        self.assertTrue(session.cell(0, 0).is_revealed)
        self.assertFalse(session.pick_letter(0, 2, "X"))

    def test_switch_to_hard_keeps_cell_values(self):
        session = make_session()
        session.enter_letter(1, 0, "O")
        session.set_difficulty("hard")
        self.assertEqual(session.difficulty, "hard")
        for r, c in O_CELLS:
            self.assertEqual(session.value_at(r, c), "O")
        self.assertEqual(set(session.answers), set(session.revealed_numbers))

    def test_switch_to_easy_keeps_agreed_numbers_only(self):
        session = make_session("hard")
        session.enter_letter(1, 0, "O")
        session.enter_letter(1, 2, "O")
        session.enter_letter(0, 2, "T")
        session.set_difficulty("easy")
        self.assertEqual(session.difficulty, "easy")
        self.assertEqual(session.value_at(0, 2), "T")
        for r, c in O_CELLS:
            self.assertEqual(session.value_at(r, c), "")
        self.assertEqual(session.value_at(0, 0), "C")
