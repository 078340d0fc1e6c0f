from django.test import override_settings
from django.urls import reverse
from rest_framework.test import APITestCase

from crossword.domain import distinct_letters
from crossword.seed_utils import load_puzzle_file
from crossword.services import get_crossword_service, get_progress_service, reset_services

ADMIN_KEY = "test-admin-key"


@override_settings(
    CROSSWORD_STORAGE={"PROVIDER": "memory"},
    CROSSWORD_ADMIN_API_KEY=ADMIN_KEY,
    CROSSWORD_ADMIN_BYPASS_IN_DEBUG=False,
)
class CrosswordApiTestCase(APITestCase):
    def setUp(self):
        reset_services()
        self.addCleanup(reset_services)
        get_crossword_service().add_puzzles(load_puzzle_file())

    def solution_cells(self, puzzle_id):
        return [list(row) for row in get_crossword_service().get_puzzle(puzzle_id).grid]


class PuzzleEndpointTests(CrosswordApiTestCase):
    def test_health(self):
        resp = self.client.get(reverse('Health'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Server is up!"})

    def test_list_puzzles(self):
        resp = self.client.get(reverse('puzzle-list'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(sorted(resp.json()), ["basic-storm", "heart-square", "koshka-arbuz", "sontse-ekran"])

        resp = self.client.get(reverse('puzzle-list'), {"language": "ru"})
        self.assertEqual(resp.json(), ["koshka-arbuz"])

        resp = self.client.get(reverse('puzzle-list'), {"language": "Klingon"})
        self.assertEqual(resp.status_code, 400)

    def test_get_puzzle(self):
        resp = self.client.get(reverse('puzzle-detail', kwargs={"puzzle_id": "basic-storm"}))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["size"], {"rows": 5, "cols": 5})
        self.assertEqual(data["revealedLetters"], ["S", "M"])
        self.assertEqual(data["grid"][1][1], "#")

        resp = self.client.get(reverse('puzzle-detail', kwargs={"puzzle_id": "nope"}))
        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.json())


class SelectPuzzleEndpointTests(CrosswordApiTestCase):
    def test_skips_solved_puzzles(self):
        get_progress_service().record_solved("u1", "heart-square")
        resp = self.client.get(
            reverse('puzzle-select'), {"size": "small", "language": "English"}, HTTP_X_USER_ID="u1"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], "basic-storm")

    def test_seeded_selection_is_stable(self):
        params = {"size": "any", "language": "English", "seed": "7"}
        first = self.client.get(reverse('puzzle-select'), params).json()["id"]
        second = self.client.get(reverse('puzzle-select'), params).json()["id"]
        self.assertEqual(first, second)

    def test_language_from_accept_language(self):
        resp = self.client.get(reverse('puzzle-select'), HTTP_ACCEPT_LANGUAGE="uk-UA,uk;q=0.9,en;q=0.5")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], "sontse-ekran")

    def test_all_solved(self):
        get_progress_service().record_solved("u1", "koshka-arbuz")
        resp = self.client.get(reverse('puzzle-select'), {"language": "Russian"}, HTTP_X_USER_ID="u1")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["reason"], "all_solved")

    def test_none_available(self):
        resp = self.client.get(reverse('puzzle-select'), {"size": "big", "language": "en"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["reason"], "none_available")

    def test_invalid_size(self):
        resp = self.client.get(reverse('puzzle-select'), {"size": "huge"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid request")


class CipherEndpointTests(CrosswordApiTestCase):
    def test_cipher(self):
        resp = self.client.get(reverse('puzzle-cipher', kwargs={"puzzle_id": "basic-storm"}))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        puzzle = get_crossword_service().get_puzzle("basic-storm")
        self.assertEqual(data["totalNumbers"], len(distinct_letters(puzzle.grid)))
        self.assertEqual(data["numbers"][1][1], 0)
        self.assertEqual(len(data["initiallyRevealed"]), 2)
        self.assertEqual(sorted(data["revealedLetters"].values()), ["M", "S"])
        self.assertNotIn("numberToLetter", data)

    def test_cipher_is_stable(self):
        url = reverse('puzzle-cipher', kwargs={"puzzle_id": "heart-square"})
        self.assertEqual(self.client.get(url).json(), self.client.get(url).json())

    def test_unknown_puzzle(self):
        resp = self.client.get(reverse('puzzle-cipher', kwargs={"puzzle_id": "nope"}))
        self.assertEqual(resp.status_code, 404)


class CheckEndpointTests(CrosswordApiTestCase):
    def check(self, cells):
        url = reverse('puzzle-check', kwargs={"puzzle_id": "basic-storm"})
        return self.client.post(url, {"cells": cells}, format="json")

    def test_solved(self):
        resp = self.check(self.solution_cells("basic-storm"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "solved")
        self.assertEqual(resp.json()["incorrectCells"], [])

    def test_lowercase_letters_count(self):
        cells = [[c.lower() for c in row] for row in self.solution_cells("basic-storm")]
        self.assertEqual(self.check(cells).json()["status"], "solved")

    def test_incorrect(self):
        cells = self.solution_cells("basic-storm")
        cells[0][0] = "X"
        data = self.check(cells).json()
        self.assertEqual(data["status"], "incorrect")
        self.assertEqual(data["incorrectCells"], [[0, 0]])

    def test_incomplete(self):
        cells = self.solution_cells("basic-storm")
        cells[4][4] = ""
        data = self.check(cells).json()
        self.assertEqual(data["status"], "incomplete")
        self.assertFalse(data["allFilled"])

    def test_wrong_shape(self):
        cells = self.solution_cells("basic-storm")[:4]
        self.assertEqual(self.check(cells).status_code, 400)

    def test_invalid_letter(self):
        cells = self.solution_cells("basic-storm")
        cells[0][0] = "1"
        self.assertEqual(self.check(cells).status_code, 400)


class UserEndpointTests(CrosswordApiTestCase):
    def test_user_id_required(self):
        resp = self.client.post(reverse('user-solved'), {"puzzleId": "heart-square"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "User ID is required"})
        self.assertEqual(self.client.get(reverse('user-progress')).status_code, 400)

    def test_record_solved(self):
        url = reverse('user-solved')
        resp = self.client.post(url, {"puzzleId": "heart-square"}, format="json", HTTP_X_USER_ID="u1")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["created"])
        resp = self.client.post(url, {"puzzleId": "heart-square"}, format="json", HTTP_X_USER_ID="u1")
        self.assertTrue(resp.json()["success"])
        self.assertFalse(resp.json()["created"])

        resp = self.client.post(url, {"puzzleId": "nope"}, format="json", HTTP_X_USER_ID="u1")
        self.assertEqual(resp.status_code, 404)

    def test_progress_and_available(self):
        get_progress_service().record_solved("u1", "heart-square")

        resp = self.client.get(reverse('user-progress'), HTTP_X_USER_ID="u1")
        self.assertEqual(resp.json(), {"userId": "u1", "solvedPuzzleIds": ["heart-square"], "totalSolved": 1})

        resp = self.client.get(reverse('user-available'), {"language": "English"}, HTTP_X_USER_ID="u1")
        data = resp.json()
        self.assertEqual(data["solvedPuzzleIds"], ["heart-square"])
        self.assertEqual(data["unsolvedPuzzleIds"], ["basic-storm"])
        self.assertEqual(data["totalAvailable"], 2)

    def test_has_solved_and_forget(self):
        get_progress_service().record_solved("u1", "heart-square")
        url = reverse('user-has-solved', kwargs={"puzzle_id": "heart-square"})
        self.assertTrue(self.client.get(url, HTTP_X_USER_ID="u1").json()["hasSolved"])
        self.assertFalse(self.client.get(url, HTTP_X_USER_ID="u2").json()["hasSolved"])

        resp = self.client.post(
            reverse('user-forget'), {"puzzleIds": ["heart-square"]}, format="json", HTTP_X_USER_ID="u1"
        )
        self.assertEqual(resp.json(), {"success": True, "removed": 1})
        self.assertFalse(self.client.get(url, HTTP_X_USER_ID="u1").json()["hasSolved"])


class AdminEndpointTests(CrosswordApiTestCase):
    new_puzzle = {
        "id": "cat-dog",
        "title": "Cat and Dog",
        "language": "English",
        "size": {"rows": 3, "cols": 3},
        "grid": [["C", "A", "T"], ["O", "#", "O"], ["D", "O", "G"]],
        "revealedLetters": ["C"],
    }

    def setUp(self):
        super().setUp()
        self.client.credentials(HTTP_X_ADMIN_KEY=ADMIN_KEY)

    def test_key_required(self):
        self.client.credentials()
        self.assertEqual(self.client.get(reverse('admin-puzzles')).status_code, 403)
        self.client.credentials(HTTP_X_ADMIN_KEY="wrong")
        self.assertEqual(self.client.get(reverse('admin-puzzles')).status_code, 403)

    @override_settings(DEBUG=True, CROSSWORD_ADMIN_BYPASS_IN_DEBUG=True)
    def test_debug_bypass(self):
        self.client.credentials()
        self.assertEqual(self.client.get(reverse('admin-puzzles')).status_code, 200)

    def test_add_puzzle(self):
        resp = self.client.post(reverse('admin-puzzles'), self.new_puzzle, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["puzzleId"], "cat-dog")
        self.assertEqual(get_crossword_service().get_puzzle("cat-dog").revealed_letters, ("C",))

        listed = self.client.get(reverse('admin-puzzles')).json()
        self.assertIn("cat-dog", [p["id"] for p in listed])

    def test_add_puzzle_size_mismatch(self):
        bad = dict(self.new_puzzle, size={"rows": 4, "cols": 3})
        resp = self.client.post(reverse('admin-puzzles'), bad, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("cat-dog", get_crossword_service().available_ids())

    def test_add_puzzle_with_non_letter_cell(self):
        bad = dict(self.new_puzzle, grid=[["C", "A", "T"], ["O", "#", "O"], ["D", "1", "G"]])
        resp = self.client.post(reverse('admin-puzzles'), bad, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("cat-dog", get_crossword_service().available_ids())

    def test_upload(self):
        second = dict(self.new_puzzle, id="cat-dog-2")
        resp = self.client.post(
            reverse('admin-upload-puzzles'), {"puzzles": [self.new_puzzle, second]}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["count"], 2)

        resp = self.client.post(reverse('admin-upload-puzzles'), [self.new_puzzle, self.new_puzzle], format="json")
        self.assertEqual(resp.status_code, 400)

    def test_upload_is_all_or_nothing(self):
        bad = dict(self.new_puzzle, id="broken", grid=[["C", "A"]])
        resp = self.client.post(reverse('admin-upload-puzzles'), [self.new_puzzle, bad], format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertNotIn("cat-dog", get_crossword_service().available_ids())

    def test_download(self):
        resp = self.client.get(reverse('admin-download-puzzles'))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("attachment", resp["Content-Disposition"])
        self.assertEqual(len(resp.json()), 4)

    def test_delete(self):
        url = reverse('admin-delete-puzzle', kwargs={"puzzle_id": "heart-square"})
        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertEqual(self.client.delete(url).status_code, 404)

        resp = self.client.post(
            reverse('admin-delete-puzzles'), {"puzzleIds": ["basic-storm", "heart-square"]}, format="json"
        )
        data = resp.json()
        self.assertEqual(data["deletedIds"], ["basic-storm"])
        self.assertEqual(len(data["errors"]), 1)

    def test_users(self):
        get_progress_service().record_solved("u1", "heart-square")
        get_progress_service().record_solved("u1", "basic-storm")
        self.assertEqual(self.client.get(reverse('admin-users')).json(), [{"userId": "u1", "totalSolved": 2}])
        resp = self.client.get(reverse('admin-user-detail', kwargs={"user_id": "u1"}))
        self.assertEqual(resp.json()["totalSolved"], 2)
