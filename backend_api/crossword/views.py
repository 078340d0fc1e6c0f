from __future__ import annotations

from typing import Optional, Tuple

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .cipher import PlaySession, derive_for_puzzle
from .domain import BLOCKED, Language
from .exceptions import NoPuzzlesAvailableError, PuzzleNotFoundError, PuzzleValidationError
from .permissions import HasAdminApiKey
from .selection import SizeCategory
from .serializers import (
    AvailablePuzzlesResponseSerializer,
    CheckRequestSerializer,
    CheckResponseSerializer,
    CipherResponseSerializer,
    ErrorResponseSerializer,
    ProgressResponseSerializer,
    PuzzleIdsRequestSerializer,
    PuzzleSerializer,
    RecordSolvedRequestSerializer,
    UserSummarySerializer,
)
from .services import get_crossword_service, get_progress_service

USER_ID_HEADER = "X-User-Id"

_user_header = openapi.Parameter(
    USER_ID_HEADER, openapi.IN_HEADER, type=openapi.TYPE_STRING, required=True, description="Player identifier."
)
_optional_user_header = openapi.Parameter(
    USER_ID_HEADER, openapi.IN_HEADER, type=openapi.TYPE_STRING, required=False,
    description="Player identifier; puzzles this player solved are skipped.",
)
_admin_key_header = openapi.Parameter(
    "X-Admin-Key", openapi.IN_HEADER, type=openapi.TYPE_STRING, required=False, description="Admin API key."
)
_language_query = openapi.Parameter(
    "language", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False,
    description="English | Russian | Ukrainian (or en/ru/uk).",
)
_id_list = openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING))


def _user_id(request) -> Optional[str]:
    return (request.headers.get(USER_ID_HEADER) or "").strip() or None


def _require_user(request) -> Tuple[Optional[str], Optional[Response]]:
    """Return (user_id, None) or (None, 400 response) when the header is missing."""
    user_id = _user_id(request)
    if not user_id:
        return None, Response({"error": "User ID is required"}, status=status.HTTP_400_BAD_REQUEST)
    return user_id, None


def _query_language(request) -> Optional[Language]:
    """Language from the ?language= parameter, None if absent. Raises ValueError."""
    raw = (request.query_params.get("language") or "").strip()
    return Language.parse(raw) if raw else None


def _accept_language(request) -> Optional[Language]:
    """First supported language in Accept-Language, ignoring q-values."""
    header = request.headers.get("Accept-Language") or ""
    for part in header.split(","):
        tag = part.split(";")[0].strip()
        if not tag or tag == "*":
            continue
        try:
            return Language.parse(tag)
        except ValueError:
            continue
    return None


def _request_language(request) -> Language:
    """Query parameter, then Accept-Language, then English."""
    return _query_language(request) or _accept_language(request) or Language.ENGLISH


def _bad_request(message: str) -> Response:
    return Response({"error": "Invalid request", "details": message}, status=status.HTTP_400_BAD_REQUEST)


def _not_found(e: Exception) -> Response:
    return Response({"error": str(e)}, status=status.HTTP_404_NOT_FOUND)


# PUBLIC_INTERFACE
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health(request):
    """Health check endpoint for the API.

    Returns:
    - 200 OK with {"message": "Server is up!"}
    """
    return Response({"message": "Server is up!"})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="list_puzzles",
    operation_summary="List puzzle ids",
    operation_description="Ids of every stored puzzle, optionally limited to one language.",
    manual_parameters=[_language_query],
    responses={200: openapi.Response("OK", schema=_id_list), 400: ErrorResponseSerializer},
    tags=["crossword"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def list_puzzles(request):
    """Return the ids of stored puzzles, filtered by ?language= when given."""
    try:
        language = _query_language(request)
    except ValueError as e:
        return _bad_request(str(e))
    return Response(get_crossword_service().available_ids(language), status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_puzzle",
    operation_summary="Get a puzzle by id",
    responses={200: PuzzleSerializer, 404: ErrorResponseSerializer},
    tags=["crossword"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_puzzle(request, puzzle_id: str):
    """Return the full puzzle record, or 404 if the id is unknown."""
    try:
        puzzle = get_crossword_service().get_puzzle(puzzle_id)
    except PuzzleNotFoundError as e:
        return _not_found(e)
    return Response(PuzzleSerializer(puzzle.to_dict()).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="select_puzzle",
    operation_summary="Pick a puzzle for the player",
    operation_description="""
Pick one puzzle of the requested size and language that the player has not
solved yet.

Query params:
- size (optional): small | medium | big | any (default any)
- seed (optional): makes the pick reproducible
- language (optional): overrides the Accept-Language header

Returns 404 with reason "all_solved" when the player solved every matching
puzzle, or "none_available" when no puzzle matches at all.
""",
    manual_parameters=[
        openapi.Parameter("size", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
        openapi.Parameter("seed", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
        _language_query,
        _optional_user_header,
    ],
    responses={200: PuzzleSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=["crossword"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def select_puzzle(request):
    """Select a puzzle by size and language, skipping the player's solved ones."""
    try:
        size = SizeCategory.parse(request.query_params.get("size"))
        language = _request_language(request)
    except ValueError as e:
        return _bad_request(str(e))
    seed = request.query_params.get("seed") or None

    try:
        puzzle = get_crossword_service().select(size, language, user_id=_user_id(request), seed=seed)
    except NoPuzzlesAvailableError as e:
        return Response({"error": str(e), "reason": e.reason}, status=status.HTTP_404_NOT_FOUND)
    return Response(PuzzleSerializer(puzzle.to_dict()).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_cipher",
    operation_summary="Get the cipher numbers for a puzzle",
    operation_description="""
Derive the letter-to-number cipher for a puzzle. The response carries the
number grid and the initially revealed numbers with their letters, but not
the rest of the mapping.
""",
    responses={200: CipherResponseSerializer, 404: ErrorResponseSerializer},
    tags=["crossword"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_cipher(request, puzzle_id: str):
    """Return the number grid and initially revealed numbers of a puzzle."""
    try:
        puzzle = get_crossword_service().get_puzzle(puzzle_id)
    except PuzzleNotFoundError as e:
        return _not_found(e)

    cipher = derive_for_puzzle(puzzle)
    resp = {
        "puzzleId": puzzle.id,
        "numbers": [list(row) for row in cipher.number_grid],
        "totalNumbers": cipher.size,
        "initiallyRevealed": list(cipher.initially_revealed),
        "revealedLetters": {str(n): cipher.number_to_letter[n] for n in cipher.initially_revealed},
    }
    return Response(CipherResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="check_puzzle",
    operation_summary="Check a filled grid",
    operation_description="""
Check the letters a player typed. Each cell is compared on its own, the way
hard mode does; revealed cells always count as correct.

Request body:
- cells: rows of single letters, '' for empty and '#' for blocked cells

Response status is one of solved | incorrect | incomplete.
""",
    request_body=CheckRequestSerializer,
    responses={200: CheckResponseSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=["crossword"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def check_puzzle(request, puzzle_id: str):
    """Score a submitted grid against the puzzle solution."""
    try:
        puzzle = get_crossword_service().get_puzzle(puzzle_id)
    except PuzzleNotFoundError as e:
        return _not_found(e)

    serializer = CheckRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    cells = serializer.validated_data["cells"]
    if len(cells) != puzzle.size.rows or any(len(row) != puzzle.size.cols for row in cells):
        return _bad_request(f"cells must be a {puzzle.size.rows}x{puzzle.size.cols} grid.")

    try:
        session = PlaySession.for_puzzle(puzzle, difficulty="hard")
    except PuzzleValidationError as e:
        return _bad_request(str(e))
    for r, row in enumerate(cells):
        for c, value in enumerate(row):
            if value and value != BLOCKED:
                session.enter_letter(r, c, value)

    result = session.check_solution()
    resp = {
        "puzzleId": puzzle.id,
        "status": result.status.value,
        "allFilled": result.all_filled,
        "allCorrect": result.all_correct,
        "incorrectCells": [list(ref) for ref in result.incorrect_cells],
    }
    return Response(CheckResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="record_solved",
    operation_summary="Record a solved puzzle",
    operation_description="Mark a puzzle as solved for the X-User-Id player. Repeating the call is a no-op.",
    manual_parameters=[_user_header],
    request_body=RecordSolvedRequestSerializer,
    responses={200: openapi.Response("OK"), 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=["user"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def record_solved(request):
    """Record that the player solved a puzzle."""
    user_id, error = _require_user(request)
    if error:
        return error
    serializer = RecordSolvedRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    puzzle_id = serializer.validated_data["puzzleId"]

    try:
        created = get_progress_service().record_solved(user_id, puzzle_id)
    except PuzzleNotFoundError as e:
        return _not_found(e)
    return Response(
        {
            "success": True,
            "created": created,
            "message": "Puzzle marked as solved" if created else "Puzzle was already marked as solved",
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="user_progress",
    operation_summary="Get the player's progress",
    manual_parameters=[_user_header],
    responses={200: ProgressResponseSerializer, 400: ErrorResponseSerializer},
    tags=["user"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def user_progress(request):
    """Return solved puzzle ids and the total solved count for the player."""
    user_id, error = _require_user(request)
    if error:
        return error
    data = get_progress_service().progress(user_id)
    return Response(ProgressResponseSerializer(data).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="user_available",
    operation_summary="Split puzzles into solved and unsolved for the player",
    manual_parameters=[_user_header, _language_query],
    responses={200: AvailablePuzzlesResponseSerializer, 400: ErrorResponseSerializer},
    tags=["user"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def user_available(request):
    """Partition puzzle ids (optionally of one language) by solved state."""
    user_id, error = _require_user(request)
    if error:
        return error
    try:
        language = _query_language(request)
    except ValueError as e:
        return _bad_request(str(e))
    data = get_progress_service().available(user_id, language)
    return Response(AvailablePuzzlesResponseSerializer(data).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="user_has_solved",
    operation_summary="Check whether the player solved a puzzle",
    manual_parameters=[_user_header],
    responses={200: openapi.Response("OK"), 400: ErrorResponseSerializer},
    tags=["user"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def user_has_solved(request, puzzle_id: str):
    """Return {"hasSolved": bool} for the player and puzzle."""
    user_id, error = _require_user(request)
    if error:
        return error
    return Response({"hasSolved": get_progress_service().has_solved(user_id, puzzle_id)})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="user_forget",
    operation_summary="Forget solved puzzles",
    operation_description="Remove puzzles from the player's solved set so they can be served again.",
    manual_parameters=[_user_header],
    request_body=PuzzleIdsRequestSerializer,
    responses={200: openapi.Response("OK"), 400: ErrorResponseSerializer},
    tags=["user"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def user_forget(request):
    """Remove the given ids from the player's solved set."""
    user_id, error = _require_user(request)
    if error:
        return error
    serializer = PuzzleIdsRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    removed = get_progress_service().forget(user_id, serializer.validated_data["puzzleIds"])
    return Response({"success": True, "removed": removed}, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_list_puzzles",
    operation_summary="List all puzzles (admin)",
    manual_parameters=[_admin_key_header],
    responses={200: PuzzleSerializer(many=True)},
    tags=["admin"],
)
@swagger_auto_schema(
    method="post",
    operation_id="admin_add_puzzle",
    operation_summary="Add or replace a puzzle (admin)",
    manual_parameters=[_admin_key_header],
    request_body=PuzzleSerializer,
    responses={201: openapi.Response("Created"), 400: ErrorResponseSerializer},
    tags=["admin"],
)
@api_view(["GET", "POST"])
@permission_classes([HasAdminApiKey])
def admin_puzzles(request):
    """GET lists every stored puzzle; POST validates and stores one puzzle."""
    service = get_crossword_service()
    if request.method == "GET":
        data = [p.to_dict() for p in service.list_puzzles()]
        return Response(PuzzleSerializer(data, many=True).data, status=status.HTTP_200_OK)

    serializer = PuzzleSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    puzzle = serializer.validated_data["puzzle"]
    service.add_puzzle(puzzle)
    return Response(
        {"message": "Puzzle added successfully", "puzzleId": puzzle.id},
        status=status.HTTP_201_CREATED,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="delete",
    operation_id="admin_delete_puzzle",
    operation_summary="Delete a puzzle (admin)",
    manual_parameters=[_admin_key_header],
    responses={200: openapi.Response("OK"), 404: ErrorResponseSerializer},
    tags=["admin"],
)
@api_view(["DELETE"])
@permission_classes([HasAdminApiKey])
def admin_delete_puzzle(request, puzzle_id: str):
    """Delete one puzzle by id."""
    try:
        get_crossword_service().delete_puzzle(puzzle_id)
    except PuzzleNotFoundError as e:
        return _not_found(e)
    return Response({"message": "Puzzle deleted successfully", "puzzleId": puzzle_id})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="admin_delete_puzzles",
    operation_summary="Delete several puzzles (admin)",
    manual_parameters=[_admin_key_header],
    request_body=PuzzleIdsRequestSerializer,
    responses={200: openapi.Response("OK"), 400: ErrorResponseSerializer},
    tags=["admin"],
)
@api_view(["POST"])
@permission_classes([HasAdminApiKey])
def admin_delete_puzzles(request):
    """Delete every listed puzzle; unknown ids are reported, not fatal."""
    serializer = PuzzleIdsRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)

    service = get_crossword_service()
    deleted, errors = [], []
    for puzzle_id in serializer.validated_data["puzzleIds"]:
        try:
            service.delete_puzzle(puzzle_id)
        except PuzzleNotFoundError as e:
            errors.append(f"{puzzle_id}: {e}")
        else:
            deleted.append(puzzle_id)
    return Response(
        {
            "message": f"Successfully deleted {len(deleted)} puzzle(s)",
            "deletedIds": deleted,
            "errors": errors,
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="admin_upload_puzzles",
    operation_summary="Bulk upload puzzles (admin)",
    operation_description="""
Upload a list of puzzles (or {"puzzles": [...]}). Every record is validated
before anything is written; existing ids are replaced.
""",
    manual_parameters=[_admin_key_header],
    request_body=PuzzleSerializer(many=True),
    responses={200: openapi.Response("OK"), 400: ErrorResponseSerializer},
    tags=["admin"],
)
@api_view(["POST"])
@permission_classes([HasAdminApiKey])
def admin_upload_puzzles(request):
    """Validate and store a batch of puzzles."""
    items = request.data
    if isinstance(items, dict):
        items = items.get("puzzles")
    if not isinstance(items, list) or not items:
        return _bad_request("Expected a non-empty list of puzzles.")

    serializer = PuzzleSerializer(data=items, many=True)
    serializer.is_valid(raise_exception=True)
    puzzles = [entry["puzzle"] for entry in serializer.validated_data]
    ids = [p.id for p in puzzles]
    if len(set(ids)) != len(ids):
        return _bad_request("Duplicate puzzle ids in upload.")

    count = get_crossword_service().add_puzzles(puzzles)
    return Response(
        {"message": f"Uploaded {count} puzzle(s)", "count": count, "puzzleIds": ids},
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_download_puzzles",
    operation_summary="Download all puzzles as JSON (admin)",
    manual_parameters=[_admin_key_header],
    responses={200: PuzzleSerializer(many=True)},
    tags=["admin"],
)
@api_view(["GET"])
@permission_classes([HasAdminApiKey])
def admin_download_puzzles(request):
    """Return every puzzle as a JSON attachment ready for re-upload."""
    data = [p.to_dict() for p in get_crossword_service().list_puzzles()]
    return Response(
        PuzzleSerializer(data, many=True).data,
        status=status.HTTP_200_OK,
        headers={"Content-Disposition": 'attachment; filename="puzzles.json"'},
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_users",
    operation_summary="List players with recorded progress (admin)",
    manual_parameters=[_admin_key_header],
    responses={200: UserSummarySerializer(many=True)},
    tags=["admin"],
)
@api_view(["GET"])
@permission_classes([HasAdminApiKey])
def admin_users(request):
    """Every player id with their solved count."""
    return Response(UserSummarySerializer(get_progress_service().users(), many=True).data)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_user_detail",
    operation_summary="Get one player's progress (admin)",
    manual_parameters=[_admin_key_header],
    responses={200: ProgressResponseSerializer},
    tags=["admin"],
)
@api_view(["GET"])
@permission_classes([HasAdminApiKey])
def admin_user_detail(request, user_id: str):
    """Progress of any player, looked up by id."""
    return Response(ProgressResponseSerializer(get_progress_service().progress(user_id)).data)
