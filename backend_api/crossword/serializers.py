from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from .domain import BLOCKED, CrosswordPuzzle, Language, PuzzleSize, normalize_grid
from .exceptions import PuzzleValidationError


def _validate_language(value: str) -> str:
    try:
        return Language.parse(value).value
    except ValueError as e:
        raise serializers.ValidationError(str(e))


# PUBLIC_INTERFACE
class PuzzleSizeSerializer(serializers.Serializer):
    """Declared grid size."""

    rows = serializers.IntegerField(min_value=1)
    cols = serializers.IntegerField(min_value=1)


# PUBLIC_INTERFACE
class PuzzleSerializer(serializers.Serializer):
    """A puzzle record as stored and served.

    Fields:
    - id, title: non-empty strings
    - language: English | Russian | Ukrainian (ISO tags en/ru/uk accepted)
    - size: {rows, cols}, must match the grid shape
    - grid: rows of single-character strings, '#' for blocked cells
    - revealedLetters (optional): letters shown from the start

    On input, validated_data["puzzle"] holds the validated CrosswordPuzzle.
    """

    id = serializers.CharField(max_length=128)
    title = serializers.CharField(max_length=200)
    language = serializers.CharField(default=Language.ENGLISH.value)
    size = PuzzleSizeSerializer()
    grid = serializers.ListField(
        child=serializers.ListField(child=serializers.CharField(min_length=1, max_length=1, trim_whitespace=False)),
        allow_empty=False,
    )
    revealedLetters = serializers.ListField(
        child=serializers.CharField(min_length=1, max_length=1),
        required=False,
        allow_null=True,
    )

    def validate_language(self, value: str) -> str:
        return _validate_language(value)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        revealed = attrs.get("revealedLetters")
        puzzle = CrosswordPuzzle(
            id=attrs["id"].strip(),
            title=attrs["title"].strip(),
            language=Language.parse(attrs["language"]),
            size=PuzzleSize(rows=attrs["size"]["rows"], cols=attrs["size"]["cols"]),
            grid=normalize_grid(attrs["grid"]),
            revealed_letters=tuple(x.upper() for x in revealed) if revealed else None,
        )
        try:
            puzzle.validate()
        except PuzzleValidationError as e:
            raise serializers.ValidationError(str(e))
        attrs["puzzle"] = puzzle
        return attrs


# PUBLIC_INTERFACE
class CipherResponseSerializer(serializers.Serializer):
    """Derived cipher for a puzzle, without the full letter mapping."""

    puzzleId = serializers.CharField()
    numbers = serializers.ListField(
        child=serializers.ListField(child=serializers.IntegerField()),
        help_text="Cipher number per cell, 0 for blocked cells.",
    )
    totalNumbers = serializers.IntegerField()
    initiallyRevealed = serializers.ListField(child=serializers.IntegerField())
    revealedLetters = serializers.DictField(
        child=serializers.CharField(), help_text="Letters of the initially revealed numbers, keyed by number."
    )


# PUBLIC_INTERFACE
class CheckRequestSerializer(serializers.Serializer):
    """Letters typed by the player, one row per grid row ('' or '#' for none)."""

    cells = serializers.ListField(
        child=serializers.ListField(
            child=serializers.CharField(allow_blank=True, max_length=1, trim_whitespace=False)
        ),
        allow_empty=False,
    )

    def validate_cells(self, value):
        for row in value:
            for cell in row:
                if cell and cell != BLOCKED and not cell.isalpha():
                    raise serializers.ValidationError(f"Invalid letter {cell!r}.")
        return value


# PUBLIC_INTERFACE
class CheckResponseSerializer(serializers.Serializer):
    """Outcome of checking a filled grid."""

    puzzleId = serializers.CharField()
    status = serializers.ChoiceField(choices=["solved", "incorrect", "incomplete"])
    allFilled = serializers.BooleanField()
    allCorrect = serializers.BooleanField()
    incorrectCells = serializers.ListField(
        child=serializers.ListField(child=serializers.IntegerField()),
        help_text="[row, col] of every filled cell holding a wrong letter.",
    )


# PUBLIC_INTERFACE
class RecordSolvedRequestSerializer(serializers.Serializer):
    """Request payload to record a solved puzzle."""

    puzzleId = serializers.CharField(max_length=128)


# PUBLIC_INTERFACE
class PuzzleIdsRequestSerializer(serializers.Serializer):
    """Request payload carrying a non-empty list of puzzle ids."""

    puzzleIds = serializers.ListField(child=serializers.CharField(max_length=128), allow_empty=False)


# PUBLIC_INTERFACE
class ProgressResponseSerializer(serializers.Serializer):
    userId = serializers.CharField()
    solvedPuzzleIds = serializers.ListField(child=serializers.CharField())
    totalSolved = serializers.IntegerField()


# PUBLIC_INTERFACE
class AvailablePuzzlesResponseSerializer(serializers.Serializer):
    unsolvedPuzzleIds = serializers.ListField(child=serializers.CharField())
    solvedPuzzleIds = serializers.ListField(child=serializers.CharField())
    totalAvailable = serializers.IntegerField()
    totalSolved = serializers.IntegerField()


# PUBLIC_INTERFACE
class UserSummarySerializer(serializers.Serializer):
    userId = serializers.CharField()
    totalSolved = serializers.IntegerField()


# PUBLIC_INTERFACE
class ErrorResponseSerializer(serializers.Serializer):
    """Error payload; reason is set for failed selections."""

    error = serializers.CharField()
    details = serializers.CharField(required=False)
    reason = serializers.ChoiceField(choices=["all_solved", "none_available"], required=False)
