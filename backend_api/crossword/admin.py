from django.contrib import admin

from .models import Puzzle, SolvedPuzzle


@admin.register(Puzzle)
class PuzzleAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "language", "rows", "cols", "created_at")
    list_filter = ("language", "rows")
    search_fields = ("id", "title")
    ordering = ("language", "id")
    readonly_fields = ("created_at", "updated_at")


@admin.register(SolvedPuzzle)
class SolvedPuzzleAdmin(admin.ModelAdmin):
    list_display = ("user_id", "puzzle_id", "solved_at")
    search_fields = ("user_id", "puzzle_id")
    ordering = ("user_id", "solved_at")
