from django.urls import path
from .views import (
    health,
    list_puzzles,
    get_puzzle,
    select_puzzle,
    get_cipher,
    check_puzzle,
    record_solved,
    user_progress,
    user_available,
    user_has_solved,
    user_forget,
    admin_puzzles,
    admin_delete_puzzle,
    admin_delete_puzzles,
    admin_upload_puzzles,
    admin_download_puzzles,
    admin_users,
    admin_user_detail,
)

urlpatterns = [
    path('health/', health, name='Health'),
    path('crossword/puzzles', list_puzzles, name='puzzle-list'),
    path('crossword/puzzle', select_puzzle, name='puzzle-select'),
    path('crossword/puzzle/<str:puzzle_id>', get_puzzle, name='puzzle-detail'),
    path('crossword/puzzle/<str:puzzle_id>/cipher', get_cipher, name='puzzle-cipher'),
    path('crossword/puzzle/<str:puzzle_id>/check', check_puzzle, name='puzzle-check'),
    path('user/solved', record_solved, name='user-solved'),
    path('user/progress', user_progress, name='user-progress'),
    path('user/available', user_available, name='user-available'),
    path('user/has-solved/<str:puzzle_id>', user_has_solved, name='user-has-solved'),
    path('user/forget', user_forget, name='user-forget'),
    path('admin/puzzles', admin_puzzles, name='admin-puzzles'),
    path('admin/puzzles/delete-bulk', admin_delete_puzzles, name='admin-delete-puzzles'),
    path('admin/puzzles/upload', admin_upload_puzzles, name='admin-upload-puzzles'),
    path('admin/puzzles/download', admin_download_puzzles, name='admin-download-puzzles'),
    path('admin/puzzles/<str:puzzle_id>', admin_delete_puzzle, name='admin-delete-puzzle'),
    path('admin/users', admin_users, name='admin-users'),
    path('admin/users/<str:user_id>', admin_user_detail, name='admin-user-detail'),
]
