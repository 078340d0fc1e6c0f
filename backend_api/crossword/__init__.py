"""
Crossword app package initializer.

Re-exports the cipher engine and puzzle selection helpers so callers can
import from crossword directly, e.g.:

    from crossword import PlaySession, select_puzzle
"""

# PUBLIC_INTERFACE
from .cipher import (
    Cipher,
    derive_cipher,
    LinkedPolicy,
    IndependentPolicy,
    PolicyRegistry,
    get_policy,
    PlaySession,
    CheckStatus,
)
from .selection import SizeCategory, filter_puzzles, select_puzzle

__all__ = [
    "Cipher",
    "derive_cipher",
    "LinkedPolicy",
    "IndependentPolicy",
    "PolicyRegistry",
    "get_policy",
    "PlaySession",
    "CheckStatus",
    "SizeCategory",
    "filter_puzzles",
    "select_puzzle",
]
