"""
Cryptogram cipher and puzzle-play state.

Exports:
- derive_cipher / derive_for_puzzle and the Cipher result
- LinkedPolicy and IndependentPolicy answer policies
- PolicyRegistry and get_policy for resolving difficulty names
- PlaySession with its CellState, DecoderEntry and SolutionCheck types

These modules are framework-agnostic and can be reused by views, management
commands or tests without importing request objects.
"""

from .engines import Cipher, IndependentPolicy, LinkedPolicy, derive_cipher, derive_for_puzzle
from .registry import PolicyRegistry, get_policy
from .seeded import pseudo_random, seed_from_id, seeded_shuffle
from .session import CellState, CheckStatus, DecoderEntry, InputMode, PlaySession, SolutionCheck

__all__ = [
    "Cipher",
    "derive_cipher",
    "derive_for_puzzle",
    "LinkedPolicy",
    "IndependentPolicy",
    "PolicyRegistry",
    "get_policy",
    "pseudo_random",
    "seed_from_id",
    "seeded_shuffle",
    "CellState",
    "CheckStatus",
    "DecoderEntry",
    "InputMode",
    "PlaySession",
    "SolutionCheck",
]
