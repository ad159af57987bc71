"""
PRIVAGENE Cryptographic Core.

Public API:
    - GroupParameters:  Immutable (P, Q) pair shared by both PSI parties.
    - get_group:        Process-wide group built once from settings.
    - mod_pow:          Modular exponentiation over arbitrary-precision ints.
    - random_secret:    CSPRNG exponent in [2, upper).
    - hash_to_group:    SHA-256 marker hash reduced into the group domain.
"""

from app.core.crypto.group import GroupParameters, get_group
from app.core.crypto.modular import (
    mod_pow,
    random_secret,
    hash_to_group,
    canonicalize_marker,
)

__all__ = [
    "GroupParameters",
    "get_group",
    "mod_pow",
    "random_secret",
    "hash_to_group",
    "canonicalize_marker",
]
