"""
Modular Arithmetic Engine — shared by the patient node and the hospital.

Python integers are arbitrary precision, so exponents of several hundred
bits never overflow. Every result is reduced into [0, modulus).

    mod_pow(base, e, m)        base^e mod m  (base reduced mod m first)
    random_secret(upper)       CSPRNG scalar in [2, upper)
    hash_to_group(marker, m)   SHA-256(upper(marker)) mod m
"""

from __future__ import annotations

import hashlib
import secrets

from app.core.errors import RandomSourceUnavailableError

SECRET_BYTES: int = 32  # 256 bits per draw


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """
    Compute base^exponent mod modulus.

    The three-argument pow() is a left-to-right square-and-multiply over
    arbitrary-precision integers. exponent = 0 yields 1 (0 when modulus is 1).
    """
    if modulus <= 0:
        raise ValueError("modulus must be positive")
    if exponent < 0:
        raise ValueError("exponent must be non-negative")
    return pow(base % modulus, exponent, modulus)


def random_secret(upper_exclusive: int, num_bytes: int = SECRET_BYTES) -> int:
    """
    Draw a fresh secret exponent in [2, upper_exclusive).

    256 random bits are read from the OS CSPRNG, reduced modulo
    (upper_exclusive - 2) and shifted up by 2 so 0 and 1 are never returned.

    Raises:
        RandomSourceUnavailableError: if the OS random source cannot be read.
    """
    if upper_exclusive <= 3:
        raise ValueError("upper_exclusive must be greater than 3")
    try:
        raw = secrets.token_bytes(num_bytes)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceUnavailableError(
            f"Cryptographic random source unavailable: {exc}"
        ) from exc
    return (int.from_bytes(raw, "big") % (upper_exclusive - 2)) + 2


def canonicalize_marker(identifier: str) -> str:
    """Canonical marker form: surrounding whitespace stripped, upper-cased."""
    return identifier.strip().upper()


def hash_to_group(identifier: str, modulus: int) -> int:
    """
    Map a marker identifier to a group element in [0, modulus).

    Deterministic: both parties must derive the same element for the same
    marker, so the identifier is canonicalized before hashing.
    """
    if modulus <= 0:
        raise ValueError("modulus must be positive")
    digest = hashlib.sha256(canonicalize_marker(identifier).encode("utf-8")).digest()
    return int.from_bytes(digest, "big") % modulus
