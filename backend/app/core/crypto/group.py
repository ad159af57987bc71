"""
PSI Group Parameters — public constants shared by both protocol parties.

Both the patient node and the hospital backend must blind under the same
modulus, otherwise the doubly-blinded values never collide and every run
silently reports zero matches. The parameters are therefore built once
per process from configuration and handed to every stage explicitly.

    P  — large odd prime modulus (768 bits by default)
    Q  — (P − 1) / 2, used as the modulus for hash-to-group and for the
         secret exponent range
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from app.core.config import settings


@dataclass(frozen=True)
class GroupParameters:
    """Immutable (P, Q) pair. Q must equal (P − 1) / 2 exactly."""

    p: int
    q: int

    def __post_init__(self) -> None:
        if self.p <= 5:
            raise ValueError("PSI modulus P must be greater than 5")
        if (self.p - 1) % 2 != 0:
            raise ValueError("PSI modulus P must be odd so that (P - 1) / 2 is exact")
        if self.q != (self.p - 1) // 2:
            raise ValueError("Q must equal (P - 1) / 2")

    @classmethod
    def from_modulus(cls, p: int) -> "GroupParameters":
        """Derive Q from P and validate the pair."""
        if p <= 5 or p % 2 == 0:
            raise ValueError("PSI modulus P must be an odd integer greater than 5")
        return cls(p=p, q=(p - 1) // 2)

    @classmethod
    def from_hex(cls, modulus_hex: str) -> "GroupParameters":
        """Parse P from a hex string (whitespace and an optional 0x prefix allowed)."""
        cleaned = "".join(modulus_hex.split())
        if cleaned.lower().startswith("0x"):
            cleaned = cleaned[2:]
        return cls.from_modulus(int(cleaned, 16))

    @property
    def bit_length(self) -> int:
        return self.p.bit_length()

    def __repr__(self) -> str:
        return f"GroupParameters(p_bits={self.bit_length}, q_bits={self.q.bit_length()})"


@lru_cache(maxsize=1)
def get_group() -> GroupParameters:
    """Process-wide group built from settings on first use."""
    return GroupParameters.from_hex(settings.PSI_MODULUS_HEX)
