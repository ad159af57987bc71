import hashlib

import pytest

from app.core.config import DEFAULT_PSI_MODULUS_HEX
from app.core.crypto import modular
from app.core.crypto.group import GroupParameters
from app.core.crypto.modular import canonicalize_marker, hash_to_group, mod_pow, random_secret
from app.core.errors import RandomSourceUnavailableError

# ═══════════════════════════════════════════════════════════════════════════════
# GROUP PARAMETERS
# ═══════════════════════════════════════════════════════════════════════════════

def test_default_group_q_is_half_of_p_minus_one(group):
    assert group.q == (group.p - 1) // 2
    assert (group.p - 1) % 2 == 0
    assert group.p == int(DEFAULT_PSI_MODULUS_HEX, 16)
    assert group.bit_length == 768


def test_group_rejects_inconsistent_q():
    with pytest.raises(ValueError):
        GroupParameters(p=23, q=10)


def test_group_rejects_even_modulus():
    with pytest.raises(ValueError):
        GroupParameters.from_modulus(24)


def test_group_from_hex_accepts_prefix_and_whitespace():
    g = GroupParameters.from_hex("0x 17")
    assert g.p == 23
    assert g.q == 11


def test_group_repr_does_not_dump_modulus(group):
    assert str(group.p) not in repr(group)

# ═══════════════════════════════════════════════════════════════════════════════
# MODULAR EXPONENTIATION
# ═══════════════════════════════════════════════════════════════════════════════

def test_mod_pow_small_values():
    assert mod_pow(4, 13, 497) == 445
    assert mod_pow(2, 10, 1000) == 24


def test_mod_pow_zero_exponent_is_one():
    assert mod_pow(12345, 0, 97) == 1


def test_mod_pow_reduces_base_first():
    assert mod_pow(97 + 5, 3, 97) == mod_pow(5, 3, 97)


def test_mod_pow_large_exponent_stays_in_range(group):
    exponent = (1 << 300) + 12345
    result = mod_pow(group.q - 1, exponent, group.p)
    assert 0 <= result < group.p


def test_mod_pow_rejects_bad_arguments():
    with pytest.raises(ValueError):
        mod_pow(2, 3, 0)
    with pytest.raises(ValueError):
        mod_pow(2, -1, 7)

# ═══════════════════════════════════════════════════════════════════════════════
# RANDOM SECRETS
# ═══════════════════════════════════════════════════════════════════════════════

def test_random_secret_range_small_modulus():
    values = {random_secret(5) for _ in range(200)}
    assert values <= {2, 3, 4}


def test_random_secret_range_group(group):
    for _ in range(20):
        s = random_secret(group.q)
        assert 2 <= s < group.q


def test_random_secrets_are_fresh(group):
    assert len({random_secret(group.q) for _ in range(10)}) == 10


def test_random_secret_source_failure_is_fatal(monkeypatch, group):
    def broken(n):
        raise OSError("no entropy")

    monkeypatch.setattr(modular.secrets, "token_bytes", broken)
    with pytest.raises(RandomSourceUnavailableError):
        random_secret(group.q)

# ═══════════════════════════════════════════════════════════════════════════════
# HASH TO GROUP
# ═══════════════════════════════════════════════════════════════════════════════

def test_hash_to_group_matches_sha256_reduction(group):
    expected = int.from_bytes(hashlib.sha256(b"BRCA1").digest(), "big") % group.q
    assert hash_to_group("BRCA1", group.q) == expected


def test_hash_to_group_is_case_insensitive(group):
    assert hash_to_group("brca1", group.q) == hash_to_group("BRCA1", group.q)
    assert hash_to_group("  Tp53 ", group.q) == hash_to_group("TP53", group.q)


def test_hash_to_group_distinct_markers(group):
    assert hash_to_group("BRCA1", group.q) != hash_to_group("BRCA2", group.q)


def test_canonicalize_marker():
    assert canonicalize_marker(" erbb2\n") == "ERBB2"
