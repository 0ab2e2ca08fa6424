import hashlib
import hmac
import random

import pytest

from capsulelab.capsule.prp import (
    DEFAULT_FEISTEL_KEY,
    FeistelPermutation,
    derive_key,
    feistel_forward,
    feistel_inverse,
    parse_key_hex,
    prf_hmac_sha256,
    xor_cycle,
)

KEY = bytes.fromhex("00112233445566778899aabbccddeeff")


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


# ---------------------------------------------------------------------------
# Round function
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("length", [0, 1, 3, 32, 33, 100])
def test_prf_output_length(length):
    out = prf_hmac_sha256(bytes(length), KEY, 0)
    assert len(out) == max(1, length)


def test_prf_matches_hmac_counter_construction():
    data = b"right half of the region"
    r = 3
    first = hmac.new(KEY, data + r.to_bytes(4, "big") + (0).to_bytes(4, "big"), hashlib.sha256).digest()
    assert prf_hmac_sha256(data, KEY, r) == first[:len(data)]


def test_prf_depends_on_round_and_key():
    data = b"x" * 40
    assert prf_hmac_sha256(data, KEY, 0) != prf_hmac_sha256(data, KEY, 1)
    assert prf_hmac_sha256(data, KEY, 0) != prf_hmac_sha256(data, b"other", 0)


def test_xor_cycle_repeats_pad():
    assert xor_cycle(b"\x00\x00\x00\x00\x00", b"\x01\x02") == b"\x01\x02\x01\x02\x01"
    assert xor_cycle(b"", b"\x01") == b""


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("length", [0, 1, 2, 3, 7, 64, 89, 313])
@pytest.mark.parametrize("rounds", [1, 2, 3, 4, 7])
def test_inverse_undoes_forward(length, rounds):
    rng = random.Random(1337 + length * 10 + rounds)
    region = _rand_bytes(rng, length)
    mixed = feistel_forward(region, KEY, rounds)
    assert len(mixed) == length
    assert feistel_inverse(mixed, KEY, rounds) == region


def test_forward_changes_region():
    region = bytes(313)
    assert feistel_forward(region, KEY, 4) != region


def test_forward_is_deterministic():
    region = b"Hello, Energetic Router!" + bytes(40)
    assert feistel_forward(region, KEY, 4) == feistel_forward(region, KEY, 4)


def test_wrong_key_or_rounds_does_not_invert():
    region = b"Hello, Energetic Router!" + bytes(40)
    mixed = feistel_forward(region, KEY, 4)
    assert feistel_inverse(mixed, b"not-the-key", 4) != region
    assert feistel_inverse(mixed, KEY, 5) != region
    assert feistel_forward(region, b"not-the-key", 4) != mixed


def test_rounds_must_be_positive():
    with pytest.raises(ValueError):
        feistel_forward(b"abc", KEY, 0)
    with pytest.raises(ValueError):
        feistel_inverse(b"abc", KEY, 0)


def test_custom_round_function():
    def prf_sha256(data: bytes, key: bytes, round_index: int) -> bytes:
        return hashlib.sha256(key + bytes([round_index]) + data).digest()

    perm = FeistelPermutation(key=KEY, rounds=3, prf=prf_sha256)
    region = bytes(range(77))
    mixed = perm.apply(region)
    assert mixed != feistel_forward(region, KEY, 3)
    assert perm.invert(mixed) == region


def test_apply_after_leaves_prefix_untouched():
    perm = FeistelPermutation(key=KEY, rounds=4)
    block = b"HEADER!" + bytes(range(50))
    mixed = perm.apply_after(block, 7)
    assert mixed[:7] == b"HEADER!"
    assert mixed[7:] != block[7:]
    assert perm.invert_after(mixed, 7) == block


# ---------------------------------------------------------------------------
# Key parsing
# ---------------------------------------------------------------------------

def test_derive_key_parses_hex():
    assert derive_key("0011ff") == b"\x00\x11\xff"
    assert derive_key("  0a0B \n") == b"\x0a\x0b"


@pytest.mark.parametrize("bad", ["", "   ", "zz", "abc", "not hex"])
def test_derive_key_rejects_malformed(bad):
    with pytest.raises(ValueError):
        derive_key(bad)


def test_derive_key_fallback():
    assert derive_key("zz", allow_default=True) == DEFAULT_FEISTEL_KEY
    assert derive_key("0102", allow_default=True) == b"\x01\x02"


def test_parse_key_hex_reports_failure():
    assert parse_key_hex("0102") == b"\x01\x02"
    assert parse_key_hex(DEFAULT_FEISTEL_KEY.hex()) == DEFAULT_FEISTEL_KEY
    assert parse_key_hex("zz") is None
    assert parse_key_hex("  ") is None
