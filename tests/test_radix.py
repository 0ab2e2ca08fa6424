import random

import pytest

from capsulelab.capsule.radix import (
    bytes_to_digits,
    convert_base,
    digits_to_bytes,
    required_digits_count,
)


@pytest.mark.parametrize(
    "byte_count,base,expected",
    [
        (0, 10, 1),
        (1, 2, 8),
        (1, 16, 2),
        (1, 255, 2),
        (1, 256, 1),
        (2, 10, 5),
        (96, 64, 128),
        (320, 256, 320),
        (320, 16, 640),
    ],
)
def test_required_digits_count(byte_count, base, expected):
    assert required_digits_count(byte_count, base) == expected


@pytest.mark.parametrize("byte_count", [1, 7, 50, 96, 320])
@pytest.mark.parametrize("base", [2, 3, 10, 58, 85, 100, 1000])
def test_required_digits_count_is_minimal(byte_count, base):
    d = required_digits_count(byte_count, base)
    assert base ** d >= 256 ** byte_count
    assert base ** (d - 1) < 256 ** byte_count


def test_invalid_base():
    with pytest.raises(ValueError):
        required_digits_count(4, 1)
    with pytest.raises(ValueError):
        bytes_to_digits(b"\x01", 1)
    with pytest.raises(ValueError):
        digits_to_bytes([1], 0, 1)


def test_known_conversion():
    # 0x0100 == 256 == 0x100 in hex, padded to 4 hex digits
    assert bytes_to_digits(b"\x01\x00", 16) == [0, 1, 0, 0]
    assert digits_to_bytes([0, 1, 0, 0], 16, 2) == b"\x01\x00"


def test_convert_base_zero():
    assert convert_base([], 10, 2) == [0]
    assert convert_base([0, 0, 0], 10, 2) == [0]
    assert convert_base([1, 0], 10, 2) == [1, 0, 1, 0]


@pytest.mark.parametrize("base", [2, 3, 10, 16, 58, 64, 85, 100, 255, 256, 1000])
def test_roundtrip_random(base):
    rng = random.Random(1337 + base)
    for length in (1, 2, 17, 64):
        data = bytes(rng.randrange(0, 256) for _ in range(length))
        digits = bytes_to_digits(data, base)
        assert len(digits) == required_digits_count(length, base)
        assert all(0 <= d < base for d in digits)
        assert digits_to_bytes(digits, base, length) == data


@pytest.mark.parametrize("base", [7, 64, 256])
def test_leading_zero_bytes_survive(base):
    data = b"\x00\x00\x00\x01\x02"
    digits = bytes_to_digits(data, base)
    assert digits_to_bytes(digits, base, len(data)) == data


def test_all_zero_and_all_ff_blocks():
    zeros = bytes(320)
    assert bytes_to_digits(zeros, 85) == [0] * required_digits_count(320, 85)
    assert digits_to_bytes(bytes_to_digits(zeros, 85), 85, 320) == zeros

    ones = b"\xff" * 320
    assert bytes_to_digits(ones, 256) == [255] * 320
    assert digits_to_bytes(bytes_to_digits(ones, 100), 100, 320) == ones


def test_empty_input():
    assert bytes_to_digits(b"", 10) == [0]
    assert digits_to_bytes([0], 10, 0) == b""


def test_digit_out_of_range():
    with pytest.raises(ValueError):
        digits_to_bytes([0, 10], 10, 1)
    with pytest.raises(ValueError):
        digits_to_bytes([-1], 10, 1)


def test_oversized_value_keeps_low_order_bytes():
    # 0x100 does not fit in one byte
    assert digits_to_bytes([1, 0, 0], 16, 1) == b"\x00"
