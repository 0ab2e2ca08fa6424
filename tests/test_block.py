import pytest

from capsulelab.capsule.block import HEADER_SIZE, CapsuleBlock, CapsuleHeader
from capsulelab.capsule.errors import InvalidBlockSize, InvalidBlockStructure, MalformedHeader


def test_header_layout_little_endian():
    header = CapsuleHeader(length=24, crc32=0x11223344, flags=0)
    assert header.encode() == bytes([24, 0, 0, 0x44, 0x33, 0x22, 0x11])
    assert len(header.encode()) == HEADER_SIZE


def test_header_decode_roundtrip():
    header = CapsuleHeader(length=0xABCD, crc32=0xDEADBEEF, flags=7)
    assert CapsuleHeader.decode(header.encode() + b"trailing") == header


def test_header_decode_too_short():
    with pytest.raises(MalformedHeader):
        CapsuleHeader.decode(b"\x00" * (HEADER_SIZE - 1))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"length": -1, "crc32": 0},
        {"length": 0x10000, "crc32": 0},
        {"length": 0, "crc32": 0x100000000},
        {"length": 0, "crc32": 0, "flags": 256},
    ],
)
def test_header_field_widths(kwargs):
    with pytest.raises(InvalidBlockStructure):
        CapsuleHeader(**kwargs)


def test_block_requires_exact_size():
    with pytest.raises(InvalidBlockSize) as exc_info:
        CapsuleBlock(data=bytes(10), block_size=12)
    assert exc_info.value.expected == 12
    assert exc_info.value.actual == 10


def test_block_payload_slice():
    data = CapsuleHeader(length=3, crc32=0).encode() + b"abc" + bytes(6)
    block = CapsuleBlock(data=bytearray(data), block_size=16)
    assert isinstance(block.data, bytes)
    assert len(block) == 16
    assert block.header().length == 3
    assert block.payload() == b"abc"


def test_block_payload_past_end():
    data = CapsuleHeader(length=100, crc32=0).encode() + bytes(9)
    block = CapsuleBlock(data=data, block_size=16)
    with pytest.raises(MalformedHeader):
        block.payload()


def test_block_hex_roundtrip():
    block = CapsuleBlock(data=bytes(range(16)), block_size=16)
    assert CapsuleBlock.fromhex(block.hex(), 16) == block
    with pytest.raises(InvalidBlockSize):
        CapsuleBlock.fromhex(block.hex(), 17)
