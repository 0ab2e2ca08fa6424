"""Capsule framing: variable-length bytes <-> fixed-size permuted block.

Encode: header + payload + zero padding, then the keyed permutation over
everything after the header. Decode inverts the permutation, reads the
header, slices the payload and gates on its CRC-32.

The digit and string helpers compose the rest of the pipeline::

    bytes -> CapsuleBlock -> base-B digits -> printable string
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Union

from capsulelab.config import CapsuleConfig

from .alphabet import digits_to_string, string_to_digits
from .block import HEADER_SIZE, CapsuleBlock, CapsuleHeader
from .crc32 import crc32
from .errors import CrcMismatch, InputTooLong, InvalidBlockSize, InvalidBlockStructure, MalformedHeader
from .radix import bytes_to_digits, digits_to_bytes

logger = logging.getLogger(__name__)

BlockLike = Union[CapsuleBlock, bytes, bytearray]


@dataclass(frozen=True)
class CapsuleEncoder:
    config: CapsuleConfig

    def encode(self, data: bytes) -> CapsuleBlock:
        cfg = self.config
        data = bytes(data)
        logger.debug(
            "capsule.encode start len=%d block=%d rounds=%d",
            len(data), cfg.block_size, cfg.feistel_rounds,
        )
        if len(data) > cfg.max_input_bytes:
            raise InputTooLong(max_bytes=cfg.max_input_bytes, actual=len(data))

        header = CapsuleHeader(length=len(data), crc32=crc32(data), flags=0)

        block = bytearray(cfg.block_size)
        block[:HEADER_SIZE] = header.encode()
        block[HEADER_SIZE:HEADER_SIZE + len(data)] = data

        mixed = cfg.permutation().apply_after(bytes(block), HEADER_SIZE)

        logger.debug(
            "capsule.encode done len=%d block=%d rounds=%d crc=0x%08X",
            len(data), cfg.block_size, cfg.feistel_rounds, header.crc32,
        )
        return CapsuleBlock(data=mixed, block_size=cfg.block_size)


@dataclass(frozen=True)
class CapsuleDecoder:
    config: CapsuleConfig

    def decode(self, block: BlockLike) -> bytes:
        cfg = self.config
        raw = block.data if isinstance(block, CapsuleBlock) else bytes(block)
        if len(raw) != cfg.block_size:
            raise InvalidBlockSize(expected=cfg.block_size, actual=len(raw))
        logger.debug("capsule.decode start block=%d rounds=%d", cfg.block_size, cfg.feistel_rounds)

        plain = cfg.permutation().invert_after(raw, HEADER_SIZE)

        header = CapsuleHeader.decode(plain[:HEADER_SIZE])
        end = HEADER_SIZE + header.length
        if end > len(plain):
            raise MalformedHeader(
                f"payload length {header.length} runs past block of {len(plain)} bytes"
            )
        payload = plain[HEADER_SIZE:end]

        actual = crc32(payload)
        if actual != header.crc32:
            logger.warning(
                "capsule.decode crc mismatch expected=0x%08X actual=0x%08X len=%d",
                header.crc32, actual, header.length,
            )
            raise CrcMismatch(expected=header.crc32, actual=actual)

        logger.debug(
            "capsule.decode done len=%d block=%d rounds=%d",
            header.length, cfg.block_size, cfg.feistel_rounds,
        )
        return payload


def encode_capsule(data: bytes, config: CapsuleConfig) -> CapsuleBlock:
    return CapsuleEncoder(config).encode(data)


def decode_capsule(block: BlockLike, config: CapsuleConfig) -> bytes:
    return CapsuleDecoder(config).decode(block)


def block_to_digits(block: CapsuleBlock, config: CapsuleConfig) -> List[int]:
    digits = bytes_to_digits(block.data, config.base)
    logger.debug(
        "capsule.to_digits bytes=%d digits=%d base=%d",
        len(block.data), len(digits), config.base,
    )
    return digits


def digits_to_block(digits: Sequence[int], config: CapsuleConfig) -> CapsuleBlock:
    """Rebuild a block from exactly ``config.digits_count`` digits."""
    if len(digits) != config.digits_count:
        raise InvalidBlockStructure(
            f"expected {config.digits_count} base-{config.base} digits, got {len(digits)}"
        )
    data = digits_to_bytes(digits, config.base, config.block_size)
    logger.debug(
        "capsule.from_digits digits=%d bytes=%d base=%d",
        len(digits), len(data), config.base,
    )
    return CapsuleBlock(data=data, block_size=config.block_size)


def encode_to_digits(data: bytes, config: CapsuleConfig) -> List[int]:
    return block_to_digits(encode_capsule(data, config), config)


def decode_from_digits(digits: Sequence[int], config: CapsuleConfig) -> bytes:
    return decode_capsule(digits_to_block(digits, config), config)


def encode_to_string(data: bytes, config: CapsuleConfig) -> str:
    """Full printable pipeline: frame, permute, convert radix, map to the alphabet."""
    return digits_to_string(encode_to_digits(data, config), config.alphabet)


def decode_from_string(text: str, config: CapsuleConfig) -> bytes:
    return decode_from_digits(string_to_digits(text, config.alphabet), config)
