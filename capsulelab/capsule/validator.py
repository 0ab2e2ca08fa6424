from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

from .block import HEADER_SIZE

if TYPE_CHECKING:
    from capsulelab.config import CapsuleConfig


def validate_config(config: "CapsuleConfig") -> Tuple[bool, List[str]]:
    errs: List[str] = []

    # Alphabet must be a bijection onto [0, base)
    if len(config.alphabet) != config.base:
        errs.append(f"alphabet length {len(config.alphabet)} does not match base {config.base}")
    if len(set(config.alphabet)) != len(config.alphabet):
        errs.append("alphabet characters must be unique")

    if config.energy_base is not None and config.energy_base != config.base:
        errs.append(f"base ({config.base}) does not match router energy base ({config.energy_base})")

    required = config.max_input_bytes + HEADER_SIZE
    if config.block_size < required:
        errs.append(f"block_size={config.block_size} is smaller than required minimum {required}")

    return (len(errs) == 0), errs
