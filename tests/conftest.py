import sys
from pathlib import Path

import pytest

# Ensure project root is on path for capsulelab imports
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from capsulelab.config import CapsuleConfig

BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@pytest.fixture
def config256() -> CapsuleConfig:
    return CapsuleConfig(
        max_input_bytes=256,
        block_size=320,
        base=256,
        feistel_rounds=4,
        key_hex="6b1f9d2c4e8a07b35d91c6e2f40a8b7c",
        normalization="e_over_bplus1",
    )


@pytest.fixture
def config64() -> CapsuleConfig:
    # Odd permutation region (89 bytes) with an odd round count
    return CapsuleConfig(
        max_input_bytes=64,
        block_size=96,
        base=64,
        alphabet=BASE64_ALPHABET,
        feistel_rounds=5,
        key_hex="0f1e2d3c4b5a69788796a5b4c3d2e1f0",
        normalization="none",
    )


@pytest.fixture
def config85() -> CapsuleConfig:
    return CapsuleConfig(
        max_input_bytes=40,
        block_size=50,
        base=85,
        feistel_rounds=3,
        key_hex="a5a5a5a5",
    )
