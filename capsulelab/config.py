from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from capsulelab.capsule.alphabet import default_alphabet
from capsulelab.capsule.block import HEADER_SIZE
from capsulelab.capsule.prp import FeistelPermutation, derive_key, parse_key_hex
from capsulelab.capsule.radix import required_digits_count
from capsulelab.capsule.validator import validate_config
from capsulelab.utils.repro import read_json

logger = logging.getLogger(__name__)

Normalization = Literal["none", "e_over_bplus1"]


class CapsuleConfig(BaseModel):
    """Immutable parameter snapshot shared by every codec call."""

    model_config = ConfigDict(frozen=True)

    max_input_bytes: int = Field(default=256, ge=1, le=0xFFFF)
    block_size: int = Field(default=320, ge=HEADER_SIZE + 1)
    base: int = Field(default=256, ge=2)
    alphabet: str = Field(default="", description="One unique character per digit value; empty selects default_alphabet(base)")
    feistel_rounds: int = Field(default=4, ge=1, le=64)
    key_hex: str = Field(default="00112233445566778899aabbccddeeff")
    normalization: Normalization = Field(default="e_over_bplus1")

    # Energy base declared by the downstream router, if known
    energy_base: Optional[int] = Field(default=None, ge=2)
    allow_default_key: bool = Field(default=False, description="Fall back to a fixed key when key_hex does not parse")

    @model_validator(mode="before")
    @classmethod
    def _fill_alphabet(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("alphabet"):
            data = dict(data)
            data["alphabet"] = default_alphabet(int(data.get("base", 256)))
        return data

    @model_validator(mode="after")
    def _check(self) -> "CapsuleConfig":
        ok, errs = validate_config(self)
        if not ok:
            raise ValueError("; ".join(errs))
        if parse_key_hex(self.key_hex) is None:
            if not self.allow_default_key:
                raise ValueError(f"key_hex is not a non-empty hex string: {self.key_hex!r}")
            logger.warning("key_hex %r did not parse; using the built-in default Feistel key", self.key_hex)
        return self

    @property
    def header_size(self) -> int:
        return HEADER_SIZE

    @property
    def region_size(self) -> int:
        """Bytes covered by the permutation (everything after the header)."""
        return self.block_size - HEADER_SIZE

    @property
    def digits_count(self) -> int:
        return required_digits_count(self.block_size, self.base)

    def feistel_key(self) -> bytes:
        return derive_key(self.key_hex, allow_default=self.allow_default_key)

    def permutation(self) -> FeistelPermutation:
        return FeistelPermutation(key=self.feistel_key(), rounds=self.feistel_rounds)


class Settings(BaseModel):
    capsule: CapsuleConfig = Field(default_factory=CapsuleConfig)

    # Logging
    log_level: str = Field(default="INFO")
    log_levels_override: Dict[str, str] = Field(default_factory=dict, description="logger name -> level")

    # Reproducibility
    global_seed: int = Field(default=1337)

    # Paths
    project_root: str = Field(default=os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))
    runs_dir: str = Field(default="runs")


_CAPSULE_ENV = {
    "CAPSULE_MAX_INPUT_BYTES": "max_input_bytes",
    "CAPSULE_BLOCK_SIZE": "block_size",
    "CAPSULE_BASE": "base",
    "CAPSULE_ALPHABET": "alphabet",
    "CAPSULE_FEISTEL_ROUNDS": "feistel_rounds",
    "CAPSULE_KEY_HEX": "key_hex",
    "CAPSULE_NORMALIZATION": "normalization",
    "CAPSULE_ENERGY_BASE": "energy_base",
    "CAPSULE_ALLOW_DEFAULT_KEY": "allow_default_key",
}


def load_capsule_config(path: str | Path, **overrides: Any) -> CapsuleConfig:
    """Read a JSON capsule config; keyword overrides win over file values."""
    data = read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"capsule config at {path} must be a JSON object")
    # Accept either a bare capsule object or {"capsule": {...}}
    data = dict(data.get("capsule", data))
    data.update(overrides)
    return CapsuleConfig(**data)


def _parse_overrides(raw: Optional[str]) -> Dict[str, str]:
    # e.g. "capsulelab.capsule.codec=DEBUG,capsulelab.capsule.energy=WARNING"
    out: Dict[str, str] = {}
    if not raw:
        return out
    for item in raw.split(","):
        name, sep, level = item.partition("=")
        if sep and name.strip():
            out[name.strip()] = level.strip().upper()
    return out


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    capsule_data: Dict[str, Any] = {}
    config_path = os.getenv("CAPSULE_CONFIG")
    if config_path:
        file_data = read_json(config_path)
        capsule_data.update(file_data.get("capsule", file_data))
    for env_name, field_name in _CAPSULE_ENV.items():
        v = os.getenv(env_name)
        if v is not None and v.strip() != "":
            capsule_data[field_name] = v.strip() if field_name != "alphabet" else v

    return Settings(
        capsule=CapsuleConfig(**capsule_data),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_levels_override=_parse_overrides(os.getenv("LOG_LEVELS_OVERRIDE")),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        runs_dir=os.getenv("RUNS_DIR", "runs"),
    )
