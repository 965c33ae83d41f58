from __future__ import annotations

import hashlib
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    # Key derivation
    key_hash: str = Field(default="sha256", description="hashlib algorithm used on passphrases")

    # ChaCha20
    chacha_initial_counter: int = Field(default=1, ge=0, le=0xFFFFFFFF)

    # Logging
    log_level: str = Field(default="INFO")

    # Reproducibility / evaluation
    global_seed: int = Field(default=1337)
    roundtrip_vectors: int = Field(default=200, ge=1, le=100000)

    # Paths
    runs_dir: str = Field(default="runs")

    @field_validator("key_hash")
    @classmethod
    def _known_hash(cls, v: str) -> str:
        v = v.strip().lower()
        try:
            digest_size = hashlib.new(v).digest_size
        except ValueError as exc:
            raise ValueError(f"Unknown hash algorithm: {v}") from exc
        if digest_size < 32:
            raise ValueError("key_hash must produce at least a 256-bit digest")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    return Settings(
        key_hash=os.getenv("CIPHERSCOPE_KEY_HASH", "sha256"),
        chacha_initial_counter=int(os.getenv("CIPHERSCOPE_CHACHA_COUNTER", "1")),
        log_level=os.getenv("CIPHERSCOPE_LOG_LEVEL", "INFO"),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        roundtrip_vectors=int(os.getenv("CIPHERSCOPE_ROUNDTRIP_VECTORS", "200")),
        runs_dir=os.getenv("CIPHERSCOPE_RUNS_DIR", "runs"),
    )
