"""Passphrase hashing and random key material.

Every engine feeds its key schedule from ``hash_passphrase`` and never from
the raw passphrase. The derived key is the low ``bits`` bits of the digest,
read as a big-endian integer.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import hashlib
import secrets
from typing import Optional

from .config import load_settings


def digest_passphrase(passphrase: str, *, algorithm: Optional[str] = None) -> bytes:
    algorithm = algorithm or load_settings().key_hash
    return hashlib.new(algorithm, passphrase.encode("utf-8")).digest()


def hash_passphrase(passphrase: str, bits: int, *, algorithm: Optional[str] = None) -> int:
    """Derive a ``bits``-wide integer key from ``passphrase``."""
    digest = digest_passphrase(passphrase, algorithm=algorithm)
    if bits <= 0 or bits > len(digest) * 8:
        raise ValueError(f"Cannot derive a {bits}-bit key from a {len(digest) * 8}-bit digest")
    return int.from_bytes(digest, "big") & ((1 << bits) - 1)


def random_passphrase(bits: int) -> str:
    """Fresh random key rendered as a hex string (the caller must keep it)."""
    return secrets.token_hex(bits // 8)


def random_nonce(bits: int = 96) -> int:
    return secrets.randbits(bits)


def resolve_passphrase(passphrase: Optional[str], bits: int) -> str:
    return random_passphrase(bits) if passphrase is None else passphrase
