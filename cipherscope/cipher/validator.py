from __future__ import annotations

import string
from typing import List, Optional, Tuple

from ..errors import InputValidationError
from .spec import CipherSpec

NONCE_BITS = 96

_DIGITS = {
    16: set(string.hexdigits),
    10: set(string.digits),
}


def parse_blob(text: str, base: int = 16) -> int:
    """Parse user input into a blob before any cipher sees it.

    Hexadecimal accepts an optional ``0x`` prefix; whitespace anywhere is
    ignored so pasted ciphertext may be wrapped over several lines.
    """
    if base not in _DIGITS:
        raise InputValidationError(f"Unsupported base: {base}")
    cleaned = "".join(text.split())
    if base == 16 and cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    if not cleaned:
        raise InputValidationError("Input is empty")
    bad = sorted({ch for ch in cleaned if ch not in _DIGITS[base]})
    if bad:
        kind = "hexadecimal" if base == 16 else "decimal"
        raise InputValidationError(f"Input is not {kind}; unexpected character(s): {''.join(bad)}")
    return int(cleaned, base)


def hex_byte_length(text: str) -> Optional[int]:
    """Byte count spelled by a hex string, or ``None`` for an odd digit count.

    Leading ``00`` pairs count, so a ciphertext whose first byte is zero
    keeps its full length.
    """
    cleaned = "".join(text.split())
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    if not cleaned or len(cleaned) % 2:
        return None
    return len(cleaned) // 2


def parse_nonce(value: Optional[str]) -> Optional[int]:
    """Hex nonce for ChaCha20; ``None`` or blank means "not given"."""
    if value is None or not value.strip():
        return None
    nonce = parse_blob(value, 16)
    if nonce >> NONCE_BITS:
        raise InputValidationError(f"Nonce must fit in {NONCE_BITS} bits")
    return nonce


def validate_spec(spec: CipherSpec) -> Tuple[bool, List[str]]:
    errs: List[str] = []

    if spec.kind == "stream" and spec.architecture != "ARX":
        errs.append("Stream engines must use the ARX architecture")
    if spec.kind == "block":
        if spec.block_size_bits > 256:
            errs.append("Block engines support block_size_bits <= 256")
        if spec.architecture == "FEISTEL" and (spec.block_size_bits // 8) % 2 != 0:
            errs.append("Feistel requires even-byte block size")
        if spec.architecture == "LAI_MASSEY" and spec.block_size_bits != 64:
            errs.append("Lai-Massey template supports block_size_bits=64 only")
    if spec.rounds != int(spec.rounds) and spec.architecture != "LAI_MASSEY":
        errs.append("Half rounds are only defined for the Lai-Massey structure")

    return (len(errs) == 0), errs
