"""Conversions between arbitrary-length blobs and fixed-width blocks.

A blob is a non-negative integer holding a byte sequence in big-endian
order. Splitting works on the integer, so leading zero bits never produce a
block: the first block may be shorter than ``block_bits`` and a zero blob
has no blocks at all. ``join_blocks`` always shifts by the full block width,
which makes ``join_blocks(split_into_blocks(x, n), n) == x`` for every x.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..errors import InputValidationError


def split_into_blocks(blob: int, block_bits: int) -> List[int]:
    if blob < 0:
        raise ValueError("blob must be non-negative")
    if block_bits <= 0:
        raise ValueError("block_bits must be positive")
    mask = (1 << block_bits) - 1
    blocks: List[int] = []
    while blob:
        blocks.append(blob & mask)
        blob >>= block_bits
    blocks.reverse()
    return blocks


def join_blocks(blocks: Iterable[int], block_bits: int) -> int:
    if block_bits <= 0:
        raise ValueError("block_bits must be positive")
    blob = 0
    for block in blocks:
        blob = (blob << block_bits) | block
    return blob


def split_into_words(value: int, word_bits: int, count: int) -> List[int]:
    """Fixed-count split, most-significant word first (zero padded)."""
    mask = (1 << word_bits) - 1
    return [(value >> (word_bits * (count - 1 - i))) & mask for i in range(count)]


# ---------------------------------------------------------------------------
# Text / bytes views of a blob
# ---------------------------------------------------------------------------

def text_to_blob(text: str) -> int:
    """One byte per character (code points 0..255)."""
    try:
        return bytes_to_blob(text.encode("latin-1"))
    except UnicodeEncodeError as exc:
        raise InputValidationError("Text contains characters outside 0..255") from exc


def blob_to_text(blob: int) -> str:
    return blob_to_bytes(blob).decode("latin-1")


def bytes_to_blob(data: bytes) -> int:
    return int.from_bytes(data, "big")


def blob_to_bytes(blob: int, length: Optional[int] = None) -> bytes:
    if blob < 0:
        raise ValueError("blob must be non-negative")
    if length is None:
        length = (blob.bit_length() + 7) // 8
    elif blob.bit_length() > length * 8:
        raise ValueError(f"blob does not fit in {length} bytes")
    return blob.to_bytes(length, "big")


# ---------------------------------------------------------------------------
# Length-preserving mode
# ---------------------------------------------------------------------------

def pad_block_bytes(data: bytes, block_bytes: int) -> bytes:
    """PKCS#7 style padding; always adds 1..block_bytes bytes."""
    n = block_bytes - len(data) % block_bytes
    return data + bytes([n]) * n


def unpad_block_bytes(data: bytes, block_bytes: int) -> bytes:
    if not data or len(data) % block_bytes != 0:
        raise InputValidationError(
            f"Padded data must be a non-empty multiple of {block_bytes} bytes, got {len(data)}"
        )
    n = data[-1]
    if n < 1 or n > block_bytes or data[-n:] != bytes([n]) * n:
        raise InputValidationError("Invalid block padding")
    return data[:-n]
