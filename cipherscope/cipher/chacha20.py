"""ChaCha20 stream cipher (RFC 8439).

The 512-bit state is four constants, eight key words, a 32-bit block
counter and three nonce words. Key and nonce integers are serialized
big-endian and then read as little-endian words, so a byte-string key from
the RFC maps to ``int.from_bytes(key, "big")``.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import struct
from typing import Iterator, List, Optional

from ..config import load_settings
from ..errors import CipherError
from ..trace import TraceSink, emit
from .builder import StreamCipher
from .spec import CipherSpec

logger = logging.getLogger(__name__)

MASK32 = 0xFFFFFFFF
CONSTANTS = (0x61707865, 0x3320646E, 0x79622D32, 0x6B206574)  # "expand 32-byte k"
BLOCK_BYTES = 64


def _rotl(x: int, n: int) -> int:
    return ((x << n) & MASK32) | (x >> (32 - n))


def quarter_round(state: List[int], a: int, b: int, c: int, d: int) -> None:
    state[a] = (state[a] + state[b]) & MASK32
    state[d] = _rotl(state[d] ^ state[a], 16)
    state[c] = (state[c] + state[d]) & MASK32
    state[b] = _rotl(state[b] ^ state[c], 12)
    state[a] = (state[a] + state[b]) & MASK32
    state[d] = _rotl(state[d] ^ state[a], 8)
    state[c] = (state[c] + state[d]) & MASK32
    state[b] = _rotl(state[b] ^ state[c], 7)


def initial_state(key: int, nonce: int, counter: int) -> List[int]:
    if key < 0 or key >> 256:
        raise ValueError("ChaCha20 key must fit in 256 bits")
    if nonce < 0 or nonce >> 96:
        raise ValueError("ChaCha20 nonce must fit in 96 bits")
    if counter < 0 or counter > MASK32:
        raise CipherError(f"ChaCha20 block counter out of range: {counter}")
    return [
        *CONSTANTS,
        *struct.unpack("<8I", key.to_bytes(32, "big")),
        counter,
        *struct.unpack("<3I", nonce.to_bytes(12, "big")),
    ]


def block_words(key: int, nonce: int, counter: int) -> List[int]:
    state = initial_state(key, nonce, counter)
    working = list(state)
    for _ in range(10):
        # Column rounds
        quarter_round(working, 0, 4, 8, 12)
        quarter_round(working, 1, 5, 9, 13)
        quarter_round(working, 2, 6, 10, 14)
        quarter_round(working, 3, 7, 11, 15)
        # Diagonal rounds
        quarter_round(working, 0, 5, 10, 15)
        quarter_round(working, 1, 6, 11, 12)
        quarter_round(working, 2, 7, 8, 13)
        quarter_round(working, 3, 4, 9, 14)
    return [(w + s) & MASK32 for w, s in zip(working, state)]


def chacha20_block(key: int, nonce: int, counter: int) -> bytes:
    """One 64-byte keystream block, words serialized little-endian."""
    return struct.pack("<16I", *block_words(key, nonce, counter))


class KeystreamCursor:
    """Lazily generated keystream for one (key, nonce) pair.

    Each call consumes the next unconsumed byte; a new 64-byte block is
    generated whenever the buffer runs out.
    """

    def __init__(self, key: int, nonce: int, counter: int = 1, *, trace: Optional[TraceSink] = None):
        self.key = key
        self.nonce = nonce
        self.counter = counter
        self._trace = trace
        self._buffer = b""
        self._position = 0
        self._blocks = 0
        initial_state(key, nonce, counter)

    @property
    def consumed(self) -> int:
        return self._blocks * BLOCK_BYTES - (len(self._buffer) - self._position)

    def _refill(self) -> None:
        words = block_words(self.key, self.nonce, self.counter)
        emit(self._trace, f"Key Stream {self.counter}", self._blocks, *words)
        self._buffer = struct.pack("<16I", *words)
        self._position = 0
        self._blocks += 1
        self.counter += 1

    def next_byte(self) -> int:
        if self._position >= len(self._buffer):
            self._refill()
        byte = self._buffer[self._position]
        self._position += 1
        return byte

    def take(self, n: int) -> bytes:
        out = bytearray()
        while len(out) < n:
            if self._position >= len(self._buffer):
                self._refill()
            chunk = self._buffer[self._position:self._position + n - len(out)]
            self._position += len(chunk)
            out += chunk
        return bytes(out)

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return self.next_byte()


def xor_stream(data: bytes, cursor: KeystreamCursor) -> bytes:
    keystream = cursor.take(len(data))
    return bytes(x ^ y for x, y in zip(data, keystream))


class ChaCha20(StreamCipher):
    spec = CipherSpec(
        name="ChaCha20",
        architecture="ARX",
        kind="stream",
        block_size_bits=512,
        key_size_bits=256,
        rounds=20,
        reference="RFC 8439",
    )

    def __init__(self, initial_counter: Optional[int] = None):
        if initial_counter is None:
            initial_counter = load_settings().chacha_initial_counter
        self.initial_counter = initial_counter

    def keystream(self, key: int, nonce: int, *, trace: Optional[TraceSink] = None) -> KeystreamCursor:
        return KeystreamCursor(key, nonce, self.initial_counter, trace=trace)

    def xor(self, data, key, nonce, *, trace=None) -> bytes:
        logger.debug("ChaCha20: xoring %d byte(s), counter starts at %d", len(data), self.initial_counter)
        return xor_stream(data, self.keystream(key, nonce, trace=trace))
