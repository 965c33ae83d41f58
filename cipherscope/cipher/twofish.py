"""Twofish (Schneier et al., 1998).

128-bit blocks, 16 Feistel rounds with input/output whitening. The round
function uses key-dependent S-boxes: the fixed byte permutations q0/q1 are
keyed by XOR with the S vector (derived from the key by the Reed-Solomon
matrix) and then mixed by the MDS matrix, both over GF(2^8).

The engine derives a 128-bit key (k = 2); ``create_key_schedule`` also
accepts 192- and 256-bit keys.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..trace import TraceSink, emit
from .builder import BlockCipher
from .gf import MDS_MODULUS, RS_MODULUS, gf_matrix_vector
from .spec import CipherSpec

logger = logging.getLogger(__name__)

MASK32 = 0xFFFFFFFF
RHO = 0x01010101
ROUNDS = 16

MDS = (
    (0x01, 0xEF, 0x5B, 0x5B),
    (0x5B, 0xEF, 0xEF, 0x01),
    (0xEF, 0x5B, 0x01, 0xEF),
    (0xEF, 0x01, 0xEF, 0x5B),
)

RS = (
    (0x01, 0xA4, 0x55, 0x87, 0x5A, 0x58, 0xDB, 0x9E),
    (0xA4, 0x56, 0x82, 0xF3, 0x1E, 0xC6, 0x68, 0xE5),
    (0x02, 0xA1, 0xFC, 0xC1, 0x47, 0xAE, 0x3D, 0x19),
    (0xA4, 0x55, 0x87, 0x5A, 0x58, 0xDB, 0x9E, 0x03),
)

# 4-bit tables t0..t3 defining q0 and q1.
Q0_T = (
    (0x8, 0x1, 0x7, 0xD, 0x6, 0xF, 0x3, 0x2, 0x0, 0xB, 0x5, 0x9, 0xE, 0xC, 0xA, 0x4),
    (0xE, 0xC, 0xB, 0x8, 0x1, 0x2, 0x3, 0x5, 0xF, 0x4, 0xA, 0x6, 0x7, 0x0, 0x9, 0xD),
    (0xB, 0xA, 0x5, 0xE, 0x6, 0xD, 0x9, 0x0, 0xC, 0x8, 0xF, 0x3, 0x2, 0x4, 0x7, 0x1),
    (0xD, 0x7, 0xF, 0x4, 0x1, 0x2, 0x6, 0xE, 0x9, 0xB, 0x3, 0x0, 0x8, 0x5, 0xC, 0xA),
)
Q1_T = (
    (0x2, 0x8, 0xB, 0xD, 0xF, 0x7, 0x6, 0xE, 0x3, 0x1, 0x9, 0x4, 0x0, 0xA, 0xC, 0x5),
    (0x1, 0xE, 0x2, 0xB, 0x4, 0xC, 0x3, 0x7, 0x6, 0xD, 0xA, 0x5, 0xF, 0x9, 0x0, 0x8),
    (0x4, 0xC, 0x7, 0x5, 0x1, 0x6, 0x9, 0xA, 0x0, 0xE, 0xD, 0x8, 0x2, 0xB, 0x3, 0xF),
    (0xB, 0x9, 0x5, 0x1, 0xC, 0x3, 0xD, 0xE, 0x6, 0x4, 0x7, 0xF, 0x2, 0x0, 0x8, 0xA),
)


def _ror4(x: int, n: int) -> int:
    return ((x >> n) | (x << (4 - n))) & 0xF


def _q_permute(x: int, t: Sequence[Sequence[int]]) -> int:
    a, b = x >> 4, x & 0xF
    a, b = a ^ b, a ^ _ror4(b, 1) ^ ((8 * a) & 0xF)
    a, b = t[0][a], t[1][b]
    a, b = a ^ b, a ^ _ror4(b, 1) ^ ((8 * a) & 0xF)
    a, b = t[2][a], t[3][b]
    return (b << 4) | a


Q0 = tuple(_q_permute(x, Q0_T) for x in range(256))
Q1 = tuple(_q_permute(x, Q1_T) for x in range(256))


def rol32(x: int, n: int) -> int:
    return ((x << n) | (x >> (32 - n))) & MASK32


def ror32(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & MASK32


def _word_bytes(x: int) -> List[int]:
    return [(x >> (8 * i)) & 0xFF for i in range(4)]


def _bytes_word(b: Sequence[int]) -> int:
    return b[0] | (b[1] << 8) | (b[2] << 16) | (b[3] << 24)


def h(x: int, keys: Sequence[int]) -> int:
    """The h function: keyed q-box layers followed by the MDS matrix.

    ``keys`` is (L0, ..., L(k-1)); the innermost layer uses L(k-1).
    """
    y = _word_bytes(x)
    k = len(keys)
    if k == 4:
        l = _word_bytes(keys[3])
        y = [Q1[y[0]] ^ l[0], Q0[y[1]] ^ l[1], Q0[y[2]] ^ l[2], Q1[y[3]] ^ l[3]]
    if k >= 3:
        l = _word_bytes(keys[2])
        y = [Q1[y[0]] ^ l[0], Q1[y[1]] ^ l[1], Q0[y[2]] ^ l[2], Q0[y[3]] ^ l[3]]
    l1, l0 = _word_bytes(keys[1]), _word_bytes(keys[0])
    y = [
        Q1[Q0[Q0[y[0]] ^ l1[0]] ^ l0[0]],
        Q0[Q0[Q1[y[1]] ^ l1[1]] ^ l0[1]],
        Q1[Q1[Q0[y[2]] ^ l1[2]] ^ l0[2]],
        Q0[Q1[Q1[y[3]] ^ l1[3]] ^ l0[3]],
    ]
    return _bytes_word(gf_matrix_vector(MDS, y, MDS_MODULUS))


@dataclass(frozen=True)
class TwofishKeySchedule:
    subkeys: Tuple[int, ...]       # K0..K39
    sbox_keys: Tuple[int, ...]     # S = (S(k-1), ..., S0)


def create_key_schedule(key: int, key_bytes: int = 16) -> TwofishKeySchedule:
    if key_bytes not in (16, 24, 32):
        raise ValueError(f"Twofish key size must be 16, 24 or 32 bytes, got: {key_bytes}")
    if key < 0 or key >> (8 * key_bytes):
        raise ValueError(f"Twofish key must fit in {8 * key_bytes} bits")
    m = key.to_bytes(key_bytes, "big")
    k = key_bytes // 8
    words = [_bytes_word(m[4 * i:4 * i + 4]) for i in range(2 * k)]
    m_even, m_odd = words[0::2], words[1::2]

    sbox_keys = [_bytes_word(gf_matrix_vector(RS, m[8 * i:8 * i + 8], RS_MODULUS)) for i in range(k)]
    sbox_keys.reverse()

    subkeys = []
    for i in range(20):
        a = h(2 * i * RHO, m_even)
        b = rol32(h((2 * i + 1) * RHO, m_odd), 8)
        subkeys.append((a + b) & MASK32)
        subkeys.append(rol32((a + 2 * b) & MASK32, 9))
    return TwofishKeySchedule(tuple(subkeys), tuple(sbox_keys))


def round_function(r0: int, r1: int, rnd: int, schedule: TwofishKeySchedule) -> Tuple[int, int]:
    """F: two g evaluations combined by the pseudo-Hadamard transform."""
    t0 = h(r0, schedule.sbox_keys)
    t1 = h(rol32(r1, 8), schedule.sbox_keys)
    k = schedule.subkeys
    return (t0 + t1 + k[2 * rnd + 8]) & MASK32, (t0 + 2 * t1 + k[2 * rnd + 9]) & MASK32


def _to_words(block: int) -> List[int]:
    data = block.to_bytes(16, "big")
    return [_bytes_word(data[4 * i:4 * i + 4]) for i in range(4)]


def _from_words(words: Sequence[int]) -> int:
    return int.from_bytes(b"".join(w.to_bytes(4, "little") for w in words), "big")


def input_whiten(words: Sequence[int], schedule: TwofishKeySchedule) -> List[int]:
    return [w ^ k for w, k in zip(words, schedule.subkeys[0:4])]


def output_whiten(words: Sequence[int], schedule: TwofishKeySchedule) -> List[int]:
    return [w ^ k for w, k in zip(words, schedule.subkeys[4:8])]


def _encrypt(block: int, schedule: TwofishKeySchedule, trace: Optional[TraceSink], index: int) -> int:
    r = input_whiten(_to_words(block), schedule)
    emit(trace, "Whitened", index, *r)
    for rnd in range(ROUNDS):
        f0, f1 = round_function(r[0], r[1], rnd, schedule)
        r = [ror32(r[2] ^ f0, 1), rol32(r[3], 1) ^ f1, r[0], r[1]]
        emit(trace, f"Round {rnd + 1}", index, *r)
    out = output_whiten([r[2], r[3], r[0], r[1]], schedule)
    emit(trace, "Output", index, *out)
    return _from_words(out)


def _decrypt(block: int, schedule: TwofishKeySchedule, trace: Optional[TraceSink], index: int) -> int:
    r = output_whiten(_to_words(block), schedule)
    emit(trace, "Whitened", index, *r)
    for rnd in reversed(range(ROUNDS)):
        f0, f1 = round_function(r[0], r[1], rnd, schedule)
        r = [rol32(r[2], 1) ^ f0, ror32(r[3] ^ f1, 1), r[0], r[1]]
        emit(trace, f"Round {ROUNDS - rnd}", index, *r)
    out = input_whiten([r[2], r[3], r[0], r[1]], schedule)
    emit(trace, "Output", index, *out)
    return _from_words(out)


class Twofish(BlockCipher):
    spec = CipherSpec(
        name="Twofish",
        architecture="FEISTEL",
        block_size_bits=128,
        key_size_bits=128,
        rounds=16,
        reference="Schneier et al., Twofish: A 128-Bit Block Cipher",
    )

    def key_schedule(self, key: int) -> TwofishKeySchedule:
        logger.debug("Twofish: building key schedule")
        return create_key_schedule(key, self.spec.key_size_bytes)

    def encrypt_block(self, block, schedule, *, trace=None, index=0) -> int:
        self._check_block(block)
        return _encrypt(block, schedule, trace, index)

    def decrypt_block(self, block, schedule, *, trace=None, index=0) -> int:
        self._check_block(block)
        return _decrypt(block, schedule, trace, index)
