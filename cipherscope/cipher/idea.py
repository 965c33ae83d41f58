"""International Data Encryption Algorithm (Lai & Massey, 1991).

64-bit blocks as four 16-bit words, 128-bit key, 8 full rounds plus an
output half round. Three group operations are mixed:

- XOR,
- addition modulo 2**16,
- multiplication modulo 2**16 + 1, where the word 0 stands for 2**16.

Decryption runs the same block function under the inverted key schedule.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from ..errors import NonInvertibleError
from ..trace import TraceSink, emit
from .bitblob import join_blocks, split_into_words
from .builder import BlockCipher
from .spec import CipherSpec

logger = logging.getLogger(__name__)

MASK16 = 0xFFFF
MASK128 = (1 << 128) - 1
MUL_MODULUS = 0x10001

Words = Tuple[int, int, int, int]
KeySchedule = Tuple[Tuple[int, ...], ...]


def add(a: int, b: int) -> int:
    return (a + b) & MASK16


def multiply(a: int, b: int) -> int:
    if a == 0:
        return (MUL_MODULUS - b) & MASK16
    if b == 0:
        return (MUL_MODULUS - a) & MASK16
    return ((a * b) % MUL_MODULUS) & MASK16


def additive_inverse(value: int) -> int:
    return (-value) & MASK16


def multiplicative_inverse(value: int) -> int:
    """Inverse modulo 2**16 + 1 by the extended Euclidean algorithm.

    Raises NonInvertibleError when ``value`` shares a factor with the
    modulus, which no in-range subkey can do.
    """
    t, new_t = 0, 1
    r, new_r = MUL_MODULUS, value or 0x10000
    while new_r:
        quotient = r // new_r
        t, new_t = new_t, t - quotient * new_t
        r, new_r = new_r, r - quotient * new_r
    if r != 1:
        raise NonInvertibleError(value)
    return (t % MUL_MODULUS) & MASK16


# ---------------------------------------------------------------------------
# Key schedule
# ---------------------------------------------------------------------------

def expand_key(key: int) -> Tuple[int, ...]:
    """52 contiguous subkeys: eight 16-bit slices per 25-bit left rotation."""
    if key < 0 or key >> 128:
        raise ValueError("IDEA key must fit in 128 bits")
    subkeys = []
    register = key
    while len(subkeys) < 52:
        subkeys.extend(split_into_words(register, 16, 8))
        register = ((register << 25) | (register >> 103)) & MASK128
    return tuple(subkeys[:52])


def create_key_schedule(key: int) -> KeySchedule:
    subkeys = expand_key(key)
    return tuple(subkeys[i:i + 6] for i in range(0, 52, 6))


def invert_key_schedule(schedule: KeySchedule) -> KeySchedule:
    inverted = []
    for i in range(9):
        z = schedule[8 - i]
        if i in (0, 8):
            z2, z3 = additive_inverse(z[1]), additive_inverse(z[2])
        else:
            z2, z3 = additive_inverse(z[2]), additive_inverse(z[1])
        group = (multiplicative_inverse(z[0]), z2, z3, multiplicative_inverse(z[3]))
        if i < 8:
            group += tuple(schedule[7 - i][4:6])
        inverted.append(group)
    return tuple(inverted)


# ---------------------------------------------------------------------------
# Block function
# ---------------------------------------------------------------------------

def key_mix(words: Sequence[int], z: Sequence[int]) -> Words:
    x1, x2, x3, x4 = words
    return multiply(x1, z[0]), add(x2, z[1]), add(x3, z[2]), multiply(x4, z[3])


def mix_ma(words: Sequence[int], z5: int, z6: int) -> Words:
    """Multiply-addition structure; an involution for fixed z5, z6."""
    x1, x2, x3, x4 = words
    t0 = multiply(x1 ^ x3, z5)
    t1 = multiply(add(x2 ^ x4, t0), z6)
    t0 = add(t0, t1)
    return x1 ^ t1, x2 ^ t0, x3 ^ t1, x4 ^ t0


def idea_round(words: Sequence[int], z: Sequence[int]) -> Words:
    y1, y2, y3, y4 = mix_ma(key_mix(words, z), z[4], z[5])
    return y1, y3, y2, y4


def _crypt(block: int, schedule: KeySchedule, trace: Optional[TraceSink], index: int) -> int:
    words = tuple(split_into_words(block, 16, 4))
    emit(trace, "Input", index, *words)
    for r in range(8):
        words = idea_round(words, schedule[r])
        emit(trace, f"Round {r + 1}", index, *words)
    x1, x2, x3, x4 = words
    out = key_mix((x1, x3, x2, x4), schedule[8])
    emit(trace, "Output", index, *out)
    return join_blocks(out, 16)


class IDEA(BlockCipher):
    spec = CipherSpec(
        name="IDEA",
        architecture="LAI_MASSEY",
        block_size_bits=64,
        key_size_bits=128,
        rounds=8.5,
        reference="Lai & Massey, EUROCRYPT '90",
    )

    def key_schedule(self, key: int) -> KeySchedule:
        logger.debug("IDEA: building encryption key schedule")
        return create_key_schedule(key)

    def decryption_schedule(self, key: int) -> KeySchedule:
        logger.debug("IDEA: building decryption key schedule")
        return invert_key_schedule(create_key_schedule(key))

    def encrypt_block(self, block, schedule, *, trace=None, index=0) -> int:
        self._check_block(block)
        return _crypt(block, schedule, trace, index)

    def decrypt_block(self, block, schedule, *, trace=None, index=0) -> int:
        self._check_block(block)
        return _crypt(block, schedule, trace, index)
