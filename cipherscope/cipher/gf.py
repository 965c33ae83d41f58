"""GF(2^8) arithmetic for the Twofish RS and MDS matrices.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import List, Sequence

from ..errors import MatrixDimensionError

# x^8 + x^6 + x^3 + x^2 + 1
RS_MODULUS = 0x14D
# x^8 + x^6 + x^5 + x^3 + 1
MDS_MODULUS = 0x169


def gf_multiply(a: int, b: int, modulus: int) -> int:
    """Carry-less multiply of two bytes, reduced by ``modulus``."""
    product = 0
    while b:
        if b & 1:
            product ^= a
        b >>= 1
        a <<= 1
        if a & 0x100:
            a ^= modulus
    return product


def gf_matrix_vector(matrix: Sequence[Sequence[int]], vector: Sequence[int], modulus: int) -> List[int]:
    cols = len(matrix[0]) if matrix else 0
    if cols != len(vector):
        raise MatrixDimensionError(len(matrix), cols, len(vector))
    out: List[int] = []
    for row in matrix:
        if len(row) != cols:
            raise MatrixDimensionError(len(matrix), len(row), len(vector))
        acc = 0
        for m, v in zip(row, vector):
            acc ^= gf_multiply(m, v, modulus)
        out.append(acc)
    return out
