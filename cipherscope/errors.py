"""Exception hierarchy shared by the cipher engines and their callers.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations


class CipherError(Exception):
    """Base class for every error raised by cipherscope."""


class NonInvertibleError(CipherError):
    """A subkey has no multiplicative inverse modulo 2**16 + 1."""

    def __init__(self, value: int, modulus: int = 0x10001):
        super().__init__(f"Value {value:#x} is not invertible modulo {modulus:#x}")
        self.value = value
        self.modulus = modulus


class InputValidationError(CipherError, ValueError):
    """User-supplied input was rejected before reaching a cipher."""


class MatrixDimensionError(CipherError):
    """A GF(2^8) matrix was applied to a vector of the wrong length."""

    def __init__(self, rows: int, cols: int, length: int):
        super().__init__(f"Cannot apply ({rows}, {cols})-matrix to {length}-vector")
        self.rows = rows
        self.cols = cols
        self.length = length


class UnknownCipherError(CipherError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"Unknown cipher: {name}")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]
