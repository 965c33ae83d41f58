from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, Optional, Tuple, Union

from ..errors import InputValidationError
from ..keys import hash_passphrase, random_nonce, resolve_passphrase
from ..trace import TraceSink
from .bitblob import (
    blob_to_bytes,
    bytes_to_blob,
    join_blocks,
    pad_block_bytes,
    split_into_blocks,
    unpad_block_bytes,
)
from .spec import CipherSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CipherResult:
    """Outcome of one encrypt/decrypt call.

    Unpacks as ``(key, output)``: the resolved passphrase (generated when the
    caller gave none) and the transformed blob or bytes.
    """
    key: str
    hashed_key: int
    output: Union[int, bytes]
    nonce: Optional[int] = None
    length: Optional[int] = None    # byte count processed (stream engines)

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.output

    def hex(self) -> str:
        if isinstance(self.output, bytes):
            return self.output.hex()
        if self.length is not None:
            return format(self.output, f"0{2 * self.length}x")
        return format(self.output, "x")


class Cipher:
    spec: ClassVar[CipherSpec]

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def key_bits(self) -> int:
        return self.spec.key_size_bits

    def derive_key(self, passphrase: Optional[str]) -> Tuple[str, int]:
        resolved = resolve_passphrase(passphrase, self.key_bits)
        return resolved, hash_passphrase(resolved, self.key_bits)

    def encrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None) -> CipherResult:  # pragma: no cover
        raise NotImplementedError

    def decrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None) -> CipherResult:  # pragma: no cover
        raise NotImplementedError

    def encrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:  # pragma: no cover
        raise NotImplementedError

    def decrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:  # pragma: no cover
        raise NotImplementedError


class BlockCipher(Cipher):
    """Fixed-width block engine; subclasses supply the schedule and block functions.

    ``nonce`` is accepted for a uniform signature and ignored.
    """

    @property
    def block_bits(self) -> int:
        return self.spec.block_size_bits

    @property
    def block_bytes(self) -> int:
        return self.spec.block_size_bits // 8

    def key_schedule(self, key: int) -> Any:  # pragma: no cover
        raise NotImplementedError

    def decryption_schedule(self, key: int) -> Any:
        return self.key_schedule(key)

    def encrypt_block(self, block: int, schedule: Any, *, trace: Optional[TraceSink] = None,
                      index: int = 0) -> int:  # pragma: no cover
        raise NotImplementedError

    def decrypt_block(self, block: int, schedule: Any, *, trace: Optional[TraceSink] = None,
                      index: int = 0) -> int:  # pragma: no cover
        raise NotImplementedError

    def _check_block(self, block: int) -> None:
        if block < 0 or block >> self.block_bits:
            raise ValueError(f"{self.name} block must fit in {self.block_bits} bits")

    # -- blob API (legacy-compatible) ---------------------------------------

    def encrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None) -> CipherResult:
        key, hashed = self.derive_key(passphrase)
        schedule = self.key_schedule(hashed)
        blocks = split_into_blocks(blob, self.block_bits)
        logger.debug("%s: encrypting %d block(s)", self.name, len(blocks))
        out = [self.encrypt_block(b, schedule, trace=trace, index=i) for i, b in enumerate(blocks)]
        return CipherResult(key=key, hashed_key=hashed, output=join_blocks(out, self.block_bits))

    def decrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None) -> CipherResult:
        key, hashed = self.derive_key(passphrase)
        schedule = self.decryption_schedule(hashed)
        blocks = split_into_blocks(blob, self.block_bits)
        logger.debug("%s: decrypting %d block(s)", self.name, len(blocks))
        out = [self.decrypt_block(b, schedule, trace=trace, index=i) for i, b in enumerate(blocks)]
        return CipherResult(key=key, hashed_key=hashed, output=join_blocks(out, self.block_bits))

    # -- bytes API (length-preserving) --------------------------------------

    def encrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:
        key, hashed = self.derive_key(passphrase)
        schedule = self.key_schedule(hashed)
        padded = pad_block_bytes(bytes(data), self.block_bytes)
        out = bytearray()
        for i in range(0, len(padded), self.block_bytes):
            block = bytes_to_blob(padded[i:i + self.block_bytes])
            ct = self.encrypt_block(block, schedule, trace=trace, index=i // self.block_bytes)
            out += blob_to_bytes(ct, self.block_bytes)
        return CipherResult(key=key, hashed_key=hashed, output=bytes(out), length=len(out))

    def decrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:
        data = bytes(data)
        if not data or len(data) % self.block_bytes:
            raise InputValidationError(
                f"{self.name} ciphertext must be a non-empty multiple of {self.block_bytes} bytes"
            )
        key, hashed = self.derive_key(passphrase)
        schedule = self.decryption_schedule(hashed)
        out = bytearray()
        for i in range(0, len(data), self.block_bytes):
            block = bytes_to_blob(data[i:i + self.block_bytes])
            pt = self.decrypt_block(block, schedule, trace=trace, index=i // self.block_bytes)
            out += blob_to_bytes(pt, self.block_bytes)
        plain = unpad_block_bytes(bytes(out), self.block_bytes)
        return CipherResult(key=key, hashed_key=hashed, output=plain, length=len(plain))

    # -- raw key path ---------------------------------------------------------

    def encrypt_with_key(self, block: int, key: int) -> int:
        """Encrypt one block under an already-derived (unhashed) key."""
        return self.encrypt_block(block, self.key_schedule(key))

    def decrypt_with_key(self, block: int, key: int) -> int:
        return self.decrypt_block(block, self.decryption_schedule(key))


class StreamCipher(Cipher):
    """Keystream engine; encryption and decryption are the same XOR."""

    nonce_bits: ClassVar[int] = 96

    def xor(self, data: bytes, key: int, nonce: int, *, trace: Optional[TraceSink] = None) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def _check_nonce(self, nonce: int) -> None:
        if nonce < 0 or nonce >> self.nonce_bits:
            raise InputValidationError(f"{self.name} nonce must fit in {self.nonce_bits} bits")

    def _apply(self, data: bytes, passphrase: Optional[str], nonce: Optional[int],
               trace: Optional[TraceSink], *, generate_nonce: bool) -> Tuple[str, int, int, bytes]:
        if nonce is None:
            if not generate_nonce:
                raise InputValidationError(f"{self.name} decryption requires the nonce used to encrypt")
            nonce = random_nonce(self.nonce_bits)
        self._check_nonce(nonce)
        key, hashed = self.derive_key(passphrase)
        return key, hashed, nonce, self.xor(data, hashed, nonce, trace=trace)

    def encrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None, length: Optional[int] = None) -> CipherResult:
        data = blob_to_bytes(blob, length)
        key, hashed, nonce, out = self._apply(data, passphrase, nonce, trace, generate_nonce=True)
        return CipherResult(key=key, hashed_key=hashed, output=bytes_to_blob(out), nonce=nonce, length=len(out))

    def decrypt(self, blob: int, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                *, trace: Optional[TraceSink] = None, length: Optional[int] = None) -> CipherResult:
        data = blob_to_bytes(blob, length)
        key, hashed, nonce, out = self._apply(data, passphrase, nonce, trace, generate_nonce=False)
        return CipherResult(key=key, hashed_key=hashed, output=bytes_to_blob(out), nonce=nonce, length=len(out))

    def encrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:
        key, hashed, nonce, out = self._apply(bytes(data), passphrase, nonce, trace, generate_nonce=True)
        return CipherResult(key=key, hashed_key=hashed, output=out, nonce=nonce, length=len(out))

    def decrypt_bytes(self, data: bytes, passphrase: Optional[str] = None, nonce: Optional[int] = None,
                      *, trace: Optional[TraceSink] = None) -> CipherResult:
        key, hashed, nonce, out = self._apply(bytes(data), passphrase, nonce, trace, generate_nonce=False)
        return CipherResult(key=key, hashed_key=hashed, output=out, nonce=nonce, length=len(out))
