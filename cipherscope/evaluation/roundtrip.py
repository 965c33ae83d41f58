"""Roundtrip verification P = D(E(P, K), K).

Generates randomized (message, passphrase) vectors per engine and checks
that decryption inverts encryption through both public APIs:

- the bytes API, which must reproduce the message exactly,
- the blob API, which must reproduce the integer value.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional

from ..cipher.builder import Cipher, StreamCipher
from ..cipher.registry import CipherRegistry, build_cipher
from ..errors import CipherError

logger = logging.getLogger(__name__)


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip test vector."""
    vector_index: int
    mode: str                # "bytes" or "blob"
    plaintext_hex: str
    passphrase: str
    ciphertext_hex: str
    decrypted_hex: str       # What decrypt returned (should equal plaintext)
    error: Optional[str]     # Exception message if decrypt/encrypt threw


@dataclass
class RoundtripResult:
    """Aggregate result of roundtrip testing for one engine."""
    algorithm_name: str
    architecture: str
    block_size_bits: int
    key_size_bits: int
    rounds: float
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.algorithm_name} ({self.architecture}): "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def _check_vector(cipher: Cipher, data: bytes, passphrase: str, nonce: Optional[int]) -> Optional[RoundtripFailure]:
    """Return None when both APIs round-trip, else the first mismatch."""
    enc = cipher.encrypt_bytes(data, passphrase, nonce)
    dec = cipher.decrypt_bytes(enc.output, passphrase, enc.nonce)
    if dec.output != data:
        return RoundtripFailure(-1, "bytes", data.hex(), passphrase, enc.hex(), dec.hex(), None)

    blob = int.from_bytes(data, "big")
    enc = cipher.encrypt(blob, passphrase, nonce)
    if isinstance(cipher, StreamCipher):
        dec = cipher.decrypt(enc.output, passphrase, enc.nonce, length=enc.length)
    else:
        dec = cipher.decrypt(enc.output, passphrase)
    if dec.output != blob:
        return RoundtripFailure(-1, "blob", format(blob, "x"), passphrase, enc.hex(), dec.hex(), None)
    return None


def run_roundtrip_tests(
    name: str,
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    max_blocks: int = 4,
    max_failures_recorded: int = 10,
    registry: Optional[CipherRegistry] = None,
) -> RoundtripResult:
    """Run roundtrip verification across many random test vectors.

    Args:
        name: Registered engine name (case-insensitive).
        num_vectors: Number of random (message, passphrase) pairs to test.
        seed: Random seed for deterministic reproducibility.
        max_blocks: Messages are 0..max_blocks engine blocks long, plus a
            random remainder so padding is exercised.
        max_failures_recorded: Maximum number of failure details to keep.
        registry: Optional engine registry; uses default if not provided.

    Returns:
        RoundtripResult with pass/fail counts and failure details.
    """
    cipher = build_cipher(name, registry)
    spec = cipher.spec
    is_stream = isinstance(cipher, StreamCipher)

    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        length = rng.randrange(0, max_blocks * spec.block_size_bytes + 1)
        data = _rand_bytes(rng, length)
        passphrase = _rand_bytes(rng, rng.randrange(1, 33)).hex()
        nonce = rng.getrandbits(96) if is_stream else None

        try:
            failure = _check_vector(cipher, data, passphrase, nonce)
        except CipherError as exc:
            failure = RoundtripFailure(i, "error", data.hex(), passphrase, "<error>", "<error>", str(exc))

        if failure is None:
            passed += 1
            continue
        failed += 1
        failure.vector_index = i
        logger.warning("%s: vector %d failed (%s)", spec.name, i, failure.mode)
        if len(failures) < max_failures_recorded:
            failures.append(failure)

    elapsed = time.perf_counter() - start

    return RoundtripResult(
        algorithm_name=spec.name,
        architecture=spec.architecture,
        block_size_bits=spec.block_size_bits,
        key_size_bits=spec.key_size_bits,
        rounds=spec.rounds,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_all_ciphers(
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> List[RoundtripResult]:
    """Run roundtrip tests for every registered engine.

    Args:
        num_vectors: Number of test vectors per engine.
        seed: Random seed for reproducibility.
        progress_callback: Optional callback(name, current_index, total)
            for progress reporting (e.g., Streamlit).

    Returns:
        List of RoundtripResult sorted by engine name.
    """
    registry = CipherRegistry()
    names = registry.list()
    results: List[RoundtripResult] = []

    for idx, name in enumerate(names):
        if progress_callback:
            progress_callback(name, idx, len(names))
        results.append(run_roundtrip_tests(name, num_vectors=num_vectors, seed=seed, registry=registry))

    return sorted(results, key=lambda r: r.algorithm_name)
