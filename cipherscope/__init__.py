"""cipherscope: step-by-step DES, IDEA, Twofish and ChaCha20.

Research / education only. Do NOT use in production.
"""
from .cipher.bitblob import (
    blob_to_bytes,
    blob_to_text,
    bytes_to_blob,
    join_blocks,
    split_into_blocks,
    text_to_blob,
)
from .cipher.builder import BlockCipher, Cipher, CipherResult, StreamCipher
from .cipher.chacha20 import ChaCha20
from .cipher.des import DES
from .cipher.idea import IDEA
from .cipher.registry import CipherRegistry, build_cipher, get_cipher_spec, list_ciphers
from .cipher.spec import CipherSpec
from .cipher.twofish import Twofish
from .cipher.validator import parse_blob, parse_nonce
from .errors import (
    CipherError,
    InputValidationError,
    MatrixDimensionError,
    NonInvertibleError,
    UnknownCipherError,
)
from .keys import hash_passphrase
from .trace import TraceCollector

__version__ = "0.1.0"

__all__ = [
    "BlockCipher",
    "ChaCha20",
    "Cipher",
    "CipherError",
    "CipherRegistry",
    "CipherResult",
    "CipherSpec",
    "DES",
    "IDEA",
    "InputValidationError",
    "MatrixDimensionError",
    "NonInvertibleError",
    "StreamCipher",
    "TraceCollector",
    "Twofish",
    "UnknownCipherError",
    "blob_to_bytes",
    "blob_to_text",
    "build_cipher",
    "bytes_to_blob",
    "get_cipher_spec",
    "hash_passphrase",
    "join_blocks",
    "list_ciphers",
    "parse_blob",
    "parse_nonce",
    "split_into_blocks",
    "text_to_blob",
]
