"""Encrypt or decrypt from the command line.

Usage:
    python scripts/cipherscope_cli.py encrypt --cipher des --key secret "Hello"
    python scripts/cipherscope_cli.py decrypt --cipher des --key secret 3f2a...
    python scripts/cipherscope_cli.py encrypt --cipher chacha20 --trace "Hello"
    python scripts/cipherscope_cli.py decrypt --cipher chacha20 --key K --nonce N --length 5 c0ffee...

Encryption reads plain text and prints hexadecimal; decryption reads
hexadecimal and prints plain text.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.cipher.bitblob import blob_to_text, text_to_blob
from cipherscope.cipher.builder import StreamCipher
from cipherscope.cipher.registry import build_cipher, list_ciphers
from cipherscope.cipher.validator import hex_byte_length, parse_blob, parse_nonce
from cipherscope.config import load_settings
from cipherscope.errors import CipherError
from cipherscope.trace import TraceCollector

logger = logging.getLogger("cipherscope_cli")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Run DES, IDEA, Twofish or ChaCha20 on a message",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/cipherscope_cli.py encrypt --cipher idea --key k \"text\"\n"
            "  python scripts/cipherscope_cli.py decrypt --cipher idea --key k 0x1f2e...\n"
        ),
    )
    parser.add_argument("process", choices=["encrypt", "decrypt"])
    parser.add_argument("message", help="Plain text (encrypt) or hexadecimal ciphertext (decrypt)")
    parser.add_argument("--cipher", choices=list_ciphers(), default="des", type=str.lower)
    parser.add_argument("--key", default=None, help="Passphrase (default: generate a random one)")
    parser.add_argument("--nonce", default=None, help="Hex nonce for ChaCha20")
    parser.add_argument("--length", type=int, default=None,
                        help="ChaCha20 byte length of the input (default on decrypt: half the hex digit count)")
    parser.add_argument("--trace", action="store_true", help="Print every intermediate step")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    cipher = build_cipher(args.cipher)
    is_stream = isinstance(cipher, StreamCipher)
    collector = TraceCollector(width=4 if args.cipher == "idea" else 8) if args.trace else None
    kwargs = {}
    if is_stream:
        length = args.length
        if length is None and args.process == "decrypt":
            length = hex_byte_length(args.message)
        if length is not None:
            kwargs["length"] = length

    try:
        nonce = parse_nonce(args.nonce) if is_stream else None
        if args.process == "encrypt":
            result = cipher.encrypt(text_to_blob(args.message), args.key, nonce, trace=collector, **kwargs)
            output = result.hex()
        else:
            result = cipher.decrypt(parse_blob(args.message), args.key, nonce, trace=collector, **kwargs)
            output = blob_to_text(result.output)
    except (CipherError, ValueError) as e:
        logger.error("%s %s failed: %s", cipher.name, args.process, e)
        return 1

    if collector is not None:
        for line in collector.process_log():
            print(line)
        print()

    print(f"Key:    {result.key}")
    if result.nonce is not None:
        print(f"Nonce:  {result.nonce:024x}")
        print(f"Length: {result.length}")
    print(f"Output: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
