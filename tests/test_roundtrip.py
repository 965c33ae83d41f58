import random
import sys
import typing
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope import (
    DES,
    BlockCipher,
    CipherError,
    CipherRegistry,
    CipherResult,
    CipherSpec,
    InputValidationError,
    StreamCipher,
    UnknownCipherError,
    build_cipher,
    get_cipher_spec,
    list_ciphers,
)
from cipherscope.cipher.bitblob import blob_to_text, text_to_blob


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_list_ciphers():
    assert list_ciphers() == ["chacha20", "des", "idea", "twofish"]


@pytest.mark.parametrize("name, expected", [("DES", "DES"), ("Idea", "IDEA"), (" twofish ", "Twofish"), ("CHACHA20", "ChaCha20")])
def test_lookup_is_case_insensitive(name, expected):
    assert build_cipher(name).name == expected
    assert get_cipher_spec(name).name == expected


def test_unknown_cipher():
    with pytest.raises(UnknownCipherError) as exc_info:
        build_cipher("aes")
    assert str(exc_info.value) == "Unknown cipher: aes"
    with pytest.raises(KeyError):
        CipherRegistry().get("rc4")


def test_register_validates_spec():
    reg = CipherRegistry()
    reg.register("DES-alias", type(build_cipher("des")))
    assert reg.exists("des-alias")


def test_register_rejects_invalid_spec():
    class OddFeistel(DES):
        spec = CipherSpec(name="Odd Feistel", architecture="FEISTEL", block_size_bits=72, key_size_bits=64, rounds=16)

    reg = CipherRegistry()
    with pytest.raises(CipherError, match="even-byte block size"):
        reg.register("odd", OddFeistel)
    assert not reg.exists("odd")


def test_specs_follow_list_order():
    reg = CipherRegistry()
    assert [s.name for s in reg.specs()] == [get_cipher_spec(n).name for n in reg.list()]


# ---------------------------------------------------------------------------
# Roundtrip P = D(E(P, K), K) for every engine, both APIs
# ---------------------------------------------------------------------------

def _decrypt(cipher, result, passphrase):
    if isinstance(cipher, StreamCipher):
        return cipher.decrypt(result.output, passphrase, result.nonce, length=result.length)
    return cipher.decrypt(result.output, passphrase)


@pytest.mark.parametrize("algo_name", list_ciphers())
def test_text_roundtrip(algo_name):
    cipher = build_cipher(algo_name)
    message = "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed non risus."
    result = cipher.encrypt(text_to_blob(message), "correct horse battery staple")
    assert blob_to_text(_decrypt(cipher, result, result.key).output) == message


@pytest.mark.parametrize("algo_name", list_ciphers())
def test_random_blob_roundtrip(algo_name):
    cipher = build_cipher(algo_name)
    rng = random.Random(1337)

    for _ in range(15):
        blob = rng.getrandbits(rng.randrange(1, 400))
        passphrase = format(rng.getrandbits(64), "x")
        result = cipher.encrypt(blob, passphrase)
        rt = _decrypt(cipher, result, passphrase).output
        assert rt == blob, f"{algo_name}: roundtrip failed. blob={blob:x}, key={passphrase}, ct={result.hex()}"


@pytest.mark.parametrize("algo_name", list_ciphers())
def test_random_bytes_roundtrip(algo_name):
    cipher = build_cipher(algo_name)
    rng = random.Random(2026)

    for length in (0, 1, 7, 8, 15, 16, 17, 63, 64, 65):
        data = bytes(rng.randrange(0, 256) for _ in range(length))
        result = cipher.encrypt_bytes(data, "pw")
        assert cipher.decrypt_bytes(result.output, "pw", result.nonce).output == data


@pytest.mark.parametrize("algo_name", list_ciphers())
def test_generated_key_roundtrip(algo_name):
    cipher = build_cipher(algo_name)
    key, ct = result = cipher.encrypt(0xC0FFEE)
    assert key == result.key and ct == result.output
    assert len(key) == cipher.key_bits // 4
    assert _decrypt(cipher, result, key).output == 0xC0FFEE


@pytest.mark.parametrize("algo_name", ["des", "idea", "twofish"])
def test_block_decrypt_bytes_rejects_partial_blocks(algo_name):
    cipher = build_cipher(algo_name)
    with pytest.raises(InputValidationError):
        cipher.decrypt_bytes(b"\x01\x02\x03", "pw")


def test_empty_blob_encrypts_to_empty():
    for name in ("des", "idea", "twofish"):
        assert build_cipher(name).encrypt(0, "pw").output == 0


@pytest.mark.parametrize("base", [BlockCipher, StreamCipher])
@pytest.mark.parametrize("method", ["encrypt", "decrypt", "encrypt_bytes", "decrypt_bytes"])
def test_engine_methods_are_annotated(base, method):
    hints = typing.get_type_hints(getattr(base, method))
    assert {"passphrase", "nonce", "trace", "return"} <= set(hints)
    assert hints["return"] is CipherResult
