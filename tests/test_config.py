import hashlib
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.config import Settings, load_settings
from cipherscope.cipher.chacha20 import ChaCha20
from cipherscope.keys import hash_passphrase, random_nonce, random_passphrase, resolve_passphrase


@pytest.fixture
def fresh_settings(monkeypatch):
    for name in ("CIPHERSCOPE_KEY_HASH", "CIPHERSCOPE_CHACHA_COUNTER", "CIPHERSCOPE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield monkeypatch
    load_settings.cache_clear()


def test_defaults():
    s = Settings()
    assert s.key_hash == "sha256"
    assert s.chacha_initial_counter == 1
    assert s.log_level == "INFO"


def test_key_hash_validation():
    assert Settings(key_hash=" SHA512 ").key_hash == "sha512"
    with pytest.raises(ValidationError):
        Settings(key_hash="md5")
    with pytest.raises(ValidationError):
        Settings(key_hash="not-a-hash")


def test_counter_range():
    with pytest.raises(ValidationError):
        Settings(chacha_initial_counter=1 << 32)


def test_env_overrides(fresh_settings):
    fresh_settings.setenv("CIPHERSCOPE_KEY_HASH", "sha512")
    fresh_settings.setenv("CIPHERSCOPE_CHACHA_COUNTER", "0")
    fresh_settings.setenv("CIPHERSCOPE_LOG_LEVEL", "debug")
    s = load_settings()
    assert s.key_hash == "sha512"
    assert s.chacha_initial_counter == 0
    assert s.log_level == "DEBUG"
    assert ChaCha20().initial_counter == 0


def test_hash_follows_configured_algorithm(fresh_settings):
    fresh_settings.setenv("CIPHERSCOPE_KEY_HASH", "sha512")
    expected = int(hashlib.sha512(b"abc").hexdigest(), 16) & ((1 << 64) - 1)
    assert hash_passphrase("abc", 64) == expected


def test_hash_passphrase_takes_low_bits():
    digest = int(hashlib.sha256("pässword".encode("utf-8")).hexdigest(), 16)
    assert hash_passphrase("pässword", 128, algorithm="sha256") == digest & ((1 << 128) - 1)
    assert hash_passphrase("pässword", 256, algorithm="sha256") == digest
    with pytest.raises(ValueError):
        hash_passphrase("x", 512, algorithm="sha256")


def test_random_material():
    assert len(random_passphrase(128)) == 32
    assert 0 <= random_nonce() < (1 << 96)
    assert resolve_passphrase("given", 64) == "given"
    assert resolve_passphrase("", 64) == ""
    assert len(resolve_passphrase(None, 64)) == 16
