import sys
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.cipher.des import DES, create_key_schedule, permute, IP, IP_INV
from cipherscope.keys import hash_passphrase
from cipherscope.trace import TraceCollector


# ---------------------------------------------------------------------------
# Known answers (FIPS 46-3 bit numbering)
# ---------------------------------------------------------------------------

def test_known_answer_encrypt():
    des = DES()
    assert des.encrypt_with_key(0x0123456789ABCDEF, 0x133457799BBCDFF1) == 0x85E813540F0AB405


def test_known_answer_decrypt():
    des = DES()
    assert des.decrypt_with_key(0x85E813540F0AB405, 0x133457799BBCDFF1) == 0x0123456789ABCDEF


def test_second_known_answer():
    assert DES().encrypt_with_key(0x8787878787878787, 0x0E329232EA6D0D73) == 0


def test_key_schedule_first_round_key():
    schedule = create_key_schedule(0x133457799BBCDFF1)
    assert len(schedule) == 16
    assert schedule[0] == 0x1B02EFFC7072
    assert all(0 <= k < (1 << 48) for k in schedule)


def test_parity_bits_are_ignored():
    # Flipping the low bit of every key byte leaves the schedule unchanged
    key = 0x133457799BBCDFF1
    assert create_key_schedule(key) == create_key_schedule(key ^ 0x0101010101010101)


def test_initial_permutation_inverts():
    block = 0x0123456789ABCDEF
    assert permute(permute(block, 64, IP), 64, IP_INV) == block


def test_block_out_of_range():
    des = DES()
    with pytest.raises(ValueError):
        des.encrypt_block(1 << 64, create_key_schedule(0))
    with pytest.raises(ValueError):
        create_key_schedule(1 << 64)


# ---------------------------------------------------------------------------
# Passphrase API
# ---------------------------------------------------------------------------

def test_blob_roundtrip_with_passphrase():
    des = DES()
    blob = int.from_bytes(b"The quick brown fox jumps", "big")
    key, ct = des.encrypt(blob, "secret")
    assert key == "secret"
    assert ct != blob
    assert des.decrypt(ct, "secret").output == blob


def test_hashed_key_is_derived_from_passphrase():
    result = DES().encrypt(0x41, "secret")
    assert result.hashed_key == hash_passphrase("secret", 64)
    assert result.nonce is None


def test_random_key_when_missing():
    des = DES()
    result = des.encrypt(0xDEADBEEF)
    assert len(result.key) == 16
    int(result.key, 16)
    assert des.decrypt(result.output, result.key).output == 0xDEADBEEF


def test_wrong_passphrase_does_not_decrypt():
    des = DES()
    blob = int.from_bytes(b"attack at dawn!!", "big")
    ct = des.encrypt(blob, "right").output
    assert des.decrypt(ct, "wrong").output != blob


def test_bytes_roundtrip_keeps_leading_zeros():
    des = DES()
    data = b"\x00\x00leading zeros"
    enc = des.encrypt_bytes(data, "pw")
    assert len(enc.output) % 8 == 0
    assert des.decrypt_bytes(enc.output, "pw").output == data


def test_empty_bytes_pad_to_one_block():
    enc = DES().encrypt_bytes(b"", "pw")
    assert len(enc.output) == 8
    assert DES().decrypt_bytes(enc.output, "pw").output == b""


def test_trace_records_every_round():
    collector = TraceCollector()
    DES().encrypt(0x0123456789ABCDEF, "pw", trace=collector)
    assert collector.stages() == ["IP"] + [f"Round {i}" for i in range(1, 17)]
    assert all(len(step.values) == 2 for step in collector.steps)
