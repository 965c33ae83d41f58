import sys
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.cipher.idea import (
    IDEA,
    add,
    additive_inverse,
    create_key_schedule,
    expand_key,
    idea_round,
    invert_key_schedule,
    key_mix,
    mix_ma,
    multiplicative_inverse,
    multiply,
)
from cipherscope.errors import NonInvertibleError
from cipherscope.trace import TraceCollector

KEY = 0x00010002000300040005000600070008
PLAIN = 0x0000000100020003
CIPHER = 0x11FBED2B01986DE5


def test_known_answer():
    idea = IDEA()
    assert idea.encrypt_with_key(PLAIN, KEY) == CIPHER
    assert idea.decrypt_with_key(CIPHER, KEY) == PLAIN


def test_expand_key():
    subkeys = expand_key(KEY)
    assert len(subkeys) == 52
    assert subkeys[:8] == (1, 2, 3, 4, 5, 6, 7, 8)
    assert subkeys[8:16] == (0x0400, 0x0600, 0x0800, 0x0A00, 0x0C00, 0x0E00, 0x1000, 0x0200)


def test_schedule_shape():
    schedule = create_key_schedule(KEY)
    assert [len(g) for g in schedule] == [6] * 8 + [4]
    inverted = invert_key_schedule(schedule)
    assert [len(g) for g in inverted] == [6] * 8 + [4]


def test_multiply_treats_zero_as_two_to_sixteen():
    assert multiply(0, 0) == 1
    assert multiply(0, 1) == 0
    assert multiply(1, 0) == 0
    assert multiply(0, 2) == 0xFFFF
    assert multiply(3, 5) == 15


def test_multiplicative_inverse():
    for value in (1, 2, 3, 0x1234, 0xFFFF, 0):
        assert multiply(value, multiplicative_inverse(value)) == 1
    assert multiplicative_inverse(0) == 0


def test_non_invertible_value():
    with pytest.raises(NonInvertibleError) as exc_info:
        multiplicative_inverse(0x10001)
    assert exc_info.value.value == 0x10001


def test_additive_inverse():
    for value in (0, 1, 0x8000, 0xFFFF):
        assert add(value, additive_inverse(value)) == 0


def test_ma_structure_is_involution():
    words = (0x1234, 0x5678, 0x9ABC, 0xDEF0)
    assert mix_ma(mix_ma(words, 0x1111, 0x2222), 0x1111, 0x2222) == words


def test_key_mix_inverts_with_inverse_subkeys():
    z = (0x0102, 0x0304, 0x0506, 0x0708)
    z_inv = (multiplicative_inverse(z[0]), additive_inverse(z[1]), additive_inverse(z[2]), multiplicative_inverse(z[3]))
    words = (0xCAFE, 0xBABE, 0x0000, 0xFFFF)
    assert key_mix(key_mix(words, z), z_inv) == words


def test_single_round_undone_by_decryption_schedule():
    schedule = create_key_schedule(KEY)
    inverted = invert_key_schedule(schedule)
    words = (0x0102, 0xA0B0, 0xFFFF, 0x0000)

    y1, y2, y3, y4 = idea_round(words, schedule[0])
    back = key_mix(mix_ma((y1, y3, y2, y4), *inverted[7][4:6]), inverted[8][:4])
    assert back == words


def test_blob_and_bytes_roundtrip():
    idea = IDEA()
    blob = int.from_bytes(b"Lorem ipsum dolor sit amet", "big")
    key, ct = idea.encrypt(blob, "idea-key")
    assert idea.decrypt(ct, key).output == blob

    data = b"\x00IDEA bytes"
    enc = idea.encrypt_bytes(data, "idea-key")
    assert idea.decrypt_bytes(enc.output, "idea-key").output == data


def test_random_key_is_128_bits():
    assert len(IDEA().encrypt(1).key) == 32


def test_trace_stages():
    collector = TraceCollector(width=4)
    IDEA().encrypt(PLAIN, "pw", trace=collector)
    assert collector.stages() == ["Input"] + [f"Round {r}" for r in range(1, 9)] + ["Output"]
    assert collector.process_log()[0].startswith("Process 0: 0x0000 0x0001 0x0002 0x0003")
