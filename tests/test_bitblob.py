import random
import sys
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.cipher.bitblob import (
    blob_to_bytes,
    blob_to_text,
    join_blocks,
    pad_block_bytes,
    split_into_blocks,
    split_into_words,
    text_to_blob,
    unpad_block_bytes,
)
from cipherscope.errors import InputValidationError


def test_split_most_significant_first():
    assert split_into_blocks(0x0102030405, 16) == [0x01, 0x0203, 0x0405]


def test_split_zero_is_empty():
    assert split_into_blocks(0, 64) == []


def test_split_rejects_bad_input():
    with pytest.raises(ValueError):
        split_into_blocks(-1, 8)
    with pytest.raises(ValueError):
        split_into_blocks(5, 0)


@pytest.mark.parametrize("block_bits", [8, 64, 128])
def test_split_join_inverse(block_bits):
    rng = random.Random(block_bits)
    for _ in range(50):
        blob = rng.getrandbits(rng.randrange(1, 600))
        assert join_blocks(split_into_blocks(blob, block_bits), block_bits) == blob


def test_split_into_words_pads_high_words():
    assert split_into_words(0x00010002, 16, 4) == [0, 0, 1, 2]


def test_text_conversion():
    blob = text_to_blob("Hi!")
    assert blob == 0x486921
    assert blob_to_text(blob) == "Hi!"
    assert blob_to_text(text_to_blob("\xe9t\xe9")) == "\xe9t\xe9"


def test_text_outside_byte_range():
    with pytest.raises(InputValidationError):
        text_to_blob("€")


def test_blob_to_bytes_length():
    assert blob_to_bytes(0x0102) == b"\x01\x02"
    assert blob_to_bytes(0x0102, 4) == b"\x00\x00\x01\x02"
    assert blob_to_bytes(0) == b""
    with pytest.raises(ValueError):
        blob_to_bytes(0x010203, 2)


def test_padding():
    padded = pad_block_bytes(b"abc", 8)
    assert padded == b"abc" + b"\x05" * 5
    assert unpad_block_bytes(padded, 8) == b"abc"
    assert pad_block_bytes(b"12345678", 8) == b"12345678" + b"\x08" * 8


@pytest.mark.parametrize("data", [b"", b"abcdefg", b"abcdefg\x00", b"abcdefg\x09", b"abcdef\x01\x02"])
def test_bad_padding(data):
    with pytest.raises(InputValidationError):
        unpad_block_bytes(data, 8)
