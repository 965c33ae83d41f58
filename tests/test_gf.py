import sys
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from cipherscope.cipher.gf import MDS_MODULUS, RS_MODULUS, gf_matrix_vector, gf_multiply
from cipherscope.cipher.twofish import MDS, RS
from cipherscope.errors import MatrixDimensionError


def test_multiply_identity_and_zero():
    for a in (0, 1, 0x5B, 0xEF, 0xFF):
        assert gf_multiply(a, 1, MDS_MODULUS) == a
        assert gf_multiply(a, 0, MDS_MODULUS) == 0


def test_multiply_reduces_by_modulus():
    assert gf_multiply(0x80, 0x02, MDS_MODULUS) == 0x69
    assert gf_multiply(0x80, 0x02, RS_MODULUS) == 0x4D


def test_multiply_commutes():
    for a, b in ((0x12, 0x34), (0xA4, 0x55), (0xFF, 0xFE)):
        assert gf_multiply(a, b, RS_MODULUS) == gf_multiply(b, a, RS_MODULUS)
        assert gf_multiply(a, b, RS_MODULUS) < 0x100


def test_matrix_vector_unit_vectors_pick_columns():
    out = gf_matrix_vector(MDS, [1, 0, 0, 0], MDS_MODULUS)
    assert out == [row[0] for row in MDS]


def test_dimension_mismatch():
    with pytest.raises(MatrixDimensionError) as exc_info:
        gf_matrix_vector(RS, [1, 2, 3, 4], RS_MODULUS)
    assert str(exc_info.value) == "Cannot apply (4, 8)-matrix to 4-vector"
