"""
Foundation module tests: field.py, polynomial.py, config.py, errors.py
"""
import pytest
from zkp.blob.field import (
    FR, BLS_MODULUS, G1, G2, Z1,
    ec_mul, ec_add, ec_eq, g1_lincomb,
    fr_to_bytes, fr_from_bytes,
    compress_g1, decompress_g1, compress_g2, decompress_g2,
    get_root_of_unity, get_roots_of_unity,
    reverse_bits, bit_reversal_permutation, compute_roots_of_unity_brp,
)
from zkp.blob.polynomial import evaluate_polynomial_in_evaluation_form, domain_index
from zkp.blob.config import PipelineConfig, FIELD_ELEMENTS_PER_BLOB, MAX_BLOBS_PER_BLOCK
from zkp.blob.errors import FieldOverflow, SerializationError, DataTooLarge


def lagrange_eval(evals, z, domain):
    """p(z) = Σ evals[i] · Π_{j≠i} (z - ω_j) / (ω_i - ω_j)"""
    total = FR(0)
    for i, w_i in enumerate(domain):
        term = evals[i]
        for j, w_j in enumerate(domain):
            if j != i:
                term = term * (z - w_j) / (w_i - w_j)
        total = total + term
    return total


# ─────────────────────────────────────────────────────────────────────
# FR arithmetic
# ─────────────────────────────────────────────────────────────────────

class TestFR:
    def test_modulus_is_bls12_381_scalar_field(self):
        assert BLS_MODULUS == 0x73eda753299d7d483339d80809a1d80553bda402fffe5bfeffffffff00000001

    def test_modular_reduction(self):
        assert FR(BLS_MODULUS) == FR(0)
        assert FR(BLS_MODULUS + 7) == FR(7)

    def test_subtraction_wrap(self):
        assert FR(0) - FR(1) == FR(BLS_MODULUS - 1)

    def test_inverse(self):
        a = FR(12345)
        assert a * (FR(1) / a) == FR(1)


class TestFieldBytes:
    def test_to_bytes_is_big_endian_32(self):
        assert fr_to_bytes(FR(1)) == b"\x00" * 31 + b"\x01"

    def test_modulus_minus_one_accepted(self):
        chunk = (BLS_MODULUS - 1).to_bytes(32, "big")
        assert int(fr_from_bytes(chunk)) == BLS_MODULUS - 1

    def test_modulus_rejected(self):
        chunk = BLS_MODULUS.to_bytes(32, "big")
        with pytest.raises(FieldOverflow):
            fr_from_bytes(chunk, element_index=7)

    def test_overflow_carries_context(self):
        chunk = b"\xff" * 32
        with pytest.raises(FieldOverflow) as info:
            fr_from_bytes(chunk, element_index=3, blob_index=1)
        assert info.value.element_index == 3
        assert info.value.blob_index == 1

    def test_wrong_length(self):
        with pytest.raises(SerializationError):
            fr_from_bytes(b"\x00" * 31)

    def test_round_trip(self):
        x = FR(987654321)
        assert fr_from_bytes(fr_to_bytes(x)) == x


# ─────────────────────────────────────────────────────────────────────
# Curve helpers
# ─────────────────────────────────────────────────────────────────────

class TestCurve:
    def test_compress_g1_length(self):
        assert len(compress_g1(G1)) == 48

    def test_compress_decompress_g1(self):
        p = ec_mul(G1, 5)
        assert ec_eq(decompress_g1(compress_g1(p)), p)

    def test_infinity_encoding(self):
        assert compress_g1(Z1) == b"\xc0" + b"\x00" * 47

    def test_decompress_wrong_length(self):
        with pytest.raises(SerializationError):
            decompress_g1(b"\x00" * 47)

    def test_decompress_invalid_point(self):
        # compression flag cleared
        with pytest.raises(SerializationError):
            decompress_g1(b"\x00" * 48)

    def test_compress_decompress_g2(self):
        q = ec_mul(G2, 3)
        data = compress_g2(q)
        assert len(data) == 96
        assert ec_eq(decompress_g2(data), q)

    def test_lincomb_matches_naive(self):
        points = [G1, ec_mul(G1, 2), ec_mul(G1, 3)]
        scalars = [FR(4), FR(0), FR(5)]
        # 4·1 + 0·2 + 5·3 = 19
        assert ec_eq(g1_lincomb(points, scalars), ec_mul(G1, 19))

    def test_lincomb_all_zero_is_infinity(self):
        assert ec_eq(g1_lincomb([G1, G1], [0, 0]), Z1)

    def test_lincomb_length_mismatch(self):
        with pytest.raises(ValueError):
            g1_lincomb([G1], [1, 2])


# ─────────────────────────────────────────────────────────────────────
# Roots of unity / bit reversal
# ─────────────────────────────────────────────────────────────────────

class TestRootsOfUnity:
    @pytest.mark.parametrize("n", [1, 2, 4, 16])
    def test_primitive(self, n):
        omega = get_root_of_unity(n)
        assert omega ** n == FR(1)
        if n > 1:
            assert omega ** (n // 2) != FR(1)

    def test_not_power_of_two(self):
        with pytest.raises(ValueError):
            get_root_of_unity(12)

    def test_too_large(self):
        with pytest.raises(ValueError):
            get_root_of_unity(1 << 33)

    def test_roots_list(self):
        roots = get_roots_of_unity(8)
        assert len(roots) == 8
        assert roots[0] == FR(1)

    def test_reverse_bits(self):
        assert reverse_bits(1, 8) == 4
        assert reverse_bits(6, 8) == 3
        assert reverse_bits(0, 1) == 0

    def test_bit_reversal_is_involution(self):
        seq = list(range(16))
        assert bit_reversal_permutation(bit_reversal_permutation(seq)) == seq

    def test_brp_domain_order(self):
        roots = get_roots_of_unity(4)
        brp = compute_roots_of_unity_brp(4)
        assert brp == [roots[0], roots[2], roots[1], roots[3]]


# ─────────────────────────────────────────────────────────────────────
# Polynomial evaluation
# ─────────────────────────────────────────────────────────────────────

class TestEvaluationForm:
    n = 16

    def _evals(self):
        return [FR(i * i + 3) for i in range(self.n)]

    def test_barycentric_matches_lagrange(self):
        evals = self._evals()
        roots_brp = compute_roots_of_unity_brp(self.n)
        z = FR(0xdeadbeef)
        assert evaluate_polynomial_in_evaluation_form(evals, z, roots_brp) == lagrange_eval(evals, z, roots_brp)

    def test_constant_polynomial(self):
        roots_brp = compute_roots_of_unity_brp(self.n)
        assert evaluate_polynomial_in_evaluation_form([FR(9)] * self.n, FR(77), roots_brp) == FR(9)

    def test_on_domain_returns_element(self):
        evals = self._evals()
        roots_brp = compute_roots_of_unity_brp(self.n)
        assert evaluate_polynomial_in_evaluation_form(evals, roots_brp[5], roots_brp) == evals[5]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            evaluate_polynomial_in_evaluation_form([FR(1)] * 4, FR(9), compute_roots_of_unity_brp(8))

    def test_domain_index(self):
        roots_brp = compute_roots_of_unity_brp(8)
        assert domain_index(roots_brp[6], roots_brp) == 6
        assert domain_index(FR(123456789), roots_brp) is None


# ─────────────────────────────────────────────────────────────────────
# Config / errors
# ─────────────────────────────────────────────────────────────────────

class TestConfig:
    def test_defaults(self):
        config = PipelineConfig.from_env({})
        assert config.trusted_setup_path is None
        assert config.dev_setup_seed is None
        assert config.dev_setup_size == FIELD_ELEMENTS_PER_BLOB
        assert config.max_workers == MAX_BLOBS_PER_BLOCK

    def test_from_env(self):
        config = PipelineConfig.from_env({
            "BLOB_TRUSTED_SETUP_PATH": "/etc/setup.json",
            "BLOB_TRUSTED_SETUP_SHA256": "ab" * 32,
            "BLOB_DEV_SETUP_SEED": "7",
            "BLOB_DEV_SETUP_SIZE": "16",
            "BLOB_MAX_WORKERS": "4",
            "BLOB_LOG_LEVEL": "DEBUG",
        })
        assert config.trusted_setup_path == "/etc/setup.json"
        assert config.trusted_setup_sha256 == "ab" * 32
        assert config.dev_setup_seed == 7
        assert config.dev_setup_size == 16
        assert config.max_workers == 4
        assert config.log_level == "DEBUG"


class TestErrors:
    def test_errors_are_value_errors(self):
        assert issubclass(FieldOverflow, ValueError)

    def test_with_blob_index_keeps_existing(self):
        err = DataTooLarge("too big", blob_index=0)
        assert err.with_blob_index(1).blob_index == 0

    def test_to_dict(self):
        err = FieldOverflow("overflow", blob_index=1, element_index=2)
        assert err.to_dict() == {
            "error": "FieldOverflow",
            "message": "overflow",
            "blob_index": 1,
            "element_index": 2,
        }
        assert "blob=1" in str(err)
