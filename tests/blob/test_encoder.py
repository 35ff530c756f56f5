"""
Field Encoder tests
====================

pubdata → Blob 인코딩의 바이트 레이아웃, 필드 검증, 용량 경계를 테스트한다.

테스트 범위:
  - 31바이트 조각 + 0x00 예약 바이트 레이아웃
  - 데이터 이후 원소 0 패딩
  - 외부 블롭 바이트의 r-1 / r 경계 (FieldOverflow)
  - 용량 초과 (DataTooLarge)
  - 배치 분할
"""

import pytest

from zkp.blob.config import FIELD_ELEMENTS_PER_BLOB, BYTES_PER_BLOB, BLOB_CAPACITY_BYTES
from zkp.blob.errors import DataTooLarge, FieldOverflow, SerializationError
from zkp.blob.field import FR, BLS_MODULUS
from zkp.blob.encoder import Blob, encode, decode, blob_capacity, split_pubdata


WIDTH = 16


# ─────────────────────────────────────────────────────────────────────
# encode
# ─────────────────────────────────────────────────────────────────────

class TestEncode:
    def test_width(self):
        blob = encode(b"abc", width=WIDTH)
        assert blob.width == WIDTH
        assert len(blob.to_bytes()) == WIDTH * 32

    def test_default_width_is_4096(self):
        blob = encode(b"")
        assert blob.width == FIELD_ELEMENTS_PER_BLOB
        assert len(blob.to_bytes()) == BYTES_PER_BLOB
        assert all(e == FR(0) for e in blob)

    def test_chunk_layout(self):
        raw = bytes(range(1, 32))  # 정확히 31바이트
        blob = encode(raw, width=WIDTH)
        assert blob[0] == FR(int.from_bytes(b"\x00" + raw, "big"))
        assert blob[1] == FR(0)

    def test_last_piece_right_padded(self):
        blob = encode(b"\x01\x02", width=WIDTH)
        expected = int.from_bytes(b"\x00\x01\x02" + b"\x00" * 29, "big")
        assert blob[0] == FR(expected)

    def test_pattern_fills_nine_elements(self, pattern_pubdata):
        # 256바이트 = 31 × 8 + 8 → 원소 9개
        blob = encode(pattern_pubdata, width=WIDTH)
        assert all(blob[i] != FR(0) for i in range(9))
        assert all(blob[i] == FR(0) for i in range(9, WIDTH))

    def test_elements_below_modulus(self):
        blob = encode(b"\xff" * blob_capacity(WIDTH), width=WIDTH)
        assert all(int(e) < BLS_MODULUS for e in blob)

    def test_deterministic(self, pattern_pubdata):
        assert encode(pattern_pubdata, width=WIDTH) == encode(pattern_pubdata, width=WIDTH)

    def test_exact_capacity_accepted(self):
        blob = encode(b"\x01" * blob_capacity(WIDTH), width=WIDTH)
        assert all(e != FR(0) for e in blob)

    def test_over_capacity_rejected(self):
        with pytest.raises(DataTooLarge) as info:
            encode(b"\x01" * (blob_capacity(WIDTH) + 1), width=WIDTH, blob_index=1)
        assert info.value.blob_index == 1

    def test_capacity_constant(self):
        assert blob_capacity() == BLOB_CAPACITY_BYTES == 4096 * 31


# ─────────────────────────────────────────────────────────────────────
# decode
# ─────────────────────────────────────────────────────────────────────

class TestDecode:
    def test_round_trip(self, pattern_pubdata):
        blob = encode(pattern_pubdata, width=WIDTH)
        assert decode(blob, len(pattern_pubdata)) == pattern_pubdata

    def test_trailing_zeros_preserved_by_length(self):
        raw = b"\x05\x00\x00"
        assert decode(encode(raw, width=WIDTH), 3) == raw

    def test_length_over_capacity(self):
        with pytest.raises(DataTooLarge):
            decode(encode(b"", width=WIDTH), blob_capacity(WIDTH) + 1)

    def test_reserved_byte_set(self):
        blob = Blob([FR(1 << 250)] + [FR(0)] * (WIDTH - 1))
        with pytest.raises(SerializationError) as info:
            decode(blob, 10)
        assert info.value.element_index == 0


# ─────────────────────────────────────────────────────────────────────
# Blob.from_bytes (외부 블롭 바이트 검증)
# ─────────────────────────────────────────────────────────────────────

class TestBlobFromBytes:
    def _blob_bytes(self, position, value):
        chunks = [b"\x00" * 32] * WIDTH
        chunks[position] = value.to_bytes(32, "big")
        return b"".join(chunks)

    def test_modulus_minus_one_accepted(self):
        blob = Blob.from_bytes(self._blob_bytes(3, BLS_MODULUS - 1), width=WIDTH)
        assert int(blob[3]) == BLS_MODULUS - 1

    def test_modulus_rejected_not_reduced(self):
        with pytest.raises(FieldOverflow) as info:
            Blob.from_bytes(self._blob_bytes(3, BLS_MODULUS), width=WIDTH, blob_index=0)
        assert info.value.element_index == 3
        assert info.value.blob_index == 0

    def test_all_ones_rejected(self):
        with pytest.raises(FieldOverflow):
            Blob.from_bytes(self._blob_bytes(WIDTH - 1, (1 << 256) - 1), width=WIDTH)

    def test_wrong_length(self):
        with pytest.raises(SerializationError):
            Blob.from_bytes(b"\x00" * (WIDTH * 32 - 1), width=WIDTH)

    def test_to_bytes_round_trip(self, pattern_pubdata):
        blob = encode(pattern_pubdata, width=WIDTH)
        assert Blob.from_bytes(blob.to_bytes(), width=WIDTH) == blob

    def test_repr(self):
        assert repr(encode(b"\x01", width=WIDTH)) == "Blob(width=16, nonzero=1)"


# ─────────────────────────────────────────────────────────────────────
# split_pubdata
# ─────────────────────────────────────────────────────────────────────

class TestSplitPubdata:
    def test_empty_is_one_blob(self):
        assert split_pubdata(b"", width=WIDTH) == [b""]

    def test_single_blob(self):
        assert split_pubdata(b"\x01" * 10, width=WIDTH) == [b"\x01" * 10]

    def test_two_blobs_in_order(self):
        capacity = blob_capacity(WIDTH)
        raw = bytes(i % 251 for i in range(capacity + 5))
        pieces = split_pubdata(raw, width=WIDTH, max_blobs=2)
        assert len(pieces) == 2
        assert pieces[0] == raw[:capacity]
        assert pieces[1] == raw[capacity:]

    def test_batch_over_limit(self):
        capacity = blob_capacity(WIDTH)
        with pytest.raises(DataTooLarge):
            split_pubdata(b"\x01" * (2 * capacity + 1), width=WIDTH, max_blobs=2)
