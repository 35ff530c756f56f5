"""
챌린지 도출기: Fiat-Shamir 평가 점 x와 평가값 y
================================================

**Fiat-Shamir 변환**:
  평가 점 x는 커밋먼트가 존재하기 전에는 예측할 수 없어야 한다.
  그래서 prover가 통제하는 데이터(pubdata)와 커밋먼트에 묶인 versioned hash를
  해시하여 x를 만든다.

      linear_hash = keccak256(raw)
      x = reduce(keccak256(linear_hash ‖ VH))      (256비트 빅엔디안 정수 mod r)

  바이트 순서와 연결 순서가 곧 계약이다. prover와 verifier 쪽 구현이
  비트 단위로 같아야 한다.

**신뢰 경계**:
  L1 verifier는 raw를 볼 수 없으므로 x를 직접 재계산하지 않는다.
  verifier는 (1) 열기 증명이 prover가 준 x, y와 커밋먼트에 대해 일관적인지,
  (2) H(VH ‖ x ‖ y)가 증명 시스템이 공개 입력으로 인증한 digest와 같은지만
  확인한다. x의 건전성은 전적으로 증명 시스템의 digest 검사에 의존한다.

**평가**:
  y = p(x)는 무게중심 공식으로 계산하고, 열기 증명은 kzg 모듈이 만든다.

사용 예시:
    >>> x = derive_challenge(raw, vh)
    >>> y, proof = evaluate(blob, x, setup)
"""

import logging

from eth_utils import keccak

from zkp.blob.config import BYTES_PER_HASH
from zkp.blob.errors import SerializationError
from zkp.blob.field import FR, BLS_MODULUS
from zkp.blob.kzg import compute_kzg_proof

logger = logging.getLogger(__name__)


def linear_hash(raw):
    """pubdata의 선형 해시: keccak256(raw)."""
    return keccak(bytes(raw))


def hash_to_field(digest):
    """32바이트 해시를 FR 원소로 축소한다 (빅엔디안 정수 mod r)."""
    if len(digest) != BYTES_PER_HASH:
        raise SerializationError(
            f"해시는 {BYTES_PER_HASH}바이트여야 합니다: {len(digest)}"
        )
    return FR(int.from_bytes(digest, "big") % BLS_MODULUS)


def derive_challenge(raw, vh):
    """Fiat-Shamir 평가 점 x = reduce(keccak256(keccak256(raw) ‖ VH)).

    Args:
        raw: 이 블롭의 pubdata 바이트열
        vh: 32바이트 versioned hash

    Returns:
        FR: 평가 점 x

    Raises:
        SerializationError: vh가 32바이트가 아닐 때
    """
    if len(vh) != BYTES_PER_HASH:
        raise SerializationError(
            f"versioned hash는 {BYTES_PER_HASH}바이트여야 합니다: {len(vh)}"
        )
    x = hash_to_field(keccak(linear_hash(raw) + bytes(vh)))
    logger.debug("challenge derived: vh=0x%s x=%d", bytes(vh).hex(), int(x))
    return x


def evaluate(blob, x, setup):
    """블롭 다항식을 x에서 평가하고 열기 증명을 만든다.

    Args:
        blob: Blob
        x: 평가 점 (FR)
        setup: TrustedSetup

    Returns:
        tuple: (y: FR, proof: 48바이트 압축 G1 점)
    """
    return compute_kzg_proof(blob, x, setup)
