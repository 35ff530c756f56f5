"""
KZG 블롭 커밋먼트 엔진
=======================

블롭(평가 형식 다항식)에 대한 KZG 커밋먼트, versioned hash, 열기 증명을 계산한다.

**커밋먼트**:
  C = Σᵢ pᵢ · [Lᵢ(τ)]₁ = p(τ)·G1
  τ를 모른 채 라그랑주 형식 SRS와의 MSM으로 계산한다.
  외부 표현은 48바이트 압축 G1 점이며, 이 바이트열이 versioned hash의 입력이다.

**Versioned hash**:
  VH = 0x01 ‖ sha256(C)[1:]   (32바이트)
  실행 계층은 전체 커밋먼트 대신 이 값만 노출한다.

**열기 증명 (평가 형식)**:
  "p(x) = y" 를 증명하기 위해 몫 다항식 q(X) = (p(X) - y) / (X - x)를
  도메인 위 평가값으로 직접 계산한다.

      qᵢ = (pᵢ - y) / (ωᵢ - x)

  x가 도메인 위의 점 ωₘ이면 qₘ은 위 식으로 구할 수 없으므로
  다음 공식을 사용한다 (EIP-4844):

      qₘ = Σ_{i≠m} (pᵢ - y) · ωᵢ / (x · (x - ωᵢ))

  증명 π = Σᵢ qᵢ · [Lᵢ(τ)]₁

**검증 (페어링)**:
  e(C - y·G1, G2) == e(π, τ·G2 - x·G2)

사용 예시:
    >>> C = commit(blob, setup)
    >>> vh = versioned_hash(C)
    >>> y, proof = compute_kzg_proof(blob, x, setup)
    >>> verify_kzg_proof(C, x, y, proof, setup)  # True
"""

import hashlib
import logging

from zkp.blob.config import VERSIONED_HASH_VERSION_KZG, BYTES_PER_COMMITMENT
from zkp.blob.errors import SerializationError
from zkp.blob.field import (
    FR, G1,
    ec_mul, ec_add, ec_neg, ec_pairing,
    g1_lincomb, compress_g1, decompress_g1,
)
from zkp.blob.polynomial import evaluate_polynomial_in_evaluation_form, domain_index

logger = logging.getLogger(__name__)


def _check_width(blob, setup):
    if len(blob) != setup.size:
        raise ValueError(
            f"블롭 원소 수 {len(blob)}가 신뢰 설정 크기 {setup.size}와 다릅니다"
        )


def commit(blob, setup):
    """블롭을 KZG 커밋한다.

    Args:
        blob: Blob (setup.size개의 FR 원소)
        setup: TrustedSetup

    Returns:
        bytes: 48바이트 압축 커밋먼트

    Raises:
        ValueError: 블롭 크기가 설정 크기와 다를 때
        SerializationError: 점 직렬화 실패
    """
    _check_width(blob, setup)
    point = g1_lincomb(setup.g1_lagrange, list(blob))
    return compress_g1(point)


def versioned_hash(commitment):
    """커밋먼트의 versioned hash: 0x01 ‖ sha256(C)[1:].

    Raises:
        SerializationError: 커밋먼트가 48바이트가 아닐 때
    """
    if len(commitment) != BYTES_PER_COMMITMENT:
        raise SerializationError(
            f"커밋먼트는 {BYTES_PER_COMMITMENT}바이트여야 합니다: {len(commitment)}"
        )
    digest = hashlib.sha256(bytes(commitment)).digest()
    return bytes([VERSIONED_HASH_VERSION_KZG]) + digest[1:]


def compute_quotient(blob, x, y, roots_of_unity_brp):
    """몫 다항식 q(X) = (p(X) - y)/(X - x)의 도메인 위 평가값을 계산한다.

    Args:
        blob: 평가 형식 다항식 (FR 시퀀스)
        x: 평가 점
        y: p(x)
        roots_of_unity_brp: 비트 반전 도메인

    Returns:
        list[FR]: [q(ω₀), q(ω₁), ...]
    """
    m = domain_index(x, roots_of_unity_brp)
    quotient = []
    for i, omega_i in enumerate(roots_of_unity_brp):
        if i == m:
            # 분모가 0인 점은 아래에서 별도로 채운다
            quotient.append(FR(0))
            continue
        quotient.append((FR(blob[i]) - y) / (omega_i - x))

    if m is not None:
        quotient[m] = _quotient_eval_within_domain(blob, x, y, roots_of_unity_brp)

    return quotient


def _quotient_eval_within_domain(blob, x, y, roots_of_unity_brp):
    # qₘ = Σ_{i≠m} (pᵢ - y)·ωᵢ / (x·(x - ωᵢ))
    result = FR(0)
    for i, omega_i in enumerate(roots_of_unity_brp):
        if omega_i == x:
            continue
        numerator = (FR(blob[i]) - y) * omega_i
        denominator = x * (x - omega_i)
        result = result + numerator / denominator
    return result


def compute_kzg_proof(blob, x, setup):
    """p(x) = y에 대한 열기 증명을 계산한다.

    Args:
        blob: Blob
        x: 평가 점 (FR)
        setup: TrustedSetup

    Returns:
        tuple: (y: FR, proof: 48바이트 압축 G1 점)
    """
    _check_width(blob, setup)
    if not isinstance(x, FR):
        x = FR(x)

    roots = setup.roots_of_unity_brp
    y = evaluate_polynomial_in_evaluation_form(list(blob), x, roots)
    quotient = compute_quotient(blob, x, y, roots)
    proof = compress_g1(g1_lincomb(setup.g1_lagrange, quotient))
    return y, proof


def verify_kzg_proof(commitment, x, y, proof, setup):
    """KZG 열기 증명을 검증한다.

    검증 방정식:
        e(C - y·G1, G2) == e(π, [τ]₂ - x·G2)

    Args:
        commitment: 48바이트 압축 커밋먼트
        x: 평가 점 (FR)
        y: 주장하는 평가값 (FR)
        proof: 48바이트 압축 증명
        setup: TrustedSetup (G2 부분만 사용)

    Returns:
        bool: 검증 성공 여부

    Raises:
        SerializationError: 커밋먼트나 증명이 올바른 G1 점 인코딩이 아닐 때
    """
    if not isinstance(x, FR):
        x = FR(x)
    if not isinstance(y, FR):
        y = FR(y)

    c_point = decompress_g1(commitment)
    proof_point = decompress_g1(proof)

    g2_gen, tau_g2 = setup.g2_monomial[0], setup.g2_monomial[1]

    # [τ - x]₂
    tau_minus_x_g2 = ec_add(tau_g2, ec_neg(ec_mul(g2_gen, x)))

    # C - y·G1
    c_minus_y = ec_add(c_point, ec_neg(ec_mul(G1, y)))

    lhs = ec_pairing(g2_gen, c_minus_y)
    rhs = ec_pairing(tau_minus_x_g2, proof_point)
    return lhs == rhs
