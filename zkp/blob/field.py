"""
블롭 기반 모듈: 유한체(Finite Field) 및 BLS12-381 타원곡선 연산
================================================================

이 모듈은 블롭 커밋먼트 파이프라인 전체에서 사용되는 기본 대수적 도구를 정의한다.

**유한체 FR**:
  BLS12-381 곡선의 스칼라 필드. EIP-4844 블롭의 모든 필드 원소,
  평가 점 x, 평가값 y가 이 필드의 원소이다.
  - 위수 r ≈ 2^255 (BLS_MODULUS), 소수체
  - r - 1 = 2^32 × m (m은 홀수) → 최대 2^32차 단위근 지원
  - 직렬화: 항상 32바이트 빅엔디안. r 이상의 값은 축소하지 않고 거부한다.

**타원곡선 연산**:
  py_ecc의 optimized_bls12_381 (사영 좌표)을 사용한다.
  G1 점의 외부 표현은 48바이트 압축 형식(ZCash/IETF BLS 인코딩)이며,
  이 바이트열의 해시가 versioned hash가 되므로 직렬화 형식이 곧 계약이다.

**단위근 도메인**:
  EIP-4844는 단위근을 비트 반전(bit-reversal) 순서로 배열한 도메인을 쓴다.
  블롭의 i번째 원소는 ω^{brp(i)}에서의 평가값이다.

사용 예시:
    >>> from zkp.blob.field import FR, G1, ec_mul, compress_g1
    >>> a = FR(3) * FR(7)          # FR(21)
    >>> P = ec_mul(G1, 5)           # 5·G1
    >>> len(compress_g1(P))         # 48
"""

from py_ecc.fields import bls12_381_FQ as FQ
from py_ecc import optimized_bls12_381 as bls
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    pubkey_to_G1,
    G2_to_signature,
    signature_to_G2,
)

from zkp.blob.config import (
    BYTES_PER_FIELD_ELEMENT,
    BYTES_PER_COMMITMENT,
    PRIMITIVE_ROOT_OF_UNITY,
)
from zkp.blob.errors import FieldOverflow, SerializationError


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """BLS12-381 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x           # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bls.curve_order


# 스칼라 필드 위수
BLS_MODULUS = bls.curve_order

# 2-adicity: r - 1 = 2^32 × 홀수
TWO_ADICITY = 32


def fr_to_bytes(value):
    """FR 원소를 32바이트 빅엔디안으로 직렬화한다."""
    return (int(value) % BLS_MODULUS).to_bytes(BYTES_PER_FIELD_ELEMENT, "big")


def fr_from_bytes(data, element_index=None, blob_index=None):
    """32바이트 빅엔디안 청크를 FR 원소로 변환한다.

    값이 r 이상이면 모듈러 축소하지 않고 FieldOverflow를 발생시킨다.
    (축소하면 서로 다른 바이트열이 같은 원소가 되어 바인딩이 깨진다)

    Args:
        data: 32바이트 청크
        element_index: 오류 보고용 원소 인덱스
        blob_index: 오류 보고용 블롭 인덱스

    Returns:
        FR

    Raises:
        SerializationError: 길이가 32바이트가 아닐 때
        FieldOverflow: 값 ≥ BLS_MODULUS

    예시:
        >>> fr_from_bytes((BLS_MODULUS - 1).to_bytes(32, "big"))  # 허용
        >>> fr_from_bytes(BLS_MODULUS.to_bytes(32, "big"))        # FieldOverflow
    """
    if len(data) != BYTES_PER_FIELD_ELEMENT:
        raise SerializationError(
            f"필드 원소는 {BYTES_PER_FIELD_ELEMENT}바이트여야 합니다: {len(data)}",
            blob_index=blob_index,
            element_index=element_index,
        )
    value = int.from_bytes(data, "big")
    if value >= BLS_MODULUS:
        raise FieldOverflow(
            "청크 값이 스칼라 필드 위수 이상입니다",
            blob_index=blob_index,
            element_index=element_index,
        )
    return FR(value)


# ─────────────────────────────────────────────────────────────────────
# 타원곡선 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

# G1 / G2 생성자
G1 = bls.G1
G2 = bls.G2

# G1 항등원 (사영 좌표의 무한원점)
Z1 = bls.Z1


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point."""
    return bls.multiply(point, int(scalar) % BLS_MODULUS)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bls.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    return bls.neg(point)


def ec_eq(p1, p2):
    """사영 좌표 점의 동등 비교 (정규화 후 비교)."""
    return bls.eq(p1, p2)


def ec_pairing(g2_point, g1_point):
    """쌍선형 페어링 e(G1, G2) → GT.

    주의:
        py_ecc의 pairing 인자 순서는 (G2, G1)이다.
    """
    return bls.pairing(g2_point, g1_point)


def g1_lincomb(points, scalars):
    """G1 다중 스칼라 곱셈(MSM): Σᵢ scalarsᵢ · pointsᵢ.

    0인 스칼라는 건너뛴다. 항의 순서는 결과에 영향을 주지 않지만
    (군 연산은 교환법칙이 성립), 인덱스 순서대로 누적한다.

    Args:
        points: G1 점 리스트
        scalars: FR 원소 또는 정수 리스트 (points와 같은 길이)

    Returns:
        G1 점 (사영 좌표)
    """
    if len(points) != len(scalars):
        raise ValueError(
            f"점 개수({len(points)})와 스칼라 개수({len(scalars)})가 다릅니다"
        )
    result = Z1
    for point, scalar in zip(points, scalars):
        s = int(scalar) % BLS_MODULUS
        if s == 0:
            continue
        result = ec_add(result, bls.multiply(point, s))
    return result


# ─────────────────────────────────────────────────────────────────────
# 점 직렬화 (압축 형식)
# ─────────────────────────────────────────────────────────────────────

def compress_g1(point):
    """G1 점 → 48바이트 압축 표현."""
    try:
        data = bytes(G1_to_pubkey(point))
    except (ValueError, TypeError, AssertionError) as exc:
        raise SerializationError(f"G1 점 직렬화 실패: {exc}") from exc
    if len(data) != BYTES_PER_COMMITMENT:
        raise SerializationError(f"G1 압축 길이가 잘못되었습니다: {len(data)}")
    return data


def decompress_g1(data):
    """48바이트 압축 표현 → G1 점.

    Raises:
        SerializationError: 길이가 틀리거나 곡선 위의 점이 아닐 때
    """
    if len(data) != BYTES_PER_COMMITMENT:
        raise SerializationError(
            f"G1 점은 {BYTES_PER_COMMITMENT}바이트여야 합니다: {len(data)}"
        )
    try:
        return pubkey_to_G1(bytes(data))
    except (ValueError, TypeError, AssertionError) as exc:
        raise SerializationError(f"G1 점 역직렬화 실패: {exc}") from exc


def compress_g2(point):
    """G2 점 → 96바이트 압축 표현."""
    try:
        return bytes(G2_to_signature(point))
    except (ValueError, TypeError, AssertionError) as exc:
        raise SerializationError(f"G2 점 직렬화 실패: {exc}") from exc


def decompress_g2(data):
    """96바이트 압축 표현 → G2 점."""
    if len(data) != 2 * BYTES_PER_COMMITMENT:
        raise SerializationError(
            f"G2 점은 {2 * BYTES_PER_COMMITMENT}바이트여야 합니다: {len(data)}"
        )
    try:
        return signature_to_G2(bytes(data))
    except (ValueError, TypeError, AssertionError) as exc:
        raise SerializationError(f"G2 점 역직렬화 실패: {exc}") from exc


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근 ω를 반환한다.

    생성자 g = 7을 사용하여 ω = g^((r-1)/n)으로 계산한다.
    (페르마 소정리에 의해 ω^n = g^(r-1) = 1)

    Args:
        n: 단위근의 차수 (2의 거듭제곱, ≤ 2^32)

    Returns:
        FR: n차 원시 단위근

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^32을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^{TWO_ADICITY} 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)

    exponent = (BLS_MODULUS - 1) // n
    return FR(PRIMITIVE_ROOT_OF_UNITY) ** exponent


def get_roots_of_unity(n):
    """단위근 리스트 [1, ω, ω², ..., ω^(n-1)]을 반환한다 (자연 순서)."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots


def reverse_bits(index, order):
    """index의 하위 log2(order) 비트를 뒤집는다.

    예시:
        >>> reverse_bits(1, 8)  # 0b001 → 0b100 = 4
        >>> reverse_bits(6, 8)  # 0b110 → 0b011 = 3
    """
    if order < 1 or (order & (order - 1)) != 0:
        raise ValueError(f"order는 2의 거듭제곱이어야 합니다: {order}")
    bits = order.bit_length() - 1
    result = 0
    for _ in range(bits):
        result = (result << 1) | (index & 1)
        index >>= 1
    return result


def bit_reversal_permutation(sequence):
    """리스트를 비트 반전 순서로 재배열한다 (자기 역변환)."""
    n = len(sequence)
    return [sequence[reverse_bits(i, n)] for i in range(n)]


def compute_roots_of_unity_brp(n):
    """EIP-4844 평가 도메인: 비트 반전 순서의 n차 단위근."""
    return bit_reversal_permutation(get_roots_of_unity(n))
