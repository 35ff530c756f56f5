"""
블롭 다항식: 평가 형식(evaluation form) 연산
=============================================

블롭은 다항식 p(x)를 **평가 형식**으로 표현한다.
블롭의 i번째 원소 = p(ωᵢ), 여기서 ωᵢ는 비트 반전 순서 도메인의 i번째 단위근이다.

**무게중심(barycentric) 평가**:
  계수로 변환하지 않고 도메인 밖의 점 z에서 p(z)를 계산한다.

      p(z) = (zⁿ - 1)/n · Σᵢ pᵢ · ωᵢ / (z - ωᵢ)

  z가 도메인 위의 점(z = ωᵢ)이면 pᵢ를 그대로 반환한다.

**결정론**:
  합산은 인덱스 순서의 단일 루프로 수행한다. 모듈러 산술이므로
  순서와 무관하게 같은 값이 나오지만, 병렬 리덕션 없이 하나의 알고리즘만
  사용한다. 결과가 공개 입력으로 흘러가기 때문이다.

사용 예시:
    >>> from zkp.blob.polynomial import evaluate_polynomial_in_evaluation_form
    >>> y = evaluate_polynomial_in_evaluation_form(blob, x, roots_brp)
"""

from zkp.blob.field import FR


# ─────────────────────────────────────────────────────────────────────
# 평가 형식 연산
# ─────────────────────────────────────────────────────────────────────

def evaluate_polynomial_in_evaluation_form(evals, z, roots_of_unity_brp):
    """평가 형식 다항식을 임의의 점 z에서 평가한다 (barycentric formula).

    Args:
        evals: 도메인 위 평가값 [p(ω₀), p(ω₁), ...] (비트 반전 순서)
        z: 평가 점 (FR)
        roots_of_unity_brp: 비트 반전 순서의 단위근 (evals와 같은 길이)

    Returns:
        FR: p(z)

    Raises:
        ValueError: evals와 도메인의 길이가 다를 때
    """
    width = len(evals)
    if width != len(roots_of_unity_brp):
        raise ValueError(
            f"평가값 개수({width})와 도메인 크기({len(roots_of_unity_brp)})가 다릅니다"
        )
    if not isinstance(z, FR):
        z = FR(z)

    # z가 도메인 위의 점이면 해당 평가값을 그대로 반환
    m = domain_index(z, roots_of_unity_brp)
    if m is not None:
        return FR(evals[m])

    result = FR(0)
    for i, omega_i in enumerate(roots_of_unity_brp):
        result = result + FR(evals[i]) * omega_i / (z - omega_i)

    # (zⁿ - 1) / n
    factor = (z ** width - FR(1)) / FR(width)
    return result * factor


def domain_index(z, roots_of_unity_brp):
    """z가 도메인의 몇 번째 점인지 반환한다. 도메인 밖이면 None."""
    for i, omega_i in enumerate(roots_of_unity_brp):
        if z == omega_i:
            return i
    return None
